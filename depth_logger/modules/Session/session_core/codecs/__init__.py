from .frame_codec import (
    FrameCodecError,
    decode_color_buffer,
    decode_depth_buffer,
    decode_raw_buffer,
    decode_segmentation,
    format_joint_line,
    mask_from_user_map,
    narrow_segmentation,
    parse_joint_line,
    parse_joint_lines,
    widen_segmentation,
)
from .frame_types import (
    CoordinateSystem,
    Frame,
    Joint,
    JointSlots,
    PixelBuffer,
    SkeletonSample,
    StreamKind,
    Vec3,
    empty_joints,
)

__all__ = [
    "CoordinateSystem",
    "Frame",
    "FrameCodecError",
    "Joint",
    "JointSlots",
    "PixelBuffer",
    "SkeletonSample",
    "StreamKind",
    "Vec3",
    "decode_color_buffer",
    "decode_depth_buffer",
    "decode_raw_buffer",
    "decode_segmentation",
    "empty_joints",
    "format_joint_line",
    "mask_from_user_map",
    "narrow_segmentation",
    "parse_joint_line",
    "parse_joint_lines",
    "widen_segmentation",
]
