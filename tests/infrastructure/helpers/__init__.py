"""Test helpers for the Depth Logger test suite.

Data Generators:
    generate_joints - Fifteen joint positions with optional gaps
    depth_bytes / color_bytes - Raw image buffers
    user_map_bytes / mask_bytes - Segmentation inputs
    make_user / make_frame - Raw user tracker frames
    write_session - On-disk session directory builder
    joint_line - One formatted coordinate line
"""

from .generators import (
    SMALL_HEIGHT,
    SMALL_WIDTH,
    color_bytes,
    depth_bytes,
    generate_joints,
    joint_line,
    make_frame,
    make_user,
    mask_bytes,
    user_map_bytes,
    write_session,
)

__all__ = [
    "SMALL_HEIGHT",
    "SMALL_WIDTH",
    "color_bytes",
    "depth_bytes",
    "generate_joints",
    "joint_line",
    "make_frame",
    "make_user",
    "mask_bytes",
    "user_map_bytes",
    "write_session",
]
