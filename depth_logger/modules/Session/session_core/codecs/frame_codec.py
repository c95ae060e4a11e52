"""Binary pixel-buffer and joint-coordinate text encodings.

Pixel buffers are little-endian and passed through untouched except for the
segmentation mask, which is captured as one 0/1 byte per pixel and widened
to two bytes per pixel so it has the same renderable shape as a depth frame.

Joint lines look like::

    3608575622 [0.1, 0.2, 0.3][1.0, 2.0, 3.0]...[x, y, z]

with exactly 15 bracketed triplets. Parsing is field-lenient: a bad
timestamp becomes 0 and a bad triplet becomes ``None`` without aborting the
rest of the line.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, Optional, Sequence, Tuple

import numpy as np

from depth_logger.core.logging_utils import get_module_logger
from ..constants import (
    COLOR_BYTES_PER_PIXEL,
    DEPTH_BYTES_PER_PIXEL,
    FRAME_HEIGHT,
    FRAME_WIDTH,
    JOINT_COMPONENTS,
    JOINT_COUNT,
    MISSING_JOINT_TOKEN,
    SEGMENTATION_STORED_BYTES_PER_PIXEL,
    USER_MAP_BYTES_PER_PIXEL,
)
from .frame_types import JointSlots, PixelBuffer, Vec3

logger = get_module_logger(__name__)

_TRIPLET_RE = re.compile(r"\[([^\[\]]*)\]")


class FrameCodecError(ValueError):
    """Raised when a buffer cannot be interpreted with the requested pixel width."""


# ---------------------------------------------------------------------------
# Pixel buffers
# ---------------------------------------------------------------------------


def decode_raw_buffer(
    data: bytes,
    bytes_per_pixel: int,
    *,
    width: int = FRAME_WIDTH,
    height: int = FRAME_HEIGHT,
) -> PixelBuffer:
    if bytes_per_pixel <= 0:
        raise FrameCodecError(f"Invalid pixel width: {bytes_per_pixel}")
    if len(data) % bytes_per_pixel:
        raise FrameCodecError(
            f"Buffer of {len(data)} bytes is not a multiple of {bytes_per_pixel} bytes per pixel"
        )
    return PixelBuffer(bytes(data), bytes_per_pixel, width, height)


def decode_color_buffer(data: bytes, **geometry) -> PixelBuffer:
    return decode_raw_buffer(data, COLOR_BYTES_PER_PIXEL, **geometry)


def decode_depth_buffer(data: bytes, **geometry) -> PixelBuffer:
    return decode_raw_buffer(data, DEPTH_BYTES_PER_PIXEL, **geometry)


def mask_from_user_map(user_map: bytes) -> bytes:
    """Reduce a 16-bit little-endian user-id map to a 0/1 byte-per-pixel mask."""
    if len(user_map) % USER_MAP_BYTES_PER_PIXEL:
        raise FrameCodecError(f"User map of {len(user_map)} bytes has an odd length")
    ids = np.frombuffer(user_map, dtype="<i2")
    return (ids > 0).astype(np.uint8).tobytes()


def widen_segmentation(mask: bytes) -> bytes:
    """Turn each mask byte v into the little-endian pair (0, v)."""
    raw = np.frombuffer(mask, dtype=np.uint8)
    widened = np.zeros(raw.size * 2, dtype=np.uint8)
    widened[1::2] = raw
    return widened.tobytes()


def narrow_segmentation(data: bytes) -> bytes:
    """Inverse of :func:`widen_segmentation` for the owned/unowned bit."""
    if len(data) % SEGMENTATION_STORED_BYTES_PER_PIXEL:
        raise FrameCodecError(f"Widened mask of {len(data)} bytes has an odd length")
    high = np.frombuffer(data, dtype=np.uint8)[1::2]
    return (high != 0).astype(np.uint8).tobytes()


def decode_segmentation(
    mask: bytes,
    *,
    width: int = FRAME_WIDTH,
    height: int = FRAME_HEIGHT,
) -> PixelBuffer:
    return PixelBuffer(widen_segmentation(mask), SEGMENTATION_STORED_BYTES_PER_PIXEL, width, height)


# ---------------------------------------------------------------------------
# Joint coordinate text
# ---------------------------------------------------------------------------


def _parse_triplet(body: str) -> Optional[Vec3]:
    parts = [part.strip() for part in body.split(",")]
    if len(parts) != JOINT_COMPONENTS:
        return None
    try:
        return (float(parts[0]), float(parts[1]), float(parts[2]))
    except ValueError:
        return None


def parse_joint_line(line: str) -> Tuple[int, JointSlots]:
    text = line.strip()
    bracket = text.find("[")
    head = text if bracket < 0 else text[:bracket]
    body = "" if bracket < 0 else text[bracket:]

    token = head.strip()
    try:
        timestamp = int(token)
    except ValueError:
        logger.error("Invalid timestamp %r in joint line; using 0", token)
        timestamp = 0

    joints: list[Optional[Vec3]] = []
    for index, match in enumerate(_TRIPLET_RE.finditer(body)):
        if index >= JOINT_COUNT:
            logger.warning("Joint line at %d has more than %d joints; extras ignored", timestamp, JOINT_COUNT)
            break
        joint = _parse_triplet(match.group(1))
        if joint is None:
            logger.debug("Unparsable joint %d at %d: %r", index, timestamp, match.group(1))
        joints.append(joint)

    if len(joints) < JOINT_COUNT:
        logger.debug("Joint line at %d has %d of %d joints", timestamp, len(joints), JOINT_COUNT)
        joints.extend([None] * (JOINT_COUNT - len(joints)))

    return timestamp, tuple(joints)


def parse_joint_lines(lines: Iterable[str]) -> Iterator[Tuple[int, JointSlots]]:
    for line in lines:
        if line.strip():
            yield parse_joint_line(line)


def _format_component(value: float) -> str:
    return repr(float(value))


def format_joint_line(timestamp: int, joints: Sequence[Optional[Sequence[float]]]) -> str:
    if len(joints) != JOINT_COUNT:
        raise FrameCodecError(f"Expected {JOINT_COUNT} joints, got {len(joints)}")
    missing = f"[{MISSING_JOINT_TOKEN}, {MISSING_JOINT_TOKEN}, {MISSING_JOINT_TOKEN}]"
    parts = []
    for joint in joints:
        if joint is None:
            parts.append(missing)
        else:
            parts.append("[" + ", ".join(_format_component(c) for c in joint) + "]")
    return f"{int(timestamp)} " + "".join(parts)


__all__ = [
    "FrameCodecError",
    "decode_raw_buffer",
    "decode_color_buffer",
    "decode_depth_buffer",
    "decode_segmentation",
    "mask_from_user_map",
    "widen_segmentation",
    "narrow_segmentation",
    "parse_joint_line",
    "parse_joint_lines",
    "format_joint_line",
]
