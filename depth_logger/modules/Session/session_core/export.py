"""PNG export of a single resolved timeline position."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image

from depth_logger.core.logging_utils import get_module_logger
from .codecs.frame_codec import FrameCodecError
from .codecs.frame_types import PixelBuffer, StreamKind
from .timeline import ResolvedFrame

logger = get_module_logger(__name__)

EXPORTABLE_STREAMS = (StreamKind.DEPTH, StreamKind.COLOR, StreamKind.SEGMENTATION)


def buffer_to_image(buffer: PixelBuffer, kind: StreamKind) -> Image.Image:
    """Convert a stored buffer to a Pillow image.

    Depth becomes 16-bit grayscale, color RGB and segmentation an 8-bit
    0/255 mask.
    """
    if not buffer.matches_geometry:
        raise FrameCodecError(
            f"{kind.value} buffer has {buffer.pixel_count} pixels, expected {buffer.width}x{buffer.height}"
        )

    array = buffer.as_array()
    if kind is StreamKind.DEPTH:
        return Image.fromarray(np.ascontiguousarray(array, dtype=np.uint16))
    if kind is StreamKind.SEGMENTATION:
        mask = np.where(array != 0, 255, 0).astype(np.uint8)
        return Image.fromarray(mask)
    if kind is StreamKind.COLOR:
        if buffer.bytes_per_pixel == 4:
            return Image.fromarray(np.ascontiguousarray(array)).convert("RGB")
        if buffer.bytes_per_pixel == 3:
            return Image.fromarray(np.ascontiguousarray(array))
        raise FrameCodecError(f"Unsupported color pixel width: {buffer.bytes_per_pixel}")
    raise ValueError(f"Stream {kind.value!r} has no image representation")


def export_frame(resolved: ResolvedFrame, directory: Path, stream: StreamKind) -> Optional[Path]:
    """Write ``<directory>/<timestamp>.png`` for one stream of a resolved position.

    Returns the written path, or None when the stream has no frame there.
    """
    if stream not in EXPORTABLE_STREAMS:
        raise ValueError(f"Stream {stream.value!r} cannot be exported as an image")

    frame = resolved.frame_for(stream)
    if frame is None:
        logger.info("No %s frame at timestamp %d; nothing exported", stream.value, resolved.timestamp)
        return None

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{resolved.timestamp}.png"

    image = buffer_to_image(frame.payload, stream)
    image.save(path, format="PNG")
    logger.info("Exported %s frame %d to %s", stream.value, resolved.timestamp, path)
    return path


__all__ = ["EXPORTABLE_STREAMS", "buffer_to_image", "export_frame"]
