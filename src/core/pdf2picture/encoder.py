from __future__ import annotations

import io
from pathlib import Path

from PIL import Image

from .models import OutputFormat, PageFile, page_filename

WHITE = (255, 255, 255)


def flatten(image: Image.Image, background: tuple[int, int, int] = WHITE) -> Image.Image:
    """Composite any alpha over ``background`` and return an RGB image."""

    has_alpha = image.mode in {"RGBA", "LA", "PA"} or (
        image.mode == "P" and "transparency" in image.info
    )
    if has_alpha:
        rgba = image.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, background)
        canvas.paste(rgba, mask=rgba.getchannel("A"))
        return canvas
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def encode_page(
    image: Image.Image,
    output_format: OutputFormat,
    quality: int,
    *,
    background: tuple[int, int, int] = WHITE,
) -> bytes:
    # quality only applies to JPEG; PNG output is lossless
    flattened = flatten(image, background)
    buffer = io.BytesIO()
    if output_format is OutputFormat.JPEG:
        flattened.save(buffer, format=output_format.pil_format, quality=quality)
    else:
        flattened.save(buffer, format=output_format.pil_format)
    return buffer.getvalue()


def write_page(directory: Path, index: int, payload: bytes, output_format: OutputFormat) -> PageFile:
    path = directory / page_filename(index, output_format)
    path.write_bytes(payload)
    return PageFile(index=index, output_format=output_format, size_bytes=len(payload), path=path)


__all__ = ["encode_page", "flatten", "write_page"]
