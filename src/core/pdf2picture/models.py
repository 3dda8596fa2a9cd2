"""Domain models for PDF to image conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .logging import StageTimings
from .utils import clamp

MIN_SCALE = 10
MAX_SCALE = 200
DEFAULT_SCALE = 100
MIN_QUALITY = 10
MAX_QUALITY = 100
DEFAULT_QUALITY = 90


class OutputFormat(str, Enum):
    JPEG = "jpg"
    PNG = "png"

    @classmethod
    def parse(cls, value: str | None) -> "OutputFormat":
        """Only ``png`` (any case) selects PNG; everything else is JPEG."""

        if value is not None and value.strip().lower() == "png":
            return cls.PNG
        return cls.JPEG

    @property
    def extension(self) -> str:
        return self.value

    @property
    def pil_format(self) -> str:
        return "PNG" if self is OutputFormat.PNG else "JPEG"

    @property
    def media_type(self) -> str:
        return "image/png" if self is OutputFormat.PNG else "image/jpeg"


@dataclass(frozen=True, slots=True)
class ConversionRequest:
    """A validated request for a single conversion run."""

    pdf_bytes: bytes = field(repr=False)
    scale_percent: int = DEFAULT_SCALE
    output_format: OutputFormat = OutputFormat.JPEG
    jpeg_quality: int = DEFAULT_QUALITY
    filename: str | None = None

    def __post_init__(self) -> None:
        # direct construction gets the same clamping as create()
        output_format = self.output_format
        if not isinstance(output_format, OutputFormat):
            output_format = OutputFormat.parse(output_format)
        object.__setattr__(self, "output_format", output_format)
        object.__setattr__(self, "scale_percent", clamp(int(self.scale_percent), MIN_SCALE, MAX_SCALE))
        object.__setattr__(self, "jpeg_quality", clamp(int(self.jpeg_quality), MIN_QUALITY, MAX_QUALITY))

    @classmethod
    def create(
        cls,
        pdf_bytes: bytes,
        *,
        scale_percent: int | None = None,
        output_format: OutputFormat | str | None = None,
        jpeg_quality: int | None = None,
        filename: str | None = None,
    ) -> "ConversionRequest":
        return cls(
            pdf_bytes=pdf_bytes,
            scale_percent=DEFAULT_SCALE if scale_percent is None else scale_percent,
            output_format=output_format,  # type: ignore[arg-type]
            jpeg_quality=DEFAULT_QUALITY if jpeg_quality is None else jpeg_quality,
            filename=filename,
        )

    @property
    def density(self) -> int:
        """Rasterization DPI, never below 72."""

        return max(72, round(72 * self.scale_percent / 100))


@dataclass(slots=True)
class PageFile:
    index: int
    output_format: OutputFormat
    size_bytes: int
    path: Path

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(slots=True)
class ConversionResult:
    """Archive bytes plus metadata for a finished conversion."""

    run_id: str
    archive: bytes = field(repr=False)
    archive_name: str
    pages: list[int]
    skipped_pages: list[int]
    page_count: int
    density: int
    timings: StageTimings

    @property
    def size_bytes(self) -> int:
        return len(self.archive)


def page_filename(index: int, output_format: OutputFormat) -> str:
    return f"page-{index:03d}.{output_format.extension}"


__all__ = [
    "ConversionRequest",
    "ConversionResult",
    "OutputFormat",
    "PageFile",
    "page_filename",
]
