"""PyMuPDF-backed rasterization of PDF pages into Pillow images."""

from __future__ import annotations

import importlib.util
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

from PIL import Image

from .errors import ResourceUnavailableError, UnreadablePdfError

# MuPDF contexts are not thread safe; every call into the library holds this.
_RENDER_LOCK = threading.RLock()


@dataclass(frozen=True, slots=True)
class RenderOptions:
    density: int
    annotations: bool = True


def pdf_support_available() -> bool:
    return importlib.util.find_spec("fitz") is not None


class RasterDocument:
    def __init__(self, document: Any, fitz_module: Any) -> None:
        self._document = document
        self._fitz = fitz_module

    @property
    def page_count(self) -> int:
        return int(self._document.page_count)

    def render(self, index: int, options: RenderOptions) -> Image.Image:
        """Render the 1-based page ``index`` as an RGBA image.

        Unpainted page areas stay transparent so the encoder can flatten them
        onto the configured background.
        """

        with _RENDER_LOCK:
            page = self._document.load_page(index - 1)
            pixmap = page.get_pixmap(
                dpi=options.density,
                colorspace=self._fitz.csRGB,
                alpha=True,
                annots=options.annotations,
            )
            # MuPDF samples carry premultiplied alpha
            return Image.frombytes(
                "RGBA", (pixmap.width, pixmap.height), pixmap.samples, "raw", "RGBa"
            )


class PdfRasterizer:
    def __init__(self) -> None:
        try:
            import fitz
        except ModuleNotFoundError as exc:
            raise ResourceUnavailableError("PDF rasterization support is not installed") from exc

        self._fitz = fitz

    @contextmanager
    def open(self, pdf_bytes: bytes) -> Iterator[RasterDocument]:
        with _RENDER_LOCK:
            try:
                document = self._fitz.open(stream=pdf_bytes, filetype="pdf")
            except (RuntimeError, ValueError) as exc:
                raise UnreadablePdfError("Could not read the PDF document") from exc
        try:
            if document.needs_pass:
                raise UnreadablePdfError("The PDF document is password protected")
            if document.page_count < 1:
                raise UnreadablePdfError("The PDF document has no pages")
            yield RasterDocument(document, self._fitz)
        finally:
            with _RENDER_LOCK:
                document.close()


__all__ = ["PdfRasterizer", "RasterDocument", "RenderOptions", "pdf_support_available"]
