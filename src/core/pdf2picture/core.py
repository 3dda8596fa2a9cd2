from __future__ import annotations

import concurrent.futures
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

from .archive import build_archive
from .config import AppConfig
from .detection import looks_like_pdf
from .encoder import encode_page, write_page
from .errors import (
    ArchiveFailureError,
    ConversionError,
    InvalidInputError,
    NoOutputError,
    UnreadablePdfError,
)
from .logging import RunLogEntry, RunLogger, StageTimings
from .models import ConversionRequest, ConversionResult, PageFile
from .rasterizer import PdfRasterizer, RasterDocument, RenderOptions
from .utils import generate_run_id, workspace

logger = logging.getLogger(__name__)

ARCHIVE_FILENAME = "images.zip"

# Failures that cost a single page rather than the whole run.
PAGE_ERRORS: tuple[type[Exception], ...] = (OSError, RuntimeError, ValueError)


@dataclass(slots=True)
class _ConversionContext:
    run_id: str
    request: ConversionRequest
    workspace_dir: Path
    render: RenderOptions
    timings: StageTimings
    page_count: int = 0
    skipped: list[int] = field(default_factory=list)

    @property
    def source(self) -> str:
        return self.request.filename or "<upload>"


class ConversionService:
    def __init__(self, config: AppConfig, rasterizer: PdfRasterizer | None = None) -> None:
        self._config = config
        self._rasterizer = rasterizer
        runtime = config.runtime
        log_file = runtime.log_dir / runtime.log_file if runtime.log_dir else None
        self._run_logger = RunLogger(log_file)

    def convert(self, request: ConversionRequest, *, run_id: str | None = None) -> ConversionResult:
        run_id = run_id or generate_run_id()
        timings = StageTimings()
        context: _ConversionContext | None = None

        validate_start = time.perf_counter()
        try:
            self._validate(request)
            timings.validate_ms = (time.perf_counter() - validate_start) * 1000
            runtime = self._config.runtime
            with workspace(runtime.workspace_root, runtime.workspace_prefix, run_id) as workspace_dir:
                context = _ConversionContext(
                    run_id=run_id,
                    request=request,
                    workspace_dir=workspace_dir,
                    render=RenderOptions(
                        density=request.density,
                        annotations=self._config.render.annotations,
                    ),
                    timings=timings,
                )
                result = self._convert_internal(context)
        except ConversionError as exc:
            logger.warning("Conversion %s failed [%s]: %s", run_id, exc.code, exc.message)
            self._log_failure(run_id, request, context, timings, exc.code)
            raise
        except Exception as exc:
            logger.exception("Unexpected error while converting %s", run_id)
            self._log_failure(run_id, request, context, timings, "INTERNAL_ERROR")
            raise ConversionError("INTERNAL_ERROR", "Processing error") from exc

        self._append_log(
            RunLogEntry(
                run_id=run_id,
                source=request.filename or "<upload>",
                status="success",
                output_format=request.output_format.value,
                density=request.density,
                page_count=result.page_count,
                pages_written=len(result.pages),
                skipped_pages=result.skipped_pages,
                error_code=None,
                timings=timings,
                size_bytes=len(request.pdf_bytes),
                archive_bytes=result.size_bytes,
            )
        )
        return result

    def _validate(self, request: ConversionRequest) -> None:
        if not request.pdf_bytes:
            raise InvalidInputError("No PDF file uploaded or the file is empty")
        limit = self._config.runtime.max_file_size_bytes
        if len(request.pdf_bytes) > limit:
            raise InvalidInputError(
                f"File too large. Maximum size is {self._config.runtime.max_file_size_mb}MB."
            )
        if not looks_like_pdf(request.pdf_bytes):
            raise UnreadablePdfError("The uploaded file is not a PDF document")

    def _get_rasterizer(self) -> PdfRasterizer:
        if self._rasterizer is None:
            self._rasterizer = PdfRasterizer()
        return self._rasterizer

    def _convert_internal(self, context: _ConversionContext) -> ConversionResult:
        rasterizer = self._get_rasterizer()
        with rasterizer.open(context.request.pdf_bytes) as document:
            context.page_count = document.page_count
            self._ensure_page_limit(context.page_count)
            pages = self._produce_pages(document, context)

        if not pages:
            raise NoOutputError("No images generated. Check PDF validity.")

        archive = self._create_archive(pages, context)
        return ConversionResult(
            run_id=context.run_id,
            archive=archive,
            archive_name=self._config.runtime.archive_name,
            pages=[page.index for page in pages],
            skipped_pages=sorted(context.skipped),
            page_count=context.page_count,
            density=context.render.density,
            timings=context.timings,
        )

    def _ensure_page_limit(self, page_count: int) -> None:
        max_pages = self._config.runtime.limits.max_pages
        if page_count > max_pages:
            raise InvalidInputError(f"Too many pages: {page_count} exceeds the limit of {max_pages}")

    def _produce_pages(self, document: RasterDocument, context: _ConversionContext) -> list[PageFile]:
        parallelism = max(1, self._config.runtime.parallelism)
        if parallelism == 1:
            return self._produce_sequential(document, context)
        return self._produce_parallel(document, context, parallelism)

    def _render(self, document: RasterDocument, index: int, context: _ConversionContext) -> Image.Image | None:
        render_start = time.perf_counter()
        try:
            return document.render(index, context.render)
        except PAGE_ERRORS as exc:
            self._skip_page(context, index, "render", exc)
            return None
        finally:
            context.timings.rasterize_ms += (time.perf_counter() - render_start) * 1000

    def _encode(self, image: Image.Image, index: int, context: _ConversionContext) -> tuple[PageFile, float]:
        encode_start = time.perf_counter()
        request = context.request
        try:
            payload = encode_page(
                image,
                request.output_format,
                request.jpeg_quality,
                background=self._config.render.background,
            )
        finally:
            image.close()
        page = write_page(context.workspace_dir, index, payload, request.output_format)
        return page, (time.perf_counter() - encode_start) * 1000

    def _produce_sequential(self, document: RasterDocument, context: _ConversionContext) -> list[PageFile]:
        pages: list[PageFile] = []
        for index in range(1, context.page_count + 1):
            image = self._render(document, index, context)
            if image is None:
                continue
            try:
                page, elapsed = self._encode(image, index, context)
            except PAGE_ERRORS as exc:
                self._skip_page(context, index, "encode", exc)
                continue
            context.timings.encode_ms += elapsed
            pages.append(page)
        return pages

    def _produce_parallel(
        self, document: RasterDocument, context: _ConversionContext, parallelism: int
    ) -> list[PageFile]:
        pages: list[PageFile] = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=parallelism) as executor:
            pending: dict[concurrent.futures.Future[tuple[PageFile, float]], int] = {}
            for index in range(1, context.page_count + 1):
                # at most ``parallelism`` rendered pages are held in memory
                if len(pending) >= parallelism:
                    pages.extend(self._collect(pending, context, concurrent.futures.FIRST_COMPLETED))
                image = self._render(document, index, context)
                if image is None:
                    continue
                pending[executor.submit(self._encode, image, index, context)] = index
            pages.extend(self._collect(pending, context, concurrent.futures.ALL_COMPLETED))
        return sorted(pages, key=lambda page: page.index)

    def _collect(
        self,
        pending: dict[concurrent.futures.Future[tuple[PageFile, float]], int],
        context: _ConversionContext,
        return_when: str,
    ) -> list[PageFile]:
        done, _ = concurrent.futures.wait(pending, return_when=return_when)
        collected: list[PageFile] = []
        for future in done:
            index = pending.pop(future)
            try:
                page, elapsed = future.result()
            except PAGE_ERRORS as exc:
                self._skip_page(context, index, "encode", exc)
                continue
            context.timings.encode_ms += elapsed
            collected.append(page)
        return collected

    def _skip_page(self, context: _ConversionContext, index: int, stage: str, exc: Exception) -> None:
        logger.warning(
            "Skipping page %d of %s (run %s) after %s failure: %s",
            index,
            context.source,
            context.run_id,
            stage,
            exc,
        )
        context.skipped.append(index)

    def _create_archive(self, pages: list[PageFile], context: _ConversionContext) -> bytes:
        archive_start = time.perf_counter()
        ordered = sorted(pages, key=lambda page: page.index)
        try:
            entries = [(page.name, page.path.read_bytes()) for page in ordered]
        except OSError as exc:
            raise ArchiveFailureError("Failed to read generated images") from exc
        archive = build_archive(entries, context.workspace_dir / ARCHIVE_FILENAME)
        context.timings.archive_ms = (time.perf_counter() - archive_start) * 1000
        return archive

    def _log_failure(
        self,
        run_id: str,
        request: ConversionRequest,
        context: _ConversionContext | None,
        timings: StageTimings,
        error_code: str,
    ) -> None:
        self._append_log(
            RunLogEntry(
                run_id=run_id,
                source=request.filename or "<upload>",
                status="failure",
                output_format=request.output_format.value,
                density=request.density,
                page_count=context.page_count if context else 0,
                pages_written=0,
                skipped_pages=sorted(context.skipped) if context else [],
                error_code=error_code,
                timings=timings,
                size_bytes=len(request.pdf_bytes),
            )
        )

    def _append_log(self, entry: RunLogEntry) -> None:
        try:
            self._run_logger.append(entry)
        except OSError as exc:
            logger.warning("Could not write run log entry for %s: %s", entry.run_id, exc)


__all__ = [
    "ConversionError",
    "ConversionService",
]
