from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from api.dependencies import get_config, get_service
from api.utils import run_sync
from core.pdf2picture.config import AppConfig
from core.pdf2picture.core import ConversionService
from core.pdf2picture.detection import is_accepted_media_type
from core.pdf2picture.errors import InvalidInputError
from core.pdf2picture.models import ConversionRequest
from models.schemas import ErrorResponse

router = APIRouter(tags=["conversion"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.post(
    "/convert",
    summary="Rasterize every PDF page into a ZIP of images",
    response_class=Response,
    responses={
        200: {"content": {"application/zip": {}}},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def convert_pdf(
    pdf: UploadFile | None = File(None),
    scale: str | None = Form(None),
    output_format: str | None = Form(None, alias="format"),
    quality: str | None = Form(None),
    service: ConversionService = Depends(get_service),
    config: AppConfig = Depends(get_config),
) -> Response:
    if pdf is None or not pdf.filename:
        raise InvalidInputError("No PDF file uploaded")
    if not is_accepted_media_type(pdf.content_type):
        raise InvalidInputError("Please upload a valid PDF file")
    payload = await _read_limited(pdf, config)
    request = ConversionRequest.create(
        payload,
        scale_percent=_parse_int(scale, "scale"),
        output_format=output_format,
        jpeg_quality=_parse_int(quality, "quality"),
        filename=pdf.filename,
    )
    result = await run_sync(service.convert, request)
    headers = {
        "Content-Disposition": f'attachment; filename="{result.archive_name}"',
        **NO_CACHE_HEADERS,
    }
    return Response(content=result.archive, media_type="application/zip", headers=headers)


@router.options("/convert", include_in_schema=False)
def convert_preflight() -> Response:
    return Response(status_code=200)


async def _read_limited(upload: UploadFile, config: AppConfig) -> bytes:
    max_bytes = config.runtime.max_file_size_bytes
    content = await upload.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise InvalidInputError(f"File too large. Maximum size is {config.runtime.max_file_size_mb}MB.")
    return content


def _parse_int(value: str | None, field: str) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError as exc:
        raise InvalidInputError(f"'{field}' must be an integer") from exc


__all__ = [
    "router",
]
