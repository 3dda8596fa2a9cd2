from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from core.pdf2picture.config import AppConfig, load_config
from core.pdf2picture.core import ConversionService
from core.pdf2picture.errors import ConversionError
from core.settings import Settings, get_settings

from .routers import convert, health

logger = logging.getLogger(__name__)


class JSONCORSMiddleware(CORSMiddleware):
    """CORS handling whose rejected preflights answer with an ``{"error": ...}`` body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code == 200:
            return response
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in {"content-length", "content-type"}
        }
        return JSONResponse(
            status_code=response.status_code,
            content={"error": bytes(response.body).decode("utf-8")},
            headers=headers,
        )


def create_app(config: AppConfig | None = None) -> FastAPI:
    if config is None:
        config = _prepare_config(get_settings())

    app = FastAPI(title="PDF to Picture", version=health.API_VERSION)
    app.state.config = config
    app.state.service = ConversionService(config)

    app.add_middleware(
        JSONCORSMiddleware,
        allow_origins=list(config.cors.allow_origins),
        allow_methods=list(config.cors.allow_methods),
        allow_headers=list(config.cors.allow_headers),
        expose_headers=["Content-Disposition"],
    )
    app.add_exception_handler(ConversionError, _conversion_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

    app.include_router(health.router)
    app.include_router(convert.router)
    return app


def _prepare_config(settings: Settings) -> AppConfig:
    config = load_config(settings.config_path)
    if settings.max_file_size_mb is not None:
        config.runtime.max_file_size_mb = settings.max_file_size_mb
    if settings.allowed_origins is not None:
        config.cors.allow_origins = settings.allowed_origins
    return config


async def _conversion_error_handler(request: Request, exc: ConversionError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Malformed request parameters"})


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error while serving %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Processing error"})


__all__ = ["create_app"]
