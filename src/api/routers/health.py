from __future__ import annotations

from fastapi import APIRouter, Depends

from api.dependencies import get_config
from core.pdf2picture.config import AppConfig
from core.pdf2picture.models import OutputFormat
from core.pdf2picture.rasterizer import pdf_support_available
from models.schemas import Capabilities, HealthStatus

router = APIRouter(tags=["health"])

API_VERSION = "0.1.0"


@router.get("/health", summary="Health check", response_model=HealthStatus)
def health() -> HealthStatus:
    return HealthStatus(status="ok", version=API_VERSION)


@router.get("/health/capabilities", summary="Rendering capabilities", response_model=Capabilities)
def capabilities(config: AppConfig = Depends(get_config)) -> Capabilities:
    return Capabilities(
        pdf_rasterization=pdf_support_available(),
        output_formats=[item.value for item in OutputFormat],
        max_file_size_mb=config.runtime.max_file_size_mb,
        max_pages=config.runtime.limits.max_pages,
    )


__all__ = ["router"]
