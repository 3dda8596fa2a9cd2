"""PDF page rasterization and ZIP packaging toolkit."""

from .config import AppConfig, load_config
from .core import ConversionService
from .errors import ConversionError
from .models import ConversionRequest, ConversionResult, OutputFormat

__all__ = [
    "AppConfig",
    "load_config",
    "ConversionError",
    "ConversionRequest",
    "ConversionResult",
    "ConversionService",
    "OutputFormat",
]
