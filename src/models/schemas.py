from pydantic import BaseModel


class HealthStatus(BaseModel):
    status: str
    version: str


class Capabilities(BaseModel):
    pdf_rasterization: bool
    output_formats: list[str]
    max_file_size_mb: int
    max_pages: int


class ErrorResponse(BaseModel):
    error: str
