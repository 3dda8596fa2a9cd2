import pytest

from core.pdf2picture.models import ConversionRequest, OutputFormat, page_filename


@pytest.mark.parametrize(
    ("scale", "expected"),
    [(5, 10), (9999, 200), (10, 10), (200, 200), (None, 100)],
)
def test_scale_is_clamped(scale, expected) -> None:
    request = ConversionRequest.create(b"%PDF-", scale_percent=scale)
    assert request.scale_percent == expected


def test_quality_is_clamped() -> None:
    assert ConversionRequest.create(b"%PDF-", jpeg_quality=0).jpeg_quality == 10
    assert ConversionRequest.create(b"%PDF-", jpeg_quality=250).jpeg_quality == 100
    assert ConversionRequest.create(b"%PDF-").jpeg_quality == 90


@pytest.mark.parametrize(
    ("value", "expected"),
    [("png", OutputFormat.PNG), ("PNG", OutputFormat.PNG), ("jpg", OutputFormat.JPEG),
     ("gif", OutputFormat.JPEG), (None, OutputFormat.JPEG), ("", OutputFormat.JPEG)],
)
def test_format_parsing(value, expected) -> None:
    assert ConversionRequest.create(b"%PDF-", output_format=value).output_format is expected


def test_density_has_a_floor_of_72_dpi() -> None:
    assert ConversionRequest.create(b"%PDF-", scale_percent=10).density == 72
    assert ConversionRequest.create(b"%PDF-", scale_percent=100).density == 72
    assert ConversionRequest.create(b"%PDF-", scale_percent=150).density == 108
    assert ConversionRequest.create(b"%PDF-", scale_percent=200).density == 144


def test_request_is_immutable() -> None:
    request = ConversionRequest.create(b"%PDF-")
    with pytest.raises(AttributeError):
        request.scale_percent = 50  # type: ignore[misc]


def test_page_filename_is_zero_padded() -> None:
    assert page_filename(1, OutputFormat.JPEG) == "page-001.jpg"
    assert page_filename(42, OutputFormat.PNG) == "page-042.png"
    assert page_filename(1000, OutputFormat.PNG) == "page-1000.png"


def test_direct_construction_is_clamped() -> None:
    request = ConversionRequest(pdf_bytes=b"%PDF-", scale_percent=5000, jpeg_quality=0)
    assert request.scale_percent == 200
    assert request.jpeg_quality == 10
    assert request.density == 144


def test_direct_construction_parses_format_strings() -> None:
    assert ConversionRequest(pdf_bytes=b"%PDF-", output_format="png").output_format is OutputFormat.PNG  # type: ignore[arg-type]
    assert ConversionRequest(pdf_bytes=b"%PDF-", output_format="tiff").output_format is OutputFormat.JPEG  # type: ignore[arg-type]
    assert ConversionRequest(pdf_bytes=b"%PDF-").output_format is OutputFormat.JPEG
