import logging

from api.app import create_app
from core.pdf2picture.logging import configure_logging

configure_logging(logging.INFO)
app = create_app()
