"""Middleware registration."""

from fastapi import FastAPI

from geev.config import Settings
from geev.middleware.error_handler import setup_error_handlers
from geev.middleware.logging import setup_logging


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure logging and register the global error handlers."""
    setup_logging(settings)
    setup_error_handlers(app)
