"""Station domain - value objects produced by the directory client."""

from .models import Station

__all__ = ["Station"]
