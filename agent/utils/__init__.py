"""
Utility functions for the chat pipeline.

- date_parser: relative date hints ("mañana", "próxima semana") in the
  configured timezone
- url_builder: booking deep links for the website
"""

from agent.utils.date_parser import (
    get_local_now,
    resolve_date_hint,
)
from agent.utils.url_builder import build_booking_url

__all__ = [
    # Dates
    "get_local_now",
    "resolve_date_hint",
    # URLs
    "build_booking_url",
]
