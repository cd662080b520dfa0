"""
Booking deep-link generator.

Builds the public SamanaInn URLs the BookingResponder hands to the frontend
so the user can finish a reservation on the website.
"""

import logging
from typing import Any
from urllib.parse import quote

logger = logging.getLogger(__name__)

# Booking type → path prefix on the website
BOOKING_PATHS: dict[str, str] = {
    "accommodation": "hotel",
    "restaurant": "restaurant",
    "tour": "tour",
    "car": "car",
}

# Query-string parameters, in the order they are emitted
BOOKING_QUERY_KEYS: tuple[str, ...] = ("check_in", "check_out", "adults", "children")


def build_booking_url(params: dict[str, Any], base_url: str) -> str:
    """
    Generate the booking page URL for a catalog item.

    Args:
        params: Booking parameters (type, slug, check_in, check_out,
            adults, children)
        base_url: Website root (settings.BOOKING_BASE_URL)

    Returns:
        Full URL ready to render as a button link

    Example:
        >>> build_booking_url(
        ...     {"type": "accommodation", "slug": "hotel-x", "adults": 2},
        ...     "https://samanainn.com",
        ... )
        'https://samanainn.com/hotel/hotel-x?adults=2'
    """
    base_url = base_url.rstrip("/")
    path = BOOKING_PATHS.get(str(params.get("type") or ""))

    if path is None:
        url = base_url
    else:
        url = f"{base_url}/{path}/{params.get('slug') or ''}"

    query = "&".join(
        f"{key}={quote(str(params[key]), safe='')}"
        for key in BOOKING_QUERY_KEYS
        if params.get(key)
    )
    if query:
        url = f"{url}?{query}"

    logger.debug(f"Booking URL built | type={params.get('type')} | url={url}")
    return url
