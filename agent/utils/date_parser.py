"""
Relative date hints for Spanish messages.

Turns expressions such as "mañana" or "próxima semana" found anywhere in a
user message into ISO dates. Used by the general preference extractor to
seed check-in dates for catalog and booking parameters.
"""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from shared.config import get_settings

# Substring → offset in days, checked in order (first match wins)
RELATIVE_DATE_HINTS: tuple[tuple[str, int], ...] = (
    ("mañana", 1),
    ("próxima semana", 7),
)


def get_local_now(timezone: ZoneInfo | None = None) -> datetime:
    """Current datetime in the configured destination timezone."""
    tz = timezone or ZoneInfo(get_settings().TIMEZONE)
    return datetime.now(tz)


def resolve_date_hint(
    message: str,
    timezone: ZoneInfo | None = None,
    reference_date: datetime | None = None,
) -> str | None:
    """
    Resolve the first relative date hint contained in a message.

    Args:
        message: Raw user message
        timezone: Timezone for "today" (default: settings.TIMEZONE)
        reference_date: Reference datetime (default: now in timezone)

    Returns:
        ISO date string (YYYY-MM-DD), or None when the message has no hint

    Examples:
        Assuming today = 2025-03-10:

        >>> resolve_date_hint("Quiero ir mañana")
        '2025-03-11'

        >>> resolve_date_hint("Llegamos la próxima semana")
        '2025-03-17'

        >>> resolve_date_hint("Busco hotel") is None
        True
    """
    lower = message.lower()
    for hint, offset_days in RELATIVE_DATE_HINTS:
        if hint in lower:
            today = reference_date or get_local_now(timezone)
            return (today + timedelta(days=offset_days)).date().isoformat()
    return None
