"""
Display helpers - French dates, relative ages, avatar fallbacks.
"""

from datetime import datetime, timezone
from typing import Optional, Union
from urllib.parse import quote_plus

from pydantic import TypeAdapter, ValidationError

MONTHS_FR = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]

# Accepts any fraction length PostgREST sends, on every supported Python
_DATETIME = TypeAdapter(datetime)


def parse_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a backend timestamp; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    try:
        dt = _DATETIME.validate_python(value)
    except ValidationError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def date_fr(value: Union[str, datetime, None]) -> str:
    """15 septembre 2023"""
    dt = parse_datetime(value)
    if dt is None:
        return ""
    return f"{dt.day} {MONTHS_FR[dt.month - 1]} {dt.year}"


def posted_ago(value: Union[str, datetime, None], now: Optional[datetime] = None) -> str:
    dt = parse_datetime(value)
    if dt is None:
        return ""
    now = now or datetime.now(timezone.utc)
    days = max((now - dt).days, 0)

    if days == 0:
        return "Aujourd'hui"
    if days < 7:
        return f"Il y a {days} jour{'s' if days > 1 else ''}"
    if days < 30:
        weeks = days // 7
        return f"Il y a {weeks} semaine{'s' if weeks > 1 else ''}"
    return f"Il y a {days // 30} mois"


def avatar_url(name: str, avatar: Optional[str] = None) -> str:
    if avatar:
        return avatar
    return f"https://ui-avatars.com/api/?name={quote_plus(name)}&background=random"
