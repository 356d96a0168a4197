import re
from typing import Optional
from pydantic import BaseModel

from globetrotter.models.common import Visibility  # noqa: F401  re-exported for schemas

TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")


def check_time(value: Optional[str], label: str = "Time") -> Optional[str]:
    """Empty values are allowed; anything else must be HH:MM (24-hour)."""
    if value is None or value == "":
        return None
    if not TIME_PATTERN.match(value):
        raise ValueError(f"{label} must be in HH:MM format (24-hour)")
    return value


class MessageResponse(BaseModel):
    message: str


class ImageUrlRequest(BaseModel):
    url: str
