from datetime import datetime, timezone
import enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Visibility(str, enum.Enum):
    public = "public"
    private = "private"
