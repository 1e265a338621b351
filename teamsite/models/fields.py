"""Field limits, patterns and the camelCase base model used on the wire."""

import re
from datetime import UTC, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

HEX_COLOR_PATTERN = re.compile(r"^#([0-9A-Fa-f]{6}|[0-9A-Fa-f]{3})$")

PLAYER_NAME_MIN_LENGTH = 2
PLAYER_NAME_MAX_LENGTH = 50
TEAM_NAME_MIN_LENGTH = 2
TEAM_NAME_MAX_LENGTH = 30
POSITION_MAX_LENGTH = 100

NUMBER_MIN = 1
NUMBER_MAX = 99

MIN_SEASON_YEAR = 2020

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
UPLOADS_URL_PREFIX = "/uploads/"
# ids used as storage path segments
PLAYER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

DEFAULT_TEAM_COLOR = "#3b82f6"


class ApiModel(BaseModel):
    """Base for API payloads: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


REQUEST_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class RequestModel(ApiModel):
    """Request bodies reject unknown keys instead of silently dropping them."""

    model_config = REQUEST_CONFIG


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a stored timestamp; SQLite hands them back without an offset."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
