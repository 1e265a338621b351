"""Entity rules shared by the API and the client cache.

Every function here is pure: it takes a candidate value plus, optionally, the
peer entities needed for uniqueness checks, and returns a
:class:`ValidationResult`. Invalid input is an ordinary outcome, never an
exception. The server calls the rules without peers (the store enforces
uniqueness at the record level); the client cache passes its mirror so the
user hears about a taken number before any request is sent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional
from urllib.parse import urlsplit

from teamsite.core.errors import ValidationError
from teamsite.models.fields import (
    ALLOWED_IMAGE_TYPES,
    HEX_COLOR_PATTERN,
    IMAGE_EXTENSIONS,
    MIN_SEASON_YEAR,
    NUMBER_MAX,
    NUMBER_MIN,
    PLAYER_ID_PATTERN,
    PLAYER_NAME_MAX_LENGTH,
    PLAYER_NAME_MIN_LENGTH,
    POSITION_MAX_LENGTH,
    TEAM_NAME_MAX_LENGTH,
    TEAM_NAME_MIN_LENGTH,
    UPLOADS_URL_PREFIX,
)
from teamsite.models.players import PlayerFields, PlayerRead, PlayerStats
from teamsite.models.site_config import SeasonWindow, SiteConfigFields, ThemeColors
from teamsite.models.teams import TeamFields, TeamRead

THEME_COLOR_KEYS = ("primary", "secondary", "accent")


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def require_valid(result: ValidationResult) -> ValidationResult:
    """Raise :class:`ValidationError` for a failed result; used at write boundaries."""
    if not result.valid:
        raise ValidationError(result.errors, result.warnings)
    return result


def is_valid_color(color: Optional[str]) -> bool:
    return bool(color) and HEX_COLOR_PATTERN.fullmatch(color) is not None


def is_valid_image_url(url: str) -> bool:
    """True for http(s) URLs ending in a known image extension."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        return False
    return parts.path.lower().endswith(IMAGE_EXTENSIONS)


def is_stored_image_path(path: str) -> bool:
    return path.startswith(UPLOADS_URL_PREFIX)


def _text_length(value: Optional[str]) -> int:
    return len(value.strip()) if value else 0


def validate_stats(stats: PlayerStats) -> list[str]:
    errors: list[str] = []
    if not 0 <= stats.batting_average <= 1:
        errors.append("Batting average must be between 0 and 1")
    if stats.home_runs < 0:
        errors.append("Home runs must be a non-negative integer")
    if stats.rbi < 0:
        errors.append("RBI must be a non-negative integer")
    if stats.games_played < 0:
        errors.append("Games played must be a non-negative integer")
    return errors


def validate_player(
    player: PlayerFields,
    existing_players: Optional[Iterable[PlayerRead]] = None,
    teams: Optional[Iterable[TeamRead]] = None,
    *,
    player_id: Optional[str] = None,
) -> ValidationResult:
    """Check a player candidate.

    Args:
        player: Candidate fields (for updates, the merged result).
        existing_players: Peers for the (team, number) uniqueness rule.
        teams: Known teams; when given, ``team_id`` must be one of them.
        player_id: Id of the player being updated, excluded from peers.
    """
    result = ValidationResult()

    name_length = _text_length(player.name)
    if name_length == 0:
        result.errors.append("Player name is required")
    elif name_length < PLAYER_NAME_MIN_LENGTH:
        result.errors.append(
            f"Player name must be at least {PLAYER_NAME_MIN_LENGTH} characters"
        )
    elif name_length > PLAYER_NAME_MAX_LENGTH:
        result.errors.append(
            f"Player name must be at most {PLAYER_NAME_MAX_LENGTH} characters"
        )

    if player.number is None:
        result.errors.append("Player number is required")
    elif not NUMBER_MIN <= player.number <= NUMBER_MAX:
        result.errors.append(
            f"Player number must be between {NUMBER_MIN} and {NUMBER_MAX}"
        )

    if not player.team_id:
        result.errors.append("Team selection is required")
    elif teams is not None and player.team_id not in {t.id for t in teams}:
        result.errors.append("Team does not exist")

    position_length = _text_length(player.position)
    if position_length == 0:
        result.errors.append("Player position is required")
    elif position_length > POSITION_MAX_LENGTH:
        result.errors.append(
            f"Player position must be {POSITION_MAX_LENGTH} characters or less"
        )

    if existing_players is not None and player.number is not None and player.team_id:
        for other in existing_players:
            if (
                other.id != player_id
                and other.team_id == player.team_id
                and other.number == player.number
            ):
                result.errors.append(
                    f"Player number {player.number} is already taken by {other.name}"
                )
                break

    if player.image and not (
        is_valid_image_url(player.image) or is_stored_image_path(player.image)
    ):
        result.warnings.append("Image URL may not be valid")

    result.errors.extend(validate_stats(player.stats))
    return result


def validate_team(
    team: TeamFields,
    existing_teams: Optional[Iterable[TeamRead]] = None,
    *,
    team_id: Optional[str] = None,
) -> ValidationResult:
    result = ValidationResult()

    name_length = _text_length(team.name)
    if name_length == 0:
        result.errors.append("Team name is required")
    elif name_length < TEAM_NAME_MIN_LENGTH:
        result.errors.append(
            f"Team name must be at least {TEAM_NAME_MIN_LENGTH} characters"
        )
    elif name_length > TEAM_NAME_MAX_LENGTH:
        result.errors.append(
            f"Team name must be at most {TEAM_NAME_MAX_LENGTH} characters"
        )

    if existing_teams is not None and name_length:
        wanted = team_name_key(team.name or "")
        for other in existing_teams:
            if other.id != team_id and team_name_key(other.name) == wanted:
                result.errors.append(f'Team name "{team.name}" already exists')
                break

    if not is_valid_color(team.color):
        result.errors.append("Team color must be a valid hex color")

    return result


def team_name_key(name: str) -> str:
    """Case-insensitive identity of a team name."""
    return name.strip().casefold()


def validate_theme(theme: ThemeColors) -> list[str]:
    errors: list[str] = []
    for key in THEME_COLOR_KEYS:
        value = getattr(theme, key)
        if not value:
            errors.append(f"{key.capitalize()} color is required")
        elif not is_valid_color(value):
            errors.append(f"{key.capitalize()} color must be a valid hex color")
    return errors


def validate_season(season: SeasonWindow) -> ValidationResult:
    result = ValidationResult()

    if season.year is None or season.year < MIN_SEASON_YEAR:
        result.errors.append(f"Season year must be {MIN_SEASON_YEAR} or later")

    if season.start_date is None:
        result.errors.append("Season start date is required")
    if season.end_date is None:
        result.errors.append("Season end date is required")

    if season.start_date and season.end_date:
        if season.start_date >= season.end_date:
            result.errors.append("Season end date must be after start date")
        elif season.featured_date and not (
            season.start_date <= season.featured_date <= season.end_date
        ):
            result.warnings.append("Featured date falls outside the season")

    return result


def validate_site_config(config: SiteConfigFields) -> ValidationResult:
    result = ValidationResult()

    if _text_length(config.title) == 0:
        result.errors.append("Site title is required")

    result.errors.extend(validate_theme(config.theme))

    season = validate_season(config.season)
    result.errors.extend(season.errors)
    result.warnings.extend(season.warnings)
    return result


def is_safe_player_id(player_id: Optional[str]) -> bool:
    return bool(player_id) and PLAYER_ID_PATTERN.fullmatch(player_id) is not None


def validate_image_upload(
    filename: Optional[str],
    content_type: Optional[str],
    size: int,
    *,
    max_bytes: int,
    player_id: Optional[str] = None,
) -> ValidationResult:
    """Check an uploaded player image before it is stored.

    ``size`` may be capped at ``max_bytes + 1`` by the caller; anything past
    the limit is reported the same way.
    """
    result = ValidationResult()
    if player_id is not None and not is_safe_player_id(player_id):
        result.errors.append(
            "Player id may only contain letters, digits, underscores and hyphens"
        )
    if not filename or size == 0:
        result.errors.append("No image file provided")
        return result

    if size > max_bytes:
        result.errors.append(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
        )
    if content_type not in ALLOWED_IMAGE_TYPES or not filename.lower().endswith(
        IMAGE_EXTENSIONS
    ):
        result.errors.append("Only image files (JPEG, PNG, GIF, WebP) are allowed")
    return result
