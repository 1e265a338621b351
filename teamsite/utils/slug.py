"""Identifier generation for teams and players."""

import re
import secrets
import unicodedata

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


def generate_slug(name: str) -> str:
    """Convert a display name to a URL-safe slug.

    Args:
        name: The display name to convert (e.g., "Red Sox")

    Returns:
        URL-safe slug (e.g., "red-sox")
    """
    if not name:
        return ""

    # Normalize unicode characters (é -> e, etc.)
    normalized = unicodedata.normalize("NFKD", name)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")

    lower = ascii_text.lower()
    hyphenated = re.sub(r"[\s_]+", "-", lower)
    cleaned = re.sub(r"[^a-z0-9-]", "", hyphenated)
    collapsed = re.sub(r"-+", "-", cleaned)
    return collapsed.strip("-")


async def generate_team_id(name: str, db: AsyncSession) -> str:
    """Generate a unique team id from its name, appending a numeric suffix if needed.

    Team ids are assigned once and never follow later renames.
    """
    # Lazy import to avoid circular dependency
    from teamsite.schemas.teams import TeamTable

    base_slug = generate_slug(name) or "team"
    candidate = base_slug
    suffix = 1

    while True:
        result = await db.execute(
            select(TeamTable.id).where(TeamTable.id == candidate)  # type: ignore[arg-type]
        )
        if result.scalar_one_or_none() is None:
            return candidate

        suffix += 1
        candidate = f"{base_slug}-{suffix}"


def generate_player_id() -> str:
    return f"player_{secrets.token_hex(8)}"
