from dataclasses import dataclass

from app.config import settings


@dataclass(frozen=True)
class Identity:
    """Who is acting on the store. Passed explicitly into every store call."""

    username: str
    authenticated: bool = True


async def current_identity() -> Identity:
    # Stub session: every request runs as the configured default user.
    return Identity(username=settings.default_username)
