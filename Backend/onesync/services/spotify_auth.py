import logging
from datetime import timedelta
from urllib.parse import urlencode

from sqlalchemy.ext.asyncio import AsyncSession

from onesync.core.config import settings
from onesync.core.exceptions import IntegrationNotConfigured, UnauthorizedError, ValidationFailed
from onesync.core.security import create_access_token, decode_token
from onesync.models.user import User
from onesync.services.database import utcnow

logger = logging.getLogger(__name__)

SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_SCOPES = " ".join([
    "user-read-private",
    "user-read-email",
    "user-top-read",
    "user-library-read",
    "playlist-read-private",
    "playlist-read-collaborative",
    "streaming",
])
STATE_PURPOSE = "spotify_state"
STATE_TTL = timedelta(minutes=10)


def authorize_url(user: User) -> dict:
    """Spotify authorize URL whose `state` is a short-lived token bound to the user."""
    if not settings.SPOTIFY_CLIENT_ID:
        logger.error("SPOTIFY_CLIENT_ID is not set")
        raise IntegrationNotConfigured("Spotify")

    state = create_access_token(str(user.id), expires_delta=STATE_TTL, claims={"purpose": STATE_PURPOSE})
    query = urlencode({
        "client_id": settings.SPOTIFY_CLIENT_ID,
        "response_type": "code",
        "redirect_uri": settings.SPOTIFY_REDIRECT_URI,
        "state": state,
        "scope": SPOTIFY_SCOPES,
    })
    return {"authorize_url": f"{SPOTIFY_AUTHORIZE_URL}?{query}", "state": state}


def verify_state(state: str, user: User) -> None:
    try:
        payload = decode_token(state)
    except UnauthorizedError:
        raise ValidationFailed("State verification failed")
    if payload.get("purpose") != STATE_PURPOSE or payload.get("sub") != str(user.id):
        raise ValidationFailed("State verification failed")


async def complete_connection(db: AsyncSession, user: User, code: str, state: str) -> User:
    verify_state(state, user)
    user.spotify_connected = True
    user.spotify_connected_at = utcnow()
    await db.commit()
    logger.info(f"Spotify connected for user {user.id}")
    return user


async def disconnect(db: AsyncSession, user: User) -> User:
    user.spotify_connected = False
    user.spotify_connected_at = None
    await db.commit()
    logger.info(f"Spotify disconnected for user {user.id}")
    return user
