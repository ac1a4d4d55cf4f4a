import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from onesync.services.database import get_db
from onesync.services import spotify_auth
from onesync.services.streaming import (
    SpotifyAnalyticsService,
    AppleMusicAnalyticsService,
    get_spotify_service,
    get_apple_music_service,
)
from onesync.schemas.integrations import (
    ActionRequest,
    ProxyResponse,
    SpotifyAuthorizeResponse,
    SpotifyCallback,
    SpotifyStatus,
)
from onesync.models.user import User
from onesync.core.security import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/integrations")

@router.post("/spotify/analytics", response_model=ProxyResponse)
async def spotify_analytics(
    request: ActionRequest,
    spotify: SpotifyAnalyticsService = Depends(get_spotify_service),
    current_user: User = Depends(get_current_user)
):
    """Proxy a Spotify analytics action through the aggregator."""
    logger.info(f"Spotify action '{request.action}' for user {current_user.id}")
    data = await spotify.run(request.action, request.params)
    return ProxyResponse(success=True, data=data)


@router.post("/apple-music/analytics", response_model=ProxyResponse)
async def apple_music_analytics(
    request: ActionRequest,
    apple_music: AppleMusicAnalyticsService = Depends(get_apple_music_service),
    current_user: User = Depends(get_current_user)
):
    logger.info(f"Apple Music action '{request.action}' for user {current_user.id}")
    data = await apple_music.run(request.action, request.params)
    return ProxyResponse(success=True, data=data)


@router.get("/spotify/authorize", response_model=SpotifyAuthorizeResponse)
async def spotify_authorize(current_user: User = Depends(get_current_user)):
    return spotify_auth.authorize_url(current_user)


@router.post("/spotify/callback", response_model=SpotifyStatus)
async def spotify_callback(
    callback: SpotifyCallback,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = await spotify_auth.complete_connection(db, current_user, callback.code, callback.state)
    return SpotifyStatus(connected=user.spotify_connected, connected_at=user.spotify_connected_at)


@router.get("/spotify", response_model=SpotifyStatus)
async def spotify_status(current_user: User = Depends(get_current_user)):
    return SpotifyStatus(
        connected=bool(current_user.spotify_connected),
        connected_at=current_user.spotify_connected_at,
    )


@router.delete("/spotify", response_model=SpotifyStatus)
async def spotify_disconnect(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = await spotify_auth.disconnect(db, current_user)
    return SpotifyStatus(connected=False, connected_at=user.spotify_connected_at)
