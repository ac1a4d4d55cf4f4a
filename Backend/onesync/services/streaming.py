from typing import Any, Dict, Optional
import httpx
import logging

from onesync.core.config import settings
from onesync.core.exceptions import ValidationFailed
from onesync.services.pica import PicaClient, drop_empty

logger = logging.getLogger(__name__)


def require(params: Dict[str, Any], name: str) -> Any:
    value = params.get(name)
    if value in (None, ""):
        raise ValidationFailed(f"Missing required field: {name}")
    return value


def unknown_action(action: str) -> ValidationFailed:
    return ValidationFailed(f"Unknown action: {action}")


class SpotifyAnalyticsService:
    ACTIONS = {
        "get_artist_analytics": "conn_mod_def::GCmLSpotify1::AnalyticsInsights",
        "get_track_analytics": "conn_mod_def::GCmLSpotify2::TrackInsights",
        "get_streaming_data": "conn_mod_def::GCmLSpotify3::StreamingData",
    }

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client = PicaClient("Spotify", settings.PICA_SPOTIFY_CONNECTION_KEY, transport=transport)

    async def run(self, action: str, params: Dict[str, Any]) -> Any:
        if action == "get_artist_analytics":
            artist_id = require(params, "artistId")
            endpoint, query = f"v1/artists/{artist_id}/insights", None
        elif action == "get_track_analytics":
            track_id = require(params, "trackId")
            endpoint, query = f"v1/tracks/{track_id}/insights", None
        elif action == "get_streaming_data":
            endpoint = "v1/me/player/recently-played"
            query = drop_empty({"time_range": params.get("time_range"), "limit": params.get("limit")})
        else:
            raise unknown_action(action)

        return await self.client.request("GET", endpoint, self.ACTIONS[action], params=query)


class AppleMusicAnalyticsService:
    # action -> (endpoint, action id, {request param: upstream filter})
    ACTIONS = {
        "get_sales_reports": (
            "v1/salesReports",
            "conn_mod_def::GCmLApple1::SalesReports",
            {"vendor_number": "vendorNumber", "report_type": "reportType", "report_date": "reportDate"},
        ),
        "get_financial_reports": (
            "v1/financeReports",
            "conn_mod_def::GCmLApple2::FinanceReports",
            {"vendor_number": "vendorNumber", "region_code": "regionCode", "report_date": "reportDate"},
        ),
        "get_analytics_data": (
            "v1/analytics/app-analytics",
            "conn_mod_def::GCmLApple3::AnalyticsData",
            {"measures": "measures", "dimension": "dimension", "start_time": "startTime", "end_time": "endTime"},
        ),
    }

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client = PicaClient("Apple Music", settings.PICA_APPLE_MUSIC_CONNECTION_KEY, transport=transport)

    async def run(self, action: str, params: Dict[str, Any]) -> Any:
        if action not in self.ACTIONS:
            raise unknown_action(action)
        endpoint, action_id, filters = self.ACTIONS[action]
        query = drop_empty({f"filter[{upstream}]": params.get(name) for name, upstream in filters.items()})
        return await self.client.request("GET", endpoint, action_id, params=query)


# Dependencies
async def get_spotify_service() -> SpotifyAnalyticsService:
    return SpotifyAnalyticsService()

async def get_apple_music_service() -> AppleMusicAnalyticsService:
    return AppleMusicAnalyticsService()
