from datetime import datetime, timezone
from typing import Any, Dict, Optional
import httpx
import logging

from onesync.core.config import settings
from onesync.core.exceptions import IntegrationNotConfigured, OneSyncException, UpstreamError
from onesync.services.pica import PicaClient, decode_json

logger = logging.getLogger(__name__)

CONVERSATIONS_ACTION = "conn_mod_def::GC40SckOddE::NFFu2-49QLyGsPBdfweitg"


def _join(values, fallback: str) -> str:
    return ", ".join(values) if values else fallback


def build_release_ticket_body(release: Dict[str, Any], user) -> str:
    tracks = release.get("tracks") or []
    first_track = tracks[0] if tracks else {}
    if release.get("is_worldwide"):
        countries = "Worldwide"
    else:
        countries = _join(release.get("countries"), "Not specified")

    return f"""
A new full release has been uploaded to OneSync!

**Release Details:**
- Title: {release.get("title")}
- Artist: {release.get("primary_artist")}
- Genre: {release.get("main_genre")}
- Release Date: {release.get("release_date")}
- Release Type: {release.get("release_type")}
- Platforms: {_join(release.get("platforms"), "Not specified")}

**User Information:**
- Name: {user.name}
- Email: {user.email}
- User ID: {user.id}

**Track Information:**
- Track Title: {first_track.get("title") or release.get("title")}
- Track Number: {first_track.get("track_number") or 1}
- Tracks: {len(tracks) or 1}
- Featured Artist: {release.get("featured_artist") or "None"}
- Explicit Content: {"Yes" if any(t.get("is_explicit") for t in tracks) else "No"}
- Description: {release.get("description") or "No description provided"}

**Additional Details:**
- Label: {release.get("label") or "Independent"}
- UPC: {release.get("upc") or "Not provided"}
- Countries: {countries}
- Copyrights: {release.get("copyrights") or "Not specified"}
- Audio Files: {release.get("audio_file_count") or len(tracks) or 1} file(s)
- Artwork: {"Uploaded" if release.get("artwork_url") else "Not uploaded"}

**Upload Status:** Completed successfully
**Timestamp:** {datetime.now(timezone.utc).isoformat()}

Please review this release for quality assurance and distribution processing.
"""


class IntercomService:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client = PicaClient("Intercom", settings.PICA_INTERCOM_CONNECTION_KEY, transport=transport)
        self.project_ref = settings.INTERCOM_PROJECT_REF

    async def create_conversation(self, user, subject: str, body: str) -> Dict[str, Any]:
        """Open an inbound conversation on behalf of the user."""
        if not self.project_ref:
            logger.error("INTERCOM_PROJECT_REF is not set")
            raise IntegrationNotConfigured("Intercom")

        payload = {
            "message_type": "inbound",
            "subject": subject,
            "body": body,
            "from": {
                "type": "user",
                "id": str(user.id),
                "name": user.name,
                "email": user.email,
            },
            "created_at": int(datetime.now(timezone.utc).timestamp()),
        }
        response = await self.client.send(
            "POST",
            f"v1/projects/{self.project_ref}/intercom/conversations",
            CONVERSATIONS_ACTION,
            json=payload,
        )
        if response.status_code not in (200, 201):
            logger.error(f"Intercom API error ({response.status_code}): {response.text}")
            raise UpstreamError("Intercom", response.status_code, response.text)

        data = decode_json("Intercom", response)
        if not isinstance(data, dict):
            data = {}
        logger.info(f"Intercom conversation created: {data.get('id')}")
        return {
            "success": True,
            "message": "Intercom ticket created successfully",
            "ticketId": str(data.get("id") or "unknown"),
        }

    async def create_release_ticket(self, release_data: Dict[str, Any], user) -> Dict[str, Any]:
        title = release_data.get("title") or "Untitled"
        return await self.create_conversation(
            user,
            f"New Release Upload: {title}",
            build_release_ticket_body(release_data, user),
        )

    async def unread_count(self, user_id) -> Dict[str, Any]:
        """Count the user's unread or open conversations. Never raises."""
        query = {
            "query": {"field": "user_id", "operator": "=", "value": str(user_id)},
            "pagination": {"per_page": 50},
        }
        try:
            data = await self.client.request("POST", "conversations/search", CONVERSATIONS_ACTION, json=query)
        except OneSyncException as e:
            logger.warning(f"Failed to fetch Intercom unread count for {user_id}: {e.detail}")
            return {"unread_count": 0, "success": False, "error": "Failed to fetch Intercom data"}

        conversations = data.get("conversations") if isinstance(data, dict) else None
        unread = 0
        if isinstance(conversations, list):
            unread = sum(
                1 for conv in conversations
                if isinstance(conv, dict) and (conv.get("read") is False or conv.get("state") == "open")
            )
        return {"unread_count": unread, "success": True, "error": None}


# Dependency
async def get_intercom_service() -> IntercomService:
    return IntercomService()
