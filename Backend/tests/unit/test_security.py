"""Password hashing, access tokens and the Spotify OAuth state token."""
import uuid
from datetime import timedelta
from types import SimpleNamespace

import pytest

from onesync.core.exceptions import IntegrationNotConfigured, UnauthorizedError, ValidationFailed
from onesync.core.security import (
    create_access_token,
    decode_token,
    get_current_user_optional,
    get_password_hash,
    verify_password,
)
from onesync.models.user import User
from onesync.services import spotify_auth


def _user():
    return SimpleNamespace(id=uuid.uuid4())


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = get_password_hash("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong", hashed)


class TestTokens:
    def test_round_trip(self):
        token = create_access_token("user-1")
        payload = decode_token(token)
        assert payload["sub"] == "user-1"
        assert "exp" in payload

    def test_expired_token(self):
        token = create_access_token("user-1", expires_delta=timedelta(seconds=-5))
        with pytest.raises(UnauthorizedError):
            decode_token(token)

    def test_garbage_token(self):
        with pytest.raises(UnauthorizedError):
            decode_token("not-a-jwt")


class TestSpotifyState:
    def test_authorize_url_carries_state_and_scopes(self):
        user = _user()
        result = spotify_auth.authorize_url(user)
        assert result["authorize_url"].startswith("https://accounts.spotify.com/authorize?")
        assert "client_id=spotify-client" in result["authorize_url"]
        assert "playlist-read-collaborative" in result["authorize_url"]
        spotify_auth.verify_state(result["state"], user)

    def test_state_bound_to_user(self):
        state = spotify_auth.authorize_url(_user())["state"]
        with pytest.raises(ValidationFailed, match="State verification failed"):
            spotify_auth.verify_state(state, _user())

    def test_access_token_is_not_a_state(self):
        user = _user()
        with pytest.raises(ValidationFailed):
            spotify_auth.verify_state(create_access_token(str(user.id)), user)

    def test_missing_client_id(self, monkeypatch):
        from onesync.core.config import settings
        monkeypatch.setattr(settings, "SPOTIFY_CLIENT_ID", None)
        with pytest.raises(IntegrationNotConfigured):
            spotify_auth.authorize_url(_user())


class TestOptionalUser:
    def test_no_token(self, db_run):
        assert db_run(lambda session: get_current_user_optional(token=None, db=session)) is None

    def test_bad_token(self, db_run):
        assert db_run(lambda session: get_current_user_optional(token="junk", db=session)) is None

    def test_valid_token(self, db_run):
        user_id = uuid.uuid4()

        async def seed(session):
            session.add(User(id=user_id, email="opt@example.com", password_hash="x", name="Opt"))

        db_run(seed)
        token = create_access_token(str(user_id))
        user = db_run(lambda session: get_current_user_optional(token=token, db=session))
        assert user.id == user_id
