"""Tests for spotify_client.py: mocks the spotipy client."""

import os
import sys
from unittest.mock import MagicMock, patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
import requests
import spotipy.exceptions

import spotify_client as sc
from models import AuthError, CollectionFetchError, Profile, WriteError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def spotify_error(status, msg="error"):
    return spotipy.exceptions.SpotifyException(status, -1, msg)


def make_service(role="source"):
    client = MagicMock()
    return sc.SpotifyService("token", role=role, client=client), client


# ---------------------------------------------------------------------------
# create_client()
# ---------------------------------------------------------------------------

class TestCreateClient:
    @patch.object(sc.spotipy, "Spotify")
    def test_uses_bearer_token_without_retries(self, mock_spotify):
        sc.create_client("abc")

        kwargs = mock_spotify.call_args.kwargs
        assert kwargs["auth"] == "abc"
        session = kwargs["requests_session"]
        assert session.get_adapter("https://api.spotify.com").max_retries.total == 0


# ---------------------------------------------------------------------------
# get_profile()
# ---------------------------------------------------------------------------

class TestGetProfile:
    def test_returns_profile(self):
        svc, client = make_service()
        client.current_user.return_value = {"id": "u1", "display_name": "Alice"}
        assert svc.get_profile() == Profile("u1", "Alice")

    def test_http_error_is_auth_error(self):
        svc, client = make_service(role="target")
        client.current_user.side_effect = spotify_error(401, "The access token expired")
        with pytest.raises(AuthError, match="Invalid target token or API error"):
            svc.get_profile()

    def test_network_error_is_auth_error(self):
        svc, client = make_service()
        client.current_user.side_effect = requests.exceptions.ConnectionError("down")
        with pytest.raises(AuthError):
            svc.get_profile()


# ---------------------------------------------------------------------------
# Paging
# ---------------------------------------------------------------------------

class TestFetchPage:
    def test_playlists_locator(self):
        svc, _ = make_service()
        assert svc.playlists_locator("u1") == "https://api.spotify.com/v1/users/u1/playlists?limit=50"

    def test_fetches_absolute_locator(self):
        svc, client = make_service()
        client._get.return_value = {"items": [], "next": None}
        assert svc.fetch_page("https://api.spotify.com/v1/playlists/p/tracks") == {"items": [], "next": None}
        client._get.assert_called_once_with("https://api.spotify.com/v1/playlists/p/tracks")

    def test_error_is_collection_fetch_error(self):
        svc, client = make_service()
        client._get.side_effect = spotify_error(403, "Forbidden")
        with pytest.raises(CollectionFetchError, match="HTTP 403: Forbidden"):
            svc.fetch_page("https://api.spotify.com/v1/x")

    def test_empty_response(self):
        svc, client = make_service()
        client._get.return_value = None
        with pytest.raises(CollectionFetchError):
            svc.fetch_page("https://api.spotify.com/v1/x")


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

class TestWrites:
    def test_create_playlist_private(self):
        svc, client = make_service(role="target")
        client.user_playlist_create.return_value = {"id": "new1"}

        assert svc.create_playlist("u2", "Road Trip", "desc") == "new1"
        client.user_playlist_create.assert_called_once_with("u2", "Road Trip", public=False, description="desc")

    def test_create_failure(self):
        svc, client = make_service(role="target")
        client.user_playlist_create.side_effect = spotify_error(500, "Server error")
        with pytest.raises(WriteError, match="HTTP 500"):
            svc.create_playlist("u2", "X", "d")

    def test_create_without_id(self):
        svc, client = make_service(role="target")
        client.user_playlist_create.return_value = {}
        with pytest.raises(WriteError):
            svc.create_playlist("u2", "X", "d")

    def test_add_tracks(self):
        svc, client = make_service(role="target")
        svc.add_tracks("new1", ["spotify:track:1"])
        client.playlist_add_items.assert_called_once_with("new1", ["spotify:track:1"])

    def test_add_tracks_failure(self):
        svc, client = make_service(role="target")
        client.playlist_add_items.side_effect = spotify_error(429, "Rate limited")
        with pytest.raises(WriteError, match="Failed to add 1 tracks"):
            svc.add_tracks("new1", ["spotify:track:1"])

    def test_add_tracks_over_limit(self):
        svc, client = make_service(role="target")
        with pytest.raises(ValueError):
            svc.add_tracks("new1", [f"spotify:track:{n}" for n in range(101)])
        client.playlist_add_items.assert_not_called()
