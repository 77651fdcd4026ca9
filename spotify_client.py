"""Live Spotify Web API access for one account.

Each account (source and target) gets its own SpotifyService built from the
bearer token the user supplied. The token is never refreshed; an expired one
surfaces as an ordinary call failure.
"""

import logging

import requests as _requests
import spotipy
from spotipy.exceptions import SpotifyException

from models import AuthError, CollectionFetchError, Profile, WriteError
from paging import ADD_BATCH_SIZE

API_BASE = "https://api.spotify.com/v1"
PLAYLIST_PAGE_LIMIT = 50

REQUIRED_SCOPES = "playlist-read-private playlist-modify-public playlist-modify-private"

log = logging.getLogger("spotify_client")

_CALL_ERRORS = (SpotifyException, _requests.exceptions.RequestException)


def create_client(token):
    """Create a spotipy.Spotify instance authenticated with a raw bearer token.

    The session is mounted with max_retries=0: failed calls are reported,
    never retried.
    """
    session = _requests.Session()
    session.mount("https://", _requests.adapters.HTTPAdapter(max_retries=0))
    return spotipy.Spotify(auth=token, requests_session=session)


def describe_error(e):
    """Turn a spotipy/requests exception into a one-line message."""
    if isinstance(e, SpotifyException):
        return f"HTTP {e.http_status}: {e.msg}"
    return str(e) or e.__class__.__name__


class SpotifyService:
    """MusicService backed by the Spotify Web API."""

    def __init__(self, token, role="source", client=None):
        self.role = role
        self._sp = client if client is not None else create_client(token)

    def get_profile(self):
        try:
            data = self._sp.current_user()
        except _CALL_ERRORS as e:
            log.debug(f"[{self.role}] GET /me failed: {describe_error(e)}")
            raise AuthError(f"Invalid {self.role} token or API error") from e
        if not data or not data.get("id"):
            raise AuthError(f"Invalid {self.role} token or API error")
        return Profile.from_api(data)

    def playlists_locator(self, user_id):
        return f"{API_BASE}/users/{user_id}/playlists?limit={PLAYLIST_PAGE_LIMIT}"

    def fetch_page(self, locator):
        # spotipy accepts absolute URLs here, which is what `next` links are
        try:
            page = self._sp._get(locator)
        except _CALL_ERRORS as e:
            raise CollectionFetchError(f"Failed to fetch {locator} ({describe_error(e)})") from e
        if not isinstance(page, dict):
            raise CollectionFetchError(f"Failed to fetch {locator} (empty response)")
        return page

    def create_playlist(self, user_id, name, description, public=False):
        try:
            result = self._sp.user_playlist_create(
                user_id, name, public=public, description=description,
            )
        except _CALL_ERRORS as e:
            raise WriteError(f"Failed to create playlist ({describe_error(e)})") from e
        if not result or not result.get("id"):
            raise WriteError("Failed to create playlist (no id in response)")
        log.debug(f"[{self.role}] Created playlist {result['id']} for {user_id}")
        return result["id"]

    def add_tracks(self, playlist_id, uris):
        if len(uris) > ADD_BATCH_SIZE:
            raise ValueError(f"At most {ADD_BATCH_SIZE} tracks per request, got {len(uris)}")
        try:
            self._sp.playlist_add_items(playlist_id, uris)
        except _CALL_ERRORS as e:
            raise WriteError(f"Failed to add {len(uris)} tracks ({describe_error(e)})") from e
