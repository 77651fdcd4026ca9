"""Demo-mode stand-in for the Spotify Web API.

Serves fixed profiles and playlists, synthesises paged track listings and
records every write, sleeping a little on each call so a demo run looks and
paces like a real one. Used by ``migrate.py --demo`` and by the tests.
"""

import logging
import time
from urllib.parse import parse_qs, urlparse

from models import CollectionFetchError, Profile, WriteError
from paging import ADD_BATCH_SIZE

DEMO_PROFILES = {
    "source": {"id": "demo_user_1", "display_name": "Alice (Demo)"},
    "target": {"id": "demo_user_2", "display_name": "Bob (Demo)"},
}

DEMO_PLAYLISTS = [
    ("1", "Summer Vibes 2024", 45),
    ("2", "Coding Focus", 120),
    ("3", "Workout Mix", 32),
    ("4", "Sad Boi Hours", 15),
    ("5", "Cowboy songs 2025", 57),
    ("6", "Late night driving", 9),
    ("7", "Road Trip", 88),
]

PAGE_DELAY = 0.8
WRITE_DELAY = 0.5
PLAYLIST_PAGE_SIZE = 50
TRACK_PAGE_SIZE = 100

log = logging.getLogger("demo_client")


def demo_track_uri(playlist_id, n):
    return f"spotify:track:demo{playlist_id}x{n:04d}"


class DemoService:
    """MusicService serving fixture data.

    playlists: list of (id, name, track_count) tuples, DEMO_PLAYLISTS by default.
    fail_fetch / fail_create / fail_add: playlist names whose track fetch,
    creation or track addition should fail, to exercise error handling.
    """

    def __init__(self, role="source", playlists=None, page_delay=PAGE_DELAY,
                 write_delay=WRITE_DELAY, fail_fetch=(), fail_create=(), fail_add=()):
        self.role = role
        self.playlists = list(DEMO_PLAYLISTS if playlists is None else playlists)
        self.page_delay = page_delay
        self.write_delay = write_delay
        self.fail_fetch = set(fail_fetch)
        self.fail_create = set(fail_create)
        self.fail_add = set(fail_add)

        # Writes received, for inspection: new id -> {name, description, public, uris}
        self.created = {}
        self.add_calls = []
        self._next_id = 1

    def _sleep(self, seconds):
        if seconds:
            time.sleep(seconds)

    def get_profile(self):
        return Profile.from_api(DEMO_PROFILES[self.role])

    def playlists_locator(self, user_id):
        return f"demo://users/{user_id}/playlists?offset=0"

    def fetch_page(self, locator):
        parsed = urlparse(locator)
        offset = int(parse_qs(parsed.query).get("offset", ["0"])[0])
        parts = parsed.path.strip("/").split("/")

        if parsed.netloc == "users" and parts[-1] == "playlists":
            return self._playlists_page(parts[0], offset)
        if parsed.netloc == "playlists" and parts[-1] == "tracks":
            self._sleep(self.page_delay)
            return self._tracks_page(parts[0], offset)
        raise CollectionFetchError(f"Failed to fetch {locator} (unknown demo locator)")

    def _playlists_page(self, user_id, offset):
        chunk = self.playlists[offset:offset + PLAYLIST_PAGE_SIZE]
        items = [
            {
                "id": pl_id,
                "name": name,
                "description": "",
                "tracks": {"total": total, "href": f"demo://playlists/{pl_id}/tracks?offset=0"},
                "images": [],
            }
            for pl_id, name, total in chunk
        ]
        end = offset + PLAYLIST_PAGE_SIZE
        next_url = f"demo://users/{user_id}/playlists?offset={end}" if end < len(self.playlists) else None
        return {"items": items, "next": next_url, "total": len(self.playlists)}

    def _tracks_page(self, pl_id, offset):
        match = [pl for pl in self.playlists if pl[0] == pl_id]
        if not match:
            raise CollectionFetchError(f"Failed to fetch tracks of {pl_id} (HTTP 404: Not found)")
        _, name, total = match[0]
        if name in self.fail_fetch:
            raise CollectionFetchError(f"Failed to fetch tracks of {pl_id} (HTTP 500: Demo failure)")

        end = min(offset + TRACK_PAGE_SIZE, total)
        items = [{"track": {"uri": demo_track_uri(pl_id, n)}} for n in range(offset, end)]
        next_url = f"demo://playlists/{pl_id}/tracks?offset={end}" if end < total else None
        return {"items": items, "next": next_url, "total": total}

    def create_playlist(self, user_id, name, description, public=False):
        self._sleep(self.write_delay)
        if name in self.fail_create:
            raise WriteError("Failed to create playlist (HTTP 500: Demo failure)")
        new_id = f"demo_new_{self._next_id}"
        self._next_id += 1
        self.created[new_id] = {
            "owner": user_id,
            "name": name,
            "description": description,
            "public": public,
            "uris": [],
        }
        log.debug(f"[demo:{self.role}] Created {new_id} ({name})")
        return new_id

    def add_tracks(self, playlist_id, uris):
        if len(uris) > ADD_BATCH_SIZE:
            raise ValueError(f"At most {ADD_BATCH_SIZE} tracks per request, got {len(uris)}")
        self._sleep(self.write_delay)
        playlist = self.created.get(playlist_id)
        if playlist is None:
            raise WriteError(f"Failed to add {len(uris)} tracks (HTTP 404: Not found)")
        if playlist["name"] in self.fail_add:
            raise WriteError(f"Failed to add {len(uris)} tracks (HTTP 500: Demo failure)")
        self.add_calls.append((playlist_id, list(uris)))
        playlist["uris"].extend(uris)
