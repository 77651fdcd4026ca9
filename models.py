"""Data models, errors and the music-service interface shared by the migrator.

Everything the orchestrator passes around lives here: account profiles,
playlist summaries, the per-playlist copy result and the observable run state
that the CLI (or any other front end) reads progress and log lines from.
"""

import enum
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol


class MigrationError(Exception):
    """Base class for every remote failure the migrator knows how to report."""
    pass


class AuthError(MigrationError):
    """A token failed profile validation."""
    pass


class CollectionFetchError(MigrationError):
    """A page of playlists or playlist tracks could not be fetched."""
    pass


class WriteError(MigrationError):
    """Creating a playlist or adding tracks on the target account failed."""
    pass


class InvalidPhaseError(MigrationError):
    """An operation was called in a lifecycle phase that does not allow it."""
    pass


class Phase(enum.Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    TRANSFERRING = "transferring"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Profile:
    id: str
    display_name: str

    @classmethod
    def from_api(cls, data):
        return cls(id=data["id"], display_name=data.get("display_name") or data["id"])


@dataclass(frozen=True)
class PlaylistSummary:
    """A source playlist as listed on connect."""
    id: str
    name: str
    description: Optional[str]
    track_count: int
    tracks_locator: str

    @classmethod
    def from_api(cls, data):
        tracks = data.get("tracks") or {}
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description"),
            track_count=tracks.get("total", 0),
            tracks_locator=tracks.get("href", ""),
        )


@dataclass
class CopyResult:
    """Outcome of copying one playlist: Success(tracks_added) or Failure(error)."""
    success: bool
    tracks_added: int = 0
    error: Optional[str] = None

    @classmethod
    def ok(cls, tracks_added: int) -> "CopyResult":
        return cls(success=True, tracks_added=tracks_added)

    @classmethod
    def failure(cls, error: str) -> "CopyResult":
        return cls(success=False, error=error)


@dataclass
class RunState:
    """Progress and log of the current run.

    Only the Migrator mutates it. Front ends either poll the fields or
    subscribe a callback, which is invoked with the state after every
    mutation in the order the mutations happen.
    """
    total: int = 0
    completed: int = 0
    current_action: str = ""
    log: List[str] = field(default_factory=list)
    _subscribers: List[Callable[["RunState"], None]] = field(default_factory=list, repr=False)

    @property
    def progress(self) -> float:
        if self.total == 0:
            return 0.0
        return self.completed / self.total

    @property
    def last_line(self) -> Optional[str]:
        return self.log[-1] if self.log else None

    def subscribe(self, callback):
        """Register a callback; returns a function that unregisters it."""
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback)

    def reset(self, total=0):
        self.total = total
        self.completed = 0
        self.current_action = ""
        self.log = []
        self._notify()

    def add_log(self, line):
        self.log.append(line)
        self._notify()

    def set_action(self, action):
        self.current_action = action
        self._notify()

    def advance(self):
        self.completed += 1
        self._notify()

    def _notify(self):
        for callback in list(self._subscribers):
            callback(self)


class MusicService(Protocol):
    """Remote operations the migrator needs from one account.

    Implemented by the live Spotify client and by the demo fixture service.
    """

    def get_profile(self) -> Profile: ...
    def playlists_locator(self, user_id: str) -> str: ...
    def fetch_page(self, locator: str) -> dict: ...
    def create_playlist(self, user_id: str, name: str, description: str, public: bool = False) -> str: ...
    def add_tracks(self, playlist_id: str, uris: List[str]) -> None: ...
