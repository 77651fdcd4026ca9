"""Migration orchestrator.

Lifecycle::

    IDLE --connect()--> SELECTING --transfer()--> TRANSFERRING --> COMPLETE
    COMPLETE --copy_more()--> SELECTING
    SELECTING | COMPLETE --reset()--> IDLE

Playlists are copied one at a time in the order they were fetched. Progress
counts attempted playlists; whether each one succeeded is in the log.
"""

import logging

from models import (
    CollectionFetchError, InvalidPhaseError, Phase, PlaylistSummary, RunState,
)
from paging import collect_items
from playlist_copy import copy_playlist

PLAYLISTS_FETCH_ERROR = "Could not fetch playlists. Token might verify but lack permissions."
COMPLETE_ACTION = "Migration Complete!"

log = logging.getLogger("migrator")


class Migrator:
    """Drives a copy run between two MusicService instances."""

    def __init__(self, source, target):
        self.source = source
        self.target = target
        self.phase = Phase.IDLE
        self.state = RunState()
        self.source_profile = None
        self.target_profile = None
        self.playlists = []
        self.selected = set()
        self.results = []

    def _require(self, *phases):
        if self.phase not in phases:
            allowed = ", ".join(p.name for p in phases)
            raise InvalidPhaseError(f"Not allowed in phase {self.phase.name} (needs {allowed})")

    # --- Connect ---

    def connect(self):
        """Validate both tokens and load the source playlists.

        Raises AuthError or CollectionFetchError; on failure nothing is kept
        and the migrator stays IDLE.
        """
        self._require(Phase.IDLE)

        source_profile = self.source.get_profile()
        target_profile = self.target.get_profile()
        log.debug(f"Source: {source_profile.display_name} ({source_profile.id})")
        log.debug(f"Target: {target_profile.display_name} ({target_profile.id})")

        try:
            items = collect_items(self.source.fetch_page, self.source.playlists_locator(source_profile.id))
        except CollectionFetchError as e:
            log.debug(f"Playlist fetch failed: {e}")
            raise CollectionFetchError(PLAYLISTS_FETCH_ERROR) from e

        self.source_profile = source_profile
        self.target_profile = target_profile
        self.playlists = [PlaylistSummary.from_api(item) for item in items]
        self.selected = set()
        self.phase = Phase.SELECTING
        log.info(f"Loaded {len(self.playlists)} playlists from {source_profile.display_name}")
        return self.playlists

    # --- Selection ---

    def _check_known(self, playlist_id):
        if not any(pl.id == playlist_id for pl in self.playlists):
            raise KeyError(playlist_id)

    def toggle(self, playlist_id):
        self._require(Phase.SELECTING)
        self._check_known(playlist_id)
        if playlist_id in self.selected:
            self.selected.discard(playlist_id)
        else:
            self.selected.add(playlist_id)

    def select(self, playlist_ids):
        self._require(Phase.SELECTING)
        playlist_ids = list(playlist_ids)
        for playlist_id in playlist_ids:
            self._check_known(playlist_id)
        self.selected.update(playlist_ids)

    def select_all(self):
        """Select every playlist, or clear the selection if all are selected."""
        self._require(Phase.SELECTING)
        all_ids = {pl.id for pl in self.playlists}
        if self.selected == all_ids:
            self.selected = set()
        else:
            self.selected = all_ids

    def clear_selection(self):
        self._require(Phase.SELECTING)
        self.selected = set()

    def selected_playlists(self):
        return [pl for pl in self.playlists if pl.id in self.selected]

    # --- Transfer ---

    def transfer(self):
        """Copy every selected playlist. Returns [(playlist, CopyResult), ...]."""
        self._require(Phase.SELECTING)
        to_copy = self.selected_playlists()
        if not to_copy:
            raise ValueError("No playlists selected")

        self.phase = Phase.TRANSFERRING
        self.state.reset(total=len(to_copy))
        self.results = []

        for playlist in to_copy:
            self.state.set_action(f'Copying "{playlist.name}"...')
            self.state.add_log(f"Starting migration for: {playlist.name}")
            result = copy_playlist(
                self.source, self.target, playlist,
                self.source_profile, self.target_profile,
                self.state.add_log,
            )
            self.results.append((playlist, result))
            self.state.advance()

        self.state.set_action(COMPLETE_ACTION)
        self.phase = Phase.COMPLETE

        failed = sum(1 for _, r in self.results if not r.success)
        log.debug(f"Run finished: {len(self.results)} attempted, {failed} failed")
        return self.results

    def summary(self):
        self._require(Phase.COMPLETE)
        return (f"Successfully migrated {len(self.results)} playlists "
                f"to {self.target_profile.display_name}.")

    # --- After a run ---

    def copy_more(self):
        """Back to selection, keeping the loaded playlists and selection."""
        self._require(Phase.COMPLETE)
        self.state.reset()
        self.results = []
        self.phase = Phase.SELECTING

    def reset(self):
        """Forget profiles, playlists and selection so new tokens can be used."""
        self._require(Phase.SELECTING, Phase.COMPLETE)
        self.source_profile = None
        self.target_profile = None
        self.playlists = []
        self.selected = set()
        self.results = []
        self.state.reset()
        self.phase = Phase.IDLE
