"""Copy one playlist from the source account to the target account."""

import logging

from models import CopyResult, MigrationError
from paging import chunked, collect_items, extract_track_uris

APP_NAME = "Spotify Migrator"

log = logging.getLogger("playlist_copy")


def build_description(playlist, source_profile):
    """Keep the source description unless it is blank."""
    if playlist.description and playlist.description.strip():
        return playlist.description
    return f"Copied from {source_profile.display_name} via {APP_NAME}"


def fetch_track_uris(source, playlist):
    return collect_items(source.fetch_page, playlist.tracks_locator, extract=extract_track_uris)


def copy_playlist(source, target, playlist, source_profile, target_profile, emit):
    """Fetch tracks, create the target playlist and add the tracks in batches.

    emit receives each progress line. Any failure, remote or not, is
    reported as one "ERROR copying ..." line and returned as a failed
    CopyResult; whatever was already written on the target stays there.
    """
    try:
        uris = fetch_track_uris(source, playlist)
        emit(f"Fetched {len(uris)} tracks.")
        if len(uris) < playlist.track_count:
            log.debug(f"  {playlist.name}: listed {playlist.track_count}, "
                      f"{playlist.track_count - len(uris)} not transferable")

        new_id = target.create_playlist(
            target_profile.id,
            playlist.name,
            build_description(playlist, source_profile),
            public=False,
        )
        emit(f'Created playlist "{playlist.name}" on target account.')

        if not uris:
            emit("Skipping track addition: No valid tracks found.")
            return CopyResult.ok(0)

        added = 0
        for batch in chunked(uris):
            target.add_tracks(new_id, batch)
            added += len(batch)
            log.debug(f"  {playlist.name}: {added}/{len(uris)} tracks added")
        emit(f"Successfully added {added} tracks.")
        return CopyResult.ok(added)

    except MigrationError as e:
        emit(f"ERROR copying {playlist.name}: {e}")
        return CopyResult.failure(str(e))
    except Exception as e:
        log.exception(f"Unexpected error copying {playlist.name}")
        message = str(e) or e.__class__.__name__
        emit(f"ERROR copying {playlist.name}: {message}")
        return CopyResult.failure(message)
