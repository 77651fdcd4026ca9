"""Pagination, track extraction and batching helpers.

Spotify list endpoints return pages shaped like
``{"items": [...], "next": "<url or null>"}``; these helpers follow the
``next`` links and cut write payloads down to the API's per-request limit.
"""

import logging

ADD_BATCH_SIZE = 100  # max URIs per POST /playlists/{id}/tracks (API limit)
TRACK_URI_PREFIX = "spotify:track:"

log = logging.getLogger("paging")


def paginate(fetch_page, locator):
    """Yield page payloads starting at locator until a page has no next link.

    fetch_page raises CollectionFetchError on a non-success response, which
    ends the iteration; nothing is retried.
    """
    page_no = 0
    while locator:
        page = fetch_page(locator)
        page_no += 1
        log.debug(f"Fetched page {page_no}: {locator}")
        yield page
        locator = page.get("next")


def page_items(page):
    """Default extractor: the page's items, minus null entries."""
    return [item for item in page.get("items") or [] if item is not None]


def collect_items(fetch_page, locator, extract=page_items):
    """Follow every page from locator and concatenate extract(page) in order.

    Returns only once the last page is in, so a failure part-way through
    propagates without handing the caller a truncated list.
    """
    items = []
    for page in paginate(fetch_page, locator):
        items.extend(extract(page))
    return items


def extract_track_uris(page):
    """Return catalog track URIs from one page of playlist-track items.

    Items without a track object (removed tracks), without a URI (local
    files) or with a non-track URI (podcast episodes) are skipped.
    """
    uris = []
    for item in page.get("items") or []:
        track = (item or {}).get("track")
        if not track:
            continue
        uri = track.get("uri")
        if uri and uri.startswith(TRACK_URI_PREFIX):
            uris.append(uri)
    return uris


def chunked(items, size=ADD_BATCH_SIZE):
    """Split items into consecutive lists of at most size elements."""
    if size <= 0:
        raise ValueError(f"batch size must be positive, got {size}")
    items = list(items)
    return [items[start:start + size] for start in range(0, len(items), size)]
