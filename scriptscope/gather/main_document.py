"""
Main document resolution.

Finds the transfer that delivered the page itself, so that inline
script text can be attributed to it.
"""

from __future__ import annotations

from collections.abc import Sequence

from scriptscope.models import network
from scriptscope.utils import errors, url as url_mod


def find_main_document(
    records: Sequence[network.NetworkRecord],
    page_url: str,
    primary_session_id: str | None = None,
) -> network.MainDocument:
    """Resolve the main document transfer for a page load.

    Prefers the document transfer whose URL equals *page_url* (ignoring
    any fragment). Falls back to the earliest primary-context document
    transfer, which covers pages reached through redirects.

    Raises:
        MissingMainDocumentError: If no document transfer was captured.
    """
    documents = [
        record
        for record in records
        if record.is_resource_type(network.RESOURCE_TYPE_DOCUMENT) and not record.is_frame_scoped(primary_session_id)
    ]

    for record in documents:
        if url_mod.equal_without_fragment(record.url, page_url):
            return network.MainDocument(transfer_id=record.request_id, url=record.url)

    if not documents:
        raise errors.MissingMainDocumentError(f"No document transfer was captured for {page_url}")

    # min() keeps capture order for equal start times.
    earliest = min(documents, key=lambda record: record.start_time)
    return network.MainDocument(transfer_id=earliest.request_id, url=earliest.url)
