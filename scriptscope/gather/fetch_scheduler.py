"""
Fetch scheduler for script transfer bodies.

Retrieves the body of every script transfer through a caller-supplied
primitive, either all at once or one at a time. Both modes share one
code path bounded by a semaphore: ``series`` is simply a concurrency
width of one. A failed retrieval becomes an empty body for that slot
and never disturbs its siblings.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence

from scriptscope.models import scripts
from scriptscope.utils import errors, logger

log = logger.create_logger("Fetch-Scheduler")

# Given a transfer id, return its body or raise.
FetchOne = Callable[[str], Awaitable[str | None]]


def concurrency_for_mode(mode: scripts.FetchMode, pending: int) -> int:
    """Return how many retrievals may be in flight at once.

    Args:
        mode: ``"series"`` or ``"parallel"``.
        pending: Number of retrievals to schedule.

    Returns:
        ``1`` in series mode; otherwise enough slots for every
        retrieval (at least one).
    """
    if mode == "series":
        return 1
    if mode == "parallel":
        return max(pending, 1)
    raise errors.ConfigurationError(f"Unknown fetch mode {mode!r}. Valid modes: series, parallel")


async def _fetch_or_empty(record: scripts.NetworkScriptRecord, fetch_one: FetchOne) -> scripts.FetchedBody:
    """Retrieve one body, degrading any failure to an empty body."""
    try:
        body = await fetch_one(record.transfer_id)
    except Exception as exc:
        log.debug(
            "Script body unavailable",
            {"transferId": record.transfer_id, "url": record.url, "error": errors.get_error_message(exc)},
        )
        body = ""
    return scripts.FetchedBody(transfer_id=record.transfer_id, body=body or "")


async def fetch_bodies(
    records: Sequence[scripts.NetworkScriptRecord],
    mode: scripts.FetchMode,
    fetch_one: FetchOne,
) -> list[scripts.FetchedBody]:
    """Fetch the body of every script transfer.

    The result is aligned 1:1 with *records*, whatever order the
    retrievals complete in.

    Args:
        records: Script transfers to retrieve, in capture order.
        mode: ``"parallel"`` issues every retrieval concurrently;
            ``"series"`` waits for each one to settle before
            starting the next, to cap in-flight response buffers
            on memory-constrained hosts.
        fetch_one: Retrieval primitive taking a transfer id.

    Returns:
        One ``FetchedBody`` per record; ``body`` is ``""`` where
        retrieval failed.
    """
    semaphore = asyncio.Semaphore(concurrency_for_mode(mode, len(records)))

    async def bounded(record: scripts.NetworkScriptRecord) -> scripts.FetchedBody:
        async with semaphore:
            return await _fetch_or_empty(record, fetch_one)

    bodies = await asyncio.gather(*(bounded(record) for record in records))

    log.debug(
        "Script bodies fetched",
        {
            "mode": mode,
            "requested": len(records),
            "retrieved": sum(1 for b in bodies if b.retrieved),
        },
    )
    return list(bodies)
