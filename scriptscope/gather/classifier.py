"""
Narrow a page load's captured transfers down to its script transfers.
"""

from __future__ import annotations

from collections.abc import Iterable

from scriptscope.models import network, scripts


def classify_script_records(
    records: Iterable[network.NetworkRecord],
    primary_session_id: str | None = None,
) -> list[scripts.NetworkScriptRecord]:
    """Return the primary-context script transfers, in capture order.

    Transfers observed on another target session (out-of-process
    iframes) are excluded, as is every resource type other than
    ``Script``.
    """
    return [
        record.to_script_record(primary_session_id)
        for record in records
        if not record.is_frame_scoped(primary_session_id)
        and record.is_resource_type(network.RESOURCE_TYPE_SCRIPT)
    ]
