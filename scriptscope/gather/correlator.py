"""
Correlate DOM script elements with captured script transfers.

Every successfully fetched transfer claims the first DOM element, in
document order, whose ``src`` equals the transfer URL and which has
not been claimed yet. Repeated includes of one URL therefore each take
one slot. Transfers that claim nothing become network-only artifacts.
Inline scripts are attributed to the main document transfer, since
their text arrived in the page's own response.

URLs are compared verbatim. Query strings and redirects are not
normalised.
"""

from __future__ import annotations

from collections.abc import Sequence

from scriptscope.models import scripts
from scriptscope.utils import errors, logger

log = logger.create_logger("Correlator")


def _has_inline_content(descriptor: scripts.ScriptDescriptor) -> bool:
    return descriptor.is_inline and bool(descriptor.inline_content)


def correlate(
    dom_scripts: Sequence[scripts.ScriptDescriptor],
    network_records: Sequence[scripts.NetworkScriptRecord],
    fetched_bodies: Sequence[scripts.FetchedBody],
    main_doc_transfer_id: str | None,
) -> list[scripts.ScriptArtifact]:
    """Merge DOM descriptors and fetched transfers into one artifact list.

    Args:
        dom_scripts: Script elements in document order. Not modified.
        network_records: Script transfers in capture order.
        fetched_bodies: Bodies aligned 1:1 with *network_records*.
        main_doc_transfer_id: Transfer id of the top-level document.

    Returns:
        One artifact per DOM descriptor, in document order, followed
        by one network-only artifact per fetched transfer that matched
        no element, in capture order.

    Raises:
        MissingMainDocumentError: If an inline script has content but
            no main document transfer id was supplied.
        ConfigurationError: If *fetched_bodies* is not aligned with
            *network_records*.
    """
    if len(fetched_bodies) != len(network_records):
        raise errors.ConfigurationError(
            f"Fetched bodies ({len(fetched_bodies)}) are not aligned with script transfers ({len(network_records)})"
        )

    artifacts = [scripts.ScriptArtifact.from_descriptor(d) for d in dom_scripts]

    # 1. Inline text came from the main document response.
    for artifact, descriptor in zip(artifacts, dom_scripts):
        if _has_inline_content(descriptor):
            if not main_doc_transfer_id:
                raise errors.MissingMainDocumentError(
                    "Inline scripts were found but no main document transfer id was provided"
                )
            artifact.transfer_id = main_doc_transfer_id

    # 2. Only transfers that actually returned a body take part.
    bodies = {fetched.transfer_id: fetched.body for fetched in fetched_bodies if fetched.retrieved}

    network_only: list[scripts.ScriptArtifact] = []
    matched = 0
    for record in network_records:
        content = bodies.get(record.transfer_id)
        if not content:
            continue

        claimed = next(
            (a for a in artifacts if a.src == record.url and a.transfer_id is None),
            None,
        )
        if claimed is not None:
            claimed.transfer_id = record.transfer_id
            claimed.content = content
            matched += 1
        else:
            network_only.append(scripts.ScriptArtifact.network_only(record, content))

    log.debug(
        "Correlated script elements",
        {
            "domScripts": len(dom_scripts),
            "scriptTransfers": len(network_records),
            "retrieved": len(bodies),
            "matched": matched,
            "networkOnly": len(network_only),
        },
    )
    return artifacts + network_only
