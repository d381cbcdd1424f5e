"""
Script elements gatherer.

Ties the pieces together for one page load:

1. Resolve the main document transfer
2. Snapshot ``<script>`` elements from the live DOM
3. Classify captured transfers down to primary-context scripts
4. Fetch their bodies in series or in parallel
5. Correlate DOM elements with fetched transfers
6. Assemble the final artifact list
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

import pydantic

from scriptscope.gather import assembler, classifier, correlator, dom_snapshot, fetch_scheduler, main_document
from scriptscope.models import network, scripts
from scriptscope.models.scripts import FetchMode, ScriptArtifact
from scriptscope.utils import errors, logger
from scriptscope.utils.serialization import CAMEL_CONFIG

log = logger.create_logger("Script-Elements")


class PageDriver(Protocol):
    """The page-side operations the gatherer needs."""

    async def evaluate(self, expression: str) -> Any:
        """Evaluate *expression* in the page and return its JSON value."""
        ...

    async def get_request_content(self, request_id: str) -> str:
        """Return the body of a captured transfer, or raise."""
        ...


class ScriptElementsResult(pydantic.BaseModel):
    """Artifacts gathered for one page load."""

    model_config = CAMEL_CONFIG

    main_document: network.MainDocument | None = None
    fetch_mode: FetchMode
    scripts: list[ScriptArtifact] = pydantic.Field(default_factory=list)


class ScriptElementsGatherer:
    """Gathers script artifacts for a loaded page."""

    def __init__(self, primary_session_id: str | None = None) -> None:
        """Create a gatherer.

        Args:
            primary_session_id: Target session of the top-level page.
                Transfers from any other session are ignored.
        """
        self._primary_session_id = primary_session_id

    def _resolve_main_document(
        self,
        network_records: Sequence[network.NetworkRecord],
        page_url: str,
        dom_scripts: Sequence[scripts.ScriptDescriptor],
    ) -> network.MainDocument | None:
        """Resolve the main document, which is only mandatory when inline text needs attributing."""
        try:
            return main_document.find_main_document(network_records, page_url, self._primary_session_id)
        except errors.MissingMainDocumentError:
            if any(d.is_inline and d.inline_content for d in dom_scripts):
                raise
            log.warn("Main document not captured, no inline scripts to attribute", {"url": page_url})
            return None

    async def gather(
        self,
        driver: PageDriver,
        network_records: Sequence[network.NetworkRecord],
        page_url: str,
        fetch_mode: scripts.FetchMode,
    ) -> ScriptElementsResult:
        """Gather the reconciled script artifact list for *page_url*.

        Args:
            driver: Page evaluation and body retrieval.
            network_records: Every transfer captured during the load.
            page_url: Final URL of the page.
            fetch_mode: ``"series"`` on memory-constrained hosts,
                otherwise ``"parallel"``.

        Raises:
            MissingMainDocumentError: If inline scripts exist but the
                main document transfer cannot be resolved.
            SnapshotFormatError: If the DOM snapshot is malformed.
        """
        log.start_timer("script-elements")

        dom_scripts = await dom_snapshot.collect_script_elements(driver.evaluate)
        main_doc = self._resolve_main_document(network_records, page_url, dom_scripts)

        script_records = classifier.classify_script_records(network_records, self._primary_session_id)
        log.info(
            "Fetching script bodies",
            {"transfers": len(script_records), "mode": fetch_mode, "domScripts": len(dom_scripts)},
        )
        bodies = await fetch_scheduler.fetch_bodies(script_records, fetch_mode, driver.get_request_content)

        merged = correlator.correlate(
            dom_scripts,
            script_records,
            bodies,
            main_doc.transfer_id if main_doc else None,
        )
        artifacts = assembler.assemble_artifacts(merged)

        log.end_timer("script-elements", "Script elements gathered")
        log.success(
            "Script artifacts ready",
            {
                "total": len(artifacts),
                "networkOnly": sum(1 for a in artifacts if a.location == "network"),
                "withContent": sum(1 for a in artifacts if a.content),
            },
        )
        return ScriptElementsResult(main_document=main_doc, fetch_mode=fetch_mode, scripts=artifacts)
