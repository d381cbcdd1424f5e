"""Tests for scriptscope.gather.script_elements — end-to-end gathering with a fake page."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from scriptscope.gather import dom_snapshot
from scriptscope.gather.script_elements import ScriptElementsGatherer
from scriptscope.models import network
from scriptscope.utils import errors

from tests.conftest import make_record


class FakeDriver:
    """Page driver serving a canned DOM snapshot and response bodies."""

    def __init__(self, snapshot: list[dict[str, object]], bodies: dict[str, str]) -> None:
        self.snapshot = snapshot
        self.bodies = bodies
        self.requested: list[str] = []

    async def evaluate(self, expression: str) -> Any:
        assert expression == dom_snapshot.COLLECT_SCRIPT_ELEMENTS_JS
        return self.snapshot

    async def get_request_content(self, request_id: str) -> str:
        self.requested.append(request_id)
        if request_id not in self.bodies:
            raise RuntimeError("No data found for resource with given identifier")
        return self.bodies[request_id]


def _gather(driver: FakeDriver, records: list[network.NetworkRecord], page_url: str, mode: str = "parallel"):
    return asyncio.run(ScriptElementsGatherer().gather(driver, records, page_url, mode))  # type: ignore[arg-type]


class TestGather:
    """Tests for ScriptElementsGatherer.gather()."""

    def test_full_page(
        self,
        raw_snapshot: list[dict[str, object]],
        page_records: list[network.NetworkRecord],
        page_url: str,
    ) -> None:
        driver = FakeDriver(raw_snapshot, {"T1": "app()", "T3": "lib()", "T4": "frame()"})
        result = _gather(driver, page_records, page_url)

        assert result.main_document is not None
        assert result.main_document.transfer_id == "T0"
        assert result.fetch_mode == "parallel"

        inline, app, cached, lib = result.scripts
        assert inline.transfer_id == "T0"
        assert inline.content == "window.boot = 1;"
        assert (app.transfer_id, app.content) == ("T1", "app()")
        assert (cached.transfer_id, cached.content) == (None, None)
        assert lib.location == "network"
        assert (lib.src, lib.transfer_id, lib.content) == ("https://cdn.example.net/lib.js", "T3", "lib()")

    def test_only_primary_scripts_are_fetched(
        self,
        raw_snapshot: list[dict[str, object]],
        page_records: list[network.NetworkRecord],
        page_url: str,
    ) -> None:
        driver = FakeDriver(raw_snapshot, {"T1": "app()", "T3": "lib()"})
        _gather(driver, page_records, page_url)
        assert sorted(driver.requested) == ["T1", "T3"]

    def test_failed_body_leaves_dom_script_empty(
        self,
        raw_snapshot: list[dict[str, object]],
        page_records: list[network.NetworkRecord],
        page_url: str,
    ) -> None:
        driver = FakeDriver(raw_snapshot, {"T3": "lib()"})
        result = _gather(driver, page_records, page_url)
        assert result.scripts[1].content is None
        assert result.scripts[1].transfer_id is None
        assert len(result.scripts) == 4

    def test_series_matches_parallel(
        self,
        raw_snapshot: list[dict[str, object]],
        page_records: list[network.NetworkRecord],
        page_url: str,
    ) -> None:
        bodies = {"T1": "app()", "T3": "lib()"}
        parallel = _gather(FakeDriver(raw_snapshot, bodies), page_records, page_url, "parallel")
        series = _gather(FakeDriver(raw_snapshot, bodies), page_records, page_url, "series")
        assert parallel.scripts == series.scripts
        assert series.fetch_mode == "series"

    def test_missing_main_document_with_inline_scripts(
        self,
        raw_snapshot: list[dict[str, object]],
        page_url: str,
    ) -> None:
        records = [make_record("T1", "https://example.com/app.js")]
        with pytest.raises(errors.MissingMainDocumentError):
            _gather(FakeDriver(raw_snapshot, {}), records, page_url)

    def test_missing_main_document_without_inline_scripts(self, page_url: str) -> None:
        snapshot = [{"src": "https://example.com/app.js", "source": "body", "devtoolsNodePath": "0,SCRIPT"}]
        records = [make_record("T1", "https://example.com/app.js")]
        result = _gather(FakeDriver(snapshot, {"T1": "app()"}), records, page_url)
        assert result.main_document is None
        assert result.scripts[0].transfer_id == "T1"

    def test_result_serializes_camel_case(
        self,
        raw_snapshot: list[dict[str, object]],
        page_records: list[network.NetworkRecord],
        page_url: str,
    ) -> None:
        result = _gather(FakeDriver(raw_snapshot, {"T1": "app()"}), page_records, page_url)
        dumped = result.model_dump(by_alias=True)
        assert dumped["fetchMode"] == "parallel"
        assert dumped["mainDocument"] == {"transferId": "T0", "url": page_url}
        assert dumped["scripts"][1]["transferId"] == "T1"
