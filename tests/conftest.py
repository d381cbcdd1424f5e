"""Shared fixtures for the test suite."""

from __future__ import annotations

import pytest

from scriptscope.models import network, scripts

# ── Descriptor Factories ────────────────────────────────────────


def make_descriptor(
    src: str | None = None,
    inline_content: str | None = None,
    dom_path: str = "",
    location: scripts.DomLocation = "body",
) -> scripts.ScriptDescriptor:
    """Build a DOM script descriptor."""
    return scripts.ScriptDescriptor(
        src=src,
        inline_content=inline_content,
        dom_path=dom_path,
        location=location,
    )


def make_record(
    request_id: str,
    url: str,
    resource_type: str = "Script",
    session_id: str | None = None,
    start_time: float = 0.0,
) -> network.NetworkRecord:
    """Build a captured network transfer."""
    return network.NetworkRecord(
        request_id=request_id,
        url=url,
        resource_type=resource_type,
        session_id=session_id,
        start_time=start_time,
    )


def make_script_record(transfer_id: str, url: str) -> scripts.NetworkScriptRecord:
    """Build a classified script transfer."""
    return scripts.NetworkScriptRecord(transfer_id=transfer_id, url=url)


def make_body(transfer_id: str, body: str = "") -> scripts.FetchedBody:
    """Build a fetched body; empty means retrieval failed."""
    return scripts.FetchedBody(transfer_id=transfer_id, body=body)


# ── Page Fixtures ───────────────────────────────────────────────


@pytest.fixture()
def page_url() -> str:
    """URL of the page under test."""
    return "https://example.com/"


@pytest.fixture()
def page_records(page_url: str) -> list[network.NetworkRecord]:
    """A small page load: document, two scripts, a stylesheet and an iframe script."""
    return [
        make_record("T0", page_url, resource_type="Document", start_time=1.0),
        make_record("T1", "https://example.com/app.js", start_time=1.1),
        make_record("T2", "https://example.com/site.css", resource_type="Stylesheet", start_time=1.2),
        make_record("T3", "https://cdn.example.net/lib.js", start_time=1.3),
        make_record("T4", "https://ads.example.org/frame.js", session_id="OOPIF-1", start_time=1.4),
    ]


@pytest.fixture()
def raw_snapshot() -> list[dict[str, object]]:
    """Raw output of the DOM collector for the page above."""
    return [
        {
            "type": None,
            "src": None,
            "id": "boot",
            "async": False,
            "defer": False,
            "source": "head",
            "devtoolsNodePath": "1,HTML,0,HEAD,0,SCRIPT",
            "content": "window.boot = 1;",
        },
        {
            "type": "module",
            "src": "https://example.com/app.js",
            "id": None,
            "async": False,
            "defer": True,
            "source": "head",
            "devtoolsNodePath": "1,HTML,0,HEAD,1,SCRIPT",
            "content": None,
        },
        {
            "type": None,
            "src": "https://example.com/cached.js",
            "id": None,
            "async": True,
            "defer": False,
            "source": "body",
            "devtoolsNodePath": "1,HTML,1,BODY,3,SCRIPT",
            "content": None,
        },
    ]
