"""Pydantic models for DOM script descriptors, script transfers and artifacts."""

from __future__ import annotations

from typing import Literal

import pydantic

from scriptscope.utils.serialization import CAMEL_CONFIG

DomLocation = Literal["head", "body"]
ArtifactLocation = Literal["head", "body", "network"]
FetchMode = Literal["series", "parallel"]


class ScriptDescriptor(pydantic.BaseModel):
    """One ``<script>`` element observed in the rendered DOM.

    Descriptors are positional: one per element, in document order.
    ``transfer_id`` is always ``None`` until correlation.
    """

    model_config = CAMEL_CONFIG

    mime_type: str | None = None
    src: str | None = None
    dom_id: str | None = None
    is_async: bool = False
    is_deferred: bool = False
    location: DomLocation = "body"
    dom_path: str = ""
    inline_content: str | None = None
    transfer_id: str | None = None

    @property
    def is_inline(self) -> bool:
        """True when the element has no ``src`` attribute."""
        return self.src is None


class NetworkScriptRecord(pydantic.BaseModel):
    """A captured network transfer classified as a script."""

    model_config = CAMEL_CONFIG

    transfer_id: str
    url: str
    frame_scoped: bool = False


class FetchedBody(pydantic.BaseModel):
    """The retrieved body of one script transfer.

    An empty ``body`` means the content could not be retrieved.
    """

    model_config = CAMEL_CONFIG

    transfer_id: str
    body: str = ""

    @property
    def retrieved(self) -> bool:
        """True when a non-empty body was fetched."""
        return bool(self.body)


class ScriptArtifact(pydantic.BaseModel):
    """A reconciled script: DOM-sourced, or network-only when ``location`` is ``"network"``."""

    model_config = CAMEL_CONFIG

    mime_type: str | None = None
    src: str | None = None
    dom_id: str | None = None
    is_async: bool = False
    is_deferred: bool = False
    location: ArtifactLocation
    dom_path: str = ""
    transfer_id: str | None = None
    content: str | None = None

    @classmethod
    def from_descriptor(cls, descriptor: ScriptDescriptor) -> ScriptArtifact:
        """Build an artifact from a DOM descriptor, carrying inline text as content."""
        return cls(
            mime_type=descriptor.mime_type,
            src=descriptor.src,
            dom_id=descriptor.dom_id,
            is_async=descriptor.is_async,
            is_deferred=descriptor.is_deferred,
            location=descriptor.location,
            dom_path=descriptor.dom_path,
            transfer_id=descriptor.transfer_id,
            content=descriptor.inline_content,
        )

    @classmethod
    def network_only(cls, record: NetworkScriptRecord, content: str) -> ScriptArtifact:
        """Synthesize an artifact for a script transfer with no DOM element."""
        return cls(
            mime_type=None,
            src=record.url,
            dom_id=None,
            is_async=False,
            is_deferred=False,
            location="network",
            dom_path="",
            transfer_id=record.transfer_id,
            content=content,
        )
