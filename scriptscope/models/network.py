"""Pydantic models for raw network capture and the resolved main document."""

from __future__ import annotations

import pydantic

from scriptscope.models import scripts
from scriptscope.utils.serialization import CAMEL_CONFIG

# CDP ``Network.ResourceType`` names used by the classifier.
RESOURCE_TYPE_DOCUMENT = "Document"
RESOURCE_TYPE_SCRIPT = "Script"


class NetworkRecord(pydantic.BaseModel):
    """One network transfer captured during a page load.

    ``session_id`` is set when the transfer was observed on a
    different target session (an out-of-process iframe).
    """

    model_config = CAMEL_CONFIG

    request_id: str
    url: str
    resource_type: str
    session_id: str | None = None
    frame_id: str | None = None
    mime_type: str | None = None
    status_code: int | None = None
    start_time: float = 0.0
    from_cache: bool = False
    failed: bool = False

    def is_resource_type(self, resource_type: str) -> bool:
        """Case-insensitive resource type check."""
        return self.resource_type.lower() == resource_type.lower()

    def is_frame_scoped(self, primary_session_id: str | None = None) -> bool:
        """True when the transfer belongs to a target other than the primary one."""
        return self.session_id is not None and self.session_id != primary_session_id

    def to_script_record(self, primary_session_id: str | None = None) -> scripts.NetworkScriptRecord:
        """Project this record onto the script-transfer shape."""
        return scripts.NetworkScriptRecord(
            transfer_id=self.request_id,
            url=self.url,
            frame_scoped=self.is_frame_scoped(primary_session_id),
        )


class MainDocument(pydantic.BaseModel):
    """The page's own top-level response."""

    model_config = CAMEL_CONFIG

    transfer_id: str
    url: str
