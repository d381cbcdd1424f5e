"""
DOM snapshot of ``<script>`` elements.

Defines the page function evaluated inside the rendered page and the
validation that turns its raw output into ``ScriptDescriptor`` models.
The page function walks the document and any open shadow roots in
declaration order and reports one entry per ``<script>`` element.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import pydantic

from scriptscope.models import scripts
from scriptscope.utils import errors, logger

log = logger.create_logger("DOM-Snapshot")

# Evaluates a JavaScript expression in the page and returns its JSON result.
Evaluate = Callable[[str], Awaitable[Any]]

COLLECT_SCRIPT_ELEMENTS_JS = """
(() => {
    const getElementsInDocument = (selector) => {
        const results = [];
        const walk = (nodes) => {
            for (const el of nodes) {
                if (el.matches(selector)) results.push(el);
                if (el.shadowRoot) walk(el.shadowRoot.querySelectorAll('*'));
            }
        };
        walk(document.querySelectorAll('*'));
        return results;
    };

    // Comma-joined "index,NODENAME" pairs from the root down to the node.
    // Whitespace-only text siblings are not counted.
    const getNodePath = (node) => {
        const getNodeIndex = (n) => {
            let index = 0;
            let prev;
            while ((prev = n.previousSibling)) {
                n = prev;
                if (n.nodeType === Node.TEXT_NODE && n.nodeValue.trim().length === 0) continue;
                index++;
            }
            return index;
        };
        const path = [];
        while (node && node.parentNode) {
            path.push([getNodeIndex(node), node.nodeName]);
            node = node.parentNode;
        }
        path.reverse();
        return path.join(',');
    };

    return getElementsInDocument('script').map((script) => ({
        type: script.type || null,
        src: script.src || null,
        id: script.id || null,
        async: script.async,
        defer: script.defer,
        source: script.closest('head') ? 'head' : 'body',
        devtoolsNodePath: getNodePath(script),
        content: script.src ? null : script.text,
    }));
})()
"""


class RawScriptElement(pydantic.BaseModel):
    """Shape of one entry returned by ``COLLECT_SCRIPT_ELEMENTS_JS``."""

    model_config = pydantic.ConfigDict(populate_by_name=True)

    type: str | None = None
    src: str | None = None
    id: str | None = None
    is_async: bool = pydantic.Field(default=False, alias="async")
    defer: bool = False
    source: scripts.DomLocation = "body"
    devtools_node_path: str = pydantic.Field(default="", alias="devtoolsNodePath")
    content: str | None = None

    def to_descriptor(self) -> scripts.ScriptDescriptor:
        """Convert to a descriptor; empty attributes become ``None``."""
        return scripts.ScriptDescriptor(
            mime_type=self.type or None,
            src=self.src or None,
            dom_id=self.id or None,
            is_async=self.is_async,
            is_deferred=self.defer,
            location=self.source,
            dom_path=self.devtools_node_path,
            inline_content=None if self.src else self.content,
            transfer_id=None,
        )


def parse_script_elements(raw: object) -> list[scripts.ScriptDescriptor]:
    """Validate the page function's output into script descriptors.

    Raises:
        SnapshotFormatError: If *raw* is not a list of script entries.
    """
    if not isinstance(raw, list):
        raise errors.SnapshotFormatError(f"Expected a list of script elements, got {type(raw).__name__}")

    descriptors: list[scripts.ScriptDescriptor] = []
    for index, entry in enumerate(raw):
        try:
            element = RawScriptElement.model_validate(entry)
        except pydantic.ValidationError as exc:
            raise errors.SnapshotFormatError(f"Malformed script element at index {index}: {exc}") from exc
        descriptors.append(element.to_descriptor())
    return descriptors


async def collect_script_elements(evaluate: Evaluate) -> list[scripts.ScriptDescriptor]:
    """Evaluate the collector in the page and return its descriptors."""
    raw = await evaluate(COLLECT_SCRIPT_ELEMENTS_JS)
    descriptors = parse_script_elements(raw)
    log.debug(
        "Collected script elements",
        {
            "total": len(descriptors),
            "inline": sum(1 for d in descriptors if d.is_inline),
        },
    )
    return descriptors
