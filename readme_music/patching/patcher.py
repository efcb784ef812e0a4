from __future__ import annotations

import logging
from typing import Callable, Protocol

from readme_music.errors import PatchTargetMissing
from readme_music.patching.zone import apply_content
from readme_music.schemas.document import DocumentLocator, RemoteDocumentState
from readme_music.schemas.status import TrackStatus


logger = logging.getLogger("readme_music.patcher")

RenderFn = Callable[[TrackStatus], str]


class DocumentHost(Protocol):
    def fetch_document(self, locator: DocumentLocator) -> RemoteDocumentState: ...

    def write_document(
        self,
        locator: DocumentLocator,
        content: str,
        revision_token: str,
        message: str,
    ) -> None: ...


def commit_message(status: TrackStatus) -> str:
    return f"docs(readme): music -> {status.title} by {status.artist}"


class DocumentPatcher:
    def __init__(self, host: DocumentHost, placeholder: str) -> None:
        self.host = host
        self.placeholder = placeholder

    def patch(self, locator: DocumentLocator, render_fn: RenderFn, status: TrackStatus) -> bool:
        """Rewrite the update zone of ``locator``; True only once the host confirmed a write.

        Fetch and write errors propagate to the caller. A stale revision token
        surfaces as ``ConcurrentModificationError`` and is never retried here.
        """
        state = self.host.fetch_document(locator)
        rendered = render_fn(status)

        try:
            updated = apply_content(state.raw_content, rendered, self.placeholder)
        except PatchTargetMissing as exc:
            logger.warning("%s in %s - skipping update", exc, locator)
            return False

        if updated == state.raw_content:
            logger.info("README already up-to-date")
            return False

        self.host.write_document(
            locator,
            updated,
            state.revision_token,
            commit_message(status),
        )
        return True
