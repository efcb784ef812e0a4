import pytest

from conftest import build_status
from readme_music.errors import ConcurrentModificationError, FetchError
from readme_music.patching.patcher import DocumentPatcher, commit_message
from readme_music.schemas.document import DocumentLocator, RemoteDocumentState


LOCATOR = DocumentLocator(owner="octo", repo="profile", path="README.md", branch="main")


class FakeHost:
    def __init__(self, content: str, revision_token: str = "abc") -> None:
        self.content = content
        self.revision_token = revision_token
        self.fetches = 0
        self.writes: list[dict] = []
        self.reject_writes = False

    def fetch_document(self, locator: DocumentLocator) -> RemoteDocumentState:
        self.fetches += 1
        return RemoteDocumentState(raw_content=self.content, revision_token=self.revision_token)

    def write_document(
        self, locator: DocumentLocator, content: str, revision_token: str, message: str
    ) -> None:
        self.writes.append(
            {"content": content, "revision_token": revision_token, "message": message}
        )
        if self.reject_writes or revision_token != self.revision_token:
            raise ConcurrentModificationError(f"revision {revision_token} is stale", 409)
        self.content = content
        self.revision_token = f"{revision_token}+1"


class FailingHost(FakeHost):
    def fetch_document(self, locator: DocumentLocator) -> RemoteDocumentState:
        raise FetchError("GitHub README fetch", "Not Found", 404)


def fixed_render(status) -> str:
    return f"<samp>{status.title}</samp>"


def test_patching_twice_with_same_content_writes_once() -> None:
    host = FakeHost("# Me\n<span data-music>old</span>\n")
    patcher = DocumentPatcher(host, "%music%")
    status = build_status()

    assert patcher.patch(LOCATOR, fixed_render, status) is True
    assert patcher.patch(LOCATOR, fixed_render, status) is False

    assert len(host.writes) == 1
    assert host.content == "# Me\n<span data-music><samp>Song A</samp></span>\n"
    assert host.writes[0]["revision_token"] == "abc"
    assert host.writes[0]["message"] == "docs(readme): music -> Song A by Artist X"


def test_placeholder_upgrade_then_noop() -> None:
    host = FakeHost("before %music% after")
    patcher = DocumentPatcher(host, "%music%")
    status = build_status()

    assert patcher.patch(LOCATOR, fixed_render, status) is True
    assert host.content == "before <span data-music><samp>Song A</samp></span> after"
    assert "%music%" not in host.content

    assert patcher.patch(LOCATOR, fixed_render, status) is False
    assert len(host.writes) == 1


def test_missing_target_skips_write() -> None:
    host = FakeHost("no markers here")
    patcher = DocumentPatcher(host, "%music%")

    assert patcher.patch(LOCATOR, fixed_render, build_status()) is False
    assert host.writes == []


def test_stale_revision_propagates() -> None:
    host = FakeHost("<span data-music>old</span>")
    host.reject_writes = True
    patcher = DocumentPatcher(host, "%music%")

    with pytest.raises(ConcurrentModificationError):
        patcher.patch(LOCATOR, fixed_render, build_status())

    assert len(host.writes) == 1
    assert host.writes[0]["revision_token"] == "abc"
    assert host.content == "<span data-music>old</span>"


def test_fetch_failure_propagates_without_write() -> None:
    host = FailingHost("")
    patcher = DocumentPatcher(host, "%music%")

    with pytest.raises(FetchError):
        patcher.patch(LOCATOR, fixed_render, build_status())

    assert host.writes == []


def test_commit_message() -> None:
    status = build_status(title="Blue", artist="Joni")
    assert commit_message(status) == "docs(readme): music -> Blue by Joni"
