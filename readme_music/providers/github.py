from __future__ import annotations

import base64
import binascii
import json
from http.client import HTTPException
from typing import Any
from urllib.error import HTTPError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from readme_music.config.settings import Settings
from readme_music.errors import ConcurrentModificationError, DocumentWriteError, FetchError
from readme_music.schemas.document import DocumentLocator, RemoteDocumentState


_FETCH_OPERATION = "GitHub README fetch"
_CONFLICT_STATUSES = {409, 412}


class GitHubContentsClient:
    """Reads and conditionally writes a single file through the contents API."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def _endpoint(self, locator: DocumentLocator) -> str:
        base_url = self.settings.github_api_url.rstrip("/")
        return (
            f"{base_url}/repos/{quote(locator.owner)}/{quote(locator.repo)}"
            f"/contents/{quote(locator.path)}"
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.github_token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": self.settings.user_agent,
        }

    def _open_kwargs(self) -> dict[str, Any]:
        if self.settings.http_timeout_seconds is None:
            return {}
        return {"timeout": self.settings.http_timeout_seconds}

    def fetch_document(self, locator: DocumentLocator) -> RemoteDocumentState:
        url = f"{self._endpoint(locator)}?{urlencode({'ref': locator.branch})}"
        request = Request(url, headers=self._headers())
        try:
            with urlopen(request, **self._open_kwargs()) as response:
                body = response.read().decode("utf-8")
            payload = json.loads(body)
        except HTTPError as exc:
            raise FetchError(_FETCH_OPERATION, str(exc.reason), exc.code) from exc
        except (OSError, HTTPException) as exc:
            raise FetchError(_FETCH_OPERATION, str(exc)) from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise FetchError(_FETCH_OPERATION, f"malformed JSON: {exc}") from exc

        return decode_document(payload)

    def write_document(
        self,
        locator: DocumentLocator,
        content: str,
        revision_token: str,
        message: str,
    ) -> None:
        body = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "sha": revision_token,
            "branch": locator.branch,
        }
        headers = {**self._headers(), "Content-Type": "application/json"}
        request = Request(
            self._endpoint(locator),
            data=json.dumps(body).encode("utf-8"),
            headers=headers,
            method="PUT",
        )
        try:
            with urlopen(request, **self._open_kwargs()) as response:
                response.read()
        except HTTPError as exc:
            if exc.code in _CONFLICT_STATUSES:
                raise ConcurrentModificationError(
                    f"revision {revision_token} is stale", exc.code
                ) from exc
            raise DocumentWriteError(str(exc.reason), exc.code) from exc
        except (OSError, HTTPException) as exc:
            raise DocumentWriteError(str(exc)) from exc


def decode_document(payload: Any) -> RemoteDocumentState:
    if not isinstance(payload, dict):
        raise FetchError(_FETCH_OPERATION, "unexpected payload shape")
    if payload.get("type") != "file" or not payload.get("content"):
        raise FetchError(_FETCH_OPERATION, "README content missing in GitHub response")
    sha = payload.get("sha")
    if not isinstance(sha, str) or not sha:
        raise FetchError(_FETCH_OPERATION, "README revision sha missing in GitHub response")

    encoding = payload.get("encoding") or "base64"
    raw = payload["content"]
    if not isinstance(raw, str):
        raise FetchError(_FETCH_OPERATION, "README content is not a string")
    try:
        if encoding == "base64":
            decoded = base64.b64decode(raw).decode("utf-8")
        elif encoding in ("utf-8", "utf8"):
            decoded = raw
        else:
            raise FetchError(_FETCH_OPERATION, f"unsupported content encoding {encoding}")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise FetchError(_FETCH_OPERATION, f"undecodable content: {exc}") from exc

    return RemoteDocumentState(raw_content=decoded, revision_token=sha)
