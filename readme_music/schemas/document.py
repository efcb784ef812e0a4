from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from readme_music.config.settings import Settings


class DocumentLocator(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    path: str
    branch: str

    @classmethod
    def from_settings(cls, settings: Settings) -> DocumentLocator:
        return cls(
            owner=settings.github_owner,
            repo=settings.github_repo,
            path=settings.readme_path,
            branch=settings.github_branch,
        )

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}:{self.path}@{self.branch}"


class RemoteDocumentState(BaseModel):
    raw_content: str
    revision_token: str
