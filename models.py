#!/usr/bin/env python3
"""Repository descriptors and per-run results.

Source descriptors are built once from the API objects returned by the
listers and never change afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from config import MigrationDirection


@dataclass(frozen=True)
class GitLabProject:
    """A GitLab project as seen by the lister."""
    id: int
    path: str
    path_with_namespace: str
    http_url_to_repo: str
    description: str = ""
    archived: bool = False

    @property
    def identity(self) -> str:
        return self.path_with_namespace

    @classmethod
    def from_api(cls, project: Any) -> "GitLabProject":
        return cls(
            id=getattr(project, "id", 0),
            path=getattr(project, "path", ""),
            path_with_namespace=getattr(project, "path_with_namespace", ""),
            http_url_to_repo=getattr(project, "http_url_to_repo", ""),
            description=getattr(project, "description", None) or "",
            archived=bool(getattr(project, "archived", False)),
        )


@dataclass(frozen=True)
class GitHubRepo:
    """A GitHub repository as seen by the lister."""
    name: str
    full_name: str
    clone_url: str
    owner_login: str
    description: str = ""

    @property
    def identity(self) -> str:
        return self.full_name or self.name

    @classmethod
    def from_api(cls, repo: Any) -> "GitHubRepo":
        owner = getattr(repo, "owner", None)
        return cls(
            name=getattr(repo, "name", ""),
            full_name=getattr(repo, "full_name", ""),
            clone_url=getattr(repo, "clone_url", ""),
            owner_login=getattr(owner, "login", "") if owner is not None else "",
            description=getattr(repo, "description", None) or "",
        )


@dataclass
class EnsureResult:
    """Outcome of provisioning a destination repository."""
    created: bool
    handle: Any = None


@dataclass
class MigrationOutcome:
    """Result of migrating a single repository."""
    source: str
    success: bool
    error: Optional[str] = None


@dataclass
class MigrationTally:
    """Success/failure counts for a run."""
    direction: Optional[MigrationDirection] = None
    succeeded: int = 0
    failed: int = 0

    def record(self, outcome: MigrationOutcome) -> None:
        if outcome.success:
            self.succeeded += 1
        else:
            self.failed += 1

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
