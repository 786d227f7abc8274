#!/usr/bin/env python3
"""Configuration dataclasses for git-mirror-migrate."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MigrationDirection(Enum):
    """Enumeration for the direction of a migration run."""
    GITLAB_TO_GITHUB = "gitlab-to-github"
    GITHUB_TO_GITLAB = "github-to-gitlab"

    @property
    def mirror_prefix(self) -> str:
        if self is MigrationDirection.GITLAB_TO_GITHUB:
            return "gl2gh"
        return "gh2gl"


class OwnerType(Enum):
    """Enumeration for GitHub owner kinds."""
    USER = "user"
    ORG = "org"


@dataclass
class GitLabConfig:
    """GitLab-specific configuration."""
    url: str
    token: str
    group_id: Optional[str] = None
    target_namespace_id: Optional[int] = None


@dataclass
class GitHubConfig:
    """GitHub-specific configuration."""
    token: str
    owner: str
    owner_type: OwnerType = OwnerType.USER
    api_url: str = "https://api.github.com"


@dataclass
class NamingPolicy:
    """Destination naming configuration."""
    use_original_name: bool = True
    preserve_namespace: bool = True
    preserve_source_owner_as_group: bool = True


@dataclass
class MigrationBehavior:
    """Run behavior configuration."""
    mirror_root: str
    include_archived: bool = False
    dry_run: bool = False
    migrate_lfs: bool = False


@dataclass
class Config:
    """Main configuration for a migration run."""
    gitlab: GitLabConfig
    github: GitHubConfig
    naming: NamingPolicy
    behavior: MigrationBehavior
    direction: Optional[MigrationDirection] = None
