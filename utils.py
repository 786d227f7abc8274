#!/usr/bin/env python3
"""Utility functions for git-mirror-migrate."""

from __future__ import annotations

import re
import threading
import time
from typing import List, Union
from urllib.parse import quote

from config import MigrationDirection, NamingPolicy
from logging_utils import Logger
from models import GitHubRepo, GitLabProject

GITHUB_NAMESPACE_SEP = "--"


class RateLimiter:
    """Rate limiter to prevent abuse and respect API limits."""

    def __init__(self, max_requests_per_minute: int = 60):
        self.max_requests = max_requests_per_minute
        self.requests: List[float] = []
        self.lock = threading.Lock()

    def wait_if_needed(self, operation_type: str = "API") -> None:
        """Wait if necessary to respect rate limits."""
        current_time = time.time()

        with self.lock:
            self._clean_old_requests(current_time)
            if len(self.requests) >= self.max_requests:
                wait_time = 60 - (current_time - self.requests[0])
                if wait_time > 0:
                    Logger.security_event(
                        "RATE_LIMIT_HIT",
                        f"rate limit reached for {operation_type}, "
                        f"waiting {wait_time:.2f}s",
                    )
                    time.sleep(wait_time)
                    self._clean_old_requests(time.time())
            self.requests.append(current_time)

    def _clean_old_requests(self, current_time: float) -> None:
        """Remove requests older than 1 minute."""
        cutoff_time = current_time - 60
        self.requests = [
            req_time for req_time in self.requests if req_time > cutoff_time
        ]


def sanitize_repo_name(name: str) -> str:
    """Sanitize a string to a valid GitLab project path (lower-case).

    Leading and trailing dots are dropped, so "." and ".." become "".
    """
    name = str(name).lower()
    name = re.sub(r"[^a-z0-9._-]+", "-", name)
    return re.sub(r"-+", "-", name).strip("-.")


def sanitize_group_path(name: str) -> str:
    """Sanitize an owner login to a GitLab group path.

    Underscores are folded into dashes as well: 'Acme_Org' -> 'acme-org'.
    """
    return sanitize_repo_name(str(name).replace("_", "-"))


def sanitize_github_segment(name: str) -> str:
    """Sanitize a single path segment to a valid GitHub repository name."""
    name = re.sub(r"[^A-Za-z0-9._-]+", "-", str(name))
    return re.sub(r"-+", "-", name).strip("-.")


def flatten_github_namespace(path_with_namespace: str) -> str:
    """Fold a namespaced path into one GitHub name.

    Example: 'team/sub-project' -> 'team--sub-project'
    """
    parts = [sanitize_github_segment(p) for p in path_with_namespace.split("/")]
    return GITHUB_NAMESPACE_SEP.join(p for p in parts if p)


def build_github_repo_name(project: GitLabProject, policy: NamingPolicy) -> str:
    """Map a GitLab project to a GitHub repository name."""
    if policy.use_original_name:
        return sanitize_github_segment(project.path)
    if policy.preserve_namespace:
        return flatten_github_namespace(project.path_with_namespace)
    return sanitize_github_segment(project.path)


def build_gitlab_project_path(
    repo: GitHubRepo, policy: NamingPolicy, default_owner: str = ""
) -> str:
    """Map a GitHub repository to a GitLab project path."""
    if policy.use_original_name:
        return sanitize_repo_name(repo.name)
    if policy.preserve_namespace:
        full_name = repo.full_name or f"{default_owner}/{repo.name}"
        return sanitize_repo_name(full_name)
    return sanitize_repo_name(repo.name)


def resolve_destination_name(
    source: Union[GitLabProject, GitHubRepo],
    policy: NamingPolicy,
    default_owner: str = "",
) -> str:
    """Return the destination identifier for either kind of source repository.

    An empty result is returned as-is; callers reject it.
    """
    if isinstance(source, GitLabProject):
        return build_github_repo_name(source, policy)
    return build_gitlab_project_path(source, policy, default_owner)


def mirror_dir_name(direction: MigrationDirection, identity: str) -> str:
    """Directory name of the local bare mirror for a source repository."""
    return f"{direction.mirror_prefix}__{identity.replace('/', '__')}.git"


def with_credentials(url: str, username: str, token: str) -> str:
    """Embed HTTP basic credentials right after the URL scheme."""
    return url.replace("://", f"://{username}:{quote(token, safe='')}@", 1)
