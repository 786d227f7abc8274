#!/usr/bin/env python3
"""GitLab API wrapper: project discovery, project provisioning, subgroups."""

from __future__ import annotations

from typing import Any, Iterator, Optional

import gitlab

from config import GitLabConfig
from errors import ConflictError, TransportError
from logging_utils import Logger
from models import EnsureResult, GitLabProject
from utils import RateLimiter

PER_PAGE = 100
CONFLICT_STATUSES = (400, 409)


def _transport_error(action: str, error: gitlab.exceptions.GitlabError) -> TransportError:
    status = getattr(error, "response_code", None)
    message = getattr(error, "error_message", None) or str(error)
    return TransportError(
        f"GitLab API {action} -> {status}: {message}",
        status=status,
        payload=message,
    )


class GitLabAPI:
    """Wrapper around the GitLab API for both migration directions."""

    def __init__(self, config: GitLabConfig) -> None:
        self.config = config
        self.api: Optional[gitlab.Gitlab] = None
        self.rate_limiter = RateLimiter(
            max_requests_per_minute=30
        )  # Conservative GitLab rate limit

    def connect(self) -> None:
        Logger.info(f"init gitlab API: {self.config.url}")
        try:
            self.api = gitlab.Gitlab(url=self.config.url, private_token=self.config.token)
            self.api.auth()
        except gitlab.exceptions.GitlabAuthenticationError as e:
            raise _transport_error("authenticate", e) from e
        except gitlab.exceptions.GitlabError as e:
            raise _transport_error("connect", e) from e

    def _require_api(self) -> gitlab.Gitlab:
        if self.api is None:
            raise TransportError("gitlab API not initialized")
        return self.api

    def iter_projects(self, include_archived: bool = False) -> Iterator[GitLabProject]:
        """Yield the source projects, group-scoped or membership-scoped."""
        api = self._require_api()
        kwargs: dict = {"iterator": True, "per_page": PER_PAGE}
        if not include_archived:
            kwargs["archived"] = False

        if self.config.group_id:
            Logger.info(f"discovering projects under group: {self.config.group_id}")
            manager = api.groups.get(self.config.group_id, lazy=True).projects
            kwargs["include_subgroups"] = True
        else:
            Logger.info("discovering projects the token is a member of")
            manager = api.projects
            kwargs["membership"] = True

        try:
            self.rate_limiter.wait_if_needed("GitLab API")
            for project in manager.list(**kwargs):
                item = GitLabProject.from_api(project)
                if not include_archived and item.archived:
                    continue
                Logger.debug(f"found: {item.path_with_namespace}")
                yield item
        except gitlab.exceptions.GitlabError as e:
            raise _transport_error("GET projects", e) from e

    def _personal_namespace(self, api: gitlab.Gitlab) -> str:
        """Full path of the token user's namespace (its username)."""
        user = getattr(api, "user", None)
        if user is None:
            self.rate_limiter.wait_if_needed("GitLab API")
            api.auth()
            user = api.user
        return getattr(user, "username", "") or ""

    def find_project(self, path: str, namespace_id: Optional[int] = None) -> Optional[Any]:
        """Return the project at `path` inside the target namespace, or None.

        Without a namespace id the target is the token user's personal
        namespace. Every result page is read.
        """
        api = self._require_api()
        action = f"GET projects?search={path}"
        try:
            self.rate_limiter.wait_if_needed("GitLab API")
            if namespace_id is not None:
                action = f"GET groups/{namespace_id}/projects?search={path}"
                candidates = api.groups.get(namespace_id, lazy=True).projects.list(
                    search=path, simple=True, iterator=True, per_page=PER_PAGE
                )
                personal = None
            else:
                action = f"GET projects?owned=true&search={path}"
                personal = self._personal_namespace(api)
                candidates = api.projects.list(
                    search=path, owned=True, simple=True, iterator=True, per_page=PER_PAGE
                )

            for project in candidates:
                if getattr(project, "path", None) != path:
                    continue
                namespace = getattr(project, "namespace", None) or {}
                if namespace_id is not None:
                    if namespace.get("id") != namespace_id:
                        continue
                elif not personal or namespace.get("full_path") != personal:
                    continue
                return project
        except gitlab.exceptions.GitlabError as e:
            raise _transport_error(action, e) from e
        return None

    def ensure_project(
        self, path: str, description: str, namespace_id: Optional[int] = None
    ) -> EnsureResult:
        """Reuse the project at `path` or create it private."""
        existing = self.find_project(path, namespace_id)
        if existing is not None:
            return EnsureResult(created=False, handle=existing)

        payload = {
            "name": path,
            "path": path,
            "description": description or "",
            "visibility": "private",
            "issues_access_level": "disabled",
            "wiki_access_level": "disabled",
        }
        if namespace_id is not None:
            payload["namespace_id"] = int(namespace_id)

        api = self._require_api()
        try:
            self.rate_limiter.wait_if_needed("GitLab API")
            created = api.projects.create(payload)
            return EnsureResult(created=True, handle=created)
        except gitlab.exceptions.GitlabCreateError as e:
            if getattr(e, "response_code", None) not in CONFLICT_STATUSES:
                raise _transport_error("POST projects", e) from e
            conflict = ConflictError(
                f"GitLab API POST projects -> {e.response_code}: {e.error_message}",
                status=e.response_code,
                payload=e.error_message,
            )

        Logger.warn(f"project '{path}' already exists, looking it up again")
        project = self.find_project(path, namespace_id)
        if project is None:
            raise conflict
        return EnsureResult(created=False, handle=project)

    def find_subgroup(self, parent_id: int, path: str) -> Optional[int]:
        """Return the id of the direct subgroup of `parent_id` named `path`."""
        api = self._require_api()
        try:
            self.rate_limiter.wait_if_needed("GitLab API")
            parent = api.groups.get(parent_id, lazy=True)
            for subgroup in parent.subgroups.list(iterator=True, per_page=PER_PAGE):
                if getattr(subgroup, "path", None) == path:
                    return subgroup.id
        except gitlab.exceptions.GitlabError as e:
            raise _transport_error(f"GET groups/{parent_id}/subgroups", e) from e
        return None

    def create_subgroup(self, parent_id: int, name: str, path: str) -> int:
        api = self._require_api()
        try:
            self.rate_limiter.wait_if_needed("GitLab API")
            group = api.groups.create(
                {
                    "name": name,
                    "path": path,
                    "parent_id": int(parent_id),
                    "visibility": "private",
                }
            )
        except gitlab.exceptions.GitlabError as e:
            raise _transport_error("POST groups", e) from e
        Logger.info(f"created subgroup: {path} (id {group.id})")
        return group.id
