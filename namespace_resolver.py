#!/usr/bin/env python3
"""Resolve the GitLab namespace a migrated GitHub repository lands in."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from config import NamingPolicy
from errors import NamingError
from gitlab_api import GitLabAPI
from logging_utils import Logger
from utils import sanitize_group_path


class NamespaceCache:
    """Subgroup ids keyed by (parent id, subgroup path) for one run.

    Items are processed sequentially; a parallel caller must lock around
    get/put to keep at most one creation per key.
    """

    def __init__(self) -> None:
        self._entries: Dict[Tuple[int, str], int] = {}

    def get(self, parent_id: int, path: str) -> Optional[int]:
        return self._entries.get((parent_id, path))

    def put(self, parent_id: int, path: str, group_id: int) -> None:
        self._entries[(parent_id, path)] = group_id

    def __len__(self) -> int:
        return len(self._entries)


class NamespaceResolver:
    def __init__(
        self,
        gitlab_api: GitLabAPI,
        root_namespace_id: Optional[int],
        policy: NamingPolicy,
        cache: Optional[NamespaceCache] = None,
    ) -> None:
        self.gitlab_api = gitlab_api
        self.root_namespace_id = root_namespace_id
        self.policy = policy
        self.cache = cache if cache is not None else NamespaceCache()

    def resolve(self, owner_login: str) -> Optional[int]:
        """Return the namespace id for a repository owned by `owner_login`.

        None means the token's personal namespace.
        """
        if self.root_namespace_id is None:
            return None
        if not self.policy.preserve_source_owner_as_group or not owner_login:
            return self.root_namespace_id
        return self.find_or_create_subgroup(self.root_namespace_id, owner_login)

    def find_or_create_subgroup(self, parent_id: int, name: str) -> int:
        path = sanitize_group_path(name)
        if not path:
            raise NamingError(
                f"Cannot derive valid GitLab subgroup path from '{name}'"
            )

        cached = self.cache.get(parent_id, path)
        if cached is not None:
            return cached

        group_id = self.gitlab_api.find_subgroup(parent_id, path)
        if group_id is None:
            group_id = self.gitlab_api.create_subgroup(parent_id, name, path)
        else:
            Logger.debug(f"reusing subgroup: {path} (id {group_id})")
        self.cache.put(parent_id, path, group_id)
        return group_id
