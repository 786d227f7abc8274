#!/usr/bin/env python3
"""Main orchestrator for mirroring repositories between GitLab and GitHub."""

from __future__ import annotations

import os
from typing import Callable, List, Optional, Union

from config import Config, MigrationDirection
from errors import MigrationError, NamingError, TransportError
from github_api import GitHubAPI
from gitlab_api import GitLabAPI
from logging_utils import Logger
from mirror_store import MirrorStore
from models import GitHubRepo, GitLabProject, MigrationOutcome, MigrationTally
from namespace_resolver import NamespaceResolver
from utils import mirror_dir_name, resolve_destination_name, with_credentials

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1

GITLAB_GIT_USER = "oauth2"
GITHUB_GIT_USER = "x-access-token"

SourceRepository = Union[GitLabProject, GitHubRepo]


class SyncOrchestrator:
    def __init__(self, cfg: Config) -> None:
        self.cfg = cfg
        self.gl = GitLabAPI(cfg.gitlab)
        self.gh = GitHubAPI(cfg.github)
        self.mirrors = MirrorStore(
            cfg.behavior.mirror_root, migrate_lfs=cfg.behavior.migrate_lfs
        )
        self.namespaces = NamespaceResolver(
            self.gl, cfg.gitlab.target_namespace_id, cfg.naming
        )
        self.tally: Optional[MigrationTally] = None

    def run(self, direction: MigrationDirection) -> int:
        try:
            tally = self.migrate_all(direction)
        except MigrationError as e:
            Logger.error(f"fatal error: {e.message}")
            return EXIT_EXECUTION_ERROR
        except Exception as e:
            Logger.error(f"fatal error: {e}")
            return EXIT_EXECUTION_ERROR
        return tally.exit_code

    def migrate_all(self, direction: MigrationDirection) -> MigrationTally:
        """Migrate every listed source repository; failures are isolated."""
        Logger.info(f"starting migration: {direction.value}")
        self.gl.connect()
        self.gh.connect()
        if not self.cfg.behavior.dry_run:
            os.makedirs(self.cfg.behavior.mirror_root, exist_ok=True)

        items: List[SourceRepository]
        migrate: Callable[..., None]
        if direction == MigrationDirection.GITLAB_TO_GITHUB:
            items = list(
                self.gl.iter_projects(
                    include_archived=self.cfg.behavior.include_archived
                )
            )
            migrate = self.migrate_gitlab_project
        else:
            items = list(self.gh.iter_repos())
            migrate = self.migrate_github_repo
        Logger.info(f"repositories found: {len(items)}")

        self.tally = MigrationTally(direction=direction)
        total = len(items)
        for idx, item in enumerate(items, start=1):
            self.tally.record(self._process(item, migrate, idx, total))

        Logger.summary(self.tally.succeeded, self.tally.failed)
        return self.tally

    def _process(
        self,
        item: SourceRepository,
        migrate: Callable[..., None],
        idx: int,
        total: int,
    ) -> MigrationOutcome:
        try:
            migrate(item, idx, total)
        except MigrationError as e:
            Logger.item_failed(item.identity, e)
            return MigrationOutcome(source=item.identity, success=False, error=e.message)
        except Exception as e:
            Logger.item_failed(item.identity, e)
            return MigrationOutcome(source=item.identity, success=False, error=str(e))
        return MigrationOutcome(source=item.identity, success=True)

    def _destination_name(self, item: SourceRepository) -> str:
        name = resolve_destination_name(item, self.cfg.naming, self.cfg.github.owner)
        if not name:
            raise NamingError(
                f"cannot derive a valid destination name from '{item.identity}'"
            )
        return name

    def _mirror_path(self, direction: MigrationDirection, identity: str) -> str:
        return self.mirrors.path_for(mirror_dir_name(direction, identity))

    def migrate_gitlab_project(self, project: GitLabProject, idx: int, total: int) -> None:
        repo_name = self._destination_name(project)
        Logger.info(
            f"[{idx}/{total}] {project.path_with_namespace} -> "
            f"{self.cfg.github.owner}/{repo_name}"
        )
        if self.cfg.behavior.dry_run:
            Logger.info("[DRY RUN] skip clone/push")
            return

        result = self.gh.ensure_repo(
            repo_name,
            project.description
            or f"Migrated from GitLab: {project.path_with_namespace}",
        )
        Logger.info(
            "created GitHub repository"
            if result.created
            else "GitHub repository already exists"
        )

        source_url = with_credentials(
            project.http_url_to_repo, GITLAB_GIT_USER, self.cfg.gitlab.token
        )
        target_url = with_credentials(
            self.gh.repo_git_url(repo_name), GITHUB_GIT_USER, self.cfg.github.token
        )
        mirror_path = self._mirror_path(
            MigrationDirection.GITLAB_TO_GITHUB, project.path_with_namespace
        )
        self.mirrors.ensure_up_to_date(mirror_path, source_url)
        self.mirrors.push_mirror(mirror_path, target_url)
        Logger.success(f"success: {project.path_with_namespace}")

    def migrate_github_repo(self, repo: GitHubRepo, idx: int, total: int) -> None:
        project_path = self._destination_name(repo)
        Logger.info(f"[{idx}/{total}] {repo.identity} -> GitLab/{project_path}")
        if self.cfg.behavior.dry_run:
            Logger.info("[DRY RUN] skip clone/push")
            return

        namespace_id = self.namespaces.resolve(repo.owner_login)
        result = self.gl.ensure_project(
            project_path,
            repo.description or f"Migrated from GitHub: {repo.identity}",
            namespace_id,
        )
        Logger.info(
            "created GitLab project" if result.created else "GitLab project already exists"
        )

        target_http = getattr(result.handle, "http_url_to_repo", None)
        if not target_http:
            raise TransportError(
                f"GitLab project '{project_path}' has no HTTP clone URL"
            )

        source_url = with_credentials(
            repo.clone_url, GITHUB_GIT_USER, self.cfg.github.token
        )
        target_url = with_credentials(
            target_http, GITLAB_GIT_USER, self.cfg.gitlab.token
        )
        mirror_path = self._mirror_path(
            MigrationDirection.GITHUB_TO_GITLAB, repo.identity
        )
        self.mirrors.ensure_up_to_date(mirror_path, source_url)
        self.mirrors.push_mirror(mirror_path, target_url)
        Logger.success(f"success: {repo.identity}")
