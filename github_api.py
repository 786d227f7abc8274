#!/usr/bin/env python3
"""GitHub API wrapper: repository discovery and repository provisioning."""

from __future__ import annotations

from typing import Iterator, Optional
from urllib.parse import urlparse

import github
import requests

from config import GitHubConfig, OwnerType
from errors import TransportError
from logging_utils import Logger
from models import EnsureResult, GitHubRepo
from utils import RateLimiter

DEFAULT_API_URL = "https://api.github.com"


def _transport_error(action: str, error: github.GithubException) -> TransportError:
    data = error.data
    if isinstance(data, dict) and data.get("message"):
        message = data["message"]
    else:
        message = str(data) if data else "Unknown error"
    return TransportError(
        f"GitHub API {action} -> {error.status}: {message}",
        status=error.status,
        payload=data,
    )


class GitHubAPI:
    """Wrapper around the GitHub API for both migration directions."""

    def __init__(self, config: GitHubConfig) -> None:
        self.config = config
        self.api: Optional[github.Github] = None
        self.rate_limiter = RateLimiter(
            max_requests_per_minute=50
        )  # GitHub's standard rate limit

    @property
    def is_org(self) -> bool:
        return self.config.owner_type == OwnerType.ORG

    def connect(self) -> None:
        Logger.info(f"init github API: {self.config.api_url}")
        auth = github.Auth.Token(self.config.token)
        if self.config.api_url != DEFAULT_API_URL:
            self.api = github.Github(base_url=self.config.api_url, auth=auth)
        else:
            self.api = github.Github(auth=auth)
        if self.is_org:
            self._preflight_org_access()

    def _require_api(self) -> github.Github:
        if self.api is None:
            raise TransportError("github API not initialized")
        return self.api

    def _get_api_headers(self) -> dict:
        """Get standard API headers for GitHub requests."""
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.config.token}",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _git_base_url(self) -> str:
        """Return base URL for Git operations derived from API endpoint."""
        parsed = urlparse(self.config.api_url)
        if parsed.netloc == "api.github.com":
            return "https://github.com"

        base_path = parsed.path.rstrip("/")
        if base_path.endswith("/api/v3"):
            base_path = base_path[: -len("/api/v3")]
        base = f"{parsed.scheme}://{parsed.netloc}"
        if base_path:
            base += base_path
        return base

    def repo_git_url(self, name: str) -> str:
        """HTTPS git URL of a repository under the configured owner."""
        return f"{self._git_base_url().rstrip('/')}/{self.config.owner}/{name}.git"

    def _preflight_org_access(self) -> None:
        """Check the organization is visible to the token and report our role."""
        headers = self._get_api_headers()
        org_url = f"{self.config.api_url}/orgs/{self.config.owner}"
        try:
            self.rate_limiter.wait_if_needed("GitHub API")
            r_org = requests.get(org_url, headers=headers, timeout=30)
        except requests.RequestException as e:
            raise TransportError(f"failed to contact github api: {e}") from e

        if r_org.status_code == 401:
            raise TransportError(
                "unauthorized (401): token invalid or not authorized for GitHub API",
                status=401,
            )
        if r_org.status_code == 403:
            raise TransportError(
                "forbidden (403): token lacks permission to access the organization",
                status=403,
            )
        if r_org.status_code == 404:
            raise TransportError(
                f"not found (404): organization '{self.config.owner}' does not "
                "exist or is not visible to this token",
                status=404,
            )

        mem_url = f"{self.config.api_url}/user/memberships/orgs/{self.config.owner}"
        try:
            self.rate_limiter.wait_if_needed("GitHub API")
            r_mem = requests.get(mem_url, headers=headers, timeout=30)
        except requests.RequestException:
            Logger.warn("could not check org membership (request error)")
            return

        if r_mem.status_code != 200:
            Logger.warn(f"unexpected response checking membership: {r_mem.status_code}")
            return
        data = r_mem.json()
        Logger.info(f"org membership: state={data.get('state')}, role={data.get('role')}")
        if data.get("role") != "admin":
            Logger.warn(
                "membership role is not admin; repo creation may be "
                "restricted by org settings"
            )

    def iter_repos(self) -> Iterator[GitHubRepo]:
        """Yield the source repositories owned by the configured owner."""
        api = self._require_api()
        try:
            self.rate_limiter.wait_if_needed("GitHub API")
            if self.is_org:
                Logger.info(f"discovering repositories of org: {self.config.owner}")
                repos = api.get_organization(self.config.owner).get_repos(type="all")
            else:
                Logger.info(f"discovering repositories of user: {self.config.owner}")
                repos = api.get_user().get_repos(visibility="all", affiliation="owner")

            for repo in repos:
                item = GitHubRepo.from_api(repo)
                if not self.is_org and item.owner_login != self.config.owner:
                    continue
                Logger.debug(f"found: {item.full_name}")
                yield item
        except github.GithubException as e:
            raise _transport_error("GET repos", e) from e

    def ensure_repo(self, name: str, description: str) -> EnsureResult:
        """Reuse `owner/name` if it exists, otherwise create it private."""
        api = self._require_api()
        full_name = f"{self.config.owner}/{name}"
        try:
            self.rate_limiter.wait_if_needed("GitHub API")
            return EnsureResult(created=False, handle=api.get_repo(full_name))
        except github.GithubException as e:
            if e.status != 404:
                raise _transport_error(f"GET /repos/{full_name}", e) from e

        try:
            self.rate_limiter.wait_if_needed("GitHub API")
            if self.is_org:
                owner = api.get_organization(self.config.owner)
            else:
                owner = api.get_user()
            repo = owner.create_repo(
                name=name,
                description=description or "",
                private=True,
                has_issues=False,
                has_projects=False,
                has_wiki=False,
                auto_init=False,
            )
        except github.GithubException as e:
            raise _transport_error(f"POST repo {full_name}", e) from e
        Logger.info(f"created repo: {full_name}")
        return EnsureResult(created=True, handle=repo)
