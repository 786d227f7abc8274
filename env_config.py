#!/usr/bin/env python3
"""Environment loading and configuration building."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Mapping, Optional

from dotenv import load_dotenv

from config import (Config, GitHubConfig, GitLabConfig, MigrationBehavior,
                    MigrationDirection, NamingPolicy, OwnerType)
from errors import ConfigurationError
from logging_utils import Logger
from security import SecurityValidator

REQUIRED_ENV = (
    "GITLAB_BASE_URL",
    "GITLAB_TOKEN",
    "GITHUB_TOKEN",
    "GITHUB_OWNER",
)

TRUE_VALUES = ("true", "1", "yes", "on")

DIRECTION_ALIASES = {
    "1": MigrationDirection.GITLAB_TO_GITHUB,
    "gitlab-to-github": MigrationDirection.GITLAB_TO_GITHUB,
    "gitlab2github": MigrationDirection.GITLAB_TO_GITHUB,
    "gl2gh": MigrationDirection.GITLAB_TO_GITHUB,
    "2": MigrationDirection.GITHUB_TO_GITLAB,
    "github-to-gitlab": MigrationDirection.GITHUB_TO_GITLAB,
    "github2gitlab": MigrationDirection.GITHUB_TO_GITLAB,
    "gh2gl": MigrationDirection.GITHUB_TO_GITLAB,
}


def load_env_file(path: Optional[Path] = None) -> bool:
    """Pre-populate os.environ from a key=value file without overriding."""
    env_path = path or Path.cwd() / ".env"
    if not env_path.is_file():
        return False
    Logger.debug(f"loading environment from {env_path}")
    return load_dotenv(dotenv_path=env_path, override=False)


def parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUE_VALUES


def normalize_direction(value: Optional[str]) -> Optional[MigrationDirection]:
    """Map a user or env supplied direction to the enum, or None if unknown."""
    normalized = str(value or "").strip().lower()
    return DIRECTION_ALIASES.get(normalized)


def prompt_direction(input_func: Callable[[str], str] = input) -> MigrationDirection:
    """Ask the user which way to migrate."""
    Logger.info("select migration direction:")
    Logger.info("1) GitLab -> GitHub")
    Logger.info("2) GitHub -> GitLab")
    answer = input_func("Enter 1 or 2: ")
    direction = normalize_direction(answer)
    if direction is None:
        raise ConfigurationError("Invalid direction. Use 1 or 2.")
    return direction


def resolve_direction(
    cfg: Config, input_func: Callable[[str], str] = input
) -> MigrationDirection:
    """Return the configured direction, prompting when it is not set."""
    if cfg.direction is not None:
        return cfg.direction
    return prompt_direction(input_func)


def _parse_int(env: Mapping[str, str], key: str) -> Optional[int]:
    raw = (env.get(key) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got '{raw}'") from None


def _parse_owner_type(raw: Optional[str]) -> OwnerType:
    value = (raw or OwnerType.USER.value).strip().lower()
    try:
        return OwnerType(value)
    except ValueError:
        raise ConfigurationError(
            f"GITHUB_OWNER_TYPE must be 'user' or 'org', got '{raw}'"
        ) from None


def build_config(env: Mapping[str, str]) -> Config:
    """Build the run configuration from an environment mapping."""
    missing = [key for key in REQUIRED_ENV if not env.get(key)]
    if missing:
        raise ConfigurationError(
            "missing required env vars: " + ", ".join(missing)
        )

    try:
        gitlab_url = SecurityValidator.validate_url(
            env["GITLAB_BASE_URL"].strip().rstrip("/"), ["https", "http"]
        )
        github_api_url = SecurityValidator.validate_url(
            (env.get("GITHUB_API_URL") or "https://api.github.com").strip().rstrip("/"),
            ["https", "http"],
        )
        github_owner = SecurityValidator.validate_username(env["GITHUB_OWNER"].strip())
    except ValueError as e:
        raise ConfigurationError(f"configuration validation error: {e}") from None

    raw_direction = env.get("MIGRATION_DIRECTION") or ""
    direction = normalize_direction(raw_direction)
    if raw_direction.strip() and direction is None:
        Logger.warn(f"ignoring unknown MIGRATION_DIRECTION '{raw_direction}'")

    return Config(
        gitlab=GitLabConfig(
            url=gitlab_url,
            token=env["GITLAB_TOKEN"],
            group_id=(env.get("GITLAB_GROUP_ID") or "").strip() or None,
            target_namespace_id=_parse_int(env, "GITLAB_TARGET_NAMESPACE_ID"),
        ),
        github=GitHubConfig(
            token=env["GITHUB_TOKEN"],
            owner=github_owner,
            owner_type=_parse_owner_type(env.get("GITHUB_OWNER_TYPE")),
            api_url=github_api_url,
        ),
        naming=NamingPolicy(
            use_original_name=parse_bool(env.get("USE_ORIGINAL_REPO_NAME"), True),
            preserve_namespace=parse_bool(
                env.get("PRESERVE_NAMESPACE_IN_NAME"), True
            ),
            preserve_source_owner_as_group=parse_bool(
                env.get("PRESERVE_SOURCE_OWNER_AS_GITLAB_GROUP"), True
            ),
        ),
        behavior=MigrationBehavior(
            mirror_root=os.path.abspath(env.get("MIRROR_ROOT") or "./mirrors"),
            include_archived=parse_bool(env.get("INCLUDE_ARCHIVED")),
            dry_run=parse_bool(env.get("DRY_RUN")),
            migrate_lfs=parse_bool(env.get("MIGRATE_LFS")),
        ),
        direction=direction,
    )


def load_config(env_file: Optional[Path] = None) -> Config:
    """Load the .env file (if any) and build configuration from os.environ."""
    load_env_file(env_file)
    return build_config(os.environ)
