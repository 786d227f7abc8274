#!/usr/bin/env python3
"""Local bare mirror repositories driven through the git CLI."""

from __future__ import annotations

import os
import subprocess
from typing import List, Optional

from errors import SubprocessError
from logging_utils import Logger
from security import SecurityValidator

TARGET_REMOTE = "target"


class MirrorStore:
    """Keeps one bare mirror per source repository under `root`."""

    def __init__(self, root: str, migrate_lfs: bool = False) -> None:
        self.root = root
        self.migrate_lfs = migrate_lfs

    def path_for(self, dir_name: str) -> str:
        return os.path.join(self.root, dir_name)

    def _run_git(self, args: List[str], git_dir: Optional[str] = None) -> str:
        """Run git with captured output; raise SubprocessError on failure."""
        cmd = ["git"]
        if git_dir is not None:
            cmd += ["--git-dir", git_dir]
        cmd += args

        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"
        safe_cmd = SecurityValidator.sanitize_for_logging(" ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True,
                env=env,
            )
        except subprocess.CalledProcessError as e:
            safe_stderr = SecurityValidator.sanitize_for_logging(e.stderr or "")
            raise SubprocessError(
                f"{safe_cmd} failed with code {e.returncode}\n{safe_stderr}".rstrip(),
                returncode=e.returncode,
                stderr=safe_stderr,
            ) from None
        except OSError as e:
            raise SubprocessError(
                f"{safe_cmd} could not be started: {e}", returncode=-1
            ) from None
        return result.stdout or ""

    def ensure_up_to_date(self, mirror_path: str, source_url: str) -> None:
        """Clone the source as a mirror, or refresh an existing mirror."""
        if not os.path.exists(mirror_path):
            os.makedirs(os.path.dirname(mirror_path) or ".", exist_ok=True)
            Logger.info(f"cloning mirror: {source_url}")
            self._run_git(["clone", "--mirror", source_url, mirror_path])
            return

        Logger.info(f"updating mirror: {os.path.basename(mirror_path)}")
        self._run_git(["remote", "set-url", "origin", source_url], git_dir=mirror_path)
        self._run_git(["fetch", "--prune", "origin"], git_dir=mirror_path)

    def _ensure_remote(self, mirror_path: str, name: str, url: str) -> None:
        try:
            self._run_git(["remote", "add", name, url], git_dir=mirror_path)
        except SubprocessError:
            self._run_git(["remote", "set-url", name, url], git_dir=mirror_path)

    def push_mirror(
        self, mirror_path: str, target_url: str, remote_name: str = TARGET_REMOTE
    ) -> None:
        """Make the destination refs match the mirror exactly."""
        self._ensure_remote(mirror_path, remote_name, target_url)
        Logger.info(f"pushing mirror to: {target_url}")
        self._run_git(["push", "--mirror", remote_name], git_dir=mirror_path)

        if self.migrate_lfs:
            Logger.info("transferring LFS objects")
            self._run_git(["lfs", "fetch", "--all", "origin"], git_dir=mirror_path)
            self._run_git(["lfs", "push", "--all", remote_name], git_dir=mirror_path)
