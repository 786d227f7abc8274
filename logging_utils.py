#!/usr/bin/env python3
"""Colored console output for migration runs.

Every line goes through SecurityValidator.sanitize_for_logging before it is
written, so tokens embedded in git URLs or API errors never reach the terminal.
Errors and security events go to stderr, everything else to stdout.
"""

from __future__ import annotations

import os
import sys
import time
from typing import Iterable

import colorama

from security import SecurityValidator

colorama.init(autoreset=True)

# level -> (color, stream attribute on sys)
LEVELS = {
    "debug": (colorama.Fore.LIGHTBLACK_EX, "stdout"),
    "info": (colorama.Fore.CYAN, "stdout"),
    "success": (colorama.Fore.GREEN, "stdout"),
    "warn": (colorama.Fore.YELLOW, "stdout"),
    "error": (colorama.Fore.RED, "stderr"),
    "security": (colorama.Fore.MAGENTA, "stderr"),
}


class Logger:
    """Process-tagged, redacting console logger."""

    PROCESS_NAME = "git-mirror-migrate"

    @classmethod
    def debug(cls, *messages) -> None:
        cls._emit("debug", messages)

    @classmethod
    def info(cls, *messages) -> None:
        cls._emit("info", messages)

    @classmethod
    def success(cls, *messages) -> None:
        cls._emit("success", messages)

    @classmethod
    def warn(cls, *messages) -> None:
        cls._emit("warn", messages)

    @classmethod
    def error(cls, *messages) -> None:
        cls._emit("error", messages)

    @classmethod
    def item_failed(cls, identity: str, error: BaseException) -> None:
        """Report one repository that could not be migrated."""
        kind = getattr(error, "kind", None)
        label = kind.value if kind is not None else type(error).__name__
        detail = getattr(error, "message", None) or str(error)
        cls._emit("error", (f"failed: {identity} -> [{label}] {detail}",))

    @classmethod
    def summary(cls, succeeded: int, failed: int) -> None:
        level = "success" if failed == 0 else "warn"
        cls._emit(level, (f"done. success: {succeeded}, failed: {failed}",))

    @classmethod
    def security_event(cls, event_type: str, details: str) -> None:
        stamp = time.strftime("%Y-%m-%d %H:%M:%S")
        cls._emit("security", (f"[SECURITY:{event_type}] {stamp}: {details}",))

    @classmethod
    def _emit(cls, level: str, messages: Iterable) -> None:
        color, stream_name = LEVELS[level]
        text = " ".join(SecurityValidator.sanitize_for_logging(str(m)) for m in messages)
        stream = getattr(sys, stream_name)
        stream.write(cls.format_line(color, text) + "\n")

    @classmethod
    def header(cls) -> str:
        return f"[{cls.PROCESS_NAME}:{os.getpid()}]"

    @classmethod
    def format_line(cls, color: str, text: str) -> str:
        return f"{color}{cls.header()}{colorama.Style.RESET_ALL} {text}"

