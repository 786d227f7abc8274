#!/usr/bin/env python3
"""Error types raised while migrating repositories."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Enumeration for error categories."""
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    CONFLICT = "conflict"
    SUBPROCESS = "subprocess"
    NAMING = "naming"
    GENERAL = "general"


class MigrationError(Exception):
    """Base error carrying a kind plus optional HTTP status and payload."""

    kind = ErrorKind.GENERAL

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload


class ConfigurationError(MigrationError):
    """Missing or invalid configuration; fatal for the whole run."""

    kind = ErrorKind.CONFIGURATION


class TransportError(MigrationError):
    """Non-2xx answer from the GitLab or GitHub API."""

    kind = ErrorKind.TRANSPORT


class ConflictError(TransportError):
    """Destination creation rejected because the resource already exists."""

    kind = ErrorKind.CONFLICT


class SubprocessError(MigrationError):
    """The git tool exited non-zero."""

    kind = ErrorKind.SUBPROCESS

    def __init__(self, message: str, *, returncode: int, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class NamingError(MigrationError):
    """No valid destination identifier could be derived."""

    kind = ErrorKind.NAMING
