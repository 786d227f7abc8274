#!/usr/bin/env python3
"""Security validation utilities for git-mirror-migrate."""

import re
from typing import List, Optional


class SecurityValidator:
    """Security validation utilities for input sanitization and validation."""

    # Maximum lengths to prevent buffer overflow attacks
    MAX_URL_LENGTH = 2048
    MAX_USERNAME_LENGTH = 100

    SAFE_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")

    @classmethod
    def validate_url(cls, url: str, allowed_schemes: Optional[List[str]] = None) -> str:
        """Validate URL for security."""
        if not url or not isinstance(url, str):
            raise ValueError("URL must be a non-empty string")

        if len(url) > cls.MAX_URL_LENGTH:
            raise ValueError(f"URL exceeds maximum length of {cls.MAX_URL_LENGTH}")

        # Check for null bytes and control characters
        if "\x00" in url or any(ord(c) < 32 for c in url):
            raise ValueError("URL contains null bytes or control characters")

        if not url.startswith(("http://", "https://")):
            raise ValueError("URL must use http or https scheme")

        if allowed_schemes:
            scheme = url.split("://")[0].lower()
            if scheme not in allowed_schemes:
                raise ValueError(
                    f"URL scheme '{scheme}' not in allowed schemes: {allowed_schemes}"
                )

        if re.match(r"^https?://[^/]*@", url):
            raise ValueError("URL must not embed credentials")

        return url

    @classmethod
    def validate_username(cls, username: str) -> str:
        """Validate username/owner login for security."""
        if not username or not isinstance(username, str):
            raise ValueError("Username must be a non-empty string")

        if len(username) > cls.MAX_USERNAME_LENGTH:
            raise ValueError(
                f"Username exceeds maximum length of {cls.MAX_USERNAME_LENGTH}"
            )

        # Check for null bytes and control characters
        if "\x00" in username or any(ord(c) < 32 for c in username):
            raise ValueError("Username contains null bytes or control characters")

        if not cls.SAFE_USERNAME_PATTERN.match(username):
            raise ValueError("Username contains invalid characters")

        return username

    @classmethod
    def sanitize_for_logging(cls, message: str) -> str:
        """Sanitize message for safe logging by removing potential credentials."""
        if not message:
            return message

        # Patterns to redact
        patterns = [
            (r"(https?)://[^:/@\s]+:[^@\s]+@", r"\1://[REDACTED]@"),  # URLs with credentials
            (r"token[=:\s]+[^\s]+", "token=[REDACTED]"),  # Token assignments
            (r"password[=:\s]+[^\s]+", "password=[REDACTED]"),  # Password assignments
            (r"glpat-[A-Za-z0-9_-]+", "[GITLAB_TOKEN_REDACTED]"),  # GitLab tokens
            (r"glpat_[A-Za-z0-9_-]+", "[GITLAB_TOKEN_REDACTED]"),
            (r"github_pat_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # Fine-grained PATs
            (r"gh[pousr]_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # Classic GitHub tokens
        ]

        sanitized = message
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized
