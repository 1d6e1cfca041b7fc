#!/usr/bin/env python3
"""Security validation utilities for gh-org-migrator."""

import re


class SecurityValidator:
    """Security validation utilities for input sanitization and validation."""

    # GitHub limits
    MAX_ORG_NAME_LENGTH = 39
    MAX_REPO_NAME_LENGTH = 100
    MAX_TEAM_SLUG_LENGTH = 255
    MAX_TOPIC_LENGTH = 50

    SAFE_ORG_NAME_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?$")
    SAFE_REPO_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
    SAFE_TEAM_SLUG_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
    SAFE_TOPIC_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$")

    @staticmethod
    def _check_control_chars(value: str, label: str) -> None:
        if "\x00" in value or any(ord(c) < 32 for c in value):
            raise ValueError(f"{label} contains null bytes or control characters")

    @classmethod
    def validate_org_name(cls, name: str) -> str:
        """Validate a GitHub organization login."""
        if not name or not isinstance(name, str):
            raise ValueError("Organization name must be a non-empty string")

        if len(name) > cls.MAX_ORG_NAME_LENGTH:
            raise ValueError(
                f"Organization name exceeds maximum length of {cls.MAX_ORG_NAME_LENGTH}"
            )

        cls._check_control_chars(name, "Organization name")

        if not cls.SAFE_ORG_NAME_PATTERN.match(name):
            raise ValueError(f"Organization name contains invalid characters: {name}")

        return name

    @classmethod
    def validate_repo_name(cls, name: str) -> str:
        """Validate repository name; unlike org names, it is never rewritten."""
        if not name or not isinstance(name, str):
            raise ValueError("Repository name must be a non-empty string")

        if len(name) > cls.MAX_REPO_NAME_LENGTH:
            raise ValueError(
                f"Repository name exceeds maximum length of {cls.MAX_REPO_NAME_LENGTH}"
            )

        # Check for path traversal attempts
        if ".." in name or "/" in name or "\\" in name:
            raise ValueError("Repository name contains invalid path characters")

        cls._check_control_chars(name, "Repository name")

        if not cls.SAFE_REPO_NAME_PATTERN.match(name):
            raise ValueError(f"Repository name contains invalid characters: {name}")

        return name

    @classmethod
    def validate_team_slug(cls, slug: str) -> str:
        """Validate team slug."""
        if not slug or not isinstance(slug, str):
            raise ValueError("Team slug must be a non-empty string")

        if len(slug) > cls.MAX_TEAM_SLUG_LENGTH:
            raise ValueError(
                f"Team slug exceeds maximum length of {cls.MAX_TEAM_SLUG_LENGTH}"
            )

        cls._check_control_chars(slug, "Team slug")

        if not cls.SAFE_TEAM_SLUG_PATTERN.match(slug):
            raise ValueError(f"Team slug contains invalid characters: {slug}")

        return slug

    @classmethod
    def validate_topic(cls, topic: str) -> str:
        """Validate a repository topic (lowercase, digits and hyphens)."""
        if not topic or not isinstance(topic, str):
            raise ValueError("Topic must be a non-empty string")

        if len(topic) > cls.MAX_TOPIC_LENGTH:
            raise ValueError(f"Topic exceeds maximum length of {cls.MAX_TOPIC_LENGTH}")

        if not cls.SAFE_TOPIC_PATTERN.match(topic):
            raise ValueError(
                f"Topic '{topic}' must be lowercase letters, digits and hyphens"
            )

        return topic

    @classmethod
    def sanitize_for_logging(cls, message: str) -> str:
        """Sanitize message for safe logging by removing potential credentials."""
        if not message:
            return message

        # Patterns to redact
        patterns = [
            (r"https://[^:/@\s]+:[^@\s]+@", "https://[REDACTED]@"),  # URLs with credentials
            (r"github_pat_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # Fine-grained PATs
            (r"ghp_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub tokens
            (r"gho_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub OAuth tokens
            (r"ghu_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub user tokens
            (r"ghs_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub server tokens
            (r"ghr_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub refresh tokens
            (r"token\s*[=:]\s*[^\s]+", "token=[REDACTED]"),  # Token assignments
        ]

        sanitized = message
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized
