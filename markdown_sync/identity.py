"""Identity detection for per-contributor output naming."""

import logging
import os
import re
from pathlib import Path
from typing import Optional

from markdown_sync.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

USER_ENV_VAR = "MARKDOWN_SYNC_USER"

GIT_EMAIL_PATTERN = re.compile(r'^\s*email\s*=\s*(.+)$', re.MULTILINE)


def sanitize_user_id(user_id: str) -> str:
    """Normalize an identity for use in filenames ("Jane.Doe" -> "jane-doe")."""
    user_id = re.sub(r'[^a-z0-9]+', '-', user_id.lower())
    return user_id.strip('-')


def read_git_email(gitconfig_path: Optional[Path] = None) -> Optional[str]:
    """Read user.email from the global git config, if any."""
    path = gitconfig_path or Path.home() / ".gitconfig"
    try:
        content = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError):
        return None
    match = GIT_EMAIL_PATTERN.search(content)
    return match.group(1).strip() if match else None


def detect_user_id(configured: Optional[str] = None, gitconfig_path: Optional[Path] = None) -> str:
    """Resolve the current identity.

    Order: configured value, MARKDOWN_SYNC_USER, local part of the git
    config email.

    Raises:
        ConfigurationError: If no source yields a usable identity
    """
    candidates = [
        ("configuration", configured),
        (USER_ENV_VAR, os.environ.get(USER_ENV_VAR)),
    ]
    email = read_git_email(gitconfig_path)
    if email:
        candidates.append(("git config user.email", email.split('@')[0]))

    for source, value in candidates:
        if value:
            user_id = sanitize_user_id(str(value))
            if user_id:
                logger.debug(f"Using identity '{user_id}' from {source}")
                return user_id

    raise ConfigurationError(
        "Unable to detect user ID. Please set one of",
        [
            "user_id in .markdown-sync.user.yaml",
            f"{USER_ENV_VAR} environment variable",
            "git config user.email",
        ],
    )
