"""
L3 Detection — Current repository commit.

Releases are addressed by commit, so the tag is derived from
``git rev-parse HEAD`` in the install root.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path

from libacquire.core.services.acquire.data.constants import TAG_LENGTH
from libacquire.core.services.acquire.domain.errors import ReleaseNotFoundError

logger = logging.getLogger(__name__)

_SHA_RE = re.compile(r"^[0-9a-f]{40}([0-9a-f]{24})?$")


def current_commit(repo_root: Path) -> str:
    """Full hex SHA of HEAD.

    Raises:
        ReleaseNotFoundError: Not a git checkout, or git is missing.
    """
    try:
        r = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=repo_root,
            capture_output=True, text=True, timeout=15,
        )
    except (FileNotFoundError, NotADirectoryError, subprocess.TimeoutExpired) as e:
        raise ReleaseNotFoundError(f"Cannot determine current commit: {e}") from e

    sha = r.stdout.strip().lower()
    if r.returncode != 0 or not _SHA_RE.match(sha):
        detail = r.stderr.strip() or f"unexpected output {sha!r}"
        raise ReleaseNotFoundError(f"Cannot determine current commit in {repo_root}: {detail}")

    logger.debug("HEAD of %s is %s", repo_root, sha)
    return sha


def release_tag(commit: str) -> str:
    """Commit-derived release tag: the first 16 hex characters."""
    return commit[:TAG_LENGTH]
