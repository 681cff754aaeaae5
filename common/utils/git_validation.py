"""
Syntactic validation of repository URLs and branch names.

Used by the request layer before the upload service is invoked.
"""

import re
from urllib.parse import urlsplit

_BRANCH_PATTERN = re.compile(r"^[A-Za-z0-9._/-]+$")
_SCP_LIKE_URL = re.compile(r"^[\w.-]+@[\w.-]+:(?!/)\S+/\S+$")


def validate_branch_name(branch: str) -> bool:
    """Letters, digits, ``.``, ``_``, ``-`` and ``/`` in a git-legal arrangement."""
    if not branch or not _BRANCH_PATTERN.match(branch):
        return False
    if branch.startswith(("-", "/", ".")) or branch.endswith(("/", ".", ".lock")):
        return False
    return not any(sequence in branch for sequence in ("..", "//", "/."))


def validate_repo_url(url: str) -> bool:
    """Accept HTTP(S), ``ssh://`` and ``user@host:path`` remotes on any host."""
    if not url or any(ch.isspace() for ch in url):
        return False

    if "://" not in url:
        return bool(_SCP_LIKE_URL.match(url))

    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if parts.scheme not in ("http", "https", "ssh") or not parts.hostname:
        return False

    segments = [segment for segment in parts.path.split("/") if segment]
    return len(segments) >= 2
