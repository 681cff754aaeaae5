"""Hosting provider detection from repository URLs."""

import logging
from typing import Optional
from urllib.parse import urlsplit

from application.services.upload.errors import redact_credentials
from application.services.upload.types import Provider

logger = logging.getLogger(__name__)

# Checked in priority order against the lowercased hostname
PROVIDER_HOST_KEYWORDS = [
    (Provider.GITHUB, ("github.com",)),
    (Provider.GITLAB, ("gitlab.com", "gitlab.")),
    (Provider.BITBUCKET, ("bitbucket.org", "bitbucket.")),
    (Provider.AZURE, ("azure.com", "visualstudio.com")),
    (Provider.CODEBERG, ("codeberg.org",)),
]


def _match_keywords(text: str) -> Provider:
    lowered = text.lower()
    for provider, keywords in PROVIDER_HOST_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return provider
    return Provider.GENERIC


def _extract_hostname(repo_url: str) -> Optional[str]:
    candidate = repo_url.strip()
    if candidate.startswith("git@"):
        # git@host:path -> https://host/path
        candidate = "https://" + candidate[len("git@"):].replace(":", "/", 1)
    try:
        return urlsplit(candidate).hostname
    except ValueError:
        return None


def detect_provider(repo_url: str) -> Provider:
    """Classify a repository URL into a known hosting provider.

    Never raises: unparseable input falls back to a keyword search over the
    raw string, and anything unrecognised is ``Provider.GENERIC``.
    """
    if not repo_url:
        return Provider.GENERIC

    hostname = _extract_hostname(repo_url)
    if hostname:
        return _match_keywords(hostname)

    logger.debug(f"Could not parse hostname from {redact_credentials(repo_url)!r}, using keyword search")
    return _match_keywords(repo_url)
