"""
Credential formatting for git remotes.

Turns (repository URL, auth method, credentials, provider) into something the
git client can use without prompting:
- token / basic auth: an HTTPS clone URL with credentials in its authority
- ssh: an ephemeral key + ssh client config, handed to git per invocation
  through GIT_SSH_COMMAND
"""

import logging
import os
import re
import shlex
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional, Union
from urllib.parse import quote, urlsplit

from application.services.upload.errors import (
    AuthSetupError,
    UnsupportedAuthMethodError,
    ValidationError,
    redact_credentials,
)
from application.services.upload.types import (
    AuthMethod,
    BasicCredentials,
    Credentials,
    Provider,
    SshCredentials,
    TokenCredentials,
)

logger = logging.getLogger(__name__)

_SCP_LIKE_URL = re.compile(r"^[\w.-]+@([^:/\s]+):(.+)$")

SSH_CONFIG_TEMPLATE = """# Generic SSH config for Git providers
Host *
  IdentityFile {key_path}
  IdentitiesOnly yes
  StrictHostKeyChecking no
  UserKnownHostsFile /dev/null
  PreferredAuthentications publickey
  BatchMode yes
  User git

# GitHub
Host github.com
  HostName github.com
  User git

# GitLab
Host gitlab.com
  HostName gitlab.com
  User git

# Bitbucket
Host bitbucket.org
  HostName bitbucket.org
  User git

# Azure DevOps
Host ssh.dev.azure.com
  HostName ssh.dev.azure.com
  User git

# Codeberg
Host codeberg.org
  HostName codeberg.org
  User git
"""


def _encode(value: str) -> str:
    return quote(value, safe="")


# Provider -> userinfo builder for token authentication
TOKEN_USERINFO: Dict[Provider, Callable[[str], str]] = {
    Provider.GITHUB: lambda token: _encode(token),
    Provider.GITLAB: lambda token: f"oauth2:{_encode(token)}",
    Provider.BITBUCKET: lambda token: f"x-token-auth:{_encode(token)}",
    Provider.AZURE: lambda token: f":{_encode(token)}",
}


def _strip_git_suffix(path: str) -> str:
    return path[: -len(".git")] if path.endswith(".git") else path


def normalize_to_https(repo_url: str) -> str:
    """Return ``https://host/path.git`` with any embedded credentials removed.

    Accepts HTTPS/HTTP URLs (with or without credentials), ``ssh://`` URLs and
    scp-style ``git@host:path`` remotes. Idempotent.
    """
    url = (repo_url or "").strip()

    scp_match = _SCP_LIKE_URL.match(url)
    if scp_match and "://" not in url:
        host, path = scp_match.groups()
    else:
        parts = urlsplit(url if "://" in url else f"https://{url}")
        host = parts.hostname or ""
        if parts.port and parts.scheme in ("http", "https"):
            host = f"{host}:{parts.port}"
        path = parts.path

    path = _strip_git_suffix(path.strip("/"))
    if not host or not path:
        raise ValidationError(
            "Invalid repository URL",
            details=f"Could not determine host and path from {redact_credentials(url)!r}",
        )
    return f"https://{host}/{path}.git"


def _embed_userinfo(https_url: str, userinfo: str) -> str:
    return https_url.replace("https://", f"https://{userinfo}@", 1)


def format_token_url(repo_url: str, token: str, provider: Provider) -> str:
    userinfo_for = TOKEN_USERINFO.get(provider, TOKEN_USERINFO[Provider.GITHUB])
    return _embed_userinfo(normalize_to_https(repo_url), userinfo_for(token))


def format_basic_auth_url(repo_url: str, username: str, password: str) -> str:
    return _embed_userinfo(
        normalize_to_https(repo_url), f"{_encode(username)}:{_encode(password)}"
    )


def format_ssh_url(repo_url: str) -> str:
    """Convert an HTTPS remote into ``git@host:path.git``; SSH remotes pass through."""
    url = repo_url.strip()
    if url.startswith("git@") or url.startswith("ssh://"):
        return url

    try:
        parts = urlsplit(url)
    except ValueError as e:
        logger.warning(f"Could not convert to SSH format, using original URL: {e}")
        return url
    if not parts.hostname:
        logger.warning(f"Could not convert to SSH format, using original URL: {redact_credentials(url)}")
        return url

    path = _strip_git_suffix(parts.path.lstrip("/"))
    return f"git@{parts.hostname}:{path}.git"


def has_authentication(url: Optional[str]) -> bool:
    """True when an HTTP(S) remote carries embedded credentials."""
    return bool(url) and "@" in url and not url.startswith("git@")


@dataclass
class SshIdentity:
    """Ephemeral private key and ssh client config for one operation."""

    directory: Path
    key_path: Path
    config_path: Path

    def git_env(self) -> Dict[str, str]:
        return {
            "GIT_SSH_COMMAND": f"ssh -F {shlex.quote(str(self.config_path))} -o BatchMode=yes"
        }

    def remove(self) -> None:
        shutil.rmtree(self.directory)
        logger.info(f"Cleaned up SSH directory: {self.directory}")


def setup_ssh_identity(
    private_key: Union[str, bytes], base_dir: Optional[str] = None
) -> SshIdentity:
    """Write the key and a non-interactive ssh config into a private temp dir."""
    ssh_dir = None
    try:
        # mkdtemp creates the directory with mode 0700
        ssh_dir = Path(tempfile.mkdtemp(prefix="ssh-", dir=base_dir))
        key_path = ssh_dir / "id_key"
        config_path = ssh_dir / "config"

        if isinstance(private_key, bytes):
            private_key = private_key.decode("utf-8")
        key_material = private_key.replace("\r\n", "\n").strip() + "\n"

        fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "w") as key_file:
            key_file.write(key_material)

        config_path.write_text(SSH_CONFIG_TEMPLATE.format(key_path=key_path))
        os.chmod(config_path, 0o600)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to setup SSH authentication: {e}")
        if ssh_dir is not None:
            shutil.rmtree(ssh_dir, ignore_errors=True)
        raise AuthSetupError(f"Failed to configure SSH authentication: {e}") from e

    logger.info("SSH authentication configured for multiple providers")
    return SshIdentity(directory=ssh_dir, key_path=key_path, config_path=config_path)


@dataclass
class AuthContext:
    """Resolved authentication for a single upload operation."""

    method: AuthMethod
    provider: Provider
    remote_url: str
    ssh_identity: Optional[SshIdentity] = None
    env: Dict[str, str] = field(default_factory=dict)

    @property
    def uses_ssh(self) -> bool:
        return self.method == AuthMethod.SSH

    @property
    def display_url(self) -> str:
        return redact_credentials(self.remote_url)

    def close(self) -> None:
        """Remove key material and drop the ssh environment. Safe to call twice."""
        self.env = {}
        identity, self.ssh_identity = self.ssh_identity, None
        if identity is not None:
            identity.remove()


def configure_authentication(
    repo_url: str,
    auth_method: Union[AuthMethod, str],
    credentials: Credentials,
    provider: Provider,
    base_dir: Optional[str] = None,
) -> AuthContext:
    """Build the AuthContext for the requested auth method."""
    try:
        method = AuthMethod(auth_method)
    except ValueError:
        raise UnsupportedAuthMethodError(f"Unsupported authentication method: {auth_method}")

    if method == AuthMethod.TOKEN and isinstance(credentials, TokenCredentials):
        url = format_token_url(repo_url, credentials.token, provider)
        return AuthContext(method=method, provider=provider, remote_url=url)

    if method == AuthMethod.BASIC and isinstance(credentials, BasicCredentials):
        url = format_basic_auth_url(repo_url, credentials.username, credentials.password)
        return AuthContext(method=method, provider=provider, remote_url=url)

    if method == AuthMethod.SSH and isinstance(credentials, SshCredentials):
        identity = setup_ssh_identity(credentials.private_key, base_dir=base_dir)
        return AuthContext(
            method=method,
            provider=provider,
            remote_url=format_ssh_url(repo_url),
            ssh_identity=identity,
            env=identity.git_env(),
        )

    raise ValidationError(
        f"Credentials do not match authentication method '{method.value}'",
        details=f"Got {type(credentials).__name__} for {method.value} authentication",
    )
