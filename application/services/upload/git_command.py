"""Async wrapper around the git CLI.

Every invocation runs non-interactively: no terminal or askpass prompts, no
credential helpers, no inherited system/global config.
"""

import asyncio
import logging
import os
import shlex
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence

from common.config.config import GIT_BINARY
from application.services.upload.errors import GitCommandError, redact_credentials

logger = logging.getLogger(__name__)

# Applied with `git -c` ahead of every subcommand
GIT_CONFIG_OVERRIDES = (
    "credential.helper=",
    "core.askpass=",
    "user.useConfigOnly=true",
)


def base_git_env() -> Dict[str, str]:
    """Environment knobs that make authentication failures fail fast instead of hanging."""
    env = os.environ.copy()
    env.pop("GIT_SSH_COMMAND", None)
    env.update(
        {
            "GIT_TERMINAL_PROMPT": "0",
            "GIT_ASKPASS": "echo",
            "SSH_ASKPASS": "echo",
            "GCM_INTERACTIVE": "never",
            "GIT_CONFIG_NOSYSTEM": "1",
            "GIT_CONFIG_GLOBAL": os.devnull,
        }
    )
    return env


@dataclass
class GitCommandResult:
    returncode: int
    stdout: str
    stderr: str


class GitRunner:
    """Runs git subcommands, optionally inside a working tree."""

    def __init__(
        self,
        cwd: Optional[str] = None,
        extra_env: Optional[Mapping[str, str]] = None,
        git_binary: str = GIT_BINARY,
    ):
        self.cwd = cwd
        self.extra_env = dict(extra_env or {})
        self.git_binary = git_binary

    def _command(self, args: Sequence[str]) -> list:
        command = [self.git_binary]
        for override in GIT_CONFIG_OVERRIDES:
            command.extend(["-c", override])
        command.extend(args)
        return command

    async def run(self, *args: str, cwd: Optional[str] = None) -> GitCommandResult:
        """Run a git subcommand and return its result without raising on failure."""
        command = self._command(args)
        display = redact_credentials(" ".join(shlex.quote(part) for part in command))
        env = base_git_env()
        env.update(self.extra_env)

        logger.debug(f"Running: {display}")
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=cwd or self.cwd,
                env=env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise GitCommandError(display, None, f"git executable not found: {e}") from e

        stdout, stderr = await process.communicate()
        return GitCommandResult(
            returncode=process.returncode,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )

    async def check(self, *args: str, cwd: Optional[str] = None) -> str:
        """Run a git subcommand, raising GitCommandError on a non-zero exit."""
        result = await self.run(*args, cwd=cwd)
        if result.returncode != 0:
            error = GitCommandError(
                " ".join(self._command(args)), result.returncode, result.stderr or result.stdout
            )
            logger.error(f"{error.message}: {error.stderr}")
            raise error
        return result.stdout.strip()
