"""Tests for the non-interactive git runner."""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from application.services.upload.errors import GitCommandError
from application.services.upload.git_command import GitRunner, base_git_env


def _process(returncode=0, stdout=b"", stderr=b""):
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    return process


class TestBaseGitEnv:
    def test_disables_prompts(self):
        env = base_git_env()
        assert env["GIT_TERMINAL_PROMPT"] == "0"
        assert env["GIT_ASKPASS"] == "echo"
        assert env["SSH_ASKPASS"] == "echo"
        assert env["GCM_INTERACTIVE"] == "never"
        assert env["GIT_CONFIG_NOSYSTEM"] == "1"

    def test_ignores_inherited_ssh_command(self):
        with patch.dict(os.environ, {"GIT_SSH_COMMAND": "ssh -i /somewhere/else"}):
            assert "GIT_SSH_COMMAND" not in base_git_env()


class TestGitRunner:
    """Test GitRunner.run and GitRunner.check."""

    @pytest.mark.asyncio
    async def test_run_builds_command_and_env(self):
        runner = GitRunner(cwd="/repo", extra_env={"GIT_SSH_COMMAND": "ssh -F /tmp/cfg"})

        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = _process(stdout=b"ok\n")
            result = await runner.run("status", "--porcelain")

        assert result.returncode == 0
        assert result.stdout == "ok\n"
        args = mock_exec.call_args.args
        assert args[0] == "git"
        assert args[-2:] == ("status", "--porcelain")
        assert "credential.helper=" in args
        assert "core.askpass=" in args
        kwargs = mock_exec.call_args.kwargs
        assert kwargs["cwd"] == "/repo"
        assert kwargs["env"]["GIT_SSH_COMMAND"] == "ssh -F /tmp/cfg"

    @pytest.mark.asyncio
    async def test_run_does_not_raise_on_failure(self):
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = _process(returncode=1, stderr=b"error: nope")
            result = await GitRunner().run("fetch")

        assert result.returncode == 1
        assert result.stderr == "error: nope"

    @pytest.mark.asyncio
    async def test_check_raises_with_redacted_command(self):
        runner = GitRunner()

        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = _process(returncode=128, stderr=b"fatal: bad\n")
            with pytest.raises(GitCommandError) as exc_info:
                await runner.check("remote", "set-url", "origin", "https://tok@github.com/a/b.git")

        error = exc_info.value
        assert error.returncode == 128
        assert error.stderr == "fatal: bad"
        assert "tok@" not in error.command
        assert "tok@" not in error.message

    @pytest.mark.asyncio
    async def test_check_returns_stripped_stdout(self):
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = _process(stdout=b"  abc123\n")
            assert await GitRunner().check("rev-parse", "HEAD") == "abc123"

    @pytest.mark.asyncio
    async def test_missing_git_binary(self):
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.side_effect = FileNotFoundError("git")
            with pytest.raises(GitCommandError) as exc_info:
                await GitRunner(git_binary="git-not-here").run("status")

        assert exc_info.value.returncode is None
