from __future__ import annotations

import asyncio
import json
import os
import shlex
import subprocess
from logging import Logger
from typing import Any

from simple_logger.logger import get_logger

from gh_demo.libs.config import Config
from gh_demo.libs.exceptions import NoApiTokenError, api_error

TOKEN_ENV_VARS: tuple[str, ...] = ("GH_TOKEN", "GITHUB_TOKEN")


def get_logger_with_params(config: Config | None = None, debug: bool = False) -> Logger:
    mask_sensitive_patterns: list[str] = [
        # Tokens and API keys
        "token",
        "apikey",
        "api_key",
        "github_token",
        "GITHUB_TOKEN",
        "GH_TOKEN",
        "authorization",
        "Authorization",
        "Bearer",
        # Passwords and secrets
        "password",
        "secret",
    ]

    _config = config or Config()

    log_level: str = "DEBUG" if debug else _config.get_value(value="log-level", return_on_none="INFO")
    log_file: str | None = _config.get_value(value="log-file")
    # Get mask-sensitive-data config (default: True to hide sensitive data)
    mask_sensitive: bool = _config.get_value(value="mask-sensitive-data", return_on_none=True)

    if log_file and not os.path.isabs(log_file):
        log_file = os.path.join(_config.config_root, log_file)

    return get_logger(
        name="gh-demo",
        filename=log_file,
        level=log_level,
        file_max_bytes=1024 * 1024 * 10,
        mask_sensitive=mask_sensitive,
        mask_sensitive_patterns=mask_sensitive_patterns,
        console=True,
    )


async def run_command(
    command: str,
    log_prefix: str,
    logger: Logger | None = None,
    timeout: int | None = None,
    **kwargs: Any,
) -> tuple[bool, str, str]:
    """
    Run command locally using create_subprocess_exec (safe from shell injection).

    Args:
        command (str): Command to run (will be split with shlex.split for safety)
        log_prefix (str): Prefix for log messages
        logger (Logger, optional): Logger to use, defaults to the gh-demo logger
        timeout (int | None, optional): Timeout in seconds for command execution. None means no timeout.

    Returns:
        tuple[bool, str, str]: (success, stdout, stderr)
    """
    logger = logger or get_logger(name="gh-demo")
    kwargs.setdefault("stdout", subprocess.PIPE)
    kwargs.setdefault("stderr", subprocess.PIPE)

    sub_process: asyncio.subprocess.Process | None = None
    try:
        logger.debug(f"{log_prefix} Running '{command}' command")
        sub_process = await asyncio.create_subprocess_exec(*shlex.split(command), **kwargs)

        try:
            if timeout:
                stdout, stderr = await asyncio.wait_for(sub_process.communicate(), timeout=timeout)
            else:
                stdout, stderr = await sub_process.communicate()
        except TimeoutError:
            logger.error(f"{log_prefix} Command '{command}' timed out after {timeout}s")
            sub_process.kill()
            await sub_process.wait()
            return False, "", f"Command timed out after {timeout}s"

        out_decoded = stdout.decode(errors="ignore") if isinstance(stdout, bytes) else (stdout or "")
        err_decoded = stderr.decode(errors="ignore") if isinstance(stderr, bytes) else (stderr or "")

        if sub_process.returncode != 0:
            logger.debug(
                f"{log_prefix} Failed to run '{command}'. rc: {sub_process.returncode}, error: {err_decoded.strip()}"
            )
            return False, out_decoded, err_decoded

        return True, out_decoded, err_decoded

    except asyncio.CancelledError:
        logger.debug(f"{log_prefix} Command '{command}' cancelled")
        if sub_process and sub_process.returncode is None:
            sub_process.kill()
        raise
    except (OSError, subprocess.SubprocessError, ValueError) as exc:
        logger.debug(f"{log_prefix} Failed to run '{command}' command: {exc}")
        return False, "", str(exc)


async def get_github_token(logger: Logger | None = None) -> str:
    """
    Find a GitHub token.

    Order:
        1. GH_TOKEN / GITHUB_TOKEN environment variables
        2. `gh auth token` (the GitHub CLI's stored credentials)

    Raises:
        NoApiTokenError: If no token is found
    """
    for env_var in TOKEN_ENV_VARS:
        if token := os.environ.get(env_var, "").strip():
            return token

    success, out, _ = await run_command(command="gh auth token", log_prefix="[auth]", logger=logger)
    if success and out.strip():
        return out.strip()

    raise NoApiTokenError(
        f"No GitHub token found. Set one of {', '.join(TOKEN_ENV_VARS)} or run 'gh auth login'"
    )


async def get_current_repository() -> tuple[str, str]:
    """
    Get (owner, repo) of the repository the GitHub CLI considers current.

    Raises:
        LayeredError: api layer, when `gh repo view` fails or returns unexpected output
    """
    success, out, err = await run_command(command="gh repo view --json owner,name", log_prefix="[repository]")
    if not success:
        raise api_error("get_current_repository", f"gh repo view failed: {err.strip() or out.strip()}")

    try:
        data = json.loads(out)
        return data["owner"]["login"], data["name"]
    except (ValueError, KeyError, TypeError) as ex:
        raise api_error("get_current_repository", "unexpected output from gh repo view", ex) from ex
