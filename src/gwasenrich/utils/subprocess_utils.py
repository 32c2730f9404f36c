"""Subprocess utilities for gwasenrich."""

import logging
import shutil
import subprocess
from typing import List, Optional, Union

from gwasenrich.exceptions import DependencyFailure

logger = logging.getLogger(__name__)


def run_command(
    cmd: Union[str, List[str]],
    timeout: Optional[int] = None,
    cwd: Optional[str] = None,
) -> subprocess.CompletedProcess:
    """
    Run an external command without a shell and capture its output.

    Args:
        cmd: Command as an argument list (a string is split on whitespace)
        timeout: Timeout in seconds
        cwd: Working directory

    Returns:
        CompletedProcess instance

    Raises:
        DependencyFailure: If the command cannot be started, times out or
            exits with a non-zero status
    """
    if isinstance(cmd, str):
        cmd = cmd.split()
    logger.debug(f"Running command: {' '.join(cmd)}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired as e:
        logger.error(f"Command timed out after {timeout}s: {' '.join(cmd)}")
        raise DependencyFailure(f"Command timed out: {' '.join(cmd)}") from e
    except OSError as e:
        raise DependencyFailure(f"Could not run {cmd[0]}: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr.strip()
        logger.error(f"Command returned {result.returncode}: {stderr}")
        raise DependencyFailure(
            f"{' '.join(cmd)} exited with status {result.returncode}: {stderr}"
        )

    return result


def check_tool_installed(tool_name: str) -> bool:
    """
    Check if a command-line tool is installed.

    Args:
        tool_name: Name of the tool

    Returns:
        True if tool is available
    """
    return shutil.which(tool_name) is not None


def require_tools(tools: List[str]) -> None:
    """
    Check that required tools are installed.

    Args:
        tools: List of tool names

    Raises:
        DependencyFailure: If any tool is missing
    """
    missing = [tool for tool in tools if not check_tool_installed(tool)]

    if missing:
        raise DependencyFailure(
            f"Missing required tools: {', '.join(missing)}. "
            "Please install them and ensure they are in your PATH."
        )

    logger.debug(f"All required tools available: {', '.join(tools)}")
