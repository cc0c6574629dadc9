"""
External process execution.
Spawns a binary with a single argument string and captures its output.
"""

import logging
import os
import shlex
import subprocess
from typing import List, Optional, Union

from .models import CommandResult
from .platform_utils import is_windows

logger = logging.getLogger(__name__)

# Token substituted for the working directory in logged command lines
CWD_PLACEHOLDER = "CurrentDirectory"

# Polling and listing commands: only their errors are logged
UNLOGGED_COMMANDS = ("dumpsys", "shell pm list packages", "KEYCODE_WAKEUP")

# Output that is noise in the log even when the command itself is logged
QUIET_OUTPUT_MARKERS = ("version", "KEYCODE_WAKEUP", "Filesystem", "package:")

# Seconds to wait for a killed process to release its pipes
KILL_GRACE_SECONDS = 5


def _as_text(value: Union[str, bytes, None]) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def mask_working_directory(text: str) -> str:
    """Replace the current working directory in ``text`` with a placeholder."""
    cwd = os.getcwd()
    if cwd and cwd in text:
        return text.replace(cwd, CWD_PLACEHOLDER)
    return text


def is_unlogged_command(arguments: str) -> bool:
    return any(marker in arguments for marker in UNLOGGED_COMMANDS)


class ProcessRunner:
    """Runs external commands and returns their transcript as a CommandResult.

    A non-zero exit status is not an error here: the bridge exits 0 for many
    failures, so callers inspect the text instead.
    """

    def __init__(self):
        self.current_process: Optional[subprocess.Popen] = None

    def build_command(self, executable: str, arguments: str) -> Union[str, List[str]]:
        """Turn the argument string into something Popen accepts.

        Windows takes the command line verbatim; elsewhere the string is
        split with shell quoting rules so quoted paths stay whole.
        """
        if is_windows():
            return f'"{executable}" {arguments}'.rstrip()
        return [executable] + shlex.split(arguments)

    def run(self, executable: str, arguments: str = "",
            working_directory: Optional[str] = None,
            timeout: Optional[int] = None) -> CommandResult:
        """Run ``executable`` with ``arguments`` and capture both streams.

        Args:
            executable: Path to the binary
            arguments: Single argument string; callers quote paths with spaces
            working_directory: Directory to start the process in
            timeout: Milliseconds to wait before the process is killed.
                ``None`` waits for natural exit. The call returns within
                ``timeout`` when the process itself hangs; when a child it
                forked keeps the pipes open, within ``timeout`` plus
                ``KILL_GRACE_SECONDS``.

        Returns:
            CommandResult with whatever was captured, partial on timeout
        """
        quiet = is_unlogged_command(arguments)
        if not quiet:
            logger.info(f"Running command: {mask_working_directory(arguments)}")

        creationflags = subprocess.CREATE_NO_WINDOW if is_windows() else 0
        try:
            cmd = self.build_command(executable, arguments)
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                cwd=working_directory or None,
                creationflags=creationflags,
            )
        except (OSError, ValueError) as e:
            logger.error(f"Failed to launch {mask_working_directory(executable)}: {e}")
            return CommandResult("", f"Exception occurred: {e}")

        self.current_process = proc
        try:
            output, error = self._collect(proc, timeout)
        finally:
            self.current_process = None

        if output and not quiet and not any(m in output for m in QUIET_OUTPUT_MARKERS):
            logger.info(output.rstrip())
        if error:
            logger.error(error.rstrip())

        return CommandResult(output, error)

    def _collect(self, proc: subprocess.Popen, timeout: Optional[int]):
        seconds = timeout / 1000.0 if timeout is not None else None
        try:
            output, error = proc.communicate(timeout=seconds)
            return _as_text(output), _as_text(error)
        except subprocess.TimeoutExpired:
            logger.warning(f"Command did not exit within {timeout} ms, terminating")

        proc.kill()
        try:
            output, error = proc.communicate(timeout=KILL_GRACE_SECONDS)
        except subprocess.TimeoutExpired as e:
            # A forked child can keep the pipes open after the kill
            output, error = e.output, e.stderr
            for stream in (proc.stdout, proc.stderr):
                if stream is not None:
                    stream.close()
            proc.wait()
        return _as_text(output), _as_text(error)
