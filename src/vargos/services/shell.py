"""Persistent shell session."""

import asyncio
import codecs
import logging
import os
import signal
import uuid
from pathlib import Path
from typing import Optional

from ..config.providers import ShellConfig
from ..errors import ConfigurationError, ShellBusyError, ShellExitedError, ShellInterruptedError
from ..interfaces import ShellHistoryEntry

logger = logging.getLogger(__name__)

MARKER_PREFIX = "__VARGOS_DONE_"


class ShellService:
    """One long-lived shell process shared by every caller.

    Commands run one at a time; state such as the working directory and
    exported variables carries over between commands. Completion is
    detected by echoing a unique marker with the command's exit status
    after each command. stderr is merged into stdout.

    Usage:
        shell = ShellService(ShellConfig(data_dir="/tmp"))
        await shell.initialize()

        output = await shell.execute("ls -la")
        history = shell.get_history()

        await shell.shutdown()
    """

    def __init__(self, config: Optional[ShellConfig] = None):
        self.config = config or ShellConfig()
        self._process: Optional[asyncio.subprocess.Process] = None
        self._reader: Optional[asyncio.Task] = None
        self._buffer = ""
        self._output_event = asyncio.Event()
        self._pending: Optional[str] = None
        self._last_command: Optional[str] = None
        self._history: list[ShellHistoryEntry] = []

    @property
    def is_busy(self) -> bool:
        return self._pending is not None

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def initialize(self) -> None:
        """Start the shell.

        A session is started at most once; later calls do nothing, even
        after the shell process has ended.
        """
        if self._process is not None:
            return

        data_dir = Path(self.config.data_dir).expanduser()
        data_dir.mkdir(parents=True, exist_ok=True)

        self._process = await asyncio.create_subprocess_exec(
            self.config.shell_path,
            cwd=str(data_dir),
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            start_new_session=True,
        )
        self._buffer = ""
        self._reader = asyncio.create_task(self._read_output(self._process))
        # SIGINT must stop the running command, not the session
        await self._write("trap ':' INT\n")
        logger.info(f"Shell started ({self.config.shell_path}, pid={self._process.pid}, cwd={data_dir})")

    async def execute(self, command: str) -> str:
        """Run one command and return its trimmed output.

        Raises:
            ShellBusyError: Another command is still running
            ShellInterruptedError: ``interrupt()`` was called while waiting
            ShellExitedError: The shell process ended (e.g. ``exit``); the
                session is not restarted
            ConfigurationError: The session was never started
        """
        if self._pending is not None:
            raise ShellBusyError(self._last_command)
        if self._process is None:
            raise ConfigurationError("Shell session not started. Call initialize() first.")

        if not self.is_running:
            raise ShellExitedError(command)

        marker = f"{MARKER_PREFIX}{uuid.uuid4().hex}"
        self._pending = marker
        self._last_command = command
        try:
            self._buffer = ""
            logger.debug(f"Shell command: {command}")
            try:
                await self._write(f'{command}\necho "{marker}:$?"\n')
            except (BrokenPipeError, ConnectionResetError) as e:
                raise ShellExitedError(command) from e
            output, exit_code = await self._wait_for(marker, command)
        finally:
            if self._pending == marker:
                self._pending = None

        self._history.append(ShellHistoryEntry(command=command, output=output, exit_code=exit_code))
        return output

    def interrupt(self) -> bool:
        """Send SIGINT to the running command and release the session.

        Returns:
            False if no command was running
        """
        if self._pending is None:
            return False

        if self.is_running:
            try:
                os.killpg(self._process.pid, signal.SIGINT)
            except ProcessLookupError:
                logger.warning(f"Shell process group {self._process.pid} already gone")

        logger.info(f"Interrupted shell command: {self._last_command}")
        self._pending = None
        self._output_event.set()
        return True

    def get_history(self) -> list[ShellHistoryEntry]:
        return list(self._history)

    async def shutdown(self) -> None:
        """Stop the shell process and release any waiting caller."""
        self._pending = None
        self._output_event.set()

        process = self._process
        if process is not None and process.returncode is None:
            process.stdin.close()
            try:
                await asyncio.wait_for(process.wait(), timeout=2.0)
            except asyncio.TimeoutError:
                try:
                    os.killpg(process.pid, signal.SIGKILL)
                except ProcessLookupError:
                    pass
                await process.wait()
            logger.info(f"Shell stopped (pid={process.pid})")

        if self._reader is not None:
            await self._reader
            self._reader = None

    async def _write(self, text: str) -> None:
        self._process.stdin.write(text.encode("utf-8"))
        await self._process.stdin.drain()

    async def _read_output(self, process: asyncio.subprocess.Process) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await process.stdout.read(4096)
            if not chunk:
                break
            self._buffer += decoder.decode(chunk)
            self._output_event.set()
        self._buffer += decoder.decode(b"", final=True)
        self._output_event.set()

    async def _wait_for(self, marker: str, command: str) -> tuple[str, Optional[int]]:
        token = f"{marker}:"
        while True:
            if self._pending != marker:
                raise ShellInterruptedError(command)

            start = self._buffer.find(token)
            end = self._buffer.find("\n", start) if start != -1 else -1
            if end != -1:
                output = self._buffer[:start]
                status = self._buffer[start + len(token):end].strip()
                self._buffer = self._buffer[end + 1:]
                return self._strip_stale(output).strip(), self._parse_status(status)

            if self._reader is None or self._reader.done():
                await self._process.wait()
                raise ShellExitedError(command)

            self._output_event.clear()
            await self._output_event.wait()

    @staticmethod
    def _strip_stale(output: str) -> str:
        # An interrupted command still echoes its marker; anything before
        # that line belongs to the interrupted command.
        stale = output.rfind(MARKER_PREFIX)
        if stale == -1:
            return output
        newline = output.find("\n", stale)
        return "" if newline == -1 else output[newline + 1:]

    @staticmethod
    def _parse_status(status: str) -> Optional[int]:
        try:
            return int(status)
        except ValueError:
            return None
