"""
Command Runner.

Runs external tools with a timeout, an optional AbortSignal and
line-by-line stdout/stderr callbacks (used for progress parsing).
``try_run`` is the best-effort variant used by the probes: absence of a
tool is expected there, so every failure collapses to ``None``.
"""

import codecs
import os
import platform
import re
import shlex
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Union

from voiceflow.config.constants import (
    COMMAND_TIMEOUT,
    DEPENDENCY_TIMEOUT,
    POLL_INTERVAL,
    TERMINATE_GRACE,
)
from voiceflow.utils.abort import AbortSignal
from voiceflow.utils.errors import Cancelled, CommandTimeout, NonZeroExit
from voiceflow.utils.logger import log

LineCallback = Callable[[str], None]

# git and yt-dlp redraw progress with bare carriage returns
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass
class CommandResult:
    stdout: str
    stderr: str


def _creation_flags() -> int:
    if platform.system() == "Windows":
        return subprocess.CREATE_NO_WINDOW
    return 0


class _StreamPump(threading.Thread):
    """Drains one pipe, splitting it into lines for the callback."""

    def __init__(self, stream, callback: Optional[LineCallback], name: str):
        super().__init__(name=name, daemon=True)
        self.stream = stream
        self.callback = callback
        self.chunks: List[str] = []
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    def run(self):
        try:
            while True:
                data = self.stream.read1(4096) if hasattr(self.stream, "read1") else self.stream.read(4096)
                if not data:
                    break
                self._feed(self._decoder.decode(data))
            self._feed(self._decoder.decode(b"", final=True))
            if self._pending:
                self._emit(self._pending)
                self._pending = ""
        except (OSError, ValueError) as e:
            # Pipe closed underneath us while the process was being killed
            log.debug(f"{self.name} stopped: {e}")

    def _feed(self, text: str):
        if not text:
            return
        self.chunks.append(text)
        parts = _LINE_BREAK.split(self._pending + text)
        self._pending = parts.pop()
        # "\r\n" split across two reads leaves an empty part; skip it
        for line in parts:
            if line:
                self._emit(line)

    def _emit(self, line: str):
        if self.callback is None:
            return
        try:
            self.callback(line)
        except Exception as e:
            log.debug(f"Line callback raised in {self.name}: {e}")

    @property
    def text(self) -> str:
        return "".join(self.chunks)


class CommandRunner:

    @staticmethod
    def run(
        command: str,
        args: Sequence[str] = (),
        cwd: Optional[str] = None,
        timeout: float = COMMAND_TIMEOUT,
        abort_signal: Optional[AbortSignal] = None,
        on_stdout_line: Optional[LineCallback] = None,
        on_stderr_line: Optional[LineCallback] = None,
        env: Optional[dict] = None,
    ) -> CommandResult:
        """
        Run ``command`` with ``args`` and wait for it.

        Raises:
            Cancelled: abort_signal fired before or during the run
            CommandTimeout: the process outlived ``timeout`` seconds
            NonZeroExit: the process exited with a non-zero code, or could
                not be started at all
        """
        argv = [command, *args]
        display = " ".join(argv)

        if abort_signal is not None and abort_signal.aborted:
            raise Cancelled(f"Cancelled before running '{display}'")

        log.info(f"Running: {display}" + (f" (cwd={cwd})" if cwd else ""))

        try:
            process = subprocess.Popen(
                argv,
                cwd=cwd,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                creationflags=_creation_flags(),
            )
        except FileNotFoundError:
            raise NonZeroExit(display, 127, f"command not found: {command}")
        except OSError as e:
            raise NonZeroExit(display, 126, str(e))

        stdout_pump = _StreamPump(process.stdout, on_stdout_line, f"stdout:{command}")
        stderr_pump = _StreamPump(process.stderr, on_stderr_line, f"stderr:{command}")
        stdout_pump.start()
        stderr_pump.start()

        unregister = lambda: None
        if abort_signal is not None:
            unregister = abort_signal.on_abort(lambda: CommandRunner._terminate(process))

        deadline = time.monotonic() + timeout
        try:
            while True:
                try:
                    process.wait(timeout=POLL_INTERVAL)
                    break
                except subprocess.TimeoutExpired:
                    pass
                if abort_signal is not None and abort_signal.aborted:
                    CommandRunner._terminate(process)
                    raise Cancelled(f"Cancelled while running '{display}'")
                if time.monotonic() >= deadline:
                    log.warning(f"Timeout after {timeout}s, killing: {display}")
                    process.kill()
                    raise CommandTimeout(display, timeout)
        finally:
            unregister()
            if process.poll() is None:
                process.kill()
            process.wait()
            stdout_pump.join(timeout=TERMINATE_GRACE)
            stderr_pump.join(timeout=TERMINATE_GRACE)
            for stream in (process.stdout, process.stderr):
                try:
                    stream.close()
                except OSError:
                    pass

        if abort_signal is not None and abort_signal.aborted:
            raise Cancelled(f"Cancelled while running '{display}'")

        result = CommandResult(stdout=stdout_pump.text, stderr=stderr_pump.text)
        if process.returncode != 0:
            log.debug(f"'{display}' exited with {process.returncode}: {result.stderr.strip()}")
            raise NonZeroExit(display, process.returncode, result.stderr)
        return result

    @staticmethod
    def _terminate(process: subprocess.Popen) -> None:
        if process.poll() is not None:
            return
        try:
            process.terminate()
            process.wait(timeout=TERMINATE_GRACE)
        except subprocess.TimeoutExpired:
            process.kill()
        except OSError as e:
            log.debug(f"Terminate failed: {e}")

    @staticmethod
    def try_run(
        command: Union[str, Sequence[str]],
        cwd: Optional[str] = None,
        timeout: float = DEPENDENCY_TIMEOUT,
    ) -> Optional[str]:
        """
        Run a probe command and return its trimmed stdout, or None on any
        failure (missing tool, non-zero exit, timeout).
        """
        if isinstance(command, str):
            argv = shlex.split(command, posix=os.name != "nt")
        else:
            argv = list(command)

        try:
            result = subprocess.run(
                argv,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout,
                creationflags=_creation_flags(),
            )
        except (OSError, subprocess.SubprocessError, ValueError) as e:
            log.debug(f"Probe command failed: {' '.join(argv)}: {e}")
            return None

        if result.returncode != 0:
            log.debug(f"Probe command failed: {' '.join(argv)} exited {result.returncode}: {result.stderr.strip()}")
            return None
        # Some tools (older pythons, cl.exe) print their banner on stderr
        return result.stdout.strip() or result.stderr.strip()


run = CommandRunner.run
try_run = CommandRunner.try_run
