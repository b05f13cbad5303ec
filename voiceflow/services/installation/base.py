import os
from typing import Optional

from voiceflow.schemas.installation import InstallState, StatusCallback, TargetSpec
from voiceflow.services.installation.targets import is_installed
from voiceflow.utils.abort import AbortSignal, raise_if_aborted
from voiceflow.utils.errors import Cancelled, FileSystemError, VoiceflowError
from voiceflow.utils.http_client import HttpClient
from voiceflow.utils.logger import log


class BaseInstaller:
    """
    Drives one target through the install state machine:

        NOT_CHECKED -> CHECKING -> ALREADY_INSTALLED | NEEDS_INSTALL
        NEEDS_INSTALL -> PREPARING -> FETCHING -> [BUILDING] -> VERIFYING
                      -> INSTALLED | FAILED | CANCELLED

    Subclasses implement ``prepare``, ``fetch``, ``verify`` and optionally
    ``build``. Status changes and progress text go to ``status_callback``.
    """

    def __init__(
        self,
        spec: TargetSpec,
        abort_signal: Optional[AbortSignal] = None,
        http_client: Optional[HttpClient] = None,
        status_callback: Optional[StatusCallback] = None,
    ):
        self.spec = spec
        self.abort_signal = abort_signal
        self.http_client = http_client
        self.status_callback = status_callback
        self.state = InstallState.NOT_CHECKED

    @property
    def name(self) -> str:
        return self.spec.display_name

    def set_state(self, state: InstallState, message: str = "") -> None:
        self.state = state
        log.debug(f"{self.name}: {state.value} {message}".rstrip())
        self.report(message)

    def report(self, message: str) -> None:
        if self.status_callback:
            self.status_callback(self.state, message)

    def check(self) -> InstallState:
        self.set_state(InstallState.CHECKING, f"Checking {self.name}...")
        if is_installed(self.spec):
            self.set_state(InstallState.ALREADY_INSTALLED, f"{self.name} is already installed")
        else:
            self.set_state(InstallState.NEEDS_INSTALL, f"{self.name} is not installed")
        return self.state

    def install(self) -> InstallState:
        """
        Install the target unless it is already present.

        Returns the final state (ALREADY_INSTALLED or INSTALLED). Failures
        and cancellation are re-raised after the state is recorded.
        """
        if self.check() == InstallState.ALREADY_INSTALLED:
            return self.state

        try:
            self.checkpoint()
            self.set_state(InstallState.PREPARING, f"Preparing {self.name}...")
            self.prepare()

            self.checkpoint()
            self.set_state(InstallState.FETCHING, f"Downloading {self.name}...")
            self.fetch()

            self.checkpoint()
            self.build()

            self.checkpoint()
            self.set_state(InstallState.VERIFYING, f"Verifying {self.name}...")
            self.verify()
            self.checkpoint()
        except Cancelled:
            self.set_state(InstallState.CANCELLED, f"{self.name} installation cancelled")
            raise
        except VoiceflowError as e:
            self.set_state(InstallState.FAILED, e.message)
            raise

        self.set_state(InstallState.INSTALLED, f"{self.name} installed")
        log.info(f"{self.name} installed at {self.spec.executable_path}")
        return self.state

    def checkpoint(self) -> None:
        raise_if_aborted(self.abort_signal, f"{self.name} installation cancelled")

    def make_install_dir(self, path: Optional[str] = None) -> None:
        path = path or self.spec.install_dir
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"Cannot create install directory {path}: {e}")

    def prepare(self) -> None:
        self.make_install_dir()

    def fetch(self) -> None:
        raise NotImplementedError

    def build(self) -> None:
        pass

    def verify(self) -> None:
        if not is_installed(self.spec):
            raise VoiceflowError(
                f"{self.name} was not found at {self.spec.executable_path}",
                suggestion="Re-run `voiceflow setup`; see the log file for details",
            )
