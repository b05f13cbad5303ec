from typing import List, Optional

from rich.console import Console
from rich.prompt import Prompt

from voiceflow.schemas.installation import InstallState, TargetSpec
from voiceflow.services.environment_service import EnvironmentService
from voiceflow.services.installation_service import InstallationService
from voiceflow.ui.views.environment import display_environment_summary
from voiceflow.utils.abort import AbortSignal, bind_os_signals
from voiceflow.utils.console import console as default_console
from voiceflow.utils.http_client import HttpClient
from voiceflow.utils.logger import log

QUIT_CHOICE = "quit"
ACTIVE_STATES = (
    InstallState.PREPARING,
    InstallState.FETCHING,
    InstallState.BUILDING,
    InstallState.VERIFYING,
)


class SetupWizard:
    """
    Interactive installation session.

    Owns the session's AbortSignal and binds SIGINT/SIGTERM to it for the
    duration of ``run``. Errors and cancellation propagate to the caller.
    """

    def __init__(self, http_client: HttpClient, console: Optional[Console] = None):
        self.http_client = http_client
        self.console = console or default_console
        self.abort_signal = AbortSignal()
        self._status = None

    def run(self) -> None:
        with bind_os_signals(self.abort_signal):
            try:
                self._run()
            finally:
                self._stop_status()

    def _run(self) -> None:
        with self.console.status("[cyan]Detecting your system...[/cyan]"):
            env = EnvironmentService.detect_environment(self.http_client)
        display_environment_summary(env, self.console)

        service = InstallationService(
            env,
            abort_signal=self.abort_signal,
            http_client=self.http_client,
            status_callback=self.on_status,
        )
        self.show_installed(service)
        installed = service.run_automatic_installation(self.choose_target)

        if not service.pending_targets():
            self.console.print("[green]✅ All tools are installed[/green]")
        elif not installed:
            self.console.print("[yellow]Nothing installed. Run `voiceflow setup` again when ready.[/yellow]")

    def show_installed(self, service: InstallationService) -> None:
        for target, version in service.installed_versions().items():
            if version:
                name = service.specs[target].display_name
                self.console.print(f"[green]✓[/green] {name} [dim]{version}[/dim]")

    def choose_target(self, pending: List[TargetSpec]) -> Optional[TargetSpec]:
        self.console.print()
        self.console.print("[bold]Tools to install:[/bold]")
        for spec in pending:
            self.console.print(f"  [cyan]{spec.display_name}[/cyan] [dim]{spec.description}[/dim]")

        names = [spec.display_name for spec in pending]
        answer = Prompt.ask(
            "Select a tool to install",
            choices=names + [QUIT_CHOICE],
            default=names[0],
            console=self.console,
        )
        if answer == QUIT_CHOICE:
            return None
        return next(spec for spec in pending if spec.display_name == answer)

    def on_status(self, state: InstallState, message: str) -> None:
        if state in ACTIVE_STATES:
            if self._status is None:
                self._status = self.console.status(f"[cyan]{message}[/cyan]")
                self._status.start()
            elif message:
                self._status.update(f"[cyan]{message}[/cyan]")
            return

        if state == InstallState.INSTALLED:
            self._stop_status()
            self.console.print(f"[green]✅ {message}[/green]")
        elif state in (InstallState.FAILED, InstallState.CANCELLED):
            # Reported by the command once the error reaches it
            self._stop_status()
        else:
            log.debug(f"{state.value}: {message}")

    def _stop_status(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None


def run_interactive_setup(http_client: HttpClient, console: Optional[Console] = None) -> None:
    SetupWizard(http_client, console).run()
