"""
Installation orchestrator.

Checks both tools, lets the caller pick one of the missing ones, installs
it and repeats until nothing is pending or the caller stops.
"""

from typing import Callable, Dict, List, Optional

from voiceflow.schemas.environment import EnvironmentReport
from voiceflow.schemas.installation import (
    InstallationTarget,
    InstallState,
    StatusCallback,
    TargetSpec,
)
from voiceflow.services.installation.base import BaseInstaller
from voiceflow.services.installation.targets import get_version, is_installed, target_spec
from voiceflow.services.installation.whisper import WhisperInstaller
from voiceflow.services.installation.ytdlp import YtDlpInstaller
from voiceflow.services.recommendation_service import RecommendationService
from voiceflow.utils.abort import AbortSignal, raise_if_aborted
from voiceflow.utils.http_client import HttpClient
from voiceflow.utils.logger import log

# Receives the pending targets; returns the one to install or None to stop
TargetPrompt = Callable[[List[TargetSpec]], Optional[TargetSpec]]


class InstallationService:

    def __init__(
        self,
        env: EnvironmentReport,
        abort_signal: Optional[AbortSignal] = None,
        http_client: Optional[HttpClient] = None,
        status_callback: Optional[StatusCallback] = None,
    ):
        self.env = env
        self.abort_signal = abort_signal
        self.http_client = http_client
        self.status_callback = status_callback
        self.recommendation = RecommendationService.recommend(env.hardware)
        self.specs: Dict[InstallationTarget, TargetSpec] = {
            target: target_spec(target, env.platform, env.arch) for target in InstallationTarget
        }

    def check_installed(self) -> Dict[InstallationTarget, bool]:
        return {target: is_installed(spec) for target, spec in self.specs.items()}

    def installed_versions(self) -> Dict[InstallationTarget, Optional[str]]:
        return {target: get_version(spec) for target, spec in self.specs.items()}

    def pending_targets(self) -> List[TargetSpec]:
        return [self.specs[target] for target, installed in self.check_installed().items() if not installed]

    def installer_for(self, target: InstallationTarget) -> BaseInstaller:
        kwargs = dict(
            abort_signal=self.abort_signal,
            http_client=self.http_client,
            status_callback=self.status_callback,
        )
        spec = self.specs[target]
        if target == InstallationTarget.WHISPER_CPP:
            return WhisperInstaller(
                spec,
                recommendation=self.recommendation,
                dependencies=self.env.dependencies or None,
                **kwargs,
            )
        return YtDlpInstaller(spec, **kwargs)

    def install(self, target: InstallationTarget) -> InstallState:
        return self.installer_for(target).install()

    def run_automatic_installation(self, prompt: TargetPrompt) -> List[InstallationTarget]:
        """
        Install pending targets one at a time, as chosen by ``prompt``.

        Returns the targets installed in this session; an empty list with
        nothing pending means everything was already installed. Errors and
        cancellation propagate after the installer records its state.
        """
        installed = []
        while True:
            raise_if_aborted(self.abort_signal, "Installation cancelled")
            pending = self.pending_targets()
            if not pending:
                log.info("All tools are installed")
                return installed

            choice = prompt(pending)
            if choice is None:
                log.info("Installation stopped by user")
                return installed

            self.install(choice.target)
            installed.append(choice.target)


def run_automatic_installation(
    env: EnvironmentReport,
    abort_signal: Optional[AbortSignal],
    prompt: TargetPrompt,
    http_client: Optional[HttpClient] = None,
    status_callback: Optional[StatusCallback] = None,
) -> List[InstallationTarget]:
    service = InstallationService(env, abort_signal, http_client, status_callback)
    return service.run_automatic_installation(prompt)
