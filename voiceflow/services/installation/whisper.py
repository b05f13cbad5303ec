"""
whisper.cpp installer: shallow-clone the pinned tag, build with CMake,
then fetch the baseline English model.
"""

import os
import re
from typing import Optional

from voiceflow.config.constants import BUILD_TIMEOUT, COMMAND_TIMEOUT, WHISPER_CPP_REPO_DIR
from voiceflow.schemas.dependencies import DependencySet
from voiceflow.schemas.installation import DownloadProgress, InstallState
from voiceflow.schemas.recommendation import Backend, Recommendation
from voiceflow.services.command_runner import CommandRunner
from voiceflow.services.dependency_service import DependencyService
from voiceflow.services.download_service import DownloadService
from voiceflow.services.installation.base import BaseInstaller
from voiceflow.services.installation.targets import model_path, model_url, repo_path
from voiceflow.utils.errors import BuildToolsMissing, VoiceflowError
from voiceflow.utils.units import format_bytes

CLONE_PHASES = ("Receiving objects:", "Resolving deltas:")
PERCENT_RE = re.compile(r"(\d+)%")
SIZE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*([KMGT]i?B)")
BUILD_PERCENT_RE = re.compile(r"^\[\s*(\d+)%\]")

BUILD_TOOL_REMEDIES = {
    "git": "install Git (https://git-scm.com/downloads)",
    "cmake": "install CMake (https://cmake.org/download/)",
    "gcc/clang": "install GCC or Clang (Xcode Command Line Tools on macOS, Visual Studio Build Tools on Windows)",
}


def parse_clone_progress(line: str) -> Optional[str]:
    """
    ``"Receiving objects:  45% (120/266), 1.20 MiB | 2.00 MiB/s"`` ->
    ``"Receiving objects 45% (1.20MiB)"``. None for other lines.
    """
    phase = next((p for p in CLONE_PHASES if p in line), None)
    if phase is None:
        return None
    percent = PERCENT_RE.search(line)
    if not percent:
        return None
    text = f"{phase.rstrip(':')} {percent.group(1)}%"
    size = SIZE_RE.search(line)
    if size:
        text += f" ({size.group(1)}{size.group(2)})"
    return text


def parse_build_progress(line: str) -> Optional[int]:
    """CMake/make progress prefix ``"[ 42%] Building C object ..."`` -> 42."""
    match = BUILD_PERCENT_RE.match(line.strip())
    return int(match.group(1)) if match else None


def build_tools_remedy(missing) -> str:
    remedy = "; ".join(BUILD_TOOL_REMEDIES.get(name, f"install {name}") for name in missing)
    return remedy[:1].upper() + remedy[1:]


class WhisperInstaller(BaseInstaller):

    def __init__(self, spec, recommendation: Optional[Recommendation] = None,
                 dependencies: Optional[DependencySet] = None, **kwargs):
        super().__init__(spec, **kwargs)
        self.recommendation = recommendation
        self.dependencies = dependencies

    @property
    def repo_path(self) -> str:
        return repo_path(self.spec)

    @property
    def model_path(self) -> str:
        return model_path(self.spec)

    @property
    def is_built(self) -> bool:
        return os.path.isfile(self.spec.executable_path)

    def check(self) -> InstallState:
        state = super().check()
        if state == InstallState.NEEDS_INSTALL and self.is_built:
            self.report("whisper.cpp is built but the speech model is missing")
        return state

    def prepare(self) -> None:
        self.make_install_dir()
        if self.is_built:
            return
        self.report("Checking build tools...")
        self.check_build_tools()

    def check_build_tools(self) -> None:
        dependencies = self.dependencies
        if dependencies is None:
            dependencies = {
                "git": DependencyService.check_command("git"),
                "cmake": DependencyService.check_command("cmake"),
                "compiler": DependencyService.check_compiler(),
            }
        missing = DependencyService.missing_dependencies(dependencies)
        if missing:
            raise BuildToolsMissing(missing, suggestion=build_tools_remedy(missing))

    def fetch(self) -> None:
        if os.path.isdir(self.repo_path):
            self.report(f"Using existing checkout at {self.repo_path}")
            return

        self.report(f"Cloning whisper.cpp {self.spec.revision}...")
        CommandRunner.run(
            "git",
            ["clone", "--progress", "--depth", "1", "--branch", self.spec.revision,
             self.spec.source, WHISPER_CPP_REPO_DIR],
            cwd=self.spec.install_dir,
            abort_signal=self.abort_signal,
            on_stdout_line=self._on_clone_line,
            on_stderr_line=self._on_clone_line,
        )

    def _on_clone_line(self, line: str) -> None:
        text = parse_clone_progress(line)
        if text:
            self.report(f"Cloning whisper.cpp... {text}")

    def configure_args(self):
        args = ["-B", "build"]
        if self.recommendation is not None and self.recommendation.backend == Backend.CUDA:
            args.append("-DGGML_CUDA=1")
        return args

    def build_args(self):
        args = ["--build", "build", "--config", "Release"]
        if self.recommendation is not None:
            args += ["-j", str(self.recommendation.thread_count)]
        return args

    def build(self) -> None:
        if self.is_built:
            self.report(f"Using existing build at {self.spec.executable_path}")
            return

        self.set_state(InstallState.BUILDING, "Configuring build...")
        CommandRunner.run(
            "cmake",
            self.configure_args(),
            cwd=self.repo_path,
            timeout=COMMAND_TIMEOUT,
            abort_signal=self.abort_signal,
        )

        self.checkpoint()
        self.report("Compiling whisper.cpp, this can take a few minutes...")
        CommandRunner.run(
            "cmake",
            self.build_args(),
            cwd=self.repo_path,
            timeout=BUILD_TIMEOUT,
            abort_signal=self.abort_signal,
            on_stdout_line=self._on_build_line,
        )

        if not self.is_built:
            raise VoiceflowError(
                f"Build finished but {self.spec.executable_name} was not found",
                suggestion="Check the log file for compiler output",
            )

    def _on_build_line(self, line: str) -> None:
        percent = parse_build_progress(line)
        if percent is not None:
            self.report(f"Compiling whisper.cpp... {percent}%")

    def verify(self) -> None:
        if not self.is_built:
            raise VoiceflowError(
                f"{self.name} was not found at {self.spec.executable_path}",
                suggestion="Re-run `voiceflow setup`; see the log file for details",
            )
        if not os.path.isfile(self.model_path):
            self.download_model()
        super().verify()

    def download_model(self) -> None:
        self.make_install_dir(os.path.dirname(self.model_path))
        self.report("Downloading base speech model...")
        # Models run to hundreds of MB; stream them to disk
        DownloadService.download_file(
            model_url(),
            self.model_path,
            progress_callback=self._on_model_progress,
            abort_signal=self.abort_signal,
            http_client=self.http_client,
            buffered=False,
        )

    def _on_model_progress(self, progress: DownloadProgress) -> None:
        self.report(
            f"Downloading base speech model... {progress.percent}% "
            f"({format_bytes(progress.downloaded_bytes)}/{format_bytes(progress.total_bytes)})"
        )
