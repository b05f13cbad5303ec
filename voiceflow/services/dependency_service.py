from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

from voiceflow.config.constants import DEPENDENCY_TIMEOUT
from voiceflow.schemas.dependencies import (
    DependencyInfo,
    DependencySet,
    DEPENDENCY_LABELS,
    REQUIRED_DEPENDENCIES,
)
from voiceflow.services.command_runner import CommandRunner
from voiceflow.services.hardware.platform_info import current_os
from voiceflow.utils.errors import VoiceflowError
from voiceflow.utils.logger import log
from voiceflow.utils.parse import extract_version


class DependencyService:
    """Probes the external build tools whisper.cpp needs."""

    COMPILER_FAMILIES = ("gcc", "clang")
    PYTHON_COMMANDS = ("python3", "python")

    @staticmethod
    def check_command(command: str, args: Sequence[str] = ("--version",)) -> DependencyInfo:
        try:
            result = CommandRunner.run(command, list(args), timeout=DEPENDENCY_TIMEOUT)
        except VoiceflowError as e:
            log.debug(f"Dependency check '{command}' failed: {e}")
            return DependencyInfo(available=False, error=str(e))
        output = result.stdout or result.stderr
        return DependencyInfo(available=True, version=extract_version(output))

    @staticmethod
    def check_compiler() -> DependencyInfo:
        if current_os() == "windows":
            # MSVC prints its banner on stderr and takes no version flag
            info = DependencyService.check_command("cl", args=())
            if info.available:
                return DependencyInfo(available=True, version=f"msvc {info.version}")
        for family in DependencyService.COMPILER_FAMILIES:
            info = DependencyService.check_command(family)
            if info.available:
                return DependencyInfo(available=True, version=f"{family} {info.version}")
        return DependencyInfo(available=False, error="gcc or clang compiler not found")

    @staticmethod
    def check_python() -> DependencyInfo:
        info = DependencyInfo(available=False, error="python not found")
        for command in DependencyService.PYTHON_COMMANDS:
            info = DependencyService.check_command(command)
            if info.available:
                return info
        return info

    @staticmethod
    def check_dependencies() -> DependencySet:
        """Probe every tool concurrently. Never raises."""
        checks = {
            "git": lambda: DependencyService.check_command("git"),
            "cmake": lambda: DependencyService.check_command("cmake"),
            "compiler": DependencyService.check_compiler,
            "python": DependencyService.check_python,
            "make": lambda: DependencyService.check_command("make"),
        }
        with ThreadPoolExecutor(max_workers=len(checks), thread_name_prefix="dep") as executor:
            futures = {name: executor.submit(check) for name, check in checks.items()}

        dependencies: DependencySet = {}
        for name, future in futures.items():
            try:
                dependencies[name] = future.result()
            except Exception as e:
                dependencies[name] = DependencyInfo(available=False, error=str(e))
        return dependencies

    @staticmethod
    def meets_requirements(dependencies: DependencySet) -> bool:
        return all(
            dependencies.get(name) is not None and dependencies[name].available
            for name in REQUIRED_DEPENDENCIES
        )

    @staticmethod
    def missing_dependencies(dependencies: DependencySet) -> List[str]:
        return [
            DEPENDENCY_LABELS[name]
            for name in REQUIRED_DEPENDENCIES
            if dependencies.get(name) is None or not dependencies[name].available
        ]


check_dependencies = DependencyService.check_dependencies
meets_requirements = DependencyService.meets_requirements
missing_dependencies = DependencyService.missing_dependencies
