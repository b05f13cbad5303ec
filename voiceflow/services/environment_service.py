import platform
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from voiceflow.config.constants import GIB, LOW_DISK_WARNING_BYTES, LOW_MEMORY_WARNING_BYTES
from voiceflow.schemas.environment import EnvironmentReport
from voiceflow.services.dependency_service import DependencyService
from voiceflow.services.hardware.platform_info import current_os
from voiceflow.services.system_service import SystemService
from voiceflow.utils.http_client import HttpClient
from voiceflow.utils.logger import log

LARGE_MEMORY_BYTES = 16 * GIB
MEDIUM_MEMORY_BYTES = 8 * GIB
MANY_CORES = 8


class EnvironmentService:
    """
    Builds the EnvironmentReport the installer and the `env` command work
    from, plus the human-readable warnings and suggestions derived from it.
    """

    @staticmethod
    def detect_environment(http_client: Optional[HttpClient] = None) -> EnvironmentReport:
        """
        Probe dependencies, hardware and (when a client is given) network
        reachability concurrently. Never raises for probe failures.
        """
        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="env") as executor:
            dependencies_future = executor.submit(DependencyService.check_dependencies)
            hardware_future = executor.submit(SystemService.probe_hardware)
            network_future = executor.submit(http_client.check_connectivity) if http_client else None

        hardware = hardware_future.result()
        dependencies = dependencies_future.result()
        network_ok = network_future.result() if network_future else None

        report = EnvironmentReport(
            platform=current_os(),
            arch=platform.machine(),
            python_version=platform.python_version(),
            memory_gb=round(hardware.memory.total_bytes / GIB),
            hardware=hardware,
            dependencies=dependencies,
            network_ok=network_ok,
        )
        log.debug(f"Environment: {report}")
        return report

    @staticmethod
    def get_warnings(report: EnvironmentReport) -> List[str]:
        warnings = []
        hardware = report.hardware

        if hardware.memory.total_bytes < LOW_MEMORY_WARNING_BYTES:
            warnings.append("Low system memory; larger models may not run")
        if hardware.disk.available_bytes < LOW_DISK_WARNING_BYTES:
            warnings.append("Low free disk space; free some space or choose a smaller model")

        dependencies = report.dependencies
        if not _available(dependencies, "git"):
            warnings.append("Git is not installed; some features will not work")
        if not _available(dependencies, "cmake"):
            warnings.append("CMake is not installed; native dependencies cannot be built")
        if not _available(dependencies, "compiler"):
            warnings.append("No C/C++ compiler found; native dependencies cannot be built")

        if report.network_ok is False:
            warnings.append("Network check failed; downloads may not work")
        return warnings

    @staticmethod
    def get_suggestions(report: EnvironmentReport) -> List[str]:
        suggestions = []
        hardware = report.hardware

        if hardware.has_gpu:
            gpu = hardware.gpu
            if gpu.supports_cuda:
                suggestions.append("NVIDIA GPU detected; the CUDA backend gives the best performance")
            elif gpu.supports_metal:
                suggestions.append("Apple GPU detected; the Metal backend gives the best performance")
            elif gpu.supports_opencl:
                suggestions.append("OpenCL support detected; consider the OpenCL backend")

        total_memory = hardware.memory.total_bytes
        if total_memory >= LARGE_MEMORY_BYTES:
            suggestions.append("Plenty of memory; larger models will give better accuracy")
        elif total_memory >= MEDIUM_MEMORY_BYTES:
            suggestions.append("Use the medium or small model to balance speed and quality")
        else:
            suggestions.append("Use the tiny or base model for smooth transcription")

        if hardware.cpu.physical_cores >= MANY_CORES:
            suggestions.append("Many CPU cores available; raise the thread count for faster transcription")
        return suggestions


def _available(dependencies, name: str) -> bool:
    info = dependencies.get(name)
    return info is not None and info.available


detect_environment = EnvironmentService.detect_environment
get_warnings = EnvironmentService.get_warnings
get_suggestions = EnvironmentService.get_suggestions
