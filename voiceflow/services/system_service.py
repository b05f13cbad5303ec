from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Dict, Tuple

from voiceflow.schemas.hardware import HardwareProfile
from voiceflow.services.hardware.cpu import detect_cpu, default_cpu
from voiceflow.services.hardware.disk import detect_disk, default_disk
from voiceflow.services.hardware.gpu import detect_gpu, default_gpu
from voiceflow.services.hardware.memory import detect_memory, default_memory
from voiceflow.services.hardware.platform_info import detect_platform, default_platform
from voiceflow.utils.logger import log

PROBE_WALL_TIMEOUT = 30


class SystemService:
    """
    Hardware prober. Runs every component probe in parallel and never
    fails: a probe that raises or hangs is replaced by its default.
    """

    # component -> (probe, default factory)
    PROBES: Dict[str, Tuple[Callable, Callable]] = {
        "cpu": (detect_cpu, default_cpu),
        "memory": (detect_memory, default_memory),
        "gpu": (detect_gpu, default_gpu),
        "disk": (detect_disk, default_disk),
        "platform": (detect_platform, default_platform),
    }

    @classmethod
    def probe_hardware(cls, timeout: float = PROBE_WALL_TIMEOUT) -> HardwareProfile:
        results = {}
        executor = ThreadPoolExecutor(max_workers=len(cls.PROBES), thread_name_prefix="probe")
        try:
            futures = {executor.submit(probe): name for name, (probe, _) in cls.PROBES.items()}
            done, not_done = wait(futures, timeout=timeout)

            for future in done:
                name = futures[future]
                try:
                    results[name] = future.result()
                except Exception as e:
                    log.warning(f"{name} detection failed, using defaults: {e}")

            for future in not_done:
                log.warning(f"{futures[future]} detection did not finish in {timeout}s, using defaults")
                future.cancel()
        finally:
            # Don't block on a hung probe; its subprocess carries its own timeout
            executor.shutdown(wait=False)

        for name, (_, default) in cls.PROBES.items():
            if name not in results:
                results[name] = default()

        return HardwareProfile(
            cpu=results["cpu"],
            memory=results["memory"],
            gpu=results["gpu"],
            disk=results["disk"],
            platform=results["platform"],
        )


probe_hardware = SystemService.probe_hardware
