import time
from unittest.mock import patch

import pytest

from voiceflow.schemas.hardware import CPUInfo, GPUInfo, MemoryInfo
from voiceflow.services.hardware.base import DetectionFailedError
from voiceflow.services.hardware.cpu import default_cpu
from voiceflow.services.hardware.memory import default_memory
from voiceflow.services.system_service import SystemService


def _with_probe(name, probe):
    probes = dict(SystemService.PROBES)
    probes[name] = (probe, SystemService.PROBES[name][1])
    return patch.object(SystemService, "PROBES", probes)


class TestProbeHardware:

    @pytest.mark.timeout(60)
    def test_real_probe_returns_complete_profile(self):
        profile = SystemService.probe_hardware()
        assert profile.cpu.physical_cores >= 1
        assert profile.cpu.logical_threads >= 1
        assert profile.memory.total_bytes >= 0
        assert profile.platform.os

    def test_failed_probe_uses_default(self):
        def broken():
            raise DetectionFailedError("RAM", "Could not detect system RAM")

        with _with_probe("memory", broken):
            profile = SystemService.probe_hardware()
        assert profile.memory == default_memory()

    @pytest.mark.timeout(30)
    def test_hung_probe_uses_default(self):
        def hung():
            time.sleep(5)
            return CPUInfo(model="late", physical_cores=64, logical_threads=128, architecture="x86_64")

        with _with_probe("cpu", hung):
            profile = SystemService.probe_hardware(timeout=0.5)
        assert profile.cpu == default_cpu()

    def test_probes_are_independent(self):
        gpu = GPUInfo(available=True, vendor="NVIDIA", model="RTX", supports_cuda=True)
        memory = MemoryInfo(total_bytes=16, available_bytes=8, usage_percent=50)

        def broken():
            raise RuntimeError("boom")

        with _with_probe("gpu", lambda: gpu), _with_probe("cpu", broken):
            with _with_probe("memory", lambda: memory):
                profile = SystemService.probe_hardware()

        assert profile.cpu == default_cpu()
        assert profile.gpu == gpu
        assert profile.has_gpu

    def test_profile_is_fresh_per_call(self):
        assert SystemService.probe_hardware() is not SystemService.probe_hardware()
