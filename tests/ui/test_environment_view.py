from rich.console import Console

from voiceflow.schemas.dependencies import DependencyInfo
from voiceflow.schemas.environment import EnvironmentReport
from voiceflow.ui.views.environment import display_environment_summary, platform_name, status_text

OK = DependencyInfo(available=True, version="2.43.0")
MISSING = DependencyInfo(available=False, error="not found")


def render(env):
    console = Console(record=True, width=120, color_system=None)
    display_environment_summary(env, console)
    return console.export_text()


def test_platform_name():
    assert platform_name("darwin") == "macOS"
    assert platform_name("plan9") == "Unknown"


def test_status_text():
    assert "installed" in status_text(OK) and "2.43.0" in status_text(OK)
    assert "not installed" in status_text(MISSING)
    assert "not installed" in status_text(None)


def test_summary_sections(make_profile, cuda_gpu):
    env = EnvironmentReport(
        platform="linux", arch="x86_64", python_version="3.12.1", memory_gb=32,
        hardware=make_profile(cores=12, memory_gb=32, gpu=cuda_gpu),
        dependencies={"git": OK, "cmake": OK, "compiler": MISSING}, network_ok=True,
    )
    text = render(env)

    assert "Linux (x86_64)" in text
    assert "3.12.1" in text
    assert "NVIDIA RTX 3080 (CUDA)" in text
    assert "10240 MB" in text
    assert "reachable" in text
    assert "No C/C++ compiler found" in text
    assert "CUDA backend" in text
    # Recommendation for a CUDA machine
    assert "cuda" in text.lower()
    assert "Threads" in text


def test_summary_without_gpu_or_network(make_profile):
    env = EnvironmentReport(platform="darwin", arch="arm64", python_version="3.11.4", memory_gb=8,
                            hardware=make_profile(os_name="darwin", arch="arm64"),
                            dependencies={"git": OK, "cmake": OK, "compiler": OK})
    text = render(env)

    assert "macOS (arm64)" in text
    assert "no dedicated GPU detected" in text
    assert "Network" not in text
    assert "Warnings" not in text


def test_missing_optional_tools_are_not_errors(make_profile):
    env = EnvironmentReport(platform="linux", arch="x86_64", python_version="3.12.1", memory_gb=8,
                            hardware=make_profile(),
                            dependencies={"git": OK, "cmake": OK, "compiler": OK,
                                          "python": OK, "make": MISSING})
    text = render(env)

    assert "not installed (optional)" in text
    assert "✗" not in text
