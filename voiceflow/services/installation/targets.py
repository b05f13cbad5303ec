"""
Static definitions of the installable tools.

A TargetSpec is derived from the install directories in the config and the
host platform; nothing here touches the network.
"""

import os
from typing import Optional

from voiceflow.config.constants import (
    WHISPER_BASE_MODEL,
    WHISPER_CPP_BINARY,
    WHISPER_CPP_REPO_DIR,
    WHISPER_CPP_REPO_URL,
    WHISPER_CPP_VERSION,
    WHISPER_MODEL_URL_DIR,
    YTDLP_DOWNLOAD_URL_DIR,
)
from voiceflow.config.manager import config_manager
from voiceflow.schemas.installation import InstallationTarget, TargetSpec
from voiceflow.services.command_runner import CommandRunner
from voiceflow.utils.errors import UnsupportedPlatform

ARM64_MACHINES = ("arm64", "aarch64")


def yt_dlp_executable_name(os_name: str, arch: str) -> str:
    """Release asset name for the host; yt-dlp ships one binary per platform."""
    if os_name == "windows":
        return "yt-dlp.exe"
    if os_name == "darwin":
        return "yt-dlp_macos"
    if os_name == "linux":
        return "yt-dlp_linux_aarch64" if arch.lower() in ARM64_MACHINES else "yt-dlp_linux"
    raise UnsupportedPlatform(f"Unsupported platform: {os_name}")


def whisper_executable_path(repo_path: str, os_name: str) -> str:
    # MSVC multi-config generators put binaries under a per-config folder
    if os_name == "windows":
        return os.path.join(repo_path, "build", "bin", "Release", WHISPER_CPP_BINARY + ".exe")
    return os.path.join(repo_path, "build", "bin", WHISPER_CPP_BINARY)


def whisper_model_filename(model: str = WHISPER_BASE_MODEL) -> str:
    return f"ggml-{model}.bin"


def yt_dlp_target(os_name: str, arch: str, install_dir: Optional[str] = None) -> TargetSpec:
    install_dir = install_dir or config_manager.yt_dlp_dir
    executable_name = yt_dlp_executable_name(os_name, arch)
    return TargetSpec(
        target=InstallationTarget.YT_DLP,
        display_name="yt-dlp",
        description="Feature-rich command-line audio/video downloader",
        executable_name=executable_name,
        install_dir=install_dir,
        executable_path=os.path.join(install_dir, executable_name),
        source=f"{YTDLP_DOWNLOAD_URL_DIR}/{executable_name}",
    )


def whisper_target(os_name: str, install_dir: Optional[str] = None) -> TargetSpec:
    install_dir = install_dir or config_manager.whisper_dir
    repo_path = os.path.join(install_dir, WHISPER_CPP_REPO_DIR)
    executable_path = whisper_executable_path(repo_path, os_name)
    return TargetSpec(
        target=InstallationTarget.WHISPER_CPP,
        display_name="whisper.cpp",
        description="C/C++ port of OpenAI's Whisper speech recognition model",
        executable_name=os.path.basename(executable_path),
        install_dir=install_dir,
        executable_path=executable_path,
        source=WHISPER_CPP_REPO_URL,
        revision=WHISPER_CPP_VERSION,
    )


def target_spec(target: InstallationTarget, os_name: str, arch: str) -> TargetSpec:
    if target == InstallationTarget.YT_DLP:
        return yt_dlp_target(os_name, arch)
    return whisper_target(os_name)


def repo_path(spec: TargetSpec) -> str:
    return os.path.join(spec.install_dir, WHISPER_CPP_REPO_DIR)


def model_path(spec: TargetSpec, model: str = WHISPER_BASE_MODEL) -> str:
    return os.path.join(repo_path(spec), "models", whisper_model_filename(model))


def model_url(model: str = WHISPER_BASE_MODEL) -> str:
    return f"{WHISPER_MODEL_URL_DIR}/{whisper_model_filename(model)}"


def is_installed(spec: TargetSpec) -> bool:
    """
    Detection predicate: the expected executable exists, and for whisper.cpp
    so does the baseline model. No process is run.
    """
    if not os.path.isfile(spec.executable_path):
        return False
    if spec.target == InstallationTarget.WHISPER_CPP:
        return os.path.isfile(model_path(spec))
    return True


def get_version(spec: TargetSpec) -> Optional[str]:
    """Ask an installed tool for its version; None if missing or it fails."""
    if not is_installed(spec):
        return None
    if spec.revision:
        # Built from a pinned tag; the binary has no version flag
        return spec.revision
    return CommandRunner.try_run([spec.executable_path, *spec.version_args], cwd=spec.install_dir)
