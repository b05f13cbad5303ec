import os
from unittest.mock import patch

import pytest

from voiceflow.config.constants import WHISPER_CPP_VERSION, YTDLP_DOWNLOAD_URL_DIR
from voiceflow.schemas.installation import InstallationTarget
from voiceflow.services.installation.targets import (
    get_version,
    is_installed,
    model_path,
    model_url,
    whisper_target,
    yt_dlp_executable_name,
    yt_dlp_target,
)
from voiceflow.utils.errors import UnsupportedPlatform


@pytest.mark.parametrize("os_name, arch, expected", [
    ("windows", "AMD64", "yt-dlp.exe"),
    ("darwin", "arm64", "yt-dlp_macos"),
    ("linux", "x86_64", "yt-dlp_linux"),
    ("linux", "aarch64", "yt-dlp_linux_aarch64"),
    ("linux", "arm64", "yt-dlp_linux_aarch64"),
])
def test_yt_dlp_executable_name(os_name, arch, expected):
    assert yt_dlp_executable_name(os_name, arch) == expected


def test_unsupported_platform():
    with pytest.raises(UnsupportedPlatform):
        yt_dlp_executable_name("sunos", "sparc")


def test_yt_dlp_target(tmp_path):
    spec = yt_dlp_target("linux", "x86_64", install_dir=str(tmp_path))
    assert spec.target == InstallationTarget.YT_DLP
    assert spec.source == f"{YTDLP_DOWNLOAD_URL_DIR}/yt-dlp_linux"
    assert spec.executable_path == os.path.join(str(tmp_path), "yt-dlp_linux")


def test_whisper_target_paths(tmp_path):
    spec = whisper_target("linux", install_dir=str(tmp_path))
    assert spec.revision == WHISPER_CPP_VERSION
    assert spec.executable_path == os.path.join(str(tmp_path), "whisper.cpp", "build", "bin", "whisper-cli")
    assert model_path(spec).endswith(os.path.join("whisper.cpp", "models", "ggml-base.en.bin"))
    assert model_url().endswith("/ggml-base.en.bin")

    windows = whisper_target("windows", install_dir=str(tmp_path))
    assert windows.executable_path.endswith(os.path.join("Release", "whisper-cli.exe"))


def test_is_installed_checks_file(tmp_path):
    spec = yt_dlp_target("linux", "x86_64", install_dir=str(tmp_path))
    assert not is_installed(spec)
    open(spec.executable_path, "wb").close()
    assert is_installed(spec)


@patch("voiceflow.services.installation.targets.CommandRunner.try_run", return_value="2025.06.09")
def test_get_version(mock_try_run, tmp_path):
    spec = yt_dlp_target("linux", "x86_64", install_dir=str(tmp_path))
    assert get_version(spec) is None
    mock_try_run.assert_not_called()

    open(spec.executable_path, "wb").close()
    assert get_version(spec) == "2025.06.09"
    mock_try_run.assert_called_once_with([spec.executable_path, "--version"], cwd=str(tmp_path))


def test_get_version_of_built_target_is_revision(tmp_path):
    spec = whisper_target("linux", install_dir=str(tmp_path))
    os.makedirs(os.path.dirname(spec.executable_path))
    open(spec.executable_path, "wb").close()
    os.makedirs(os.path.dirname(model_path(spec)))
    open(model_path(spec), "wb").close()
    assert get_version(spec) == WHISPER_CPP_VERSION


def test_whisper_needs_binary_and_model(tmp_path):
    spec = whisper_target("linux", install_dir=str(tmp_path))
    os.makedirs(os.path.dirname(spec.executable_path))
    open(spec.executable_path, "wb").close()
    assert not is_installed(spec)

    os.makedirs(os.path.dirname(model_path(spec)))
    open(model_path(spec), "wb").close()
    assert is_installed(spec)
