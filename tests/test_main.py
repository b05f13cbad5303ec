from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from voiceflow.config.constants import VERSION
from voiceflow.main import cli
from voiceflow.schemas.audio import AudioProgress, AudioStage
from voiceflow.utils.errors import BuildToolsMissing, Cancelled, NetworkError


@pytest.fixture
def runner():
    return CliRunner()


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert VERSION in result.output


def test_help_lists_commands(runner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("env", "setup", "download"):
        assert command in result.output


@patch("voiceflow.main.display_environment_summary")
@patch("voiceflow.main.EnvironmentService.detect_environment")
def test_env(mock_detect, mock_display, runner):
    result = runner.invoke(cli, ["env"])

    assert result.exit_code == 0
    mock_display.assert_called_once_with(mock_detect.return_value)


@patch("voiceflow.main.run_interactive_setup", side_effect=BuildToolsMissing(["cmake"], suggestion="Install CMake"))
def test_setup_error_exits_1(mock_setup, runner):
    result = runner.invoke(cli, ["setup"])

    assert result.exit_code == 1
    assert "Missing build tools: cmake" in result.output
    assert "Install CMake" in result.output


@patch("voiceflow.main.run_interactive_setup", side_effect=Cancelled("Installation cancelled"))
def test_setup_cancel_exits_0(mock_setup, runner):
    result = runner.invoke(cli, ["setup"])

    assert result.exit_code == 0
    assert "Installation cancelled" in result.output


@patch("voiceflow.main.AudioService.download_wav")
def test_download(mock_download, runner, tmp_path):
    def fake_download(url, output, progress_callback=None, abort_signal=None):
        progress_callback(AudioProgress(AudioStage.DOWNLOAD, percent=42.0))
        progress_callback(AudioProgress(AudioStage.CONVERT))
        return Path(output) / "Talk.wav"

    mock_download.side_effect = fake_download

    result = runner.invoke(cli, ["download", "https://example.com/v", "-o", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "Saved to:" in result.output
    assert "Talk.wav" in result.output
    assert mock_download.call_args[0] == ("https://example.com/v", str(tmp_path))


@patch("voiceflow.main.AudioService.download_wav", side_effect=NetworkError("HTTP 403"))
def test_download_error_exits_1(mock_download, runner):
    result = runner.invoke(cli, ["download", "https://example.com/v"])

    assert result.exit_code == 1
    assert "HTTP 403" in result.output


@patch("voiceflow.main.AudioService.download_wav", side_effect=RuntimeError("boom"))
def test_unexpected_error_exits_1(mock_download, runner):
    result = runner.invoke(cli, ["download", "https://example.com/v"])

    assert result.exit_code == 1
    assert "Unexpected error: boom" in result.output


def test_download_requires_url(runner):
    result = runner.invoke(cli, ["download"])
    assert result.exit_code == 2
