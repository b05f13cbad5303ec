from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from voiceflow.schemas.environment import EnvironmentReport
from voiceflow.schemas.installation import InstallationTarget, InstallState
from voiceflow.services.installation.targets import whisper_target, yt_dlp_target
from voiceflow.ui.wizard.setup_wizard import SetupWizard
from voiceflow.utils.errors import BuildToolsMissing


@pytest.fixture
def console():
    return Console(record=True, width=120, color_system=None)


@pytest.fixture
def env(make_profile):
    return EnvironmentReport(platform="linux", arch="x86_64", python_version="3.12.1",
                             memory_gb=8, hardware=make_profile())


@pytest.fixture
def specs(tmp_path):
    return [
        yt_dlp_target("linux", "x86_64", install_dir=str(tmp_path)),
        whisper_target("linux", install_dir=str(tmp_path)),
    ]


class TestChooseTarget:

    @patch("voiceflow.ui.wizard.setup_wizard.Prompt.ask", return_value="whisper.cpp")
    def test_returns_chosen_spec(self, mock_ask, console, specs):
        wizard = SetupWizard(MagicMock(), console)
        assert wizard.choose_target(specs).target == InstallationTarget.WHISPER_CPP
        assert mock_ask.call_args.kwargs["choices"] == ["yt-dlp", "whisper.cpp", "quit"]
        assert "Feature-rich command-line audio/video downloader" in console.export_text()

    @patch("voiceflow.ui.wizard.setup_wizard.Prompt.ask", return_value="quit")
    def test_quit(self, mock_ask, console, specs):
        assert SetupWizard(MagicMock(), console).choose_target(specs) is None


class TestRun:

    @patch("voiceflow.ui.wizard.setup_wizard.display_environment_summary")
    @patch("voiceflow.ui.wizard.setup_wizard.InstallationService")
    @patch("voiceflow.ui.wizard.setup_wizard.EnvironmentService.detect_environment")
    def test_all_installed(self, mock_detect, mock_service_cls, mock_display, console, env):
        mock_detect.return_value = env
        service = mock_service_cls.return_value
        service.run_automatic_installation.return_value = []
        service.pending_targets.return_value = []
        client = MagicMock()

        wizard = SetupWizard(client, console)
        wizard.run()

        mock_detect.assert_called_once_with(client)
        mock_display.assert_called_once_with(env, console)
        assert mock_service_cls.call_args.kwargs["abort_signal"] is wizard.abort_signal
        service.run_automatic_installation.assert_called_once_with(wizard.choose_target)
        assert "All tools are installed" in console.export_text()

    @patch("voiceflow.ui.wizard.setup_wizard.display_environment_summary")
    @patch("voiceflow.ui.wizard.setup_wizard.InstallationService")
    @patch("voiceflow.ui.wizard.setup_wizard.EnvironmentService.detect_environment")
    def test_stopped_early(self, mock_detect, mock_service_cls, mock_display, console, env, specs):
        mock_detect.return_value = env
        service = mock_service_cls.return_value
        service.run_automatic_installation.return_value = []
        service.pending_targets.return_value = specs

        SetupWizard(MagicMock(), console).run()

        assert "Nothing installed" in console.export_text()

    @patch("voiceflow.ui.wizard.setup_wizard.display_environment_summary")
    @patch("voiceflow.ui.wizard.setup_wizard.InstallationService")
    @patch("voiceflow.ui.wizard.setup_wizard.EnvironmentService.detect_environment")
    def test_errors_propagate(self, mock_detect, mock_service_cls, mock_display, console, env):
        mock_detect.return_value = env
        mock_service_cls.return_value.run_automatic_installation.side_effect = BuildToolsMissing(["cmake"])

        with pytest.raises(BuildToolsMissing):
            SetupWizard(MagicMock(), console).run()


class TestStatus:

    def test_spinner_lifecycle(self, console):
        wizard = SetupWizard(MagicMock(), console)

        wizard.on_status(InstallState.PREPARING, "Preparing yt-dlp...")
        status = wizard._status
        assert status is not None
        wizard.on_status(InstallState.FETCHING, "Downloading yt-dlp... 10%")
        assert wizard._status is status

        wizard.on_status(InstallState.INSTALLED, "yt-dlp installed")
        assert wizard._status is None
        assert "yt-dlp installed" in console.export_text()

    def test_failure_stops_spinner_silently(self, console):
        wizard = SetupWizard(MagicMock(), console)
        wizard.on_status(InstallState.FETCHING, "Downloading yt-dlp...")
        wizard.on_status(InstallState.FAILED, "HTTP 404")

        assert wizard._status is None
        assert "HTTP 404" not in console.export_text()


class TestShowInstalled:

    def test_lists_versions_of_installed_tools(self, console, specs):
        service = MagicMock()
        service.specs = {spec.target: spec for spec in specs}
        service.installed_versions.return_value = {
            InstallationTarget.YT_DLP: "2025.06.09",
            InstallationTarget.WHISPER_CPP: None,
        }

        SetupWizard(MagicMock(), console).show_installed(service)

        text = console.export_text()
        assert "yt-dlp 2025.06.09" in text
        assert "whisper.cpp" not in text
