import os
from pathlib import Path
from unittest.mock import patch

import pytest

from voiceflow.schemas.audio import AudioStage
from voiceflow.services.audio_service import (
    AudioService,
    build_ytdlp_args,
    map_download_error,
    parse_file_path,
    parse_progress,
)
from voiceflow.services.installation.targets import yt_dlp_target
from voiceflow.utils.errors import NonZeroExit, VoiceflowError

YTDLP_OUTPUT = [
    "[youtube] Extracting URL: https://www.youtube.com/watch?v=abc",
    "[download] Destination: {dir}/Talk.webm",
    "[download]  12.5% of    3.20MiB at    1.00MiB/s ETA 00:02",
    "[download] 100% of    3.20MiB in 00:00:03",
    "[ExtractAudio] Destination: {dir}/Talk.wav",
    "Deleting original file {dir}/Talk.webm (pass -k to keep)",
]


class TestParsing:

    def test_download_percent(self):
        progress = parse_progress("[download]  12.5% of    3.20MiB at    1.00MiB/s ETA 00:02")
        assert progress.stage == AudioStage.DOWNLOAD
        assert progress.percent == 12.5

    def test_convert_stage(self):
        progress = parse_progress("[ExtractAudio] Not converting audio; file is already in target format")
        assert progress.stage == AudioStage.CONVERT

    def test_destination(self):
        progress = parse_progress("[ExtractAudio] Destination: /tmp/out/Talk.wav")
        assert progress.stage == AudioStage.SAVE
        assert progress.path == "/tmp/out/Talk.wav"
        assert parse_file_path("[download] Destination: /tmp/My Talk.webm ") == "/tmp/My Talk.webm"

    def test_unrelated_lines(self):
        assert parse_progress("[youtube] abc: Downloading webpage") is None
        assert parse_file_path("[youtube] abc: Downloading webpage") is None

    def test_args(self):
        args = build_ytdlp_args("https://example.com/v", "/tmp/out")
        assert args[:5] == ["-x", "--audio-format", "wav", "--audio-quality", "0"]
        assert args[args.index("-o") + 1] == os.path.join("/tmp/out", "%(title)s.%(ext)s")
        assert "--no-playlist" in args
        assert args[-1] == "https://example.com/v"


class TestErrorMapping:

    def test_extract_failure(self):
        error = map_download_error(NonZeroExit("yt-dlp", 1, "ERROR: Unable to extract video data"))
        assert error.message == "Unable to extract audio"

    def test_missing_ffmpeg(self):
        error = map_download_error(NonZeroExit("yt-dlp", 1, "ERROR: Postprocessing: ffprobe and ffmpeg not found"))
        assert error.message == "ffmpeg is missing"

    def test_other_failure(self):
        error = map_download_error(NonZeroExit("yt-dlp", 1, "ERROR: HTTP Error 403: Forbidden\n"))
        assert error.message == "Download failed: ERROR: HTTP Error 403: Forbidden"


class TestDownloadWav:

    @pytest.fixture
    def spec(self, tmp_path):
        spec = yt_dlp_target("linux", "x86_64", install_dir=str(tmp_path / "bin"))
        os.makedirs(spec.install_dir)
        open(spec.executable_path, "wb").close()
        return spec

    def test_requires_yt_dlp(self, tmp_path):
        spec = yt_dlp_target("linux", "x86_64", install_dir=str(tmp_path / "missing"))
        with pytest.raises(VoiceflowError) as exc_info:
            AudioService.download_wav("https://example.com/v", str(tmp_path), spec=spec)
        assert "setup" in exc_info.value.suggestion

    @patch("voiceflow.services.audio_service.CommandRunner.run")
    def test_reports_progress_and_returns_wav(self, mock_run, spec, tmp_path):
        output_dir = tmp_path / "out"

        def fake_run(command, args, **kwargs):
            for line in YTDLP_OUTPUT:
                kwargs["on_stdout_line"](line.format(dir=output_dir))

        mock_run.side_effect = fake_run
        stages = []

        path = AudioService.download_wav("https://example.com/v", str(output_dir),
                                         progress_callback=lambda p: stages.append(p.stage), spec=spec)

        assert path == Path(output_dir / "Talk.wav")
        assert output_dir.is_dir()
        assert stages == [AudioStage.SAVE, AudioStage.DOWNLOAD, AudioStage.DOWNLOAD,
                          AudioStage.SAVE]
        assert mock_run.call_args[0][0] == spec.executable_path

    @patch("voiceflow.services.audio_service.CommandRunner.run")
    def test_no_output_path(self, mock_run, spec, tmp_path):
        with pytest.raises(VoiceflowError, match="not found"):
            AudioService.download_wav("https://example.com/v", str(tmp_path), spec=spec)

    @patch("voiceflow.services.audio_service.CommandRunner.run",
           side_effect=NonZeroExit("yt-dlp", 1, "ERROR: Unable to extract title"))
    def test_failure_is_mapped(self, mock_run, spec, tmp_path):
        with pytest.raises(VoiceflowError, match="Unable to extract audio"):
            AudioService.download_wav("https://example.com/v", str(tmp_path), spec=spec)
