"""
Audio extraction through the installed yt-dlp binary.
"""

import os
import platform
import re
from pathlib import Path
from typing import List, Optional

from voiceflow.config.constants import AUDIO_DOWNLOAD_TIMEOUT, CLI_NAME
from voiceflow.config.manager import config_manager
from voiceflow.schemas.audio import AudioProgress, AudioProgressCallback, AudioStage
from voiceflow.schemas.installation import TargetSpec
from voiceflow.services.command_runner import CommandRunner
from voiceflow.services.hardware.platform_info import current_os
from voiceflow.services.installation.targets import is_installed, yt_dlp_target
from voiceflow.utils.abort import AbortSignal
from voiceflow.utils.errors import FileSystemError, NonZeroExit, VoiceflowError
from voiceflow.utils.logger import log

DOWNLOAD_PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)%")
DESTINATION_RE = re.compile(r"Destination: (.+)")
OUTPUT_TEMPLATE = "%(title)s.%(ext)s"


def build_ytdlp_args(url: str, output_dir: str) -> List[str]:
    return [
        "-x",
        "--audio-format", "wav",
        "--audio-quality", "0",
        "-o", os.path.join(output_dir, OUTPUT_TEMPLATE),
        "--no-playlist",
        "--progress",
        url,
    ]


def parse_progress(line: str) -> Optional[AudioProgress]:
    if "[download]" in line and "%" in line:
        match = DOWNLOAD_PERCENT_RE.search(line)
        if match:
            return AudioProgress(AudioStage.DOWNLOAD, percent=float(match.group(1)))

    if "[ExtractAudio]" in line and "Destination:" not in line:
        return AudioProgress(AudioStage.CONVERT)

    path = parse_file_path(line)
    if path:
        return AudioProgress(AudioStage.SAVE, path=path)
    return None


def parse_file_path(line: str) -> Optional[str]:
    # [download], [ExtractAudio] and [ffmpeg] all announce their output this way
    match = DESTINATION_RE.search(line)
    return match.group(1).strip() if match else None


def map_download_error(error: NonZeroExit) -> VoiceflowError:
    detail = error.stderr or error.message
    if "Unable to extract" in detail:
        return VoiceflowError(
            "Unable to extract audio",
            suggestion="Check that the URL is valid and the video is not private or protected",
        )
    if "ffmpeg" in detail or "ffprobe" in detail:
        return VoiceflowError(
            "ffmpeg is missing",
            suggestion="yt-dlp needs ffmpeg to convert audio; install ffmpeg and retry",
        )
    return VoiceflowError(f"Download failed: {detail.strip()}")


class AudioService:

    @staticmethod
    def download_wav(
        url: str,
        output_dir: Optional[str] = None,
        progress_callback: Optional[AudioProgressCallback] = None,
        abort_signal: Optional[AbortSignal] = None,
        spec: Optional[TargetSpec] = None,
    ) -> Path:
        """
        Extract the audio track of ``url`` as a WAV file in ``output_dir``
        (the configured download directory by default).

        Returns:
            Path of the saved file, as announced by yt-dlp
        """
        spec = spec or yt_dlp_target(current_os(), platform.machine())
        if not is_installed(spec):
            raise VoiceflowError(
                "yt-dlp is not installed",
                suggestion=f'Run "{CLI_NAME} setup" to install the required tools first',
            )

        output_dir = os.path.abspath(output_dir or config_manager.download_dir)
        try:
            os.makedirs(output_dir, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"Cannot create output directory {output_dir}: {e}")

        saved = []

        def handle_line(line: str) -> None:
            progress = parse_progress(line)
            if progress is None:
                return
            if progress.stage == AudioStage.SAVE:
                saved.append(progress.path)
            if progress_callback:
                progress_callback(progress)

        try:
            CommandRunner.run(
                spec.executable_path,
                build_ytdlp_args(url, output_dir),
                timeout=AUDIO_DOWNLOAD_TIMEOUT,
                abort_signal=abort_signal,
                on_stdout_line=handle_line,
                on_stderr_line=handle_line,
            )
        except NonZeroExit as e:
            raise map_download_error(e)

        if not saved:
            raise VoiceflowError("Download finished but the output file was not found")

        # The last destination is the converted WAV file
        result = Path(saved[-1]).absolute()
        log.info(f"Saved audio from {url} to {result}")
        return result


download_wav = AudioService.download_wav
