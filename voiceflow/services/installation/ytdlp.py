from voiceflow.schemas.installation import DownloadProgress
from voiceflow.services.download_service import DownloadService
from voiceflow.services.installation.base import BaseInstaller
from voiceflow.utils.units import format_bytes


class YtDlpInstaller(BaseInstaller):
    """Downloads the pinned yt-dlp release binary for this platform."""

    def fetch(self) -> None:
        # Release binaries are small enough to buffer
        DownloadService.download_file(
            self.spec.source,
            self.spec.executable_path,
            progress_callback=self._on_progress,
            abort_signal=self.abort_signal,
            http_client=self.http_client,
        )
        DownloadService.make_executable(self.spec.executable_path)

    def _on_progress(self, progress: DownloadProgress) -> None:
        self.report(
            f"Downloading {self.name}... {progress.percent}% "
            f"({format_bytes(progress.downloaded_bytes)}/{format_bytes(progress.total_bytes)})"
        )
