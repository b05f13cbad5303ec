import os
import stat
from typing import Optional

from voiceflow.config.constants import DOWNLOAD_CHUNK_SIZE
from voiceflow.schemas.installation import DownloadProgress, ProgressCallback
from voiceflow.utils.abort import AbortSignal, raise_if_aborted
from voiceflow.utils.errors import Cancelled, FileSystemError, NetworkError
from voiceflow.utils.http_client import HttpClient
from voiceflow.utils.logger import log
from voiceflow.utils.parse import safe_parse_int


class DownloadService:
    """
    Streams an HTTP(S) resource to disk with progress reporting and
    cooperative cancellation.

    Buffered mode keeps the whole body in memory and writes it once; it is
    meant for artifacts up to ~100MB (release binaries). Unbuffered mode
    streams into the temporary file and suits large model files. Both
    modes finish with an atomic rename, so ``dest_path`` is either the
    complete file or untouched.
    """

    CHUNK_SIZE = DOWNLOAD_CHUNK_SIZE
    TEMP_SUFFIX = ".tmp"

    @staticmethod
    def download_file(
        url: str,
        dest_path: str,
        progress_callback: Optional[ProgressCallback] = None,
        abort_signal: Optional[AbortSignal] = None,
        http_client: Optional[HttpClient] = None,
        buffered: bool = True,
    ) -> None:
        """
        Download ``url`` to ``dest_path``.

        Args:
            url: Source URL
            dest_path: Destination file path (its directory must exist)
            progress_callback: Called with a DownloadProgress after each chunk
            abort_signal: Shared cancellation token
            http_client: Configured client; a default one is created if omitted
            buffered: Collect in memory and write once (see class docstring)

        Raises:
            Cancelled: abort_signal fired before or during the transfer
            NetworkError: transport failure, non-2xx status, missing
                Content-Length or a short body
            FileSystemError: the file could not be written
        """
        # No request at all when the session is already cancelled
        raise_if_aborted(abort_signal, "Download cancelled")

        client = http_client or HttpClient()
        temp_path = dest_path + DownloadService.TEMP_SUFFIX
        response = None
        unregister = lambda: None

        try:
            try:
                response = client.get(url, stream=True, headers={"Accept-Encoding": "identity"})
            except Exception as e:
                raise_if_aborted(abort_signal, "Download cancelled")
                raise NetworkError(f"Download of {url} failed: {e}")

            if abort_signal is not None:
                # Closing the response unblocks a socket read in progress
                unregister = abort_signal.on_abort(response.close)

            if not response.ok:
                raise NetworkError(
                    f"Download of {url} failed: HTTP {response.status_code} {response.reason or ''}".strip(),
                    status=response.status_code,
                )

            total_size = safe_parse_int(response.headers.get("content-length"))
            if total_size <= 0:
                raise NetworkError(
                    f"Download of {url} failed: server did not report a file size",
                    suggestion="The file size is required to track progress; try again later",
                )

            DownloadService._transfer(
                response, url, temp_path, total_size, progress_callback, abort_signal, buffered
            )
            raise_if_aborted(abort_signal, "Download cancelled")

            try:
                os.replace(temp_path, dest_path)
            except OSError as e:
                raise FileSystemError(f"Cannot write {dest_path}: {e}")

            log.info(f"Downloaded {url} -> {dest_path} ({total_size} bytes)")
        finally:
            unregister()
            if response is not None:
                response.close()
            if http_client is None:
                client.close()
            DownloadService._discard(temp_path)

    @staticmethod
    def _transfer(response, url, temp_path, total_size, progress_callback, abort_signal, buffered):
        chunks = []
        downloaded = 0
        sink = None

        try:
            if not buffered:
                sink = DownloadService._open(temp_path)

            iterator = response.iter_content(chunk_size=DownloadService.CHUNK_SIZE)
            while True:
                raise_if_aborted(abort_signal, "Download cancelled")
                try:
                    chunk = next(iterator)
                except StopIteration:
                    break
                except Cancelled:
                    raise
                except Exception as e:
                    raise_if_aborted(abort_signal, "Download cancelled")
                    raise NetworkError(f"Download of {url} interrupted: {e}")

                if not chunk:
                    continue

                if sink is not None:
                    DownloadService._write(sink, chunk, temp_path)
                else:
                    chunks.append(chunk)
                downloaded += len(chunk)

                if progress_callback:
                    percent = min(100, round(downloaded / total_size * 100))
                    progress_callback(DownloadProgress(percent, total_size, downloaded))

            raise_if_aborted(abort_signal, "Download cancelled")
            if downloaded < total_size:
                raise NetworkError(
                    f"Download of {url} incomplete: received {downloaded} of {total_size} bytes"
                )

            if sink is None:
                sink = DownloadService._open(temp_path)
                DownloadService._write(sink, b"".join(chunks), temp_path)
        finally:
            if sink is not None:
                sink.close()

    @staticmethod
    def make_executable(path: str) -> None:
        """chmod 0o755 on POSIX; Windows has no execute bit."""
        if os.name == "nt":
            return
        try:
            os.chmod(path, stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH)
        except OSError as e:
            raise FileSystemError(f"Cannot make {path} executable: {e}")

    @staticmethod
    def _open(path):
        try:
            return open(path, "wb")
        except OSError as e:
            raise FileSystemError(f"Cannot write {path}: {e}")

    @staticmethod
    def _write(sink, data, path):
        try:
            sink.write(data)
        except OSError as e:
            raise FileSystemError(f"Cannot write {path}: {e}")

    @staticmethod
    def _discard(path):
        if os.path.exists(path):
            try:
                os.remove(path)
            except OSError as e:
                log.warning(f"Could not remove partial download {path}: {e}")


download_file = DownloadService.download_file
make_executable = DownloadService.make_executable
