from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple


class InstallationTarget(str, Enum):
    YT_DLP = "yt-dlp"
    WHISPER_CPP = "whisper.cpp"


class InstallState(str, Enum):
    NOT_CHECKED = "not_checked"
    CHECKING = "checking"
    ALREADY_INSTALLED = "already_installed"
    NEEDS_INSTALL = "needs_install"
    PREPARING = "preparing"
    FETCHING = "fetching"
    BUILDING = "building"
    VERIFYING = "verifying"
    INSTALLED = "installed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class TargetSpec:
    """Static description of one installable tool on the current platform."""

    target: InstallationTarget
    display_name: str
    description: str
    executable_name: str
    install_dir: str
    executable_path: str            # detection predicate: this file exists
    source: str                     # download URL or git repository
    version_args: Tuple[str, ...] = ("--version",)
    revision: Optional[str] = None  # pinned git tag for built targets


@dataclass(frozen=True)
class DownloadProgress:
    percent: int
    total_bytes: int
    downloaded_bytes: int


ProgressCallback = Callable[[DownloadProgress], None]
StatusCallback = Callable[[InstallState, str], None]
