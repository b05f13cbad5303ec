from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class AudioStage(str, Enum):
    DOWNLOAD = "download"
    CONVERT = "convert"
    SAVE = "save"


@dataclass(frozen=True)
class AudioProgress:
    """One progress event parsed from a yt-dlp output line."""

    stage: AudioStage
    percent: Optional[float] = None     # DOWNLOAD only
    path: Optional[str] = None          # SAVE only


AudioProgressCallback = Callable[[AudioProgress], None]
