"""
Centralized constants for the Voiceflow CLI.
"""

APP_NAME = "voiceflow"
CLI_NAME = "voiceflow"
VERSION = "0.1.0"

# --- Hardware & Recommendation Thresholds ---
MAX_THREADS = 8
GIB = 1024 ** 3
# Ordered from largest to smallest; first threshold met wins
MEMORY_MODEL_THRESHOLDS = (
    (8 * GIB, "large"),
    (4 * GIB, "medium"),
    (2 * GIB, "small"),
)
SMALLEST_MODEL = "base"
LOW_MEMORY_WARNING_BYTES = 4 * GIB
LOW_DISK_WARNING_BYTES = 10 * GIB

# --- Command Timeouts (seconds) ---
PROBE_TIMEOUT = 5
DEPENDENCY_TIMEOUT = 10
COMMAND_TIMEOUT = 3 * 60
BUILD_TIMEOUT = 10 * 60
POLL_INTERVAL = 0.1
TERMINATE_GRACE = 3

# --- Network ---
DOWNLOAD_CHUNK_SIZE = 64 * 1024
CONNECT_TIMEOUT = 10
READ_TIMEOUT = 30
CONNECTIVITY_URL = "https://github.com"
CONNECTIVITY_TIMEOUT = 5

# --- yt-dlp ---
YTDLP_RELEASE = "2025.06.09"
YTDLP_DOWNLOAD_URL_DIR = f"https://github.com/yt-dlp/yt-dlp/releases/download/{YTDLP_RELEASE}"

# --- whisper.cpp ---
WHISPER_CPP_REPO_URL = "https://github.com/ggml-org/whisper.cpp.git"
WHISPER_CPP_VERSION = "v1.7.5"
WHISPER_CPP_REPO_DIR = "whisper.cpp"
WHISPER_CPP_BINARY = "whisper-cli"
WHISPER_BASE_MODEL = "base.en"
WHISPER_MODEL_URL_DIR = "https://huggingface.co/ggerganov/whisper.cpp/resolve/main"
AUDIO_DOWNLOAD_TIMEOUT = 60 * 60
