import os
import json
import shutil
from voiceflow.utils.logger import log, get_data_dir


class ConfigManager:
    CONFIG_FILE_NAME = "config.json"

    def __init__(self, config_dir=None):
        self.config_dir = config_dir or get_data_dir()
        self.config_file = os.path.join(self.config_dir, self.CONFIG_FILE_NAME)
        self.config = self.load_config()

    @property
    def default_config(self):
        return {
            "install_root": os.path.join(self.config_dir, "bin"),
            "download_dir": os.getcwd(),
            "debug": False,
        }

    def load_config(self):
        try:
            os.makedirs(self.config_dir, exist_ok=True)
        except OSError as e:
            log.warning(f"Cannot create config directory {self.config_dir}: {e}")
            return self.default_config

        if not os.path.exists(self.config_file):
            self.save_config(self.default_config)
            return self.default_config

        try:
            with open(self.config_file, 'r') as f:
                return json.load(f)
        except Exception as e:
            log.error(f"Failed to load config: {e}. Loading defaults.")
            return self.default_config

    def save_config(self, config=None):
        if config is None:
            config = self.config

        # Rollback mechanism: Backup existing config
        if os.path.exists(self.config_file):
            try:
                shutil.copy2(self.config_file, self.config_file + ".bak")
            except Exception as e:
                log.warning(f"Failed to backup config: {e}")

        try:
            with open(self.config_file, 'w') as f:
                json.dump(config, f, indent=4)
        except Exception as e:
            log.error(f"Failed to save config: {e}")

    def get(self, key, default=None):
        return self.config.get(key, default)

    def set(self, key, value):
        self.config[key] = value
        self.save_config()

    def validate_config(self):
        """Ensure config structure is valid."""
        changes = False
        defaults = self.default_config

        for key, default_val in defaults.items():
            if key not in self.config:
                self.config[key] = default_val
                changes = True

        for key in ("install_root", "download_dir"):
            if not isinstance(self.config.get(key), str) or not self.config[key]:
                self.config[key] = defaults[key]
                changes = True

        if not isinstance(self.config.get("debug"), bool):
            self.config["debug"] = False
            changes = True

        if changes:
            log.info("Config repaired with default values.")
            self.save_config()

    @property
    def install_root(self) -> str:
        return os.path.expanduser(self.get("install_root") or self.default_config["install_root"])

    @property
    def yt_dlp_dir(self) -> str:
        return os.path.join(self.install_root, "yt-dlp")

    @property
    def whisper_dir(self) -> str:
        return os.path.join(self.install_root, "whisper")

    @property
    def download_dir(self) -> str:
        return os.path.expanduser(self.get("download_dir") or os.getcwd())


config_manager = ConfigManager()
config_manager.validate_config()
