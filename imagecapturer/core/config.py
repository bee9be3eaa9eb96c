"""
Capture configuration, stored as config/capture.json next to the project.

Missing file means defaults. A malformed file or unknown keys are logged and
the defaults are used for whatever could not be read.
"""

import os
import json
import logging
from dataclasses import dataclass, fields, asdict

from imagecapturer.utils.path_utils import get_user_data_path

logger = logging.getLogger("CaptureConfig")

DEFAULT_CHOOSER_TITLE = "Select Image Source"
DEFAULT_CONFIG_PATH = os.path.join("config", "capture.json")


@dataclass
class CaptureConfig:
    capture_dir: str = "captured-images"
    chooser_title: str = DEFAULT_CHOOSER_TITLE
    scratch_prefix: str = "capture-"
    scratch_suffix: str = ".jpg"
    max_decode_threads: int = 4
    log_dir: str = "logs"
    state_file: str = os.path.join("config", "session.json")

    def resolved_capture_dir(self) -> str:
        return get_user_data_path(self.capture_dir)

    def resolved_log_dir(self) -> str:
        return get_user_data_path(self.log_dir)

    def resolved_state_file(self) -> str:
        return get_user_data_path(self.state_file)

    def to_dict(self) -> dict:
        return asdict(self)


def load_config(path: str = None) -> CaptureConfig:
    """Load CaptureConfig from a JSON file, falling back to defaults."""
    config_path = get_user_data_path(path or DEFAULT_CONFIG_PATH)
    config = CaptureConfig()
    if not os.path.exists(config_path):
        logger.debug(f"No config at {config_path}, using defaults")
        return config

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to read config {config_path}: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning(f"Config {config_path} is not a JSON object. Using defaults.")
        return config

    known = {f.name: f for f in fields(CaptureConfig)}
    for key, value in data.items():
        field = known.get(key)
        if field is None:
            logger.warning(f"Unknown config key '{key}' in {config_path}, ignored")
            continue
        default = getattr(config, key)
        # bool is an int subclass; reject it for numeric fields
        if isinstance(value, bool) or not isinstance(value, type(default)):
            logger.warning(f"Config key '{key}' has invalid value {value!r}, keeping {default!r}")
            continue
        setattr(config, key, value)

    if config.max_decode_threads < 1:
        logger.warning(f"max_decode_threads must be >= 1, got {config.max_decode_threads}")
        config.max_decode_threads = 1
    return config


def save_config(config: CaptureConfig, path: str = None) -> None:
    config_path = get_user_data_path(path or DEFAULT_CONFIG_PATH)
    os.makedirs(os.path.dirname(config_path), exist_ok=True)
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config.to_dict(), f, indent=4, ensure_ascii=False)
    logger.info(f"Saved config to {config_path}")
