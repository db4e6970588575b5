"""Configuration helpers for the outfit stylist service."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_CLASSIFIER_MODEL = "gemini-1.5-flash"
DEFAULT_MAX_RETRIES = 5
DEFAULT_BASE_DELAY = 1.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _as_int(value: Optional[str], default: Optional[int]) -> Optional[int]:
    if value is None or str(value).strip() == "":
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def _as_float(value: Optional[str], default: float) -> float:
    if value is None or str(value).strip() == "":
        return default
    try:
        return float(str(value).strip())
    except ValueError:
        return default


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    lowered = str(value).strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


@dataclass
class StylistConfig:
    """Runtime settings for the stylist agent and its classifier collaborator.

    Values come from environment variables first and then from an optional
    ``key: value`` environment file, so secrets can be injected by the runtime
    without touching the checked-in defaults.
    """

    model: str = DEFAULT_CLASSIFIER_MODEL
    api_key: Optional[str] = None
    environment: Optional[str] = None
    log_level: str = "INFO"
    classifier_max_retries: int = DEFAULT_MAX_RETRIES
    classifier_base_delay: float = DEFAULT_BASE_DELAY
    follow_up_seed: Optional[int] = None
    track_preferences: bool = True

    @classmethod
    def from_env(cls) -> "StylistConfig":
        """Build a config from environment variables or an environment file.

        The file is ``APP_CONFIG_PATH`` when set, otherwise
        ``<STYLIST_CONFIG_DIR>/<APP_ENV>.yaml`` (``config/environments`` by
        default). Malformed numbers fall back to the defaults.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("STYLIST_CONFIG_DIR", "config/environments"))
        file_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            file_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            return os.getenv(key.upper(), file_config.get(key, default))

        return cls(
            model=str(get_value("stylist_model") or DEFAULT_CLASSIFIER_MODEL),
            api_key=get_value("google_api_key"),
            environment=env_name or file_config.get("environment"),
            log_level=str(get_value("log_level") or "INFO").upper(),
            classifier_max_retries=_as_int(get_value("classifier_max_retries"), DEFAULT_MAX_RETRIES),
            classifier_base_delay=_as_float(get_value("classifier_base_delay"), DEFAULT_BASE_DELAY),
            follow_up_seed=_as_int(get_value("follow_up_seed"), None),
            track_preferences=_as_bool(get_value("track_preferences"), True),
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse flat ``key: value`` lines, ignoring comments and blanks."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
                value = value[1:-1]
            config[key.strip()] = value
        return config
