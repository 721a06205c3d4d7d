"""Configuration helpers for the outfit stylist app."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _as_float(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value not in (None, "") else default
    except (TypeError, ValueError):
        return default


def _as_int(value: Optional[str], default: Optional[int]) -> Optional[int]:
    try:
        return int(value) if value not in (None, "") else default
    except (TypeError, ValueError):
        return default


@dataclass
class StylistConfig:
    """Configuration values for the stylist pipeline.

    Timeouts apply per backend call inside one turn. Retries are handled by the
    Gemini client; the decision engine itself never retries.
    """

    model: str = DEFAULT_GEMINI_MODEL
    api_key: Optional[str] = None
    classifier_timeout_s: float = 8.0
    state_timeout_s: float = 8.0
    llm_max_retries: int = 5
    llm_backoff_s: float = 1.0
    state_enrichment_enabled: bool = True
    session_store_backend: str = "memory"
    session_store_path: Optional[str] = None
    preferences_dir: Optional[str] = None
    response_seed: Optional[int] = None
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "StylistConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables so that secrets can be
        injected by the runtime environment.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("STYLIST_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        return cls(
            model=str(get_value("model", DEFAULT_GEMINI_MODEL) or DEFAULT_GEMINI_MODEL),
            api_key=get_value("google_api_key"),
            classifier_timeout_s=_as_float(get_value("classifier_timeout_s"), 8.0),
            state_timeout_s=_as_float(get_value("state_timeout_s"), 8.0),
            llm_max_retries=_as_int(get_value("llm_max_retries"), 5) or 0,
            llm_backoff_s=_as_float(get_value("llm_backoff_s"), 1.0),
            state_enrichment_enabled=_as_bool(get_value("state_enrichment_enabled"), True),
            session_store_backend=str(get_value("session_store_backend", "memory") or "memory"),
            session_store_path=get_value("session_store_path"),
            preferences_dir=get_value("preferences_dir"),
            response_seed=_as_int(get_value("response_seed"), None),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config


__all__ = ["DEFAULT_GEMINI_MODEL", "StylistConfig"]
