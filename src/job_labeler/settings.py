import os
import yaml
from dataclasses import dataclass
from typing import Any, Dict, Optional
from dotenv import load_dotenv

CONFIG_PATH = os.environ.get(
    "JOB_LABELER_CONFIG",
    os.path.join(os.path.dirname(os.path.dirname(__file__)), "..", "config.yaml")
)
CREDENTIALS_DIR = os.environ.get(
    "JOB_LABELER_CREDENTIALS",
    os.path.join(os.path.dirname(os.path.dirname(__file__)), "..", "credentials")
)

DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"

load_dotenv()

class SettingsError(ValueError):
    pass

@dataclass
class Settings:
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = 30
    since_last_days: int = 60
    max_runtime_seconds: float = 5 * 60
    timezone: str = "UTC"
    credentials_dir: str = CREDENTIALS_DIR

    def require_api_key(self) -> str:
        if not self.api_key:
            raise SettingsError(
                "No API key configured: set OPENAI_API_KEY or openai.api_key in config.yaml"
            )
        return self.api_key

def _block(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = cfg.get(name) or {}
    if not isinstance(value, dict):
        raise SettingsError(f"config section '{name}' must be a mapping")
    return value

def load_settings(path: Optional[str] = None) -> Settings:
    path = path or CONFIG_PATH
    cfg: Dict[str, Any] = {}
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    openai_cfg = _block(cfg, "openai")
    run_cfg = _block(cfg, "run")
    gmail_cfg = _block(cfg, "gmail")

    settings = Settings(
        api_key=os.environ.get("OPENAI_API_KEY") or openai_cfg.get("api_key"),
        model=os.environ.get("OPENAI_MODEL") or openai_cfg.get("model", DEFAULT_MODEL),
        api_url=openai_cfg.get("api_url", DEFAULT_API_URL),
        timeout_seconds=float(openai_cfg.get("timeout_seconds", 30)),
        since_last_days=int(run_cfg.get("since_last_days", 60)),
        max_runtime_seconds=float(run_cfg.get("max_runtime_seconds", 5 * 60)),
        timezone=run_cfg.get("timezone", "UTC"),
        credentials_dir=gmail_cfg.get("credentials_dir", CREDENTIALS_DIR),
    )
    if settings.since_last_days < 0:
        raise SettingsError("run.since_last_days must not be negative")
    if settings.max_runtime_seconds <= 0:
        raise SettingsError("run.max_runtime_seconds must be positive")
    return settings
