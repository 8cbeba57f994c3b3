"""
Configuration and shared client construction for the article analyzer.

Settings resolve in three layers:
    dataclass defaults  <  analyzer.yaml  <  ANALYZER_* environment variables
"""

import os
import yaml
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field, fields, replace
from dotenv import load_dotenv

from openai import OpenAI

load_dotenv()

SETTINGS_FILE = Path(os.environ.get("ANALYZER_CONFIG", "analyzer.yaml"))
DATA_DIR = Path(os.environ.get("ANALYZER_DATA_DIR", "data"))
SUBMISSIONS_DIR = DATA_DIR / "submissions"

ENV_PREFIX = "ANALYZER_"


@dataclass(frozen=True)
class Settings:
    """Tunables for every pipeline phase."""

    # Fetch + extract
    fetch_timeout: float = 15.0
    fetch_max_retries: int = 2
    fetch_retry_delay: float = 1.0
    min_content_length: int = 100
    max_stored_content: int = 5000
    user_agent: str = "Mozilla/5.0 (compatible; ArticleAnalyzerBot/1.0)"

    # Probe generation
    probe_count: int = 5
    max_prompt_content: int = 8000
    generation_model: str = "gpt-4.1-mini"
    generation_temperature: float = 0.7
    generation_max_retries: int = 2

    # Answer engine probing
    search_model: str = "gpt-5"
    search_reasoning_effort: str = "low"
    search_max_retries: int = 2
    retry_base_delay: float = 1.0
    inter_probe_delay: float = 1.0

    # Background worker
    worker_interval: float = 5.0

    data_dir: Path = field(default=DATA_DIR)

    @property
    def submissions_dir(self) -> Path:
        return self.data_dir / "submissions"


def _coerce(value, target_type):
    """Convert a raw YAML/env value to the declared field type."""
    if target_type is Path:
        return Path(value)
    return target_type(value)


def load_settings_file(path: Path = None) -> dict:
    """Load overrides from YAML. Missing file means no overrides."""
    path = path or SETTINGS_FILE
    if not path.exists():
        return {}
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        print(f"[WARN] Ignoring {path}: expected a mapping, got {type(data).__name__}")
        return {}
    return data


def load_settings(path: Path = None, environ: Optional[dict] = None) -> Settings:
    """
    Build Settings from defaults, YAML file and environment.

    Args:
        path: Optional YAML file (defaults to analyzer.yaml in cwd)
        environ: Mapping to read ANALYZER_* overrides from (defaults to os.environ)
    """
    environ = os.environ if environ is None else environ
    known = {f.name: f for f in fields(Settings)}
    overrides = {}

    for key, value in load_settings_file(path).items():
        if key not in known:
            print(f"[WARN] Unknown setting in config file: {key}")
            continue
        overrides[key] = _coerce(value, known[key].type)

    for name, f in known.items():
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw != "":
            overrides[name] = _coerce(raw, f.type)

    return replace(Settings(), **overrides)


def make_client(api_key: str = None) -> OpenAI:
    """
    Construct the OpenAI client for this process.

    One client per worker; hand it to AnswerEngine rather than caching it globally.
    """
    api_key = api_key or os.environ.get("OPENAI_API_KEY")
    if not api_key:
        raise ValueError("OPENAI_API_KEY is not set")
    return OpenAI(api_key=api_key)
