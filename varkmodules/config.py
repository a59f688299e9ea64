"""
Runtime configuration for the module engine.

Values come from environment variables (optionally loaded from a project
.env file):

- VARK_DB_PATH: SQLite file used by the reference persistence store
- VARK_MODULES_DIR: directory of module definition files (.yaml / .json)
- VARK_PASSING_SCORE: section pass threshold in percent
- VARK_COMPLETION_DELAY: seconds between "all sections complete" and the
  completion check
- VARK_AUTH_TIMEOUT: seconds to wait for the session provider
- VARK_PREVIEW_MODE: "1"/"true" disables completion and persistence
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


PROJECT_ROOT = Path(__file__).parent.parent

DEFAULT_DB_PATH = PROJECT_ROOT / "data" / "vark.db"
DEFAULT_MODULES_DIR = PROJECT_ROOT / "data" / "modules"

PASSING_SCORE = 60.0
COMPLETION_DELAY_SECONDS = 1.0
AUTH_TIMEOUT_SECONDS = 10.0

_TRUTHY = {"1", "true", "yes", "on"}


class EngineConfig(BaseModel):
    db_path: Path = DEFAULT_DB_PATH
    modules_dir: Path = DEFAULT_MODULES_DIR
    passing_score: float = Field(default=PASSING_SCORE, ge=0, le=100)
    completion_delay_seconds: float = Field(default=COMPLETION_DELAY_SECONDS, ge=0)
    auth_timeout_seconds: float = Field(default=AUTH_TIMEOUT_SECONDS, gt=0)
    preview_mode: bool = False


def load_config(env: Optional[Mapping[str, str]] = None, dotenv_path: Optional[Path] = None) -> EngineConfig:
    """
    Build an EngineConfig from environment variables.

    Args:
        env: Mapping to read instead of os.environ (the .env file is not
            loaded in that case)
        dotenv_path: Explicit .env file (default: PROJECT_ROOT / ".env")

    Raises:
        pydantic.ValidationError: If a variable holds an invalid value
    """
    if env is None:
        load_dotenv(dotenv_path or PROJECT_ROOT / ".env")
        env = os.environ

    values = {}
    if env.get("VARK_DB_PATH"):
        values["db_path"] = Path(env["VARK_DB_PATH"])
    if env.get("VARK_MODULES_DIR"):
        values["modules_dir"] = Path(env["VARK_MODULES_DIR"])
    if env.get("VARK_PASSING_SCORE"):
        values["passing_score"] = env["VARK_PASSING_SCORE"]
    if env.get("VARK_COMPLETION_DELAY"):
        values["completion_delay_seconds"] = env["VARK_COMPLETION_DELAY"]
    if env.get("VARK_AUTH_TIMEOUT"):
        values["auth_timeout_seconds"] = env["VARK_AUTH_TIMEOUT"]
    if env.get("VARK_PREVIEW_MODE"):
        values["preview_mode"] = env["VARK_PREVIEW_MODE"].strip().lower() in _TRUTHY

    return EngineConfig(**values)
