from __future__ import annotations

import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()


class Settings(BaseModel):
    """
    Runtime configuration, read from the environment (and a .env file).

    Environment variables:
      - CHART_ENGINE: rendering engine name ("vega-lite" or "plotly")
      - CHART_SELECTION_NAME: name of the point-selection param
      - CHART_COALESCE_DELAY: seconds to wait before a render pass, so
        updates arriving together produce a single pass
      - CHART_GUARD_STALE_RENDERS: only the latest pass attaches listeners
      - CHART_LOG_LEVEL: logging level name
    """

    engine: str = "vega-lite"
    selection_name: str = Field(default="geom", min_length=1)
    coalesce_delay: float = Field(default=0.0, ge=0.0)
    guard_stale_renders: bool = True
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v


_ENV_KEYS = {
    "engine": "CHART_ENGINE",
    "selection_name": "CHART_SELECTION_NAME",
    "coalesce_delay": "CHART_COALESCE_DELAY",
    "guard_stale_renders": "CHART_GUARD_STALE_RENDERS",
    "log_level": "CHART_LOG_LEVEL",
}


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env
    values = {key: env[var] for key, var in _ENV_KEYS.items() if env.get(var)}
    return Settings(**values)
