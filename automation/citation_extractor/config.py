"""Runtime settings.

Values come from ``CITATION_*`` environment variables (a ``.env`` file is
loaded by the entry point) and can be overridden per run from the command
line.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Optional

import httpx
from pydantic import BaseModel, Field, field_validator

from .models import CitationStyle

ENV_PREFIX = "CITATION_"

DEFAULT_USER_AGENT = "CitationExtractor/1.0"
DEFAULT_LIBRARY_PATH = Path("bibliography") / "citations.json"
DEFAULT_EXPORT_DIR = Path("citations")


class Settings(BaseModel):
    timeout: float = Field(default=20.0, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    # Crossref and OpenAlex route requests carrying a contact address to
    # their polite pool.
    mailto: Optional[str] = None
    default_style: CitationStyle = CitationStyle.APA
    library_path: Path = DEFAULT_LIBRARY_PATH
    export_dir: Path = DEFAULT_EXPORT_DIR

    @field_validator("default_style", mode="before")
    @classmethod
    def _parse_style(cls, value: Any) -> CitationStyle:
        return CitationStyle.parse(value)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> Settings:
        """Build settings from *environ* (default ``os.environ``).

        Keyword overrides whose value is ``None`` are ignored, so argparse
        defaults can be passed straight through.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw:
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)

    @property
    def user_agent_header(self) -> str:
        if self.mailto:
            return f"{self.user_agent} (mailto:{self.mailto})"
        return self.user_agent

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent_header},
        )
