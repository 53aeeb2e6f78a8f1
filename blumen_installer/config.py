# SPDX-License-Identifier: MIT
from __future__ import annotations

import os
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

DEFAULT_TEMPLATE_URL = "https://github.com/leopaglia/blumen/archive/master.zip"
DEFAULT_TIMEOUT = 60.0


class InstallerSettings(BaseModel):
    """Where the template comes from and how it is downloaded."""

    model_config = ConfigDict(validate_default=True)

    template_url: HttpUrl = DEFAULT_TEMPLATE_URL  # type: ignore[assignment]
    # None disables the HTTP timeout entirely
    timeout: Optional[float] = Field(default=DEFAULT_TIMEOUT, gt=0)
    archive_prefix: str = "blumen_"

    @field_validator("archive_prefix")
    @classmethod
    def _plain_prefix(cls, v: str) -> str:
        v = v.strip()
        if not v or "/" in v or "\\" in v:
            raise ValueError("archive_prefix must be a non-empty file name prefix")
        return v

    @property
    def url(self) -> str:
        return str(self.template_url)

    @classmethod
    def from_env(cls, **overrides: Any) -> "InstallerSettings":
        """
        Build settings from BLUMEN_TEMPLATE_URL, BLUMEN_HTTP_TIMEOUT and
        BLUMEN_ARCHIVE_PREFIX. Keyword overrides that are not None win.
        """
        data: dict[str, Any] = {}
        url = (os.getenv("BLUMEN_TEMPLATE_URL") or "").strip()
        if url:
            data["template_url"] = url
        raw_timeout = (os.getenv("BLUMEN_HTTP_TIMEOUT") or "").strip().lower()
        if raw_timeout:
            data["timeout"] = None if raw_timeout in ("0", "none", "off") else float(raw_timeout)
        prefix = (os.getenv("BLUMEN_ARCHIVE_PREFIX") or "").strip()
        if prefix:
            data["archive_prefix"] = prefix
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(data)
