from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .codecs import format_for_path
from .settings import Settings

# Standalone logger (not registered with logging's manager) that discards everything.
NOOP_LOGGER = logging.Logger("flatstore.noop")
NOOP_LOGGER.addHandler(logging.NullHandler())


class StoreConfig(BaseModel):
    """
    Construction options for a RecordStore. Immutable once built.

      format            "json" | "yaml" (or any registered codec); None infers from the path suffix
      flush_on_write    every write() persists synchronously
      store_name        label used in error and log messages; defaults to the file path
      logger            diagnostics sink; defaults to a no-op logger
      replace_strategy  "rename" swaps the side file in atomically,
                        "copy" truncates the backing file and copies the side file into it
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    format: str | None = None
    flush_on_write: bool = False
    store_name: str | None = None
    logger: logging.Logger | None = None
    replace_strategy: Literal["rename", "copy"] = "rename"
    fsync: bool = True
    indent: int | str = Field(default="\t")
    sort_keys: bool = True

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @field_validator("replace_strategy", mode="before")
    @classmethod
    def _normalize_strategy(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "StoreConfig":
        data: dict[str, Any] = {
            "format": settings.format,
            "flush_on_write": settings.flush_on_write,
            "replace_strategy": settings.replace_strategy,
            "fsync": settings.fsync,
            "sort_keys": settings.sort_keys,
        }
        data.update(overrides)
        return cls.model_validate(data)

    def resolved_logger(self) -> logging.Logger:
        return self.logger if self.logger is not None else NOOP_LOGGER

    def resolved_name(self, path: str | Path) -> str:
        return self.store_name or str(path)

    def resolved_format(self, path: str | Path) -> str:
        return self.format or format_for_path(path)
