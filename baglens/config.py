"""Runtime configuration for log streaming and decoding.

Streaming settings have a single source of truth in ``StreamConfig``; the only
environment variables read are ``BAGLENS_BLOCK_DURATION_MS``,
``BAGLENS_MAX_BLOCK_CACHE_BYTES`` and ``BAGLENS_ITERATOR_LOG_INTERVAL``.
Per-call decode options are pydantic models so host applications can pass
loosely typed settings straight through.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from pydantic import BaseModel, Field, model_validator

from baglens.const import (
    DEFAULT_BLOCK_DURATION_MS,
    DEFAULT_ITERATOR_LOG_INTERVAL,
    DEFAULT_MAX_BLOCK_CACHE_BYTES,
)


def _positive_int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default)).strip()
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a positive integer") from exc
    if value <= 0:
        raise ValueError(f"{name} must be a positive integer")
    return value


@dataclass(frozen=True, slots=True)
class StreamConfig:
    """Configuration for block loading and iterator diagnostics."""

    block_duration_ms: int = DEFAULT_BLOCK_DURATION_MS
    max_block_cache_bytes: int = DEFAULT_MAX_BLOCK_CACHE_BYTES
    iterator_log_interval: int = DEFAULT_ITERATOR_LOG_INTERVAL

    @property
    def block_duration_ns(self) -> int:
        """Block window length in nanoseconds."""
        return self.block_duration_ms * 1_000_000

    @classmethod
    def from_env(cls) -> StreamConfig:
        """Build config from environment variables, falling back to defaults."""
        return cls(
            block_duration_ms=_positive_int_from_env(
                "BAGLENS_BLOCK_DURATION_MS", DEFAULT_BLOCK_DURATION_MS
            ),
            max_block_cache_bytes=_positive_int_from_env(
                "BAGLENS_MAX_BLOCK_CACHE_BYTES", DEFAULT_MAX_BLOCK_CACHE_BYTES
            ),
            iterator_log_interval=_positive_int_from_env(
                "BAGLENS_ITERATOR_LOG_INTERVAL", DEFAULT_ITERATOR_LOG_INTERVAL
            ),
        )


class RawImageOptions(BaseModel):
    """Value range used by decoders that normalize intensity into 8 bits.

    Attributes:
        min_value: value mapped to black; decoder default when unset.
        max_value: value mapped to white; decoder default when unset.
    """

    min_value: float | None = None
    max_value: float | None = None

    @model_validator(mode="after")
    def _check_range(self) -> RawImageOptions:
        if (
            self.min_value is not None
            and self.max_value is not None
            and self.max_value == self.min_value
        ):
            raise ValueError("max_value must differ from min_value")
        return self


class BitmapOptions(BaseModel):
    """Options for decoders that produce bitmaps.

    Attributes:
        resize_width: output width in pixels; height follows the aspect ratio.
    """

    resize_width: int | None = Field(default=None, gt=0)
