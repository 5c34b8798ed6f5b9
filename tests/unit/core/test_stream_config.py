from __future__ import annotations

import pytest
from pydantic import ValidationError

from baglens.config import BitmapOptions, RawImageOptions, StreamConfig


def test_stream_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "BAGLENS_BLOCK_DURATION_MS",
        "BAGLENS_MAX_BLOCK_CACHE_BYTES",
        "BAGLENS_ITERATOR_LOG_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)

    config = StreamConfig.from_env()

    assert config == StreamConfig()
    assert config.block_duration_ns == 100_000_000


def test_stream_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BAGLENS_BLOCK_DURATION_MS", "250")
    monkeypatch.setenv("BAGLENS_MAX_BLOCK_CACHE_BYTES", "4096")
    monkeypatch.setenv("BAGLENS_ITERATOR_LOG_INTERVAL", "7")

    config = StreamConfig.from_env()

    assert config.block_duration_ms == 250
    assert config.max_block_cache_bytes == 4096
    assert config.iterator_log_interval == 7


@pytest.mark.parametrize("raw", ["abc", "0", "-5"])
def test_stream_config_rejects_invalid_values(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("BAGLENS_BLOCK_DURATION_MS", raw)

    with pytest.raises(ValueError, match="BAGLENS_BLOCK_DURATION_MS"):
        StreamConfig.from_env()


def test_raw_image_options_reject_empty_range() -> None:
    with pytest.raises(ValidationError):
        RawImageOptions(min_value=5, max_value=5)


def test_bitmap_options_require_positive_width() -> None:
    assert BitmapOptions().resize_width is None
    with pytest.raises(ValidationError):
        BitmapOptions(resize_width=0)
