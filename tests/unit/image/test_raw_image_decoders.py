from __future__ import annotations

import numpy as np
import pytest

from baglens.config import RawImageOptions
from baglens.exceptions import ImageDecodeError, UnsupportedEncodingError
from baglens.image import ImageEncoding, RawImage, decode_raw_image


def _pixels(result: np.ndarray) -> list[list[list[int]]]:
    return result.tolist()


def test_rgb8() -> None:
    image = RawImage(width=2, height=1, encoding="rgb8", data=bytes([1, 2, 3, 4, 5, 6]))

    result = decode_raw_image(image)

    assert result.shape == (1, 2, 4)
    assert result.dtype == np.uint8
    assert _pixels(result) == [[[1, 2, 3, 255], [4, 5, 6, 255]]]


@pytest.mark.parametrize("encoding", ["bgr8", "8UC3"])
def test_bgr8_and_alias(encoding: str) -> None:
    image = RawImage(width=1, height=1, encoding=encoding, data=bytes([1, 2, 3]))

    assert _pixels(decode_raw_image(image)) == [[[3, 2, 1, 255]]]


def test_rgba8_and_bgra8_keep_alpha() -> None:
    data = bytes([1, 2, 3, 4])

    rgba = decode_raw_image(RawImage(1, 1, "rgba8", data))
    bgra = decode_raw_image(RawImage(1, 1, "bgra8", data))

    assert _pixels(rgba) == [[[1, 2, 3, 4]]]
    assert _pixels(bgra) == [[[3, 2, 1, 4]]]


@pytest.mark.parametrize("encoding", ["mono8", "8UC1"])
def test_mono8_honors_step(encoding: str) -> None:
    image = RawImage(
        width=2,
        height=2,
        encoding=encoding,
        data=bytes([10, 20, 99, 30, 40, 99]),
        step=3,
    )

    result = decode_raw_image(image)

    assert result[..., 0].tolist() == [[10, 20], [30, 40]]
    assert (result[..., 0] == result[..., 2]).all()
    assert (result[..., 3] == 255).all()


def test_mono16_uses_default_range() -> None:
    data = np.array([0, 10000, 5000, 20000], dtype="<u2").tobytes()

    result = decode_raw_image(RawImage(4, 1, "16UC1", data))

    assert result[0, :, 0].tolist() == [0, 255, 128, 255]


def test_mono16_big_endian_and_custom_range() -> None:
    data = np.array([50, 100], dtype=">u2").tobytes()
    image = RawImage(2, 1, "mono16", data, is_bigendian=True)

    result = decode_raw_image(image, RawImageOptions(min_value=0, max_value=100))

    assert result[0, :, 0].tolist() == [128, 255]


def test_float1c_normalizes_and_blanks_nan() -> None:
    data = np.array([0.0, 1.0, 0.5, np.nan], dtype="<f4").tobytes()

    result = decode_raw_image(RawImage(2, 2, "32FC1", data))

    assert result[..., 0].tolist() == [[0, 255], [128, 0]]


def test_yuv_gray_and_extremes() -> None:
    yuyv = decode_raw_image(RawImage(2, 1, "yuyv", bytes([128, 128, 128, 128])))
    uyvy = decode_raw_image(RawImage(2, 1, "yuv422", bytes([128, 0, 128, 255])))

    assert _pixels(yuyv) == [[[128, 128, 128, 255], [128, 128, 128, 255]]]
    assert _pixels(uyvy) == [[[0, 0, 0, 255], [255, 255, 255, 255]]]


def test_uyvy_applies_chroma() -> None:
    result = decode_raw_image(RawImage(2, 1, "uyvy", bytes([128, 100, 255, 100])))

    assert result[0, 0].tolist() == [255, 9, 100, 255]
    assert result[0, 1].tolist() == [255, 9, 100, 255]


def test_yuv_rejects_odd_width() -> None:
    with pytest.raises(ImageDecodeError):
        decode_raw_image(RawImage(1, 1, "yuyv", bytes([1, 2])))


@pytest.mark.parametrize(
    ("encoding", "expected"),
    [
        ("bayer_rggb8", [10, 25, 40]),
        ("bayer_bggr8", [40, 25, 10]),
        ("bayer_gbrg8", [30, 25, 20]),
        ("bayer_grbg8", [20, 25, 30]),
    ],
)
def test_bayer_blocks(encoding: str, expected: list[int]) -> None:
    image = RawImage(2, 2, encoding, bytes([10, 20, 30, 40]))

    result = decode_raw_image(image)

    assert result.reshape(4, 4).tolist() == [expected + [255]] * 4


def test_bayer_green_average_for_gbrg() -> None:
    # Greens sit on the diagonal for GBRG and GRBG layouts.
    result = decode_raw_image(RawImage(2, 2, "bayer_gbrg8", bytes([10, 20, 30, 50])))

    assert result[0, 0, 1] == 30


def test_unsupported_encoding() -> None:
    with pytest.raises(UnsupportedEncodingError, match="Unsupported encoding foo"):
        decode_raw_image(RawImage(1, 1, "foo", b"\x00"))
    with pytest.raises(UnsupportedEncodingError):
        ImageEncoding.parse("64FC1")


def test_short_buffer_raises() -> None:
    with pytest.raises(ImageDecodeError, match="too small"):
        decode_raw_image(RawImage(2, 2, "rgb8", bytes(11)))


def test_writes_into_output_buffer() -> None:
    output = np.zeros((1, 2, 4), dtype=np.uint8)

    result = decode_raw_image(RawImage(2, 1, "mono8", bytes([7, 8])), output=output)

    assert result is output
    assert output[0, 1].tolist() == [8, 8, 8, 255]


def test_rejects_mismatched_output_buffer() -> None:
    with pytest.raises(ImageDecodeError):
        decode_raw_image(
            RawImage(2, 1, "mono8", bytes([7, 8])),
            output=np.zeros((2, 2, 4), dtype=np.uint8),
        )


def test_decoding_is_deterministic() -> None:
    image = RawImage(2, 2, "bayer_rggb8", bytes([1, 2, 3, 4]))

    assert np.array_equal(decode_raw_image(image), decode_raw_image(image))
