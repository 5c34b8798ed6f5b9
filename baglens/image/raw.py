"""Per-encoding converters from raw pixel buffers to RGBA8.

Every decoder returns an ``(height, width, 4)`` ``uint8`` array. When
``output`` is given it must have that shape and is filled in place.
"""

from __future__ import annotations

import numpy as np

from baglens.exceptions import ImageDecodeError


def _rows(
    data: bytes, width: int, height: int, bytes_per_pixel: int, step: int
) -> np.ndarray:
    """Return the pixel bytes as ``(height, width * bytes_per_pixel)``.

    Row padding implied by ``step`` is dropped.
    """
    row_bytes = width * bytes_per_pixel
    row_step = step or row_bytes
    if row_step < row_bytes:
        raise ImageDecodeError(
            f"Row step {row_step} is smaller than a row of {width} pixel(s) "
            f"({row_bytes} bytes)"
        )
    expected = row_step * (height - 1) + row_bytes if height > 0 else 0
    if len(data) < expected:
        raise ImageDecodeError(
            f"Image buffer too small: expected {expected} bytes, got {len(data)}"
        )

    buffer = np.frombuffer(data, dtype=np.uint8)
    padded_len = row_step * height
    if buffer.size < padded_len:
        # The last row may omit its trailing padding.
        buffer = np.concatenate(
            [buffer, np.zeros(padded_len - buffer.size, dtype=np.uint8)]
        )
    return buffer[:padded_len].reshape(height, row_step)[:, :row_bytes]


def _output(width: int, height: int, output: np.ndarray | None) -> np.ndarray:
    if output is None:
        return np.empty((height, width, 4), dtype=np.uint8)
    if output.shape != (height, width, 4) or output.dtype != np.uint8:
        raise ImageDecodeError(
            f"Output buffer must be uint8 with shape {(height, width, 4)}, got "
            f"{output.dtype} {output.shape}"
        )
    return output


def _to_uint8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def _write_gray(out: np.ndarray, gray: np.ndarray) -> np.ndarray:
    out[..., :3] = gray[..., np.newaxis]
    out[..., 3] = 255
    return out


def _normalize(values: np.ndarray, min_value: float, max_value: float) -> np.ndarray:
    if max_value == min_value:
        raise ImageDecodeError("max_value must differ from min_value")
    scaled = (values.astype(np.float64) - min_value) / (max_value - min_value)
    return _to_uint8(np.nan_to_num(scaled * 255.0, nan=0.0))


def decode_rgb8(
    data: bytes,
    width: int,
    height: int,
    step: int = 0,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Decode packed ``rgb8`` pixels."""
    pixels = _rows(data, width, height, 3, step).reshape(height, width, 3)
    out = _output(width, height, output)
    out[..., :3] = pixels
    out[..., 3] = 255
    return out


def decode_bgr8(
    data: bytes,
    width: int,
    height: int,
    step: int = 0,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Decode packed ``bgr8`` pixels."""
    pixels = _rows(data, width, height, 3, step).reshape(height, width, 3)
    out = _output(width, height, output)
    out[..., :3] = pixels[..., ::-1]
    out[..., 3] = 255
    return out


def decode_rgba8(
    data: bytes,
    width: int,
    height: int,
    step: int = 0,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Copy ``rgba8`` pixels."""
    pixels = _rows(data, width, height, 4, step).reshape(height, width, 4)
    out = _output(width, height, output)
    out[...] = pixels
    return out


def decode_bgra8(
    data: bytes,
    width: int,
    height: int,
    step: int = 0,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Decode ``bgra8`` pixels, keeping alpha."""
    pixels = _rows(data, width, height, 4, step).reshape(height, width, 4)
    out = _output(width, height, output)
    out[..., :3] = pixels[..., 2::-1]
    out[..., 3] = pixels[..., 3]
    return out


def decode_mono8(
    data: bytes,
    width: int,
    height: int,
    step: int = 0,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Decode 8-bit grayscale."""
    gray = _rows(data, width, height, 1, step)
    return _write_gray(_output(width, height, output), gray)


def decode_mono16(
    data: bytes,
    width: int,
    height: int,
    is_bigendian: bool,
    min_value: float,
    max_value: float,
    step: int = 0,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Decode 16-bit grayscale, mapping ``[min_value, max_value]`` to 0..255."""
    rows = np.ascontiguousarray(_rows(data, width, height, 2, step))
    values = rows.view(">u2" if is_bigendian else "<u2").reshape(height, width)
    gray = _normalize(values, min_value, max_value)
    return _write_gray(_output(width, height, output), gray)


def decode_float1c(
    data: bytes,
    width: int,
    height: int,
    is_bigendian: bool,
    min_value: float,
    max_value: float,
    step: int = 0,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Decode single-channel 32-bit float images; NaN renders black."""
    rows = np.ascontiguousarray(_rows(data, width, height, 4, step))
    values = rows.view(">f4" if is_bigendian else "<f4").reshape(height, width)
    gray = _normalize(values, min_value, max_value)
    return _write_gray(_output(width, height, output), gray)


def _yuv_to_rgba(
    y: np.ndarray, u: np.ndarray, v: np.ndarray, out: np.ndarray
) -> np.ndarray:
    yf = y.astype(np.float64)
    uf = u.astype(np.float64) - 128.0
    vf = v.astype(np.float64) - 128.0
    out[..., 0] = _to_uint8(yf + 1.402 * vf)
    out[..., 1] = _to_uint8(yf - 0.34414 * uf - 0.71414 * vf)
    out[..., 2] = _to_uint8(yf + 1.772 * uf)
    out[..., 3] = 255
    return out


def _yuv422(
    data: bytes,
    width: int,
    height: int,
    step: int,
    output: np.ndarray | None,
    order: tuple[int, int, int, int],
) -> np.ndarray:
    if width % 2:
        raise ImageDecodeError(f"YUV 4:2:2 images need an even width, got {width}")
    groups = _rows(data, width, height, 2, step).reshape(height, width // 2, 4)
    u_idx, y1_idx, v_idx, y2_idx = order
    y = np.stack([groups[..., y1_idx], groups[..., y2_idx]], axis=-1).reshape(
        height, width
    )
    u = np.repeat(groups[..., u_idx], 2, axis=1)
    v = np.repeat(groups[..., v_idx], 2, axis=1)
    return _yuv_to_rgba(y, u, v, _output(width, height, output))


def decode_uyvy(
    data: bytes,
    width: int,
    height: int,
    step: int = 0,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Decode UYVY (``yuv422``): byte order u, y1, v, y2 per pixel pair."""
    return _yuv422(data, width, height, step, output, (0, 1, 2, 3))


def decode_yuyv(
    data: bytes,
    width: int,
    height: int,
    step: int = 0,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Decode YUYV (``yuv422_yuy2``): byte order y1, u, y2, v per pixel pair."""
    return _yuv422(data, width, height, step, output, (1, 0, 3, 2))


# Cell index (0 top-left, 1 top-right, 2 bottom-left, 3 bottom-right) of the
# red sample, both green samples, then the blue sample.
_BAYER_LAYOUTS: dict[str, tuple[int, int, int, int]] = {
    "rggb": (0, 1, 2, 3),
    "bggr": (3, 1, 2, 0),
    "gbrg": (2, 0, 3, 1),
    "grbg": (1, 0, 3, 2),
}


def _decode_bayer(
    data: bytes,
    width: int,
    height: int,
    step: int,
    output: np.ndarray | None,
    layout: str,
) -> np.ndarray:
    if width % 2 or height % 2:
        raise ImageDecodeError(
            f"Bayer images need even dimensions, got {width}x{height}"
        )
    raw = _rows(data, width, height, 1, step)
    cells = (raw[0::2, 0::2], raw[0::2, 1::2], raw[1::2, 0::2], raw[1::2, 1::2])
    red_idx, g1_idx, g2_idx, blue_idx = _BAYER_LAYOUTS[layout]
    green = (
        cells[g1_idx].astype(np.uint16) + cells[g2_idx].astype(np.uint16)
    ) / 2.0
    block = np.empty((height // 2, width // 2, 3), dtype=np.uint8)
    block[..., 0] = cells[red_idx]
    block[..., 1] = _to_uint8(green)
    block[..., 2] = cells[blue_idx]

    out = _output(width, height, output)
    out[..., :3] = np.repeat(np.repeat(block, 2, axis=0), 2, axis=1)
    out[..., 3] = 255
    return out


def decode_bayer_rggb8(
    data: bytes,
    width: int,
    height: int,
    step: int = 0,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Demosaic an RGGB Bayer image by 2x2 blocks."""
    return _decode_bayer(data, width, height, step, output, "rggb")


def decode_bayer_bggr8(
    data: bytes,
    width: int,
    height: int,
    step: int = 0,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Demosaic a BGGR Bayer image by 2x2 blocks."""
    return _decode_bayer(data, width, height, step, output, "bggr")


def decode_bayer_gbrg8(
    data: bytes,
    width: int,
    height: int,
    step: int = 0,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Demosaic a GBRG Bayer image by 2x2 blocks."""
    return _decode_bayer(data, width, height, step, output, "gbrg")


def decode_bayer_grbg8(
    data: bytes,
    width: int,
    height: int,
    step: int = 0,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Demosaic a GRBG Bayer image by 2x2 blocks."""
    return _decode_bayer(data, width, height, step, output, "grbg")
