"""H.264 Annex B bitstream inspection.

Only what is needed to start a decoder is parsed: NAL unit boundaries, the
unit type, and the sequence parameter set fields that determine the codec
string and the coded frame size.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum

from baglens.exceptions import VideoDecodeError

logger = logging.getLogger(__name__)

_START_CODE = b"\x00\x00\x01"

# profile_idc values whose SPS carries chroma format and scaling lists.
_HIGH_PROFILES = frozenset(
    {100, 110, 122, 244, 44, 83, 86, 118, 128, 138, 139, 134, 135}
)


class NalUnitType(IntEnum):
    """NAL unit types used when inspecting a stream."""

    NON_IDR_SLICE = 1
    IDR_SLICE = 5
    SEI = 6
    SPS = 7
    PPS = 8
    ACCESS_UNIT_DELIMITER = 9


@dataclass(frozen=True, slots=True)
class VideoDecoderConfig:
    """What a decoder needs to know before the first keyframe."""

    codec: str
    coded_width: int
    coded_height: int


@dataclass(frozen=True, slots=True)
class SequenceParameterSet:
    """Fields of an SPS relevant to decoder configuration."""

    profile_idc: int
    constraint_flags: int
    level_idc: int
    chroma_format_idc: int
    width: int
    height: int

    @property
    def codec(self) -> str:
        """RFC 6381 codec string, e.g. ``avc1.42c01f``."""
        return (
            f"avc1.{self.profile_idc:02x}{self.constraint_flags:02x}"
            f"{self.level_idc:02x}"
        )


def iter_nal_units(data: bytes) -> Iterator[bytes]:
    """Yield each NAL unit of an Annex B byte stream, without start codes."""
    start = data.find(_START_CODE)
    while start != -1:
        begin = start + len(_START_CODE)
        end = data.find(_START_CODE, begin)
        nal = data[begin:] if end == -1 else data[begin:end]
        # Drops trailing_zero_8bits and the leading zero of a 4-byte start code.
        nal = nal.rstrip(b"\x00")
        if nal:
            yield nal
        start = end


def nal_unit_type(nal: bytes) -> int:
    """Return the ``nal_unit_type`` of a NAL unit."""
    return nal[0] & 0x1F


def is_keyframe(data: bytes) -> bool:
    """Return True when the access unit contains an IDR slice."""
    return any(
        nal_unit_type(nal) == NalUnitType.IDR_SLICE for nal in iter_nal_units(data)
    )


def remove_emulation_prevention(nal: bytes) -> bytes:
    """Strip the ``0x03`` byte inserted after every ``00 00`` in a NAL payload."""
    out = bytearray()
    zeros = 0
    for byte in nal:
        if zeros >= 2 and byte == 0x03:
            zeros = 0
            continue
        out.append(byte)
        zeros = zeros + 1 if byte == 0 else 0
    return bytes(out)


class BitReader:
    """MSB-first reader over an RBSP with exp-Golomb support."""

    def __init__(self, data: bytes) -> None:
        """Read bits from ``data`` starting at the first byte."""
        self._data = data
        self._pos = 0

    def read_bit(self) -> int:
        """Read one bit."""
        if self._pos >= len(self._data) * 8:
            raise VideoDecodeError("Unexpected end of H.264 parameter set")
        byte = self._data[self._pos >> 3]
        bit = (byte >> (7 - (self._pos & 7))) & 1
        self._pos += 1
        return bit

    def read_bits(self, count: int) -> int:
        """Read ``count`` bits as an unsigned integer."""
        value = 0
        for _ in range(count):
            value = (value << 1) | self.read_bit()
        return value

    def read_ue(self) -> int:
        """Read an unsigned exp-Golomb value."""
        leading_zeros = 0
        while self.read_bit() == 0:
            leading_zeros += 1
            if leading_zeros > 31:
                raise VideoDecodeError("Invalid exp-Golomb code in H.264 stream")
        return (1 << leading_zeros) - 1 + self.read_bits(leading_zeros)

    def read_se(self) -> int:
        """Read a signed exp-Golomb value."""
        code = self.read_ue()
        return (code + 1) // 2 if code & 1 else -(code // 2)


def _skip_scaling_list(reader: BitReader, size: int) -> None:
    last_scale = 8
    next_scale = 8
    for _ in range(size):
        if next_scale != 0:
            next_scale = (last_scale + reader.read_se() + 256) % 256
        last_scale = last_scale if next_scale == 0 else next_scale


def parse_sps(nal: bytes) -> SequenceParameterSet:
    """Parse an SPS NAL unit (header byte included).

    Raises:
        VideoDecodeError: If the unit is not an SPS or is truncated.
    """
    if not nal or nal_unit_type(nal) != NalUnitType.SPS:
        raise VideoDecodeError("NAL unit is not a sequence parameter set")
    reader = BitReader(remove_emulation_prevention(nal[1:]))

    profile_idc = reader.read_bits(8)
    constraint_flags = reader.read_bits(8)
    level_idc = reader.read_bits(8)
    reader.read_ue()  # seq_parameter_set_id

    chroma_format_idc = 1
    separate_colour_plane = 0
    if profile_idc in _HIGH_PROFILES:
        chroma_format_idc = reader.read_ue()
        if chroma_format_idc == 3:
            separate_colour_plane = reader.read_bit()
        reader.read_ue()  # bit_depth_luma_minus8
        reader.read_ue()  # bit_depth_chroma_minus8
        reader.read_bit()  # qpprime_y_zero_transform_bypass_flag
        if reader.read_bit():  # seq_scaling_matrix_present_flag
            for index in range(8 if chroma_format_idc != 3 else 12):
                if reader.read_bit():
                    _skip_scaling_list(reader, 16 if index < 6 else 64)

    reader.read_ue()  # log2_max_frame_num_minus4
    pic_order_cnt_type = reader.read_ue()
    if pic_order_cnt_type == 0:
        reader.read_ue()  # log2_max_pic_order_cnt_lsb_minus4
    elif pic_order_cnt_type == 1:
        reader.read_bit()  # delta_pic_order_always_zero_flag
        reader.read_se()  # offset_for_non_ref_pic
        reader.read_se()  # offset_for_top_to_bottom_field
        for _ in range(reader.read_ue()):
            reader.read_se()

    reader.read_ue()  # max_num_ref_frames
    reader.read_bit()  # gaps_in_frame_num_value_allowed_flag
    pic_width_in_mbs_minus1 = reader.read_ue()
    pic_height_in_map_units_minus1 = reader.read_ue()
    frame_mbs_only = reader.read_bit()
    if not frame_mbs_only:
        reader.read_bit()  # mb_adaptive_frame_field_flag
    reader.read_bit()  # direct_8x8_inference_flag

    crop_left = crop_right = crop_top = crop_bottom = 0
    if reader.read_bit():  # frame_cropping_flag
        crop_left = reader.read_ue()
        crop_right = reader.read_ue()
        crop_top = reader.read_ue()
        crop_bottom = reader.read_ue()

    chroma_array_type = 0 if separate_colour_plane else chroma_format_idc
    if chroma_array_type == 0:
        crop_unit_x = 1
        crop_unit_y = 2 - frame_mbs_only
    else:
        sub_width_c = 1 if chroma_array_type == 3 else 2
        sub_height_c = 2 if chroma_array_type == 1 else 1
        crop_unit_x = sub_width_c
        crop_unit_y = sub_height_c * (2 - frame_mbs_only)

    width = (pic_width_in_mbs_minus1 + 1) * 16
    width -= crop_unit_x * (crop_left + crop_right)
    height = (2 - frame_mbs_only) * (pic_height_in_map_units_minus1 + 1) * 16
    height -= crop_unit_y * (crop_top + crop_bottom)

    return SequenceParameterSet(
        profile_idc=profile_idc,
        constraint_flags=constraint_flags,
        level_idc=level_idc,
        chroma_format_idc=chroma_format_idc,
        width=width,
        height=height,
    )


def parse_decoder_config(data: bytes) -> VideoDecoderConfig | None:
    """Build a decoder config from the first SPS in ``data``.

    Returns None when the access unit carries no SPS.
    """
    for nal in iter_nal_units(data):
        if nal_unit_type(nal) == NalUnitType.SPS:
            sps = parse_sps(nal)
            logger.debug("Parsed SPS: %s %dx%d", sps.codec, sps.width, sps.height)
            return VideoDecoderConfig(
                codec=sps.codec, coded_width=sps.width, coded_height=sps.height
            )
    return None
