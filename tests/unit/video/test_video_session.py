from __future__ import annotations

import pytest
from PIL import Image

from baglens.core.time import Time
from baglens.exceptions import VideoDecodeError
from baglens.image import CompressedVideo
from baglens.video import (
    CodedSize,
    VideoDecoderConfig,
    VideoDecoderSession,
    VideoPlayer,
    advance_video_session,
    close_video_session,
    decode_compressed_video_to_bitmap,
    decode_video_frame,
    empty_video_frame,
    get_video_decoder_config,
    is_video_keyframe,
)
from baglens.video.video_player import resize_to_width

START = b"\x00\x00\x00\x01"
SPS_720P = bytes.fromhex("6742c01fec802802dc80")
SPS_1080P = bytes.fromhex("67640028acd900780227e540")
PPS = bytes.fromhex("68ce3880")
IDR = bytes.fromhex("6588840033")
NON_IDR = bytes.fromhex("419a22")


def _frame(*nals: bytes, at: Time, fmt: str = "h264") -> CompressedVideo:
    return CompressedVideo(
        timestamp=at, data=b"".join(START + nal for nal in nals), format=fmt
    )


class FakeDecodedFrame:
    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.closed = False

    def to_bitmap(self, resize_width: int | None = None) -> Image.Image:
        image = Image.new("RGBA", (self.width, self.height), (10, 20, 30, 255))
        return resize_to_width(image, resize_width)

    def close(self) -> None:
        self.closed = True


class FakePlayer:
    def __init__(self, produce_frames: bool = True) -> None:
        self.configs: list[VideoDecoderConfig] = []
        self.submitted: list[tuple[int, str]] = []
        self.frames: list[FakeDecodedFrame] = []
        self.produce_frames = produce_frames
        self.closed = False

    def init(self, config: VideoDecoderConfig) -> None:
        self.configs.append(config)

    def is_initialized(self) -> bool:
        return bool(self.configs) and not self.closed

    def coded_size(self) -> CodedSize | None:
        if not self.configs:
            return None
        config = self.configs[-1]
        return CodedSize(config.coded_width, config.coded_height)

    async def decode(
        self, data: bytes, timestamp_us: int, frame_type: str
    ) -> FakeDecodedFrame | None:
        self.submitted.append((timestamp_us, frame_type))
        if not self.produce_frames:
            return None
        size = self.coded_size()
        assert size is not None
        frame = FakeDecodedFrame(size.width, size.height)
        self.frames.append(frame)
        return frame

    def close(self) -> None:
        self.closed = True


def test_keyframe_and_config_detection() -> None:
    key = _frame(SPS_720P, PPS, IDR, at=Time(1, 0))
    delta = _frame(NON_IDR, at=Time(1, 0))

    assert is_video_keyframe(key)
    assert not is_video_keyframe(delta)
    config = get_video_decoder_config(key)
    assert config == VideoDecoderConfig("avc1.42c01f", 1280, 720)
    assert get_video_decoder_config(delta) is None


def test_unknown_format_is_never_a_keyframe() -> None:
    frame = _frame(SPS_720P, PPS, IDR, at=Time(1, 0), fmt="h265")

    assert not is_video_keyframe(frame)
    assert get_video_decoder_config(frame) is None


def test_empty_video_frame_sizes() -> None:
    player = FakePlayer()
    player.init(VideoDecoderConfig("avc1.42c01f", 64, 48))

    default = empty_video_frame()
    sized = empty_video_frame(resize_width=16)
    from_player = empty_video_frame(player, resize_width=32)

    assert default.size == (32, 32)
    assert sized.size == (16, 16)
    assert from_player.size == (32, 24)
    assert default.getpixel((0, 0)) == (0, 0, 0, 0)


@pytest.mark.asyncio
async def test_uninitialized_session_returns_blank_bitmap() -> None:
    session = VideoDecoderSession(player=FakePlayer())

    bitmap = await decode_video_frame(
        session, _frame(NON_IDR, at=Time(5, 0)), resize_width=32
    )

    assert bitmap.size == (32, 32)
    assert not session.is_initialized
    assert session.first_message_time_ns == 5_000_000_000
    assert session.player.submitted == []


def test_advance_initializes_on_new_config_only() -> None:
    player = FakePlayer()
    session = VideoDecoderSession(player=player)

    advance_video_session(session, _frame(NON_IDR, at=Time(1, 0)))
    assert player.configs == []

    advance_video_session(session, _frame(SPS_720P, PPS, IDR, at=Time(2, 0)))
    advance_video_session(session, _frame(SPS_720P, PPS, IDR, at=Time(3, 0)))
    assert len(player.configs) == 1

    advance_video_session(session, _frame(SPS_1080P, PPS, IDR, at=Time(4, 0)))
    assert [c.coded_height for c in player.configs] == [720, 1080]
    assert session.config == player.configs[-1]
    assert session.first_message_time_ns == 1_000_000_000


def test_unreadable_config_is_ignored() -> None:
    player = FakePlayer()
    session = VideoDecoderSession(player=player)

    advance_video_session(session, _frame(b"\x67\x42", IDR, at=Time(1, 0)))

    assert player.configs == []
    assert session.config is None


@pytest.mark.asyncio
async def test_decode_uses_relative_microseconds_and_frame_type() -> None:
    player = FakePlayer()
    session = VideoDecoderSession(player=player)

    first = await decode_video_frame(
        session, _frame(SPS_720P, PPS, IDR, at=Time(10, 0))
    )
    second = await decode_video_frame(
        session, _frame(NON_IDR, at=Time(10, 33_366_999)), resize_width=640
    )

    assert player.submitted == [(0, "key"), (33_366, "delta")]
    assert first.size == (1280, 720)
    assert second.size == (640, 360)
    assert all(frame.closed for frame in player.frames)


@pytest.mark.asyncio
async def test_no_decoded_picture_gives_placeholder() -> None:
    player = FakePlayer(produce_frames=False)
    player.init(VideoDecoderConfig("avc1.42c01f", 64, 48))

    bitmap = await decode_compressed_video_to_bitmap(
        _frame(IDR, at=Time(0, 2_000)), player, first_message_time_ns=1_000
    )

    assert player.submitted == [(1, "key")]
    assert bitmap.size == (64, 48)


def test_closed_session_rejects_frames() -> None:
    player = FakePlayer()
    session = VideoDecoderSession(player=player)
    close_video_session(session)
    close_video_session(session)

    assert player.closed
    with pytest.raises(VideoDecodeError):
        advance_video_session(session, _frame(IDR, at=Time(0, 0)))


@pytest.mark.asyncio
async def test_video_player_lifecycle() -> None:
    player = VideoPlayer()
    assert not player.is_initialized()
    assert player.coded_size() is None

    player.init(VideoDecoderConfig("avc1.42c01f", 1280, 720))

    assert player.is_initialized()
    assert player.coded_size() == CodedSize(1280, 720)
    # Delta frames before the first key frame are dropped without decoding.
    assert await player.decode(START + NON_IDR, 0, "delta") is None

    player.close()
    assert not player.is_initialized()


def test_video_player_rejects_other_codecs() -> None:
    with pytest.raises(VideoDecodeError, match="Unsupported video codec"):
        VideoPlayer().init(VideoDecoderConfig("vp09.00.10.08", 640, 480))
