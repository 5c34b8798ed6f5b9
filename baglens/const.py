"""Constants shared across baglens modules."""

PROFILE_ROS2 = "ros2"
SCHEMA_ENCODING_ROS2MSG = "ros2msg"

NSEC_PER_SEC = 1_000_000_000
NSEC_PER_USEC = 1_000
USEC_PER_SEC = 1_000_000

# rosbag2 queries treat the end time as exclusive; one tick makes it inclusive.
END_TIME_EPSILON_NSEC = 1

# Edge length of the placeholder bitmap shown before a decoder is ready.
EMPTY_VIDEO_FRAME_SIZE = 32

DEFAULT_MONO16_MIN_VALUE = 0.0
DEFAULT_MONO16_MAX_VALUE = 10000.0
DEFAULT_FLOAT_MIN_VALUE = 0.0
DEFAULT_FLOAT_MAX_VALUE = 1.0

DEFAULT_BLOCK_DURATION_MS = 100
DEFAULT_MAX_BLOCK_CACHE_BYTES = 1024 * 1024 * 1024
DEFAULT_ITERATOR_LOG_INTERVAL = 10000

UNSUPPORTED_DATATYPE_TIP = (
    "ROS 2 .db3 files do not contain message definitions, so only well-known "
    "ROS types are supported. As a workaround, you can convert the db3 file "
    "to mcap using the mcap CLI."
)
