"""Definitions of well-known ROS 2 message types.

rosbag2 ``.db3`` segments written before ROS 2 Iron carry no message
definitions, so schemas for their topics can only be synthesized for types
listed here.
"""

from __future__ import annotations

import functools

from .definitions import MessageDefinition
from .parser import parse_message_definition

_WELL_KNOWN_MSGS: dict[str, str] = {
    # builtin_interfaces
    "builtin_interfaces/msg/Time": """
int32 sec
uint32 nanosec
""",
    "builtin_interfaces/msg/Duration": """
int32 sec
uint32 nanosec
""",
    # std_msgs
    "std_msgs/msg/Header": """
builtin_interfaces/Time stamp
string frame_id
""",
    "std_msgs/msg/Empty": "",
    "std_msgs/msg/Bool": "bool data",
    "std_msgs/msg/Byte": "byte data",
    "std_msgs/msg/Char": "char data",
    "std_msgs/msg/String": "string data",
    "std_msgs/msg/Float32": "float32 data",
    "std_msgs/msg/Float64": "float64 data",
    "std_msgs/msg/Int8": "int8 data",
    "std_msgs/msg/Int16": "int16 data",
    "std_msgs/msg/Int32": "int32 data",
    "std_msgs/msg/Int64": "int64 data",
    "std_msgs/msg/UInt8": "uint8 data",
    "std_msgs/msg/UInt16": "uint16 data",
    "std_msgs/msg/UInt32": "uint32 data",
    "std_msgs/msg/UInt64": "uint64 data",
    "std_msgs/msg/ColorRGBA": """
float32 r
float32 g
float32 b
float32 a
""",
    "std_msgs/msg/MultiArrayDimension": """
string label
uint32 size
uint32 stride
""",
    "std_msgs/msg/MultiArrayLayout": """
MultiArrayDimension[] dim
uint32 data_offset
""",
    "std_msgs/msg/Float32MultiArray": """
MultiArrayLayout layout
float32[] data
""",
    "std_msgs/msg/Float64MultiArray": """
MultiArrayLayout layout
float64[] data
""",
    "std_msgs/msg/Int32MultiArray": """
MultiArrayLayout layout
int32[] data
""",
    "std_msgs/msg/UInt8MultiArray": """
MultiArrayLayout layout
uint8[] data
""",
    # geometry_msgs
    "geometry_msgs/msg/Point": """
float64 x
float64 y
float64 z
""",
    "geometry_msgs/msg/Point32": """
float32 x
float32 y
float32 z
""",
    "geometry_msgs/msg/Vector3": """
float64 x
float64 y
float64 z
""",
    "geometry_msgs/msg/Quaternion": """
float64 x 0
float64 y 0
float64 z 0
float64 w 1
""",
    "geometry_msgs/msg/Pose": """
Point position
Quaternion orientation
""",
    "geometry_msgs/msg/Pose2D": """
float64 x
float64 y
float64 theta
""",
    "geometry_msgs/msg/PoseStamped": """
std_msgs/Header header
Pose pose
""",
    "geometry_msgs/msg/PoseArray": """
std_msgs/Header header
Pose[] poses
""",
    "geometry_msgs/msg/PoseWithCovariance": """
Pose pose
float64[36] covariance
""",
    "geometry_msgs/msg/PoseWithCovarianceStamped": """
std_msgs/Header header
PoseWithCovariance pose
""",
    "geometry_msgs/msg/PointStamped": """
std_msgs/Header header
Point point
""",
    "geometry_msgs/msg/Vector3Stamped": """
std_msgs/Header header
Vector3 vector
""",
    "geometry_msgs/msg/QuaternionStamped": """
std_msgs/Header header
Quaternion quaternion
""",
    "geometry_msgs/msg/Polygon": "Point32[] points",
    "geometry_msgs/msg/PolygonStamped": """
std_msgs/Header header
Polygon polygon
""",
    "geometry_msgs/msg/Transform": """
Vector3 translation
Quaternion rotation
""",
    "geometry_msgs/msg/TransformStamped": """
std_msgs/Header header
string child_frame_id
Transform transform
""",
    "geometry_msgs/msg/Twist": """
Vector3 linear
Vector3 angular
""",
    "geometry_msgs/msg/TwistStamped": """
std_msgs/Header header
Twist twist
""",
    "geometry_msgs/msg/TwistWithCovariance": """
Twist twist
float64[36] covariance
""",
    "geometry_msgs/msg/TwistWithCovarianceStamped": """
std_msgs/Header header
TwistWithCovariance twist
""",
    "geometry_msgs/msg/Accel": """
Vector3 linear
Vector3 angular
""",
    "geometry_msgs/msg/AccelStamped": """
std_msgs/Header header
Accel accel
""",
    "geometry_msgs/msg/Wrench": """
Vector3 force
Vector3 torque
""",
    "geometry_msgs/msg/WrenchStamped": """
std_msgs/Header header
Wrench wrench
""",
    # sensor_msgs
    "sensor_msgs/msg/Image": """
std_msgs/Header header
uint32 height
uint32 width
string encoding
uint8 is_bigendian
uint32 step
uint8[] data
""",
    "sensor_msgs/msg/CompressedImage": """
std_msgs/Header header
string format
uint8[] data
""",
    "sensor_msgs/msg/RegionOfInterest": """
uint32 x_offset
uint32 y_offset
uint32 height
uint32 width
bool do_rectify
""",
    "sensor_msgs/msg/CameraInfo": """
std_msgs/Header header
uint32 height
uint32 width
string distortion_model
float64[] d
float64[9] k
float64[9] r
float64[12] p
uint32 binning_x
uint32 binning_y
RegionOfInterest roi
""",
    "sensor_msgs/msg/Imu": """
std_msgs/Header header
geometry_msgs/Quaternion orientation
float64[9] orientation_covariance
geometry_msgs/Vector3 angular_velocity
float64[9] angular_velocity_covariance
geometry_msgs/Vector3 linear_acceleration
float64[9] linear_acceleration_covariance
""",
    "sensor_msgs/msg/LaserScan": """
std_msgs/Header header
float32 angle_min
float32 angle_max
float32 angle_increment
float32 time_increment
float32 scan_time
float32 range_min
float32 range_max
float32[] ranges
float32[] intensities
""",
    "sensor_msgs/msg/PointField": """
uint8 INT8=1
uint8 UINT8=2
uint8 INT16=3
uint8 UINT16=4
uint8 INT32=5
uint8 UINT32=6
uint8 FLOAT32=7
uint8 FLOAT64=8
string name
uint32 offset
uint8 datatype
uint32 count
""",
    "sensor_msgs/msg/PointCloud2": """
std_msgs/Header header
uint32 height
uint32 width
PointField[] fields
bool is_bigendian
uint32 point_step
uint32 row_step
uint8[] data
bool is_dense
""",
    "sensor_msgs/msg/NavSatStatus": """
int8 STATUS_NO_FIX=-1
int8 STATUS_FIX=0
int8 STATUS_SBAS_FIX=1
int8 STATUS_GBAS_FIX=2
uint16 SERVICE_GPS=1
uint16 SERVICE_GLONASS=2
uint16 SERVICE_COMPASS=4
uint16 SERVICE_GALILEO=8
int8 status
uint16 service
""",
    "sensor_msgs/msg/NavSatFix": """
uint8 COVARIANCE_TYPE_UNKNOWN=0
uint8 COVARIANCE_TYPE_APPROXIMATED=1
uint8 COVARIANCE_TYPE_DIAGONAL_KNOWN=2
uint8 COVARIANCE_TYPE_KNOWN=3
std_msgs/Header header
NavSatStatus status
float64 latitude
float64 longitude
float64 altitude
float64[9] position_covariance
uint8 position_covariance_type
""",
    "sensor_msgs/msg/JointState": """
std_msgs/Header header
string[] name
float64[] position
float64[] velocity
float64[] effort
""",
    "sensor_msgs/msg/Joy": """
std_msgs/Header header
float32[] axes
int32[] buttons
""",
    "sensor_msgs/msg/Range": """
uint8 ULTRASOUND=0
uint8 INFRARED=1
std_msgs/Header header
uint8 radiation_type
float32 field_of_view
float32 min_range
float32 max_range
float32 range
""",
    "sensor_msgs/msg/Temperature": """
std_msgs/Header header
float64 temperature
float64 variance
""",
    "sensor_msgs/msg/MagneticField": """
std_msgs/Header header
geometry_msgs/Vector3 magnetic_field
float64[9] magnetic_field_covariance
""",
    "sensor_msgs/msg/BatteryState": """
uint8 POWER_SUPPLY_STATUS_UNKNOWN=0
uint8 POWER_SUPPLY_STATUS_CHARGING=1
uint8 POWER_SUPPLY_STATUS_DISCHARGING=2
uint8 POWER_SUPPLY_STATUS_NOT_CHARGING=3
uint8 POWER_SUPPLY_STATUS_FULL=4
std_msgs/Header header
float32 voltage
float32 temperature
float32 current
float32 charge
float32 capacity
float32 design_capacity
float32 percentage
uint8 power_supply_status
uint8 power_supply_health
uint8 power_supply_technology
bool present
float32[] cell_voltage
float32[] cell_temperature
string location
string serial_number
""",
    # nav_msgs
    "nav_msgs/msg/MapMetaData": """
builtin_interfaces/Time map_load_time
float32 resolution
uint32 width
uint32 height
geometry_msgs/Pose origin
""",
    "nav_msgs/msg/OccupancyGrid": """
std_msgs/Header header
MapMetaData info
int8[] data
""",
    "nav_msgs/msg/Odometry": """
std_msgs/Header header
string child_frame_id
geometry_msgs/PoseWithCovariance pose
geometry_msgs/TwistWithCovariance twist
""",
    "nav_msgs/msg/Path": """
std_msgs/Header header
geometry_msgs/PoseStamped[] poses
""",
    "nav_msgs/msg/GridCells": """
std_msgs/Header header
float32 cell_width
float32 cell_height
geometry_msgs/Point[] cells
""",
    # tf2_msgs
    "tf2_msgs/msg/TFMessage": "geometry_msgs/TransformStamped[] transforms",
    # visualization_msgs
    "visualization_msgs/msg/UVCoordinate": """
float32 u
float32 v
""",
    "visualization_msgs/msg/MeshFile": """
string filename
uint8[] data
""",
    "visualization_msgs/msg/Marker": """
int32 ARROW=0
int32 CUBE=1
int32 SPHERE=2
int32 CYLINDER=3
int32 LINE_STRIP=4
int32 LINE_LIST=5
int32 CUBE_LIST=6
int32 SPHERE_LIST=7
int32 POINTS=8
int32 TEXT_VIEW_FACING=9
int32 MESH_RESOURCE=10
int32 TRIANGLE_LIST=11
int32 ADD=0
int32 MODIFY=0
int32 DELETE=2
int32 DELETEALL=3
std_msgs/Header header
string ns
int32 id
int32 type
int32 action
geometry_msgs/Pose pose
geometry_msgs/Vector3 scale
std_msgs/ColorRGBA color
builtin_interfaces/Duration lifetime
bool frame_locked
geometry_msgs/Point[] points
std_msgs/ColorRGBA[] colors
string texture_resource
sensor_msgs/CompressedImage texture
UVCoordinate[] uv_coordinates
string text
string mesh_resource
MeshFile mesh_file
bool mesh_use_embedded_materials
""",
    "visualization_msgs/msg/MarkerArray": "Marker[] markers",
    # diagnostic_msgs
    "diagnostic_msgs/msg/KeyValue": """
string key
string value
""",
    "diagnostic_msgs/msg/DiagnosticStatus": """
byte OK=0
byte WARN=1
byte ERROR=2
byte STALE=3
byte level
string name
string message
string hardware_id
KeyValue[] values
""",
    "diagnostic_msgs/msg/DiagnosticArray": """
std_msgs/Header header
DiagnosticStatus[] status
""",
    # rcl_interfaces
    "rcl_interfaces/msg/Log": """
uint8 DEBUG=10
uint8 INFO=20
uint8 WARN=30
uint8 ERROR=40
uint8 FATAL=50
builtin_interfaces/Time stamp
uint8 level
string name
string msg
string file
string function
uint32 line
""",
    # foxglove_msgs
    "foxglove_msgs/msg/CompressedVideo": """
builtin_interfaces/Time timestamp
string frame_id
uint8[] data
string format
""",
    "foxglove_msgs/msg/CompressedImage": """
builtin_interfaces/Time timestamp
string frame_id
uint8[] data
string format
""",
    "foxglove_msgs/msg/RawImage": """
builtin_interfaces/Time timestamp
string frame_id
uint32 width
uint32 height
string encoding
uint32 step
uint8[] data
""",
}


@functools.cache
def _parse_well_known() -> dict[str, MessageDefinition]:
    return {
        name: parse_message_definition(text, name)
        for name, text in _WELL_KNOWN_MSGS.items()
    }


def well_known_definitions() -> dict[str, MessageDefinition]:
    """Return a fresh registry of well-known ROS 2 type definitions.

    The returned dict can be extended by the caller without affecting later
    calls.
    """
    return dict(_parse_well_known())
