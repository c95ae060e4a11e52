"""Sensor geometry, skeleton shape and on-disk layout constants."""

# Frame geometry (VGA depth/color streams)
FRAME_WIDTH = 640
FRAME_HEIGHT = 480
PIXEL_COUNT = FRAME_WIDTH * FRAME_HEIGHT

# Bytes per pixel for each stored buffer kind
COLOR_BYTES_PER_PIXEL = 3   # RGB888
DEPTH_BYTES_PER_PIXEL = 2   # 16-bit little-endian millimetres
USER_MAP_BYTES_PER_PIXEL = 2  # 16-bit little-endian user ids from the tracker
SEGMENTATION_CAPTURE_BYTES_PER_PIXEL = 1  # 0/1 mask as written to disk
SEGMENTATION_STORED_BYTES_PER_PIXEL = 2   # widened to match depth buffers

# Skeleton shape
JOINT_COUNT = 15
JOINT_COMPONENTS = 3

# Placeholder token written for joints without a value
MISSING_JOINT_TOKEN = "null"

# On-disk session layout
DEPTH_DIR = "Depth"
COLOR_DIR = "Color"
SEGMENTATION_DIR = "Segmentation"
COORDINATES_DIR = "Coordinates"
REAL_COORDINATES_FILE = "Real.txt"
DEPTH_COORDINATES_FILE = "Depth.txt"
FRAME_FILE_SUFFIX = ".bin"

# Frame event channel
DEFAULT_CHANNEL_CAPACITY = 256
