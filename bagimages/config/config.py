from bagimages.config.dotdict import dotdict


EXTRACT_CONFIG = dotdict({
    # rosbags reports ROS1 "sensor_msgs/Image" connections under their normalized name
    "IMAGE_MSGTYPE": "sensor_msgs/msg/Image",

    # Only rgb8/bgr8 style buffers are supported, one byte per channel
    "IMAGE_CHANNELS": 3,
    "IMAGE_BITDEPTH": 8,
    "OUTPUT_EXTENSION": ".png",

    "NANOSECONDS_PER_SECOND": 1_000_000_000,

    "DEFAULT_START": 0.0,
    "DEFAULT_STEP": 1,
    "DEFAULT_INVERT_CHANNELS": False,

    "LOG_LEVEL": "INFO",

    # If a literal topic contains one of these, the user probably meant to pass --regex
    "REGEX_HINT_CHARACTERS": "*?[]{}+^$|()\\",
}).with_env("BAGIMAGES_", "IMAGE_MSGTYPE", "LOG_LEVEL")
