# All failures raised by bagimages derive from BagImagesError, so that the command line
# entry point can turn any of them into a single line error message


class BagImagesError(Exception):
    pass


class ConfigurationError(BagImagesError, ValueError):
    pass


class SourceOpenFailure(BagImagesError):
    def __init__(self, path: str, cause: str):
        super().__init__(f"Cannot read rosbag file {path}. Cause: {cause}")
        self.path = path
        self.cause = cause


class MalformedChunk(BagImagesError):
    def __init__(self, cause: str):
        super().__init__(f"Invalid chunk in rosbag file. Cause: {cause}")
        self.cause = cause


class MalformedMessage(BagImagesError):
    def __init__(self, cause: str):
        super().__init__(f"Invalid message in rosbag file. Cause: {cause}")
        self.cause = cause


class OutOfBounds(BagImagesError):
    def __init__(self, position: int, requested: int, length: int):
        super().__init__(f"Out of bounds when reading byte stream (requested {requested} bytes at offset {position} of {length})")
        self.position = position
        self.requested = requested
        self.length = length


class InvalidTextEncoding(BagImagesError):
    def __init__(self, position: int):
        super().__init__(f"Invalid UTF-8 string encountered when reading byte stream at offset {position}")
        self.position = position


class UnsupportedPixelEncoding(BagImagesError):
    def __init__(self, encoding: str, width: int, height: int, size: int, channels: int = 0):
        super().__init__(f"Cannot decode frame with encoding {encoding} ({width}x{height}, {channels} bytes per pixel, {size} bytes of pixel data)")
        self.channels = channels
        self.encoding = encoding
        self.width = width
        self.height = height
        self.size = size


# Never raised by the engine, only collected and logged as a diagnostic
class TopicTypeMismatch(BagImagesError):
    def __init__(self, topic: str, actual: str, expected: str):
        super().__init__(f"Invalid topic type in rosbag file: {topic} has type {actual}, expected {expected}")
        self.topic = topic
        self.actual = actual
        self.expected = expected


class SaveFailure(BagImagesError):
    def __init__(self, path: str, cause: str):
        super().__init__(f"Cannot save file as `{path}`. Cause: {cause}")
        self.path = path
        self.cause = cause
