from typing import NamedTuple

from bagimages.cursor import BoundedCursor
from bagimages.sensor_msgs.header import Header, decode_header


# An uncompressed image, (0, 0) is at the top-left corner
# Layout from http://docs.ros.org/en/noetic/api/sensor_msgs/html/msg/Image.html
class Image(NamedTuple):
    # Header timestamp should be acquisition time of image
    header: Header

    # Number of rows and columns
    height: int
    width: int

    # Channel meaning, ordering and size, ex. "rgb8"
    encoding: str

    is_bigendian: bool

    # Full row length in bytes
    step: int

    # View into the original payload, size is (step * rows)
    data: memoryview

    @property
    def channels(self) -> int:
        if self.width == 0:
            return 0

        return self.step // self.width


def decode_image(cursor: BoundedCursor) -> Image:
    header = decode_header(cursor)

    height = cursor.read_u32()
    width = cursor.read_u32()
    encoding = cursor.read_string()
    is_bigendian = cursor.read_u8() != 0
    step = cursor.read_u32()

    # The uint8[] data field carries its own length prefix, which must equal height * step
    cursor.read_u32()

    data = cursor.read_bytes(height * step)

    return Image(header=header, height=height, width=width, encoding=encoding,
                 is_bigendian=is_bigendian, step=step, data=data)


def decode_image_message(payload: bytes) -> Image:
    return decode_image(BoundedCursor(payload))
