import struct

from bagimages.config import EXTRACT_CONFIG
from bagimages.errors import OutOfBounds, InvalidTextEncoding


U8 = struct.Struct("<B")
U32 = struct.Struct("<I")


class BoundedCursor:
    """Forward-only reader over an immutable, little-endian byte buffer.

    All reads are bounds checked against the buffer, and slices are returned as
    memoryviews into the original buffer, so decoding a message never copies its
    payload. A failed read raises OutOfBounds and leaves the position untouched.
    """

    def __init__(self, data: bytes):
        self._data = memoryview(data).cast("B")
        self._pos = 0

    def __len__(self) -> int:
        return len(self._data)

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def read_bytes(self, n: int) -> memoryview:
        if n < 0 or self._pos + n > len(self._data):
            raise OutOfBounds(self._pos, n, len(self._data))

        start = self._pos
        self._pos += n
        return self._data[start:self._pos]

    def read_u8(self) -> int:
        return U8.unpack(self.read_bytes(U8.size))[0]

    def read_u32(self) -> int:
        return U32.unpack(self.read_bytes(U32.size))[0]

    # u32 length prefix followed by that many bytes, used for strings and blobs
    def read_chunk(self) -> memoryview:
        n = self.read_u32()
        return self.read_bytes(n)

    # ROS time is two u32 fields, secs and nsecs, returned here as nanoseconds
    def read_time(self) -> int:
        secs = self.read_u32()
        nsecs = self.read_u32()
        return secs * EXTRACT_CONFIG.NANOSECONDS_PER_SECOND + nsecs

    def read_string(self) -> str:
        start = self._pos
        chunk = self.read_chunk()

        try:
            return str(chunk, "utf-8")
        except UnicodeDecodeError as ex:
            raise InvalidTextEncoding(start) from ex
