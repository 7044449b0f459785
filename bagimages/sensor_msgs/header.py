from typing import NamedTuple

from bagimages.cursor import BoundedCursor


# Layout from http://docs.ros.org/en/noetic/api/std_msgs/html/msg/Header.html
class Header(NamedTuple):
    # Consecutively increasing ID
    seq: int

    # Nanoseconds since epoch, combined from stamp.secs and stamp.nsecs
    stamp: int

    # Frame this data is associated with
    frame_id: str


def decode_header(cursor: BoundedCursor) -> Header:
    seq = cursor.read_u32()
    stamp = cursor.read_time()
    frame_id = cursor.read_string()

    return Header(seq=seq, stamp=stamp, frame_id=frame_id)
