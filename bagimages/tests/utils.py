import os
import struct
import tempfile
import numpy as np

from contextlib import contextmanager
from typing import List, Optional, Tuple

from rosbags.rosbag1 import Writer
from rosbags.typesys import Stores, get_typestore

from bagimages.config import EXTRACT_CONFIG
from bagimages.records import Connection, MessageData, RawRecord

NS = EXTRACT_CONFIG.NANOSECONDS_PER_SECOND


def serialize_string(value: str) -> bytes:
    encoded = value.encode("utf-8")
    return struct.pack("<I", len(encoded)) + encoded


def serialize_header(seq: int = 0, secs: int = 0, nsecs: int = 0, frame_id: str = "camera") -> bytes:
    return struct.pack("<III", seq, secs, nsecs) + serialize_string(frame_id)


# ROS1 wire layout of sensor_msgs/Image, data_length defaults to the real size of the pixel data
def serialize_image(pixels: bytes, width: int, height: int, step: Optional[int] = None, encoding: str = "rgb8",
                    is_bigendian: bool = False, data_length: Optional[int] = None, **header) -> bytes:
    if step is None:
        step = width * 3

    if data_length is None:
        data_length = len(pixels)

    return serialize_header(**header) + \
        struct.pack("<II", height, width) + \
        serialize_string(encoding) + \
        struct.pack("<BI", int(is_bigendian), step) + \
        struct.pack("<I", data_length) + \
        bytes(pixels)


def get_test_image(color: Tuple[int, int, int], width: int, height: int) -> np.ndarray:
    img = np.zeros(shape=(height, width * 3), dtype=np.uint8)
    img[:, 0::3] = color[0]
    img[:, 1::3] = color[1]
    img[:, 2::3] = color[2]

    return img


def image_payload(color: Tuple[int, int, int] = (255, 0, 0), width: int = 4, height: int = 2, **kwargs) -> bytes:
    return serialize_image(get_test_image(color, width, height).tobytes(), width, height, **kwargs)


# Connection record followed by `count` messages at `interval` seconds, starting from `start_time`
def artificial_stream(topic: str = "/cam/image", count: int = 10, conn_id: int = 0, interval: float = 1.0,
                      start_time: int = 1_600_000_000 * NS, msgtype: str = EXTRACT_CONFIG.IMAGE_MSGTYPE,
                      payload: Optional[bytes] = None) -> List[RawRecord]:
    if payload is None:
        payload = image_payload()

    records: List[RawRecord] = [Connection(id=conn_id, topic=topic, message_type=msgtype)]
    for i in range(count):
        records.append(MessageData(conn_id=conn_id, time=start_time + round(i * interval * NS), payload=payload))

    return records


# Merges the message records of several streams by time, keeping all connections in front
def interleave(*streams: List[RawRecord]) -> List[RawRecord]:
    connections = [r for s in streams for r in s if isinstance(r, Connection)]
    messages = [r for s in streams for r in s if isinstance(r, MessageData)]
    return connections + sorted(messages, key=lambda m: m.time)


@contextmanager
def artificial_bagfile(topics: Tuple[str, ...] = ("/cam/image",), count: int = 3,
                       msgtype: str = EXTRACT_CONFIG.IMAGE_MSGTYPE, payload: Optional[bytes] = None):
    typestore = get_typestore(Stores.ROS1_NOETIC)

    if payload is None:
        payload = image_payload()

    with tempfile.TemporaryDirectory() as td:
        path = os.path.join(td, "test.bag")

        with Writer(path) as writer:
            connections = [writer.add_connection(topic, msgtype, typestore=typestore) for topic in topics]

            for i in range(count):
                for connection in connections:
                    writer.write(connection, 1_600_000_000 * NS + i * NS, payload)

        yield path
