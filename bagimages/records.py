import logging

from contextlib import contextmanager
from typing import Iterator, NamedTuple, Union

from rosbags.rosbag1 import Reader, ReaderError

from bagimages.errors import SourceOpenFailure, MalformedChunk


logger = logging.getLogger(__name__)


# Metadata binding a connection id to a topic and its message type
class Connection(NamedTuple):
    id: int
    topic: str
    message_type: str


# One serialized message, time is in nanoseconds
class MessageData(NamedTuple):
    conn_id: int
    time: int
    payload: bytes


RawRecord = Union[Connection, MessageData]


def _iter_records(reader: Reader) -> Iterator[RawRecord]:
    # ROS1 bags index their connections, so all connection metadata can be announced before any data
    for connection in sorted(reader.connections, key=lambda c: c.id):
        yield Connection(id=connection.id, topic=connection.topic, message_type=connection.msgtype)

    try:
        for connection, timestamp, rawdata in reader.messages():
            yield MessageData(conn_id=connection.id, time=timestamp, payload=rawdata)
    except ReaderError as ex:
        raise MalformedChunk(str(ex)) from ex


# Opens a ROS1 bag and yields an iterator over its records, in delivery order
@contextmanager
def open_bag(path: str) -> Iterator[Iterator[RawRecord]]:
    try:
        reader = Reader(path)
        reader.open()
    except (ReaderError, OSError) as ex:
        raise SourceOpenFailure(str(path), str(ex)) from ex

    logger.info(f"Opened {path} with {len(reader.connections)} connections")

    try:
        yield _iter_records(reader)
    finally:
        reader.close()
