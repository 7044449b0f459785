import os
import logging

from typing import Callable, Iterable, List, NamedTuple, Optional

from bagimages.config import EXTRACT_CONFIG
from bagimages.errors import (ConfigurationError, MalformedMessage, SaveFailure, TopicTypeMismatch,
                              OutOfBounds, InvalidTextEncoding, UnsupportedPixelEncoding)
from bagimages.records import Connection, MessageData, RawRecord, open_bag
from bagimages.sensor_msgs import decode_image_message
from bagimages.state import ExportStateStore, TopicState
from bagimages.topics import TopicMatcher, TopicSelector
from bagimages.postprocess import ImagePostProcessor


logger = logging.getLogger(__name__)

# Called after every change to the export state, must not modify it
StateObserver = Callable[[ExportStateStore], None]

# Failures of a single frame which --skip-invalid turns into warnings
FRAME_DECODE_ERRORS = (OutOfBounds, InvalidTextEncoding, UnsupportedPixelEncoding)


class ExtractOptions(NamedTuple):
    bag_path: str
    output_dir: str
    topics: List[str]
    regex: bool = False
    # Seconds since the first message in the bag
    start: float = EXTRACT_CONFIG.DEFAULT_START
    end: Optional[float] = None
    # Maximum number of frames per topic
    number: Optional[int] = None
    step: int = EXTRACT_CONFIG.DEFAULT_STEP
    invert_channels: bool = EXTRACT_CONFIG.DEFAULT_INVERT_CHANNELS
    skip_invalid: bool = False


class ExtractionResult(NamedTuple):
    states: List[TopicState]
    mismatches: List[TopicTypeMismatch]
    unmatched: List[TopicSelector]
    stopped_early: bool
    skipped_invalid: int

    @property
    def extracted(self) -> int:
        return sum(state.extracted for state in self.states)


# Checks the options before anything is read, and describes what the export is going to do
def validate_options(options: ExtractOptions) -> List[str]:
    lines = [f"input rosbag file: {options.bag_path}", f"output dir: {options.output_dir}"]

    if not options.topics:
        raise ConfigurationError("You have not specified any topic to export. Try running `bagimages --help`")

    start, end = options.start, options.end

    if start < 0 or (end is not None and end < 0):
        raise ConfigurationError(f"Start and end times must not be negative (you specified start={start}, end={end})")

    if end is not None and end <= start:
        raise ConfigurationError(f"End time is less than start time (you specified start={start}, end={end})")

    if end is not None and start == 0:
        lines.append(f"export from bag start until the {end} sec")
    elif end is not None:
        lines.append(f"export from {start} sec until the {end} sec")
    elif start == 0:
        lines.append("export from start until the end")
    else:
        lines.append(f"export from {start} sec until the end")

    number, step = options.number, options.step

    if step < 1:
        raise ConfigurationError(f"Step value cannot be {step} (you specified --step {step} or -S{step})")

    if number is not None and number < 1:
        raise ConfigurationError(f"Number of frames to export cannot be {number} (you specified --number {number} or -n{number})")

    if number is None and step == 1:
        lines.append("export every frame")
    elif number is None:
        lines.append(f"export every {step}-th frame")
    elif number == 1:
        lines.append("export only one frame per topic")
    elif step == 1:
        lines.append(f"export {number} frames per topic")
    else:
        lines.append(f"export every {step}-th frame, {number} frames per topic")

    if options.invert_channels:
        lines.append("invert color channels (RGB8 to BGR8 and vice-versa)")

    if options.regex:
        lines.append("search topics with regex")

    if options.skip_invalid:
        lines.append("skip frames which cannot be decoded")

    return lines


class ExtractionEngine:
    """Routes bag records through the per-connection export state machine.

    A connection is tracked once its topic matches a selector and it carries the
    supported image type. Every message on a tracked connection is counted, then
    filtered by the time window, the frame limit and the step, and the frames
    that pass are decoded and saved by the post processor. Connections that hit
    the end time or the frame limit are marked done and do no further work.
    """

    def __init__(self, options: ExtractOptions, matcher: TopicMatcher,
                 post_processor: ImagePostProcessor, observer: Optional[StateObserver] = None):
        self.options = options
        self.matcher = matcher
        self.post_processor = post_processor
        self.observer = observer

        self.states = ExportStateStore()
        self.mismatches: List[TopicTypeMismatch] = []
        self.skipped_invalid = 0

        # Time of the first message in the bag, across all connections
        self.anchor_time: Optional[int] = None

    def is_finished(self) -> bool:
        literal_count = self.matcher.literal_count

        if literal_count is None:
            return False

        return self.states.all_done() and len(self.states) == literal_count

    def process(self, records: Iterable[RawRecord]) -> ExtractionResult:
        stopped_early = False

        for record in records:
            if self.is_finished():
                stopped_early = True
                break

            if isinstance(record, Connection):
                self.handle_connection(record)
            elif isinstance(record, MessageData):
                self.handle_message(record)
            else:
                raise MalformedMessage(f"Unexpected record type {type(record).__name__}")

        unmatched = self.matcher.unmatched(self.states.found_topics())

        for selector in unmatched:
            if selector.looks_like_pattern():
                logger.warning(f"No messages found in topic {selector.plain}, did you mean to search topics with --regex?")
            else:
                logger.warning(f"No messages found in topic {selector.plain}")

        return ExtractionResult(states=self.states.values(), mismatches=list(self.mismatches), unmatched=unmatched,
                                stopped_early=stopped_early, skipped_invalid=self.skipped_invalid)

    def handle_connection(self, connection: Connection):
        if not self.matcher.matches(connection.topic):
            return

        if connection.message_type != EXTRACT_CONFIG.IMAGE_MSGTYPE:
            mismatch = TopicTypeMismatch(connection.topic, connection.message_type, EXTRACT_CONFIG.IMAGE_MSGTYPE)
            logger.warning(str(mismatch))
            self.mismatches.append(mismatch)
            return

        if connection.id not in self.states:
            self.states.track(connection.id, connection.topic)
            self._notify()

    def handle_message(self, data: MessageData):
        if self.anchor_time is None:
            self.anchor_time = data.time

        # Data before its connection record, or on a connection we are not exporting
        state = self.states.get(data.conn_id)
        if state is None:
            return

        state.counter += 1

        if not state.done:
            self._export_filtered(state, data)

        self._notify()

    def _export_filtered(self, state: TopicState, data: MessageData):
        options = self.options
        elapsed = (data.time - self.anchor_time) / EXTRACT_CONFIG.NANOSECONDS_PER_SECOND

        if elapsed < options.start:
            return

        if options.end is not None and elapsed > options.end:
            state.mark_done()
            return

        if options.number is not None and state.extracted >= options.number:
            state.mark_done()
            return

        # Counter is 1-based, so the first observed frame is always a candidate
        if (state.counter - 1) % options.step != 0:
            return

        self._export_frame(state, data)

        if options.number is not None and state.extracted >= options.number:
            state.mark_done()

    def _export_frame(self, state: TopicState, data: MessageData):
        try:
            image = decode_image_message(data.payload)
            self.post_processor.save(image, state)
        except FRAME_DECODE_ERRORS as ex:
            if not self.options.skip_invalid:
                logger.error(f"Failed to export frame {state.counter} of topic {state.name}")
                raise

            self.skipped_invalid += 1
            logger.warning(f"Skipping frame {state.counter} of topic {state.name}: {ex}")
            return
        except SaveFailure:
            logger.error(f"Failed to save frame {state.counter} of topic {state.name}")
            raise

        state.extracted += 1

    def _notify(self):
        if self.observer is not None:
            self.observer(self.states)


def extract(options: ExtractOptions, observer: Optional[StateObserver] = None) -> ExtractionResult:
    for line in validate_options(options):
        logger.info(line)

    matcher = TopicMatcher(options.topics, options.regex)

    engine = ExtractionEngine(options, matcher, ImagePostProcessor(options.output_dir, options.invert_channels), observer)

    # The output directory is only created once the bag could be opened
    with open_bag(options.bag_path) as records:
        try:
            os.makedirs(options.output_dir, exist_ok=True)
        except OSError as ex:
            raise SaveFailure(options.output_dir, str(ex)) from ex

        result = engine.process(records)

    for state in result.states:
        logger.info(f"Extracted {state.extracted} frames from topic {state.name}")

    if result.skipped_invalid:
        logger.warning(f"Skipped {result.skipped_invalid} invalid frames")

    logger.info("Done")
    return result
