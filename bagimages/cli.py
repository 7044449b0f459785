import sys
import argparse
import logging

from typing import List, Optional

from bagimages import __version__
from bagimages.config import EXTRACT_CONFIG
from bagimages.errors import BagImagesError
from bagimages.extract import ExtractOptions, extract
from bagimages.renderer import ProgressRenderer


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bagimages", description="Export sensor_msgs/Image frames from a ROS1 bag file into png files.")
    parser.add_argument("path_to_bag", help="Path to the bag file.")
    parser.add_argument("output_dir", help="Path to output directory, created if it does not exist.")
    parser.add_argument("topics", nargs="*", help="The name of the topics from which you want to export images.")
    parser.add_argument("-s", "--start", type=float, default=EXTRACT_CONFIG.DEFAULT_START,
                        help="Time (in seconds) from which to start exporting.")
    parser.add_argument("-e", "--end", type=float, default=None,
                        help="Time (in seconds) until which export should continue.")
    parser.add_argument("-n", "--number", type=int, default=None,
                        help="Number of frames to be exported per topic. If it's not specified, all frames will be exported.")
    parser.add_argument("-S", "--step", type=int, default=EXTRACT_CONFIG.DEFAULT_STEP,
                        help="Step by which frames should be exported.")
    parser.add_argument("-i", "--invert-channels", action="store_true", default=EXTRACT_CONFIG.DEFAULT_INVERT_CHANNELS,
                        help="Convert RGB8 to BGR8 (for case cv_bridge mixed up color channels).")
    parser.add_argument("-r", "--regex", action="store_true", help="Treat topics as regex patterns.")
    parser.add_argument("--skip-invalid", action="store_true", help="Skip frames which cannot be decoded instead of stopping.")
    parser.add_argument("--no-progress", action="store_true", help="Do not show progress bars.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every saved frame.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


# Level number for a name like "debug" or "INFO", None for names logging does not know
def log_level(name: str) -> Optional[int]:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else None


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = log_level(EXTRACT_CONFIG.LOG_LEVEL)
    logging.basicConfig(format="%(levelname)s %(message)s",
                        level=logging.DEBUG if args.verbose else (level if level is not None else logging.INFO))

    if level is None:
        logger.warning(f"Unknown log level {EXTRACT_CONFIG.LOG_LEVEL!r}, using INFO")

    options = ExtractOptions(bag_path=args.path_to_bag, output_dir=args.output_dir, topics=args.topics,
                             regex=args.regex, start=args.start, end=args.end, number=args.number, step=args.step,
                             invert_channels=args.invert_channels, skip_invalid=args.skip_invalid)

    renderer = ProgressRenderer(disable=args.no_progress)

    try:
        extract(options, observer=renderer)
    except BagImagesError as ex:
        logger.error(str(ex))
        return 1
    finally:
        renderer.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
