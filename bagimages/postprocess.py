import os
import logging
import tempfile

import png
import numpy as np

from bagimages.config import EXTRACT_CONFIG
from bagimages.errors import UnsupportedPixelEncoding, SaveFailure
from bagimages.sensor_msgs import Image
from bagimages.state import TopicState


logger = logging.getLogger(__name__)


# os.umask can only be read by setting it, the extraction runs single threaded
def current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


class ImagePostProcessor:
    output_dir: str
    invert_channels: bool

    def __init__(self, output_dir: str, invert_channels: bool = EXTRACT_CONFIG.DEFAULT_INVERT_CHANNELS):
        self.output_dir = output_dir
        self.invert_channels = invert_channels

    def output_path(self, state: TopicState) -> str:
        return os.path.join(self.output_dir, f"{state.resource_name}_{state.extracted + 1}{EXTRACT_CONFIG.OUTPUT_EXTENSION}")

    def build_pixels(self, image: Image) -> np.ndarray:
        channels = EXTRACT_CONFIG.IMAGE_CHANNELS

        # A png needs at least one pixel
        if image.width == 0 or image.height == 0 or len(image.data) != image.width * image.height * channels:
            raise UnsupportedPixelEncoding(image.encoding, image.width, image.height, len(image.data), image.channels)

        # Copy, because the message payload is read-only and we may need to swap channels
        pixels = np.frombuffer(image.data, dtype=np.uint8).reshape((image.height, image.width, channels)).copy()

        # Some producers (ex. cv_bridge) mix up rgb8 and bgr8, so swap the first and third channel
        if self.invert_channels:
            pixels[:, :, [0, 2]] = pixels[:, :, [2, 0]]

        return pixels

    def save(self, image: Image, state: TopicState) -> str:
        pixels = self.build_pixels(image)
        path = self.output_path(state)

        self.write_png(pixels, path)
        logger.debug(f"Saved frame {state.extracted + 1} of {state.name} to {path}")

        return path

    # Writes to a temporary file next to the destination and renames it into place,
    # so an interrupted run never leaves a partially written png behind
    def write_png(self, pixels: np.ndarray, path: str):
        height, width, channels = pixels.shape
        tmp_path = None
        written = False

        try:
            p = png.from_array(pixels.reshape((height, width * channels)), "RGB",
                               info={"bitdepth": EXTRACT_CONFIG.IMAGE_BITDEPTH})

            with tempfile.NamedTemporaryFile("wb", dir=os.path.dirname(path) or ".",
                                             prefix=".", suffix=".part", delete=False) as f:
                tmp_path = f.name
                p.write(f)

            # NamedTemporaryFile is always created owner-only, give the png the usual permissions
            os.chmod(tmp_path, 0o666 & ~current_umask())
            os.replace(tmp_path, path)
            written = True
        except (OSError, png.Error, ValueError) as ex:
            raise SaveFailure(path, str(ex)) from ex
        finally:
            if not written and tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
