import os
import tempfile
import unittest

from PIL import Image as PILImage

from bagimages.errors import ConfigurationError, SourceOpenFailure
from bagimages.extract import ExtractOptions, extract, validate_options
from bagimages.tests.utils import artificial_bagfile, image_payload


class ValidateOptionsTest(unittest.TestCase):
    def options(self, **kwargs) -> ExtractOptions:
        values = dict(bag_path="in.bag", output_dir="out", topics=["/cam/image"])
        values.update(kwargs)
        return ExtractOptions(**values)

    def test_defaults(self):
        lines = validate_options(self.options())
        self.assertEqual(lines, ["input rosbag file: in.bag", "output dir: out",
                                 "export from start until the end", "export every frame"])

    def test_descriptions(self):
        self.assertIn("export from bag start until the 3.5 sec", validate_options(self.options(end=3.5)))
        self.assertIn("export from 1.0 sec until the 3.5 sec", validate_options(self.options(start=1.0, end=3.5)))
        self.assertIn("export from 2.0 sec until the end", validate_options(self.options(start=2.0)))
        self.assertIn("export every 3-th frame", validate_options(self.options(step=3)))
        self.assertIn("export only one frame per topic", validate_options(self.options(number=1)))
        self.assertIn("export 5 frames per topic", validate_options(self.options(number=5)))
        self.assertIn("export every 3-th frame, 5 frames per topic", validate_options(self.options(number=5, step=3)))
        self.assertIn("search topics with regex", validate_options(self.options(regex=True)))
        self.assertIn("invert color channels (RGB8 to BGR8 and vice-versa)", validate_options(self.options(invert_channels=True)))

    def test_invalid(self):
        invalid = [
            dict(topics=[]),
            dict(start=-1.0),
            dict(end=-2.0),
            dict(start=3.0, end=3.0),
            dict(start=3.0, end=1.0),
            dict(step=0),
            dict(number=0),
        ]

        for kwargs in invalid:
            with self.subTest(**kwargs):
                with self.assertRaises(ConfigurationError):
                    validate_options(self.options(**kwargs))


class ExtractTest(unittest.TestCase):
    def setUp(self) -> None:
        self.td = tempfile.TemporaryDirectory()
        self.addCleanup(lambda: self.td.cleanup())
        self.output_dir = os.path.join(self.td.name, "frames")

    def test_extract_bagfile(self):
        with artificial_bagfile(topics=("/cam/image", "/depth/points"), count=4,
                                payload=image_payload((10, 20, 30), width=3, height=2)) as path:
            result = extract(ExtractOptions(bag_path=path, output_dir=self.output_dir, topics=["/cam/image"], step=2))

        self.assertEqual(result.extracted, 2)
        self.assertEqual(sorted(os.listdir(self.output_dir)), ["cam_image_1.png", "cam_image_2.png"])

        with PILImage.open(os.path.join(self.output_dir, "cam_image_2.png")) as png_image:
            self.assertEqual(png_image.size, (3, 2))
            self.assertEqual(png_image.getpixel((0, 0)), (10, 20, 30))

    def test_extract_inverted(self):
        with artificial_bagfile(count=1, payload=image_payload((10, 20, 30))) as path:
            extract(ExtractOptions(bag_path=path, output_dir=self.output_dir, topics=["/cam/image"], invert_channels=True))

        with PILImage.open(os.path.join(self.output_dir, "cam_image_1.png")) as png_image:
            self.assertEqual(png_image.getpixel((0, 0)), (30, 20, 10))

    def test_extract_regex(self):
        with artificial_bagfile(topics=("/left/image", "/right/image", "/imu"), count=2) as path:
            result = extract(ExtractOptions(bag_path=path, output_dir=self.output_dir, topics=["image$", "/imu"], regex=True))

        self.assertEqual(sorted(s.name for s in result.states), ["/imu", "/left/image", "/right/image"])

    def test_configuration_error_writes_nothing(self):
        with self.assertRaises(ConfigurationError):
            extract(ExtractOptions(bag_path="missing.bag", output_dir=self.output_dir, topics=["/cam/image"], step=0))

        with self.assertRaises(ConfigurationError):
            extract(ExtractOptions(bag_path="missing.bag", output_dir=self.output_dir, topics=["(("], regex=True))

        self.assertFalse(os.path.exists(self.output_dir))

    def test_source_open_failure(self):
        with self.assertRaises(SourceOpenFailure):
            extract(ExtractOptions(bag_path=os.path.join(self.td.name, "missing.bag"), output_dir=self.output_dir,
                                   topics=["/cam/image"]))

        # Nothing is created when the bag cannot be read
        self.assertFalse(os.path.exists(self.output_dir))


if __name__ == '__main__':
    unittest.main()
