import base64
import tempfile
import unittest
from pathlib import Path

from doodlesolve.llm.images import ImageReference, InvalidImageReference


class ImageReferenceTestCase(unittest.TestCase):
    def test_parses_data_url(self) -> None:
        image = ImageReference.from_data_url("data:image/png;base64,aGVsbG8=")
        self.assertEqual(image.media_type, "image/png")
        self.assertEqual(image.data_url, "data:image/png;base64,aGVsbG8=")

    def test_rejects_plain_url(self) -> None:
        with self.assertRaises(InvalidImageReference):
            ImageReference.from_data_url("https://example.com/drawing.png")

    def test_rejects_non_image_media_type(self) -> None:
        with self.assertRaises(InvalidImageReference):
            ImageReference.from_data_url("data:text/plain;base64,aGVsbG8=")

    def test_rejects_invalid_base64(self) -> None:
        with self.assertRaises(InvalidImageReference):
            ImageReference.from_data_url("data:image/png;base64,@@not-base64@@")

    def test_from_base64_adds_media_type(self) -> None:
        image = ImageReference.from_base64("aGVsbG8=", media_type="image/jpeg")
        self.assertTrue(image.data_url.startswith("data:image/jpeg;base64,"))

    def test_from_local_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            image_path = Path(tmpdir) / "drawing.png"
            image_path.write_bytes(b"fake-image")
            image = ImageReference.from_path(str(image_path), max_bytes=1024)
        self.assertEqual(image.data_url, "data:image/png;base64," + base64.b64encode(b"fake-image").decode("ascii"))

    def test_from_path_rejects_large_or_missing_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            image_path = Path(tmpdir) / "drawing.png"
            image_path.write_bytes(b"x" * 64)
            with self.assertRaises(InvalidImageReference):
                ImageReference.from_path(str(image_path), max_bytes=10)
            with self.assertRaises(InvalidImageReference):
                ImageReference.from_path(str(Path(tmpdir) / "missing.png"))

    def test_repr_hides_payload(self) -> None:
        image = ImageReference.from_data_url("data:image/png;base64,aGVsbG8=")
        self.assertNotIn("aGVsbG8", repr(image))


if __name__ == "__main__":
    unittest.main()
