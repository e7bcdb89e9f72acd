"""Tests for the box blur, region discovery and image redaction."""
import numpy as np
import pytest
from PIL import Image

from redactkit.errors import BoundsError, Cancelled
from redactkit.image.blur import blur_region, box_blur
from redactkit.image.redactor import iter_images, load_image, redact_image, save_image
from redactkit.image.regions import AadhaarQrRegion, find_regions, is_label, is_value
from redactkit.pipeline.context import CancelToken, RecognizedWord, Rect

def W(text, left, top, right, bottom, conf=0.9):
    return RecognizedWord(text=text, confidence=conf, box=Rect(left, top, right, bottom))

class TestBoxBlur:

    def test_zero_radius_is_identity(self, checker_image):
        px = np.asarray(checker_image)
        assert np.array_equal(box_blur(px, 0), px)

    def test_uniform_image_unchanged(self):
        px = np.full((10, 12, 3), 77, dtype=np.uint8)
        assert np.array_equal(box_blur(px, 4), px)

    def test_single_column_spreads_evenly(self):
        px = np.zeros((5, 5), dtype=np.uint8)
        px[:, 2] = 255
        out = box_blur(px, 1)
        assert out.shape == (5, 5)
        assert (out[:, 1:4] == 85).all()
        assert (out[:, 0] == 0).all() and (out[:, 4] == 0).all()

    def test_smooths_checkerboard(self, checker_image):
        px = np.asarray(checker_image)
        out = box_blur(px, 3)
        assert out.dtype == np.uint8 and out.shape == px.shape
        assert out.std() < px.std()

    def test_radius_larger_than_image(self):
        px = np.arange(12, dtype=np.uint8).reshape(3, 4)
        out = box_blur(px, 50)
        assert out.shape == (3, 4)

    def test_rejects_negative_radius(self):
        with pytest.raises(ValueError):
            box_blur(np.zeros((2, 2), dtype=np.uint8), -1)

    def test_cancel(self, checker_image):
        token = CancelToken()
        token.cancel()
        with pytest.raises(Cancelled):
            box_blur(np.asarray(checker_image), 2, token)

class TestBlurRegion:

    def test_only_inside_rect_changes(self, checker_image):
        before = np.asarray(checker_image).copy()
        img = checker_image.copy()
        used = blur_region(img, Rect(8, 8, 24, 24), 3)
        after = np.asarray(img)
        assert used == Rect(8, 8, 24, 24)
        mask = np.zeros(before.shape[:2], dtype=bool)
        mask[8:24, 8:24] = True
        assert np.array_equal(after[~mask], before[~mask])
        assert not np.array_equal(after[mask], before[mask])

    def test_zero_radius_region_is_noop(self, checker_image):
        img = checker_image.copy()
        blur_region(img, Rect(0, 0, 30, 30), 0)
        assert np.array_equal(np.asarray(img), np.asarray(checker_image))

    def test_clamps_to_bounds(self, checker_image):
        img = checker_image.copy()
        assert blur_region(img, Rect(-10, -10, 10, 10), 2) == Rect(0, 0, 10, 10)
        assert blur_region(img, Rect(100, 100, 200, 200), 2) == Rect(63, 47, 64, 48)

    def test_alpha_preserved(self, checker_image):
        img = checker_image.convert("RGBA")
        img.putalpha(128)
        blur_region(img, Rect(0, 0, 20, 20), 3)
        assert (np.asarray(img)[:, :, 3] == 128).all()

    def test_empty_image(self):
        with pytest.raises(BoundsError):
            blur_region(Image.new("RGB", (0, 0)), Rect(0, 0, 1, 1), 2)

class TestRegionPatterns:

    @pytest.mark.parametrize("text", ["9876543210", "ravi@example.com", "ABCPE1234F", "1234 5678 9012", "12/05/1990", "*****"])
    def test_values(self, text):
        assert is_value(text)

    @pytest.mark.parametrize("text", ["hello", "Name:", "DOB"])
    def test_not_values(self, text):
        assert not is_value(text)

    def test_labels(self):
        assert is_label("Name:")
        assert is_label("date of birth")
        assert not is_label("Ravi")

class TestFindRegions:

    def test_label_adjacency_takes_two_words_for_names(self):
        words = [
            W("Name:", 10, 10, 60, 30),
            W("Ravi", 70, 10, 110, 30),
            W("Kumar", 115, 10, 165, 30),
            W("Pune", 170, 10, 210, 30),
        ]
        assert find_regions(words, (300, 100), rules=[]) == [Rect(70, 10, 110, 30), Rect(115, 10, 165, 30)]

    def test_next_line_is_not_adjacent(self):
        words = [W("Name:", 10, 10, 60, 30), W("Ravi", 10, 60, 50, 80)]
        assert find_regions(words, (300, 100), rules=[]) == []

    def test_far_right_is_not_adjacent(self):
        words = [W("Tel", 10, 10, 40, 30), W("home", 200, 10, 240, 30)]
        assert find_regions(words, (300, 100), rules=[]) == []

    def test_stop_words_and_labels_skipped(self):
        words = [W("Name", 10, 10, 60, 30), W("of", 65, 10, 80, 30), W("Email", 85, 10, 130, 30)]
        assert find_regions(words, (300, 100), rules=[]) == []

    def test_value_and_adjacent_word_deduplicated(self):
        words = [W("DOB", 10, 10, 50, 30), W("12/05/1990", 60, 10, 140, 30)]
        assert find_regions(words, (300, 100), rules=[]) == [Rect(60, 10, 140, 30)]

    def test_aadhaar_qr_rule(self):
        words = [W("आधार", 10, 10, 60, 30)]
        assert find_regions(words, (200, 200)) == [Rect(130, 120, 200, 200)]

    def test_aadhaar_qr_rule_needs_room(self):
        assert AadhaarQrRegion().regions([W("Aadhaar", 0, 0, 5, 5)], 100, 100) == []

    def test_rule_ignored_without_trigger(self):
        assert AadhaarQrRegion().regions([W("Passport", 0, 0, 5, 5)], 400, 400) == []

class TestRedactImage:

    def test_works_on_copy(self, checker_image):
        original = np.asarray(checker_image).copy()
        out = redact_image([W("9876543210", 5, 5, 40, 20)], checker_image, radius=3)
        assert out.regions == [Rect(5, 5, 40, 20)]
        assert np.array_equal(np.asarray(checker_image), original)
        assert not np.array_equal(np.asarray(out.image), original)

    def test_regions_clamped_and_deduplicated(self, checker_image):
        words = [W("9876543210", 50, 40, 500, 500), W("1234 5678 9012", 60, 45, 900, 900)]
        out = redact_image(words, checker_image, radius=2)
        assert out.regions == [Rect(50, 40, 64, 48), Rect(60, 45, 64, 48)]

    def test_palette_image_converted(self, checker_image):
        out = redact_image([], checker_image.convert("P"), radius=2)
        assert out.image.mode == "RGB"
        assert out.regions == []

class TestImageFiles:

    def test_save_and_load(self, checker_image, tmp_path):
        p = tmp_path / "sub" / "img.png"
        save_image(checker_image, str(p))
        assert np.array_equal(np.asarray(load_image(str(p))), np.asarray(checker_image))

    def test_jpeg_drops_alpha(self, checker_image, tmp_path):
        p = tmp_path / "img.jpg"
        save_image(checker_image.convert("RGBA"), str(p))
        assert load_image(str(p)).mode == "RGB"

    def test_iter_images(self, tmp_path):
        (tmp_path / "b").mkdir()
        for name in ("a.PNG", "b/c.jpg", "notes.txt", "b/d.tiff"):
            (tmp_path / name).write_bytes(b"")
        found = [p[len(str(tmp_path)) + 1:].replace("\\", "/") for p in iter_images(str(tmp_path))]
        assert found == ["a.PNG", "b/c.jpg", "b/d.tiff"]
