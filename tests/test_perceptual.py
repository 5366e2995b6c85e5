import pytest
from PIL import Image

from creative_intel.features.perceptual import compute_phash, hash_similarity, visual_consistency

from conftest import striped_image


def test_identical_images_are_fully_consistent():
    h = compute_phash(striped_image(20, 80))

    assert len(h) == 16
    assert hash_similarity(h, "0x" + h.upper()) == 1.0
    assert visual_consistency([h, h, h]) == 1.0


def test_different_layouts_lower_consistency():
    top = compute_phash(striped_image(0, 100))
    bottom = compute_phash(striped_image(200, 299))

    assert visual_consistency([top, bottom]) < 1.0


def test_consistency_edge_cases():
    assert visual_consistency([]) == 0.0
    assert visual_consistency(["", None]) == 0.0
    assert visual_consistency(["ffffffffffffffff"]) == 1.0
    assert hash_similarity("0000000000000000", "ffffffffffffffff") == 0.0


def test_invalid_hash_rejected():
    with pytest.raises(ValueError):
        hash_similarity("zz", "ffffffffffffffff")


def test_phash_requires_pillow_image():
    with pytest.raises(TypeError):
        compute_phash(Image.new("RGBA", (8, 8)).tobytes())
