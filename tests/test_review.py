"""Tests for staging duplicate groups for review."""

from image_optimizer.core.clusterer import DuplicateGroup
from image_optimizer.core.review import DuplicateReviewStager


def test_stage_copies_originals(tmp_path):
    """Test that group members are copied and originals kept."""
    (tmp_path / "images").mkdir()
    (tmp_path / "images" / "a.jpg").write_bytes(b"a")
    (tmp_path / "images" / "b.jpg").write_bytes(b"b")
    group = DuplicateGroup("dup-1", "0" * 16, ["images/a.jpg", "images/b.jpg"])
    stager = DuplicateReviewStager(tmp_path / "duplicates", tmp_path)

    failures = stager.stage([group])

    assert failures == 0
    assert (tmp_path / "duplicates" / "dup-1" / "a.jpg").read_bytes() == b"a"
    assert (tmp_path / "duplicates" / "dup-1" / "b.jpg").read_bytes() == b"b"
    assert (tmp_path / "images" / "a.jpg").exists()


def test_stage_skips_singletons(tmp_path):
    """Test that single-member groups are not staged."""
    (tmp_path / "a.jpg").write_bytes(b"a")
    stager = DuplicateReviewStager(tmp_path / "duplicates", tmp_path)

    stager.stage([DuplicateGroup("dup-1", "0" * 16, ["a.jpg"])])

    assert not (tmp_path / "duplicates" / "dup-1").exists()


def test_stage_renames_conflicting_names(tmp_path):
    """Test that members sharing a basename get numbered copies."""
    for folder in ("x", "y", "z"):
        (tmp_path / folder).mkdir()
        (tmp_path / folder / "photo.jpg").write_bytes(folder.encode())
    group = DuplicateGroup("dup-1", "0" * 16, ["x/photo.jpg", "y/photo.jpg", "z/photo.jpg"])

    DuplicateReviewStager(tmp_path / "duplicates", tmp_path).stage([group])

    group_dir = tmp_path / "duplicates" / "dup-1"
    assert (group_dir / "photo.jpg").read_bytes() == b"x"
    assert (group_dir / "photo_1.jpg").read_bytes() == b"y"
    assert (group_dir / "photo_2.jpg").read_bytes() == b"z"


def test_stage_missing_file_counted(tmp_path):
    """Test that copy failures are counted without aborting."""
    (tmp_path / "a.jpg").write_bytes(b"a")
    group = DuplicateGroup("dup-1", "0" * 16, ["a.jpg", "gone.jpg"])

    failures = DuplicateReviewStager(tmp_path / "duplicates", tmp_path).stage([group])

    assert failures == 1
    assert (tmp_path / "duplicates" / "dup-1" / "a.jpg").exists()
