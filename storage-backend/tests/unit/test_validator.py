"""
Unit Tests: Directory Validator

Tests for candidate data root inspection.
"""

from core.storage import StorageErrorKind, validate_data_dir
from core.storage.errors import EMPTY_PATH_MESSAGE, NO_VALID_DATA_MESSAGE


def _snapshot(root):
    return sorted(str(p.relative_to(root)) for p in root.rglob("*"))


class TestValidateDataDir:
    """Test validate_data_dir()."""

    def test_empty_path(self):
        result = validate_data_dir("")

        assert result.valid is False
        assert result.error == EMPTY_PATH_MESSAGE
        assert result.error_kind == StorageErrorKind.INVALID_PATH

    def test_missing_directory(self, temp_dir):
        result = validate_data_dir(str(temp_dir / "nope"))

        assert result.valid is False
        assert result.error_kind == StorageErrorKind.DIRECTORY_NOT_FOUND

    def test_file_is_not_a_directory(self, temp_dir):
        path = temp_dir / "file.txt"
        path.write_text("x")

        result = validate_data_dir(str(path))

        assert result.valid is False
        assert result.error_kind == StorageErrorKind.DIRECTORY_NOT_FOUND

    def test_empty_directory_has_no_counts(self, temp_dir):
        result = validate_data_dir(str(temp_dir))

        assert result.valid is False
        assert result.error == NO_VALID_DATA_MESSAGE
        assert result.error_kind == StorageErrorKind.NO_VALID_DATA
        assert result.project_count is None
        assert result.media_count is None
        assert result.to_dict() == {
            "valid": False,
            "error": NO_VALID_DATA_MESSAGE,
            "errorKind": "no_valid_data",
        }

    def test_counts_flat_projects_and_media(self, make_data_root):
        root = make_data_root(
            "data",
            projects={"a.json": "{}", "b.json": "{}", "notes.txt": "x"},
            media={"1.png": b"\x89PNG", "2.png": b"\x89PNG", "clips/3.mp4": b"\x00"},
        )

        result = validate_data_dir(str(root))

        assert result.valid is True
        assert result.project_count == 2
        assert result.media_count == 3
        assert result.error is None

    def test_nested_layout_wins_when_larger(self, make_data_root):
        root = make_data_root(
            "data",
            projects={
                "a.json": "{}",
                "_p/p1/script.json": "{}",
                "_p/p2/script.json": "{}",
                "_p/p3/script.json": "{}",
                "_p/.hidden/x.json": "{}",
                "_p/_migrated.json": "{}",
            },
        )

        result = validate_data_dir(str(root))

        assert result.valid is True
        assert result.project_count == 3
        assert result.media_count == 0

    def test_media_only_is_valid(self, make_data_root):
        root = make_data_root("data", media={"1.png": b"x"})

        result = validate_data_dir(str(root))

        assert result.valid is True
        assert result.project_count == 0
        assert result.media_count == 1

    def test_empty_roots_are_not_valid(self, make_data_root):
        root = make_data_root("data", projects={}, media={})

        result = validate_data_dir(str(root))

        assert result.valid is False
        assert result.error_kind == StorageErrorKind.NO_VALID_DATA

    def test_never_mutates_filesystem(self, make_data_root):
        root = make_data_root("data", projects={"a.json": "{}"}, media={"1.png": b"x"})
        before = _snapshot(root)

        validate_data_dir(str(root))
        validate_data_dir(str(root / "missing"))

        assert _snapshot(root) == before
