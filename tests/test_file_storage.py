import asyncio
import re
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from app.errors import StorageError, ValidationError
from app.services.file_storage import (
    delete_upload,
    get_absolute_path,
    save_upload,
    unique_filename,
    validate_upload,
    write_upload,
)


def _upload(filename="bg.png", content_type="image/png"):
    upload = MagicMock()
    upload.filename = filename
    upload.content_type = content_type
    return upload


class TestUniqueFilename:
    def test_keeps_lowercased_extension(self):
        assert re.fullmatch(r"\d{13}-\d+\.zip", unique_filename("Site.ZIP"))

    def test_no_extension(self):
        assert re.fullmatch(r"\d{13}-\d+", unique_filename(None))


class TestValidateUpload:
    @pytest.mark.parametrize("purpose, content_type", [
        ("logo", "image/png"),
        ("background", "image/jpeg"),
        ("background", "image/webp"),
        ("template", "application/zip"),
        ("template", "application/x-zip-compressed"),
    ])
    def test_accepts_allowed_types(self, purpose, content_type):
        validate_upload(purpose, _upload(content_type=content_type), b"data")

    @pytest.mark.parametrize("purpose, content_type", [
        ("logo", "application/zip"),
        ("background", "image/svg+xml"),
        ("template", "image/png"),
        ("template", None),
    ])
    def test_rejects_other_types(self, purpose, content_type):
        with pytest.raises(ValidationError):
            validate_upload(purpose, _upload(content_type=content_type), b"data")

    def test_rejects_oversized_file(self):
        with patch("app.services.file_storage.settings") as mock_settings:
            mock_settings.max_upload_size_bytes = 4
            mock_settings.max_upload_size_mb = 0

            with pytest.raises(ValidationError) as exc_info:
                validate_upload("logo", _upload(), b"12345")

        assert "exceeds" in exc_info.value.message

    def test_unknown_purpose(self):
        with pytest.raises(ValueError):
            validate_upload("avatar", _upload(), b"data")


class TestWriteUpload:
    def test_writes_under_purpose_directory(self, tmp_path):
        with patch("app.services.file_storage.settings") as mock_settings:
            mock_settings.upload_base_dir = tmp_path

            relative_path = write_upload("background", "hero.PNG", b"PNG data")

        assert relative_path.startswith("backgrounds/")
        assert relative_path.endswith(".png")
        assert (tmp_path / relative_path).read_bytes() == b"PNG data"

    def test_names_never_collide(self, tmp_path):
        with patch("app.services.file_storage.settings") as mock_settings:
            mock_settings.upload_base_dir = tmp_path

            paths = {write_upload("template", "site.zip", b"x") for _ in range(20)}

        assert len(paths) == 20

    def test_disk_error_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with patch("app.services.file_storage.settings") as mock_settings:
            mock_settings.upload_base_dir = blocker

            with pytest.raises(StorageError):
                write_upload("logo", "logo.png", b"data")


class TestSaveUpload:
    def test_reads_validates_and_writes(self, tmp_path):
        upload = _upload()
        upload.read = AsyncMock(return_value=b"\x89PNG")

        with patch("app.services.file_storage.settings") as mock_settings:
            mock_settings.upload_base_dir = tmp_path
            mock_settings.max_upload_size_bytes = 1024

            relative_path = asyncio.run(save_upload("logo", upload))

        assert relative_path.startswith("logos/")
        assert (tmp_path / relative_path).read_bytes() == b"\x89PNG"


class TestGetAbsolutePath:
    def test_resolves_relative_path(self, tmp_path):
        with patch("app.services.file_storage.settings") as mock_settings:
            mock_settings.upload_base_dir = tmp_path

            result = get_absolute_path("templates/1-2.zip")

        assert result == tmp_path / "templates" / "1-2.zip"


class TestDeleteUpload:
    def test_removes_stored_file(self, tmp_path):
        (tmp_path / "logos").mkdir()
        (tmp_path / "logos" / "1-2.png").write_bytes(b"PNG")

        with patch("app.services.file_storage.settings") as mock_settings:
            mock_settings.upload_base_dir = tmp_path

            delete_upload("logos/1-2.png")

        assert not (tmp_path / "logos" / "1-2.png").exists()

    def test_missing_file_is_ignored(self, tmp_path):
        with patch("app.services.file_storage.settings") as mock_settings:
            mock_settings.upload_base_dir = tmp_path

            delete_upload("logos/never-written.png")
