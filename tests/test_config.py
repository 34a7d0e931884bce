import pytest
from pydantic import ValidationError
from s3filemanager.models.config import S3Config, DEFAULT_MAX_FILE_SIZE


class TestS3Config:
    """Test suite for S3Config."""

    def test_defaults(self):
        config = S3Config(bucket="files")
        assert config.region == "us-east-1"
        assert config.public_url is None
        assert config.thumbnail_folder == "thumbnails"
        assert config.preview_extensions == [".pdf"]
        assert config.max_file_size == DEFAULT_MAX_FILE_SIZE

    def test_bucket_is_required(self):
        with pytest.raises(ValidationError):
            S3Config()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("S3_BUCKET", "files")
        monkeypatch.setenv("S3_ENDPOINT_URL", "http://localhost:9000")
        monkeypatch.setenv("S3_PUBLIC_URL", "http://localhost:9000/files")
        monkeypatch.setenv("S3_THUMBNAIL_FOLDER", "previews")
        monkeypatch.delenv("S3_REGION", raising=False)

        config = S3Config.from_env()

        assert config.bucket == "files"
        assert config.endpoint_url == "http://localhost:9000"
        assert config.public_url == "http://localhost:9000/files"
        assert config.thumbnail_folder == "previews"
        assert config.region == "us-east-1"

    def test_thumbnail_key(self):
        config = S3Config(bucket="files", thumbnail_folder="/thumbnails/")
        assert config.thumbnail_key("a/new.pdf") == "thumbnails/a/new.pdf"

    def test_has_preview(self):
        config = S3Config(bucket="files")
        assert config.has_preview("a/doc.pdf") is True
        assert config.has_preview("a/DOC.PDF") is True
        assert config.has_preview("a/doc.txt") is False
        assert config.has_preview("a/pdf") is False
