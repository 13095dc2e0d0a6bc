"""Tests for Cloudinary photo hosting (F6)."""

from unittest.mock import patch

import cloudinary.exceptions
import pytest

from preprimary.config.app_config import PhotoConfig
from preprimary.core.photos import (
    UPLOAD_TRANSFORMATION,
    CloudinaryClient,
    InvalidPhotoError,
    PhotoConfigError,
    PhotoTooLargeError,
    PhotoUploadError,
    UnsupportedPhotoTypeError,
    validate_upload,
)

ACCOUNT = {"cloud_name": "demo", "api_key": "key-123", "api_secret": "secret-xyz"}


@pytest.fixture
def photo_client():
    return CloudinaryClient("demo", "key-123", "secret-xyz", folder="students")


class TestValidateUpload:
    @pytest.fixture
    def config(self):
        return PhotoConfig(max_bytes=100)

    def test_accepts_allowed_image(self, config):
        validate_upload("image/png", 100, config)

    @pytest.mark.parametrize("content_type", [None, "", "application/pdf", "image/svg+xml"])
    def test_rejects_type(self, config, content_type):
        with pytest.raises(UnsupportedPhotoTypeError):
            validate_upload(content_type, 10, config)

    def test_rejects_large(self, config):
        with pytest.raises(PhotoTooLargeError, match="limit is 100 bytes"):
            validate_upload("image/jpeg", 101, config)

    def test_rejects_empty(self, config):
        with pytest.raises(InvalidPhotoError, match="empty"):
            validate_upload("image/jpeg", 0, config)


class TestCloudinaryClient:
    def test_from_config_requires_credentials(self, isolated_env):
        with pytest.raises(PhotoConfigError):
            CloudinaryClient.from_config()

    def test_from_config(self, isolated_env, monkeypatch):
        monkeypatch.setenv("CLOUDINARY_CLOUD_NAME", "demo")
        monkeypatch.setenv("CLOUDINARY_API_KEY", "key")
        monkeypatch.setenv("CLOUDINARY_API_SECRET", "secret")
        client = CloudinaryClient.from_config()
        assert client.cloud_name == "demo"
        assert client.folder == "students"

    def test_upload(self, photo_client):
        with patch("cloudinary.uploader.upload") as upload:
            upload.return_value = {
                "secure_url": "https://res.cloudinary.com/demo/image/upload/students/abc.png",
                "public_id": "students/abc",
                "width": 200,
                "height": 200,
            }
            photo = photo_client.upload(b"\x89PNG data", content_type="image/png", filename="ram.png")

        stream = upload.call_args.args[0]
        assert stream.getvalue() == b"\x89PNG data"
        kwargs = upload.call_args.kwargs
        assert kwargs["folder"] == "students"
        assert kwargs["transformation"] == UPLOAD_TRANSFORMATION
        assert kwargs["filename"] == "ram.png"
        assert {key: kwargs[key] for key in ACCOUNT} == ACCOUNT
        assert photo.public_id == "students/abc"
        assert photo.url.endswith("abc.png")
        assert photo.width == 200

    def test_destroy(self, photo_client):
        with patch("cloudinary.uploader.destroy", return_value={"result": "ok"}) as destroy:
            assert photo_client.destroy("students/abc") is True

        destroy.assert_called_once_with("students/abc", **ACCOUNT)

    def test_destroy_not_found(self, photo_client):
        with patch("cloudinary.uploader.destroy", return_value={"result": "not found"}):
            assert photo_client.destroy("students/missing") is False

    def test_upload_error(self, photo_client):
        error = cloudinary.exceptions.AuthorizationRequired("Invalid Signature")
        with patch("cloudinary.uploader.upload", side_effect=error):
            with pytest.raises(PhotoUploadError, match="Invalid Signature"):
                photo_client.upload(b"data")

    def test_destroy_error(self, photo_client):
        error = cloudinary.exceptions.Error("Unexpected error - no route to host")
        with patch("cloudinary.uploader.destroy", side_effect=error):
            with pytest.raises(PhotoUploadError, match="destroy failed"):
                photo_client.destroy("students/abc")
