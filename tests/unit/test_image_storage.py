"""Unit tests for player image storage.

These tests avoid real AWS calls by injecting a fake boto3 client.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

import pytest

from teamsite.config import Settings
from teamsite.services.image_storage import ImageStorage, safe_filename


@dataclass
class _FakeS3:
    objects: dict[str, bytes] = field(default_factory=dict)
    last_put: dict[str, Any] | None = None
    deleted: list[str] = field(default_factory=list)

    def put_object(self, **kwargs: Any) -> None:
        self.last_put = kwargs
        self.objects[kwargs["Key"]] = kwargs["Body"]

    def list_objects_v2(self, *, Bucket: str, Prefix: str) -> dict[str, Any]:
        keys = [key for key in self.objects if key.startswith(Prefix)]
        return {"Contents": [{"Key": key} for key in keys]} if keys else {}

    def delete_objects(self, *, Bucket: str, Delete: dict[str, Any]) -> None:
        for item in Delete["Objects"]:
            self.deleted.append(item["Key"])
            self.objects.pop(item["Key"], None)


def _settings(tmp_path, **overrides: Any) -> Settings:
    values: dict[str, Any] = {"uploads_dir": str(tmp_path), "image_storage_local": True}
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[call-arg]


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("photo.PNG", "photo.png"),
        ("../../etc/passwd.jpg", "passwd.jpg"),
        ("C:\\Users\\me\\My Photo.jpeg", "my-photo.jpeg"),
        ("...", "image"),
    ],
)
def test_safe_filename(filename: str, expected: str) -> None:
    assert safe_filename(filename) == expected


class TestLocalStorage:
    def test_save_writes_under_player_prefix(self, tmp_path) -> None:
        storage = ImageStorage(_settings(tmp_path))

        path = storage.save("player_1", "Head Shot.png", b"\x89PNG", "image/png")

        assert path == "/uploads/images/player_1/head-shot.png"
        with open(os.path.join(tmp_path, "images", "player_1", "head-shot.png"), "rb") as f:
            assert f.read() == b"\x89PNG"

    def test_delete_player_images_removes_directory(self, tmp_path) -> None:
        storage = ImageStorage(_settings(tmp_path))
        storage.save("player_1", "a.png", b"a")
        storage.save("player_1", "b.png", b"b")
        storage.save("player_2", "c.png", b"c")

        assert storage.delete_player_images("player_1") == 2
        assert not os.path.exists(os.path.join(tmp_path, "images", "player_1"))
        assert os.path.exists(os.path.join(tmp_path, "images", "player_2", "c.png"))

    def test_delete_without_images_is_a_no_op(self, tmp_path) -> None:
        storage = ImageStorage(_settings(tmp_path))
        assert storage.delete_player_images("player_9") == 0


class TestS3Storage:
    def test_save_puts_object_and_returns_public_url(self, tmp_path) -> None:
        storage = ImageStorage(
            _settings(
                tmp_path,
                image_storage_local=False,
                s3_bucket_name="roster-images",
                s3_public_url_base="https://cdn.example.com/img/",
            )
        )
        fake = _FakeS3()
        storage._client = fake

        url = storage.save("player_1", "photo.jpg", b"jpg", "image/jpeg")

        assert url == "https://cdn.example.com/img/images/player_1/photo.jpg"
        assert fake.last_put is not None
        assert fake.last_put["Bucket"] == "roster-images"
        assert fake.last_put["ContentType"] == "image/jpeg"

    def test_default_url_uses_bucket_and_region(self, tmp_path) -> None:
        storage = ImageStorage(
            _settings(tmp_path, image_storage_local=False, s3_bucket_name="b", s3_region="eu-west-1")
        )
        assert storage.get_public_url("images/p/x.png") == (
            "https://b.s3.eu-west-1.amazonaws.com/images/p/x.png"
        )

    def test_delete_player_images_removes_prefix(self, tmp_path) -> None:
        storage = ImageStorage(
            _settings(tmp_path, image_storage_local=False, s3_bucket_name="roster-images")
        )
        fake = _FakeS3()
        storage._client = fake
        storage.save("player_1", "a.png", b"a")
        storage.save("player_12", "b.png", b"b")

        assert storage.delete_player_images("player_1") == 1
        assert fake.deleted == ["images/player_1/a.png"]
        assert "images/player_12/b.png" in fake.objects

    def test_missing_bucket_is_a_configuration_error(self, tmp_path) -> None:
        storage = ImageStorage(_settings(tmp_path, image_storage_local=False))
        with pytest.raises(ValueError):
            storage.save("player_1", "a.png", b"a")


@pytest.mark.parametrize("player_id", ["../outside", "a/b", "..", ""])
def test_unsafe_player_ids_never_reach_the_filesystem(tmp_path, player_id: str) -> None:
    uploads = tmp_path / "uploads"
    storage = ImageStorage(_settings(uploads))

    with pytest.raises(ValueError):
        storage.save(player_id, "x.png", b"x")
    with pytest.raises(ValueError):
        storage.delete_player_images(player_id)

    assert not any(p.name == "x.png" for p in tmp_path.rglob("*"))


def test_local_path_stays_under_uploads_root(tmp_path) -> None:
    storage = ImageStorage(_settings(tmp_path / "uploads"))
    with pytest.raises(ValueError):
        storage._local_path("images/../../escaped/x.png")
