"""
Tests for object store backends and path naming.
"""

import pytest

from equiprent.domain.models import AttachmentError
from equiprent.infrastructure.storage import (
    FilesystemObjectStore,
    InMemoryObjectStore,
    ObjectPathCore,
)


@pytest.fixture(params=["inmemory", "filesystem"])
def objects(request, tmp_path):
    if request.param == "inmemory":
        return InMemoryObjectStore()
    return FilesystemObjectStore(str(tmp_path / "objects"), "http://files.test/objects")


class TestObjectPathCore:
    """Pure path and URL logic."""

    def test_sanitize_filename(self):
        assert ObjectPathCore.sanitize_filename("manual v2 (final).pdf") == "manual_v2__final_.pdf"
        assert ObjectPathCore.sanitize_filename("../../etc/passwd") == "passwd"
        assert ObjectPathCore.sanitize_filename("C:\\docs\\a.pdf") == "a.pdf"

    def test_build_path_layout(self):
        path = ObjectPathCore.build_path("equipment_files", "m1", "partsCatalog", "cat.pdf", token="abc")
        assert path == "equipment_files/m1/partsCatalog_abc-cat.pdf"

    def test_paths_are_unique_per_upload(self):
        first = ObjectPathCore.build_path("equipment_images", "m1", "image", "front.jpg")
        second = ObjectPathCore.build_path("equipment_images", "m1", "image", "front.jpg")
        assert first != second

    def test_build_path_requires_entity(self):
        with pytest.raises(ValueError):
            ObjectPathCore.build_path("equipment_images", "", "image", "a.jpg")

    def test_normalize_rejects_parent_segments(self):
        assert ObjectPathCore.normalize("/a//b/./c") == "a/b/c"
        with pytest.raises(ValueError):
            ObjectPathCore.normalize("a/../b")

    def test_url_round_trip(self):
        url = ObjectPathCore.to_url("http://files.test/", "dir/a b.jpg")
        assert url == "http://files.test/dir/a%20b.jpg"
        assert ObjectPathCore.from_url("http://files.test", url) == "dir/a b.jpg"
        assert ObjectPathCore.from_url("http://other.test", url) is None


class TestObjectStores:
    """Shared behaviour of both backends."""

    def test_upload_returns_resolvable_url(self, objects):
        url = objects.upload("equipment_images/m1/image_1-a.jpg", b"jpeg", "image/jpeg")

        assert objects.exists(url)
        assert objects.path_for_url(url) == "equipment_images/m1/image_1-a.jpg"
        assert url == objects.resolve_url("equipment_images/m1/image_1-a.jpg")

    def test_delete_is_idempotent(self, objects):
        url = objects.upload("equipment_images/m1/image_1-a.jpg", b"jpeg")

        assert objects.delete(url) is True
        assert objects.delete(url) is False
        assert not objects.exists(url)

    def test_delete_of_foreign_url_raises(self, objects):
        with pytest.raises(AttachmentError):
            objects.delete("https://elsewhere.test/a.jpg")

    def test_list_objects_by_prefix(self, objects):
        objects.upload("equipment_images/m1/a.jpg", b"1")
        objects.upload("equipment_images/m2/b.jpg", b"22")
        objects.upload("vehicle_images/v1/c.jpg", b"333")

        infos = objects.list_objects("equipment_images/")
        assert [i.path for i in infos] == ["equipment_images/m1/a.jpg", "equipment_images/m2/b.jpg"]
        assert [i.size for i in infos] == [1, 2]
        assert objects.list_paths("vehicle_images/") == ["vehicle_images/v1/c.jpg"]

    def test_upload_rejects_traversal(self, objects):
        with pytest.raises(AttachmentError):
            objects.upload("../outside.txt", b"x")


class TestInMemoryObjectStore:

    def test_read_and_content_type(self):
        objects = InMemoryObjectStore()
        url = objects.upload("technician_images/t1/profile_x-me.png", b"png", "image/png")

        assert objects.read(url) == b"png"
        assert objects.content_type(url) == "image/png"
        assert len(objects) == 1


class TestFilesystemObjectStore:

    def test_writes_files_under_root(self, tmp_path):
        objects = FilesystemObjectStore(str(tmp_path))
        url = objects.upload("equipment_files/m1/partsCatalog_x-cat.pdf", b"%PDF")

        assert (tmp_path / "equipment_files/m1/partsCatalog_x-cat.pdf").read_bytes() == b"%PDF"
        assert url.startswith("file://")
        assert not list(tmp_path.rglob("*.tmp"))
