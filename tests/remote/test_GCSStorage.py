"""
Tests for the GCS version store using an in-memory bucket that enforces
generation preconditions.
"""

import json

import pytest
from google.api_core import exceptions as gcs_exceptions

from semverstore.driver import (
    InvalidConfigurationError,
    StorageUnavailableError,
    VersionDriver,
)
from semverstore.model import Source
from semverstore.remote.GCSStorage import GCSVersionStore, client_factory
from semverstore.versioning import PatchBump, PreBump, Version
from tests.fakes import FakeBucket, FakeGCSClient, RacingStore


@pytest.fixture
def bucket():
    return FakeBucket("versions")


@pytest.fixture
def client(bucket):
    return FakeGCSClient(bucket)


@pytest.fixture
def store(client):
    return GCSVersionStore(lambda: client, "versions", "app/version")


@pytest.mark.short
class TestGCSVersionStore:
    def test_describe(self, store):
        assert store.describe() == "gs://versions/app/version"

    def test_client_is_created_lazily(self, client, store):
        assert client.requested == []
        store.read()
        store.read()
        assert client.requested == ["versions"]

    def test_read_missing_object(self, store):
        assert store.read() == (None, None)

    def test_read_returns_text_and_generation(self, bucket, store):
        bucket.seed("app/version", "3.1.4\n")

        assert store.read() == ("3.1.4", str(bucket.objects["app/version"][1]))

    def test_first_write_uses_generation_zero(self, bucket, store):
        assert store.write_if("1.0.0", None) is True
        assert bucket.uploads[-1]["if_generation_match"] == 0
        assert bucket.uploads[-1]["content_type"] == "text/plain"

        assert store.write_if("2.0.0", None) is False
        assert store.read()[0] == "1.0.0"

    def test_write_if_generation(self, bucket, store):
        bucket.seed("app/version", "1.0.0")
        _, token = store.read()

        assert store.write_if("1.0.1", token) is True
        assert bucket.uploads[-1]["if_generation_match"] == int(token)

        # the token is now stale
        assert store.write_if("1.0.2", token) is False
        assert store.read()[0] == "1.0.1"

    def test_unconditional_write(self, bucket, store):
        bucket.seed("app/version", "1.0.0")

        store.write("0.0.1")

        assert bucket.uploads[-1]["if_generation_match"] is None
        assert store.read()[0] == "0.0.1"

    def test_object_deleted_between_metadata_and_download(self, bucket, store):
        bucket.seed("app/version", "1.0.0")
        original_get_blob = bucket.get_blob

        def get_blob_then_delete(name):
            blob = original_get_blob(name)
            del bucket.objects[name]
            return blob

        bucket.get_blob = get_blob_then_delete

        assert store.read() == (None, None)

    def test_api_errors_are_storage_errors(self, bucket, store):
        bucket.fail_with = gcs_exceptions.Forbidden("no access")

        with pytest.raises(StorageUnavailableError, match="Failed to read"):
            store.read()
        with pytest.raises(StorageUnavailableError, match="Failed to write"):
            store.write_if("1.0.0", None)
        with pytest.raises(StorageUnavailableError, match="Failed to write"):
            store.write("1.0.0")

    def test_client_creation_failure(self):
        def make_client():
            raise gcs_exceptions.Unauthorized("bad credentials")

        store = GCSVersionStore(make_client, "versions", "v")

        with pytest.raises(StorageUnavailableError, match="storage client"):
            store.read()

    def test_racing_bump_over_gcs(self, bucket, store):
        bucket.seed("app/version", "1.0.0-rc.1")
        rival = VersionDriver(store, Version("0.0.0"))
        racing = RacingStore(store, interleave=[lambda: rival.bump(PreBump())])
        driver = VersionDriver(racing, Version("0.0.0"))

        assert str(driver.bump(PreBump())) == "1.0.0-rc.3"
        assert str(driver.bump(PatchBump())) == "1.0.0"

    def test_close_releases_client(self, client, store):
        store.close()
        assert not client.closed

        store.read()
        store.close()
        assert client.closed

        store.read()
        assert client.requested == ["versions", "versions"]


@pytest.mark.short
class TestClientFactory:
    def test_invalid_json_key(self):
        with pytest.raises(InvalidConfigurationError, match="json_key"):
            client_factory(Source(driver="gcs", bucket="b", key="k", json_key="{nope"))

    def test_json_key_must_be_object(self):
        with pytest.raises(InvalidConfigurationError, match="JSON object"):
            client_factory(
                Source(driver="gcs", bucket="b", key="k", json_key=json.dumps([1]))
            )

    def test_factory_does_not_connect(self):
        make_client = client_factory(Source(driver="gcs", bucket="b", key="k"))
        assert callable(make_client)
