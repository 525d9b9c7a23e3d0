"""
Tests for the object-storage adapters.

Supabase calls go through httpx.MockTransport, so no network is needed.
"""
import json

import httpx
import pytest

from adapters.base import ObjectNotFound, StorageError
from adapters.local_fs import LocalObjectStorage
from adapters.supabase_storage import SupabaseObjectStorage


class TestLocalObjectStorage:

    def test_upload_download(self, storage):
        storage.upload("cards/c1/a.txt", b"hello", "text/plain")
        obj = storage.download("cards/c1/a.txt")
        assert obj.data == b"hello"
        assert obj.content_type == "text/plain"
        assert storage.exists("cards/c1/a.txt")

    def test_no_overwrite(self, storage):
        storage.upload("a.txt", b"1", "text/plain")
        with pytest.raises(StorageError):
            storage.upload("a.txt", b"2", "text/plain")
        assert storage.download("a.txt").data == b"1"

    def test_missing(self, storage):
        with pytest.raises(ObjectNotFound):
            storage.download("nope.txt")

    @pytest.mark.parametrize("bad", ["../escape.txt", "/abs.txt", "a/../../b.txt", "", "x.meta.json"])
    def test_path_traversal_rejected(self, storage, bad):
        with pytest.raises(StorageError):
            storage.upload(bad, b"x", "text/plain")

    def test_remove_ignores_missing(self, storage):
        storage.upload("a.txt", b"1", "text/plain")
        storage.remove(["a.txt", "never-existed.txt"])
        assert not storage.exists("a.txt")

    def test_signed_token_scoped_to_bucket(self, storage, tmp_path):
        url = storage.create_signed_url("a.txt", 60)
        token = url.rsplit("/", 1)[-1]
        assert url.startswith("/files/")
        assert storage.resolve_signed_token(token) == "a.txt"

        other = LocalObjectStorage.from_dir(str(tmp_path / "other"), bucket="Other", secret="test-secret")
        assert other.resolve_signed_token(token) is None

        wrong_secret = LocalObjectStorage.from_dir(str(tmp_path / "x"), bucket="Cards", secret="nope")
        assert wrong_secret.resolve_signed_token(token) is None


def _supabase(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return SupabaseObjectStorage(
        url="https://proj.supabase.co/",
        service_key="service-key",
        bucket="Cards",
        client=client,
    )


class TestSupabaseObjectStorage:

    def test_requires_config(self):
        with pytest.raises(ValueError):
            SupabaseObjectStorage(url="", service_key="k", bucket="Cards")
        with pytest.raises(ValueError):
            SupabaseObjectStorage(url="https://x.supabase.co", service_key="", bucket="Cards")

    def test_upload_request(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = request.content
            return httpx.Response(200, json={"Key": "Cards/cards/c1/a.txt"})

        _supabase(handler).upload("cards/c1/a.txt", b"data", "text/plain")
        assert seen["method"] == "POST"
        assert seen["url"] == "https://proj.supabase.co/storage/v1/object/Cards/cards/c1/a.txt"
        assert seen["headers"]["authorization"] == "Bearer service-key"
        assert seen["headers"]["apikey"] == "service-key"
        assert seen["headers"]["x-upsert"] == "false"
        assert seen["headers"]["content-type"] == "text/plain"
        assert seen["body"] == b"data"

    def test_upload_error(self):
        store = _supabase(lambda request: httpx.Response(409, json={"error": "Duplicate"}))
        with pytest.raises(StorageError):
            store.upload("a.txt", b"x", "text/plain")

    def test_download(self):
        def handler(request):
            return httpx.Response(200, content=b"img", headers={"content-type": "image/png"})

        obj = _supabase(handler).download("notes/u/a.png")
        assert obj.data == b"img"
        assert obj.content_type == "image/png"

    @pytest.mark.parametrize("response", [
        httpx.Response(404),
        httpx.Response(400, json={"statusCode": "404", "error": "not_found", "message": "Object not found"}),
    ])
    def test_download_not_found(self, response):
        with pytest.raises(ObjectNotFound):
            _supabase(lambda request: response).download("missing.png")

    def test_remove(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["json"] = json.loads(request.content)
            return httpx.Response(200, json=[])

        _supabase(handler).remove(["a.txt", "b.txt"])
        assert seen["method"] == "DELETE"
        assert seen["url"] == "https://proj.supabase.co/storage/v1/object/Cards"
        assert seen["json"] == {"prefixes": ["a.txt", "b.txt"]}

    def test_remove_nothing_skips_call(self):
        def handler(request):
            raise AssertionError("no request expected")

        _supabase(handler).remove([])

    def test_signed_url(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["json"] = json.loads(request.content)
            return httpx.Response(200, json={"signedURL": "/object/sign/Cards/a.txt?token=abc"})

        url = _supabase(handler).create_signed_url("a.txt", 120)
        assert seen["url"] == "https://proj.supabase.co/storage/v1/object/sign/Cards/a.txt"
        assert seen["json"] == {"expiresIn": 120}
        assert url == "https://proj.supabase.co/storage/v1/object/sign/Cards/a.txt?token=abc"

    def test_signed_url_failure(self):
        store = _supabase(lambda request: httpx.Response(500, text="oops"))
        with pytest.raises(StorageError):
            store.create_signed_url("a.txt", 120)

    def test_network_error_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        with pytest.raises(StorageError):
            _supabase(handler).download("a.txt")

    def test_exists(self):
        store = _supabase(lambda request: httpx.Response(200 if request.url.path.endswith("here.txt") else 404))
        assert store.exists("here.txt")
        assert not store.exists("gone.txt")
