"""Tests for the range responder."""

from concurrent.futures import ThreadPoolExecutor

import pytest

import mediarange
from mediarange import (AsyncRangeResponder, MalformedRange, RangeResponder, ResourceUnavailable,
                        ResponderConfig, StaticResolver, UnsatisfiableRange)
from mediarange.core.responder import build_headers
from mediarange.core.model import ByteRange
from mediarange.core.stream import AsyncByteSource, ByteSource
from mediarange.io.local import AsyncMemoryResource, FileResource, MemoryResource

from fake_resources import TrackingResource, make_payload


FULL_HEADER_ORDER = ["Content-Type", "Content-Length", "Cache-Control"]
PARTIAL_HEADER_ORDER = ["Content-Type", "Content-Length", "Accept-Ranges", "Content-Range", "Cache-Control"]


class CountingResolver:
    """Resolver that records every identifier it is asked for."""

    def __init__(self, resource):
        self.resource = resource
        self.calls = []

    def resolve(self, identifier):
        self.calls.append(identifier)
        return self.resource


class TestRangeResponder:
    """Test the request scenarios against a 1000-byte resource."""

    def setup_method(self):
        self.data = make_payload(1000)
        self.resource = TrackingResource(self.data)
        self.responder = RangeResponder(StaticResolver(self.resource))

    def test_no_range_header(self):
        desc = self.responder.respond("clip.mp4")

        assert desc.status == 200
        assert not desc.partial
        assert list(desc.headers) == FULL_HEADER_ORDER
        assert desc.headers == {
            "Content-Type": "video/mp4",
            "Content-Length": "1000",
            "Cache-Control": "no-cache",
        }
        assert desc.byte_range is None
        assert desc.resource_length == 1000
        assert desc.body.read() == self.data

    def test_closed_range(self):
        desc = self.responder.respond("clip.mp4", "bytes=0-499")

        assert desc.status == 206
        assert desc.partial
        assert list(desc.headers) == PARTIAL_HEADER_ORDER
        assert desc.headers["Content-Length"] == "500"
        assert desc.headers["Accept-Ranges"] == "bytes"
        assert desc.headers["Content-Range"] == "bytes 0-499/1000"
        assert desc.byte_range == ByteRange(0, 499)
        assert desc.body.read() == self.data[:500]

    def test_open_ended_range(self):
        desc = self.responder.respond("clip.mp4", "bytes=500-")

        assert desc.status == 206
        assert desc.content_length == 500
        assert desc.headers["Content-Range"] == "bytes 500-999/1000"
        assert desc.body.read() == self.data[500:]

    def test_end_beyond_resource(self):
        with pytest.raises(UnsatisfiableRange) as excinfo:
            self.responder.respond("clip.mp4", "bytes=900-1500")
        assert excinfo.value.resource_length == 1000
        assert self.resource.opened == 0

    def test_malformed(self):
        with pytest.raises(MalformedRange):
            self.responder.respond("clip.mp4", "bytes=abc")
        assert self.resource.opened == 0

    def test_start_after_end(self):
        with pytest.raises(UnsatisfiableRange):
            self.responder.respond("clip.mp4", "bytes=500-100")

    def test_content_length_matches_stream(self):
        for header in ("bytes=0-0", "bytes=1-998", "bytes=999-", "bytes=123-456"):
            desc = self.responder.respond("clip.mp4", header)
            body = desc.body.read()
            start, end = desc.byte_range.start, desc.byte_range.end
            assert len(body) == desc.content_length == end - start + 1
            assert body == self.data[start:end + 1]

    def test_idempotent(self):
        first = self.responder.respond("clip.mp4", "bytes=10-700").body.read()
        second = self.responder.respond("clip.mp4", "bytes=10-700").body.read()
        assert first == second

    def test_descriptor_does_not_open_resource(self):
        desc = self.responder.respond("clip.mp4", "bytes=0-499")
        assert isinstance(desc.body, ByteSource)
        assert self.resource.opened == 0
        desc.body.close()
        assert self.resource.opened == 0

    def test_size_read_per_request(self):
        self.responder.respond("clip.mp4")
        self.responder.respond("clip.mp4", "bytes=0-1")
        assert self.resource.size_calls == 2

    def test_resolver_receives_identifier(self):
        resolver = CountingResolver(self.resource)
        RangeResponder(resolver).respond("movies/a.mp4", "bytes=0-1")
        assert resolver.calls == ["movies/a.mp4"]

    def test_empty_resource(self):
        responder = RangeResponder(StaticResolver(MemoryResource(b"")))
        desc = responder.respond("empty")
        assert desc.status == 200
        assert desc.headers["Content-Length"] == "0"
        assert desc.body.read() == b""

        with pytest.raises(UnsatisfiableRange):
            responder.respond("empty", "bytes=0-")

    def test_config_overrides(self):
        config = ResponderConfig(chunk_size=100, cache_control=None, media_type="audio/mpeg")
        desc = RangeResponder(StaticResolver(self.resource), config).respond("clip", "bytes=0-249")

        assert desc.headers["Content-Type"] == "audio/mpeg"
        assert "Cache-Control" not in desc.headers
        assert [len(c) for c in desc.body] == [100, 100, 50]


class TestFileBackedResponder:
    """Test the responder against real files."""

    def test_size_reflects_file_changes(self, tmp_path):
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"a" * 100)
        responder = RangeResponder(StaticResolver(FileResource(path)))

        assert responder.respond("clip").resource_length == 100
        path.write_bytes(b"b" * 200)
        desc = responder.respond("clip", "bytes=150-")
        assert desc.headers["Content-Range"] == "bytes 150-199/200"
        assert desc.body.read() == b"b" * 50

    def test_missing_file(self, tmp_path):
        responder = RangeResponder(StaticResolver(FileResource(tmp_path / "nope.mp4")))
        with pytest.raises(ResourceUnavailable) as excinfo:
            responder.respond("nope.mp4", "bytes=0-1")
        assert excinfo.value.status_code == 404

    def test_concurrent_overlapping_requests(self, tmp_path):
        data = make_payload(64 * 1024)
        path = tmp_path / "clip.mp4"
        path.write_bytes(data)
        responder = RangeResponder(StaticResolver(FileResource(path)), ResponderConfig(chunk_size=1024))
        spans = [(i * 1000, i * 1000 + 20000) for i in range(16)]

        def fetch(span):
            start, end = span
            return responder.respond("clip", f"bytes={start}-{end}").body.read()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(fetch, spans))

        for (start, end), body in zip(spans, results):
            assert body == data[start:end + 1]


class TestAsyncRangeResponder:
    """Test the asynchronous responder."""

    def setup_method(self):
        self.data = make_payload(1000)
        self.responder = AsyncRangeResponder(StaticResolver(AsyncMemoryResource(self.data)))

    @pytest.mark.asyncio
    async def test_full(self):
        desc = await self.responder.respond("clip")
        assert desc.status == 200
        assert isinstance(desc.body, AsyncByteSource)
        assert await desc.body.read() == self.data

    @pytest.mark.asyncio
    async def test_partial(self):
        desc = await self.responder.respond("clip", "bytes=500-")
        assert desc.status == 206
        assert desc.headers["Content-Range"] == "bytes 500-999/1000"
        assert await desc.body.read() == self.data[500:]

    @pytest.mark.asyncio
    async def test_rejections(self):
        with pytest.raises(UnsatisfiableRange):
            await self.responder.respond("clip", "bytes=900-1500")
        with pytest.raises(MalformedRange):
            await self.responder.respond("clip", "bytes=abc")


class TestConvenienceFunctions:
    """Test the package-level respond helpers."""

    def test_respond_with_path(self, tmp_path):
        path = tmp_path / "song.mp3"
        path.write_bytes(b"0123456789")

        desc = mediarange.respond(str(path), "bytes=2-5")
        assert desc.headers["Content-Type"] == "audio/mpeg"
        assert desc.identifier == str(path)
        assert desc.body.read() == b"2345"

    def test_respond_with_bytes(self):
        desc = mediarange.respond(b"0123456789", media_type="video/webm")
        assert desc.headers["Content-Type"] == "video/webm"
        assert isinstance(desc.identifier, MemoryResource)
        assert desc.body.read() == b"0123456789"

    @pytest.mark.asyncio
    async def test_respond_async_with_path(self, tmp_path):
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"0123456789")

        desc = await mediarange.respond_async(path, "bytes=7-")
        assert desc.headers["Content-Range"] == "bytes 7-9/10"
        assert await desc.body.read() == b"789"


def test_build_headers_partial():
    headers = build_headers("video/mp4", 1000, ByteRange(0, 499))
    assert list(headers.items()) == [
        ("Content-Type", "video/mp4"),
        ("Content-Length", "500"),
        ("Accept-Ranges", "bytes"),
        ("Content-Range", "bytes 0-499/1000"),
        ("Cache-Control", "no-cache"),
    ]
