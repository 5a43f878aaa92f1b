#!/usr/bin/env python
"""
Tests for the upload body with progress reporting.
"""
import asyncio
import contextlib
import io
import time

import aiofiles
import pytest

from davkit.lib.progress import ProgressStream


async def consume(stream):
    return b"".join([chunk async for chunk in stream])


class SlowSource:
    """Blocking file-like object, every read takes a while."""

    def __init__(self, data, delay):
        self._buf = io.BytesIO(data)
        self.delay = delay

    def read(self, size):
        time.sleep(self.delay)
        return self._buf.read(size)

    def tell(self):
        return self._buf.tell()

    def seek(self, *args):
        return self._buf.seek(*args)


class TestProgressStream:
    @pytest.mark.asyncio
    async def test_length(self):
        assert await ProgressStream(b"hello").prepare() == 5
        assert await ProgressStream("blå").prepare() == 4

    @pytest.mark.asyncio
    async def test_length_from_current_position(self):
        source = io.BytesIO(b"0123456789")
        source.seek(4)
        stream = ProgressStream(source)

        assert await stream.prepare() == 6
        assert stream.length == 6
        assert await consume(stream) == b"456789"

    @pytest.mark.asyncio
    async def test_reports_monotonic_totals(self):
        seen = []
        stream = ProgressStream(b"x" * 10, seen.append, chunk_size=3)

        assert await consume(stream) == b"x" * 10
        assert seen == [3, 6, 9, 10]

    @pytest.mark.asyncio
    async def test_empty_source(self):
        seen = []
        stream = ProgressStream(b"", seen.append)

        assert await consume(stream) == b""
        assert seen == []
        assert stream.length == 0

    @pytest.mark.asyncio
    async def test_replay(self):
        seen = []
        stream = ProgressStream(b"x" * 10, seen.append, chunk_size=4)

        await consume(stream)
        assert await consume(stream) == b"x" * 10
        ## nothing reported twice, nothing reported backwards
        assert seen == [4, 8, 10]

    @pytest.mark.asyncio
    async def test_replay_needs_seekable_source(self):
        class Unseekable:
            def __init__(self):
                self.data = [b"abc"]

            def read(self, size):
                return self.data.pop() if self.data else b""

        stream = ProgressStream(Unseekable())
        assert await stream.prepare() is None
        assert await consume(stream) == b"abc"
        with pytest.raises(RuntimeError):
            await consume(stream)

    @pytest.mark.asyncio
    async def test_callback_errors_are_ignored(self):
        calls = []

        def progress(sent):
            calls.append(sent)
            raise ValueError("boom")

        stream = ProgressStream(b"abcdef", progress, chunk_size=2)
        assert await consume(stream) == b"abcdef"
        assert calls == [2, 4, 6]

    @pytest.mark.asyncio
    async def test_coroutine_callback(self):
        seen = []

        async def progress(sent):
            seen.append(sent)

        await consume(ProgressStream(b"abc", progress))
        assert seen == [3]


class TestFileSources:
    @pytest.mark.asyncio
    async def test_aiofiles_handle(self, tmp_path):
        fn = tmp_path / "upload.bin"
        data = bytes(range(256)) * 1000
        fn.write_bytes(data)
        seen = []

        async with aiofiles.open(fn, "rb") as f:
            stream = ProgressStream(f, seen.append)
            assert await stream.prepare() == len(data)
            assert await consume(stream) == data
            ## replays seek back on the async handle
            assert await consume(stream) == data

        assert seen[-1] == len(data)

    @pytest.mark.asyncio
    async def test_plain_file(self, tmp_path):
        fn = tmp_path / "upload.txt"
        fn.write_bytes(b"Hello, World!")

        with open(fn, "rb") as f:
            stream = ProgressStream(f)
            assert await stream.prepare() == 13
            assert await consume(stream) == b"Hello, World!"

    @pytest.mark.asyncio
    async def test_blocking_reads_leave_the_loop_running(self):
        loop = asyncio.get_running_loop()
        gaps = []

        async def ticker():
            last = loop.time()
            while True:
                await asyncio.sleep(0.01)
                now = loop.time()
                gaps.append(now - last)
                last = now

        ticking = asyncio.ensure_future(ticker())
        try:
            stream = ProgressStream(SlowSource(b"x" * 30, 0.2), chunk_size=10)
            assert await consume(stream) == b"x" * 30
        finally:
            ticking.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await ticking

        assert gaps
        assert max(gaps) < 0.15
