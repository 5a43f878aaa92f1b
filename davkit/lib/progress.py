"""
Upload body with progress reporting.
"""
import asyncio
import inspect
import io
import logging
from typing import Any
from typing import AsyncIterator
from typing import Awaitable
from typing import BinaryIO
from typing import Callable
from typing import Optional
from typing import Union

import aiofiles.os

log = logging.getLogger("davkit")

ProgressCallback = Callable[[int], Union[None, Awaitable[None]]]

CHUNK_SIZE = 64 * 1024


class ProgressStream:
    """
    Async-iterable request body which reads ``source`` in chunks and
    tells ``progress`` how many bytes have been handed over to the
    connection so far.

    ``source`` may be bytes, a str (sent UTF-8 encoded), an async file
    object like the ones from ``aiofiles.open``, or a plain file object.
    Plain file objects are read in the thread pool, so a slow disk does
    not hold up the event loop.

    The callback is optional and may be a plain function or a coroutine
    function.  Exceptions raised by it are logged and otherwise ignored,
    they never abort the upload.

    The stream may be iterated more than once (httpx replays the body
    when answering an auth challenge) as long as the source is seekable.
    The reported count never goes backwards; during a replay nothing is
    reported until the previous high-water mark is passed.
    """

    def __init__(
        self,
        source: Union[bytes, str, BinaryIO, Any],
        progress: Optional[ProgressCallback] = None,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        if isinstance(source, str):
            source = source.encode("utf-8")
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        self.source = source
        self.progress = progress
        self.chunk_size = chunk_size
        self.reported = 0
        ## Number of bytes to send, known after prepare() if the source is seekable
        self.length: Optional[int] = None
        self._start: Optional[int] = None
        self._prepared = False
        self._iterations = 0

    async def _call(self, name: str, *args: Any) -> Any:
        method = getattr(self.source, name)
        if isinstance(self.source, io.BytesIO):
            return method(*args)
        if not inspect.iscoroutinefunction(method):
            method = aiofiles.os.wrap(method)
        return await method(*args)

    async def prepare(self) -> Optional[int]:
        """
        Remember where the source starts and find the length of the
        body.  Returns None for sources that can't seek.
        """
        if self._prepared:
            return self.length
        self._prepared = True
        try:
            start = await self._call("tell")
            await self._call("seek", 0, io.SEEK_END)
            end = await self._call("tell")
            await self._call("seek", start)
        except (AttributeError, OSError):
            return None
        self._start = start
        self.length = end - start
        return self.length

    async def _report(self, sent: int) -> None:
        if self.progress is None or sent <= self.reported:
            return
        self.reported = sent
        try:
            ret = self.progress(sent)
            if asyncio.iscoroutine(ret):
                await ret
        except Exception:
            log.warning("progress callback failed", exc_info=True)

    async def __aiter__(self) -> AsyncIterator[bytes]:
        await self.prepare()
        if self._iterations:
            if self._start is None:
                raise RuntimeError("upload body can not be replayed, the source is not seekable")
            await self._call("seek", self._start)
        self._iterations += 1

        sent = 0
        while True:
            chunk = await self._call("read", self.chunk_size)
            if not chunk:
                break
            if isinstance(chunk, str):
                chunk = chunk.encode("utf-8")
            yield chunk
            sent += len(chunk)
            await self._report(sent)
