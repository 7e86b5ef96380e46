"""Cancellable chunked reads of a file window, produced by a background task."""

import asyncio
import logging
from pathlib import Path
from typing import AsyncIterator, Optional

import aiofiles

from common.constants import STREAM_CHUNK_SIZE_BYTES
from common.exceptions import IOFaultError, StreamReadError

logger = logging.getLogger(__name__)

_END_OF_STREAM = object()


class CancellationSignal:
    """
    One-shot stop request for a transfer. Firing it more than once has no further effect.
    """

    def __init__(self):
        self._event = asyncio.Event()

    def fire(self) -> None:
        self._event.set()

    @property
    def fired(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


class ChunkStream:
    """
    Ordered sequence of byte chunks read from an open file.

    A producer task reads the file and hands chunks to the consumer through a
    queue holding a single chunk, so a slow consumer throttles the reads. A
    handoff completes once the slot is free, not once the consumer has taken
    the chunk, so the producer can be one queued chunk plus one read ahead. The
    cancellation signal is checked by the producer between reads and by the
    consumer after every handoff. The file handle is closed on every exit path.
    The stream can be iterated once.
    """

    def __init__(
        self,
        handle,
        path: str,
        start: int,
        length: int,
        cancel: CancellationSignal,
        chunk_size: int = STREAM_CHUNK_SIZE_BYTES,
    ):
        """
        Initialize stream over an already opened and positioned handle.

        Args:
            handle: aiofiles binary handle, positioned at start
            path: Logical path, used in log messages
            start: Offset the handle was positioned at
            length: Bytes to deliver; 0 means read until end-of-file
            cancel: Signal that stops the transfer early
            chunk_size: Upper bound for a single chunk
        """
        self.path = path
        self.start = start
        self.length = length
        self.bytes_read = 0
        self.bytes_delivered = 0
        self.completed = False
        self.closed = False

        self._handle = handle
        self._cancel = cancel
        self._chunk_size = max(1, min(chunk_size, STREAM_CHUNK_SIZE_BYTES))
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._producer: Optional[asyncio.Task] = None
        self._iterator: Optional[AsyncIterator[bytes]] = None

    def __aiter__(self) -> AsyncIterator[bytes]:
        if self._iterator is not None:
            raise RuntimeError(f"Chunk stream for {self.path} has already been consumed")
        self._iterator = self._consume()
        return self._iterator

    def _next_read_size(self) -> int:
        if self.length == 0:
            return self._chunk_size
        return min(self._chunk_size, self.length - self.bytes_read)

    async def _hand_off(self, item) -> None:
        """Block until the consumer has room for item or the transfer is cancelled."""
        putter = asyncio.ensure_future(self._queue.put(item))
        stopper = asyncio.ensure_future(self._cancel.wait())
        try:
            await asyncio.wait({putter, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopper.cancel()
            if not putter.done():
                putter.cancel()

    async def _receive(self):
        """Wait for the next queued item; returns _END_OF_STREAM once nothing more can arrive."""
        if not self._queue.empty():
            return self._queue.get_nowait()

        getter = asyncio.ensure_future(self._queue.get())
        stopper = asyncio.ensure_future(self._cancel.wait())
        try:
            await asyncio.wait(
                {getter, stopper, self._producer}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            stopper.cancel()
            if not getter.done():
                getter.cancel()

        if getter.done() and not getter.cancelled():
            return getter.result()
        if not self._queue.empty():
            return self._queue.get_nowait()
        if self._producer.done() and not self._producer.cancelled():
            error = self._producer.exception()
            if error is not None:
                raise StreamReadError(f"Read failed for {self.path}: {error}", self.bytes_read) from error
        return _END_OF_STREAM

    async def _produce(self) -> None:
        try:
            while not self._cancel.fired:
                size = self._next_read_size()
                if size <= 0:
                    break
                try:
                    data = await self._handle.read(size)
                except (OSError, ValueError) as e:
                    logger.error(
                        f"Read failed for {self.path} at offset {self.start + self.bytes_read}: {e}"
                    )
                    await self._hand_off(
                        StreamReadError(f"Read failed for {self.path}: {e}", self.bytes_read)
                    )
                    return
                if not data:
                    break
                self.bytes_read += len(data)
                await self._hand_off(data)
            await self._hand_off(_END_OF_STREAM)
        finally:
            await self._close_handle()

    async def _consume(self) -> AsyncIterator[bytes]:
        self._producer = asyncio.create_task(self._produce())
        finished = False
        try:
            while True:
                item = await self._receive()
                if self._cancel.fired:
                    break
                if item is _END_OF_STREAM:
                    finished = True
                    self.completed = True
                    break
                if isinstance(item, StreamReadError):
                    finished = True
                    raise item
                self.bytes_delivered += len(item)
                yield item
        finally:
            if not finished:
                # consumer went away or was stopped: let the producer finish its read and exit
                self._cancel.fire()
            await asyncio.gather(self._producer, return_exceptions=True)

    async def _close_handle(self) -> None:
        if self.closed:
            return
        self.closed = True
        await self._handle.close()

    async def aclose(self) -> None:
        """
        Stop the stream and release the file handle, whether or not it was iterated.
        """
        if self._iterator is not None:
            await self._iterator.aclose()
        if self._producer is None:
            await self._close_handle()


async def open_stream(
    filepath: Path,
    path: str,
    start: int,
    length: int,
    cancel: CancellationSignal,
    chunk_size: int = STREAM_CHUNK_SIZE_BYTES,
) -> ChunkStream:
    """
    Open a file, seek to start and return a lazy chunk stream over [start, start + length).

    Args:
        filepath: Resolved filesystem path
        path: Logical path, used in errors and log messages
        start: Byte offset to begin at
        length: Bytes to deliver; 0 means read until end-of-file
        cancel: Signal that stops the transfer early
        chunk_size: Upper bound for a single chunk

    Returns:
        ChunkStream ready to iterate

    Raises:
        IOFaultError: If the file cannot be opened or positioned
    """
    try:
        handle = await aiofiles.open(filepath, "rb")
    except OSError as e:
        raise IOFaultError(f"Cannot open {path}: {e}") from e

    try:
        await handle.seek(start)
    except OSError as e:
        await handle.close()
        raise IOFaultError(f"Cannot seek {path} to {start}: {e}") from e

    logger.debug(f"Opened stream for {path} start={start} length={length or 'EOF'}")
    return ChunkStream(handle, path, start, length, cancel, chunk_size=chunk_size)
