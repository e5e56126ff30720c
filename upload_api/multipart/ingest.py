"""Accumulate an inbound request body under a total-size ceiling."""

from collections.abc import AsyncIterable, AsyncIterator

from upload_api.core.errors import RequestTooLarge, TransportError
from upload_api.core.logger import LogIcon, logger


async def iter_chunks(body: bytes, chunk_size: int) -> AsyncIterator[bytes]:
    """Re-feed an already received body as a chunk stream."""
    view = memoryview(body)
    for offset in range(0, len(view), chunk_size):
        yield bytes(view[offset : offset + chunk_size])


class StreamIngest:
    """Collects body chunks, aborting as soon as the running total passes ``max_total_size``."""

    def __init__(self, max_total_size: int) -> None:
        self.max_total_size = max_total_size
        self.total_size = 0
        self._chunks: list[bytes] = []

    @property
    def buffered(self) -> int:
        return len(self._chunks)

    def feed(self, chunk: bytes) -> None:
        self.total_size += len(chunk)
        if self.total_size > self.max_total_size:
            self._chunks.clear()
            raise RequestTooLarge(self.max_total_size)
        self._chunks.append(chunk)

    async def collect(self, chunks: AsyncIterable[bytes]) -> bytes:
        """Consume ``chunks`` and return the concatenated body.

        Raises :class:`RequestTooLarge` without reading further once the
        ceiling is crossed. Buffered data is released on any abort,
        including task cancellation when the client goes away.
        """
        try:
            async for chunk in chunks:
                self.feed(chunk)
            data = b"".join(self._chunks)
        except RequestTooLarge:
            logger.warning(
                "Request body exceeds limit",
                icon=LogIcon.FORBIDDEN,
                received=self.total_size,
                limit=self.max_total_size,
            )
            raise
        except OSError as ex:
            raise TransportError(f"Failed reading request body: {ex}") from ex
        finally:
            self._chunks.clear()

        logger.debug("Request body received", icon=LogIcon.STREAMING, size=len(data))
        return data
