import asyncio
import base64
import binascii
import logging

from services.errors import DecodeError, FetchError, NodeRpcError

logger = logging.getLogger(__name__)


class GenesisChunkReconstructor:
    """Reassembles a genesis document served through the ``genesis_chunked`` RPC.

    Chunks are decoded from base64 and concatenated strictly in ascending
    index order. With ``concurrency > 1`` the chunks after the first are
    fetched in parallel, bounded by a semaphore, and sorted before being
    joined. Any failure aborts the whole assembly; no partial document is
    ever returned.
    """

    def __init__(self, client, concurrency: int = 1):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.client = client
        self.concurrency = concurrency

    async def fetch_and_assemble(self, start_index: int = 0) -> bytes:
        first = await self._fetch(start_index, None)
        total = first.total_chunks
        if total <= 0:
            raise DecodeError(
                f"genesis chunk {start_index} reports no chunks", index=start_index
            )
        if start_index >= total:
            raise DecodeError(
                f"genesis chunk {start_index} out of range, node has {total} chunks",
                index=start_index,
            )

        if self.concurrency == 1:
            segments = await self._fetch_sequential(first, total)
        else:
            segments = await self._fetch_concurrent(first, total)

        document = b"".join(segment for _, segment in sorted(segments))
        logger.info(
            "reassembled genesis from %d chunks (%d bytes)",
            total - start_index,
            len(document),
        )
        return document

    async def _fetch_sequential(self, first, total):
        segments = [(first.index, self._decode(first, total))]
        index = first.index
        while index != total - 1:
            index += 1
            chunk = await self._fetch(index, total)
            segments.append((index, self._decode(chunk, total)))
        return segments

    async def _fetch_concurrent(self, first, total):
        semaphore = asyncio.Semaphore(self.concurrency)

        async def fetch_one(index):
            async with semaphore:
                chunk = await self._fetch(index, total)
            return index, self._decode(chunk, total)

        head = (first.index, self._decode(first, total))
        tasks = [
            asyncio.ensure_future(fetch_one(i)) for i in range(first.index + 1, total)
        ]
        try:
            segments = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return [head, *segments]

    async def _fetch(self, index, total):
        try:
            chunk = await self.client.get_genesis_chunk(index)
        except NodeRpcError as e:
            raise FetchError(
                f"error while getting genesis chunk {index} out of {_fmt_total(total)}",
                index=index,
                total=total,
            ) from e
        if chunk.index != index:
            raise DecodeError(
                f"requested genesis chunk {index} but node returned chunk {chunk.index}",
                index=index,
            )
        logger.debug("fetched genesis chunk %d/%d", index, chunk.total_chunks)
        return chunk

    @staticmethod
    def _decode(chunk, total):
        if chunk.total_chunks != total:
            raise DecodeError(
                f"genesis chunk {chunk.index} reports {chunk.total_chunks} chunks, expected {total}",
                index=chunk.index,
            )
        try:
            return base64.b64decode(chunk.data, validate=True)
        except binascii.Error as e:
            raise DecodeError(
                f"error while decoding genesis chunk {chunk.index} out of {total}",
                index=chunk.index,
            ) from e


def _fmt_total(total):
    return "unknown" if total is None else total
