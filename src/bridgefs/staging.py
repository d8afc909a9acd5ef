"""UploadStager: turn an unbounded input stream into a re-readable upload source."""

from __future__ import annotations

import io
import logging
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

KB = 1 << 10
MB = KB << 10
DEFAULT_MAX_MEMORY = 50 * MB
COPY_CHUNK_SIZE = 1 * MB
TEMP_PREFIX = "bridgefs-upload-"


@dataclass
class StagedUpload:
    """Upload source plus the exact number of bytes it will yield."""

    source: BinaryIO
    size: int
    spilled: bool = False


def read_at_most(stream: BinaryIO, limit: int) -> bytes:
    """Read from ``stream`` until ``limit`` bytes or end of stream."""
    chunks: list[bytes] = []
    remaining = limit
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


class UploadStager:
    """Buffers small uploads in memory and spills large ones to disk.

    Up to ``max_memory`` bytes are read into memory. If the stream ends
    there, the buffer itself is the upload source. Otherwise the buffer
    and the rest of the stream are copied into an anonymous temporary
    file that only lives as long as the ``stage()`` block.
    """

    def __init__(
        self,
        max_memory: int = DEFAULT_MAX_MEMORY,
        *,
        chunk_size: int = COPY_CHUNK_SIZE,
        temp_dir: str | None = None,
    ) -> None:
        if max_memory < 0:
            raise ValueError(f"max_memory must be >= 0, got {max_memory}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
        self.max_memory = max_memory
        self.chunk_size = chunk_size
        self.temp_dir = temp_dir

    @contextmanager
    def stage(self, stream: BinaryIO) -> Iterator[StagedUpload]:
        data = read_at_most(stream, self.max_memory)
        peek = b""
        if len(data) == self.max_memory:
            peek = stream.read(self.chunk_size)

        if not peek:
            yield StagedUpload(source=io.BytesIO(data), size=len(data))
            return

        with tempfile.TemporaryFile(prefix=TEMP_PREFIX, dir=self.temp_dir) as f:
            size = self._spill(f, stream, data, peek)
            logger.debug("Upload spilled to temporary file (%d bytes)", size)
            yield StagedUpload(source=f, size=size, spilled=True)

    def _spill(self, f: BinaryIO, stream: BinaryIO, data: bytes, peek: bytes) -> int:
        written = f.write(data)
        if written != len(data):
            raise OSError(f"Short write to staging file: {written} != {len(data)}")

        copied = f.write(peek)
        while True:
            chunk = stream.read(self.chunk_size)
            if not chunk:
                break
            copied += f.write(chunk)

        f.flush()
        f.seek(0)
        return written + copied
