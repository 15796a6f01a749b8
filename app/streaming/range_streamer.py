"""
Byte-range streaming for audio playback.

Players seek by sending ``Range: bytes=N-M``. This module turns a seekable
byte source plus that header into a 200 (full) or 206 (partial) response,
streamed in fixed-size chunks.

Only single ranges of the form ``bytes=N-M`` and ``bytes=N-`` are honoured.
Any other header value (suffix ranges, multiple ranges, other units) is
ignored and the full object is served.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, Optional

from starlette.responses import StreamingResponse

from tunevault_core.config import settings
from tunevault_core.domain.exceptions import RangeNotSatisfiableError

_RANGE_RE = re.compile(r"^\s*bytes=(\d+)-(\d*)\s*$")


@dataclass(frozen=True)
class RangeWindow:
    """Inclusive byte window inside an object of ``total_length`` bytes."""

    start: int
    end: int
    total_length: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total_length}"


@dataclass
class StreamPlan:
    """Status, headers and byte window for one streamed response."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    window: Optional[RangeWindow] = None


def parse_range(header: str | None, total_length: int) -> RangeWindow | None:
    """
    Parse a Range header against an object's length.

    Returns:
        The requested window with its end clamped to the last byte, or None
        when the header is absent or not a single ``bytes=`` range.

    Raises:
        RangeNotSatisfiableError: The start lies past the end of the object
            or after the requested end.
    """
    if not header:
        return None

    match = _RANGE_RE.match(header)
    if match is None:
        return None

    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else total_length - 1
    end = min(end, total_length - 1)

    if start >= total_length or start > end:
        raise RangeNotSatisfiableError(
            total_length, message_debug=f"Range {header!r} against {total_length} bytes"
        )

    return RangeWindow(start=start, end=end, total_length=total_length)


class RangeStreamer:
    """
    Serves a seekable byte source as a full or partial HTTP response.

    The source is closed when the chunk generator finishes or is closed
    early, which is what happens when the client disconnects mid-stream.

    Usage:
        streamer = RangeStreamer(io.BytesIO(content), len(content))
        return streamer.build_response(request.headers.get("range"), "audio/mpeg")
    """

    def __init__(
        self,
        source: BinaryIO,
        total_length: int,
        chunk_size: int | None = None,
    ):
        self.source = source
        self.total_length = total_length
        self.chunk_size = chunk_size or settings.STREAM_CHUNK_SIZE

    def plan(self, range_header: str | None) -> StreamPlan:
        """Decide status code, headers and byte window for a request."""
        window = parse_range(range_header, self.total_length)

        if window is not None:
            return StreamPlan(
                status=206,
                headers={
                    "Accept-Ranges": "bytes",
                    "Content-Length": str(window.length),
                    "Content-Range": window.content_range,
                },
                window=window,
            )

        full = None
        if self.total_length > 0:
            full = RangeWindow(0, self.total_length - 1, self.total_length)
        return StreamPlan(
            status=200,
            headers={
                "Accept-Ranges": "bytes",
                "Content-Length": str(self.total_length),
            },
            window=full,
        )

    def iter_chunks(self, window: RangeWindow | None) -> Iterator[bytes]:
        """Yield exactly ``window.length`` bytes, then close the source."""
        try:
            if window is None:
                return
            self.source.seek(window.start)
            remaining = window.length
            while remaining > 0:
                chunk = self.source.read(min(self.chunk_size, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                yield chunk
        finally:
            self.source.close()

    def build_response(
        self, range_header: str | None, content_type: str
    ) -> StreamingResponse:
        try:
            plan = self.plan(range_header)
        except RangeNotSatisfiableError:
            self.source.close()
            raise

        return StreamingResponse(
            self.iter_chunks(plan.window),
            status_code=plan.status,
            headers=plan.headers,
            media_type=content_type,
        )
