"""Incremental decoder for the provider's server-sent-event stream.

Progress values are a presentation approximation: each content chunk advances
the estimate by a fixed step, capped below 100. Only the terminal marker
reports 100. The numbers say nothing about how much of the answer remains.
"""

import codecs
import json

from v0_mcp.models.response import StreamingResponse

DATA_PREFIX = "data:"
DONE_MARKER = "[DONE]"
PROGRESS_STEP = 5
PROGRESS_CAP = 95


class StreamDecoder:
    """Turn raw stream bytes into StreamingResponse events.

    Bytes may arrive split anywhere, including inside a multi-byte character or
    in the middle of a line; incomplete input is carried over to the next feed.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.progress = 0
        self.complete = False

    def feed(self, data: bytes) -> list[StreamingResponse]:
        if self.complete:
            return []
        self._buffer += self._decoder.decode(data)
        *lines, self._buffer = self._buffer.split("\n")
        return self._consume(lines)

    def finish(self) -> list[StreamingResponse]:
        """Flush whatever is left once the byte stream has ended."""
        if self.complete:
            return []
        self._buffer += self._decoder.decode(b"", final=True)
        remainder, self._buffer = self._buffer, ""
        return self._consume([remainder])

    def _consume(self, lines: list[str]) -> list[StreamingResponse]:
        events: list[StreamingResponse] = []
        for line in lines:
            event = self._decode_line(line.rstrip("\r"))
            if event is None:
                continue
            events.append(event)
            if event.complete:
                self.complete = True
                break
        return events

    def _decode_line(self, line: str) -> StreamingResponse | None:
        if not line.startswith(DATA_PREFIX):
            return None
        payload = line[len(DATA_PREFIX):].strip()
        if payload == DONE_MARKER:
            return StreamingResponse(chunk="", progress=100, complete=True)

        try:
            parsed = json.loads(payload)
        except json.JSONDecodeError:
            # Partial or corrupt framing; the stream continues with the next line.
            return None
        if not isinstance(parsed, dict):
            return None

        choices = parsed.get("choices")
        first = choices[0] if isinstance(choices, list) and choices else {}
        delta = first.get("delta") if isinstance(first, dict) else None
        chunk = delta.get("content") if isinstance(delta, dict) else None
        usage = parsed.get("usage")

        self.progress = min(self.progress + PROGRESS_STEP, PROGRESS_CAP)
        return StreamingResponse(
            chunk=chunk if isinstance(chunk, str) else "",
            progress=self.progress,
            complete=False,
            usage_metadata=usage if isinstance(usage, dict) else None,
        )
