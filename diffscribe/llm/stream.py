"""Server-sent event decoding for OpenAI-compatible streams.

Frames are separated by a blank line (LF or CRLF) and carry one or more
``data:`` lines. A ``data: [DONE]`` payload ends the stream. Frames that
cannot be parsed are skipped so that one bad chunk never aborts a good
stream.
"""

import codecs
import json
import re
from typing import Any, Callable, Iterable, Optional

from diffscribe.llm.cancellation import CancellationToken

DONE_SENTINEL = "[DONE]"
_FRAME_SEPARATOR_RE = re.compile(r"\r?\n\r?\n")
_LINE_SPLIT_RE = re.compile(r"\r?\n")


def extract_delta(payload: Any) -> Optional[str]:
    """Pull the text delta out of a decoded stream payload.

    Looks at ``choices[0].delta.content``, then ``choices[0].message.content``,
    then ``choices[0].text``.

    Returns:
        The delta string, or None if the payload has no usable text.
    """
    try:
        choice = payload["choices"][0]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(choice, dict):
        return None

    for container, key in (("delta", "content"), ("message", "content")):
        section = choice.get(container)
        if isinstance(section, dict) and section.get(key) is not None:
            value = section[key]
            return value if isinstance(value, str) else None

    text = choice.get("text")
    return text if isinstance(text, str) else None


class _Accumulator:
    def __init__(self, on_token: Callable[[str], None]):
        self.on_token = on_token
        self.parts: list[str] = []

    def push(self, text: str) -> None:
        if not text:
            return
        self.parts.append(text)
        self.on_token(text)

    @property
    def text(self) -> str:
        return "".join(self.parts)


def _process_frame(frame: str, acc: _Accumulator) -> bool:
    """Handle one frame. Returns True when the end sentinel was seen."""
    for line in _LINE_SPLIT_RE.split(frame):
        line = line.strip()
        if not line.startswith("data:"):
            continue

        payload = line[len("data:"):].strip()
        if not payload:
            continue
        if payload == DONE_SENTINEL:
            return True

        try:
            decoded = json.loads(payload)
        except ValueError:
            continue
        delta = extract_delta(decoded)
        if delta:
            acc.push(delta)
    return False


def decode_sse_stream(
    chunks: Iterable[bytes],
    on_token: Callable[[str], None],
    cancel_token: Optional[CancellationToken] = None,
) -> str:
    """Reduce an SSE byte stream to text deltas.

    Args:
        chunks: Raw bytes as they arrive from the transport.
        on_token: Called once per non-empty delta, in stream order.
        cancel_token: Checked before and after every read; a chunk that
            arrives after cancellation is discarded.

    Returns:
        All deltas concatenated.

    Raises:
        AbortedError: If the cancel token is set when checked.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    acc = _Accumulator(on_token)
    buffer = ""
    iterator = iter(chunks)

    while True:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        try:
            chunk = next(iterator)
        except StopIteration:
            chunk = None

        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        if chunk is None:
            break

        buffer += decoder.decode(chunk)

        while True:
            match = _FRAME_SEPARATOR_RE.search(buffer)
            if match is None:
                break
            frame = buffer[:match.start()]
            buffer = buffer[match.end():]
            if _process_frame(frame, acc):
                return acc.text

    # Stream closed without a trailing blank line
    buffer += decoder.decode(b"", final=True)
    if buffer.strip():
        _process_frame(buffer, acc)

    return acc.text
