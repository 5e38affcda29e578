"""Tests for diffscribe.llm.stream module."""

import pytest

from diffscribe.llm.cancellation import CancellationToken
from diffscribe.llm.exceptions import AbortedError
from diffscribe.llm.stream import decode_sse_stream, extract_delta


class TestExtractDelta:
    """Tests for extract_delta."""

    def test_delta_content(self):
        """Test streaming delta shape."""
        assert extract_delta({"choices": [{"delta": {"content": "hi"}}]}) == "hi"

    def test_message_content(self):
        """Test full message shape."""
        assert extract_delta({"choices": [{"message": {"content": "hi"}}]}) == "hi"

    def test_text_field(self):
        """Test legacy completions shape."""
        assert extract_delta({"choices": [{"text": "hi"}]}) == "hi"

    def test_delta_has_priority(self):
        """Test the lookup order."""
        payload = {"choices": [{"delta": {"content": "a"}, "message": {"content": "b"}, "text": "c"}]}
        assert extract_delta(payload) == "a"

    @pytest.mark.parametrize("payload", [{}, {"choices": []}, {"choices": ["x"]}, [], None, {"choices": [{"delta": {}}]}])
    def test_unusable_payloads(self, payload):
        """Test payloads without text."""
        assert extract_delta(payload) is None


class TestDecodeSseStream:
    """Tests for decode_sse_stream."""

    def test_accumulates_deltas_in_order(self, sse_frame):
        """Test the basic stream with a DONE sentinel."""
        body = sse_frame("feat:") + sse_frame(" add") + sse_frame(" streaming") + "data: [DONE]\n\n"
        tokens = []

        result = decode_sse_stream([body.encode()], tokens.append)

        assert result == "feat: add streaming"
        assert tokens == ["feat:", " add", " streaming"]

    def test_frames_split_across_chunks(self, sse_frame):
        """Test that partial frames persist between reads."""
        body = (sse_frame("one") + sse_frame(" two") + "data: [DONE]\n\n").encode()
        chunks = [body[i:i + 7] for i in range(0, len(body), 7)]
        tokens = []

        result = decode_sse_stream(chunks, tokens.append)

        assert result == "one two"
        assert tokens == ["one", " two"]

    def test_multibyte_characters_split_across_chunks(self):
        """Test incremental UTF-8 decoding."""
        body = ('data: {"choices": [{"delta": {"content": "修复: 登录"}}]}\n\n' "data: [DONE]\n\n").encode("utf-8")
        chunks = [body[i:i + 1] for i in range(len(body))]

        assert decode_sse_stream(chunks, lambda t: None) == "修复: 登录"

    def test_stops_at_done(self, sse_frame):
        """Test that frames after the sentinel are ignored."""
        body = sse_frame("a") + "data: [DONE]\n\n" + sse_frame("b")
        tokens = []

        assert decode_sse_stream([body.encode()], tokens.append) == "a"
        assert tokens == ["a"]

    def test_malformed_frames_skipped(self, sse_frame):
        """Test that a bad frame does not abort the stream."""
        body = sse_frame("a") + "data: {not json\n\n" + ": comment\n\n" + sse_frame("b")
        assert decode_sse_stream([body.encode()], lambda t: None) == "ab"

    def test_multiple_data_lines_in_frame(self):
        """Test frames carrying several data lines."""
        frame = (
            'data: {"choices": [{"delta": {"content": "x"}}]}\n'
            'data: {"choices": [{"delta": {"content": "y"}}]}\n\n'
        )
        assert decode_sse_stream([frame.encode()], lambda t: None) == "xy"

    def test_empty_deltas_not_reported(self, sse_frame):
        """Test that empty strings never reach the callback."""
        tokens = []
        body = sse_frame("") + sse_frame("a")

        decode_sse_stream([body.encode()], tokens.append)

        assert tokens == ["a"]

    def test_trailing_frame_without_separator(self, sse_frame):
        """Test that a final unterminated frame is still processed."""
        body = sse_frame("a") + sse_frame("b").rstrip("\n")
        assert decode_sse_stream([body.encode()], lambda t: None) == "ab"

    def test_crlf_lines(self):
        """Test CRLF line endings inside a frame."""
        frame = 'data: {"choices": [{"delta": {"content": "z"}}]}\r\n\n'
        assert decode_sse_stream([frame.encode()], lambda t: None) == "z"

    def test_cancelled_before_read(self, sse_frame):
        """Test that a set token aborts before reading."""
        token = CancellationToken()
        token.cancel("user")

        with pytest.raises(AbortedError) as exc_info:
            decode_sse_stream([sse_frame("a").encode()], lambda t: None, token)

        assert exc_info.value.reason == "user"

    def test_cancelled_between_reads(self, sse_frame):
        """Test that cancellation is observed at the next read."""
        token = CancellationToken()
        tokens = []

        def on_token(text):
            tokens.append(text)
            token.cancel()

        chunks = [sse_frame("a").encode(), sse_frame("b").encode()]

        with pytest.raises(AbortedError):
            decode_sse_stream(chunks, on_token, token)

        assert tokens == ["a"]

    def test_crlf_frame_separator(self):
        """Test that CRLF blank lines end a frame before the stream closes."""
        tokens = []
        frame = 'data: {"choices": [{"delta": {"content": "q"}}]}\r\n\r\n'

        def chunks():
            yield frame[:-2].encode()
            yield frame[-2:].encode()
            assert tokens == ["q"]
            yield b'data: {"choices": [{"delta": {"content": "r"}}]}\r\n\r\n'

        assert decode_sse_stream(chunks(), tokens.append) == "qr"

    def test_chunk_arriving_after_cancel_is_dropped(self, sse_frame):
        """Test that a read that completes after cancellation is not decoded."""
        token = CancellationToken()
        tokens = []

        def chunks():
            yield sse_frame("feat").encode()
            token.cancel("user")
            yield sse_frame(" more").encode()

        with pytest.raises(AbortedError):
            decode_sse_stream(chunks(), tokens.append, token)

        assert tokens == ["feat"]
