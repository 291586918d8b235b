"""Tests for the modified UTF-8 codec."""

from __future__ import annotations

import pytest

from daykit import mutf8


class TestEncode:
    """Test encoding."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("A", b"A"),
            ("\x00", b"\xc0\x80"),
            ("é", b"\xc3\xa9"),
            ("€", b"\xe2\x82\xac"),
            ("\U0001f600", b"\xed\xa0\xbd\xed\xb8\x80"),
        ],
    )
    def test_known_encodings(self, text: str, expected: bytes):
        """Test the byte forms written by DataOutput.writeUTF."""
        assert mutf8.encode(text) == expected

    def test_encoded_length(self):
        """Test encoded_length agrees with encode."""
        text = "a\x00é€\U0001f600"

        assert mutf8.encoded_length(text) == 14
        assert mutf8.encoded_length(text) == len(mutf8.encode(text))


class TestDecode:
    """Test decoding."""

    def test_decodes_supplementary_characters(self):
        """Test surrogate pairs join back into one character."""
        assert mutf8.decode(b"\xed\xa0\xbd\xed\xb8\x80") == "\U0001f600"

    def test_decodes_two_byte_nul(self):
        """Test the two byte NUL form."""
        assert mutf8.decode(b"a\xc0\x80b") == "a\x00b"

    def test_mixed_text(self):
        """Test text mixing all byte widths."""
        text = "Grüße, 日本語 \U0001f600"

        assert mutf8.decode(mutf8.encode(text)) == text

    @pytest.mark.parametrize(
        "data,offset",
        [
            (b"\xc3", 0),
            (b"ab\xe2\x82", 2),
            (b"\xc3\x41", 1),
            (b"\xff", 0),
            (b"\x80", 0),
        ],
    )
    def test_malformed_input(self, data: bytes, offset: int):
        """Test broken sequences raise MalformedInput with the byte offset."""
        with pytest.raises(mutf8.MalformedInput) as exc_info:
            mutf8.decode(data)

        assert exc_info.value.offset == offset
