"""
Tests unitarios para la jerarquía de errores del parser.
"""

import pytest

from eventsource_parse._errors import EventStreamDecodeError, EventStreamError, InvalidChunkError


class TestEventStreamDecodeError:
    """Tests para EventStreamDecodeError."""

    def test_is_library_error(self):
        error = EventStreamDecodeError(message="invalid start byte", line=b"data: \xff")

        assert isinstance(error, EventStreamError)
        assert isinstance(error, RuntimeError)

    def test_str_with_position(self):
        error = EventStreamDecodeError(message="invalid start byte", line=b"data: \xff", position=0)
        s = str(error)

        assert "EventStreamDecodeError" in s
        assert "position=0" in s
        assert "invalid start byte" in s
        assert "7 bytes" in s

    def test_str_without_position(self):
        error = EventStreamDecodeError(message="boom", line=b"")

        assert "position" not in str(error)

    def test_to_dict(self):
        error = EventStreamDecodeError(
            message="invalid start byte", line=b"data: \xff", encoding="utf-8", position=0
        )

        assert error.to_dict() == {
            "message": "invalid start byte",
            "encoding": "utf-8",
            "position": 0,
            "line": "data: \\xff",
        }

    def test_can_be_raised_and_caught_as_base(self):
        with pytest.raises(EventStreamError):
            raise EventStreamDecodeError(message="x", line=b"x")


class TestInvalidChunkError:
    """Tests para InvalidChunkError."""

    def test_is_type_error(self):
        error = InvalidChunkError(chunk_type="str")

        assert isinstance(error, TypeError)
        assert isinstance(error, EventStreamError)

    def test_str_and_to_dict(self):
        error = InvalidChunkError(chunk_type="int")

        assert "chunk_type='int'" in str(error)
        assert error.to_dict() == {"chunk_type": "int"}
