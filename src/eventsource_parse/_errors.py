from __future__ import annotations
from dataclasses import dataclass
from typing import Any


class EventStreamError(RuntimeError):
    """Error base de la librería."""


@dataclass(slots=True)
class EventStreamDecodeError(EventStreamError):
    """
    Una línea del stream no se pudo decodificar como texto.

    Es un error terminal: el lector que lo propaga queda agotado y no
    produce más elementos. Los bytes originales de la línea se conservan
    en `line` para facilitar el debugging.
    """
    message: str
    line: bytes
    encoding: str = "utf-8"
    position: int | None = None

    def __str__(self) -> str:
        parts = [f"EventStreamDecodeError(encoding={self.encoding!r}"]
        if self.position is not None:
            parts.append(f", position={self.position}")
        parts.append(f", message={self.message!r}")
        parts.append(f", line={len(self.line)} bytes")
        parts.append(")")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convierte el error a dict para logging estructurado."""
        return {
            "message": self.message,
            "encoding": self.encoding,
            "position": self.position,
            "line": self.line.decode("utf-8", "backslashreplace"),
        }


@dataclass(slots=True)
class InvalidChunkError(EventStreamError, TypeError):
    """La fuente entregó un chunk que no es bytes-like (por ejemplo un `str`)."""
    chunk_type: str

    def __str__(self) -> str:
        return (
            f"InvalidChunkError(chunk_type={self.chunk_type!r}, "
            "expected bytes, bytearray or memoryview)"
        )

    def to_dict(self) -> dict[str, Any]:
        return {"chunk_type": self.chunk_type}
