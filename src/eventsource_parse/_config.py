"""
This module holds the parsing options shared by every stage of the pipeline.
Options are validated with pydantic; the debug flag falls back to an environment variable.
"""

from __future__ import annotations

import codecs
import os
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ENV_DEBUG = "EVENTSOURCE_PARSE_DEBUG"

_SPLIT_CHARS = "\r\n: "

DecodeErrors = Literal["strict", "replace", "ignore", "backslashreplace"]


def debug_from_env() -> bool:
    """Return True when EVENTSOURCE_PARSE_DEBUG is set to a truthy value."""
    return os.getenv(ENV_DEBUG, "").lower() in {"1", "true", "yes", "on"}


class ParseOptions(BaseModel):
    """
    Decoding and diagnostics options for the event stream parser.
    Instances are immutable so a single one can be shared between pipelines.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)
    encoding: str = "utf-8"
    errors: DecodeErrors = "strict"
    debug: bool = Field(default_factory=debug_from_env)

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codec = codecs.lookup(value)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {value!r}") from e
        # Lines are split on the raw bytes of "\r", "\n" and ":".
        try:
            ascii_compatible = codec.encode(_SPLIT_CHARS)[0] == _SPLIT_CHARS.encode("ascii")
        except (UnicodeError, TypeError):
            ascii_compatible = False
        if not ascii_compatible:
            raise ValueError(f"encoding {value!r} is not ASCII-compatible")
        return value

    @staticmethod
    def from_env_or_value(options: ParseOptions | None) -> ParseOptions:
        """
        Return the given options, or defaults built from the environment.

        Args:
            options: Optional options supplied by the caller.

        Returns:
            A ParseOptions instance ready to be used by a reader.
        """
        return options if options is not None else ParseOptions()
