"""Error types raised while probing and rendering."""

from __future__ import annotations


class WhatError(Exception):
    """Base class for every error raised by what-device."""


class ProbeError(WhatError):
    """A probe could not produce its fact from the underlying source."""


class CommandFailed(WhatError):
    """A command's probe failed; carries the command-specific context."""

    def __init__(self, context: str) -> None:
        super().__init__(context)
        self.context = context

    def __str__(self) -> str:
        if self.__cause__ is None:
            return self.context
        cause = str(self.__cause__) or type(self.__cause__).__name__
        return f"{self.context}: {cause}"


class RenderError(WhatError):
    """A result could not be encoded to structured output."""
