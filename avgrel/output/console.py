"""Console output abstraction.

Services report progress through ``ConsoleProtocol`` rather than printing
directly. The CLI wires in ``RichConsole``; tests use ``MockConsole`` and
assert on the captured records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from rich.text import Text

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    STEP = auto()  # pipeline stage marker
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Interface for styled operator output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def step(self, message: str) -> None:
        """Announce the start of a pipeline stage."""
        ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...


class RichConsole:
    """Production console backed by ``rich``."""

    def __init__(self) -> None:
        from rich.console import Console

        self._console = Console(highlight=False, soft_wrap=True)
        self._err_console = Console(stderr=True, highlight=False, soft_wrap=True)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.STEP: "bold",
            Style.HEADER: "blue bold",
        }

    @staticmethod
    def _prefixed(prefix: str, style: str, message: str) -> Text:
        from rich.text import Text

        return Text.assemble((prefix, style), " ", message)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        # build logs may contain "[...]" that rich would parse as markup
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def step(self, message: str) -> None:
        self._console.print(self._prefixed("[!]", "bold", message))

    def success(self, message: str) -> None:
        self._console.print(self._prefixed("OK", "green", message))

    def error(self, message: str) -> None:
        self._err_console.print(self._prefixed("error:", "red bold", message))

    def warning(self, message: str) -> None:
        self._console.print(self._prefixed("warning:", "yellow", message))

    def info(self, message: str) -> None:
        self._console.print(self._prefixed("info:", "cyan", message))

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(message, style="blue bold", markup=False)


@dataclass
class OutputRecord:
    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console that captures output for tests."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def step(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"[!] {message}", Style.STEP))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]
