"""Output sinks - where actions report progress."""

from abc import ABC, abstractmethod
from typing import Callable

from rich.console import Console
from rich.markup import escape


class OutputSink(ABC):
    """Accepts one line of text at a time."""

    @abstractmethod
    def write(self, line: str) -> None:
        """Emit a line. Must not buffer."""
        ...


class OutputFunc(OutputSink):
    """Adapts a plain callable to the OutputSink contract.

    ie: ``OutputFunc(lines.append)``
    """

    def __init__(self, func: Callable[[str], None]) -> None:
        self._func = func

    def write(self, line: str) -> None:
        self._func(line)


class ConsoleOutput(OutputSink):
    """Writes lines to a rich Console as they arrive."""

    STYLES = {
        "ERROR:": "bold red",
        "WARNING:": "yellow",
        "INFO:": "cyan",
    }

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def write(self, line: str) -> None:
        style = next((s for prefix, s in self.STYLES.items() if line.startswith(prefix)), None)
        # Remote output may contain square brackets
        self.console.print(escape(line), style=style, highlight=False)
