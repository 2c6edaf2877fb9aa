"""Source position mapping for error reporting."""

from __future__ import annotations

from bisect import bisect_right
from typing import Final

_TAB_STOP: Final = 4
_CONTEXT_LINES: Final = 1


class SourcePositions:
    """Maps character offsets to line/column pairs and UTF-8 byte offsets.

    Line starts act as checkpoints: a lookup finds the nearest line start
    with a binary search and only measures the text between that checkpoint
    and the requested offset.
    """

    def __init__(self, text: str) -> None:
        """Index line starts of text.

        Args:
            text: The source document positions refer to
        """
        self.text: Final = text
        self.line_starts: list[int] = [0]
        self._is_ascii_only: bool = text.isascii()

        start = text.find("\n")
        while start != -1:
            self.line_starts.append(start + 1)
            start = text.find("\n", start + 1)

    def line_index(self, char_pos: int) -> int:
        """Zero-based index of the line holding char_pos."""
        return bisect_right(self.line_starts, char_pos) - 1

    def locate(self, char_pos: int) -> tuple[int, int]:
        """Convert a character offset into a 1-based (line, column) pair.

        Args:
            char_pos: Character position in the source text

        Returns:
            Line and column numbers, both starting at 1
        """
        index = self.line_index(char_pos)
        return index + 1, char_pos - self.line_starts[index] + 1

    def char_to_byte(self, char_pos: int) -> int:
        """Convert a character offset into a UTF-8 byte offset.

        Args:
            char_pos: Character position in the source text

        Returns:
            Byte position in the UTF-8 encoded text
        """
        if self._is_ascii_only:
            return char_pos
        return len(
            self.text[: min(char_pos, len(self.text))].encode(
                "utf-8", "surrogatepass"
            )
        )

    def line_text(self, index: int) -> str:
        start = self.line_starts[index]
        end = self.text.find("\n", start)
        if end == -1:
            end = len(self.text)
        return self.text[start:end].rstrip("\r")

    def snippet(self, start: int, end: int, message: str = "") -> str:
        """Render the lines around a span with a caret underline.

        The underline stops at the end of the first line when the span runs
        over several lines.
        """
        index = self.line_index(start)
        first = max(0, index - _CONTEXT_LINES)
        gutter = len(str(index + 1))

        lines = []
        for number in range(first, index + 1):
            content = self.line_text(number).expandtabs(_TAB_STOP)
            lines.append(f"{number + 1:>{gutter}} | {content}".rstrip())

        line = self.line_text(index)
        column = start - self.line_starts[index]
        last = min(max(end, start + 1) - self.line_starts[index], len(line))
        indent = len(line[:column].expandtabs(_TAB_STOP))
        width = max(1, len(line[:last].expandtabs(_TAB_STOP)) - indent)

        underline = " " * indent + "^" * width
        if message:
            underline = f"{underline} {message}"
        lines.append(f"{'':>{gutter}} | {underline}")
        return "\n".join(lines)
