"""Maps character offsets to editor rows/columns."""

from __future__ import annotations

from bisect import bisect_right

from curlbridge.models.errors import SourceSpan


class LineIndex:
    """Offset → (row, column) over the original multi-line text.

    Continuation lines are real newlines in the text, so a ``\\`` + newline
    moves the following tokens to the next row and resets the column.
    """

    def __init__(self, text: str) -> None:
        self._length = len(text)
        self._line_starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                self._line_starts.append(i + 1)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def position(self, offset: int) -> tuple[int, int]:
        offset = max(0, min(offset, self._length))
        row = bisect_right(self._line_starts, offset) - 1
        return row, offset - self._line_starts[row]

    def offset(self, row: int, column: int) -> int:
        """Inverse of :meth:`position`; out-of-range values are clamped."""
        row = max(0, min(row, len(self._line_starts) - 1))
        return max(0, min(self._line_starts[row] + column, self._length))

    def span(self, start: int, end: int) -> SourceSpan:
        row, column = self.position(start)
        end_row, end_column = self.position(end)
        return SourceSpan(row=row, column=column, end_row=end_row, end_column=end_column)
