from __future__ import annotations

import pyte


class TerminalEmulator:
    """Virtual terminal using pyte to reconstruct the screen from raw PTY output.

    The status parser deliberately works on stripped text, which keeps lines
    a real terminal would have overwritten in place. When a transcript is
    misclassified, comparing the stripped window with what this emulator
    actually shows is the quickest way to see which redraw fooled it.
    """

    def __init__(self, rows: int = 40, cols: int = 120):
        """Initialize the terminal emulator with a virtual screen.

        Args:
            rows: Number of rows in the virtual terminal. Defaults to 40.
            cols: Number of columns in the virtual terminal. Defaults to 120.
        """
        self.rows = rows
        self.cols = cols
        self.screen = pyte.Screen(cols, rows)
        self.stream = pyte.Stream(self.screen)

    def feed(self, data: bytes | str) -> None:
        """Feed raw PTY output into the emulator.

        Args:
            data: Raw bytes or a string from the PTY. Bytes are decoded
                as UTF-8 with replacement characters for invalid sequences.
        """
        if isinstance(data, bytes):
            data = data.decode("utf-8", errors="replace")
        self.stream.feed(data)

    def get_display(self) -> list[str]:
        """Return all screen lines, right-stripped of trailing whitespace."""
        return [line.rstrip() for line in self.screen.display]

    def get_text(self) -> str:
        """Return the visible screen as text, trailing blank rows dropped."""
        lines = self.get_display()
        while lines and not lines[-1]:
            lines.pop()
        return "\n".join(lines)

    def reset(self) -> None:
        self.screen.reset()
