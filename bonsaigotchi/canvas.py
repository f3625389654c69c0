from typing import List, Tuple

from bonsaigotchi import constants as C

Color = Tuple[int, int, int]
Cell = Tuple[str, Color]

BLANK = " "


class Canvas:
    """Character and colour grid produced by one render. Row-major, (0, 0) is top left."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"canvas size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._chars = [[BLANK] * width for _ in range(height)]
        self._colors = [[C.COLOR_BG] * width for _ in range(height)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def set(self, x: int, y: int, char: str, color: Color):
        if self.in_bounds(x, y):
            self._chars[y][x] = char
            self._colors[y][x] = color

    def set_char(self, x: int, y: int, char: str):
        if self.in_bounds(x, y):
            self._chars[y][x] = char

    def set_color(self, x: int, y: int, color: Color):
        if self.in_bounds(x, y):
            self._colors[y][x] = color

    def char_at(self, x: int, y: int) -> str:
        if self.in_bounds(x, y):
            return self._chars[y][x]
        return BLANK

    def color_at(self, x: int, y: int) -> Color:
        if self.in_bounds(x, y):
            return self._colors[y][x]
        return C.COLOR_BG

    def cell(self, x: int, y: int) -> Cell:
        return self.char_at(x, y), self.color_at(x, y)

    def is_blank(self, x: int, y: int) -> bool:
        return self.char_at(x, y) == BLANK

    def cells(self):
        """Yields (x, y, char, color) for every cell, row by row."""
        for y in range(self.height):
            for x in range(self.width):
                yield x, y, self._chars[y][x], self._colors[y][x]

    def rows(self) -> List[str]:
        return ["".join(row) for row in self._chars]

    def to_text(self) -> str:
        return "\n".join(self.rows())

    def __eq__(self, other):
        if not isinstance(other, Canvas):
            return NotImplemented
        return (self.width == other.width and self.height == other.height
                and self._chars == other._chars and self._colors == other._colors)

    def __repr__(self):
        return f"Canvas({self.width}x{self.height})"

    def __str__(self):
        return self.to_text()
