"""
Version ordering for dependency coordinates.

Components are split on '.' and '-'. Numeric components compare
numerically, a trailing qualifier (alpha01, rc1) sorts before the plain
release, and a '+' component (dynamic version) sorts above any number.
"""
import re
from functools import total_ordering
from typing import Tuple

_SPLIT = re.compile(r"[.\-]")

# (kind, value) where kind orders qualifier < number < dynamic
_QUALIFIER, _NUMBER, _DYNAMIC = 0, 1, 2


def _component(part: str) -> Tuple[int, object]:
    if part == "+":
        return (_DYNAMIC, 0)
    if part.isdigit():
        return (_NUMBER, int(part))
    return (_QUALIFIER, part.lower())


@total_ordering
class Version:
    """Comparable dependency version"""

    def __init__(self, text: str):
        self.text = str(text).strip()
        parts = [p for p in _SPLIT.split(self.text) if p]
        self._key = tuple(_component(p) for p in parts)

    @property
    def major(self) -> str:
        """First component, used to detect incompatible versions"""
        if not self._key:
            return ""
        kind, value = self._key[0]
        return "+" if kind == _DYNAMIC else str(value)

    @property
    def is_dynamic(self) -> bool:
        return self.text.endswith("+")

    def _padded(self, length: int) -> Tuple:
        # missing components count as zero: 1.0 == 1.0.0 and 1.0-rc1 < 1.0
        return self._key + ((_NUMBER, 0),) * (length - len(self._key))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        length = max(len(self._key), len(other._key))
        return self._padded(length) == other._padded(length)

    def __lt__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        length = max(len(self._key), len(other._key))
        return self._padded(length) < other._padded(length)

    def __hash__(self) -> int:
        key = self._key
        while key and key[-1] == (_NUMBER, 0):
            key = key[:-1]
        return hash(key)

    def __repr__(self) -> str:
        return f"Version({self.text!r})"

    def __str__(self) -> str:
        return self.text
