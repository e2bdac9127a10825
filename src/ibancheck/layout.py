from __future__ import annotations

import string
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import FrozenSet, Optional, Tuple


class CharClass(Enum):
    DIGIT = "F"
    LOWER = "L"
    UPPER = "U"
    ALNUM = "A"
    UPPER_ALNUM = "B"
    LETTER = "C"
    LOWER_ALNUM = "W"

    @property
    def chars(self) -> FrozenSet[str]:
        return _CLASS_CHARS[self]


_CLASS_CHARS = {
    CharClass.DIGIT: frozenset(string.digits),
    CharClass.LOWER: frozenset(string.ascii_lowercase),
    CharClass.UPPER: frozenset(string.ascii_uppercase),
    CharClass.ALNUM: frozenset(string.digits + string.ascii_letters),
    CharClass.UPPER_ALNUM: frozenset(string.digits + string.ascii_uppercase),
    CharClass.LETTER: frozenset(string.ascii_letters),
    CharClass.LOWER_ALNUM: frozenset(string.digits + string.ascii_lowercase),
}

_TAGS = {c.value: c for c in CharClass}
_TOKEN_LEN = 3  # tag + 2-digit count


class LayoutError(ValueError):
    """Descriptor cannot be tokenized (unknown tag, bad or truncated count)."""

    def __init__(self, descriptor: str, position: int, reason: str):
        super().__init__(f"Invalid BBAN layout {descriptor!r} at position {position}: {reason}")
        self.descriptor = descriptor
        self.position = position
        self.reason = reason


@dataclass(frozen=True)
class Segment:
    char_class: CharClass
    count: int


def parse_layout(descriptor: str) -> Tuple[Segment, ...]:
    """Rozloží deskriptor typu ``F04A12`` na posloupnost segmentů."""
    if not descriptor:
        raise LayoutError(descriptor, 0, "empty descriptor")
    segments = []
    pos = 0
    while pos < len(descriptor):
        tag = descriptor[pos]
        cls = _TAGS.get(tag)
        if cls is None:
            raise LayoutError(descriptor, pos, f"unknown class tag {tag!r}")
        count_str = descriptor[pos + 1 : pos + _TOKEN_LEN]
        if len(count_str) != 2:
            raise LayoutError(descriptor, pos + 1, "truncated repeat count")
        # str.isdigit() also accepts non-ASCII digits
        if not all(ch in string.digits for ch in count_str):
            raise LayoutError(descriptor, pos + 1, f"repeat count {count_str!r} is not a 2-digit number")
        segments.append(Segment(char_class=cls, count=int(count_str)))
        pos += _TOKEN_LEN
    return tuple(segments)


@dataclass(frozen=True)
class StructuralMatcher:
    """Compiled layout: checks a BBAN segment by segment without regex.

    Instances are cached by compile_layout and shared process-wide.
    """

    segments: Tuple[Segment, ...]
    length: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "length", sum(s.count for s in self.segments))

    def first_mismatch(self, candidate: str) -> Optional[int]:
        """Index of the first offending character, or None when the candidate matches.

        A candidate that is too short reports its own length; one that is too
        long reports the expected length.
        """
        pos = 0
        end = 0
        for seg in self.segments:
            end += seg.count
            allowed = seg.char_class.chars
            for ch in candidate[pos:end]:
                if ch not in allowed:
                    return pos
                pos += 1
            if pos < end:
                # candidate ran out inside this segment
                return pos
        if len(candidate) != self.length:
            return self.length
        return None

    def matches(self, candidate: str) -> bool:
        return self.first_mismatch(candidate) is None

    def __repr__(self) -> str:
        fmt = "".join(f"{s.char_class.value}{s.count:02d}" for s in self.segments)
        return f"StructuralMatcher({fmt!r})"


@lru_cache(maxsize=256)
def compile_layout(descriptor: str) -> StructuralMatcher:
    return StructuralMatcher(parse_layout(descriptor))
