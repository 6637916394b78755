"""Composable substring filters.

A :class:`Filter` holds an ordered list of patterns and matches a subject
string when the subject contains at least one of them.  Patterns may
themselves be filters, which gives "any of these filters" semantics without a
separate combinator type.  The built-in extension filters used to classify
template files live here as well.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Union

Pattern = Union[str, "Filter"]


class Filter:
    """An ordered set of substring patterns.

    Matching is case-sensitive substring containment.  An empty filter
    matches nothing; callers that want "no filter configured" to mean "match
    everything" must check :attr:`patterns` themselves.
    """

    __slots__ = ("_patterns",)

    def __init__(self, patterns: Iterable[Pattern] = ()) -> None:
        self._patterns: list[Pattern] = list(patterns)

    @classmethod
    def with_patterns(cls, patterns: Iterable[Pattern]) -> Filter:
        return cls(patterns)

    @classmethod
    def combine(cls, *filters: Filter | None) -> Filter | None:
        """Return a filter matching whenever any of *filters* matches.

        ``None`` entries are skipped.  Returns ``None`` when nothing is left,
        and the filter itself when exactly one remains.
        """
        present = [f for f in filters if f is not None]
        if not present:
            return None
        if len(present) == 1:
            return present[0]
        return cls(present)

    @property
    def patterns(self) -> tuple[Pattern, ...]:
        return tuple(self._patterns)

    def add_pattern(self, pattern: Pattern) -> Filter:
        """Return a new filter with *pattern* appended; ``self`` is unchanged."""
        return Filter([*self._patterns, pattern])

    def replace_patterns(self, patterns: Iterable[Pattern]) -> None:
        """Replace the whole pattern set in place."""
        self._patterns = list(patterns)

    def matches(self, subject: str) -> bool:
        for pattern in self._patterns:
            if isinstance(pattern, Filter):
                if pattern.matches(subject):
                    return True
            elif pattern in subject:
                return True
        return False

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Filter):
            return NotImplemented
        return self._patterns == other._patterns

    def __repr__(self) -> str:
        return f"Filter({self._patterns!r})"


# ---------------------------------------------------------------------------
# Built-in classification filters (matched against file extensions)
# ---------------------------------------------------------------------------

# Build byproducts that are never rendered or copied.
AUXILIARY_FILTER = Filter.with_patterns([
    "aux",
    "log",
    "out",
    "toc",
    "fls",
    "fdb_latexmk",
    "synctex.gz",
    "bbl",
    "blg",
    "run.xml",
    "nav",
    "snm",
    "vrb",
    "xdv",
    "pdf",
    "tmp",
    "bak",
])

# Binary assets copied verbatim, never passed through the template compiler.
IMAGE_FILTER = Filter.with_patterns([
    "png",
    "jpg",
    "jpeg",
    "gif",
    "svg",
    "bmp",
    "webp",
    "ico",
    "tif",
    "tiff",
    "eps",
    "ps",
    "ai",
    "raw",
    "xcf",
])
