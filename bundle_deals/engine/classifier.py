from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from .context import SizeSignals


def normalize_text(value: Optional[str]) -> str:
    """Lower-case, trim and collapse whitespace runs to a single space."""
    if not value:
        return ""
    return " ".join(str(value).lower().split())


@dataclass(frozen=True)
class SignalSource:
    """One place a size can be read from, e.g. the variant title."""

    name: str
    read: Callable[[SizeSignals], Optional[str]]


# Priority order: explicit tag first, free text next, stock code last.
DEFAULT_SOURCES: Tuple[SignalSource, ...] = (
    SignalSource("metafield", lambda s: s.metafield_value),
    SignalSource("title", lambda s: s.title),
    SignalSource("sku", lambda s: s.sku),
)


@dataclass(frozen=True)
class SizeMatch:
    category: str
    source: str
    keyword: str


class SizeClassifier:
    """
    Maps size signals to a size category.

    Sources are tried in order and the first source with any keyword hit
    wins; sources are never merged. Within a source, categories are checked
    in declaration order.
    """

    def __init__(
        self,
        keywords: Mapping[str, Iterable[str]],
        sources: Sequence[SignalSource] = DEFAULT_SOURCES,
    ):
        self._keywords: List[Tuple[str, Tuple[str, ...]]] = []
        for category, kws in keywords.items():
            normalized = tuple(k for k in (normalize_text(kw) for kw in kws) if k)
            self._keywords.append((str(category), normalized))
        self._sources = tuple(sources)

    @property
    def categories(self) -> List[str]:
        return [c for c, _ in self._keywords]

    def _match_text(self, text: str) -> Optional[Tuple[str, str]]:
        for category, kws in self._keywords:
            for kw in kws:
                if kw in text:
                    return category, kw
        return None

    def match(self, signals: SizeSignals) -> Optional[SizeMatch]:
        for source in self._sources:
            text = normalize_text(source.read(signals))
            if not text:
                continue
            hit = self._match_text(text)
            if hit is not None:
                category, kw = hit
                return SizeMatch(category=category, source=source.name, keyword=kw)
        return None

    def classify(self, signals: SizeSignals) -> Optional[str]:
        m = self.match(signals)
        return m.category if m else None
