from typing import Iterable, Optional, Protocol

from .models import CodebaseIndex, SearchResult


class SymbolMatcher(Protocol):
    """Decides whether a symbol name is relevant to a set of story entities."""

    def matches(self, symbol_name: str, entities: Iterable[str]) -> bool:
        ...


class SubstringMatcher:
    """Case-insensitive containment in either direction; first hit wins."""

    def matches(self, symbol_name: str, entities: Iterable[str]) -> bool:
        name = symbol_name.lower()
        for entity in entities:
            if entity in name or name in entity:
                return True
        return False


def search_components(
    index: CodebaseIndex,
    entities: Iterable[str],
    matcher: Optional[SymbolMatcher] = None,
) -> SearchResult:
    """Return the interfaces and classes whose names relate to any entity.

    Index order is preserved and each symbol appears at most once.
    """
    matcher = matcher or SubstringMatcher()
    entity_list = list(entities)

    matched_interfaces = [iface for iface in index.interfaces if matcher.matches(iface.name, entity_list)]
    matched_classes = [cls for cls in index.classes if matcher.matches(cls.name, entity_list)]

    return SearchResult(matched_interfaces=matched_interfaces, matched_classes=matched_classes)
