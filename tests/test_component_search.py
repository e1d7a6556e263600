"""Tests for matching story entities against indexed symbols."""

from typing import Optional, get_type_hints

from agents.story_test_agent.component_search import SubstringMatcher, SymbolMatcher, search_components
from agents.story_test_agent.models import ClassInfo, CodebaseIndex, InterfaceInfo


def _index():
    return CodebaseIndex(
        interfaces=[
            InterfaceInfo(name="CartItem", file_path="/ws/src/cart.ts", is_named_export=True),
            InterfaceInfo(name="UserProfileProps", file_path="/ws/src/profile.tsx", is_named_export=True),
            InterfaceInfo(name="Invoice", file_path="/ws/src/billing.ts", is_default_export=True),
        ],
        classes=[
            ClassInfo(name="CartService", file_path="/ws/src/cart.ts", methods=["addItem"], is_named_export=True),
            ClassInfo(name="Logger", file_path="/ws/src/log.ts", is_named_export=True),
        ],
    )


class TestSearchComponents:

    def test_entity_contained_in_symbol_name(self):
        result = search_components(_index(), {"cart"})
        assert [i.name for i in result.matched_interfaces] == ["CartItem"]
        assert [c.name for c in result.matched_classes] == ["CartService"]

    def test_symbol_name_contained_in_entity(self):
        result = search_components(_index(), {"invoices"})
        assert [i.name for i in result.matched_interfaces] == ["Invoice"]

    def test_match_is_case_insensitive(self):
        result = search_components(_index(), {"profile"})
        assert [i.name for i in result.matched_interfaces] == ["UserProfileProps"]

    def test_symbol_matched_by_several_entities_appears_once(self):
        result = search_components(_index(), {"cart", "cartitem", "item"})
        assert [i.name for i in result.matched_interfaces] == ["CartItem"]

    def test_preserves_index_order(self):
        result = search_components(_index(), {"cart", "invoice", "profile"})
        assert [i.name for i in result.matched_interfaces] == ["CartItem", "UserProfileProps", "Invoice"]

    def test_no_entities_matches_nothing(self):
        result = search_components(_index(), set())
        assert result.is_empty

    def test_every_match_relates_to_some_entity(self):
        entities = {"cart", "log"}
        result = search_components(_index(), entities)
        for symbol in [*result.matched_interfaces, *result.matched_classes]:
            name = symbol.name.lower()
            assert any(e in name or name in e for e in entities)

    def test_custom_matcher_is_used(self):
        class ExactMatcher:
            def matches(self, symbol_name, entities):
                return symbol_name.lower() in entities

        result = search_components(_index(), {"logger", "cart"}, matcher=ExactMatcher())
        assert result.matched_interfaces == []
        assert [c.name for c in result.matched_classes] == ["Logger"]

    def test_explicit_none_matcher_falls_back_to_substring(self):
        result = search_components(_index(), {"cart"}, matcher=None)
        assert [i.name for i in result.matched_interfaces] == ["CartItem"]
        assert get_type_hints(search_components)["matcher"] == Optional[SymbolMatcher]


def test_substring_matcher_directly():
    matcher = SubstringMatcher()
    assert matcher.matches("ShoppingCart", ["cart"])
    assert matcher.matches("Cart", ["shoppingcart"])
    assert not matcher.matches("Order", ["cart"])
