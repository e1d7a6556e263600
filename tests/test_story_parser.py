"""Tests for story keyword extraction."""

from agents.story_test_agent.story_parser import parse_story


class TestParseStory:

    def test_quoted_phrases_become_lowercase_entities(self):
        parsed = parse_story('As a shopper I want to add a "Cart Item" to my basket')
        assert "cart item" in parsed.entities

    def test_long_words_are_entities_short_words_are_not(self):
        parsed = parse_story("Show the invoice list")
        assert {"show", "invoice", "list"} <= parsed.entities
        assert "the" not in parsed.entities

    def test_stopwords_are_excluded(self):
        parsed = parse_story("As a user I want that report with filters")
        assert "user" not in parsed.entities
        assert "want" not in parsed.entities
        assert "that" not in parsed.entities
        assert "with" not in parsed.entities
        assert {"report", "filters"} <= parsed.entities

    def test_punctuation_is_stripped_from_tokens(self):
        parsed = parse_story("Customers, orders; and payments.")
        assert {"customers", "orders", "payments"} <= parsed.entities

    def test_action_verbs_are_collected(self):
        parsed = parse_story("Users can add, edit and delete a todo, then search and filter")
        assert parsed.actions == {"add", "edit", "delete", "search", "filter"}

    def test_empty_input_yields_empty_sets(self):
        parsed = parse_story("")
        assert parsed.entities == set()
        assert parsed.actions == set()
        assert parsed.raw_text == ""

    def test_is_deterministic(self):
        story = 'Update the "Profile Card" avatar and remove stale badges'
        assert parse_story(story) == parse_story(story)

    def test_entities_are_never_empty_strings(self):
        parsed = parse_story('Pay "" now !!! ---')
        assert "" not in parsed.entities
        assert parsed.entities == set()
