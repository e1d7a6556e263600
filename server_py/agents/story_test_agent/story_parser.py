import re
from typing import Set

from .constants import ACTION_VERBS, STOPWORDS
from .models import ParsedStory

_QUOTED_PATTERN = re.compile(r'"([^"]+)"')
_NON_WORD = re.compile(r"[^a-z0-9]")


def parse_story(story_text: str) -> ParsedStory:
    """Extract candidate entity and action keywords from a user story.

    Quoted phrases are taken verbatim (lower-cased). Every other word longer
    than three characters that is not a stopword becomes an entity, and words
    from the action vocabulary become actions.
    """
    entities: Set[str] = set()
    actions: Set[str] = set()

    for quoted in _QUOTED_PATTERN.findall(story_text):
        entities.add(quoted.lower())

    for token in story_text.lower().split():
        word = _NON_WORD.sub("", token)
        if not word:
            continue
        if len(word) > 3 and word not in STOPWORDS:
            entities.add(word)
        if word in ACTION_VERBS:
            actions.add(word)

    return ParsedStory(raw_text=story_text, entities=entities, actions=actions)
