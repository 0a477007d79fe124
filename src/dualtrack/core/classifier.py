"""Intent classification as an ordered rule table."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .state import Classification, TextMessage, UserIntent

COMMAND_KEYWORDS = ("run", "exec", "test")
CHITCHAT_KEYWORDS = ("hello", "hi ")
CHITCHAT_MAX_LENGTH = 5


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    matches: Callable[[UserIntent | None, str], bool]
    classification: Classification


def _not_text(intent: UserIntent | None, _text: str) -> bool:
    return not isinstance(intent, TextMessage)


def _mentions_command(_intent: UserIntent | None, text: str) -> bool:
    return any(keyword in text for keyword in COMMAND_KEYWORDS)


def _is_small_talk(_intent: UserIntent | None, text: str) -> bool:
    return any(keyword in text for keyword in CHITCHAT_KEYWORDS) or len(text) < CHITCHAT_MAX_LENGTH


# First match wins.
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("non_text_intent", _not_text, Classification.AMBIGUOUS),
    ClassificationRule("command_keyword", _mentions_command, Classification.COMMAND),
    ClassificationRule("small_talk", _is_small_talk, Classification.CHITCHAT),
    ClassificationRule("default", lambda _intent, _text: True, Classification.CODE_QUERY),
)


def intent_text(intent: UserIntent | None) -> str:
    """Return the utterance carried by either intent variant."""
    if intent is None:
        return ""
    return intent.text or ""


def match_rule(intent: UserIntent | None) -> ClassificationRule:
    text = intent_text(intent).lower()
    for rule in CLASSIFICATION_RULES:
        if rule.matches(intent, text):
            return rule
    return CLASSIFICATION_RULES[-1]


def classify_intent(intent: UserIntent | None) -> Classification:
    """Classify one intent; pure and deterministic."""
    return match_rule(intent).classification
