from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from app.intelligence.models import ReplyCategory
from app.intelligence.reply_templates import (
    ANGER_REPLY,
    ANXIETY_REPLY,
    COPING_QUESTION_REPLY,
    CRISIS_REPLY,
    DEPRESSION_REPLY,
    GENERAL_REPLY,
    GRATITUDE_REPLY,
    GREETING_REPLY,
    HELP_MENU_REPLY,
    IMPROVEMENT_REPLY,
    LONELINESS_REPLY,
    QUESTION_REPLY,
    RESOURCE_REPLY,
    SLEEP_REPLY,
    STRESS_REPLY,
)

_CRISIS_TOKENS = (
    "suicide",
    "suicidal",
    "kill myself",
    "killing myself",
    "end my life",
    "ending my life",
    "end it all",
    "take my own life",
    "want to die",
    "wanna die",
    "better off dead",
    "no reason to live",
    "don't want to live",
    "dont want to live",
    "don't want to be alive",
    "self-harm",
    "self harm",
    "hurt myself",
    "harm myself",
    "cut myself",
    "cutting myself",
    "rather die",
    "rather be dead",
    "wish i was dead",
    "wish i were dead",
    "want to be dead",
    "overdose",
    "jump off",
    "want to disappear",
    "no point in living",
    "can't go on",
)
_CRISIS_WHOLE_WORDS = ("kill me",)
_HELP_CUE_TOKENS = ("need", "please", "can you")
_ANXIETY_TOKENS = (
    "anxiety",
    "anxious",
    "panic",
    "nervous",
    "worried",
    "worrying",
    "on edge",
)
_DEPRESSION_TOKENS = (
    "depressed",
    "depression",
    "sad",
    "hopeless",
    "helpless",
    "feeling down",
    "feel down",
    "feeling low",
    "feel low",
    "empty inside",
    "worthless",
    "miserable",
    "unhappy",
    "crying",
)
_STRESS_TOKENS = (
    "stress",
    "overwhelm",
    "pressure",
    "burnout",
    "burned out",
    "burnt out",
    "too much to do",
    "deadline",
)
_SLEEP_TOKENS = (
    "sleep",
    "insomnia",
    "asleep",
    "nightmare",
    "exhausted",
    "tired",
    "awake at night",
    "can't rest",
)
_RESOURCE_TOKENS = (
    "therapist",
    "therapy",
    "counselor",
    "counsellor",
    "counseling",
    "counselling",
    "psychiatrist",
    "psychologist",
    "professional help",
    "support group",
    "resource",
)
_GREETING_PATTERN = re.compile(
    r"^(hi|hello|hey|hiya|howdy|greetings|good (morning|afternoon|evening))\b"
)
_QUESTION_PATTERN = re.compile(
    r"^(what|how|why|when|where|who|which|can|could|should|would|is|are|do|does)\b"
)
_COPING_TOKENS = ("cope", "coping", "handle", "handling", "deal with", "manage")
_GRATITUDE_TOKENS = ("thank", "grateful", "appreciate")
_IMPROVEMENT_TOKENS = (
    "better",
    "great",
    "happy",
    "improving",
    "improved",
    "progress",
    "proud",
)
_IMPROVEMENT_WHOLE_WORDS = ("good",)
_LONELINESS_TOKENS = (
    "lonely",
    "loneliness",
    "alone",
    "isolated",
    "no friends",
    "no one to talk",
    "nobody to talk",
)
_ANGER_TOKENS = (
    "angry",
    "anger",
    "furious",
    "mad at",
    "so mad",
    "frustrated",
    "irritated",
    "annoyed",
    "rage",
)


@dataclass(frozen=True)
class TriageRule:
    category: ReplyCategory
    matches: Callable[[str], bool]
    template: Callable[[str], str]


def _token_pattern(
    tokens: tuple[str, ...],
    whole_words: tuple[str, ...] = (),
) -> re.Pattern[str]:
    # Tokens are anchored at a word start, so "stress" still matches "stressed"
    # while "anger" does not match "dangerous". Whole words are also anchored at
    # the word end: "good" must not match "goodbye".
    alternatives = [re.escape(token) for token in tokens]
    alternatives.extend(re.escape(word) + r"\b" for word in whole_words)
    return re.compile(r"\b(?:" + "|".join(alternatives) + ")")


def _contains_any(
    tokens: tuple[str, ...],
    whole_words: tuple[str, ...] = (),
) -> Callable[[str], bool]:
    pattern = _token_pattern(tokens, whole_words)
    return lambda text: pattern.search(text) is not None


def _fixed(reply: str) -> Callable[[str], str]:
    return lambda _text: reply


_HELP_PATTERN = _token_pattern((), whole_words=("help",))
_HELP_CUE_PATTERN = _token_pattern(_HELP_CUE_TOKENS)
_COPING_PATTERN = _token_pattern(_COPING_TOKENS)


def _is_help_request(text: str) -> bool:
    return _HELP_PATTERN.search(text) is not None and _HELP_CUE_PATTERN.search(text) is not None


def _question_reply(text: str) -> str:
    if _COPING_PATTERN.search(text):
        return COPING_QUESTION_REPLY
    return QUESTION_REPLY


# Order is the precedence: crisis phrasing often co-occurs with "help" or "sad".
TRIAGE_RULES: tuple[TriageRule, ...] = (
    TriageRule(
        ReplyCategory.CRISIS,
        _contains_any(_CRISIS_TOKENS, _CRISIS_WHOLE_WORDS),
        _fixed(CRISIS_REPLY),
    ),
    TriageRule(ReplyCategory.HELP_REQUEST, _is_help_request, _fixed(HELP_MENU_REPLY)),
    TriageRule(ReplyCategory.ANXIETY, _contains_any(_ANXIETY_TOKENS), _fixed(ANXIETY_REPLY)),
    TriageRule(
        ReplyCategory.DEPRESSION, _contains_any(_DEPRESSION_TOKENS), _fixed(DEPRESSION_REPLY)
    ),
    TriageRule(ReplyCategory.STRESS, _contains_any(_STRESS_TOKENS), _fixed(STRESS_REPLY)),
    TriageRule(ReplyCategory.SLEEP, _contains_any(_SLEEP_TOKENS), _fixed(SLEEP_REPLY)),
    TriageRule(
        ReplyCategory.RESOURCE_REQUEST, _contains_any(_RESOURCE_TOKENS), _fixed(RESOURCE_REPLY)
    ),
    TriageRule(
        ReplyCategory.GREETING,
        lambda text: _GREETING_PATTERN.match(text) is not None,
        _fixed(GREETING_REPLY),
    ),
    TriageRule(
        ReplyCategory.QUESTION,
        lambda text: _QUESTION_PATTERN.match(text) is not None,
        _question_reply,
    ),
    TriageRule(
        ReplyCategory.GRATITUDE, _contains_any(_GRATITUDE_TOKENS), _fixed(GRATITUDE_REPLY)
    ),
    TriageRule(
        ReplyCategory.IMPROVEMENT,
        _contains_any(_IMPROVEMENT_TOKENS, _IMPROVEMENT_WHOLE_WORDS),
        _fixed(IMPROVEMENT_REPLY),
    ),
    TriageRule(
        ReplyCategory.LONELINESS, _contains_any(_LONELINESS_TOKENS), _fixed(LONELINESS_REPLY)
    ),
    TriageRule(ReplyCategory.ANGER, _contains_any(_ANGER_TOKENS), _fixed(ANGER_REPLY)),
    TriageRule(ReplyCategory.GENERAL, lambda _text: True, _fixed(GENERAL_REPLY)),
)


def normalize_utterance(text: str) -> str:
    # Fold curly apostrophes so "can't" and "don't" phrases match.
    return text.replace("’", "'").strip().lower()


def match_rule(text: str) -> TriageRule:
    normalized = normalize_utterance(text)
    for rule in TRIAGE_RULES:
        if rule.matches(normalized):
            return rule
    return TRIAGE_RULES[-1]


def classify_reply_category(text: str) -> ReplyCategory:
    return match_rule(text).category


def fallback_reply(text: str) -> str:
    normalized = normalize_utterance(text)
    return match_rule(normalized).template(normalized)
