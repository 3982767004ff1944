import pytest

from app.intelligence import reply_templates as templates
from app.intelligence.models import ReplyCategory
from app.intelligence.triage import (
    TRIAGE_RULES,
    classify_reply_category,
    fallback_reply,
)


def test_triage_crisis_beats_sadness_and_help() -> None:
    text = "I'm so sad, please help, I want to end my life"

    assert classify_reply_category(text) == ReplyCategory.CRISIS
    assert fallback_reply(text) == templates.CRISIS_REPLY


def test_triage_crisis_reply_lists_emergency_numbers() -> None:
    reply = fallback_reply("I have been thinking about suicide")

    assert "911" in reply
    assert "988" in reply


def test_triage_crisis_handles_curly_apostrophe() -> None:
    assert classify_reply_category("I don’t want to live anymore") == ReplyCategory.CRISIS


def test_triage_help_request_needs_cue_word() -> None:
    assert classify_reply_category("I need help") == ReplyCategory.HELP_REQUEST
    assert classify_reply_category("Can you help me?") == ReplyCategory.HELP_REQUEST
    assert classify_reply_category("help") == ReplyCategory.GENERAL


def test_triage_help_request_outranks_anxiety() -> None:
    assert classify_reply_category("please help with my anxiety") == ReplyCategory.HELP_REQUEST


def test_triage_anxiety_outranks_depression() -> None:
    assert classify_reply_category("I feel anxious and sad") == ReplyCategory.ANXIETY


def test_triage_sleep_without_depression_keywords() -> None:
    text = "I can't sleep and feel exhausted"

    assert classify_reply_category(text) == ReplyCategory.SLEEP
    assert fallback_reply(text) == templates.SLEEP_REPLY


def test_triage_greeting_is_prefix_match() -> None:
    assert classify_reply_category("hello") == ReplyCategory.GREETING
    assert fallback_reply("hello") == templates.GREETING_REPLY
    assert classify_reply_category("  Good morning!") == ReplyCategory.GREETING
    assert classify_reply_category("hiking was fun") != ReplyCategory.GREETING


def test_triage_question_picks_coping_or_clarifying_template() -> None:
    assert classify_reply_category("How do I cope with exams?") == ReplyCategory.QUESTION
    assert fallback_reply("How do I cope with exams?") == templates.COPING_QUESTION_REPLY
    assert fallback_reply("What is mindfulness?") == templates.QUESTION_REPLY


def test_triage_keywords_match_at_word_start_only() -> None:
    assert classify_reply_category("that road is dangerous") == ReplyCategory.GENERAL
    assert classify_reply_category("I feel stressed out") == ReplyCategory.STRESS


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("I keep having panic attacks", ReplyCategory.ANXIETY),
        ("I've been depressed for weeks", ReplyCategory.DEPRESSION),
        ("work is overwhelming me", ReplyCategory.STRESS),
        ("I think I should find a therapist", ReplyCategory.RESOURCE_REQUEST),
        ("thanks for listening", ReplyCategory.GRATITUDE),
        ("today was a good day", ReplyCategory.IMPROVEMENT),
        ("I feel so lonely lately", ReplyCategory.LONELINESS),
        ("I'm furious at my brother", ReplyCategory.ANGER),
        ("my cat knocked over a plant", ReplyCategory.GENERAL),
    ],
)
def test_triage_categories(text: str, expected: ReplyCategory) -> None:
    assert classify_reply_category(text) == expected


def test_triage_is_deterministic() -> None:
    text = "I feel lonely and nobody calls"

    assert fallback_reply(text) == fallback_reply(text)
    assert classify_reply_category(text) == classify_reply_category(text)


def test_triage_table_covers_every_category_once_and_ends_with_catch_all() -> None:
    categories = [rule.category for rule in TRIAGE_RULES]

    assert categories[0] == ReplyCategory.CRISIS
    assert categories[-1] == ReplyCategory.GENERAL
    assert len(categories) == len(set(categories))
    assert set(categories) == set(ReplyCategory)


def test_triage_empty_input_still_answers() -> None:
    assert classify_reply_category("   ") == ReplyCategory.GENERAL
    assert fallback_reply("") == templates.GENERAL_REPLY


@pytest.mark.parametrize(
    "text",
    [
        "I wish I was dead",
        "I'd rather die than go back there",
        "I want to overdose on my pills",
        "I'm going to jump off a bridge",
        "I just want to disappear",
        "somebody kill me",
        "I can't go on like this",
    ],
)
def test_triage_crisis_phrasings(text: str) -> None:
    assert classify_reply_category(text) == ReplyCategory.CRISIS
    assert fallback_reply(text) == templates.CRISIS_REPLY


def test_triage_short_keywords_need_a_word_end() -> None:
    assert classify_reply_category("goodbye for now") == ReplyCategory.GENERAL
    assert classify_reply_category("I feel helpless and need someone") == ReplyCategory.DEPRESSION
    assert classify_reply_category("I need help tonight") == ReplyCategory.HELP_REQUEST
