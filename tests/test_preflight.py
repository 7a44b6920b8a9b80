import pytest

from preflight import SENSITIVE_TERMS, advise


def test_short_prompt_is_its_own_summary():
    adv = advise("a cat on a skateboard")
    assert adv.summary == "a cat on a skateboard"
    assert adv.suggested_prompt == "a cat on a skateboard"


def test_long_prompt_summary_is_truncated_with_ellipsis():
    prompt = "x" * 500
    adv = advise(prompt)
    assert adv.summary == "x" * 140 + "..."
    assert len(adv.summary) == 143


def test_frames_prefer_sentences():
    adv = advise("A dog runs. It jumps! Does it fly? It lands. The end.")
    assert adv.frames == ["A dog runs", "It jumps", "Does it fly"]


def test_frames_fall_back_to_commas():
    adv = advise("sunrise over hills, a rider appears, dust everywhere, birds scatter")
    assert adv.frames == ["sunrise over hills", "a rider appears", "dust everywhere"]


def test_frames_with_no_separators_are_the_prompt():
    adv = advise("a cat")
    assert adv.frames == ["a cat"]


def test_frames_last_resort_is_first_80_chars():
    adv = advise(",,,")
    assert adv.frames == [",,,"]


def test_empty_prompt_gives_degenerate_advisory():
    adv = advise("")
    assert adv.summary == ""
    assert adv.frames == []
    assert adv.warnings == []
    assert adv.approved is True


@pytest.mark.parametrize("prompt", [
    "word " * 100,
    "One. Two. Three. Four. Five.",
    "a, b, c, d, e, f",
    "x" * 1000,
])
def test_frames_and_summary_are_bounded(prompt):
    adv = advise(prompt)
    assert len(adv.frames) <= 3
    assert len(adv.summary) <= 143


def test_sensitive_term_blocks_approval():
    adv = advise("I will build a bomb")
    assert adv.approved is False
    assert any('"bomb"' in w for w in adv.warnings)


def test_sensitive_terms_match_any_case():
    adv = advise("TERROR in the streets, Drugs everywhere")
    assert len(adv.warnings) == 2
    assert adv.approved is False


def test_every_denylisted_term_is_reported():
    adv = advise(" ".join(SENSITIVE_TERMS))
    assert len(adv.warnings) == len(SENSITIVE_TERMS)


def test_clean_prompt_is_approved():
    adv = advise("a calm lake at dawn")
    assert adv.warnings == []
    assert adv.approved is True


@pytest.mark.parametrize("quality,resolution,expected", [
    ("fast", "720p", 5),
    ("fast", "1080p", 20),
    ("standard", "1080p", 80),
    ("standard", "720p", 40),
    ("quality", "4k", 40),
])
def test_time_estimate(quality, resolution, expected):
    assert advise("a cat", "16:9", resolution, quality).estimated_time_seconds == expected
