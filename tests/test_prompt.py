import pytest

from storybook_api.features.images.prompt import FALLBACK_SUMMARY, build_prompt, summarize


@pytest.mark.parametrize("text", ["", None, "   ", "** __ ``"])
@pytest.mark.parametrize("max_length", [10, 50, 200])
def test_empty_text_falls_back(text, max_length):
    assert summarize(text, max_length) == FALLBACK_SUMMARY


def test_short_text_is_returned_whole():
    assert summarize("The fox ran home.") == "The fox ran home."


def test_markup_and_whitespace_are_cleaned():
    assert summarize("**Bold**   _move_\n\t`here`") == "Bold move here"


def test_long_words_are_truncated_with_ellipsis():
    text = " ".join(["Supercalifragilisticexpialidocious"] * 3)
    out = summarize(text, 50)
    assert len(out) == 50
    assert out.endswith("...")
    assert out == text[:47] + "..."


@pytest.mark.parametrize("max_length", [10, 20, 35, 50, 80])
def test_truncation_respects_budget(max_length):
    text = "Wonderfully enormous elephants wandered endlessly across shimmering grasslands " * 3
    out = summarize(text, max_length)
    assert len(out) <= max_length
    assert out.endswith("...")


def test_word_cap_appends_ellipsis_without_truncating():
    text = "one two three four five six seven eight nine ten eleven twelve"
    out = summarize(text, 50)
    # 10 words fit in the budget; the ellipsis itself may run past it
    assert out == "one two three four five six seven eight nine ten..."
    assert len(out) <= 50 + 3


def test_word_cap_is_bounded_at_fifteen():
    words = [f"w{i}" for i in range(30)]
    out = summarize(" ".join(words), 200)
    assert out == " ".join(words[:15]) + "..."


def test_small_budget():
    assert summarize("hello wonderful world", 10) == "hello w..."


def test_build_prompt_contains_scene_and_style():
    summary = summarize("A brave little turtle climbs the tallest hill in town.")
    prompt = build_prompt(summary)
    assert prompt.startswith("Children's storybook illustration, whimsical and bright style.")
    assert f"Scene showing: {summary}" in prompt
    assert prompt.endswith(summary)


def test_build_prompt_is_deterministic():
    assert build_prompt("x") == build_prompt("x")
