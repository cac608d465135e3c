from genstudio.session.patcher import apply_section_patch


def test_replaces_fragment() -> None:
    result = apply_section_patch("ABCxyzDEF", "xyz", "123")

    assert result.text == "ABC123DEF"
    assert result.applied is True


def test_missing_fragment_is_soft_noop() -> None:
    result = apply_section_patch("ABCxyzDEF", "qqq", "123")

    assert result.text == "ABCxyzDEF"
    assert result.applied is False


def test_only_first_occurrence_is_replaced() -> None:
    assert apply_section_patch("one two one", "one", "1").text == "1 two one"


def test_fragment_is_matched_literally() -> None:
    text = "Price: $10 (limited)."

    assert apply_section_patch(text, "$10 (limited)", "$8").text == "Price: $8."
    assert apply_section_patch(text, "$1.", "x").applied is False


def test_empty_fragment_is_noop() -> None:
    assert apply_section_patch("abc", "", "zzz").applied is False
