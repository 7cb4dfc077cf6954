import json

import pytest

from audionotes.services import summarizer, text as text_svc
from audionotes.services.keywords import DEFAULT_TABLE, load_keyword_table
from audionotes.services.summarizer import (
    SummaryOptions,
    SummaryResult,
    keyword_weight,
    position_weight,
    render_summary_markdown,
    summarize,
    target_segment_count,
)

MEETING = (
    "The team met on Monday to review the quarterly roadmap. "
    "It is critical that the database migration finishes first. "
    "Lunch was served in the main hall around noon. "
    "Several people mentioned the weather outside. "
    "We must send the revised budget to finance by Friday. "
    "Someone asked about parking near the office. "
    "The coffee machine on the third floor is broken again. "
    "In conclusion the migration is the main goal for the quarter."
)


def test_empty_text_gives_empty_result():
    assert summarize("") == SummaryResult()
    assert summarize("   \n ") == SummaryResult()
    assert summarize("").to_dict() == {
        "key_points": [],
        "action_items": [],
        "summary": "",
        "word_count": 0,
        "sentence_count": 0,
        "compression_ratio": 0.0,
    }


def test_short_text_is_passed_through():
    text = "This is important. We must finish the report by Friday. The weather was nice."
    result = summarize(text)
    assert result.summary == text
    assert result.key_points == (text,)
    assert result.action_items == ("We must finish the report by Friday.",)
    assert result.word_count == 14
    assert result.sentence_count == 3
    assert result.compression_ratio == 1.0


def test_target_segment_count_bounds():
    assert target_segment_count(1) == 2
    assert target_segment_count(4) == 2
    assert target_segment_count(10) == 3
    assert target_segment_count(20) == 5
    opts = SummaryOptions(min_segments=1, max_segments=8, ratio=0.5)
    assert target_segment_count(10, opts) == 5


def test_long_text_summary_is_bounded_and_in_document_order():
    result = summarize(MEETING)
    sentences = text_svc.split_sentences(MEETING)
    picked = text_svc.split_sentences(result.summary)

    assert result.sentence_count == 8
    assert len(picked) == target_segment_count(8)
    positions = [sentences.index(s) for s in picked]
    assert positions == sorted(positions)
    assert 0.0 < result.compression_ratio < 1.0


def test_long_text_key_points_and_actions():
    result = summarize(MEETING)
    picked = set(text_svc.split_sentences(result.summary))
    assert len(result.key_points) == 5
    assert not picked & set(result.key_points)
    assert result.action_items == ("We must send the revised budget to finance by Friday.",)


def test_equal_scores_keep_document_order():
    sentence = "The quick brown fox jumps over the lazy dog."
    result = summarize(" ".join([sentence] * 6))
    assert result.summary == f"{sentence} {sentence}"
    assert result.key_points == (sentence,) * 4


def test_unpunctuated_text_gets_sentence_endings():
    text = " ".join(f"word{i}" for i in range(45))
    result = summarize(text)
    assert result.sentence_count == 3
    assert result.summary.endswith(".")
    assert len(text_svc.split_sentences(result.summary)) == 2


def test_limits_come_from_options():
    opts = SummaryOptions(key_point_limit=2, action_item_limit=1)
    result = summarize(MEETING, opts)
    assert len(result.key_points) == 2
    assert len(result.action_items) == 1


def test_summarize_never_raises(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("segmenter broke")

    monkeypatch.setattr(summarizer.text_svc, "segment", boom)
    assert summarize(MEETING) == SummaryResult()


def test_position_weight():
    assert position_weight(0, 10) == 1.5
    assert position_weight(9, 10) == 1.2
    assert position_weight(1, 10) == 1.1
    assert position_weight(5, 10) == 1.0


def test_keyword_weight_counts_each_category_once():
    assert keyword_weight("Nothing notable here") == 1.0
    assert keyword_weight("This is important and the main goal") == pytest.approx(1.6)


def test_custom_keyword_table(tmp_path):
    path = tmp_path / "keywords.json"
    path.write_text(json.dumps({"categories": {"urgency": ["asap"]}, "obligation": ["asap"]}))
    table = load_keyword_table(str(path))
    assert table.matched_categories("ship it ASAP") == ["urgency"]
    assert table.is_action("ship it asap")
    assert not table.is_action("we must ship it")


def test_keyword_table_falls_back_to_defaults(tmp_path):
    assert load_keyword_table(str(tmp_path / "missing.json")) is DEFAULT_TABLE
    bad = tmp_path / "bad.json"
    bad.write_text("not json")
    assert load_keyword_table(str(bad)) is DEFAULT_TABLE
    assert load_keyword_table(None) is DEFAULT_TABLE


def test_render_summary_markdown():
    result = SummaryResult(
        key_points=("alpha point", "Send the report"),
        action_items=("send the report", "book the room"),
        summary="Alpha point. Send the report.",
    )
    md = render_summary_markdown(result)
    assert md.splitlines() == [
        "## Summary",
        "Alpha point. Send the report.",
        "",
        "## Key Points",
        "- Alpha point",
        "- Send the report",
        "",
        "## Action Items",
        "- [ ] Book the room",
    ]


def test_result_collections_are_immutable():
    result = summarize("We must finish the report by Friday. The weather was nice.")
    assert isinstance(result.key_points, tuple)
    assert isinstance(result.action_items, tuple)
    assert isinstance(result.to_dict()["key_points"], list)


def test_render_summary_markdown_keeps_non_latin_bullets():
    result = SummaryResult(
        key_points=("Встреча прошла хорошо", "会議で予算を決定した"),
        action_items=("Нужно отправить отчёт до пятницы", "встреча прошла хорошо!"),
        summary="Встреча прошла хорошо.",
    )
    md = render_summary_markdown(result)
    assert md.splitlines() == [
        "## Summary",
        "Встреча прошла хорошо.",
        "",
        "## Key Points",
        "- Встреча прошла хорошо",
        "- 会議で予算を決定した",
        "",
        "## Action Items",
        "- [ ] Нужно отправить отчёт до пятницы",
    ]
