import pytest

from previewsmith import ContentVerdict, classify
from previewsmith.core.classifier import (
    markdown_score,
    matched_signatures,
    resolve_content_type,
)


@pytest.mark.parametrize("text", ["", "   ", "\n\t\n"])
def test_blank_input_is_html(text: str) -> None:
    assert classify(text) is ContentVerdict.HTML


def test_two_tags_with_closing_tag_is_html() -> None:
    assert classify("Hello <b>world</b>") is ContentVerdict.HTML


def test_tag_evidence_wins_over_markdown_signatures() -> None:
    text = "# Title\n\n<p>**bold** paragraph</p>"

    assert markdown_score(text) > 0
    assert classify(text) is ContentVerdict.HTML


def test_each_paragraph_counts_as_separate_tags() -> None:
    assert classify("<p>Hello</p><p>World</p>") is ContentVerdict.HTML


def test_tags_without_markdown_are_html() -> None:
    assert classify("line one<br><hr>") is ContentVerdict.HTML


def test_single_tag_with_markdown_is_markdown() -> None:
    assert classify("<br> **bold** text") is ContentVerdict.MARKDOWN


@pytest.mark.parametrize(
    "text",
    [
        "# Heading",
        "Some **bold** text",
        "An *italic* word",
        "- first\n- second",
        "1. first\n2. second",
        "```\ncode\n```",
        "Use `pip` here",
        "Check [this](example.com) out",
        "![](image.png)",
        "> quoted",
        "above\n---\nbelow",
        "| a | b |",
    ],
)
def test_markdown_signatures(text: str) -> None:
    assert classify(text) is ContentVerdict.MARKDOWN


def test_plain_text_defaults_to_html() -> None:
    assert classify("just some words") is ContentVerdict.HTML
    assert classify("3 < 4 and 5 > 2") is ContentVerdict.HTML


def test_angle_bracket_text_is_html() -> None:
    assert classify("<custom") is ContentVerdict.HTML
    assert classify("<1> item") is ContentVerdict.HTML


def test_signatures_are_unweighted() -> None:
    text = "# Title\n\nUse `code` and [docs](example.com)"

    assert matched_signatures(text) == ["heading", "inline_code", "link"]
    assert markdown_score(text) == 3


def test_verdict_values() -> None:
    assert ContentVerdict.HTML.value == "html"
    assert ContentVerdict.MARKDOWN.value == "markdown"


def test_resolve_content_type_honours_pinned_hint() -> None:
    assert resolve_content_type("# Title", "html") is ContentVerdict.HTML
    assert resolve_content_type("<p>a</p><p>b</p>", "markdown") is ContentVerdict.MARKDOWN
    assert resolve_content_type("# Title", "auto") is ContentVerdict.MARKDOWN


def test_resolve_content_type_rejects_unknown_hint() -> None:
    with pytest.raises(ValueError, match="Unknown content type"):
        resolve_content_type("text", "rst")
