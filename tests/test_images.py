from __future__ import annotations

from bs4 import BeautifulSoup
import pytest

from previewsmith import (
    ImageNode,
    clean_src,
    display_attributes,
    export_markup,
    extract_image_urls,
    image_markup,
    ingest,
    present,
    serialize,
)


def _token(url: str) -> str:
    return f"{url}?token=abc"


def test_canonical_url_survives_enrichment() -> None:
    node = ingest({"src": "https://cdn.test/a.png", "alt": "A"})

    assert node is not None
    assert present(node, _token) == "https://cdn.test/a.png?token=abc"
    assert present(node, _token) == "https://cdn.test/a.png?token=abc"
    assert node.canonical_src == "https://cdn.test/a.png"
    assert serialize(node) == {"src": "https://cdn.test/a.png", "alt": "A"}


def test_original_attribute_wins_over_display_src() -> None:
    node = ingest({"src": "/a.png?token=abc", "data-original-src": "/a.png"})

    assert node is not None
    assert node.canonical_src == "/a.png"


def test_missing_source_is_dropped() -> None:
    assert ingest({"alt": "nothing"}) is None
    assert ingest({"src": "   "}) is None


@pytest.mark.parametrize("rejection", [None, False, ""])
def test_filter_can_reject(rejection: object) -> None:
    assert ingest({"src": "/a.png"}, lambda url: rejection) is None  # type: ignore[arg-type,return-value]


def test_filter_can_rewrite() -> None:
    node = ingest({"src": "http://old.test/a.png"}, lambda url: url.replace("old", "new"))

    assert node is not None
    assert node.canonical_src == "http://new.test/a.png"


def test_image_node_requires_url() -> None:
    with pytest.raises(ValueError, match="non-empty"):
        ImageNode("")


def test_image_node_is_immutable() -> None:
    node = ImageNode.create("/upload/1.png", alt="Upload")

    with pytest.raises(AttributeError):
        node.canonical_src = "/other.png"  # type: ignore[misc]
    assert node.display_src(_token) == "/upload/1.png?token=abc"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ('https://x.test/a.png alt="oops"', "https://x.test/a.png"),
        ("https://x.test/a.png title=oops", "https://x.test/a.png"),
        ('https://x.test/a.png"alt="oops"', "https://x.test/a.png"),
        ("  https://x.test/a.png  ", "https://x.test/a.png"),
        ("https://x.test/a b.png", "https://x.test/a b.png"),
    ],
)
def test_clean_src(value: str, expected: str) -> None:
    assert clean_src(value) == expected


def test_serialize_trims_and_skips_empty_text() -> None:
    node = ImageNode('/a.png title="x"', alt="  ", title="  Caption ")

    assert serialize(node) == {"src": "/a.png", "title": "Caption"}


def test_display_attributes_carry_both_urls() -> None:
    node = ImageNode("/a.png", alt="A")

    assert display_attributes(node, _token) == {
        "src": "/a.png?token=abc",
        "data-original-src": "/a.png",
        "alt": "A",
    }
    assert display_attributes(node, original_attribute="data-canonical") == {
        "src": "/a.png",
        "data-canonical": "/a.png",
        "alt": "A",
    }


def test_image_markup_uses_canonical_url() -> None:
    assert image_markup(ImageNode("/a.png", alt='Say "hi"')) == (
        '<img src="/a.png" alt="Say &quot;hi&quot;">'
    )


def test_export_markup_strips_display_urls() -> None:
    live = (
        '<p><img src="/a.png?token=abc" data-original-src="/a.png" alt="A">'
        '<img src="/b.png"></p>'
    )

    exported = export_markup(live)

    assert "token" not in exported
    assert "data-original-src" not in exported
    images = BeautifulSoup(exported, "html.parser").find_all("img")
    assert [image["src"] for image in images] == ["/a.png", "/b.png"]
    assert images[0]["alt"] == "A"


def test_extract_image_urls_finds_html_and_markdown() -> None:
    text = 'See <img src="a.png" alt="A"> and ![B](b.png "Title") or ![](c.png)'

    references = extract_image_urls(text)

    assert [(ref.url, ref.alt, ref.kind) for ref in references] == [
        ("a.png", "A", "html"),
        ("b.png", "B", "markdown"),
        ("c.png", "", "markdown"),
    ]
    assert references[1].original_match == '![B](b.png "Title")'
