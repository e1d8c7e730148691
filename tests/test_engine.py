from __future__ import annotations

from collections.abc import Callable

from bs4 import BeautifulSoup
import pytest

from previewsmith import (
    Element,
    Fragment,
    InvalidTransformResultError,
    Literal,
    RecordingEmitter,
    RenderEngine,
    TagRenderContext,
    TransformExecutionError,
    TransformRegistry,
    Unit,
    rewrite_links,
)
from previewsmith.adapters.handlers.links import make_link_pass
from previewsmith.core.engine import build_context


def _engine(emitter: RecordingEmitter | None = None) -> RenderEngine:
    return RenderEngine(emitter=emitter or RecordingEmitter(), defaults={"a": make_link_pass()})


def _registry(**handlers: Callable[[TagRenderContext], object]) -> TransformRegistry:
    return TransformRegistry.from_mapping(handlers)  # type: ignore[arg-type]


def test_untransformed_tree_collapses_to_single_fragment() -> None:
    tree = _engine().render_tree("<p>Hello <em>there</em></p><p>World</p>")

    assert tree.nodes == (Fragment("<p>Hello <em>there</em></p><p>World</p>"),)
    assert tree.is_literal


def test_self_wrapping_transform_runs_once() -> None:
    calls: list[str] = []

    def wrap(ctx: TagRenderContext) -> str:
        calls.append(ctx.inner_html)
        return f'<div class="wrapped">{ctx.inner_html}</div>'

    tree = _engine().render_tree("<div>hi</div>", _registry(div=wrap))

    assert calls == ["hi"]
    assert tree.to_html() == '<div class="wrapped">hi</div>'


def test_suppression_covers_nested_elements_of_produced_markup() -> None:
    calls: list[str] = []

    def wrap(ctx: TagRenderContext) -> Literal:
        calls.append(ctx.inner_html)
        return Literal(f"<section>{ctx.inner_html}</section>")

    tree = _engine().render_tree(
        "<section><section>x</section></section>", _registry(section=wrap)
    )

    assert calls == ["<section>x</section>"]
    assert tree.to_html() == "<section><section>x</section></section>"


def test_suppression_is_cumulative_across_reparses() -> None:
    counts = {"a": 0, "b": 0}

    def link_to_bold(ctx: TagRenderContext) -> str:
        counts["a"] += 1
        return f"<b>{ctx.inner_html}</b>"

    def bold_to_link(ctx: TagRenderContext) -> str:
        counts["b"] += 1
        return f'<a href="#">{ctx.inner_html}</a>'

    tree = _engine().render_tree('<a href="#">x</a>', _registry(a=link_to_bold, b=bold_to_link))

    assert counts == {"a": 1, "b": 1}
    assert tree.to_html() == '<a href="#">x</a>'


def test_raising_transform_is_isolated() -> None:
    emitter = RecordingEmitter()
    original = RuntimeError("boom")

    def explode(_: TagRenderContext) -> str:
        raise original

    tree = _engine(emitter).render_tree(
        "<p>a<b>x</b><i>y</i></p><b>z</b>", _registry(b=explode)
    )

    assert tree.to_html() == "<p>a<b>x</b><i>y</i></p><b>z</b>"
    assert len(emitter.warnings) == 2
    _, error = emitter.warnings[0]
    assert isinstance(error, TransformExecutionError)
    assert error.tag_name == "b"
    assert error.__cause__ is original
    assert emitter.event_names() == ["transform_failed", "transform_failed"]


def test_malformed_result_passes_through() -> None:
    emitter = RecordingEmitter()

    tree = _engine(emitter).render_tree("<p>keep</p>", _registry(p=lambda ctx: 42))

    assert tree.to_html() == "<p>keep</p>"
    assert isinstance(emitter.warnings[0][1], InvalidTransformResultError)


def test_text_literal_is_escaped() -> None:
    tree = _engine().render_tree("<p><b>x</b></p>", _registry(b=lambda ctx: "1 < 2 & 3"))

    assert tree.to_html() == "<p>1 &lt; 2 &amp; 3</p>"


def test_unit_receives_rendered_children() -> None:
    tree = _engine().render_tree(
        '<p>a<span data-id="7">b<em>c</em></span></p>',
        _registry(span=lambda ctx: Unit(ctx.get("data-id"))),
    )

    assert not tree.is_literal
    (paragraph,) = tree.nodes
    assert isinstance(paragraph, Element)
    assert paragraph.tag_name == "p"
    assert paragraph.children == (
        Fragment("a"),
        Unit("7", (Fragment("b<em>c</em>"),)),
    )
    assert [unit.handle for unit in tree.units()] == ["7"]
    rendered = tree.to_html(lambda unit, inner: f"[{unit.handle}:{inner}]")
    assert rendered == "<p>a[7:b<em>c</em>]</p>"


def test_unit_children_are_appended_after_declared_children() -> None:
    tree = _engine().render_tree(
        "<figure>caption</figure>",
        _registry(figure=lambda ctx: Unit("fig", (Fragment("<hr>"),))),
    )

    (unit,) = tree.nodes
    assert isinstance(unit, Unit)
    assert unit.children == (Fragment("<hr>"), Fragment("caption"))


def test_units_render_through_html_protocol_or_str() -> None:
    class Widget:
        def __html__(self) -> str:
            return "<widget></widget>"

    tree = _engine().render_tree(
        "<x-a></x-a><x-b></x-b>",
        _registry(**{"x-a": lambda ctx: Unit(Widget()), "x-b": lambda ctx: Unit("plain")}),
    )

    assert tree.to_html() == "<widget></widget>plain"


def test_transforms_are_invoked_in_document_order() -> None:
    order: list[str] = []

    def record(ctx: TagRenderContext) -> Unit:
        order.append(f"{ctx.tag_name}:{ctx.get('id')}")
        return Unit(ctx.tag_name)

    _engine().render_tree(
        '<p id="1"><em id="2">a</em></p><em id="3">b</em>',
        _registry(p=record, em=record),
    )

    assert order == ["p:1", "em:2", "em:3"]


def test_context_exposes_read_only_snapshot() -> None:
    soup = BeautifulSoup('<a HREF="x" class="one two">hi <b>there</b></a>', "html.parser")
    context = build_context(soup.a)

    assert context.tag_name == "a"
    assert context.attributes == {"href": "x", "class": "one two"}
    assert context.inner_html == "hi <b>there</b>"
    assert context.original_html.startswith("<a ")
    with pytest.raises(TypeError):
        context.attributes["href"] = "y"  # type: ignore[index]


def test_link_pass_skipped_when_link_transform_registered() -> None:
    seen: list[str | None] = []

    def capture(ctx: TagRenderContext) -> Unit:
        seen.append(ctx.get("href"))
        return Unit("link")

    _engine().render_tree('<a href="example.com">x</a>', _registry(a=capture))

    assert seen == ["example.com"]


def test_link_pass_applies_on_general_path() -> None:
    tree = _engine().render_tree(
        '<p><a href="example.com">x</a><a href="/y" target="_self" rel="me">y</a></p>',
        _registry(span=lambda ctx: Unit("s")),
    )

    soup = BeautifulSoup(tree.to_html(), "html.parser")
    first, second = soup.find_all("a")
    assert first["href"] == "https://example.com"
    assert first["target"] == "_blank"
    assert first["rel"] == ["noopener", "noreferrer"]
    assert second["target"] == "_self"
    assert second["rel"] == ["me"]


@pytest.mark.parametrize(
    "markup",
    [
        '<p>Visit <a href="example.com">site</a> &amp; more</p>',
        "<a href='/local' target=\"_self\">local</a>",
        '<ul><li><a href="mailto:a@b.c" rel="author">mail</a></li></ul>',
        '<p><a>anchor</a><abbr title="x">abbr</abbr></p>',
        '<div><img src="a.png" alt="A"><br>text</div>',
        '<p><a title="a > b" href="example.com">x</a></p>',
        '<!-- <a href="example.com"> --><p>after</p>',
        '<script>var link = "<a href=example.com>";</script>',
    ],
)
def test_short_circuit_matches_general_path(markup: str) -> None:
    general = _engine().render_tree(markup, TransformRegistry()).to_html()
    short = rewrite_links(markup)

    assert BeautifulSoup(general, "html.parser") == BeautifulSoup(short, "html.parser")


def test_parser_fallback_emits_event() -> None:
    emitter = RecordingEmitter()
    engine = RenderEngine(parser="definitely-not-a-parser", emitter=emitter)

    tree = engine.render_tree("<p>Hello</p>")

    assert tree.to_html() == "<p>Hello</p>"
    assert engine.parser_backend == "html.parser"
    assert emitter.events == [
        ("parser_fallback", {"preferred": "definitely-not-a-parser", "fallback": "html.parser"})
    ]


def test_deeply_nested_subtree_is_kept_verbatim() -> None:
    emitter = RecordingEmitter()
    depth = 600
    markup = "<div>" * depth + "core" + "</div>" * depth

    tree = _engine(emitter).render_tree(markup, _registry(span=lambda ctx: Unit("s")))

    html = tree.to_html()
    assert html.startswith("<div><div>")
    assert html.count("<div>") == depth
    assert html.count("</div>") == depth
    assert "core" in html
    assert any("nested too deeply" in message for message, _ in emitter.warnings)
