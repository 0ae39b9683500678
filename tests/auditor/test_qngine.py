# tests/auditor/test_qngine.py
from unittest.mock import MagicMock

import pytest

from auditor.dom.builder import DOMBuilder
from auditor.dom.qngine import QNGINE
from auditor.dom.registry import DOMRegistry
from docbuild.exceptions import ParseFailure

BROKEN_LINKS_HTML = (
    '<h2>Heading1</h2>\n'
    '<p><a href="#Heading1">one</a></p>\n'
    '<p><a href="/en-US/docs/Web/CSS/dumber">two</a> <a href="/en-US/docs/Web/CSS/dumber">three</a></p>\n'
    '<p><a href="/en-US/docs/Web/Nope">nope</a></p>\n'
    '<p><a href="https://example.com/">ext</a> <a href="/en-US/docs/Web/BrokenLinks">self</a></p>\n'
    '<p><a href="http://">bad</a> <a href="mailto:someone@example.com">mail</a></p>\n'
    '<img src="https://example.com/cat.png">\n'
    '<a name="old-anchor"></a>\n'
)


@pytest.fixture
def audit(make_ctx):
    builder, engine = DOMBuilder(), QNGINE()

    def _audit(source, image_prober=None):
        doc = builder.parse_doc(source)
        ctx = make_ctx(source.url, image_prober=image_prober)
        return doc, ctx, engine.run_audit(doc, ctx)
    return _audit


def test_registry_knows_all_element_kinds():
    DOMRegistry.discover()
    codes = DOMRegistry.get_all_possible_codes()
    assert "REDIRECTED" in codes
    assert "EXTERNAL_IMAGE" in codes
    assert len(DOMRegistry.get_all_rules()) == 2


def test_builder_assigns_node_ids_in_document_order(make_source):
    doc = DOMBuilder().parse_doc(make_source(BROKEN_LINKS_HTML))
    assert [n.node_id for n in doc.links][:3] == ["link1", "link2", "link3"]
    assert doc.headings[0].node_id == "heading1"
    assert doc.images[0].node_id == "image1"
    # <a name> is an anchor, not a link
    assert len(doc.links) == 8


def test_broken_links_are_recorded_per_occurrence(audit, make_source):
    _, _, flaws = audit(make_source(BROKEN_LINKS_HTML))

    assert [f.id for f in flaws.broken_links] == ["link1", "link2", "link3", "link4", "link5", "link6"]
    by_id = {f.id: f for f in flaws.broken_links}

    assert by_id["link1"].explanation == "Anchor not lowercase"
    assert by_id["link1"].suggestion == "#heading1"
    assert (by_id["link1"].line, by_id["link1"].column) == (2, 13)

    assert by_id["link2"].suggestion == by_id["link3"].suggestion == "/en-US/docs/Web/CSS/number"
    assert by_id["link2"].line == by_id["link3"].line == 3
    assert by_id["link2"].column != by_id["link3"].column

    assert by_id["link4"].suggestion is None
    assert by_id["link5"].explanation == "Link points to the page it's already on"
    assert by_id["link6"].explanation == "Not a valid link URL"

    assert [f.id for f in flaws.images] == ["image1"]
    assert flaws.images[0].external_image
    assert flaws.images[0].line == 7


def test_decisions_are_applied_to_the_rendered_tree(audit, make_source):
    doc, _, _ = audit(make_source(BROKEN_LINKS_HTML))
    links = {n.text: n.element for n in doc.links}

    assert doc.headings[0].element["id"] == "heading1"
    assert links["one"]["href"] == "#heading1"
    assert links["one"]["data-flaw"] == "link1"

    assert "page-not-created" in links["nope"]["class"]
    assert links["nope"]["title"].startswith("The documentation about this has not yet been written")

    assert "external" in links["ext"]["class"]
    assert links["ext"]["target"] == "_blank"
    assert not links["ext"].has_attr("data-flaw")

    assert links["self"]["aria-current"] == "page"
    assert not links["bad"].has_attr("href")
    assert links["mail"]["href"] == "mailto:someone@example.com"

    img = doc.images[0].element
    assert img["loading"] == "lazy"
    assert img["data-flaw"] == "image1"


def test_other_ids_count_as_anchors(audit, make_source):
    _, _, flaws = audit(make_source('<div id="live_sample"></div><p><a href="#live_sample">x</a></p>'))
    assert flaws.broken_links == []


def test_macro_links_are_located_by_the_macro_call(audit, make_source):
    html = ('<p><a data-flaw-src="{{CSSxRef(&quot;dumber&quot;)}}" '
            'href="/en-US/docs/Web/CSS/dumber">dumber</a></p>')
    raw = 'Intro\n{{CSSxRef("dumber")}}\n'
    doc, _, flaws = audit(make_source(html, raw=raw))

    flaw = flaws.broken_links[0]
    assert (flaw.line, flaw.column) == (2, 1)
    assert flaw.suggestion == "/en-US/docs/Web/CSS/number"
    # Generated links are fixed in the output, author links are not
    assert doc.links[0].element["href"] == "/en-US/docs/Web/CSS/number"


def test_locale_fallback_is_rendered_not_reported(audit, make_source):
    html = '<p><a href="/fr/docs/Web/CSS/number">nombre</a></p>'
    doc, _, flaws = audit(make_source(html, slug="Web/Foo", locale="fr", title="Foo"))

    assert flaws.total == 0
    link = doc.links[0].element
    assert link["href"] == "/en-US/docs/Web/CSS/number"
    assert "only-in-en-us" in link["class"]
    assert link["title"] == "Cette page est actuellement disponible uniquement en anglais"


def test_images_get_dimensions_from_the_prober(audit, make_source):
    prober = MagicMock(return_value=(250, 250))
    html = '<img src="screenshot.png">\n<img src="dino.svg" width="10" height="20">'
    doc, _, flaws = audit(make_source(html, slug="Web/Images/Linked_to", title="Linked to"), image_prober=prober)

    assert flaws.total == 0
    first, second = (n.element for n in doc.images)
    assert first["src"] == "/en-US/docs/Web/Images/Linked_to/screenshot.png"
    assert (first["width"], first["height"]) == ("250", "250")
    assert (second["width"], second["height"]) == ("10", "20")
    prober.assert_called_once_with("/en-US/docs/Web/Images/Linked_to/screenshot.png")


def test_failing_prober_does_not_break_the_build(audit, make_source):
    prober = MagicMock(side_effect=OSError("unreadable"))
    doc, _, _ = audit(make_source('<img src="dino.svg">', slug="Web/Images/Linked_to"), image_prober=prober)
    assert not doc.images[0].element.has_attr("width")


def test_missing_rendered_tree_is_a_parse_failure(make_source):
    source = make_source("<p>x</p>").model_copy(update={"rendered_html": None})
    with pytest.raises(ParseFailure) as exc_info:
        DOMBuilder().parse_doc(source)
    assert exc_info.value.url == "/en-US/docs/Web/BrokenLinks"


def test_repeated_external_image_is_reported_per_occurrence(audit, make_source):
    html = '<img src="https://example.com/cat.png">\n<p>x</p>\n<img src="https://example.com/cat.png">\n' \
           '<img src="https://example.com/cat.png">'
    _, _, flaws = audit(make_source(html))

    assert [f.id for f in flaws.images] == ["image1", "image2", "image3"]
    assert {f.src for f in flaws.images} == {"https://example.com/cat.png"}
    assert [f.line for f in flaws.images] == [1, 3, 4]


def test_positions_come_from_the_source_not_the_rendered_tree(audit, make_source):
    raw = "# Title\n\nIntro.\n\nSee [the docs][nope] here.\n\n[nope]: /en-US/docs/Web/Nope\n"
    html = ('<h1>Title</h1><p>Intro.</p><p>See <a href="/en-US/docs/Web/Nope">the docs</a> here '
            'and <a href="/en-US/docs/Web/Gone_too">generated</a>.</p>')
    _, _, flaws = audit(make_source(html, markup="markdown", raw=raw))

    located, unknown = flaws.broken_links
    assert (located.line, located.column) == (5, 5)
    # Not in the source at all: no made-up position
    assert (unknown.line, unknown.column) == (None, None)


def test_repeated_malformed_link_gets_one_flaw_per_occurrence(audit, make_source):
    html = '<p><a href="http://">a</a></p>\n<p><a href="http://">b</a></p>\n'
    doc, _, flaws = audit(make_source(html))

    first, second = flaws.broken_links
    assert (first.id, second.id) == ("link1", "link2")
    for flaw in (first, second):
        assert flaw.explanation == "Not a valid link URL"
        assert flaw.suggestion is None
        assert not flaw.fixable
    assert (first.line, first.column) == (1, 13)
    assert (second.line, second.column) == (2, 13)
    assert [n.element.get("data-flaw") for n in doc.links] == ["link1", "link2"]


def test_bare_http_host_is_upgraded(audit, make_source):
    doc, _, flaws = audit(make_source('<p><a href="http://www.mozilla.org">moz</a></p>'))

    flaw = flaws.broken_links[0]
    assert flaw.explanation == "Is currently http:// but can become https://"
    assert flaw.suggestion == "https://www.mozilla.org"
    assert flaw.fixable
    assert (flaw.line, flaw.column) == (1, 13)
    assert "external" in doc.links[0].element["class"]


def test_heading_inside_an_element_with_the_same_id(audit, make_source):
    doc, _, flaws = audit(make_source(
        '<div id="examples"><h2>Examples</h2></div><p><a href="#examples_2">x</a></p>'
    ))
    assert doc.headings[0].element["id"] == "examples_2"
    ids = [tag["id"] for tag in doc.soup.find_all(id=True)]
    assert len(ids) == len(set(ids))
    assert flaws.broken_links == []
