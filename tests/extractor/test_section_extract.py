# tests/extractor/test_section_extract.py
import logging

from bs4 import BeautifulSoup

from extractor.services.section_extract_service import SectionExtractService

BCD_FOLLOWED_BY_H3 = """
<p>Intro paragraph.</p>
<h2 id="overview">Overview</h2>
<p>Some text.</p>
<h2 id="browser_compatibility">Browser compatibility</h2>
<div class="bc-data" data-query="html.elements.foo"></div>
<p>Text after the table.</p>
<h3 id="notes">Notes</h3>
<p>A note.</p>
"""

SPEC_AND_BCD = """
<p>Intro.</p>
<h2 id="specifications">Specifications</h2>
<div class="bc-specs" data-bcd-query="html.elements.foo"
     data-spec-urls="https://html.spec.whatwg.org/multipage/foo.html#foo, https://example.com/spec"></div>
<h2 id="more">More</h2>
<p>More text.</p>
<h2 id="browser_compatibility">Browser compatibility</h2>
<div class="bc-data" id="bcd:html.elements.foo"></div>
<h2 id="see_also">See also</h2>
<ul><li>Link</li></ul>
"""


def _extract(html):
    return SectionExtractService().extract(BeautifulSoup(html, "html.parser"))


def test_bcd_table_followed_by_h3():
    body = _extract(BCD_FOLLOWED_BY_H3)
    assert [s.type for s in body] == ["prose", "prose", "browser_compatibility", "prose", "prose"]

    assert body[0].value.title is None
    assert body[1].value.id == "overview"
    assert body[2].value.title == "Browser compatibility"
    assert body[2].value.query == "html.elements.foo"
    assert not body[2].value.is_h3
    # The table took the heading, the rest of the run is untitled
    assert body[3].value.title is None
    assert body[4].value.is_h3
    assert body[4].value.id == "notes"


def test_specifications_and_bcd():
    body = _extract(SPEC_AND_BCD)
    assert [s.type for s in body] == ["prose", "specifications", "prose", "browser_compatibility", "prose"]

    specs = body[1].value
    assert specs.query == "html.elements.foo"
    assert [s.bcd_specification_url for s in specs.specifications] == [
        "https://html.spec.whatwg.org/multipage/foo.html#foo",
        "https://example.com/spec",
    ]
    assert body[3].value.query == "html.elements.foo"


def test_heading_title_is_inner_html():
    body = _extract('<h2 id="the_code_element">The <code>&lt;code&gt;</code> element</h2><p>x</p>')
    assert body[0].value.title == "The <code>&lt;code&gt;</code> element"


def test_serialized_keys():
    body = _extract(SPEC_AND_BCD)
    dumped = body[1].model_dump(by_alias=True)
    assert dumped["value"]["isH3"] is False
    assert "bcdSpecificationURL" in dumped["value"]["specifications"][0]


def test_marker_without_query_stays_prose(caplog):
    with caplog.at_level(logging.WARNING):
        body = _extract('<h2 id="compat">Compat</h2><div class="bc-data"></div>')
    assert [s.type for s in body] == ["prose"]
    assert 'class="bc-data"' in body[0].value.content
    assert "without a query" in caplog.text


def test_empty_root():
    assert SectionExtractService().extract(None) == []


def test_table_after_prose_in_h3_run_keeps_the_depth():
    body = _extract(
        '<h2 id="a">A</h2><p>x</p><h3 id="b">B</h3><p>prose</p>'
        '<div class="bc-data" data-query="api.Blob"></div>'
    )
    assert [(s.type, s.value.is_h3) for s in body] == [
        ("prose", False), ("prose", True), ("browser_compatibility", True),
    ]
    # The prose took the heading, the table is untitled
    assert body[1].value.id == "b"
    assert body[2].value.title is None
