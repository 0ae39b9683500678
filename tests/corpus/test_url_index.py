# tests/corpus/test_url_index.py
import pytest

from corpus.services.redirect_resolver_service import RedirectResolverService
from corpus.services.url_index_service import UrlIndex
from docbuild.exceptions import IndexUnavailable


# --- Lookups ---

def test_lookup_is_case_insensitive_and_keeps_canonical_case(index):
    entry = index.lookup("/en-us/docs/web/css/NUMBER/")
    assert entry is not None
    assert entry.path == "/en-US/docs/Web/CSS/number"
    assert entry.exists


def test_resolve_replaces_the_locale_segment(index):
    res = index.resolve("fr", "/en-US/docs/Web/Foo")
    assert res.found
    assert res.canonical_path == "/fr/docs/Web/Foo"
    assert res.redirected_to is None


def test_resolve_unknown_path(index):
    res = index.resolve("en-US", "/en-US/docs/Web/Does_not_exist")
    assert not res.found
    assert res.target is None


def test_attachments_are_indexed_in_their_document_folder(index):
    entry = index.lookup("/en-US/docs/Web/Images/Linked_to/dino.svg")
    assert entry is not None
    assert entry.is_attachment


def test_title_and_translations(index):
    assert index.title_of("/en-US/docs/Web/API") == "Web APIs"
    assert index.title_of("/en-US/docs/Web/Fuu") is None

    rows = index.translations_of("web/foo", exclude_locale="en-US")
    assert sorted(locale for locale, _, _ in rows) == ["fr", "zh-CN"]


# --- Redirects ---

def test_redirect_chain_is_followed_to_the_end(index):
    res = index.resolve_url("/en-US/docs/Web/Fuuu")
    assert res.found
    assert res.redirected_to == "/en-US/docs/Web/Foo"


def test_redirect_cycle_yields_no_target(index):
    entry = index.lookup("/en-US/docs/Loop/A")
    assert entry is not None
    assert entry.redirect_target is None
    assert not index.resolve_url("/en-US/docs/Loop/A").found


def test_redirect_to_unknown_page_yields_no_target(index):
    assert index.lookup("/en-US/docs/Web/Nowhere").redirect_target is None


def test_redirect_to_external_url(index):
    res = index.resolve_url("/en-US/docs/Web/Gone")
    assert res.found
    assert res.redirected_to == "https://example.com/gone"


def test_redirect_resolver_respects_hop_bound():
    chain = {f"/en-us/docs/p{i}": f"/en-US/docs/p{i + 1}" for i in range(5)}
    resolver = RedirectResolverService(chain, max_redirects=3)
    final, error = resolver.resolve_final_url("/en-US/docs/p0")
    assert final is None
    assert "exceeds" in error

    final, error = RedirectResolverService(chain, max_redirects=10).resolve_final_url("/en-US/docs/p0")
    assert final == "/en-US/docs/p5"
    assert error is None


def test_document_wins_over_redirect_with_same_path():
    idx = UrlIndex.build(
        [{"locale": "en-US", "slug": "Web/Foo", "title": "Foo"}],
        [("/en-US/docs/Web/Foo", "/en-US/docs/Web/Bar")],
    )
    assert idx.lookup("/en-US/docs/Web/Foo").exists
    assert idx.resolve_url("/en-US/docs/Web/Foo").redirected_to is None


# --- Failures ---

def test_missing_corpus_raises():
    with pytest.raises(IndexUnavailable):
        UrlIndex.build(None)


def test_invalid_corpus_record_raises():
    with pytest.raises(IndexUnavailable) as exc_info:
        UrlIndex.build([{"locale": "en-US", "slug": ""}])
    assert "Invalid corpus input" in str(exc_info.value)
