# tests/corpus/test_url_utils.py
import pytest

from corpus.utils.url_utils import UrlUtils


@pytest.mark.parametrize("href", ["http://", "https://exa mple.com/", "http://example.com:99999/", "https://[::1"])
def test_split_href_rejects_malformed_urls(href):
    with pytest.raises(ValueError):
        UrlUtils.split_href(href)


def test_split_href_keeps_query_and_fragment():
    parsed = UrlUtils.split_href("/en-US/docs/Web?x=1#Frag")
    assert parsed.path == "/en-US/docs/Web"
    assert parsed.query == "x=1"
    assert parsed.fragment == "Frag"


def test_absolutize_uses_the_document_folder():
    assert UrlUtils.absolutize("/en-US/docs/Web/Images/Linked_to", "dino.svg") == \
        "/en-US/docs/Web/Images/Linked_to/dino.svg"
    assert UrlUtils.absolutize("/en-US/docs/Web/Images/Linked_to", "../Other") == \
        "/en-US/docs/Web/Images/Other"


def test_split_and_replace_locale():
    assert UrlUtils.split_locale("/en-US/docs/Web") == ("en-US", "docs/Web")
    assert UrlUtils.with_locale("/en-US/docs/Web", "fr") == "/fr/docs/Web"


def test_passthrough_detection():
    assert UrlUtils.is_passthrough("mailto:someone@example.com")
    assert UrlUtils.is_passthrough("JavaScript:void(0)")
    assert not UrlUtils.is_passthrough("https://example.com")


def test_host_matching_ignores_www_and_accepts_subdomains():
    assert UrlUtils.host_matches("www.mozilla.org", ["mozilla.org"])
    assert UrlUtils.host_matches("developer.mozilla.org", ["mozilla.org"])
    assert not UrlUtils.host_matches("notmozilla.org", ["mozilla.org"])


def test_build_suffix():
    assert UrlUtils.build_suffix("a=1", "Frag") == "?a=1#Frag"
    assert UrlUtils.build_suffix("", "Frag", lowercase_fragment=True) == "#frag"
    assert UrlUtils.build_suffix("", "") == ""


def test_with_suffix_keeps_a_single_fragment():
    assert UrlUtils.with_suffix("/en-US/docs/Web/X#sec", "", "Other", lowercase_fragment=True) == \
        "/en-US/docs/Web/X#other"
    assert UrlUtils.with_suffix("/en-US/docs/Web/X#sec", "a=1", "") == "/en-US/docs/Web/X?a=1#sec"
    assert UrlUtils.with_suffix("/en-US/docs/Web/X", "", "Frag") == "/en-US/docs/Web/X#Frag"
