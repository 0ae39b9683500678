# tests/conftest.py
import pytest

from auditor.context.audit_context import AuditContext, PageContext
from corpus.services.url_index_service import UrlIndex
from docbuild.core.services.l10n_service import LocaleStrings
from docbuild.model import BuildSettings, SourceDocument

# A small site, shaped like the real one: a few reference pages, a translated
# page, moved pages and a folder with attachments.
CORPUS = [
    {"locale": "en-US", "slug": "Web", "title": "Web technology for developers"},
    {"locale": "en-US", "slug": "Web/API", "title": "Web APIs"},
    {"locale": "en-US", "slug": "Web/API/Blob", "title": "Blob", "anchors": ["constructor", "instance_methods"]},
    {"locale": "en-US", "slug": "Web/API/Page_Visibility_API", "title": "Page Visibility API"},
    {"locale": "en-US", "slug": "Web/CSS/number", "title": "<number>"},
    {"locale": "en-US", "slug": "Web/HTML/Element/a", "title": "<a>: The Anchor element", "anchors": ["fragment"]},
    {"locale": "en-US", "slug": "Glossary/Bézier_curve", "title": "Bézier curve", "anchors": ["identifier"]},
    {"locale": "en-US", "slug": "Web/Foo", "title": "<foo>: A test tag", "anchors": ["heading2", "anchor"]},
    {"locale": "en-US", "slug": "Web/BrokenLinks", "title": "Broken links"},
    {"locale": "en-US", "slug": "Web/Images/Linked_to", "title": "Linked to",
     "files": ["dino.svg", "screenshot.png"]},
    {"locale": "fr", "slug": "Web/Foo", "title": "<foo>: Une balise de test"},
    {"locale": "fr", "slug": "Web/API/Blob", "title": "Blob", "anchors": []},
    {"locale": "zh-CN", "slug": "Web/Foo", "title": "<foo>: 测试标签"},
    {"locale": "zh-TW", "slug": "Web/Images/Linked_to", "title": "Linked to"},
]

REDIRECTS = [
    ("/en-US/docs/Web/CSS/dumber", "/en-US/docs/Web/CSS/number"),
    ("/en-US/docs/Web/HTML/Element/anchor", "/en-US/docs/Web/HTML/Element/a"),
    ("/en-US/docs/Web/Fuu", "/en-US/docs/Web/Foo"),
    ("/en-US/docs/Web/Fuuu", "/en-US/docs/Web/Fuu"),
    ("/en-US/docs/Web/Gone", "https://example.com/gone"),
    ("/en-US/docs/Loop/A", "/en-US/docs/Loop/B"),
    ("/en-US/docs/Loop/B", "/en-US/docs/Loop/A"),
    ("/en-US/docs/Web/Nowhere", "/en-US/docs/Web/Never_written"),
]


@pytest.fixture(scope="session")
def index():
    return UrlIndex.build(CORPUS, REDIRECTS, default_locale="en-US", max_redirect_depth=10)


@pytest.fixture
def settings():
    return BuildSettings(
        https_upgrade={"mode": "allowlist", "hosts": ["mozilla.org", "w3.org"], "excluded_hosts": []},
    )


@pytest.fixture(scope="session")
def strings():
    return LocaleStrings.load(default_locale="en-US")


@pytest.fixture
def make_page():
    def _make(url="/en-US/docs/Web/BrokenLinks", locale=None, anchors=()):
        locale = locale or url.strip("/").split("/", 1)[0]
        return PageContext(url=url, locale=locale, default_locale="en-US", anchors=set(anchors))
    return _make


@pytest.fixture
def make_ctx(index, settings, strings, make_page):
    def _make(url="/en-US/docs/Web/BrokenLinks", image_prober=None, anchors=()):
        return AuditContext(make_page(url, anchors=anchors), index, settings, strings, image_prober=image_prober)
    return _make


@pytest.fixture
def make_source():
    def _make(html, slug="Web/BrokenLinks", locale="en-US", title="Broken links", markup="html", raw=None):
        return SourceDocument(
            locale=locale,
            slug=slug,
            title=title,
            summary="A page for testing.",
            markup=markup,
            raw_content=html if raw is None else raw,
            rendered_html=html,
            source={"folder": f"{locale.lower()}/{slug.lower()}"},
        )
    return _make


@pytest.fixture
def corpus():
    return CORPUS


@pytest.fixture
def redirects():
    return REDIRECTS
