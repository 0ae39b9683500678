# src/docbuild/model.py (Build Layer)
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auditor.model import DocumentFlaws
from corpus.utils.url_utils import UrlUtils
from extractor.model import Section


class HttpsUpgradePolicy(BaseModel):
    """
    Which external hosts may be suggested an http:// -> https:// upgrade.
    'allowlist' only upgrades the listed hosts (and their subdomains); 'all'
    upgrades every host not excluded.
    """
    mode: Literal["allowlist", "all"] = "allowlist"
    hosts: List[str] = Field(default_factory=list)
    excluded_hosts: List[str] = Field(default_factory=list)

    def allows(self, host: Optional[str]) -> bool:
        if not host:
            return False
        if UrlUtils.host_matches(host, self.excluded_hosts):
            return False
        if self.mode == "all":
            return True
        return UrlUtils.host_matches(host, self.hosts)


class BuildSettings(BaseModel):
    site_name: str = Field(default="MDN")
    base_url: str = Field(default="https://developer.mozilla.org")
    own_domains: List[str] = Field(default_factory=lambda: ["developer.mozilla.org"])
    default_locale: str = Field(default="en-US")
    max_redirect_depth: int = Field(default=10)
    https_upgrade: HttpsUpgradePolicy = Field(default_factory=HttpsUpgradePolicy)
    fallback_class: str = Field(default="only-in-en-us")
    workers: int = Field(default=1)
    show_progress: bool = Field(default=False)
    strings_file: Optional[str] = Field(default=None, description="Localization tables; defaults to the bundled locales.json.")
    log_level: str = Field(default="INFO")
    module_log_levels: Dict[str, str] = Field(default_factory=dict)
    silenced_loggers: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_config(cls, config) -> "BuildSettings":
        """Builds typed settings from a ConfigManager (or anything with get_nested)."""
        values: Dict[str, Any] = {
            "site_name": config.get_nested("site.name"),
            "base_url": config.get_nested("site.base_url"),
            "own_domains": config.get_nested("site.own_domains"),
            "default_locale": config.get_nested("site.default_locale"),
            "max_redirect_depth": config.get_nested("index.max_redirect_depth"),
            "https_upgrade": config.get_nested("links.https_upgrade"),
            "fallback_class": config.get_nested("links.fallback_class"),
            "workers": config.get_nested("build.workers"),
            "show_progress": config.get_nested("build.show_progress"),
            "strings_file": config.get_nested("l10n.strings_file"),
            "log_level": config.get_nested("debug.level"),
            "module_log_levels": config.get_nested("debug.module_levels"),
            "silenced_loggers": config.get_nested("debug.silenced_loggers"),
        }
        return cls(**{k: v for k, v in values.items() if v is not None})


class SourceDocument(BaseModel):
    """
    One document handed to the build: metadata plus its original source and the
    macro-expanded HTML tree produced by the renderer.
    """
    locale: str
    slug: str
    title: str
    summary: str = ""
    markup: Literal["html", "markdown"] = "html"
    raw_content: str = ""
    rendered_html: Optional[str] = None
    modified: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("slug", mode="before")
    @classmethod
    def _normalize_slug(cls, v):
        return str(v or "").strip().strip("/")

    @property
    def url(self) -> str:
        return f"/{self.locale}/docs/{self.slug}"


class OtherTranslation(BaseModel):
    locale: str
    native: str
    title: str


class Document(BaseModel):
    """The per-document record written out as index.json by the caller."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    page_title: str = Field(alias="pageTitle")
    summary: str = ""
    mdn_url: str
    locale: str
    is_translated: bool = Field(alias="isTranslated")
    other_translations: List[OtherTranslation] = Field(default_factory=list)
    source: Dict[str, Any] = Field(default_factory=dict)
    modified: datetime
    body: List[Section] = Field(default_factory=list)
    flaws: DocumentFlaws = Field(default_factory=DocumentFlaws)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class BuiltDocument(BaseModel):
    """A document record together with its rendered article HTML."""
    doc: Document
    html: str


class BuildFailure(BaseModel):
    url: str
    error: str


class BuildReport(BaseModel):
    documents: List[BuiltDocument] = Field(default_factory=list)
    failures: List[BuildFailure] = Field(default_factory=list)
    duration_s: float = 0.0

    @property
    def exit_code(self) -> int:
        """Non-zero only for fatal per-document failures; flaws never count."""
        return 1 if self.failures else 0

    @property
    def total_flaws(self) -> int:
        return sum(d.doc.flaws.total for d in self.documents)
