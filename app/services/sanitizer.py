"""
Content sanitization for post submissions.

HTML goes through allow-list profiles built on bleach. CSS and JS are only
filtered against a denylist of known-dangerous patterns. That is a best-effort
measure and not a security boundary; custom template scripts still run in the
reader's browser.

Sanitization never rejects dangerous content, it strips or redacts it. The one
failing check is the size ceiling on custom template fields, which runs before
any sanitizing.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import bleach
from bleach.css_sanitizer import CSSSanitizer
from bs4 import BeautifulSoup

from app.errors import ContentTooLargeError
from app.models.enums import TemplateMode

logger = logging.getLogger(__name__)

KB = 1024
CONTENT_SIZE_LIMITS = {
    "html": 100 * KB,
    "css": 50 * KB,
    "js": 25 * KB,
}

# Removed together with everything inside them
DROP_WITH_CONTENT = ("script", "style", "iframe", "object", "embed", "noscript", "template")

RICH_TEXT_TAGS = frozenset(
    [
        "p", "br", "strong", "em", "u",
        "h1", "h2", "h3", "h4", "h5", "h6",
        "ul", "ol", "li", "blockquote", "a", "img", "code", "pre", "hr",
        "table", "thead", "tbody", "tr", "th", "td", "div", "span",
    ]
)
RICH_TEXT_ATTRIBUTES = [
    "href", "src", "alt", "title", "class", "id", "target", "rel",
    "width", "height", "style",
]
RICH_TEXT_PROTOCOLS = frozenset(
    ["http", "https", "mailto", "tel", "callto", "cid", "xmpp", "data"]
)

CUSTOM_HTML_TAGS = frozenset(
    [
        "div", "span", "p", "br", "strong", "em", "u", "i", "b",
        "h1", "h2", "h3", "h4", "h5", "h6",
        "ul", "ol", "li", "blockquote", "a", "img",
        "table", "thead", "tbody", "tr", "th", "td",
        "section", "article", "header", "footer", "nav", "aside",
        "figure", "figcaption", "main",
    ]
)
CUSTOM_HTML_ATTRIBUTES = frozenset(
    ["class", "id", "href", "src", "alt", "title", "target", "rel", "width", "height", "role"]
)
CUSTOM_HTML_ATTRIBUTE_PREFIXES = ("data-", "aria-")
CUSTOM_HTML_PROTOCOLS = frozenset(["http", "https", "mailto", "tel", "data"])

DANGEROUS_CSS = [
    re.compile(r"url\s*\(\s*[\"']?\s*javascript:", re.IGNORECASE),
    re.compile(r"@import", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"expression\s*\(", re.IGNORECASE),
    re.compile(r"behavior\s*:", re.IGNORECASE),
    re.compile(r"-moz-binding", re.IGNORECASE),
    re.compile(r"binding\s*:", re.IGNORECASE),
]

DANGEROUS_JS = [
    re.compile(r"eval\s*\(", re.IGNORECASE),
    re.compile(r"Function\s*\(", re.IGNORECASE),
    re.compile(r"setTimeout\s*\(", re.IGNORECASE),
    re.compile(r"setInterval\s*\(", re.IGNORECASE),
    # writeln must precede write so no trailing "ln" is left behind
    re.compile(r"document\.writeln", re.IGNORECASE),
    re.compile(r"document\.write", re.IGNORECASE),
    re.compile(r"innerHTML\s*=", re.IGNORECASE),
    re.compile(r"outerHTML\s*=", re.IGNORECASE),
    re.compile(r"fetch\s*\(", re.IGNORECASE),
    re.compile(r"XMLHttpRequest", re.IGNORECASE),
    re.compile(r"ActiveXObject", re.IGNORECASE),
    re.compile(r"import\s*\(", re.IGNORECASE),
    re.compile(r"require\s*\(", re.IGNORECASE),
    re.compile(r"process\.", re.IGNORECASE),
    re.compile(r"global\.", re.IGNORECASE),
    re.compile(r"window\.", re.IGNORECASE),
    re.compile(r"document\.", re.IGNORECASE),
    re.compile(r"location\.", re.IGNORECASE),
    re.compile(r"history\.", re.IGNORECASE),
]
JS_PLACEHOLDER = "/* REMOVED */"


def _allow_custom_attribute(tag: str, name: str, value: str) -> bool:
    if name.lower().startswith("on"):
        return False
    if name in CUSTOM_HTML_ATTRIBUTES:
        return True
    return name.startswith(CUSTOM_HTML_ATTRIBUTE_PREFIXES)


_rich_text_cleaner = bleach.Cleaner(
    tags=RICH_TEXT_TAGS,
    attributes=RICH_TEXT_ATTRIBUTES,
    protocols=RICH_TEXT_PROTOCOLS,
    strip=True,
    strip_comments=True,
    css_sanitizer=CSSSanitizer(),
)

_custom_html_cleaner = bleach.Cleaner(
    tags=CUSTOM_HTML_TAGS,
    attributes=_allow_custom_attribute,
    protocols=CUSTOM_HTML_PROTOCOLS,
    strip=True,
    strip_comments=True,
)

def _drop_executable(html: str) -> str:
    """Remove script-bearing elements along with their contents."""
    soup = BeautifulSoup(html, "html.parser")
    found = soup.find_all(list(DROP_WITH_CONTENT))
    if not found:
        return html
    for element in found:
        element.decompose()
    return str(soup)


def _log_if_changed(kind: str, before: str, after: str) -> None:
    if before != after:
        logger.info(f"Sanitized {kind} content ({len(before)} -> {len(after)} chars)")


def sanitize_rich_text(html: Optional[str]) -> str:
    if not html:
        return ""
    cleaned = _rich_text_cleaner.clean(_drop_executable(html))
    _log_if_changed("rich-text", html, cleaned)
    return cleaned


def sanitize_custom_html(html: Optional[str]) -> str:
    if not html:
        return ""
    cleaned = _custom_html_cleaner.clean(_drop_executable(html))
    _log_if_changed("custom html", html, cleaned)
    return cleaned


def sanitize_text(text: Optional[str]) -> str:
    if not text:
        return ""
    # Plain text is stored decoded, not entity-escaped
    return BeautifulSoup(_drop_executable(text), "html.parser").get_text().strip()


def sanitize_css(css: Optional[str]) -> str:
    if not css or not isinstance(css, str):
        return ""
    cleaned = css
    # Removing one match can splice together another, so run to a fixpoint
    while True:
        previous = cleaned
        for pattern in DANGEROUS_CSS:
            cleaned = pattern.sub("", cleaned)
        if cleaned == previous:
            break
    cleaned = cleaned.strip()
    _log_if_changed("css", css.strip(), cleaned)
    return cleaned


def sanitize_js(js: Optional[str]) -> str:
    if not js or not isinstance(js, str):
        return ""
    cleaned = js
    for pattern in DANGEROUS_JS:
        cleaned = pattern.sub(JS_PLACEHOLDER, cleaned)
    cleaned = cleaned.strip()
    _log_if_changed("js", js.strip(), cleaned)
    return cleaned


def validate_content_size(content: Optional[str], kind: str) -> bool:
    limit = CONTENT_SIZE_LIMITS.get(kind)
    if not limit or not content:
        return True
    return len(content) <= limit


def ensure_content_size(content: Optional[str], kind: str) -> None:
    if not validate_content_size(content, kind):
        limit = CONTENT_SIZE_LIMITS[kind]
        logger.warning(f"Rejected {kind} content of {len(content)} chars (limit {limit})")
        raise ContentTooLargeError(kind, len(content), limit)


def sanitize_pull_quotes(quotes: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    result = []
    for quote in quotes or []:
        text = sanitize_text(quote.get("text"))
        if not text:
            continue
        citation = sanitize_text(quote.get("citation")) or None
        result.append({"text": text, "citation": citation})
    return result


def sanitize_template(template: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a sanitized copy of a post template.

    Only the fields block matching ``mode`` is kept. For custom templates all
    size ceilings are checked before anything is sanitized.
    """
    mode = TemplateMode(template.get("mode"))

    if mode is TemplateMode.DEFAULT:
        fields = template.get("defaultFields") or {}
        return {
            "mode": mode.value,
            "defaultFields": {
                "body": sanitize_rich_text(fields.get("body")),
                "pullQuotes": sanitize_pull_quotes(fields.get("pullQuotes")),
            },
        }

    fields = template.get("customFields") or {}
    html, css, js = fields.get("html"), fields.get("css"), fields.get("js")
    ensure_content_size(html, "html")
    ensure_content_size(css, "css")
    ensure_content_size(js, "js")
    return {
        "mode": mode.value,
        "customFields": {
            "html": sanitize_custom_html(html),
            "css": sanitize_css(css),
            "js": sanitize_js(js),
        },
    }
