"""
Star badges for repository links in a document.

Finds the links a Markdown renderer turns into anchors (inline links,
reference links, autolinks and bare URLs) as well as literal HTML anchors,
resolves the ones pointing at GitHub repositories, and inserts a badge right
after each of them. Every badge starts out as a loading placeholder and
settles to either the formatted count or an unknown indicator, so one failing
lookup never holds up the rest of the document.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from html import escape as html_escape
from html import unescape as html_unescape

from ghstars.services.formatter import format_star_count
from ghstars.services.github.star_fetcher import StarCountFetcher
from ghstars.services.github.url_parser import extract_repo_info
from ghstars.services.state import StarsState

logger = logging.getLogger(__name__)

LOADING_TEXT = "⭐ ..."
UNKNOWN_TEXT = "⭐ ?"

BADGE_CLASS = "github-stars-count"
LOADING_CLASS = "github-stars-loading"
ERROR_CLASS = "github-stars-error"

# [text](url "title"), but not ![alt](src)
_MARKDOWN_LINK_RE = re.compile(r'(?<!!)\[[^\]]*\]\(\s*<?(?P<href>[^)\s>]+)>?(?:\s+"[^"]*")?\s*\)')
_HTML_ANCHOR_RE = re.compile(
    r"<a\b[^>]*?\bhref\s*=\s*(?P<quote>[\"'])(?P<href>.*?)(?P=quote)[^>]*>.*?</a\s*>",
    re.IGNORECASE | re.DOTALL,
)
# [label]: url "title"
_REFERENCE_DEFINITION_RE = re.compile(
    r"^ {0,3}\[(?P<label>[^\[\]]+)\]:[ \t]*<?(?P<href>[^\s>]+)>?"
    r"(?:[ \t]+(?:\"[^\"]*\"|'[^']*'|\([^)]*\)))?[ \t]*$",
    re.MULTILINE,
)
# [text][label], [label][] and [label]
_REFERENCE_LINK_RE = re.compile(
    r"(?<![!\]\\])\[(?P<text>[^\[\]]+)\](?:\[(?P<label>[^\[\]]*)\]|(?![(\[:]))"
)
# <https://...>
_AUTOLINK_RE = re.compile(r"<(?P<href>https?://[^\s<>]+)>", re.IGNORECASE)
# Bare GitHub URLs, minus trailing punctuation. Not inside attributes or parentheses.
_BARE_URL_RE = re.compile(
    r"(?<![\w\"'=(<])(?P<href>https?://(?:www\.)?github\.com/[^\s<>()\[\]\"'`]*?)"
    r"(?=[.,:;!?*_~]*(?:[\s<>()\[\]\"'`]|\Z))",
    re.IGNORECASE,
)


class LinkKind(str, Enum):
    MARKDOWN = "markdown"
    REFERENCE = "reference"
    AUTOLINK = "autolink"
    URL = "url"
    HTML = "html"


_LINK_PATTERNS = (
    (LinkKind.MARKDOWN, _MARKDOWN_LINK_RE),
    (LinkKind.REFERENCE, _REFERENCE_LINK_RE),
    (LinkKind.AUTOLINK, _AUTOLINK_RE),
    (LinkKind.URL, _BARE_URL_RE),
    (LinkKind.HTML, _HTML_ANCHOR_RE),
)


class LinkState(str, Enum):
    LOADING = "loading"
    RESOLVED = "resolved"
    ERROR = "error"


@dataclass
class LinkAnnotation:
    """Badge state for one repository link in a document."""

    url: str
    owner: str
    repo: str
    kind: LinkKind
    start: int  # offsets of the whole link in the source document
    end: int
    state: LinkState = LinkState.LOADING
    stars: int | None = None
    text: str = LOADING_TEXT

    @property
    def css_classes(self) -> list[str]:
        if self.state is LinkState.LOADING:
            return [BADGE_CLASS, LOADING_CLASS]
        if self.state is LinkState.ERROR:
            return [BADGE_CLASS, ERROR_CLASS]
        return [BADGE_CLASS]

    def badge(self) -> str:
        """Badge markup to place after the link."""
        if self.kind is LinkKind.HTML:
            classes = " ".join(self.css_classes)
            return f' <span class="{classes}">{html_escape(self.text)}</span>'
        return f" {self.text}"


@dataclass
class RenderedDocument:
    content: str
    links: list[LinkAnnotation] = field(default_factory=list)


AnnotationCallback = Callable[[LinkAnnotation], Awaitable[None]]


def _normalize_label(label: str) -> str:
    return " ".join(label.split()).casefold()


def find_repository_links(content: str) -> list[LinkAnnotation]:
    """Repository links in document order. Other links are ignored."""
    definitions: dict[str, str] = {}
    # (start, end, kind, href); kind None marks a reference definition line
    spans: list[tuple[int, int, LinkKind | None, str]] = []

    for match in _REFERENCE_DEFINITION_RE.finditer(content):
        definitions.setdefault(_normalize_label(match.group("label")), match.group("href"))
        spans.append((match.start(), match.end(), None, ""))

    for kind, pattern in _LINK_PATTERNS:
        for match in pattern.finditer(content):
            if kind is LinkKind.REFERENCE:
                label = match.group("label") or match.group("text")
                href = definitions.get(_normalize_label(label))
                if href is None:
                    continue
            else:
                href = match.group("href")
                if kind is LinkKind.HTML:
                    href = html_unescape(href)
            spans.append((match.start(), match.end(), kind, href))

    spans.sort(key=lambda span: (span[0], -span[1]))
    links: list[LinkAnnotation] = []
    covered_until = -1
    for start, end, kind, href in spans:
        # Anything nested in an earlier link or definition belongs to it
        if start < covered_until:
            continue
        covered_until = end
        if kind is None or not href:
            continue
        repo_info = extract_repo_info(href)
        if repo_info is None:
            continue
        links.append(
            LinkAnnotation(
                url=href,
                owner=repo_info.owner,
                repo=repo_info.repo,
                kind=kind,
                start=start,
                end=end,
            )
        )
    return links


def insert_badges(content: str, links: list[LinkAnnotation]) -> str:
    """Return content with each link's current badge placed after it."""
    parts: list[str] = []
    position = 0
    for link in links:
        parts.append(content[position : link.end])
        parts.append(link.badge())
        position = link.end
    parts.append(content[position:])
    return "".join(parts)


class DocumentRenderer:
    """Resolves every repository link in a document to a star badge."""

    def __init__(self, fetcher: StarCountFetcher, state: StarsState):
        self.fetcher = fetcher
        self.state = state

    async def render(
        self,
        content: str,
        on_update: AnnotationCallback | None = None,
    ) -> RenderedDocument:
        """
        Annotate all repository links in content.

        on_update is awaited with each annotation when its loading placeholder
        is created and again when it settles.
        """
        links = find_repository_links(content)
        if on_update is not None:
            for link in links:
                await on_update(link)

        await asyncio.gather(*(self._resolve(link, on_update) for link in links))

        logger.debug(f"Rendered {len(links)} repository links")
        return RenderedDocument(content=insert_badges(content, links), links=links)

    async def _resolve(self, link: LinkAnnotation, on_update: AnnotationCallback | None) -> None:
        try:
            stars = await self.fetcher.get_star_count(link.owner, link.repo)
        except Exception:
            logger.exception(f"Error getting star count for {link.owner}/{link.repo}")
            stars = None

        if stars is None:
            link.state = LinkState.ERROR
            link.text = UNKNOWN_TEXT
        else:
            stars_settings = self.state.settings
            link.state = LinkState.RESOLVED
            link.stars = stars
            link.text = format_star_count(
                stars, stars_settings.number_format, stars_settings.display_format
            )

        if on_update is not None:
            await on_update(link)
