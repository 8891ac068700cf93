"""Event sources feeding tag events to a :class:`ParserHandler`.

Two sources are available. :class:`HtmlEventParser` streams raw markup and
keeps character entities unresolved so the converter's entity table decides
their LaTeX form. :func:`walk_soup` walks a BeautifulSoup tree, which
tolerates badly nested markup at the price of entities already decoded.
"""

from __future__ import annotations

from html import escape
from html.parser import HTMLParser
import logging
from typing import Protocol

from bs4 import BeautifulSoup
from bs4.element import Comment, NavigableString, PageElement, PreformattedString, Tag

from .tags import EndTag, StartTag


logger = logging.getLogger(__name__)

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

SOUP_PARSERS = ("html.parser", "lxml", "html5lib")


class EventHandler(Protocol):
    """Receiver of the tag event stream."""

    def start_element(self, tag: StartTag) -> None: ...

    def end_element(self, tag: EndTag, start: StartTag) -> None: ...

    def characters(self, text: str) -> None: ...

    def comment(self, text: str) -> None: ...

    def end_document(self) -> None: ...


class HtmlEventParser(HTMLParser):
    """Streaming tokenizer pairing every end event with its start tag.

    Void elements are closed right after they open. An end tag closes the
    elements still open inside it first; an end tag without a matching open
    element is logged and dropped. Elements still open when the input ends
    are closed before ``end_document``.
    """

    def __init__(self, handler: EventHandler) -> None:
        super().__init__(convert_charrefs=False)
        self._handler = handler
        self._stack: list[StartTag] = []
        self._text: list[str] = []

    def _flush_text(self) -> None:
        if self._text:
            text = "".join(self._text)
            self._text.clear()
            self._handler.characters(text)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._flush_text()
        start = StartTag(tag, attrs)
        self._handler.start_element(start)
        if tag in VOID_ELEMENTS:
            self._handler.end_element(EndTag(tag), start)
        else:
            self._stack.append(start)

    def handle_endtag(self, tag: str) -> None:
        self._flush_text()
        if tag in VOID_ELEMENTS:
            return
        for index in range(len(self._stack) - 1, -1, -1):
            if self._stack[index].name == tag:
                break
        else:
            logger.warning("Ignoring end tag </%s> without a matching start tag.", tag)
            return
        while len(self._stack) > index:
            start = self._stack.pop()
            self._handler.end_element(EndTag(start.name), start)

    def handle_data(self, data: str) -> None:
        self._text.append(data)

    def handle_entityref(self, name: str) -> None:
        self._text.append(f"&{name};")

    def handle_charref(self, name: str) -> None:
        self._text.append(f"&#{name};")

    def handle_comment(self, data: str) -> None:
        self._flush_text()
        self._handler.comment(data)

    def close(self) -> None:
        super().close()
        self._flush_text()
        while self._stack:
            start = self._stack.pop()
            self._handler.end_element(EndTag(start.name), start)
        self._handler.end_document()


def _soup_attributes(tag: Tag) -> dict[str, str]:
    attributes: dict[str, str] = {}
    for key, value in tag.attrs.items():
        attributes[key] = " ".join(value) if isinstance(value, list) else str(value)
    return attributes


def _walk(node: PageElement, handler: EventHandler) -> None:
    if isinstance(node, Comment):
        handler.comment(str(node))
    elif isinstance(node, PreformattedString):
        return
    elif isinstance(node, NavigableString):
        # BeautifulSoup already decoded entities; re-encode the markup
        # characters so the entity table resolves each of them exactly once.
        handler.characters(escape(str(node), quote=False))
    elif isinstance(node, Tag):
        start = StartTag(node.name, _soup_attributes(node))
        handler.start_element(start)
        for child in list(node.children):
            _walk(child, handler)
        handler.end_element(EndTag(node.name), start)


def walk_soup(soup: BeautifulSoup | Tag, handler: EventHandler) -> None:
    """Emit the events of a parsed tree, then ``end_document``."""
    for child in list(soup.children):
        _walk(child, handler)
    handler.end_document()


def parse_with_soup(markup: str, handler: EventHandler, parser: str = "html.parser") -> None:
    """Parse ``markup`` with BeautifulSoup using ``parser`` and emit its events."""
    walk_soup(BeautifulSoup(markup, parser), handler)


__all__ = [
    "SOUP_PARSERS",
    "VOID_ELEMENTS",
    "EventHandler",
    "HtmlEventParser",
    "parse_with_soup",
    "walk_soup",
]
