"""
HTML to Rich Text Conversion.

Mastodon renders toots as small HTML fragments: paragraphs, line breaks,
links (mentions, hashtags, URLs) and spans that hide parts of long URLs.
Bluesky only understands plain text with link facets, so the fragment is
flattened into segments:

    - character data is accumulated into the current run
    - <br> becomes a newline in the current run
    - <a href="..."> starts a link run, </a> closes it
    - every other tag only changes the nesting depth

A link run is only emitted if the closing </a> brings the depth back to the
level the link was opened at. Links left open at the end of input are
dropped.
"""
import logging
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import List, Optional, Union


logger = logging.getLogger(__name__)

# Elements that never get an end tag in HTML and must not change the depth
VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})


@dataclass
class PlainText:
    """A run of text without any annotation."""
    text: str


@dataclass
class Link:
    """A run of text that links to ``link``."""
    text: str
    link: str


RichTextSegment = Union[PlainText, Link]


class RichTextExtractor(HTMLParser):
    """HTML parser that collects :data:`RichTextSegment` items.

    Attributes:
        segments: Segments collected so far, in document order
    """

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.segments: List[RichTextSegment] = []
        self.tag_depth = 0
        # Pending run; _link is set while inside <a href>
        self._text: Optional[str] = None
        self._link: Optional[str] = None
        self._link_depth = 0

    def _append_text(self, text: str) -> None:
        if self._text is None:
            self._text = ""
        self._text += text

    def _start_link(self, attrs) -> None:
        href = dict(attrs).get("href")
        if href is None:
            return
        if self._link is not None:
            # Nested anchors are ignored
            return
        self._flush()
        self._text = ""
        self._link = href
        self._link_depth = self.tag_depth

    def _flush(self) -> None:
        """Emit the pending run, if any, and reset to the idle state."""
        if self._link is not None:
            if self.tag_depth <= self._link_depth:
                self.segments.append(Link(text=self._text or "", link=self._link))
        elif self._text is not None:
            self.segments.append(PlainText(text=self._text))
        self._text = None
        self._link = None

    def handle_starttag(self, tag, attrs):
        if tag == "br":
            self._append_text("\n")
        elif tag == "a":
            self._start_link(attrs)
        if tag not in VOID_ELEMENTS:
            self.tag_depth += 1

    def handle_startendtag(self, tag, attrs):
        # <br/>, <a/> and friends open and close in one token
        self.handle_starttag(tag, attrs)
        if tag not in VOID_ELEMENTS:
            self.handle_endtag(tag)

    def handle_endtag(self, tag):
        if tag in VOID_ELEMENTS:
            return
        self.tag_depth = max(self.tag_depth - 1, 0)
        if tag == "a":
            self._flush()

    def handle_data(self, data):
        self._append_text(data)

    def close(self):
        super().close()
        self._flush()


def from_html(content: str) -> List[RichTextSegment]:
    """Convert an HTML fragment into rich text segments.

    Args:
        content: HTML fragment, typically an RSS item description

    Returns:
        List of PlainText and Link segments in document order

    Example:
        >>> from_html("<p>Hello<br />world</p>")
        [PlainText(text='Hello\\nworld')]
    """
    parser = RichTextExtractor()
    parser.feed(content)
    parser.close()
    logger.debug(f"Converted HTML into {len(parser.segments)} rich text segments")
    return parser.segments
