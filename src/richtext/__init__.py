"""Rich Text Module.

Converts the HTML found in feed entry descriptions into a flat list of
segments that map directly onto Bluesky rich text: plain runs and links.

Usage:
    >>> from richtext import from_html, PlainText, Link
    >>> from_html('Hi <a href="https://example.com">there</a>')
    [PlainText(text='Hi '), Link(text='there', link='https://example.com')]
"""
from .html import from_html, PlainText, Link, RichTextSegment

__all__ = ["from_html", "PlainText", "Link", "RichTextSegment"]
