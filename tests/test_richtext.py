"""
Unit Tests for HTML to Rich Text Conversion.

Covers the shapes Mastodon produces: paragraphs, line breaks, mention and
hashtag links wrapped in spans, and HTML entities.
"""
from richtext import from_html, PlainText, Link


def test_plain_paragraph():
    assert from_html("<p>Hello</p>") == [PlainText(text="Hello")]


def test_empty_input():
    assert from_html("") == []


def test_line_breaks_become_newlines():
    assert from_html("<p>a<br>b<br />c</p>") == [PlainText(text="a\nb\nc")]


def test_paragraphs_are_not_separated():
    assert from_html("<p>one</p><p>two</p>") == [PlainText(text="onetwo")]


def test_link_splits_plain_text():
    segments = from_html('Hi <a href="https://example.com">there</a>!')

    assert segments == [
        PlainText(text="Hi "),
        Link(text="there", link="https://example.com"),
        PlainText(text="!"),
    ]


def test_mastodon_mention_inside_spans():
    html = (
        '<p><span class="h-card"><a href="https://mastodon.example/@bob" class="u-url mention">'
        '@<span>bob</span></a></span> hello</p>'
    )

    assert from_html(html) == [
        Link(text="@bob", link="https://mastodon.example/@bob"),
        PlainText(text=" hello"),
    ]


def test_mastodon_shortened_url():
    html = (
        '<p><a href="https://example.com/a/very/long/path" rel="nofollow noopener" target="_blank">'
        '<span class="invisible">https://</span><span class="ellipsis">example.com/a/very</span>'
        '<span class="invisible">/long/path</span></a></p>'
    )

    assert from_html(html) == [
        Link(text="https://example.com/a/very/long/path", link="https://example.com/a/very/long/path"),
    ]


def test_entities_are_decoded():
    assert from_html("<p>a &amp; b &lt;3 &#12354;</p>") == [PlainText(text="a & b <3 あ")]


def test_line_break_inside_link():
    assert from_html('<a href="https://example.com">a<br/>b</a>') == [
        Link(text="a\nb", link="https://example.com"),
    ]


def test_anchor_without_href_is_plain_text():
    assert from_html('<a name="top">anchor</a> text') == [
        PlainText(text="anchor"),
        PlainText(text=" text"),
    ]


def test_unclosed_link_is_dropped():
    assert from_html('before <a href="https://example.com">open') == [PlainText(text="before ")]


def test_comments_are_ignored():
    assert from_html("<p>a<!-- hidden -->b</p>") == [PlainText(text="ab")]


def test_multiple_links():
    segments = from_html(
        '<p><a href="https://a.example">a</a> and <a href="https://b.example">b</a></p>'
    )

    assert segments == [
        Link(text="a", link="https://a.example"),
        PlainText(text=" and "),
        Link(text="b", link="https://b.example"),
    ]


def test_nested_anchor_drops_outer_link():
    assert from_html('<a href="u">x<a href="v">y</a>z</a>') == [PlainText(text="z")]


def test_link_closed_inside_deeper_element_is_dropped():
    assert from_html('<a href="u"><b>t</a></b>') == []
