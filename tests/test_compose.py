"""
Unit Tests for Post Composition.

Test Coverage:
    - Layout: description, prefix, original link
    - Link facets with UTF-8 byte offsets
    - Truncation to the post text limit, including inside links
    - Limits smaller than the prefix and link
"""
from rss2bsky.compose import compose_post, TRUNCATION_MARK


ITEM_LINK = "https://m.ex/@a/1"


def _facets(builder):
    return [
        (facet.index.byte_start, facet.index.byte_end, facet.features[0].uri)
        for facet in builder.build_facets()
    ]


def test_layout_and_facets():
    builder = compose_post(
        '<p>Hello <a href="https://ex.com/">world</a></p>',
        ITEM_LINK,
        "From: ",
        300
    )

    assert builder.build_text() == "Hello worldFrom: https://m.ex/@a/1"
    assert _facets(builder) == [
        (6, 11, "https://ex.com/"),
        (17, 34, ITEM_LINK),
    ]


def test_default_prefix():
    builder = compose_post("<p>Hi</p>", ITEM_LINK)

    assert builder.build_text() == f"Hi[マストドン投稿から]:{ITEM_LINK}"


def test_byte_offsets_for_multibyte_text():
    builder = compose_post(
        '日本語<a href="https://e.com">リンク</a>',
        "https://m/1",
        "",
        300
    )

    assert builder.build_text() == "日本語リンクhttps://m/1"
    assert _facets(builder) == [
        (9, 18, "https://e.com"),
        (18, 29, "https://m/1"),
    ]


def test_long_description_is_truncated():
    # room for description = 30 - 2 - 13 - 4 = 11
    builder = compose_post(
        "<p>abcdefghijklmnopqrstuvwxyz</p>",
        "https://x.y/1",
        "P:",
        30
    )

    text = builder.build_text()
    assert text == "abcdefghijk...\nP:https://x.y/1"
    assert len(text) == 30


def test_truncation_inside_link_keeps_partial_facet():
    # room for description = 22 - 0 - 13 - 4 = 5
    builder = compose_post(
        '<a href="https://e.com">abcdefghij</a>tail',
        "https://x.y/1",
        "",
        22
    )

    assert builder.build_text() == "abcde...\nhttps://x.y/1"
    assert _facets(builder) == [
        (0, 5, "https://e.com"),
        (9, 22, "https://x.y/1"),
    ]


def test_exact_fit_is_not_truncated():
    limit = len("abc") + len(TRUNCATION_MARK) + len("P:") + len(ITEM_LINK)
    builder = compose_post("<p>abc</p>", ITEM_LINK, "P:", limit)

    assert builder.build_text() == f"abcP:{ITEM_LINK}"


def test_segments_after_truncation_are_dropped():
    # room for description = 25 - 0 - 13 - 4 = 8
    builder = compose_post(
        '<p>abcdefghijkl <a href="https://e.com">never</a></p>',
        "https://x.y/1",
        "",
        25
    )

    assert builder.build_text() == "abcdefgh...\nhttps://x.y/1"
    assert _facets(builder) == [(12, 25, "https://x.y/1")]


def test_limit_smaller_than_link():
    builder = compose_post("<p>text</p>", ITEM_LINK, "prefix:", 10)

    assert builder.build_text() == f"...\nprefix:{ITEM_LINK}"


def test_empty_description():
    builder = compose_post("", ITEM_LINK, "P:", 300)

    assert builder.build_text() == f"P:{ITEM_LINK}"
    assert _facets(builder) == [(2, 2 + len(ITEM_LINK), ITEM_LINK)]
