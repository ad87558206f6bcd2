"""
Post Composition.

Builds the Bluesky post for a feed entry:

    <description text, cut to fit>[...\\n]<original link prefix><original link>

The description is converted to rich text and its links become link
facets. The original link always survives truncation and is itself a link
facet, so readers can jump to the toot on Mastodon.
"""
import logging

from atproto import client_utils

from config import DEFAULT_ORIGINAL_LINK_PREFIX, DEFAULT_POST_TEXT_LIMIT
from richtext import from_html, Link


logger = logging.getLogger(__name__)

# Appended to cut descriptions
TRUNCATION_MARK = "...\n"


def compose_post(
    description_html: str,
    item_link: str,
    original_link_prefix: str = DEFAULT_ORIGINAL_LINK_PREFIX,
    post_text_limit: int = DEFAULT_POST_TEXT_LIMIT
) -> client_utils.TextBuilder:
    """Compose the rich text of a Bluesky post from a feed entry.

    Lengths are counted in code points. The description gets whatever is
    left of ``post_text_limit`` after the prefix, the link and the
    truncation mark; the first segment that does not fit is cut and ends
    the description.

    Args:
        description_html: HTML description of the feed entry
        item_link: URL of the original toot
        original_link_prefix: Text placed before the original link
        post_text_limit: Maximum post length

    Returns:
        TextBuilder holding the text and its link facets

    Example:
        >>> builder = compose_post("<p>Hello</p>", "https://m.example/@a/1", "From: ")
        >>> builder.build_text()
        'HelloFrom: https://m.example/@a/1'
    """
    builder = client_utils.TextBuilder()
    remaining = post_text_limit - len(original_link_prefix) - len(item_link) - len(TRUNCATION_MARK)
    remaining = max(remaining, 0)
    truncated = False

    for segment in from_html(description_html):
        text = segment.text
        if len(text) > remaining:
            text = text[:remaining]
            truncated = True
        remaining -= len(text)

        if isinstance(segment, Link):
            if text:
                builder.link(text, segment.link)
        elif text:
            builder.text(text)

        if truncated:
            break

    if truncated:
        logger.debug(f"Description of {item_link} truncated to fit {post_text_limit} characters")
        builder.text(TRUNCATION_MARK)
    builder.text(original_link_prefix)
    builder.link(item_link, item_link)
    return builder
