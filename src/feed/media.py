"""
Media RSS Extension Lookup.

Mastodon attaches uploaded media to feed items with the Media RSS
extension::

    <media:content url="https://files.example/1.png" type="image/png"
                   fileSize="12345" medium="image">
      <media:rating scheme="urn:simple">nonadult</media:rating>
    </media:content>

Only the first attachment is considered. Posts marked sensitive carry a
rating other than ``nonadult`` and must not be republished with the image.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional


logger = logging.getLogger(__name__)


class Rating(enum.Enum):
    """Content rating of a media attachment."""
    NON_ADULT = "nonadult"
    OTHER = "other"


@dataclass
class Media:
    """First media attachment of a feed entry."""
    url: str
    file_size: int
    type: str
    rating: Rating


def get_media(entry: Any) -> Optional[Media]:
    """Return the first media attachment of a feed entry.

    Args:
        entry: feedparser entry

    Returns:
        Media for the first ``media:content``, or None if the entry has no
        attachment or the attachment lacks one of fileSize, type, url or
        rating (a warning is logged for each missing piece). An entry with
        several attachments is rated OTHER since its rating cannot be tied to
        the first one
    """
    media_contents = entry.get("media_content") or []
    if not media_contents:
        return None

    # feedparser lowercases attribute names, accept either spelling
    attrs = {str(key).lower(): value for key, value in media_contents[0].items()}

    raw_size = attrs.get("filesize")
    if raw_size is None:
        logger.warning("Not found the 'fileSize' attribute of the media content.")
        return None
    try:
        file_size = int(raw_size)
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to parse the 'fileSize' attribute of the media content: {e}")
        return None

    media_type = attrs.get("type")
    if media_type is None:
        logger.warning("Not found the 'type' attribute of the media content.")
        return None

    url = attrs.get("url")
    if url is None:
        logger.warning("Not found the 'url' attribute of the media content.")
        return None

    rating_ext = entry.get("media_rating")
    if not rating_ext:
        logger.warning("Not found the 'rating' content of the media content.")
        return None

    rating_value = rating_ext.get("content")
    if rating_value is None:
        logger.warning("Not found the 'value' of the media rating content.")
        return None

    # feedparser keeps one media_rating per entry, so with several
    # attachments it may belong to another one than the first
    if len(media_contents) > 1:
        logger.warning(
            f"Cannot tell the rating of {url} among {len(media_contents)} media contents, "
            f"treating it as sensitive"
        )
        rating = Rating.OTHER
    elif rating_value.strip() == Rating.NON_ADULT.value:
        rating = Rating.NON_ADULT
    else:
        logger.warning(f"Failed to parse the rating {rating_value}")
        rating = Rating.OTHER

    return Media(url=url, file_size=file_size, type=media_type, rating=rating)
