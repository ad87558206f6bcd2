"""
Bluesky Client for mstdn-rss2bsky-post.

This module posts rich text, optionally with images, to a Bluesky account
using the ATProto library.

Bluesky Configuration:
    Configure via command line, environment or config.yml:
    - xrpc_host: AT Protocol server (e.g., https://bsky.social)
    - bluesky.identifier: Handle or DID (ATPROTO_IDENTIFIER)
    - bluesky.password_file: Docker secret holding the app password
      (ATPROTO_PASSWORD)

Usage:
    >>> from atproto import client_utils
    >>> client = BlueskyClient("https://bsky.social", "user.bsky.social", "app-password")
    >>> if client.enabled:
    ...     text = client_utils.TextBuilder().text("Hello ").link("link", "https://example.com")
    ...     result = client.post(text)
    ...     print(f"Posted: {result['uri']}")

Authentication:
    Use an app password from Bluesky Settings > App Passwords rather than
    the account password.

API Reference:
    ATProto Python SDK: https://atproto.blue/
    Bluesky API: https://docs.bsky.app/
"""
import io
import logging
from typing import Optional, Dict, Any, List, Union, TYPE_CHECKING

from PIL import Image
from atproto import Client, client_utils, models

from social.base_client import SocialMediaClient

if TYPE_CHECKING:
    from config import Settings
    from notifications.pushover import PushoverNotifier

logger = logging.getLogger(__name__)


class BlueskyClient(SocialMediaClient):
    """Client for posting to Bluesky.

    Attributes:
        instance_url: URL of the AT Protocol server (e.g., https://bsky.social)
        handle: Bluesky handle or DID used to log in
        app_password: App password for authenticated API calls
        enabled: Whether the client logged in successfully
        api: ATProto Client instance (None if not enabled)

    Example:
        >>> client = BlueskyClient(
        ...     instance_url="https://bsky.social",
        ...     handle="user.bsky.social",
        ...     app_password="your-app-password"
        ... )
        >>> client.current_did
        'did:plc:...'
    """

    # Bluesky blob size limit (976.56KB = 1,000,000 bytes)
    MAX_BLOB_SIZE = 1_000_000

    # Maximum pixel dimension for image compression (longest side)
    IMAGE_MAX_DIMENSION = 2500

    # Bluesky accepts at most 4 images per post
    MAX_IMAGES = 4

    def __init__(
        self,
        instance_url: str,
        handle: Optional[str] = None,
        app_password: Optional[str] = None,
        config_enabled: bool = True,
        account_name: Optional[str] = None,
        notifier: Optional["PushoverNotifier"] = None
    ):
        """Initialize Bluesky client and log in.

        Args:
            instance_url: URL of the AT Protocol server (e.g., https://bsky.social)
            handle: Bluesky handle or DID
            app_password: App password for API authentication
            config_enabled: Whether posting is enabled (default: True)
            account_name: Optional name for this account (for logging)
            notifier: PushoverNotifier instance for error notifications
        """
        self.handle = handle
        self.app_password = app_password
        self.notifier = notifier

        super().__init__(
            instance_url=instance_url,
            access_token=app_password,
            config_enabled=config_enabled,
            account_name=account_name or handle
        )

    @staticmethod
    def _xrpc_base_url(instance_url: str) -> str:
        """Return the XRPC endpoint base for a server URL.

        Example:
            >>> BlueskyClient._xrpc_base_url("https://bsky.social/")
            'https://bsky.social/xrpc'
        """
        base_url = instance_url.rstrip("/")
        if not base_url.endswith("/xrpc"):
            base_url = f"{base_url}/xrpc"
        return base_url

    def _initialize_api(self) -> None:
        """Initialize the ATProto client and create a session.

        Raises:
            ValueError: If handle or app password is missing
            Exception: If login fails
        """
        if not self.handle or not self.app_password:
            raise ValueError("Bluesky handle and app_password are required")

        self.api = Client(base_url=self._xrpc_base_url(self.instance_url))
        self.api.login(login=self.handle, password=self.app_password)

    @classmethod
    def from_settings(cls, settings: "Settings", notifier: Optional["PushoverNotifier"] = None) -> "BlueskyClient":
        """Create a BlueskyClient from resolved run settings.

        Args:
            settings: Settings from config.resolve_settings()
            notifier: PushoverNotifier instance for error notifications

        Returns:
            BlueskyClient instance; check ``enabled`` before posting
        """
        return cls(
            instance_url=settings.xrpc_host,
            handle=settings.atproto_identifier,
            app_password=settings.atproto_password,
            config_enabled=bool(settings.atproto_identifier and settings.atproto_password),
            notifier=notifier
        )

    @property
    def current_did(self) -> Optional[str]:
        """DID of the authenticated session, or None without a session."""
        if not self.api or not getattr(self.api, "me", None):
            return None
        return self.api.me.did

    @staticmethod
    def _compress_image(image_data: bytes, max_size: int = 1_000_000, max_dimension: int = 2500) -> bytes:
        """Shrink an image until it fits within the blob size limit.

        The image is scaled so its longest side is at most max_dimension
        pixels and re-encoded as JPEG with decreasing quality.

        Args:
            image_data: Raw image bytes
            max_size: Maximum file size in bytes
            max_dimension: Maximum pixel dimension for longest side

        Returns:
            Image bytes within max_size, the original bytes if they already
            fit or cannot be decoded, or the smallest encoding found
        """
        if len(image_data) <= max_size:
            return image_data

        try:
            img = Image.open(io.BytesIO(image_data))
            img.load()
        except Exception as e:
            logger.warning(f"Could not open image for compression: {e}")
            return image_data

        if img.mode != 'RGB':
            img = img.convert('RGB')

        if max(img.size) > max_dimension:
            original_size = img.size
            img.thumbnail((max_dimension, max_dimension), Image.LANCZOS)
            logger.debug(f"Resized image from {original_size} to {img.size}")

        compressed = image_data
        for quality in range(95, 0, -5):
            buffer = io.BytesIO()
            img.save(buffer, format='JPEG', quality=quality)
            compressed = buffer.getvalue()
            if len(compressed) <= max_size:
                logger.info(
                    f"Compressed image from {len(image_data)} to "
                    f"{len(compressed)} bytes (quality={quality})"
                )
                return compressed

        logger.warning(
            f"Could not compress image below {max_size} bytes "
            f"(final size: {len(compressed)} bytes)"
        )
        return compressed

    def _upload_images(
        self,
        media_urls: List[str],
        media_descriptions: Optional[List[str]]
    ) -> List[models.AppBskyEmbedImages.Image]:
        """Download, compress and upload images, skipping the ones that fail."""
        if len(media_urls) > self.MAX_IMAGES:
            logger.warning(
                f"Bluesky '{self.account_name}': Post has {len(media_urls)} images, "
                f"limiting to {self.MAX_IMAGES} (Bluesky maximum)"
            )
            media_urls = media_urls[:self.MAX_IMAGES]

        images = []
        for i, url in enumerate(media_urls):
            image_data = self._download_image(url)
            if image_data is None:
                logger.warning(f"Skipping media upload for {url} due to download failure")
                if self.notifier:
                    self.notifier.notify_post_failure(
                        "Media Download Failed",
                        self.account_name,
                        "Bluesky",
                        f"Failed to download image: {url}"
                    )
                continue

            description = ""
            if media_descriptions and i < len(media_descriptions):
                description = media_descriptions[i] or ""

            try:
                image_data = self._compress_image(
                    image_data,
                    max_size=self.MAX_BLOB_SIZE,
                    max_dimension=self.IMAGE_MAX_DIMENSION
                )
                upload_result = self.api.upload_blob(image_data)
                images.append(
                    models.AppBskyEmbedImages.Image(
                        alt=description,
                        image=upload_result.blob
                    )
                )
                logger.debug(f"Uploaded media {url} to Bluesky")
            except Exception as e:
                error_msg = f"Failed to upload media {url}: {e}"
                logger.error(error_msg)
                if self.notifier:
                    self.notifier.notify_post_failure(
                        "Media Upload Failed",
                        self.account_name,
                        "Bluesky",
                        error_msg
                    )
        return images

    def post(
        self,
        content: Union[str, client_utils.TextBuilder],
        media_urls: Optional[List[str]] = None,
        media_descriptions: Optional[List[str]] = None,
        **kwargs
    ) -> Optional[Dict[str, Any]]:
        """Post rich text to Bluesky.

        Args:
            content: TextBuilder with text and facets, or plain text
            media_urls: Optional list of image URLs to attach to the post
            media_descriptions: Optional alt texts, matched to media_urls by
                position; missing entries get an empty alt text
            **kwargs: Passed through to Client.send_post (e.g., langs)

        Returns:
            Dictionary with the post "uri" and "cid", or None if posting failed

        Note:
            An image that cannot be downloaded or uploaded is left out; the
            post is still created with the remaining images.
        """
        if not self.enabled or not self.api:
            logger.warning(f"Cannot post to Bluesky '{self.account_name}': client not enabled")
            return None

        text = content.build_text() if isinstance(content, client_utils.TextBuilder) else content

        try:
            embed = None
            if media_urls:
                images = self._upload_images(media_urls, media_descriptions)
                if images:
                    embed = models.AppBskyEmbedImages.Main(images=images)

            result = self.api.send_post(content, embed=embed, **kwargs)

            logger.info(f"Successfully posted to Bluesky '{self.account_name}': {result.uri}")
            return {
                "uri": result.uri,
                "cid": result.cid
            }
        except Exception as e:
            error_msg = f"Failed to post to Bluesky '{self.account_name}': {e}"
            logger.error(error_msg)
            if self.notifier:
                self.notifier.notify_post_failure(
                    text[:100] + "..." if len(text) > 100 else text,
                    self.account_name,
                    "Bluesky",
                    str(e)
                )
            return None

    def verify_credentials(self) -> Optional[Dict[str, Any]]:
        """Verify Bluesky credentials.

        Returns:
            Dictionary with handle, DID and display name, or None if verification failed
        """
        if not self.enabled or not self.api:
            logger.warning(f"Cannot verify credentials for Bluesky '{self.account_name}': client not enabled")
            return None

        try:
            if not self.api.me:
                logger.error(f"Failed to verify credentials for Bluesky '{self.account_name}': No session")
                return None

            profile = self.api.get_profile(actor=self.api.me.did)

            logger.info(f"Verified credentials for Bluesky '{self.account_name}': @{profile.handle}")
            return {
                "handle": profile.handle,
                "did": profile.did,
                "display_name": profile.display_name
            }
        except Exception as e:
            logger.error(f"Failed to verify credentials for Bluesky '{self.account_name}': {e}")
            return None
