"""
Base Social Media Client for mstdn-rss2bsky-post.

This module provides a base class for social media clients with common
enable/disable handling and remote media download that platform-specific
implementations inherit.
"""
import logging
from typing import Optional, Dict, Any, List
from abc import ABC, abstractmethod
import requests


logger = logging.getLogger(__name__)


class SocialMediaClient(ABC):
    """Abstract base class for social media clients.

    Attributes:
        instance_url: URL of the social media instance/server
        access_token: Secret used to authenticate (token or app password)
        enabled: Whether posting is enabled for this client
        api: Platform-specific API client instance (None if not enabled)
        account_name: Name used in log messages

    Example:
        >>> class MyClient(SocialMediaClient):
        ...     def _initialize_api(self):
        ...         self.api = object()
        ...
        ...     def post(self, content, **kwargs):
        ...         return {"uri": "..."}
        ...
        ...     def verify_credentials(self):
        ...         return {"handle": "..."}
    """

    # Timeout for fetching media attached to a post
    IMAGE_DOWNLOAD_TIMEOUT = 30  # seconds

    def __init__(
        self,
        instance_url: str,
        access_token: Optional[str] = None,
        config_enabled: bool = True,
        account_name: Optional[str] = None
    ):
        """Initialize social media client with credentials.

        Args:
            instance_url: URL of the social media instance (e.g., https://bsky.social)
            access_token: Secret for API authentication
            config_enabled: Whether posting is enabled (default: True)
            account_name: Optional name for this account (for logging)

        Note:
            Posting will be disabled if:
            - config_enabled is False
            - instance_url is not provided
            - access_token is missing
            - _initialize_api() raises
        """
        self.instance_url = instance_url
        self.access_token = access_token
        self.api: Optional[Any] = None
        self.account_name = account_name or "unnamed"

        self.enabled = bool(
            config_enabled and
            instance_url and
            access_token is not None
        )

        if not config_enabled:
            logger.info(f"{self.__class__.__name__} posting disabled via configuration")
        elif not self.enabled:
            logger.warning(
                f"{self.__class__.__name__} posting disabled: missing instance URL or credentials"
            )
        else:
            try:
                self._initialize_api()
                logger.info(f"{self.__class__.__name__} '{self.account_name}' initialized for {self.instance_url}")
            except Exception as e:
                logger.error(f"Failed to initialize {self.__class__.__name__} '{self.account_name}': {e}")
                self.enabled = False
                self.api = None

    def _download_image(self, url: str) -> Optional[bytes]:
        """Download an image from a URL.

        Args:
            url: URL of the image to download

        Returns:
            Image bytes, or None if the download fails
        """
        try:
            response = requests.get(url, timeout=self.IMAGE_DOWNLOAD_TIMEOUT)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to download image from {url}: {e}")
            return None

        logger.debug(f"Downloaded {len(response.content)} bytes from {url}")
        return response.content

    @abstractmethod
    def _initialize_api(self) -> None:
        """Initialize the platform-specific API client and authenticate.

        The implementation should set self.api to the initialized client.

        Raises:
            Exception: If API initialization fails
        """
        pass

    @abstractmethod
    def post(
        self,
        content: Any,
        media_urls: Optional[List[str]] = None,
        media_descriptions: Optional[List[str]] = None,
        **kwargs
    ) -> Optional[Dict[str, Any]]:
        """Post content to the social media platform.

        Args:
            content: Post content (plain text or platform rich text)
            media_urls: Optional list of image URLs to attach
            media_descriptions: Optional alt texts matching media_urls
            **kwargs: Platform-specific options

        Returns:
            Dictionary describing the created post, or None if posting failed
        """
        pass

    @abstractmethod
    def verify_credentials(self) -> Optional[Dict[str, Any]]:
        """Verify the session and get account information.

        Returns:
            Dictionary containing account information, or None if verification failed
        """
        pass
