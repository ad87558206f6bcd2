"""
Pushover Notification Client for mstdn-rss2bsky-post.

This module sends push notifications via Pushover when a run goes wrong:
- A post to Bluesky failed
- A run aborted (lock held, feed unreachable, login refused)

Pushover Configuration:
    Configure via config.yml:
    - pushover.enabled: Set to true to enable notifications
    - pushover.app_token_file: Path to Docker secret for app token
    - pushover.user_key_file: Path to Docker secret for user key

Usage:
    >>> from config import load_config
    >>> config = load_config()
    >>> notifier = PushoverNotifier.from_config(config)
    >>> notifier.notify_run_failure("Failed to get lock: resource busy")

API Reference:
    Pushover API: https://pushover.net/api
"""
import os
import logging
from typing import Optional, Dict, Any
import requests


logger = logging.getLogger(__name__)


class PushoverNotifier:
    """Client for sending push notifications via Pushover service.

    Attributes:
        app_token: Pushover application API token
        user_key: Pushover user/group key
        enabled: Whether notifications are enabled (both credentials must be set)

    Example:
        >>> notifier = PushoverNotifier(app_token="...", user_key="...")
        >>> if notifier.enabled:
        ...     notifier.notify_run_failure("Feed unreachable")
    """

    # Pushover API endpoint
    PUSHOVER_API_URL = "https://api.pushover.net/1/messages.json"

    # Pushover field length limits
    MAX_TITLE_LENGTH = 250
    MAX_MESSAGE_LENGTH = 1024
    MAX_URL_LENGTH = 512
    MAX_URL_TITLE_LENGTH = 100

    def __init__(self, app_token: Optional[str] = None, user_key: Optional[str] = None,
                 config_enabled: bool = True):
        """Initialize Pushover notifier with credentials.

        Args:
            app_token: Pushover application API token. If None, reads from
                      PUSHOVER_APP_TOKEN environment variable.
            user_key: Pushover user/group key. If None, reads from
                     PUSHOVER_USER_KEY environment variable.
            config_enabled: Whether Pushover is enabled in config.yml (default: True)
        """
        self.app_token = app_token or os.environ.get("PUSHOVER_APP_TOKEN")
        self.user_key = user_key or os.environ.get("PUSHOVER_USER_KEY")
        self.enabled = (config_enabled and
                        self.app_token is not None and
                        self.user_key is not None)

        if not config_enabled:
            logger.debug("Pushover notifications disabled via config.yml")
        elif not self.enabled:
            logger.warning("Pushover notifications disabled: missing credentials")
        else:
            logger.info("Pushover notifications enabled")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "PushoverNotifier":
        """Create PushoverNotifier from configuration dictionary.

        Args:
            config: Configuration dictionary from load_config()

        Returns:
            Initialized PushoverNotifier instance
        """
        from config import read_secret_file

        pushover_config = config.get("pushover", {})
        if not pushover_config.get("enabled", False):
            return cls(config_enabled=False)

        app_token_file = pushover_config.get("app_token_file", "/run/secrets/pushover_app_token")
        user_key_file = pushover_config.get("user_key_file", "/run/secrets/pushover_user_key")

        return cls(
            app_token=read_secret_file(app_token_file),
            user_key=read_secret_file(user_key_file),
            config_enabled=True
        )

    def _send_notification(
        self,
        title: str,
        message: str,
        priority: int = 0,
        url: Optional[str] = None,
        url_title: Optional[str] = None
    ) -> bool:
        """Send a push notification via Pushover API.

        Args:
            title: Notification title (up to 250 characters)
            message: Notification message (up to 1024 characters)
            priority: Priority level (-2 to 2)
            url: Optional URL to include in notification
            url_title: Optional title for the URL

        Returns:
            True if notification sent successfully, False otherwise
        """
        if not self.enabled:
            logger.debug(f"Pushover notification skipped (disabled): {title} - {message}")
            return False

        try:
            payload = {
                "token": self.app_token,
                "user": self.user_key,
                "title": title[:self.MAX_TITLE_LENGTH],
                "message": message[:self.MAX_MESSAGE_LENGTH],
                "priority": priority,
            }

            if url:
                payload["url"] = url[:self.MAX_URL_LENGTH]
                if url_title:
                    payload["url_title"] = url_title[:self.MAX_URL_TITLE_LENGTH]

            response = requests.post(self.PUSHOVER_API_URL, data=payload, timeout=10)
            response.raise_for_status()

            logger.info(f"Pushover notification sent: {title}")
            return True

        except requests.exceptions.RequestException as e:
            logger.warning(f"Failed to send Pushover notification: {e}")
            return False

    def notify_post_failure(self, post_text: str, account_name: str, platform: str, error: str) -> bool:
        """Send notification when posting to an account fails.

        Args:
            post_text: Text (or a short label) of the post that failed
            account_name: Name of the social media account
            platform: Platform name ("Bluesky")
            error: Error message describing the failure

        Returns:
            True if notification sent successfully, False otherwise
        """
        title = f"❌ Failed to post to {platform}"
        message = f"Failed to post to {account_name}:\n{post_text}\n\nError: {error}"
        return self._send_notification(title=title, message=message, priority=1)

    def notify_run_failure(self, error: str, feed_url: Optional[str] = None) -> bool:
        """Send notification when a run aborts.

        Args:
            error: Error message that stopped the run
            feed_url: Feed the run was processing, if known

        Returns:
            True if notification sent successfully, False otherwise
        """
        return self._send_notification(
            title="🚨 mstdn-rss2bsky-post run failed",
            message=error,
            priority=1,
            url=feed_url,
            url_title="Feed" if feed_url else None
        )
