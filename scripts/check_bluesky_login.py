#!/usr/bin/env python3
"""
Helper script to check Bluesky credentials before scheduling runs.

This script logs in to the AT Protocol server the same way a run does and
prints the account it authenticated as, so a wrong handle, app password or
XRPC host shows up before cron starts the tool.

Usage:
    python scripts/check_bluesky_login.py <identifier> [<password>]

    The password falls back to $ATPROTO_PASSWORD and the server to
    $XRPC_HOST (default: https://bsky.social).

Example:
    ATPROTO_PASSWORD=xxxx-xxxx-xxxx-xxxx python scripts/check_bluesky_login.py myhandle.bsky.social

Security Note:
    - Use app passwords (not your main password)
    - Generate app passwords at: https://bsky.app/settings/app-passwords
"""
import os
import sys

from config import DEFAULT_XRPC_HOST
from social.bluesky_client import BlueskyClient


def main():
    """Log in and display the authenticated Bluesky account."""
    if len(sys.argv) not in (2, 3):
        print("Usage: python scripts/check_bluesky_login.py <identifier> [<password>]")
        print("\nThe password defaults to $ATPROTO_PASSWORD.")
        return 1

    identifier = sys.argv[1]
    password = sys.argv[2] if len(sys.argv) == 3 else os.environ.get("ATPROTO_PASSWORD")
    xrpc_host = os.environ.get("XRPC_HOST", DEFAULT_XRPC_HOST)

    if not password:
        print("❌ No password given and ATPROTO_PASSWORD is not set")
        return 1

    print(f"\n🔄 Authenticating with {xrpc_host} as @{identifier}...")
    client = BlueskyClient(instance_url=xrpc_host, handle=identifier, app_password=password)
    account = client.verify_credentials()

    if account is None:
        print("\n❌ Authentication failed")
        print("\nTroubleshooting:")
        print("  - Verify your handle is correct (e.g., yourhandle.bsky.social)")
        print("  - Check your app password is correct")
        print("  - Check XRPC_HOST if your account is not hosted on bsky.social")
        return 1

    print(f"\n✅ Successfully authenticated as @{account['handle']}")
    print(f"   Display Name: {account['display_name'] or 'N/A'}")
    print(f"   DID: {account['did']}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
