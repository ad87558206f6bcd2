"""Storage Module - posted links DB and run lock."""
from .posted_links import PostedLinksDB

__all__ = ["PostedLinksDB"]
