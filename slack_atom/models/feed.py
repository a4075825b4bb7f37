"""
Feed Document Model

The syndication-format-neutral shape of a feed: a document with metadata and
an ordered list of items. Serialization lives in slack_atom.feeds.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional


class FeedAuthor(BaseModel):
    """Author of a feed item."""

    name: str
    email: Optional[str] = None
    link: Optional[str] = None


class FeedItem(BaseModel):
    """One rendered entry in a feed."""

    author: FeedAuthor
    link: str
    title: str
    updated: datetime
    content: str


class FeedDocument(BaseModel):
    """Feed-level metadata plus the assembled, ordered items."""

    title: str
    id: str
    link: str
    feed_link: str
    icon: Optional[str] = None
    updated: Optional[datetime] = None  # Omitted when only the placeholder item is present
    items: List[FeedItem]
