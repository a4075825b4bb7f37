# Shared data models
from slack_atom.models.feed import FeedAuthor, FeedDocument, FeedItem

__all__ = ["FeedAuthor", "FeedDocument", "FeedItem"]
