"""
Feed Assembler

Orders feed items newest first and makes the item set acceptable to feed
readers, which reject a whole feed when two entries share an "updated"
timestamp or when the feed has no entries at all.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from slack_atom.models.feed import FeedAuthor, FeedDocument, FeedItem

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
COLLISION_STEP = timedelta(seconds=1)


def empty_placeholder() -> FeedItem:
    return FeedItem(
        author=FeedAuthor(name="Slack-Atom Bridge", email="nobody@example.com"),
        link="about:blank",
        title="Empty",
        updated=EPOCH,
        content="This feed contains no messages!",
    )


def sort_newest_first(items: List[FeedItem]) -> None:
    # list.sort is stable, so items with equal timestamps keep their order
    items.sort(key=lambda item: item.updated, reverse=True)


def repair_collisions(items: List[FeedItem]) -> int:
    """
    Bump timestamps until no two items share one. ``items`` must be sorted newest first.

    Of two equal neighbours the one shown first is moved one second later, so
    among items that shared a timestamp the first in input order ends up
    newest. Returns the number of bumps.
    """
    bumps = 0
    changed = True
    while changed:
        changed = False
        overtaken = False
        for i in range(1, len(items)):
            if items[i - 1].updated == items[i].updated:
                items[i - 1].updated += COLLISION_STEP
                bumps += 1
                changed = True
                # Only a neighbour less than a second newer can be overtaken
                if i >= 2 and items[i - 1].updated > items[i - 2].updated:
                    overtaken = True
        if overtaken:
            sort_newest_first(items)
    if bumps:
        logger.debug(f"Moved {bumps} colliding timestamps")
    return bumps


def assemble_items(items: Sequence[FeedItem]) -> List[FeedItem]:
    """Sorted, collision-free items; a single placeholder when there are none."""
    assembled = list(items)
    if not assembled:
        return [empty_placeholder()]
    sort_newest_first(assembled)
    repair_collisions(assembled)
    return assembled


def assemble_feed(
    items: Sequence[FeedItem],
    title: str,
    id: str,
    link: str,
    feed_link: str,
    icon: Optional[str] = None,
) -> FeedDocument:
    assembled = assemble_items(items)
    return FeedDocument(
        title=title,
        id=id,
        link=link,
        feed_link=feed_link,
        icon=icon,
        updated=assembled[0].updated if items else None,
        items=assembled,
    )
