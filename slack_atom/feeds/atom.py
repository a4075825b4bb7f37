"""
Atom Serialization

Writes a FeedDocument as an Atom 1.0 document using feedgen.
"""

import logging

from feedgen.feed import FeedGenerator

from slack_atom.models.feed import FeedDocument

logger = logging.getLogger(__name__)

ATOM_MEDIA_TYPE = "application/atom+xml"
GENERATOR = "Slack-Atom Bridge"


def render_atom(document: FeedDocument) -> bytes:
    fg = FeedGenerator()
    fg.id(document.id)
    fg.title(document.title)
    fg.link(href=document.link, rel="alternate")
    fg.link(href=document.feed_link, rel="self")
    fg.generator(GENERATOR)
    if document.icon:
        fg.icon(document.icon)
    # feedgen falls back to the current time when updated is not set
    if document.updated is not None:
        fg.updated(document.updated)

    for item in document.items:
        fe = fg.add_entry(order="append")
        fe.id(item.link)
        # Atom entries must carry a non-empty title
        fe.title(item.title or "(no text)")
        fe.link(href=item.link)
        author = {"name": item.author.name}
        if item.author.email:
            author["email"] = item.author.email
        if item.author.link:
            author["uri"] = item.author.link
        fe.author(author)
        fe.updated(item.updated)
        fe.content(item.content, type="html")

    logger.debug(f"Rendered feed {document.id} with {len(document.items)} entries")
    return fg.atom_str(pretty=True)
