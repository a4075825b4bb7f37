"""
Feed Item Builder

Builds one FeedItem per message (conversation history feeds) and one per
conversation (directory feed), combining translated text, resolved
authorship, file attachments and metadata.
"""

import html
import logging
from typing import List, Mapping, Optional

from slack_atom.config import Settings
from slack_atom.core.markup import MarkupTranslator
from slack_atom.core import thumbnail
from slack_atom.integrations.slack.models import Attachment, Channel, ChannelKind, Message, Team, Topic, User
from slack_atom.integrations.slack.permalink import archive_url, message_permalink, profile_url
from slack_atom.models.feed import FeedAuthor, FeedItem

logger = logging.getLogger(__name__)

TITLE_LENGTH = 80
ELLIPSIS = "…"
UNKNOWN_HANDLE = "unknown"
UNKNOWN_DISPLAY_NAME = "Unknown User"
MUTED = 'style="font-size: 80%; color: #666666;"'

CHANNEL_LABELS = {
    ChannelKind.PUBLIC_CHANNEL: "Channel",
    ChannelKind.PRIVATE_CHANNEL: "Private Channel",
    ChannelKind.MULTI_PARTY_DM: "Multiparty Direct Message Channel",
    ChannelKind.DIRECT_MESSAGE: "Direct Message Channel",
}


def make_title(text: str) -> str:
    """Cut plain text down to a one-line title of at most TITLE_LENGTH characters plus an ellipsis."""
    end = text.find("\n")
    if 0 <= end < TITLE_LENGTH:
        return text[:end] + " " + ELLIPSIS
    if len(text) > TITLE_LENGTH:
        return text[:TITLE_LENGTH] + ELLIPSIS
    return text


def format_size(size: Optional[int]) -> Optional[str]:
    if size is None:
        return None
    if size < 1024:
        return f"{size} bytes"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


class FeedItemBuilder:
    """Renders messages and conversations of one workspace into feed items."""

    def __init__(
        self,
        team: Team,
        users_by_id: Mapping[str, User],
        translator: MarkupTranslator,
        settings: Settings,
    ):
        self.team = team
        self.users_by_id = users_by_id
        self.translator = translator
        self.settings = settings

    # Authorship

    def lookup_user(self, user_id: str) -> User:
        """Directory entry for ``user_id``, or a stand-in named after the id."""
        user = self.users_by_id.get(user_id)
        if user is None:
            logger.debug(f"User {user_id} not in directory")
            user = User(id=user_id, name=user_id)
        return user

    def resolve_author(self, message: Message) -> User:
        if message.user and message.user in self.users_by_id:
            return self.users_by_id[message.user]
        return User(
            id=message.bot_id or UNKNOWN_HANDLE,
            name=message.bot_id or UNKNOWN_HANDLE,
            real_name=message.username or UNKNOWN_DISPLAY_NAME,
            email=self.settings.placeholder_email,
            is_bot=True,
        )

    def feed_author(self, user: User) -> FeedAuthor:
        return FeedAuthor(
            name=user.author_name,
            email=user.email,
            link=profile_url(self.team.domain, user.name),
        )

    # Conversation naming

    def conversation_key(self, channel: Channel) -> str:
        """Path segment that addresses the conversation in web archive URLs."""
        if channel.kind == ChannelKind.DIRECT_MESSAGE:
            if self.settings.direct_message_link_key == "channel_id" or not channel.peer_user_id:
                return channel.id
            return self.lookup_user(channel.peer_user_id).name
        return channel.name or channel.id

    def conversation_name(self, channel: Channel) -> str:
        """Human readable conversation name, without the kind prefix."""
        if channel.kind == ChannelKind.DIRECT_MESSAGE and channel.peer_user_id:
            if self.settings.direct_message_name_source == "peer_id":
                return channel.peer_user_id
            return self.lookup_user(channel.peer_user_id).name
        return channel.name or channel.id

    # Messages

    def message_item(self, message: Message, channel: Channel) -> FeedItem:
        author = self.resolve_author(message)
        content = "<p>" + self.translator.rich(message.text) + "</p>"
        if message.files:
            content += self.attachments_html(message.files)
        if message.subtype:
            content += f"<p {MUTED}>{html.escape(message.subtype)}</p>"
        if message.parent_user_id:
            parent = self.lookup_user(message.parent_user_id)
            content += f"<p {MUTED}>reply to {html.escape(parent.label)}</p>"
        return FeedItem(
            author=self.feed_author(author),
            link=message_permalink(self.team.domain, self.conversation_key(channel), message.ts),
            title=make_title(self.translator.plain(message.text)),
            updated=message.timestamp,
            content=content,
        )

    def attachments_html(self, attachments: List[Attachment]) -> str:
        return "<ul>" + "".join(self.attachment_html(a) for a in attachments) + "</ul>"

    def attachment_html(self, attachment: Attachment) -> str:
        parts = []
        if attachment.thumb_tiny:
            image = thumbnail.reconstruct(attachment.thumb_tiny)
            if thumbnail.is_data_uri(image):
                parts.append(f'<img src="{image}" alt=""><br>')
            else:
                parts.append(f"<em>{html.escape(image)}</em><br>")

        tooltip = ", ".join(
            value
            for value in (attachment.filetype, attachment.mimetype, format_size(attachment.size))
            if value
        )
        parts.append(
            f'<strong title="{html.escape(tooltip)}">{html.escape(attachment.label)}</strong>'
        )
        if attachment.width and attachment.height:
            parts.append(f" <span {MUTED}>{attachment.width}×{attachment.height}</span>")

        links = [
            f'<a href="{html.escape(url)}">{label}</a>'
            for label, url in (
                ("view", attachment.permalink),
                ("download", attachment.url_private),
                ("public", attachment.permalink_public),
            )
            if url
        ]
        if links:
            parts.append(f" <span {MUTED}>" + " • ".join(links) + "</span>")
        if attachment.preview:
            parts.append(f"<pre>{html.escape(attachment.preview)}</pre>")
        return "<li>" + "".join(parts) + "</li>"

    # Conversations

    def channel_item(self, channel: Channel, feed_base_url: str) -> FeedItem:
        weblink = None
        if channel.name:
            weblink = archive_url(self.team.domain, channel.name)
        author = self.lookup_user(channel.creator) if channel.creator else None
        label = f"<strong>{CHANNEL_LABELS[channel.kind]}:</strong> "

        if channel.kind == ChannelKind.MULTI_PARTY_DM:
            names = ", ".join(self.lookup_user(m).label for m in channel.members)
            content = f"<p>{label}{html.escape(names)}</p>"
            title = channel.name or channel.id
        elif channel.kind == ChannelKind.PRIVATE_CHANNEL:
            content = f"<p>{label}{html.escape(channel.name or channel.id)}</p>"
            title = "=" + (channel.name or channel.id)
        elif channel.kind == ChannelKind.DIRECT_MESSAGE:
            author = self.lookup_user(channel.peer_user_id) if channel.peer_user_id else None
            peer_label = author.label if author else channel.id
            content = f"<p>{label}{html.escape(peer_label)}</p>"
            title = "@" + (author.name if author else channel.id)
            weblink = archive_url(self.team.domain, self.conversation_key(channel))
        else:
            content = f"<p>{label}#{html.escape(channel.name or channel.id)}</p>"
            title = "#" + (channel.name or channel.id)

        content += self.topic_html("Topic", channel.topic)
        content += self.topic_html("Purpose", channel.purpose)

        feed_link = (
            f"{feed_base_url}channel.xml?id={channel.id}"
            f"&count={self.settings.default_history_count}"
        )
        content += f'<p {MUTED}><a href="{html.escape(feed_link)}">feed</a>'
        if weblink:
            content += f' • <a href="{html.escape(weblink)}">web</a>'
        content += "</p>"

        if author is None:
            author = User(
                id=UNKNOWN_HANDLE,
                name=UNKNOWN_HANDLE,
                real_name=UNKNOWN_DISPLAY_NAME,
                email=self.settings.placeholder_email,
            )
        return FeedItem(
            author=self.feed_author(author),
            link=feed_link,
            title=title,
            updated=channel.created,
            content=content,
        )

    def topic_html(self, heading: str, topic: Optional[Topic]) -> str:
        if topic is None or not topic.value:
            return ""
        content = f"<p><strong>{heading}:</strong> " + self.translator.rich(topic.value)
        if topic.creator and topic.last_set:
            setter = self.lookup_user(topic.creator).name
            content += (
                f" <span {MUTED}>({html.escape(setter)}, "
                f"{topic.last_set.date().isoformat()})</span>"
            )
        return content + "</p>"
