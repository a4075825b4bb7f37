"""
Feed Service

Pulls conversations from Slack and turns them into feed documents.

Every request fans out its upstream calls concurrently with asyncio.gather;
the first failure aborts the whole request, so a partial feed is never
built. Directory data (team, users, channel names) comes from a
LookupCache shared between requests. Once everything is fetched, building
and assembling items is plain synchronous code.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from slack_atom.config import Settings, get_settings
from slack_atom.core.assembler import assemble_feed
from slack_atom.core.items import FeedItemBuilder
from slack_atom.core.lookup_cache import CHANNELS, TEAM, USERS, LookupCache
from slack_atom.core.markup import MarkupTranslator, build_channel_names
from slack_atom.integrations.slack.client import SlackClient
from slack_atom.integrations.slack.models import Channel, ChannelKind, Message, Team, User
from slack_atom.integrations.slack.permalink import archive_url, workspace_url
from slack_atom.models.feed import FeedDocument

logger = logging.getLogger(__name__)


class FeedService:
    """Builds the channel directory feed and per-conversation history feeds."""

    def __init__(
        self,
        slack_client: SlackClient,
        settings: Optional[Settings] = None,
        cache: Optional[LookupCache] = None,
    ):
        self.slack_client = slack_client
        self.settings = settings or get_settings()
        self.cache = cache or LookupCache(
            {
                TEAM: self._fetch_team,
                USERS: self._fetch_users,
                CHANNELS: self._fetch_channel_names,
            },
            ttl=self.settings.cache_ttl_seconds,
        )

    # Cached directory lookups

    async def _fetch_team(self) -> Team:
        return Team.from_api(await self.slack_client.team_info())

    async def _fetch_users(self) -> Dict[str, User]:
        users = await self.slack_client.users_list()
        return {u["id"]: User.from_api(u) for u in users}

    async def _fetch_channel_names(self) -> Dict[str, str]:
        channels = await self.slack_client.conversations_list()
        return build_channel_names(Channel.from_api(c) for c in channels)

    def _builder(
        self, team: Team, users_by_id: Dict[str, User], channel_names: Dict[str, str]
    ) -> FeedItemBuilder:
        translator = MarkupTranslator(team.domain, users_by_id, channel_names)
        return FeedItemBuilder(team, users_by_id, translator, self.settings)

    # Channel directory

    async def _list_channels(self) -> List[Channel]:
        """Fresh conversation list, with members expanded for multi-party DMs."""
        raw_channels = await self.slack_client.conversations_list()
        mpims = [c for c in raw_channels if Channel.kind_of(c) == ChannelKind.MULTI_PARTY_DM]
        # conversations.list does not include members
        member_lists = await asyncio.gather(
            *(self.slack_client.conversation_members(c["id"]) for c in mpims)
        )
        members_by_id = {c["id"]: members for c, members in zip(mpims, member_lists)}
        return [Channel.from_api(c, members_by_id.get(c["id"])) for c in raw_channels]

    async def channels_feed(self, feed_base_url: str) -> FeedDocument:
        """
        Feed with one item per conversation visible to the credential.

        Args:
            feed_base_url: Base URL of this service, ending in "/"
        """
        logger.info("Building channel directory feed")
        channels, team, users_by_id = await asyncio.gather(
            self._list_channels(),
            self.cache.get(TEAM),
            self.cache.get(USERS),
        )

        builder = self._builder(team, users_by_id, build_channel_names(channels))
        items = [builder.channel_item(channel, feed_base_url) for channel in channels]

        home = workspace_url(team.domain)
        document = assemble_feed(
            items,
            title=f"Slack / {team.name} / Channels",
            id=home,
            link=home,
            feed_link=f"{feed_base_url}channels.xml",
            icon=team.icon,
        )
        logger.info(f"Channel directory feed complete: {len(channels)} conversations")
        return document

    # Conversation history

    async def _history_with_replies(self, channel_id: str, count: int) -> List[Message]:
        raw_messages = await self.slack_client.conversation_history(channel_id, count)
        # conversations.history does not include thread replies. New replies to
        # threads whose parent already dropped out of the history are missed.
        thread_parents = [m["thread_ts"] for m in raw_messages if m.get("thread_ts")]
        reply_lists = await asyncio.gather(
            *(
                self.slack_client.conversation_replies(channel_id, thread_ts, count)
                for thread_ts in dict.fromkeys(thread_parents)
            )
        )

        seen = {str(m["ts"]) for m in raw_messages}
        merged: List[Dict[str, Any]] = list(raw_messages)
        for replies in reply_lists:
            for reply in replies:
                if str(reply["ts"]) not in seen:
                    seen.add(str(reply["ts"]))
                    merged.append(reply)
        if len(merged) > len(raw_messages):
            logger.info(f"Added {len(merged) - len(raw_messages)} thread replies")
        return [Message.from_api(m) for m in merged]

    async def channel_feed(self, channel_id: str, count: int, feed_base_url: str) -> FeedDocument:
        """
        Feed of one conversation's message history, thread replies included.

        Raises:
            ConversationNotFoundError: If Slack does not know ``channel_id``
            UpstreamFailureError: On any other Slack API failure
        """
        logger.info(f"Building history feed for {channel_id}, count={count}")
        info, messages, team, users_by_id, channel_names = await asyncio.gather(
            self.slack_client.conversation_info(channel_id),
            self._history_with_replies(channel_id, count),
            self.cache.get(TEAM),
            self.cache.get(USERS),
            self.cache.get(CHANNELS),
        )
        channel = Channel.from_api(info)

        builder = self._builder(team, users_by_id, channel_names)
        items = [builder.message_item(message, channel) for message in messages]

        link = archive_url(team.domain, builder.conversation_key(channel))
        name = builder.conversation_name(channel)
        document = assemble_feed(
            items,
            title=f"Slack / {team.name} / {channel.kind.display_prefix}{name}",
            id=link,
            link=link,
            feed_link=f"{feed_base_url}channel.xml?id={channel.id}&count={count}",
            icon=team.icon,
        )
        logger.info(f"History feed for {channel_id} complete: {len(messages)} messages")
        return document
