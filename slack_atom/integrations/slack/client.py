"""
Slack API Client

Responsibilities:
- team.info / users.list: Directory lookups (cursor pagination followed)
- conversations.list / conversations.members: Conversation directory
- conversations.info / conversations.history / conversations.replies: Message history
- Classifies SlackApiError into ConversationNotFoundError / UpstreamFailureError

The wrapped WebClient is synchronous; every call runs in a worker thread so
the event loop can fan several calls out at once.
"""

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from slack_atom.config import get_settings, Settings
from slack_atom.errors import ConversationNotFoundError, UpstreamFailureError
from typing import List, Dict, Any, Optional
import asyncio
import logging

logger = logging.getLogger(__name__)

NOT_FOUND_ERRORS = {"channel_not_found"}


class SlackClient:
    """Slack Web API client returning raw response payloads."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[WebClient] = None):
        settings = settings or get_settings()
        self.client = client or WebClient(token=settings.slack_bot_token)
        self.settings = settings

    async def _call(self, method: str, channel_id: Optional[str] = None, **kwargs) -> Any:
        """Run one Web API method in a worker thread and classify its errors."""
        api_method = getattr(self.client, method.replace(".", "_"))
        try:
            return await asyncio.to_thread(api_method, **kwargs)
        except SlackApiError as e:
            error = e.response.get("error", "unknown_error")
            logger.error(f"Slack API error in {method}: {error}")
            if channel_id and error in NOT_FOUND_ERRORS:
                raise ConversationNotFoundError(channel_id) from e
            raise UpstreamFailureError(method, error) from e

    async def _paginate(self, method: str, key: str, **kwargs) -> List[Dict[str, Any]]:
        """Collect ``key`` from every page of a cursor-paginated method."""

        def collect(first_page) -> List[Dict[str, Any]]:
            items = []
            for page in first_page:
                items.extend(page.get(key, []))
            return items

        first_page = await self._call(method, **kwargs)
        try:
            return await asyncio.to_thread(collect, first_page)
        except SlackApiError as e:
            error = e.response.get("error", "unknown_error")
            logger.error(f"Slack API error paginating {method}: {error}")
            raise UpstreamFailureError(method, error) from e

    async def team_info(self) -> Dict[str, Any]:
        logger.info("Fetching team info")
        result = await self._call("team.info")
        return result["team"]

    async def users_list(self) -> List[Dict[str, Any]]:
        logger.info("Fetching user directory")
        users = await self._paginate("users.list", "members", limit=200)
        logger.info(f"Fetched {len(users)} users")
        return users

    async def conversations_list(self, types: Optional[str] = None) -> List[Dict[str, Any]]:
        types = types or self.settings.conversation_types
        logger.info(f"Fetching conversation directory, types={types}")
        channels = await self._paginate(
            "conversations.list", "channels", types=types, limit=200
        )
        logger.info(f"Fetched {len(channels)} conversations")
        return channels

    async def conversation_members(self, channel_id: str) -> List[str]:
        logger.debug(f"Fetching members of {channel_id}")
        return await self._paginate(
            "conversations.members", "members", channel=channel_id, limit=200
        )

    async def conversation_info(self, channel_id: str) -> Dict[str, Any]:
        logger.info(f"Fetching conversation info for {channel_id}")
        result = await self._call("conversations.info", channel_id, channel=channel_id)
        return result["channel"]

    async def conversation_history(self, channel_id: str, limit: int) -> List[Dict[str, Any]]:
        logger.info(f"Fetching conversation history from channel {channel_id}, limit={limit}")
        result = await self._call(
            "conversations.history", channel_id, channel=channel_id, limit=limit
        )
        messages = result.get("messages", [])
        logger.info(f"Successfully fetched {len(messages)} messages")
        return messages

    async def conversation_replies(self, channel_id: str, thread_ts: str, limit: int) -> List[Dict[str, Any]]:
        """
        Fetch replies in a thread.

        Returns:
            List of raw message dictionaries (including the parent message)
        """
        logger.debug(f"Fetching thread replies for {thread_ts}")
        result = await self._call(
            "conversations.replies", channel_id, channel=channel_id, ts=thread_ts, limit=limit
        )
        messages = result.get("messages", [])
        logger.debug(f"Fetched {len(messages)} messages from thread {thread_ts}")
        return messages
