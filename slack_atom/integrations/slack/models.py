"""
Slack Data Models

Read-only views over Slack Web API response payloads. Each model has a
``from_api`` constructor taking the raw dictionary Slack returns.
"""

from pydantic import BaseModel
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class ChannelKind(str, Enum):
    """Conversation variant, decided once when a channel payload is ingested."""

    PUBLIC_CHANNEL = "public_channel"
    PRIVATE_CHANNEL = "private_channel"
    MULTI_PARTY_DM = "mpim"
    DIRECT_MESSAGE = "im"

    @property
    def display_prefix(self) -> str:
        return _DISPLAY_PREFIXES[self]


_DISPLAY_PREFIXES = {
    ChannelKind.PUBLIC_CHANNEL: "#",
    ChannelKind.PRIVATE_CHANNEL: "=",
    ChannelKind.MULTI_PARTY_DM: "",
    ChannelKind.DIRECT_MESSAGE: "@",
}


def ts_to_datetime(ts: Any) -> datetime:
    """Convert a Slack epoch-seconds value (string or number) to an aware UTC datetime."""
    return datetime.fromtimestamp(float(ts), tz=timezone.utc)


class Team(BaseModel):
    """Workspace information from team.info."""

    id: Optional[str] = None
    domain: str
    name: str
    icon: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Team":
        icon = data.get("icon") or {}
        return cls(
            id=data.get("id"),
            domain=data["domain"],
            name=data.get("name") or data["domain"],
            icon=icon.get("image_34"),
        )


class User(BaseModel):
    """Directory entry from users.list. ``name`` is the authoritative handle."""

    id: str
    name: str
    real_name: Optional[str] = None
    email: Optional[str] = None
    is_bot: bool = False

    @property
    def label(self) -> str:
        """Display name, falling back to the handle."""
        return self.real_name or self.name

    @property
    def author_name(self) -> str:
        if self.real_name:
            return f"{self.real_name} ({self.name})"
        return self.name

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "User":
        profile = data.get("profile") or {}
        return cls(
            id=data["id"],
            name=data.get("name") or data["id"],
            real_name=data.get("real_name") or profile.get("real_name") or None,
            email=profile.get("email"),
            is_bot=data.get("is_bot", False),
        )


class Topic(BaseModel):
    """Channel topic or purpose."""

    value: Optional[str] = None
    creator: Optional[str] = None
    last_set: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> Optional["Topic"]:
        if not data or not data.get("value"):
            return None
        last_set = data.get("last_set")
        return cls(
            value=data["value"],
            creator=data.get("creator") or None,
            last_set=ts_to_datetime(last_set) if last_set else None,
        )


class Channel(BaseModel):
    """Any conversation: public or private channel, multi-party or direct message."""

    id: str
    kind: ChannelKind
    name: Optional[str] = None
    creator: Optional[str] = None
    topic: Optional[Topic] = None
    purpose: Optional[Topic] = None
    members: List[str] = []
    peer_user_id: Optional[str] = None
    created: datetime

    @classmethod
    def kind_of(cls, data: Dict[str, Any]) -> ChannelKind:
        if data.get("is_im"):
            return ChannelKind.DIRECT_MESSAGE
        if data.get("is_mpim"):
            return ChannelKind.MULTI_PARTY_DM
        if data.get("is_private") or data.get("is_group"):
            return ChannelKind.PRIVATE_CHANNEL
        return ChannelKind.PUBLIC_CHANNEL

    @classmethod
    def from_api(cls, data: Dict[str, Any], members: Optional[List[str]] = None) -> "Channel":
        kind = cls.kind_of(data)
        return cls(
            id=data["id"],
            kind=kind,
            name=data.get("name") or None,
            creator=data.get("creator") or None,
            topic=Topic.from_api(data.get("topic")),
            purpose=Topic.from_api(data.get("purpose")),
            members=(members if members is not None else data.get("members", []))
            if kind == ChannelKind.MULTI_PARTY_DM
            else [],
            peer_user_id=data.get("user") if kind == ChannelKind.DIRECT_MESSAGE else None,
            created=ts_to_datetime(data.get("created", 0)),
        )


class Attachment(BaseModel):
    """A file shared with a message."""

    id: Optional[str] = None
    name: Optional[str] = None
    title: Optional[str] = None
    filetype: Optional[str] = None
    mimetype: Optional[str] = None
    size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    url_private: Optional[str] = None
    permalink: Optional[str] = None
    permalink_public: Optional[str] = None
    preview: Optional[str] = None
    thumb_tiny: Optional[str] = None

    @property
    def label(self) -> str:
        return self.title or self.name or self.id or "file"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Attachment":
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            title=data.get("title"),
            filetype=data.get("pretty_type") or data.get("filetype"),
            mimetype=data.get("mimetype"),
            size=data.get("size"),
            width=data.get("original_w"),
            height=data.get("original_h"),
            url_private=data.get("url_private"),
            permalink=data.get("permalink"),
            permalink_public=data.get("permalink_public"),
            preview=data.get("preview"),
            thumb_tiny=data.get("thumb_tiny"),
        )


class Message(BaseModel):
    """A message from conversations.history or conversations.replies."""

    ts: str  # Message timestamp (unique ID within a conversation)
    user: Optional[str] = None
    bot_id: Optional[str] = None
    username: Optional[str] = None
    text: str = ""
    subtype: Optional[str] = None
    thread_ts: Optional[str] = None
    parent_user_id: Optional[str] = None
    files: List[Attachment] = []

    @property
    def timestamp(self) -> datetime:
        return ts_to_datetime(self.ts)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            ts=str(data["ts"]),
            user=data.get("user"),
            bot_id=data.get("bot_id"),
            username=data.get("username"),
            text=data.get("text") or "",
            subtype=data.get("subtype"),
            thread_ts=data.get("thread_ts"),
            parent_user_id=data.get("parent_user_id"),
            files=[Attachment.from_api(f) for f in data.get("files", [])],
        )
