from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache
from typing import Literal


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Slack-Atom Bridge"
    debug: bool = False

    # Slack
    slack_bot_token: str = ""
    conversation_types: str = "public_channel,private_channel,mpim,im"

    # Directory cache
    cache_ttl_seconds: float = 60.0

    # History feeds
    default_history_count: int = 30
    max_history_count: int = 1000

    # Direct messages have no channel name; these pick how one is derived
    direct_message_link_key: Literal["handle", "channel_id"] = "handle"
    direct_message_name_source: Literal["directory", "peer_id"] = "directory"

    # Authors that are not in the user directory (bots, integrations)
    placeholder_email: str = "user@example.com"

    model_config = ConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
