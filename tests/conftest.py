"""
Shared fixtures: a small workspace directory and a mocked Slack client.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from slack_atom.config import Settings
from slack_atom.core.items import FeedItemBuilder
from slack_atom.core.markup import MarkupTranslator
from slack_atom.integrations.slack.models import Team, User


TEAM_DATA = {
    "id": "T123",
    "domain": "acme",
    "name": "Acme Corp",
    "icon": {"image_34": "https://example.com/icon34.png"},
}

USERS_DATA = [
    {"id": "U1", "name": "bob1", "real_name": "Bob One", "profile": {"email": "bob@acme.test"}},
    {"id": "U2", "name": "alice", "profile": {"real_name": "Alice Two", "email": "alice@acme.test"}},
    {"id": "U3", "name": "carol", "profile": {}},
]

CHANNELS_DATA = [
    {
        "id": "C1",
        "name": "general",
        "is_channel": True,
        "creator": "U1",
        "created": 1500000000,
        "topic": {"value": "Company wide <#C2>", "creator": "U2", "last_set": 1600000000},
        "purpose": {"value": "", "creator": "", "last_set": 0},
    },
    {
        "id": "C2",
        "name": "random",
        "is_channel": True,
        "creator": "U1",
        "created": 1500000000,
    },
    {"id": "G1", "name": "secret", "is_group": True, "is_private": True, "creator": "U2", "created": 1510000000},
    {"id": "G2", "name": "mpdm-bob1--alice--carol-1", "is_mpim": True, "is_private": True, "creator": "U1", "created": 1520000000},
    {"id": "D1", "is_im": True, "user": "U2", "created": 1530000000},
]


@pytest.fixture
def settings():
    return Settings(slack_bot_token="xoxb-test", _env_file=None)


@pytest.fixture
def team():
    return Team.from_api(TEAM_DATA)


@pytest.fixture
def users_by_id():
    return {u["id"]: User.from_api(u) for u in USERS_DATA}


@pytest.fixture
def translator(team, users_by_id):
    return MarkupTranslator(team.domain, users_by_id, {"C1": "general", "C2": "random"})


@pytest.fixture
def builder(team, users_by_id, translator, settings):
    return FeedItemBuilder(team, users_by_id, translator, settings)


@pytest.fixture
def slack_client(settings):
    """SlackClient stand-in answering from the fixture workspace."""
    client = MagicMock()
    client.settings = settings
    client.team_info = AsyncMock(return_value=TEAM_DATA)
    client.users_list = AsyncMock(return_value=USERS_DATA)
    client.conversations_list = AsyncMock(return_value=[dict(c) for c in CHANNELS_DATA])
    client.conversation_members = AsyncMock(return_value=["U1", "U2", "U3"])
    client.conversation_info = AsyncMock(return_value=CHANNELS_DATA[0])
    client.conversation_history = AsyncMock(return_value=[])
    client.conversation_replies = AsyncMock(return_value=[])
    return client
