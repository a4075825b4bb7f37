"""
Tests for the HTTP feed endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from slack_atom.errors import ConversationNotFoundError, UpstreamFailureError
from slack_atom.main import create_app


@pytest.fixture
def http(settings, slack_client):
    app = create_app(settings, slack_client=slack_client)
    with TestClient(app) as client:
        yield client


def test_channels_xml(http):
    response = http.get("/channels.xml")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/atom+xml")
    assert b"Slack / Acme Corp / Channels" in response.content
    assert b"http://testserver/channels.xml" in response.content


def test_channel_xml(http, slack_client):
    slack_client.conversation_history.return_value = [{"ts": "1600000000.0", "user": "U1", "text": "hi"}]

    response = http.get("/channel.xml", params={"id": "C1", "count": 5})

    assert response.status_code == 200
    assert b"Slack / Acme Corp / #general" in response.content
    assert b"channel.xml?id=C1&amp;count=5" in response.content
    slack_client.conversation_history.assert_awaited_once_with("C1", 5)


def test_channel_xml_default_count(http, slack_client, settings):
    http.get("/channel.xml", params={"id": "C1"})
    slack_client.conversation_history.assert_awaited_once_with("C1", settings.default_history_count)


def test_channel_xml_count_is_clamped(http, slack_client, settings):
    http.get("/channel.xml", params={"id": "C1", "count": 10 ** 6})
    slack_client.conversation_history.assert_awaited_once_with("C1", settings.max_history_count)


def test_missing_id(http):
    response = http.get("/channel.xml")
    assert response.status_code == 404
    assert "id parameter needed" in response.text


def test_conversation_not_found(http, slack_client):
    slack_client.conversation_info.side_effect = ConversationNotFoundError("C404")

    response = http.get("/channel.xml", params={"id": "C404"})

    assert response.status_code == 404
    assert "C404" in response.text


def test_upstream_failure(http, slack_client):
    slack_client.users_list.side_effect = UpstreamFailureError("users.list", "invalid_auth")

    response = http.get("/channels.xml")

    assert response.status_code == 500
    assert "invalid_auth" in response.text


def test_health(http):
    assert http.get("/health").json()["status"] == "healthy"
