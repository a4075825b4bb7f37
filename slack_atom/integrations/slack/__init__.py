# Slack integration module
from slack_atom.integrations.slack.client import SlackClient
from slack_atom.integrations.slack.models import Channel, ChannelKind, Message, Team, User

__all__ = ["SlackClient", "Channel", "ChannelKind", "Message", "Team", "User"]
