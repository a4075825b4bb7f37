"""
Slack Markup Translator

Turns Slack message text (as well as channel topics and purposes) into
either HTML or plain text, resolving the entity references embedded in it:

    <@U123>              user mention
    <@U123|bob>          user mention with explicit label
    <#C123|general>      channel mention
    <https://x.org|x>    link
    <!here>              special command (here, channel, subteam, date)

Slack escapes literal "&", "<" and ">" in message text as entities, so a raw
angle bracket always belongs to a reference. Text is decoded once and
escaped once on the way out.
"""

import html
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Union

from slack_atom.integrations.slack.models import User
from slack_atom.integrations.slack.permalink import archive_url, profile_url


class RenderMode(str, Enum):
    RICH = "rich"
    PLAIN = "plain"


class ReferenceKind(str, Enum):
    USER = "@"
    CHANNEL = "#"
    SPECIAL = "!"
    LINK = ""


@dataclass(frozen=True)
class TextToken:
    text: str


@dataclass(frozen=True)
class ReferenceToken:
    kind: ReferenceKind
    target: str
    label: Optional[str] = None


Token = Union[TextToken, ReferenceToken]


def unescape_slack(text: str) -> str:
    """Decode the three entities Slack uses in message text."""
    return text.replace("&lt;", "<").replace("&gt;", ">").replace("&amp;", "&")


def parse_reference(body: str) -> ReferenceToken:
    """Parse the inside of one ``<...>`` reference."""
    target, _, label = body.partition("|")
    for kind in (ReferenceKind.USER, ReferenceKind.CHANNEL, ReferenceKind.SPECIAL):
        if target.startswith(kind.value):
            return ReferenceToken(kind, target[1:], label or None)
    return ReferenceToken(ReferenceKind.LINK, target, label or None)


def tokenize(text: str) -> List[Token]:
    """Split Slack text into literal text runs and entity references."""
    tokens: List[Token] = []
    pos = search = 0
    while True:
        end = text.find(">", search)
        if end < 0:
            break
        start = text.rfind("<", pos, end)
        if start < 0:
            # A stray ">" with no opening bracket stays literal text
            search = end + 1
            continue
        if start > pos:
            tokens.append(TextToken(text[pos:start]))
        tokens.append(parse_reference(text[start + 1:end]))
        pos = search = end + 1
    if pos < len(text):
        tokens.append(TextToken(text[pos:]))
    return tokens


def _escape(text: str) -> str:
    return html.escape(text, quote=False)


def _attr(text: str) -> str:
    return html.escape(text, quote=True)


class MarkupTranslator:
    """Renders Slack text against a user directory and a channel name table."""

    def __init__(
        self,
        team_domain: str,
        users_by_id: Mapping[str, User],
        channel_names: Optional[Mapping[str, str]] = None,
    ):
        self.team_domain = team_domain
        self.users_by_id = users_by_id
        self.channel_names: Mapping[str, str] = channel_names or {}

    def translate(self, text: str, mode: RenderMode) -> str:
        rich = mode == RenderMode.RICH
        parts = []
        for token in tokenize(text):
            if isinstance(token, TextToken):
                parts.append(self._text(token.text, rich))
            elif token.kind == ReferenceKind.USER:
                parts.append(self._user(token, rich))
            elif token.kind == ReferenceKind.CHANNEL:
                parts.append(self._channel(token, rich))
            elif token.kind == ReferenceKind.SPECIAL:
                parts.append(self._special(token, rich))
            else:
                parts.append(self._link(token, rich))
        return "".join(parts)

    def rich(self, text: str) -> str:
        return self.translate(text, RenderMode.RICH)

    def plain(self, text: str) -> str:
        return self.translate(text, RenderMode.PLAIN)

    def _text(self, text: str, rich: bool) -> str:
        text = unescape_slack(text)
        if not rich:
            return text
        return _escape(text).replace("\n", "<br>")

    def _user(self, token: ReferenceToken, rich: bool) -> str:
        # Directory lookups always precede translation, so the id must be known
        user: User = self.users_by_id[token.target]
        label = unescape_slack(token.label) if token.label else user.name
        if not rich:
            return "@" + label
        return '<a href="{}" title="{}">@{}</a>'.format(
            _attr(profile_url(self.team_domain, user.name)),
            _attr(user.label),
            _escape(label),
        )

    def _channel(self, token: ReferenceToken, rich: bool) -> str:
        # Mentions without a label are rare (archived channels)
        name = token.label or self.channel_names.get(token.target) or token.target
        name = unescape_slack(name)
        if not rich:
            return "#" + name
        return '<a href="{}">#{}</a>'.format(
            _attr(archive_url(self.team_domain, name)), _escape(name)
        )

    def _special(self, token: ReferenceToken, rich: bool) -> str:
        command = token.target.partition("^")[0]
        text = unescape_slack(token.label) if token.label else "@" + command
        return _escape(text) if rich else text

    def _link(self, token: ReferenceToken, rich: bool) -> str:
        target = unescape_slack(token.target)
        label = unescape_slack(token.label) if token.label else target
        if not rich:
            return label
        return '<a href="{}">{}</a>'.format(_attr(target), _escape(label))


def build_channel_names(channels) -> Dict[str, str]:
    """Channel id -> name table for resolving label-less channel mentions."""
    return {channel.id: channel.name for channel in channels if channel.name}
