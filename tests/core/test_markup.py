"""
Tests for Slack markup translation.
"""

import pytest

from slack_atom.core.markup import (
    MarkupTranslator,
    ReferenceKind,
    ReferenceToken,
    RenderMode,
    TextToken,
    tokenize,
)


class TestTokenize:
    def test_plain_text(self):
        assert tokenize("hello world") == [TextToken("hello world")]

    def test_references(self):
        tokens = tokenize("hi <@U1|Bob>, see <#C2> and <https://x.org|x>!")
        assert tokens == [
            TextToken("hi "),
            ReferenceToken(ReferenceKind.USER, "U1", "Bob"),
            TextToken(", see "),
            ReferenceToken(ReferenceKind.CHANNEL, "C2", None),
            TextToken(" and "),
            ReferenceToken(ReferenceKind.LINK, "https://x.org", "x"),
            TextToken("!"),
        ]

    def test_stray_brackets_stay_text(self):
        tokens = tokenize("a > b <@U1> c <")
        assert tokens == [
            TextToken("a > b "),
            ReferenceToken(ReferenceKind.USER, "U1", None),
            TextToken(" c <"),
        ]

    def test_empty_label_means_no_label(self):
        assert tokenize("<#C1|>") == [ReferenceToken(ReferenceKind.CHANNEL, "C1", None)]

    def test_special_command(self):
        assert tokenize("<!here>") == [ReferenceToken(ReferenceKind.SPECIAL, "here", None)]


class TestRichMode:
    def test_user_mention_with_label(self, translator):
        assert translator.rich("<@U1|Bob> hi") == (
            '<a href="https://acme.slack.com/team/bob1" title="Bob One">@Bob</a> hi'
        )

    def test_user_mention_defaults_to_handle(self, translator):
        assert translator.rich("<@U2>") == (
            '<a href="https://acme.slack.com/team/alice" title="Alice Two">@alice</a>'
        )

    def test_user_without_display_name_uses_handle_as_title(self, translator):
        assert 'title="carol"' in translator.rich("<@U3>")

    def test_unknown_user_is_an_error(self, translator):
        with pytest.raises(KeyError):
            translator.rich("<@U999>")

    def test_channel_mention_resolved_from_cache(self, translator):
        assert translator.rich("<#C2>") == (
            '<a href="https://acme.slack.com/archives/random">#random</a>'
        )

    def test_channel_mention_explicit_label(self, translator):
        assert translator.rich("<#C2|dice>") == (
            '<a href="https://acme.slack.com/archives/dice">#dice</a>'
        )

    def test_unknown_channel_shows_raw_id(self, translator):
        assert translator.rich("<#C999>") == (
            '<a href="https://acme.slack.com/archives/C999">#C999</a>'
        )

    def test_link(self, translator):
        assert translator.rich("<https://example.com/?a=1&amp;b=2>") == (
            '<a href="https://example.com/?a=1&amp;b=2">https://example.com/?a=1&amp;b=2</a>'
        )

    def test_link_with_label(self, translator):
        assert translator.rich("<https://example.com|Example>") == (
            '<a href="https://example.com">Example</a>'
        )

    def test_line_breaks(self, translator):
        assert translator.rich("one\ntwo") == "one<br>two"

    def test_slack_entities_escaped_once(self, translator):
        assert translator.rich("a &lt;b&gt; &amp; c") == "a &lt;b&gt; &amp; c"

    def test_special_commands(self, translator):
        assert translator.rich("<!here> <!subteam^S1|@devs>") == "@here @devs"


class TestPlainMode:
    def test_user_mention(self, translator):
        assert translator.plain("<@U1|Bob> hi") == "@Bob hi"

    def test_user_mention_defaults_to_handle(self, translator):
        assert translator.plain("<@U1>") == "@bob1"

    def test_channel_and_link(self, translator):
        assert translator.plain("<#C1> <https://x.org> <https://y.org|why>") == (
            "#general https://x.org why"
        )

    def test_keeps_line_breaks_and_decodes_entities(self, translator):
        assert translator.plain("a &lt; b\nc") == "a < b\nc"

    def test_translate_dispatches_on_mode(self, translator):
        assert translator.translate("x\ny", RenderMode.PLAIN) == "x\ny"
        assert translator.translate("x\ny", RenderMode.RICH) == "x<br>y"


def test_translation_is_deterministic(translator):
    text = "<@U1> in <#C1>: <https://x.org|x> &amp; more\nline <#C42>"
    assert translator.rich(text) == translator.rich(text)
    assert translator.plain(text) == translator.plain(text)


def test_without_channel_table(team, users_by_id):
    translator = MarkupTranslator(team.domain, users_by_id)
    assert translator.plain("<#C1>") == "#C1"
