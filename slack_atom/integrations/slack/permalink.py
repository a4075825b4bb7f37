"""
Slack Web Links

Builds workspace URLs: archives, team profiles and message permalinks.
"""


def workspace_url(domain: str) -> str:
    return f"https://{domain}.slack.com/"


def archive_url(domain: str, conversation: str) -> str:
    """Web archive URL of a conversation, keyed by its name or id."""
    return f"https://{domain}.slack.com/archives/{conversation}"


def profile_url(domain: str, handle: str) -> str:
    return f"https://{domain}.slack.com/team/{handle}"


def message_anchor(ts: str) -> str:
    """
    Encode a message timestamp as the path segment Slack uses for permalinks.

    Examples:
        1234567890.123456 -> p1234567890123456
    """
    seconds, _, fraction = ts.partition(".")
    return "p" + seconds + fraction.ljust(6, "0")[:6]


def message_permalink(domain: str, conversation: str, ts: str) -> str:
    return f"{archive_url(domain, conversation)}/{message_anchor(ts)}"
