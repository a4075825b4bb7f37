"""
Error Taxonomy

Exceptions raised while pulling conversations from Slack and turning them
into feeds. Routes map them onto HTTP status codes.
"""


class FeedError(Exception):
    """Base class for all feed building errors."""

    status_code = 500


class MissingParameterError(FeedError):
    """A required query parameter was not supplied."""

    status_code = 404

    def __init__(self, parameter: str):
        self.parameter = parameter
        super().__init__(f"{parameter} parameter needed")


class ConversationNotFoundError(FeedError):
    """Slack does not know the requested conversation id."""

    status_code = 404

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(f"Conversation not found: {conversation_id}")


class UpstreamFailureError(FeedError):
    """Any other failure reported by the Slack Web API."""

    status_code = 500

    def __init__(self, method: str, error: str):
        self.method = method
        self.error = error
        super().__init__(f"Slack API call {method} failed: {error}")


class UnrecognizedThumbnailFormatError(FeedError, ValueError):
    """A thumbnail blob carries a discriminant byte with no known header template."""

    def __init__(self, discriminant: int):
        self.discriminant = discriminant
        super().__init__(f"Unrecognized thumbnail format {discriminant}")
