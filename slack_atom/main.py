import logging
from typing import Optional
from fastapi import FastAPI
from slack_atom.config import Settings, get_settings
from slack_atom.api.routes import feeds
from slack_atom.integrations.slack.client import SlackClient
from slack_atom.services.feed_service import FeedService


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Set log level for app modules
    logger = logging.getLogger("slack_atom")
    logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)


def create_app(
    settings: Optional[Settings] = None,
    slack_client: Optional[SlackClient] = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Slack conversations and message history as Atom feeds",
        version="0.1.0",
    )
    app.state.feed_service = FeedService(slack_client or SlackClient(settings), settings)

    app.include_router(feeds.router, tags=["Feeds"])

    @app.get("/")
    async def root():
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": "0.1.0",
            "endpoints": {
                "channels": "/channels.xml",
                "channel": "/channel.xml?id=<conversation id>&count=<messages>",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": settings.app_name}

    return app


configure_logging(get_settings())
app = create_app()
