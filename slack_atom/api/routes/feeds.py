"""
Feed Routes

GET /channels.xml            Atom feed listing every visible conversation
GET /channel.xml?id=&count=  Atom feed of one conversation's history
"""

from fastapi import APIRouter, HTTPException, Query, Request, Response
from typing import Optional
import logging
import time

from slack_atom.errors import FeedError, MissingParameterError
from slack_atom.feeds.atom import ATOM_MEDIA_TYPE, render_atom
from slack_atom.services.feed_service import FeedService

logger = logging.getLogger(__name__)
router = APIRouter()


def _feed_service(request: Request) -> FeedService:
    return request.app.state.feed_service


def _error_response(e: Exception, what: str, start_time: float) -> HTTPException:
    """Translate a failure while building a feed into an HTTPException."""
    processing_time = time.time() - start_time
    if isinstance(e, FeedError):
        status_code = e.status_code
    else:
        status_code = 500
    if status_code >= 500:
        logger.error(f"Error building {what} after {processing_time:.2f}s: {e}", exc_info=True)
        detail = f"{type(e).__name__}: {e}"
    else:
        logger.info(f"Rejected {what}: {e}")
        detail = str(e)
    return HTTPException(status_code=status_code, detail=detail)


@router.get("/channels.xml")
async def channels_feed(request: Request):
    """Atom feed with one entry per conversation visible to the bot token."""
    start_time = time.time()
    try:
        document = await _feed_service(request).channels_feed(str(request.base_url))
    except Exception as e:
        raise _error_response(e, "channels.xml", start_time)
    return Response(content=render_atom(document), media_type=ATOM_MEDIA_TYPE)


@router.get("/channel.xml")
async def channel_feed(
    request: Request,
    id: Optional[str] = Query(None, description="Slack conversation ID"),
    count: Optional[int] = Query(None, ge=1, description="Maximum history messages (default: 30)"),
):
    """
    Atom feed of one conversation's message history, including thread replies.

    Examples:
    - GET /channel.xml?id=C123ABC456
    - GET /channel.xml?id=C123ABC456&count=50
    """
    start_time = time.time()
    service = _feed_service(request)
    try:
        if not id:
            raise MissingParameterError("id")
        count = min(count or service.settings.default_history_count, service.settings.max_history_count)
        document = await service.channel_feed(id, count, str(request.base_url))
    except Exception as e:
        raise _error_response(e, f"channel.xml for {id}", start_time)
    return Response(content=render_atom(document), media_type=ATOM_MEDIA_TYPE)
