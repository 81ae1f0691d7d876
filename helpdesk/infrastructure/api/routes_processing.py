"""Processing endpoint — streams a ticket's multi-agent run as server-sent events."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.adapters.streaming.sse_channel import SseChannel
from helpdesk.adapters.streaming.stream_registry import StreamRegistry
from helpdesk.application.use_cases.analyze_ticket import AnalyzeTicketUseCase
from helpdesk.application.use_cases.process_ticket import ProcessTicketUseCase
from helpdesk.infrastructure.api.dependencies import (
    get_analyze_ticket_uc,
    get_process_ticket_uc,
    get_session,
    get_stream_registry,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tickets", tags=["processing"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/{ticket_id}/process")
async def process_ticket_stream(
    ticket_id: int,
    analyze_uc: AnalyzeTicketUseCase = Depends(get_analyze_ticket_uc),
    process_uc: ProcessTicketUseCase = Depends(get_process_ticket_uc),
    registry: StreamRegistry = Depends(get_stream_registry),
    session: AsyncSession = Depends(get_session),
):
    """Classify the ticket, persist the result, then stream the agent pipeline.

    Classification is committed before the first byte is sent, so the stream
    itself never touches the database.
    """
    analyzed = await analyze_uc.execute(ticket_id)
    if analyzed is None:
        raise HTTPException(status_code=404, detail="Ticket not found")
    await session.commit()

    stream_id = str(ticket_id)

    async def events():
        channel = SseChannel()
        registry.register(stream_id, channel)
        task = asyncio.create_task(
            process_uc.run(analyzed.ticket, analyzed.classification, channel)
        )
        registry.track(task)
        try:
            async for frame in channel.stream():
                yield frame
        finally:
            channel.disconnect()
            registry.unregister(stream_id, channel)
            if not task.done():
                logger.info("Ticket %d: client left before the run finished", ticket_id)

    return StreamingResponse(events(), media_type="text/event-stream", headers=SSE_HEADERS)
