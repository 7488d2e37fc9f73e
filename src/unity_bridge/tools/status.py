"""
Bridge status tool, answered locally without the editor.
"""

from __future__ import annotations

from ..protocol import CallDescriptor, HandlerContext, NoParams
from ..runtime import get_bridge

NAME = "get_bridge_status"
DESCRIPTION = (
    "Reports editor connection state, pending calls, dispatcher counters, "
    "recently finished calls and available calls"
)


async def handle_get_bridge_status(params: NoParams, ctx: HandlerContext) -> dict:
    ctx.local()
    dispatcher = ctx.dispatcher
    return {
        "success": True,
        "message": "Editor connected" if dispatcher.connected else "Editor not connected",
        "connected": dispatcher.connected,
        "pendingCalls": dispatcher.pending_count,
        "stats": dict(dispatcher.stats),
        "recentCalls": [record.summary() for record in ctx.bridge.recent if record is not ctx.record],
        "calls": ctx.registry.describe(),
    }


DESCRIPTOR = CallDescriptor(
    name=NAME,
    description=DESCRIPTION,
    params_model=NoParams,
    handler=handle_get_bridge_status,
)


async def get_bridge_status() -> dict:
    """Report bridge health and the discoverable call list."""
    return await get_bridge().execute(NAME, {})
