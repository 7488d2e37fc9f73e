"""Tests for the call bridge pipeline and the get_scripts adapter."""

import asyncio

import pytest

from conftest import wait_until
from unity_bridge.protocol import (
    CallBridge,
    CallDescriptor,
    CallExecutionError,
    CallRegistry,
    CallState,
    NoParams,
    UnknownCallError,
    ValidationError,
)
from unity_bridge.tools import scripts


class TestFailFast:
    """Registry and validation errors never touch the transport."""

    @pytest.mark.asyncio
    async def test_unknown_call(self, bridge, transport):
        with pytest.raises(UnknownCallError):
            await bridge.invoke("get_assets", {})
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_unknown_call_envelope(self, bridge, transport):
        result = await bridge.execute("get_assets", {})

        assert result["success"] is False
        assert result["error"]["type"] == "UnknownCallError"
        assert "get_assets" in result["message"]
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_invalid_params_envelope(self, bridge, transport):
        result = await bridge.execute("get_scripts", {"maxFileSizeBytes": "lots"})

        assert result["success"] is False
        assert result["error"]["type"] == "ValidationError"
        assert result["error"]["field"] == "maxFileSizeBytes"
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_validation_error_raised_by_invoke(self, bridge):
        with pytest.raises(ValidationError):
            await bridge.invoke("get_scripts", {"includeContent": "perhaps"})


class TestGetScripts:
    """get_scripts adapter behaviour over a fake editor."""

    @pytest.mark.asyncio
    async def test_normalized_params_are_sent(self, bridge, transport):
        task = asyncio.create_task(bridge.invoke("get_scripts", {}))
        await wait_until(lambda: transport.sent)

        assert transport.sent[0]["params"] == {
            "searchPattern": None,
            "includeContent": False,
            "maxFileSizeBytes": 50000,
        }
        transport.respond(transport.sent[0]["id"], success=True, message="ok", scripts=[])
        assert (await task)["scripts"] == []

    @pytest.mark.asyncio
    async def test_end_to_end_shape(self, bridge, transport):
        """Two matching files come back without content fields."""
        task = asyncio.create_task(bridge.invoke("get_scripts", {"searchPattern": "Player"}))
        await wait_until(lambda: transport.sent)
        transport.respond(
            transport.sent[0]["id"],
            success=True,
            message="Retrieved 2 C# script files",
            scripts=[
                {"name": "PlayerController", "path": "Assets/Player/PlayerController.cs", "size": 1200},
                {"name": "PlayerInput", "path": "Assets/Player/PlayerInput.cs", "size": 800},
            ],
        )

        result = await task

        assert result == {
            "success": True,
            "message": "Scripts retrieved successfully",
            "scripts": [
                {"name": "PlayerController", "path": "Assets/Player/PlayerController.cs", "size": 1200},
                {"name": "PlayerInput", "path": "Assets/Player/PlayerInput.cs", "size": 800},
            ],
        }

    @pytest.mark.asyncio
    async def test_content_gating(self, bridge, transport):
        """Oversized content is dropped even if the editor sends it."""
        params = {"includeContent": True, "maxFileSizeBytes": 50000}
        task = asyncio.create_task(bridge.invoke("get_scripts", params))
        await wait_until(lambda: transport.sent)
        transport.respond(
            transport.sent[0]["id"],
            success=True,
            message="ok",
            scripts=[
                {"name": "Huge", "path": "Assets/Huge.cs", "size": 60000, "content": "x" * 60000},
                {"name": "Tiny", "path": "Assets/Tiny.cs", "size": 100, "content": "y" * 100},
            ],
        )

        huge, tiny = (await task)["scripts"]
        assert "content" not in huge
        assert tiny["content"] == "y" * 100

    @pytest.mark.asyncio
    async def test_content_omitted_when_not_requested(self, bridge, transport):
        task = asyncio.create_task(bridge.invoke("get_scripts", {}))
        await wait_until(lambda: transport.sent)
        transport.respond(
            transport.sent[0]["id"],
            success=True,
            message="ok",
            scripts=[{"name": "Tiny", "path": "Assets/Tiny.cs", "size": 3, "content": "abc"}],
        )

        assert "content" not in (await task)["scripts"][0]

    @pytest.mark.asyncio
    async def test_editor_failure_becomes_execution_error(self, bridge, transport):
        task = asyncio.create_task(bridge.invoke("get_scripts", {}))
        await wait_until(lambda: transport.sent)
        transport.respond(transport.sent[0]["id"], success=False, message="AssetDatabase locked")

        with pytest.raises(CallExecutionError) as exc_info:
            await task
        assert "AssetDatabase locked" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_editor_failure_envelope(self, bridge, transport):
        task = asyncio.create_task(bridge.execute("get_scripts", {}))
        await wait_until(lambda: transport.sent)
        transport.respond(transport.sent[0]["id"], success=False, message="AssetDatabase locked")

        result = await task
        assert result["success"] is False
        assert result["error"] == {
            "type": "CallExecutionError",
            "detail": "Failed to retrieve scripts: AssetDatabase locked",
        }

    @pytest.mark.asyncio
    async def test_malformed_scripts_list(self, bridge, transport):
        task = asyncio.create_task(bridge.execute("get_scripts", {}))
        await wait_until(lambda: transport.sent)
        transport.respond(transport.sent[0]["id"], success=True, message="ok", scripts="nope")

        assert (await task)["error"]["type"] == "TransportError"

    @pytest.mark.asyncio
    async def test_entrypoint_uses_global_bridge(self, bridge, transport):
        """The MCP-facing function routes through the registered bridge."""
        task = asyncio.create_task(scripts.get_scripts(searchPattern="Player"))
        await wait_until(lambda: transport.sent)
        assert transport.sent[0]["params"]["searchPattern"] == "Player"
        transport.respond(transport.sent[0]["id"], success=True, message="ok", scripts=[])

        assert (await task)["success"] is True


class TestLifecycle:
    """Each call ends in exactly one terminal state."""

    @pytest.mark.asyncio
    async def test_completed_history(self, bridge, transport):
        task = asyncio.create_task(bridge.invoke("get_scripts", {}))
        await wait_until(lambda: transport.sent)
        transport.respond(transport.sent[0]["id"], success=True, message="ok", scripts=[])
        await task

        record = bridge.recent[-1]
        assert record.history == [
            CallState.RECEIVED,
            CallState.VALIDATING,
            CallState.DISPATCHING,
            CallState.AWAITING_RESPONSE,
            CallState.COMPLETED,
        ]

    @pytest.mark.asyncio
    async def test_timed_out_state(self, bridge):
        result = await bridge.execute("get_scripts", {}, timeout=0.01)

        assert result["error"]["type"] == "TimeoutError"
        assert bridge.recent[-1].state == CallState.TIMED_OUT

    @pytest.mark.asyncio
    async def test_validation_failure_state(self, bridge):
        await bridge.execute("get_scripts", {"maxFileSizeBytes": -5})
        assert bridge.recent[-1].state == CallState.FAILED

    @pytest.mark.asyncio
    async def test_local_call_skips_transport(self, bridge, transport):
        result = await bridge.invoke("get_bridge_status", {})

        assert transport.sent == []
        assert result["success"] is True
        assert result["pendingCalls"] == 0
        assert result["recentCalls"] == []
        assert {c["name"] for c in result["calls"]} == {
            "get_scripts",
            "analyze_cs_files",
            "get_bridge_status",
        }
        assert bridge.recent[-1].history[-2:] == [CallState.DISPATCHING, CallState.COMPLETED]


class TestAdapterErrors:
    """Unexpected handler exceptions are translated, never leaked."""

    @pytest.mark.asyncio
    async def test_unexpected_exception(self, dispatcher):
        async def broken(params, ctx):
            raise KeyError("scripts")

        registry = CallRegistry()
        registry.register(CallDescriptor("broken", "Always fails", NoParams, broken))
        bridge = CallBridge(registry, dispatcher)

        result = await bridge.execute("broken", {})

        assert result["success"] is False
        assert result["error"]["type"] == "CallExecutionError"
        assert bridge.recent[-1].state == CallState.FAILED
