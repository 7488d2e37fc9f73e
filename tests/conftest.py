"""Shared fixtures: a scriptable fake transport and a small Unity project tree."""

import asyncio
import json

import pytest

from unity_bridge.protocol import CallBridge, CallRegistry, Dispatcher
from unity_bridge.runtime import set_bridge
from unity_bridge.tools import register_calls


class FakeTransport:
    """Records sent frames; tests push responses and disconnects by hand."""

    def __init__(self):
        self.sent: list[dict] = []
        self.connected = True
        self.fail_with: Exception | None = None
        self._on_message = None
        self._on_disconnect = None

    def bind(self, on_message, on_disconnect):
        self._on_message = on_message
        self._on_disconnect = on_disconnect

    async def send(self, frame: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(json.loads(frame))

    async def close(self) -> None:
        self.connected = False

    def respond(self, token: str, **payload) -> None:
        self._on_message(json.dumps({"id": token, **payload}))

    def respond_raw(self, raw: str) -> None:
        self._on_message(raw)

    def drop(self, exc: Exception | None = None) -> None:
        self.connected = False
        self._on_disconnect(exc)


async def wait_until(predicate, timeout: float = 1.0) -> None:
    """Yield to the loop until ``predicate()`` holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def dispatcher(transport):
    return Dispatcher(transport, default_timeout=1.0)


@pytest.fixture
def registry():
    registry = register_calls(CallRegistry())
    registry.seal()
    return registry


@pytest.fixture
def bridge(registry, dispatcher):
    bridge = CallBridge(registry, dispatcher)
    set_bridge(bridge)
    yield bridge
    set_bridge(None)


PLAYER_CONTROLLER = """using UnityEngine;

public class PlayerController : MonoBehaviour
{
    public float Speed { get; set; }

    void Update()
    {
    }
}
"""


@pytest.fixture
def unity_project(tmp_path):
    """Unity project with Player scripts (1200 and 800 bytes), a 60000-byte and a 100-byte script."""
    root = tmp_path / "MyGame"
    (root / "ProjectSettings").mkdir(parents=True)

    player = root / "Assets" / "Player"
    player.mkdir(parents=True)
    (player / "PlayerController.cs").write_text("a" * 1200, encoding="utf-8")
    (player / "PlayerInput.cs").write_text("b" * 800, encoding="utf-8")

    misc = root / "Assets" / "Misc"
    misc.mkdir(parents=True)
    (misc / "Huge.cs").write_text("c" * 60000, encoding="utf-8")
    (misc / "Tiny.cs").write_text(("// tiny" + " " * 100)[:100], encoding="utf-8")
    (misc / "Notes.txt").write_text("not a script", encoding="utf-8")

    ai = root / "Assets" / "Enemy"
    ai.mkdir(parents=True)
    (ai / "EnemyBrain.cs").write_text(PLAYER_CONTROLLER, encoding="utf-8")

    return root
