import pytest

from shgame.transport.protocols import OutUpdate
from shgame.transport.ws_manager import WSManager


class FakeSocket:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send_json(self, payload):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(payload)


@pytest.mark.asyncio
async def test_broadcast_dumps_update_and_skips_excluded_user():
    wsman = WSManager()
    a, b = FakeSocket(), FakeSocket()
    await wsman.add(1, 10, a)
    await wsman.add(1, 11, b)

    await wsman.broadcast(1, OutUpdate(game={"phase": "night"}, players={3: None}), exclude_user=11)

    assert b.sent == []
    assert len(a.sent) == 1
    payload = a.sent[0]
    assert payload["type"] == "update"
    assert payload["game"] == {"phase": "night"}
    assert list(payload["players"].values()) == [None]
    assert payload["votes"] is None


@pytest.mark.asyncio
async def test_broadcast_drops_failed_sockets():
    wsman = WSManager()
    good, dead = FakeSocket(), FakeSocket(fail=True)
    await wsman.add(1, 10, good)
    await wsman.add(1, 11, dead)

    await wsman.broadcast(1, {"type": "heartbeat"})

    assert good.sent == [{"type": "heartbeat"}]
    assert await wsman.room_size(1) == 1

    await wsman.broadcast(1, {"type": "heartbeat"})
    assert len(good.sent) == 2


@pytest.mark.asyncio
async def test_stale_remove_keeps_reconnected_socket():
    wsman = WSManager()
    old, new = FakeSocket(), FakeSocket()
    await wsman.add(1, 10, old)
    await wsman.add(1, 10, new)

    await wsman.remove(1, 10, old)
    assert await wsman.room_size(1) == 1

    await wsman.broadcast(1, {"type": "heartbeat"})
    assert old.sent == []
    assert new.sent == [{"type": "heartbeat"}]

    await wsman.remove(1, 10, new)
    assert await wsman.room_size(1) == 0
