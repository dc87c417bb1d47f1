"""
Connection lifecycle tests: the startup ping and shutdown drive the readiness gate.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from mediacatalog.core import database
from mediacatalog.core.readiness import BackendState, GateTopologyListener, ReadinessGate


def fake_motor_client(ping_error=None):
    client = MagicMock()
    client.admin.command = AsyncMock(side_effect=ping_error)
    return client


class TestConnectToMongo:
    @pytest.mark.anyio
    async def test_successful_ping_marks_connected(self):
        gate = ReadinessGate()
        client = fake_motor_client()

        with patch.object(database, "AsyncIOMotorClient", return_value=client) as motor_cls:
            await database.connect_to_mongo(gate)

        assert gate.state is BackendState.CONNECTED
        client.admin.command.assert_awaited_once_with("ping")
        [listener] = motor_cls.call_args.kwargs["event_listeners"]
        assert isinstance(listener, GateTopologyListener)
        assert listener.gate is gate

    @pytest.mark.anyio
    async def test_failed_ping_marks_error(self):
        gate = ReadinessGate()
        client = fake_motor_client(ServerSelectionTimeoutError("no servers"))

        with patch.object(database, "AsyncIOMotorClient", return_value=client):
            await database.connect_to_mongo(gate)

        assert gate.state is BackendState.ERROR
        assert gate.is_ready is False

    @pytest.mark.anyio
    async def test_close_marks_disconnected(self):
        gate = ReadinessGate()
        client = fake_motor_client()

        with patch.object(database, "AsyncIOMotorClient", return_value=client):
            await database.connect_to_mongo(gate)
        await database.close_mongo_connection(gate)

        client.close.assert_called_once()
        assert gate.state is BackendState.DISCONNECTED
        assert database.mongodb.client is None
