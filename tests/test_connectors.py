import asyncio
import socket
import unittest
from unittest.mock import patch

import anyio

from online.checks.connectors import AnyioConnector, AsyncioConnector, BlockingConnector
from online.errors import TimedOut, TransportError, Unresolvable
from online.models import Target

NXDOMAIN = socket.gaierror(socket.EAI_NONAME, "Name or service not known")


def _listener() -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(8)
    return sock


def _closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class _LoopbackMixin:
    def setUp(self) -> None:
        self.server = _listener()
        self.open_target = Target(host="127.0.0.1", port=self.server.getsockname()[1])
        self.closed_target = Target(host="127.0.0.1", port=_closed_port())
        self.bogus_target = Target(host="nowhere.invalid", port=80)

    def tearDown(self) -> None:
        self.server.close()


class BlockingConnectorTests(_LoopbackMixin, unittest.TestCase):
    def test_connects_without_timeout(self) -> None:
        out = BlockingConnector().connect(self.open_target, None)
        self.assertTrue(out.ok)
        self.assertIsNone(out.error)
        self.assertEqual(out.target, self.open_target)

    def test_connects_with_timeout(self) -> None:
        out = BlockingConnector().connect(self.open_target, 2.0)
        self.assertTrue(out.ok)

    def test_refused(self) -> None:
        out = BlockingConnector().connect(self.closed_target, 2.0)
        self.assertFalse(out.ok)
        self.assertIsInstance(out.error, TransportError)
        self.assertEqual(out.error.reason, "connection-refused")

    def test_refused_without_timeout(self) -> None:
        out = BlockingConnector().connect(self.closed_target, None)
        self.assertEqual(out.error.reason, "connection-refused")

    def test_unresolvable_short_circuits(self) -> None:
        with patch("online.checks.connectors.socket.getaddrinfo", side_effect=NXDOMAIN), patch.object(
            socket.socket, "connect"
        ) as connect_mock:
            out = BlockingConnector().connect(self.bogus_target, 2.0)

        self.assertIsInstance(out.error, Unresolvable)
        connect_mock.assert_not_called()

    def test_empty_resolution_is_unresolvable(self) -> None:
        with patch("online.checks.connectors.socket.getaddrinfo", return_value=[]):
            out = BlockingConnector().connect(self.bogus_target, None)

        self.assertIsInstance(out.error, Unresolvable)
        self.assertIn("no usable address", str(out.error))

    def test_bound_elapsed_is_timed_out(self) -> None:
        with patch.object(socket.socket, "connect", side_effect=socket.timeout("timed out")):
            out = BlockingConnector().connect(self.open_target, 0.1)

        self.assertIsInstance(out.error, TimedOut)

    def test_bound_is_applied_to_the_socket(self) -> None:
        with patch.object(socket.socket, "settimeout") as settimeout_mock, patch.object(
            socket.socket, "connect"
        ):
            BlockingConnector().connect(self.open_target, 1.5)

        settimeout_mock.assert_called_once_with(1.5)

    def test_unbounded_tries_every_address_in_order(self) -> None:
        infos = [
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("127.0.0.1", self.closed_target.port)),
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("127.0.0.1", self.open_target.port)),
        ]
        with patch("online.checks.connectors.socket.getaddrinfo", return_value=infos):
            unbounded = BlockingConnector().connect(self.bogus_target, None)
            bounded = BlockingConnector().connect(self.bogus_target, 2.0)

        self.assertTrue(unbounded.ok)
        self.assertEqual(bounded.error.reason, "connection-refused")


class AsyncioConnectorTests(_LoopbackMixin, unittest.IsolatedAsyncioTestCase):
    async def test_connects_without_timeout(self) -> None:
        out = await AsyncioConnector().connect(self.open_target, None)
        self.assertTrue(out.ok)

    async def test_connects_with_timeout(self) -> None:
        out = await AsyncioConnector().connect(self.open_target, 2.0)
        self.assertTrue(out.ok)

    async def test_refused(self) -> None:
        out = await AsyncioConnector().connect(self.closed_target, 2.0)
        self.assertIsInstance(out.error, TransportError)
        self.assertEqual(out.error.reason, "connection-refused")

    async def test_unresolvable(self) -> None:
        with patch("online.checks.connectors.socket.getaddrinfo", side_effect=NXDOMAIN):
            out = await AsyncioConnector().connect(self.bogus_target, 2.0)
        self.assertIsInstance(out.error, Unresolvable)

    async def test_bound_elapsed_is_timed_out(self) -> None:
        async def hang(*args, **kwargs):
            await asyncio.sleep(10)

        with patch("online.checks.connectors.asyncio.open_connection", side_effect=hang):
            out = await AsyncioConnector().connect(self.open_target, 0.05)

        self.assertIsInstance(out.error, TimedOut)
        self.assertLess(out.latency_ms, 5000)

    async def test_caller_cancellation_propagates(self) -> None:
        async def hang(*args, **kwargs):
            await asyncio.sleep(10)

        with patch("online.checks.connectors.asyncio.open_connection", side_effect=hang):
            task = asyncio.create_task(AsyncioConnector().connect(self.open_target, None))
            await asyncio.sleep(0.05)
            task.cancel()
            with self.assertRaises(asyncio.CancelledError):
                await task


class AnyioConnectorTests(_LoopbackMixin, unittest.IsolatedAsyncioTestCase):
    async def test_connects_without_timeout(self) -> None:
        out = await AnyioConnector().connect(self.open_target, None)
        self.assertTrue(out.ok)

    async def test_connects_with_timeout(self) -> None:
        out = await AnyioConnector().connect(self.open_target, 2.0)
        self.assertTrue(out.ok)

    async def test_refused(self) -> None:
        out = await AnyioConnector().connect(self.closed_target, 2.0)
        self.assertIsInstance(out.error, TransportError)
        self.assertEqual(out.error.reason, "connection-refused")

    async def test_unresolvable(self) -> None:
        with patch("online.checks.connectors.anyio.getaddrinfo", side_effect=NXDOMAIN):
            out = await AnyioConnector().connect(self.bogus_target, 2.0)
        self.assertIsInstance(out.error, Unresolvable)

    async def test_bound_elapsed_is_timed_out(self) -> None:
        async def hang(*args, **kwargs):
            await anyio.sleep(10)

        with patch("online.checks.connectors.anyio.connect_tcp", side_effect=hang):
            out = await AnyioConnector().connect(self.open_target, 0.05)

        self.assertIsInstance(out.error, TimedOut)


if __name__ == "__main__":
    unittest.main()
