from __future__ import annotations

import asyncio
import logging
import socket
import time

import anyio

from online.checks.results import ProbeOutcome
from online.errors import Unresolvable, classify
from online.models import Target

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _unresolvable(target: Target, exc: ValueError) -> Unresolvable:
    # Malformed names (empty or oversized labels) fail IDNA encoding before any lookup.
    return Unresolvable(f"invalid hostname: {exc}", target)


def _addresses(target: Target, infos: list) -> list[tuple[int, tuple]]:
    addrs = [(family, sockaddr) for family, _, _, _, sockaddr in infos]
    if not addrs:
        raise Unresolvable("no usable address", target)
    return addrs


def _failure(target: Target, start: float, exc: BaseException, bounded: bool) -> ProbeOutcome:
    err = classify(exc, target, bounded=bounded)
    logger.debug("connect to %s failed (%s): %s", target, err.kind, err.message)
    return ProbeOutcome(target=target, ok=False, latency_ms=_elapsed_ms(start), error=err)


def _success(target: Target, start: float) -> ProbeOutcome:
    latency_ms = _elapsed_ms(start)
    logger.debug("connected to %s in %d ms", target, latency_ms)
    return ProbeOutcome(target=target, ok=True, latency_ms=latency_ms)


class BlockingConnector:
    """Connects on the calling thread with plain sockets.

    The bounded path relies on the socket's own connect timeout instead of a
    timer race, so only the first resolved address is tried.
    """

    def resolve(self, target: Target) -> list[tuple[int, tuple]]:
        try:
            infos = socket.getaddrinfo(target.host, target.port, type=socket.SOCK_STREAM)
        except ValueError as exc:
            raise _unresolvable(target, exc) from exc
        return _addresses(target, infos)

    def _open(self, addrs: list[tuple[int, tuple]], timeout: float | None) -> None:
        last_exc: OSError | None = None
        for family, sockaddr in addrs:
            with socket.socket(family, socket.SOCK_STREAM) as sock:
                sock.settimeout(timeout)
                try:
                    sock.connect(sockaddr)
                except OSError as exc:
                    last_exc = exc
                    continue
                return
        assert last_exc is not None
        raise last_exc

    def connect(self, target: Target, timeout: float | None) -> ProbeOutcome:
        start = time.perf_counter()
        bounded = timeout is not None
        try:
            addrs = self.resolve(target)
            if timeout is None:
                self._open(addrs, None)
            else:
                self._open(addrs[:1], timeout)
        except (OSError, Unresolvable) as exc:
            return _failure(target, start, exc, bounded)
        return _success(target, start)


class AsyncioConnector:
    """Connects through ``asyncio.open_connection``; the bound is an ``asyncio.wait_for`` race."""

    async def resolve(self, target: Target) -> list[tuple[int, tuple]]:
        loop = asyncio.get_running_loop()
        try:
            infos = await loop.getaddrinfo(target.host, target.port, type=socket.SOCK_STREAM)
        except ValueError as exc:
            raise _unresolvable(target, exc) from exc
        return _addresses(target, infos)

    async def _open(self, addrs: list[tuple[int, tuple]]) -> None:
        last_exc: OSError | None = None
        for _, sockaddr in addrs:
            try:
                _, writer = await asyncio.open_connection(sockaddr[0], sockaddr[1])
            except OSError as exc:
                last_exc = exc
                continue
            writer.close()
            await writer.wait_closed()
            return
        assert last_exc is not None
        raise last_exc

    async def _attempt(self, target: Target, first_only: bool) -> None:
        addrs = await self.resolve(target)
        await self._open(addrs[:1] if first_only else addrs)

    async def connect(self, target: Target, timeout: float | None) -> ProbeOutcome:
        start = time.perf_counter()
        bounded = timeout is not None
        try:
            if timeout is None:
                await self._attempt(target, first_only=False)
            else:
                # Resolution runs inside the race so a slow resolver cannot stretch the bound.
                await asyncio.wait_for(self._attempt(target, first_only=True), timeout=timeout)
        except (OSError, asyncio.TimeoutError, Unresolvable) as exc:
            return _failure(target, start, exc, bounded)
        return _success(target, start)


class AnyioConnector:
    """Connects through ``anyio.connect_tcp`` inside a ``fail_after`` cancel scope.

    Works under any event loop anyio supports.
    """

    async def resolve(self, target: Target) -> list[tuple[int, tuple]]:
        try:
            infos = await anyio.getaddrinfo(target.host, target.port, type=socket.SOCK_STREAM)
        except ValueError as exc:
            raise _unresolvable(target, exc) from exc
        return _addresses(target, infos)

    async def _open(self, addrs: list[tuple[int, tuple]]) -> None:
        last_exc: OSError | None = None
        for _, sockaddr in addrs:
            try:
                stream = await anyio.connect_tcp(sockaddr[0], sockaddr[1])
            except OSError as exc:
                last_exc = exc
                continue
            await stream.aclose()
            return
        assert last_exc is not None
        raise last_exc

    async def _attempt(self, target: Target, first_only: bool) -> None:
        addrs = await self.resolve(target)
        await self._open(addrs[:1] if first_only else addrs)

    async def connect(self, target: Target, timeout: float | None) -> ProbeOutcome:
        start = time.perf_counter()
        bounded = timeout is not None
        try:
            if timeout is None:
                await self._attempt(target, first_only=False)
            else:
                with anyio.fail_after(timeout):
                    await self._attempt(target, first_only=True)
        except (OSError, TimeoutError, Unresolvable) as exc:
            return _failure(target, start, exc, bounded)
        return _success(target, start)
