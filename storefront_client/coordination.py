"""
Coordination of a single in-flight credential refresh.

Callers that hit an authorization failure while a refresh is already
running subscribe here instead of starting another one. Waiters are
settled in the order they subscribed once the refresh completes.
"""

import asyncio
from collections import deque

from storefront_client.compat import Optional


class RefreshCoordinator:
    """
    Refresh-in-flight flag plus the FIFO queue of suspended callers.

    All methods are synchronous: on a single event loop the
    check-and-set in ``begin`` cannot interleave with another caller.
    """

    __slots__ = ("_in_flight", "_waiters")

    def __init__(self):
        self._in_flight = False
        self._waiters: deque = deque()

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def __len__(self) -> int:
        return len(self._waiters)

    def begin(self) -> bool:
        """
        Claims the refresh. Returns False if one is already running.
        """
        if self._in_flight:
            return False
        self._in_flight = True
        return True

    def subscribe(self) -> "asyncio.Future[Optional[str]]":
        """
        Queues a waiter settled with the refresh outcome.
        """
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        return waiter

    def resolve(self, access_token: str) -> None:
        for waiter in self._drain():
            if not waiter.done():
                waiter.set_result(access_token)

    def reject(self, exc: BaseException) -> None:
        for waiter in self._drain():
            if not waiter.done():
                waiter.set_exception(exc)

    def _drain(self) -> list:
        waiters = list(self._waiters)
        self._waiters.clear()
        self._in_flight = False
        return waiters
