# src/tiercascade/tiers/callback.py
"""
Callback Tier - a tier whose primitives are supplied by the caller.

Useful for HTTP services, legacy repositories and anything else that does
not deserve its own tier class. Each primitive is prepared with a callable
(sync or async); invoking a primitive that was never prepared raises
:class:`~tiercascade.exceptions.TierNotPreparedError`.

Example::

    api = (
        CallbackTier("Order")
        .prepare_get(fetch_order)            # async def fetch_order(key)
        .prepare_set(save_order)             # async def save_order(key, item)
    )
    memory.set_next(api)
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from ..cascade.options import Capability
from ..cascade.tier import CascadeTier, K, T
from ..exceptions import TierNotPreparedError

logger = logging.getLogger(__name__)


class CallbackTier(CascadeTier[T, K]):
    """Tier delegating every primitive to a caller-supplied callable.

    Callables receive physical (adapted) keys:

    ========== ===============================
    get        ``(key) -> item | None``
    get_all    ``() -> list[item]``
    get_list   ``(list_key) -> list[item]``
    set        ``(key, item) -> None``
    set_all    ``(items) -> None``
    set_list   ``(list_key, items) -> None``
    delete     ``(key) -> None``
    ========== ===============================
    """

    kind_capabilities = frozenset({Capability.CALLBACK})

    def __init__(self, entity: str, **kwargs: Any) -> None:
        super().__init__(entity, **kwargs)
        self._callbacks: dict[str, Callable[..., Any]] = {}

    def _prepare(self, operation: str, callback: Callable[..., Any]) -> CallbackTier[T, K]:
        self._callbacks[operation] = callback
        return self

    def prepare_get(self, callback: Callable[..., Any]) -> CallbackTier[T, K]:
        return self._prepare("get", callback)

    def prepare_get_all(self, callback: Callable[..., Any]) -> CallbackTier[T, K]:
        return self._prepare("get_all", callback)

    def prepare_get_list(self, callback: Callable[..., Any]) -> CallbackTier[T, K]:
        return self._prepare("get_list", callback)

    def prepare_set(self, callback: Callable[..., Any]) -> CallbackTier[T, K]:
        return self._prepare("set", callback)

    def prepare_set_all(self, callback: Callable[..., Any]) -> CallbackTier[T, K]:
        return self._prepare("set_all", callback)

    def prepare_set_list(self, callback: Callable[..., Any]) -> CallbackTier[T, K]:
        return self._prepare("set_list", callback)

    def prepare_delete(self, callback: Callable[..., Any]) -> CallbackTier[T, K]:
        return self._prepare("delete", callback)

    def is_prepared(self, operation: str) -> bool:
        return operation in self._callbacks

    async def _invoke(self, operation: str, *args: Any) -> Any:
        callback = self._callbacks.get(operation)
        if callback is None:
            raise TierNotPreparedError(self.name, operation)
        result = callback(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _core_get(self, key: Any) -> T | None:
        return await self._invoke("get", key)

    async def _core_get_all(self, all_key: str) -> list[T]:
        return list(await self._invoke("get_all") or [])

    async def _core_get_list(self, list_key: str) -> list[T]:
        return list(await self._invoke("get_list", list_key) or [])

    async def _core_set(self, key: Any, item: T, expires_at: datetime | None) -> None:
        await self._invoke("set", key, item)

    async def _core_set_all(self, all_key: str, items: list[T], expires_at: datetime | None) -> None:
        await self._invoke("set_all", items)

    async def _core_set_list(self, list_key: str, items: list[T], expires_at: datetime | None) -> None:
        await self._invoke("set_list", list_key, items)

    async def _core_delete(self, key: Any) -> None:
        await self._invoke("delete", key)
