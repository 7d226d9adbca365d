# caminho: vending_admin/shared/rate_limit.py
# Funções:
# - AttemptRateLimiter: controla o intervalo mínimo entre tentativas por chave
# - RedisAttemptRateLimiter: implementação com SET NX EX
# - NullAttemptRateLimiter: implementação no-op para testes

from __future__ import annotations

from typing import Protocol

import redis.asyncio as redis


class AttemptRateLimiter(Protocol):
    async def acquire(self, key: str) -> tuple[bool, int]: ...


class RedisAttemptRateLimiter:
    def __init__(self, client: redis.Redis, interval_seconds: int, *, prefix: str = 'auth:login') -> None:
        self._client = client
        self._interval = max(1, int(interval_seconds))
        self._prefix = prefix

    async def acquire(self, key: str) -> tuple[bool, int]:
        redis_key = self._key(key)
        added = await self._client.set(redis_key, '1', nx=True, ex=self._interval)

        if added:
            return True, self._interval

        ttl = await self._client.ttl(redis_key)
        if ttl is None or ttl < 0:
            ttl = self._interval
        return False, int(ttl)

    def _key(self, key: str) -> str:
        return f'{self._prefix}:{key.lower()}'


class NullAttemptRateLimiter:
    async def acquire(self, key: str) -> tuple[bool, int]:
        return True, 0
