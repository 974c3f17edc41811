import logging
from typing import Optional

from aiocache import Cache

from parkgolf_admin.redis_cache import create_session_cache
from parkgolf_admin.session.directory import SessionTokens
from parkgolf_admin.settings import settings

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Persisted session state of one slot: the admin id and the gateway tokens.

    Values are opaque; the store never holds an admin record, so a restore
    always goes back to the directory.
    """

    def __init__(self, cache: Optional[Cache] = None, slot: str = "default", ttl: Optional[int] = None):
        self.cache = cache if cache is not None else create_session_cache()
        self.slot = slot
        self.ttl = ttl if ttl is not None else settings.SESSION_TTL

    def _key(self, name: str) -> str:
        return f"session:{self.slot}:{name}"

    async def save_admin_id(self, admin_id: int) -> None:
        await self.cache.set(self._key("admin_id"), str(admin_id), ttl=self.ttl)

    async def load_admin_id(self) -> Optional[int]:
        value = await self.cache.get(self._key("admin_id"))
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring malformed stored admin id {value!r} in slot {self.slot}")
            return None

    async def save_tokens(self, tokens: SessionTokens) -> None:
        for name, value in (("access_token", tokens.access_token), ("refresh_token", tokens.refresh_token)):
            if value is None:
                await self.cache.delete(self._key(name))
            else:
                await self.cache.set(self._key(name), value, ttl=self.ttl)

    async def load_tokens(self) -> SessionTokens:
        return SessionTokens(
            access_token=await self.cache.get(self._key("access_token")),
            refresh_token=await self.cache.get(self._key("refresh_token")),
        )

    async def clear(self) -> None:
        for name in ("admin_id", "access_token", "refresh_token"):
            await self.cache.delete(self._key(name))
