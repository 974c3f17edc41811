import os
from aiocache import Cache
from parkgolf_admin.settings import settings

# Get Redis configuration from environment
REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = int(os.environ.get('REDIS_PORT', '6379'))
REDIS_PASSWORD = os.environ.get('REDIS_PASSWORD', '')

SESSION_NAMESPACE = "parkgolf_admin"

def create_session_cache(backend: str | None = None) -> Cache:
    backend = backend or settings.SESSION_BACKEND
    if backend == "redis":
        return Cache(
            Cache.REDIS,
            endpoint=REDIS_HOST,
            port=REDIS_PORT,
            password=REDIS_PASSWORD if REDIS_PASSWORD else None,
            pool_max_size=10,
            namespace=SESSION_NAMESPACE,
            db=0
        )
    if backend == "memory":
        return Cache(Cache.MEMORY, namespace=SESSION_NAMESPACE)
    raise ValueError(f"Unknown session backend: {backend}")
