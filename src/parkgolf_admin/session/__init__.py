"""
Session layer: who is signed in to the admin console

- directory: Admin lookups against the RPC gateway (or in memory)
- storage: Persisted session id and tokens on aiocache
- context: The session state machine
"""

from .directory import (
    AdminDirectory,
    GatewayAdminDirectory,
    InMemoryAdminDirectory,
    LoginResult,
    SessionTokens,
)

from .storage import SessionStore

from .context import (
    SessionContext,
    SessionState,
)
