import os
import threading

def _float_env(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default

class AdminSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE","development")
        # Identity gateway
        self.ADMIN_GATEWAY_URL = os.environ.get("ADMIN_GATEWAY_URL", "http://localhost:3091/api")
        self.ADMIN_GATEWAY_QUICK_TIMEOUT = _float_env("ADMIN_GATEWAY_QUICK_TIMEOUT", 5.0)
        self.ADMIN_GATEWAY_LIST_TIMEOUT = _float_env("ADMIN_GATEWAY_LIST_TIMEOUT", 10.0)
        # Authorization
        self.PERMISSION_GRANT_POLICY = os.environ.get("PERMISSION_GRANT_POLICY", "restrict").lower()
        # Session storage
        self.SESSION_BACKEND = os.environ.get("SESSION_BACKEND", "memory").lower()
        self.SESSION_TTL = int(os.environ.get("SESSION_TTL", "0")) or None

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(AdminSettings, cls).__new__(cls)
        return cls._instance

settings = AdminSettings()
