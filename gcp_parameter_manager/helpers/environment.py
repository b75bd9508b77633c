import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


@lru_cache(maxsize=None)
def env(key: str, default: Optional[str] = None) -> Optional[str]:
    """
    Read an environment variable, falling back to ``default``.

    Values from a ``.env`` file in the working directory are loaded once at
    import time and never override variables already set in the process.
    Lookups are cached; call ``env.cache_clear()`` after changing the
    environment at runtime (the test suite does this for every test).
    """
    return os.getenv(key, default)


def env_bool(key: str, default: bool = False) -> bool:
    """Read an environment variable as a boolean flag."""
    value = env(key)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")
