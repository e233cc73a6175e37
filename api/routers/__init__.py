"""API sub-routers package.

Currently exposes the `energy` router (voice energy scoring and health).
Additional domain routers can be added here and re-exported for inclusion in
the FastAPI `app`.
"""

from .energy import router  # noqa: F401

__all__ = [
    "router",
]
