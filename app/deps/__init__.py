from __future__ import annotations

from .auth import get_current_user, require_capability

__all__ = ["get_current_user", "require_capability"]
