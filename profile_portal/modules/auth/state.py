from dataclasses import dataclass
from typing import Any, Callable, List, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSnapshot:
    user: Optional[Any] = None
    is_admin: bool = False
    role_pending: bool = False

    @property
    def user_id(self) -> Optional[str]:
        return getattr(self.user, "id", None)


Listener = Callable[[AuthSnapshot], None]


class AuthState:
    """Observable holder for the current user and admin flag"""

    def __init__(self):
        self._value = AuthSnapshot()
        self._listeners: List[Listener] = []

    @property
    def value(self) -> AuthSnapshot:
        return self._value

    def set(self, value: AuthSnapshot) -> None:
        if value == self._value:
            return
        self._value = value
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception as e:
                logger.error(f"Auth state listener failed: {e}")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns the matching unsubscribe callable"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
