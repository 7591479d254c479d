"""Transient user-facing notifications (toasts)."""

import itertools
from dataclasses import dataclass, field
from typing import Literal

from metrichistory.core.retention import Clock, now_ms

ToastKind = Literal["success", "error"]

DEFAULT_TOAST_DURATION_MS = 3000


@dataclass(frozen=True)
class Toast:
    """A notification shown until expires_at (milliseconds since epoch)."""

    id: int
    message: str
    kind: ToastKind
    expires_at: int


@dataclass
class ToastList:
    """Shared list of active toasts.

    Expired toasts are pruned when the list is read, so no timer is needed.
    """

    clock: Clock = now_ms
    _toasts: list[Toast] = field(default_factory=list, init=False)
    _ids: itertools.count = field(
        default_factory=lambda: itertools.count(1), init=False
    )

    def show(
        self,
        message: str,
        kind: ToastKind = "success",
        duration_ms: int = DEFAULT_TOAST_DURATION_MS,
    ) -> Toast:
        """Add a toast that expires after duration_ms."""
        toast = Toast(
            id=next(self._ids),
            message=message,
            kind=kind,
            expires_at=self.clock() + duration_ms,
        )
        self._toasts.append(toast)
        return toast

    def success(self, message: str) -> Toast:
        return self.show(message, "success")

    def error(self, message: str) -> Toast:
        return self.show(message, "error")

    def remove(self, toast_id: int) -> bool:
        """Remove a toast by id. Returns False if it was already gone."""
        for index, toast in enumerate(self._toasts):
            if toast.id == toast_id:
                del self._toasts[index]
                return True
        return False

    def active(self, now: int | None = None) -> list[Toast]:
        """Return toasts that have not expired, oldest first."""
        current = self.clock() if now is None else now
        self._toasts = [t for t in self._toasts if t.expires_at > current]
        return list(self._toasts)
