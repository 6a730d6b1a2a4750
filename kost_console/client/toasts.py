"""Transient toast side-effects raised for pushed notifications."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final, Protocol

from .models import Notification, NotificationKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToastStyle:
    severity: str
    duration_ms: int
    icon: str


TOAST_STYLES: Final[Mapping[NotificationKind, ToastStyle]] = {
    NotificationKind.APPROVAL: ToastStyle("success", 5000, "✅"),
    NotificationKind.REJECTION: ToastStyle("error", 6000, "❌"),
    NotificationKind.REMINDER: ToastStyle("warning", 5000, "⚠️"),
    NotificationKind.GENERIC: ToastStyle("info", 4000, "🔔"),
}

_LOG_LEVELS: Final[Mapping[str, int]] = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.WARNING,
}


@dataclass(frozen=True)
class Toast:
    """Toast request handed to the presentation layer."""

    kind: NotificationKind
    severity: str
    message: str
    duration_ms: int
    icon: str


class ToastSink(Protocol):
    def __call__(self, toast: Toast) -> None: ...


def toast_for(notification: Notification) -> Toast:
    """Return the toast announcing ``notification``."""

    style = TOAST_STYLES[notification.kind]
    return Toast(
        kind=notification.kind,
        severity=style.severity,
        message=notification.body or notification.title,
        duration_ms=style.duration_ms,
        icon=style.icon,
    )


class LoggingToastSink:
    """Default sink for headless sessions: writes toasts to the log."""

    def __call__(self, toast: Toast) -> None:
        logger.log(
            _LOG_LEVELS.get(toast.severity, logging.INFO),
            "%s %s (%sms)",
            toast.icon,
            toast.message,
            toast.duration_ms,
        )


__all__ = ["LoggingToastSink", "TOAST_STYLES", "Toast", "ToastSink", "ToastStyle", "toast_for"]
