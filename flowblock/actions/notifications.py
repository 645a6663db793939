"""
Notification sink — platform-aware desktop notifications for session transitions.
Delivery failures are reported as False, never raised.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from typing import Protocol

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):

    def notify(self, title: str, message: str) -> bool: ...


class DesktopNotifier:

    def notify(self, title: str, message: str) -> bool:
        if sys.platform == "win32":
            ok = self._windows_toast(title, message)
        elif sys.platform == "darwin":
            ok = self._macos_notification(title, message)
        else:
            ok = self._linux_notify_send(title, message)
        if not ok:
            logger.warning("Could not deliver notification %r", title)
        return ok

    # ------------------------------------------------------------------
    # Platform implementations
    # ------------------------------------------------------------------

    def _windows_toast(self, title: str, message: str) -> bool:
        script = (
            "[Windows.UI.Notifications.ToastNotificationManager, Windows.UI.Notifications, "
            "ContentType=WindowsRuntime] > $null; "
            "$t = [Windows.UI.Notifications.ToastNotificationManager]::GetTemplateContent("
            "[Windows.UI.Notifications.ToastTemplateType]::ToastText02); "
            f"$t.GetElementsByTagName('text')[0].AppendChild($t.CreateTextNode('{_ps_quote(title)}')) > $null; "
            f"$t.GetElementsByTagName('text')[1].AppendChild($t.CreateTextNode('{_ps_quote(message)}')) > $null; "
            "[Windows.UI.Notifications.ToastNotificationManager]::CreateToastNotifier('FlowBlock')"
            ".Show([Windows.UI.Notifications.ToastNotification]::new($t))"
        )
        return _run(["powershell", "-Command", script])

    def _macos_notification(self, title: str, message: str) -> bool:
        script = f"display notification {_as_quote(message)} with title {_as_quote(title)}"
        return _run(["osascript", "-e", script])

    def _linux_notify_send(self, title: str, message: str) -> bool:
        return _run(["notify-send", "--app-name=FlowBlock", title, message])


class LogNotifier:
    """Headless sink: notifications only go to the log."""

    def notify(self, title: str, message: str) -> bool:
        logger.info("Notification: %s: %s", title, message)
        return True


def _run(cmd: list[str]) -> bool:
    try:
        subprocess.run(cmd, check=True, capture_output=True, timeout=5)
        return True
    except (OSError, subprocess.SubprocessError):
        return False


def _ps_quote(text: str) -> str:
    return text.replace("'", "''")


def _as_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
