from __future__ import annotations

import logging
from typing import Any, Callable

from PySide6.QtCore import QObject, Qt, Signal
from PySide6.QtWidgets import (
    QDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSystemTrayIcon,
    QVBoxLayout,
)

from todoapp.domain.enums import Priority
from todoapp.reminders.actions import EXTRA_TODO_ID, ActionKind

logger = logging.getLogger(__name__)

PRIORITY_COLORS = {
    Priority.HIGH: "#E24A4A",
    Priority.MEDIUM: "#E0B25B",
    Priority.LOW: "#7CC4A1",
}

ActionHandler = Callable[[str, dict[str, Any]], Any]


class ReminderPopup(QDialog):
    action_triggered = Signal(str)

    def __init__(self, title: str, description: str, priority: Priority, snooze_minutes: int, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Todo Reminder")
        self.setObjectName("ReminderPopup")
        self.setWindowFlag(Qt.WindowStaysOnTopHint, True)
        self.setMinimumWidth(340)

        stripe = QFrame()
        stripe.setFixedWidth(6)
        stripe.setStyleSheet(f"background-color: {PRIORITY_COLORS[priority]};")

        title_label = QLabel(title)
        title_label.setObjectName("ReminderTitle")
        title_label.setWordWrap(True)

        description_label = QLabel(description or "")
        description_label.setObjectName("ReminderDescription")
        description_label.setWordWrap(True)
        description_label.setVisible(bool(description))

        priority_label = QLabel(f"Priority: {priority.label}")
        priority_label.setObjectName("ReminderMeta")

        complete_button = QPushButton("Complete")
        complete_button.clicked.connect(lambda: self._trigger(ActionKind.COMPLETE))

        snooze_button = QPushButton(f"Snooze {snooze_minutes}min")
        snooze_button.setProperty("variant", "secondary")
        snooze_button.clicked.connect(lambda: self._trigger(ActionKind.SNOOZE))

        buttons = QHBoxLayout()
        buttons.addStretch()
        buttons.addWidget(snooze_button)
        buttons.addWidget(complete_button)

        body = QVBoxLayout()
        body.setSpacing(8)
        body.addWidget(title_label)
        body.addWidget(description_label)
        body.addWidget(priority_label)
        body.addLayout(buttons)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.addWidget(stripe)
        layout.addLayout(body)

    def _trigger(self, kind: ActionKind) -> None:
        self.action_triggered.emit(kind.value)


class TrayNotificationPresenter(QObject):
    """
    Reminder alerts as tray balloons plus one popup per todo.

    ``show``, ``dismiss`` and ``show_message`` are called from worker threads;
    they only emit signals, and the slots run on the GUI thread.
    """

    _show_requested = Signal(int, str, str, int)
    _dismiss_requested = Signal(int)
    _message_requested = Signal(str)

    def __init__(self, tray: QSystemTrayIcon, *, snooze_minutes: int = 15, parent=None):
        super().__init__(parent)
        self._tray = tray
        self._snooze_minutes = snooze_minutes
        self._popups: dict[int, ReminderPopup] = {}
        self._action_handler: ActionHandler | None = None

        self._show_requested.connect(self._on_show)
        self._dismiss_requested.connect(self._on_dismiss)
        self._message_requested.connect(self._on_message)

    def set_action_handler(self, handler: ActionHandler) -> None:
        self._action_handler = handler

    def notifications_enabled(self) -> bool:
        return QSystemTrayIcon.isSystemTrayAvailable() and QSystemTrayIcon.supportsMessages()

    def show(self, todo_id: int, title: str, description: str, priority: Priority) -> None:
        self._show_requested.emit(todo_id, title, description, int(priority))

    def dismiss(self, todo_id: int) -> None:
        self._dismiss_requested.emit(todo_id)

    def show_message(self, text: str) -> None:
        self._message_requested.emit(text)

    def _on_show(self, todo_id: int, title: str, description: str, priority: int) -> None:
        self._on_dismiss(todo_id)

        popup = ReminderPopup(title, description, Priority(priority), self._snooze_minutes)
        popup.action_triggered.connect(lambda action, tid=todo_id: self._on_action(action, tid))
        popup.finished.connect(lambda _result, tid=todo_id, p=popup: self._forget(tid, p))
        self._popups[todo_id] = popup
        popup.show()

        if self.notifications_enabled():
            self._tray.showMessage("Todo Reminder", title, QSystemTrayIcon.Information, 10_000)
        else:
            logger.warning("Tray messages unavailable; showing popup only for todo %s", todo_id)
        logger.debug("Popup shown for todo %s", todo_id)

    def _on_dismiss(self, todo_id: int) -> None:
        popup = self._popups.pop(todo_id, None)
        if popup is None:
            return
        popup.close()
        popup.deleteLater()

    def _on_message(self, text: str) -> None:
        if self.notifications_enabled():
            self._tray.showMessage("Todo", text, QSystemTrayIcon.Information, 3_000)
        logger.info("User message: %s", text)

    def _on_action(self, action: str, todo_id: int) -> None:
        if self._action_handler is None:
            logger.error("No action handler bound; dropping %s for todo %s", action, todo_id)
            return
        self._action_handler(action, {EXTRA_TODO_ID: todo_id})

    def _forget(self, todo_id: int, popup: ReminderPopup) -> None:
        if self._popups.get(todo_id) is popup:
            del self._popups[todo_id]
