from __future__ import annotations

import sys

from PySide6.QtGui import QAction
from PySide6.QtWidgets import QApplication, QMenu, QMessageBox, QStyle, QSystemTrayIcon

from todoapp.bootstrap import build_reminder_system
from todoapp.config import SETTINGS
from todoapp.infra.db import SessionLocal, init_db
from todoapp.infra.logging import setup_logging
from todoapp.reminders.boot import RestartEvent
from todoapp.ui.notifications import TrayNotificationPresenter


def _build_tray(app: QApplication) -> QSystemTrayIcon:
    icon = app.style().standardIcon(QStyle.SP_MessageBoxInformation)
    tray = QSystemTrayIcon(icon)
    tray.setToolTip("Todo reminders")
    return tray


def main() -> None:
    setup_logging()
    try:
        init_db()
    except Exception as exc:  # noqa: BLE001
        app = QApplication(sys.argv)
        QMessageBox.critical(None, "DB error", str(exc))
        return

    app = QApplication(sys.argv)
    app.setQuitOnLastWindowClosed(False)

    tray = _build_tray(app)
    presenter = TrayNotificationPresenter(tray, snooze_minutes=SETTINGS.snooze_minutes)
    system = build_reminder_system(
        session_factory=SessionLocal,
        presenter=presenter,
        messenger=presenter,
    )
    presenter.set_action_handler(system.dispatcher.receive)

    menu = QMenu()
    reschedule_action = QAction("Reschedule reminders", menu)
    reschedule_action.triggered.connect(lambda: system.sweep.on_restart(RestartEvent.PROCESS_STARTED))
    quit_action = QAction("Quit", menu)
    quit_action.triggered.connect(app.quit)
    menu.addAction(reschedule_action)
    menu.addAction(quit_action)
    tray.setContextMenu(menu)
    tray.show()

    system.start()
    system.sweep.on_restart(RestartEvent.PROCESS_STARTED)
    app.aboutToQuit.connect(system.shutdown)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
