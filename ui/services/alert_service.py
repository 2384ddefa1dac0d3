"""QMessageBox-backed alerts."""

from typing import Optional

from PySide6.QtWidgets import QMessageBox, QWidget

from core.constants import APP_TITLE


class MessageBoxAlertService:
    """Modal dialogs for warnings, errors and yes/no confirmations."""

    def __init__(self, parent: Optional[QWidget] = None, title: str = APP_TITLE):
        self._parent = parent
        self._title = title

    def set_parent(self, parent: Optional[QWidget]) -> None:
        self._parent = parent

    def show_warning(self, message: str) -> None:
        QMessageBox.warning(self._parent, self._title, message)

    def show_error(self, message: str) -> None:
        QMessageBox.critical(self._parent, self._title, message)

    def show_confirmation(self, message: str) -> bool:
        answer = QMessageBox.question(
            self._parent,
            self._title,
            message,
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        return answer == QMessageBox.Yes
