from PySide6.QtWidgets import QWidget, QMessageBox

from ..constants import COLOR_ERROR, COLOR_WARNING


def info(parent: QWidget, title: str, text: str):
    QMessageBox.information(parent, title, text)


def warning(parent: QWidget, title: str, text: str):
    QMessageBox.warning(parent, title, text)


def error(parent: QWidget, title: str, text: str):
    QMessageBox.critical(parent, title, text)


def bind_message_boxes(notifier, parent: QWidget | None = None):
    """
    Show every notification from `notifier` as a message box on `parent`.
    Returns the connected slot so callers can disconnect it.
    """
    def _show(title: str, message: str, color: str):
        if color == COLOR_ERROR:
            error(parent, title, message)
        elif color == COLOR_WARNING:
            warning(parent, title, message)
        else:
            info(parent, title, message)

    notifier.notified.connect(_show)
    return _show
