"""
Qt lifecycle bridge

Forwards "application became active" notifications from Qt to the tracker so
it can decide whether a new launch event is due. Create it on the GUI thread
after the QApplication exists.
"""

from PyQt6.QtCore import QObject, Qt, pyqtSignal
from PyQt6.QtGui import QGuiApplication

from .log import get_logger

log = get_logger("lifecycle")


class QtLifecycleBridge(QObject):
    """Calls tracker.on_foreground() whenever the application becomes active"""

    foregrounded = pyqtSignal()

    def __init__(self, tracker, app=None, parent=None):
        """
        Args:
            tracker: Tracker receiving foreground notifications
            app: QGuiApplication to watch (default: the running instance)
            parent: Optional QObject parent
        """
        super().__init__(parent)
        self.tracker = tracker
        self.app = app if app is not None else QGuiApplication.instance()
        self._connected = False
        if self.app is None:
            log.warning("No QGuiApplication running - foreground events will not be tracked")
            return
        self.app.applicationStateChanged.connect(self._on_application_state_changed)
        self._connected = True

    @property
    def connected(self) -> bool:
        return self._connected

    def _on_application_state_changed(self, state):
        if state != Qt.ApplicationState.ApplicationActive:
            return
        log.debug("App is in foreground")
        self.foregrounded.emit()
        self.tracker.on_foreground()

    def detach(self):
        """Stop listening to the application"""
        if self._connected:
            self.app.applicationStateChanged.disconnect(self._on_application_state_changed)
            self._connected = False
