import logging

logger = logging.getLogger(__name__)


class ConnectivityMonitor:
    """Tracks whether the remote store is believed reachable."""

    def __init__(self, online: bool = True) -> None:
        self._online = online

    @property
    def is_online(self) -> bool:
        return self._online

    def set_online(self, online: bool) -> bool:
        """Update the state; returns True on an offline -> online transition."""
        reconnected = online and not self._online
        if online != self._online:
            logger.info("connectivity.changed online=%s", online)
        self._online = online
        return reconnected
