"""Liveness view over the chat transport connection."""

import threading
from datetime import datetime
from typing import Any, Callable, Dict


class HealthMonitor:
    """Tracks whether the transport is connected and how long we have been up"""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock
        self._started_at = clock()
        self._connected = False
        self._lock = threading.Lock()

    def mark_connected(self, connected: bool = True) -> None:
        """Record the transport session state.

        The chat transport adapter calls this from its connect and disconnect
        callbacks; until then the monitor reports unhealthy.
        """
        with self._lock:
            self._connected = connected

    @property
    def is_healthy(self) -> bool:
        with self._lock:
            return self._connected

    @property
    def uptime(self) -> float:
        """Seconds since the monitor was created"""
        return (self._clock() - self._started_at).total_seconds()

    def status(self) -> Dict[str, Any]:
        now = self._clock()
        healthy = self.is_healthy
        return {
            'status': 'healthy' if healthy else 'unhealthy',
            'uptime': (now - self._started_at).total_seconds(),
            'transport_connected': healthy,
            'timestamp': now.isoformat(),
        }
