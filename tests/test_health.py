"""Tests for the transport health monitor."""

from datetime import datetime, timedelta

from mpesa_tracker.bot.health import HealthMonitor


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 9, 17, 18, 0, 0)

    def __call__(self):
        return self.now


class TestHealthMonitor:
    """Test cases for HealthMonitor"""

    def setup_method(self):
        """Set up test fixtures"""
        self.clock = FakeClock()
        self.monitor = HealthMonitor(clock=self.clock)

    def test_unhealthy_until_connected(self):
        assert not self.monitor.is_healthy
        assert self.monitor.status()['status'] == 'unhealthy'

    def test_status_when_connected(self):
        self.monitor.mark_connected()
        self.clock.now += timedelta(minutes=2, seconds=5)

        status = self.monitor.status()

        assert status == {
            'status': 'healthy',
            'uptime': 125.0,
            'transport_connected': True,
            'timestamp': '2025-09-17T18:02:05',
        }

    def test_disconnect(self):
        self.monitor.mark_connected(True)
        self.monitor.mark_connected(False)

        assert not self.monitor.is_healthy
        assert self.monitor.status()['transport_connected'] is False

    def test_uptime(self):
        self.clock.now += timedelta(seconds=30)
        assert self.monitor.uptime == 30.0
