"""Tests for the velocity broadcast channel."""
import logging

import pytest

from scroll_velocity.notifier.broadcast import VelocityBroadcast


class TestVelocityBroadcast:
    def test_no_subscribers(self):
        channel = VelocityBroadcast()
        channel.add(1.0)
        assert channel.subscriber_count == 0

    def test_many_subscribers_receive_in_order(self):
        channel = VelocityBroadcast()
        a, b = [], []
        channel.listen(a.append)
        channel.listen(b.append)
        channel.add(1.0)
        channel.add(2.0)
        assert a == [1.0, 2.0]
        assert b == [1.0, 2.0]
        assert channel.subscriber_count == 2

    def test_cancel(self):
        channel = VelocityBroadcast()
        got = []
        sub = channel.listen(got.append)
        channel.add(1.0)
        sub.cancel()
        sub.cancel()
        channel.add(2.0)
        assert got == [1.0]
        assert channel.subscriber_count == 0

    def test_failing_subscriber_is_logged_and_isolated(self, caplog):
        channel = VelocityBroadcast()
        got = []

        def boom(event):
            raise RuntimeError("subscriber broke")

        channel.listen(boom)
        channel.listen(got.append)
        with caplog.at_level(logging.ERROR, logger="scroll_velocity.notifier.broadcast"):
            channel.add(3.0)
        assert got == [3.0]
        assert "failed" in caplog.text

    def test_closed_channel_rejects_events(self):
        channel = VelocityBroadcast()
        channel.listen(lambda e: None)
        channel.close()
        assert channel.closed
        assert channel.subscriber_count == 0
        with pytest.raises(RuntimeError):
            channel.add(1.0)
        with pytest.raises(RuntimeError):
            channel.listen(lambda e: None)
