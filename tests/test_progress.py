"""Tests for the background progress indicator."""

from __future__ import annotations

import io
import time

from templatesync.progress import ProgressIndicator


def test_indicator_draws_until_stopped() -> None:
    stream = io.StringIO()
    indicator = ProgressIndicator(stream, interval=0.01, width=5)

    indicator.start()
    time.sleep(0.1)
    thread = indicator._thread
    indicator.stop()

    assert not indicator.running
    assert thread is not None and not thread.is_alive()
    output = stream.getvalue()
    assert output.startswith("\r>")
    assert "[sec]" in output
    assert output.endswith("\n")


def test_indicator_context_manager_stops_on_exit() -> None:
    stream = io.StringIO()

    with ProgressIndicator(stream, interval=0.01) as indicator:
        assert indicator.running

    assert not indicator.running
    assert stream.getvalue().endswith("\n")


def test_stop_without_start_writes_nothing() -> None:
    stream = io.StringIO()

    ProgressIndicator(stream).stop()

    assert stream.getvalue() == ""
