# ============================================================================
# test_progress.py -- Tests for the progress coordinator
# ============================================================================
#
# COVERS:
#   TestProgressIndicator -- callback, rate limiting, cancellation
#   TestProgressScope     -- finite and infinite scales, nesting
#
# RUN:
#   python -m pytest tests/test_progress.py -v
# ============================================================================

import pytest

from stlreader.core.progress import ProgressIndicator, ProgressRange, ProgressScope


def _recording_indicator():
    calls = []
    indicator = ProgressIndicator(
        callback=lambda pos, name: calls.append((pos, name)),
        report_every_seconds=0.0,
    )
    return indicator, calls


class TestProgressIndicator:

    def test_position_never_goes_back(self):
        indicator, _ = _recording_indicator()
        indicator.increment_to(0.5)
        indicator.increment_to(0.2)
        assert indicator.position == 0.5

    def test_position_clamped(self):
        indicator, _ = _recording_indicator()
        indicator.increment_to(3.0)
        assert indicator.position == 1.0

    def test_callback_receives_name(self):
        indicator, calls = _recording_indicator()
        indicator.increment_to(0.25, "Reading")
        assert calls[-1] == (0.25, "Reading")

    def test_rate_limited(self):
        calls = []
        indicator = ProgressIndicator(
            callback=lambda pos, name: calls.append(pos),
            report_every_seconds=3600.0,
        )
        for i in range(100):
            indicator.increment_to(i / 100.0)
        assert len(calls) == 1

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("STLREADER_PROGRESS_EVERY_S", "7.5")
        assert ProgressIndicator().report_every_seconds == 7.5

    def test_cancel(self):
        indicator = ProgressIndicator(report_every_seconds=0.0)
        progress_range = indicator.start()
        assert not progress_range.user_break()
        indicator.cancel()
        assert progress_range.user_break()

    def test_eta(self):
        indicator = ProgressIndicator(report_every_seconds=0.0)
        assert indicator.eta_seconds() is None
        indicator.increment_to(0.5)
        assert indicator.eta_seconds() >= 0.0


class TestProgressScope:

    def test_null_range(self):
        scope = ProgressScope(None, "work", 10)
        assert scope.more()
        sub = scope.next()
        assert sub.is_null
        scope.close()

    def test_finite_steps(self):
        indicator, _ = _recording_indicator()
        with ProgressScope(indicator.start(), "work", 4) as scope:
            scope.next()
            scope.next()
            assert scope.fraction() == pytest.approx(0.5)
            scope.next()
            assert indicator.position == pytest.approx(0.5)
        assert indicator.position == pytest.approx(1.0)

    def test_sub_range_bounds(self):
        indicator, _ = _recording_indicator()
        scope = ProgressScope(indicator.start(), "work", 4)
        scope.next()
        sub = scope.next()
        assert sub.start == pytest.approx(0.25)
        assert sub.span == pytest.approx(0.25)

    def test_nested_scope_maps_into_parent(self):
        indicator, _ = _recording_indicator()
        outer = ProgressScope(indicator.start(), "outer", 2)
        outer.next()
        with ProgressScope(outer.next(), "inner", 10) as inner:
            for _ in range(5):
                inner.next()
            inner.next()
            assert indicator.position == pytest.approx(0.75)
        assert indicator.position == pytest.approx(1.0)

    def test_infinite_scale_first_block_gets_majority(self):
        indicator, _ = _recording_indicator()
        scope = ProgressScope(indicator.start(), "blocks", 1, infinite=True)
        first = scope.next(2)
        second = scope.next(2)
        third = scope.next(2)
        assert first.span == pytest.approx(2.0 / 3.0)
        assert first.span > 0.5
        assert second.span < first.span
        assert third.span < second.span
        scope.close()
        assert indicator.position < 1.0

    def test_infinite_scale_never_reaches_end(self):
        scope = ProgressScope(ProgressIndicator(report_every_seconds=1e9).start(),
                              "blocks", 1, infinite=True)
        for _ in range(1000):
            scope.next(2)
        assert scope.fraction() < 1.0

    def test_more_reflects_cancellation(self):
        indicator = ProgressIndicator(report_every_seconds=0.0)
        scope = ProgressScope(indicator.start(), "work", 10)
        sub_scope = ProgressScope(scope.next(), "sub", 10)
        assert sub_scope.more()
        indicator.cancel()
        assert not sub_scope.more()
        assert not scope.more()

    def test_zero_max_value_treated_as_one(self):
        scope = ProgressScope(ProgressRange(), "empty", 0)
        assert scope.max_value == 1.0
