"""
Tests for the zoom window and the deferred recompute slot.
"""

from scatterscale.chart.display_state import DisplayState, Domain, ViewRequest


class TestDomain:
    def test_auto(self):
        assert Domain().is_auto
        assert not Domain(0, 1).is_auto

    def test_inverted_window_is_invalid(self):
        assert not Domain(2, 1).is_valid
        assert Domain(1, 1).is_valid
        assert Domain(None, 1).is_valid


class TestScheduler:
    """Test the single-slot pending request."""

    def test_request_is_deferred(self):
        handled = []
        state = DisplayState()
        state.bind(handled.append)
        state.request(ViewRequest(domain=Domain(0, 1)))
        assert handled == []
        assert state.busy

    def test_last_request_wins(self):
        handled = []
        state = DisplayState()
        state.bind(handled.append)
        for n in range(5):
            state.request(ViewRequest(domain=Domain(0, n)))
        assert state.run_pending() == 1
        assert handled == [ViewRequest(domain=Domain(0, 4))]
        assert not state.busy
        assert state.pending is None

    def test_single_post_per_burst(self):
        posted = []
        state = DisplayState(post=posted.append)
        state.request(ViewRequest(width=10))
        state.request(ViewRequest(width=20))
        assert len(posted) == 1

        handled = []
        state.bind(handled.append)
        posted.pop()()
        assert handled == [ViewRequest(width=20)]

        # A request after the task ran posts again
        state.request(ViewRequest(width=30))
        assert len(posted) == 1

    def test_request_during_compute_runs_next(self):
        posted = []
        state = DisplayState(post=posted.append)
        handled = []

        def handler(request):
            handled.append(request)
            if len(handled) == 1:
                state.request(ViewRequest(width=99))

        state.bind(handler)
        state.request(ViewRequest(width=1))
        posted.pop(0)()
        assert state.busy
        posted.pop(0)()
        assert [r.width for r in handled] == [1, 99]
        assert not state.busy

    def test_reset(self):
        state = DisplayState()
        state.set_domain(Domain(1, 2))
        state.request(ViewRequest(width=5))
        state.reset_to_initial_state()
        assert state.domain is None
        assert state.pending is None
        assert not state.busy
        state.bind(lambda request: None)
        assert state.run_pending() == 1
