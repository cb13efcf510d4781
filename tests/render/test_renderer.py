"""Tests for the chart renderer scene reconciliation."""

from datetime import date, timedelta

import pytest

from candlesim.config import ChartStyle, Margin
from candlesim.render import ChartRenderer, RendererState

DOMAIN = (90.0, 110.0)


@pytest.fixture
def renderer(scheduler):
    r = ChartRenderer(scheduler)
    r.resize(800, 400, Margin())
    return r


@pytest.fixture
def series(candle_factory):
    def build(count, start=date(2025, 3, 3)):
        return [
            candle_factory(start + timedelta(days=i), open=100.0 + i, close=101.0 + i)
            for i in range(count)
        ]

    return build


class TestLifecycle:

    def test_geometry_from_margin(self, renderer):
        assert renderer.inner_width == 680
        assert renderer.inner_height == 340

    def test_settle_ms_is_longest_transition(self, scheduler):
        assert ChartRenderer(scheduler).settle_ms == 400.0
        assert ChartRenderer(scheduler, axis_duration_ms=900.0).settle_ms == 900.0

    def test_starts_uninitialized(self, scheduler):
        assert ChartRenderer(scheduler).state is RendererState.UNINITIALIZED

    def test_empty_data_is_a_noop(self, renderer):
        assert renderer.render([], DOMAIN) is None
        assert renderer.state is RendererState.UNINITIALIZED

    def test_zero_plot_area_is_a_noop(self, scheduler, series):
        r = ChartRenderer(scheduler)
        r.resize(100, 50, Margin())
        assert r.render(series(3), DOMAIN) is None
        assert r.state is RendererState.UNINITIALIZED
        assert r.snapshot().candles == ()

    def test_first_render_enters_everything(self, renderer, series):
        candles = series(5)
        join = renderer.render(candles, DOMAIN)
        assert len(join.entering) == 5
        assert renderer.state is RendererState.RENDERING
        assert renderer.keys() == [c.date for c in candles]

    def test_initialize_is_idempotent(self, renderer, series):
        renderer.render(series(3), DOMAIN)
        renderer.initialize()
        assert len(renderer.keys()) == 3


class TestCandleGeometry:

    def test_shapes_follow_scales(self, renderer, series):
        candles = series(5)
        renderer.render(candles, DOMAIN)
        mapping = renderer.mapping
        shape = renderer.snapshot().candle(candles[2].date)

        assert shape.x == pytest.approx(mapping.x(candles[2].date))
        assert shape.width == pytest.approx(mapping.x.bandwidth)
        assert shape.wick_x == pytest.approx(shape.x + shape.width / 2)
        assert shape.wick_y1 == pytest.approx(mapping.y(candles[2].high))
        assert shape.wick_y2 == pytest.approx(mapping.y(candles[2].low))
        assert shape.body_y == pytest.approx(mapping.y(candles[2].close))
        assert shape.body_height == pytest.approx(mapping.y(candles[2].open) - mapping.y(candles[2].close))
        assert shape.opacity == 1.0

    def test_colors_by_direction(self, renderer, candle_factory):
        up = candle_factory(date(2025, 3, 3), open=100, close=104)
        down = candle_factory(date(2025, 3, 4), open=104, close=100)
        renderer.render([up, down], DOMAIN)
        snap = renderer.snapshot()
        style = ChartStyle()
        assert snap.candle(up.date).color == style.up_color
        assert snap.candle(down.date).color == style.down_color

    def test_flat_body_gets_minimum_height(self, renderer, candle_factory):
        flat = candle_factory(open=100, close=100)
        renderer.render([flat], DOMAIN)
        assert renderer.snapshot().candle(flat.date).body_height == 1.0


class TestReconciliation:

    def test_animated_enter_grows_from_open(self, renderer, scheduler, series):
        candles = series(6)
        renderer.render(candles[:5], DOMAIN)
        join = renderer.render(candles, DOMAIN, animate=True)
        assert join.entering == [candles[5]]

        new = candles[5]
        y_open = renderer.mapping.y(new.open)
        start = renderer.snapshot().candle(new.date)
        assert start.body_height == 0.0
        assert start.body_y == pytest.approx(y_open)
        assert start.wick_y1 == pytest.approx(y_open)
        assert start.wick_y2 == pytest.approx(y_open)

        scheduler.advance(200)
        mid = renderer.snapshot().candle(new.date)
        assert 0.0 < mid.body_height < renderer.mapping.y(new.open) - renderer.mapping.y(new.close)

        scheduler.advance(200)
        end = renderer.snapshot().candle(new.date)
        assert end.wick_y1 == pytest.approx(renderer.mapping.y(new.high))
        assert end.body_y == pytest.approx(renderer.mapping.y(new.close))

    def test_unanimated_enter_is_immediate(self, renderer, series):
        candles = series(2)
        renderer.render(candles[:1], DOMAIN)
        renderer.render(candles, DOMAIN)
        shape = renderer.snapshot().candle(candles[1].date)
        assert shape.body_height > 1.0

    def test_update_during_enter_retargets(self, renderer, scheduler, series):
        candles = series(6)
        renderer.render(candles[:5], DOMAIN)
        renderer.render(candles, DOMAIN, animate=True)
        scheduler.advance(200)

        renderer.render(candles, (80.0, 120.0))
        new = candles[5]
        scheduler.advance(200)
        shape = renderer.snapshot().candle(new.date)
        assert shape.body_y == pytest.approx(renderer.mapping.y(new.close))
        assert shape.wick_y2 == pytest.approx(renderer.mapping.y(new.low))

    def test_sliding_window_exits_oldest(self, renderer, scheduler, series):
        candles = series(6)
        renderer.render(candles[:5], DOMAIN)
        join = renderer.render(candles[1:], DOMAIN)

        assert join.exiting == [candles[0].date]
        assert renderer.keys() == [c.date for c in candles[1:]]
        assert renderer.exiting_keys() == [candles[0].date]

        snap = renderer.snapshot()
        assert snap.candles[0].key == candles[0].date
        assert snap.candles[0].opacity == 1.0

        scheduler.advance(100)
        assert 0.0 < renderer.snapshot().candle(candles[0].date).opacity < 1.0

        scheduler.advance(100)
        assert renderer.exiting_keys() == []
        assert renderer.snapshot().candle(candles[0].date) is None

    def test_exit_during_enter_fades_at_partial_height(self, renderer, scheduler, series):
        candles = series(6)
        renderer.render(candles[:5], DOMAIN)
        renderer.render(candles, DOMAIN, animate=True)
        scheduler.advance(100)
        partial = renderer.snapshot().candle(candles[5].date).body_height

        renderer.render(candles[:5], DOMAIN)
        scheduler.advance(50)
        fading = renderer.snapshot().candle(candles[5].date)
        assert fading.body_height == pytest.approx(partial)
        assert fading.opacity < 1.0

    def test_survivors_move_to_new_band_positions(self, renderer, series):
        candles = series(6)
        renderer.render(candles[:5], DOMAIN)
        before = renderer.snapshot().candle(candles[1].date).x
        renderer.render(candles[1:], DOMAIN)
        after = renderer.snapshot().candle(candles[1].date).x
        assert after == pytest.approx(renderer.mapping.x(candles[1].date))
        assert after < before

    def test_resize_rescales_on_next_render(self, renderer, series):
        candles = series(3)
        renderer.render(candles, DOMAIN)
        renderer.resize(1200, 600, Margin())
        join = renderer.render(candles, DOMAIN)
        assert join.is_noop
        shape = renderer.snapshot().candle(candles[0].date)
        assert shape.x == pytest.approx(renderer.mapping.x(candles[0].date))
        assert renderer.snapshot().inner_width == 1080


class TestAxes:

    def test_value_ticks_and_gridlines(self, renderer, series):
        renderer.render(series(5), DOMAIN)
        snap = renderer.snapshot()
        labels = [t.label for t in snap.value_ticks]
        assert "$90" in labels and "$110" in labels
        assert len(snap.gridlines) == len(snap.value_ticks) == 11

    def test_time_ticks_label_each_short_window_date(self, renderer, series):
        renderer.render(series(5), DOMAIN)
        labels = [t.label for t in renderer.snapshot().time_ticks]
        assert labels == ["Mar 03", "Mar 04", "Mar 05", "Mar 06", "Mar 07"]

    def test_domain_change_transitions_ticks(self, renderer, scheduler, series):
        candles = series(5)
        renderer.render(candles, DOMAIN)
        renderer.render(candles, (80.0, 120.0))

        fading = {t.key for t in renderer.snapshot().value_ticks}
        assert 92 in fading

        scheduler.advance(300)
        keys = [t.key for t in renderer.snapshot().value_ticks]
        assert keys == [120, 115, 110, 105, 100, 95, 90, 85, 80]


class TestCrosshair:

    def test_follows_pointer_inside_plot(self, renderer, series):
        renderer.render(series(5), DOMAIN)
        renderer.pointer_move(60 + 10, 20 + 170)

        cross = renderer.crosshair
        assert cross.x == 10
        assert cross.y == 170
        assert cross.price == pytest.approx(100.0)
        assert cross.label == "100.00"
        assert cross.label_x == 30

    def test_label_clamped_at_right_edge(self, renderer, series):
        renderer.render(series(5), DOMAIN)
        renderer.pointer_move(60 + 680, 20)
        assert renderer.crosshair.label_x == 650
        assert renderer.crosshair.label == "110.00"

    def test_hidden_outside_plot_and_on_leave(self, renderer, series):
        renderer.render(series(5), DOMAIN)
        renderer.pointer_move(10, 10)
        assert renderer.crosshair is None

        renderer.pointer_move(100, 100)
        assert renderer.crosshair is not None
        renderer.pointer_leave()
        assert renderer.crosshair is None
        assert renderer.snapshot().crosshair is None

    def test_hidden_before_first_render(self, renderer):
        renderer.pointer_move(100, 100)
        assert renderer.crosshair is None

    def test_price_follows_domain_changes(self, renderer, series):
        candles = series(5)
        renderer.render(candles, DOMAIN)
        renderer.pointer_move(60 + 10, 20 + 170)
        renderer.render(candles, (50.0, 70.0))
        assert renderer.crosshair.price == pytest.approx(60.0)
