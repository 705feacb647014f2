import pytest

from pixelboard.client.viewport import ContainerRect, ViewportController

CONTAINER = ContainerRect(left=0, top=0, width=800, height=600)


@pytest.fixture()
def viewport():
    return ViewportController(200, 200, CONTAINER)


def test_zoom_bounds_depend_on_device():
    desktop = ViewportController(200, 200, CONTAINER)
    mobile = ViewportController(200, 200, CONTAINER, is_mobile=True)
    assert desktop.min_zoom == pytest.approx(0.75)
    assert mobile.min_zoom == pytest.approx(1.05)
    assert desktop.max_zoom == pytest.approx(4.995)
    assert desktop.state.zoom_level == desktop.min_zoom
    assert desktop.zoom_percent == 50


def test_initial_view_is_centred(viewport):
    assert viewport.resolve_cell(400, 300) == (100, 100)
    assert viewport.grid_to_screen(100, 100) == pytest.approx((400, 300))


@pytest.mark.parametrize('sx,sy,target', [
    (400, 300, 3.0),
    (10, 10, 2.0),
    (790, 590, 4.995),
    (123, 456, 1.1),
    (650, 80, 0.8),
])
def test_zoom_at_keeps_point_under_cursor(viewport, sx, sy, target):
    before = viewport.screen_to_grid(sx, sy)
    assert viewport.zoom_at(sx, sy, target)
    after = viewport.screen_to_grid(sx, sy)
    assert after == pytest.approx(before, abs=1e-6)


def test_zoom_at_from_zoomed_and_panned_view(viewport):
    viewport.zoom_at(200, 150, 3.0)
    viewport.pointer_down(400, 300)
    viewport.pointer_move(300, 250)
    viewport.pointer_up(300, 250)
    cell_before = viewport.resolve_cell(520, 410)
    viewport.zoom_at(520, 410, 1.5)
    assert viewport.resolve_cell(520, 410) == cell_before


def test_zoom_is_clamped(viewport):
    assert viewport.zoom_out() is False
    assert viewport.wheel(1, 400, 300) is False
    for _ in range(20):
        viewport.zoom_in()
    assert viewport.state.zoom_level == pytest.approx(viewport.max_zoom)
    assert viewport.zoom_in() is False


def test_wheel_steps(viewport):
    assert viewport.wheel(-100, 400, 300)
    assert viewport.state.zoom_level == pytest.approx(0.85)
    assert viewport.wheel(100, 400, 300)
    assert viewport.state.zoom_level == pytest.approx(0.75)
    assert viewport.wheel(0, 400, 300) is False


def test_pan_is_clamped(viewport):
    # rendered 1050px, inner container 768x568
    assert viewport.clamp_pan(10_000, -10_000) == pytest.approx((909, -809))
    assert viewport.clamp_pan(100, -40) == (100, -40)


def test_click_within_threshold_places(viewport):
    viewport.pointer_down(400, 300)
    assert viewport.pointer_move(402, 301) is False
    assert viewport.pointer_up(402, 301) == (100, 100)
    assert viewport.state.pan_x == 0


def test_drag_pans_and_suppresses_click(viewport):
    viewport.pointer_down(400, 300)
    assert viewport.pointer_move(450, 300)
    assert viewport.is_dragging
    assert viewport.state.pan_x == 50
    assert viewport.pointer_up(450, 300) is None
    assert not viewport.is_dragging


def test_pointer_up_without_down(viewport):
    assert viewport.pointer_up(400, 300) is None


def test_resolve_cell_outside_grid(viewport):
    assert viewport.resolve_cell(-500, 300) is None
    assert viewport.resolve_cell(400, 2000) is None


def test_pinch_zooms_and_never_taps(viewport):
    viewport.touch_start([(300, 300)])
    viewport.touch_start([(300, 300), (400, 300)])
    assert viewport.touch_move([(280, 300), (420, 300)])
    assert viewport.state.zoom_level == pytest.approx(0.85)
    assert viewport.touch_move([(300, 300), (400, 300)])
    assert viewport.state.zoom_level == pytest.approx(0.75)
    assert viewport.touch_end([(400, 300)], (300, 300)) is None
    assert viewport.touch_end([], (400, 300)) is None


def test_single_touch_tap(viewport):
    viewport.touch_start([(400, 300)])
    assert viewport.touch_end([], (400, 300)) == (100, 100)


def test_reset(viewport):
    viewport.zoom_at(100, 100, 3.0)
    viewport.reset()
    assert viewport.state.zoom_level == viewport.min_zoom
    assert (viewport.state.pan_x, viewport.state.pan_y) == (0, 0)


def test_set_container_reclamps_pan(viewport):
    viewport.state.pan_x = 900
    viewport.set_container(ContainerRect(0, 0, 1200, 600))
    # limit is (1050 + 1168) / 2
    assert viewport.state.pan_x == 900
    viewport.set_container(ContainerRect(0, 0, 200, 200))
    assert viewport.state.pan_x == pytest.approx(609)


def test_pan_limit_keeps_grid_edge_on_inner_area(viewport):
    pan_x, pan_y = viewport.clamp_pan(10_000, 10_000)
    viewport.state.pan_x, viewport.state.pan_y = pan_x, pan_y
    # grid top-left corner lands on the bottom-right corner of the inner area
    assert viewport.grid_to_screen(0, 0) == pytest.approx((784, 584))


@pytest.mark.parametrize("drag_to_x,anchor_x", [
    (1904, 1380),
    (16, 540),
])
def test_anchored_zoom_on_container_wider_than_grid(drag_to_x, anchor_x):
    wide = ViewportController(200, 200, ContainerRect(0, 0, 1920, 1080))
    # rendered grid is 1050px, inner area 1888px
    wide.pointer_down(960, 540)
    wide.pointer_move(drag_to_x, 540)
    wide.pointer_up(drag_to_x, 540)

    before = wide.screen_to_grid(anchor_x, 540)
    cell = wide.resolve_cell(anchor_x, 540)
    assert cell is not None
    for _ in range(5):
        assert wide.wheel(-1, anchor_x, 540)
        assert wide.resolve_cell(anchor_x, 540) == cell
    assert wide.screen_to_grid(anchor_x, 540) == pytest.approx(before, abs=1e-6)
    for _ in range(5):
        assert wide.wheel(1, anchor_x, 540)
        assert wide.resolve_cell(anchor_x, 540) == cell
