import pytest

pn = pytest.importorskip("panel")

import hider
from coordinator import State


def lines(n):
    return pn.Column(*[pn.pane.Markdown(f"line {i}") for i in range(n)])


@pytest.fixture
def app():
    return hider.Hider(
        pn.pane.Markdown("**toolbar**"),
        lines(100),
        extension=pn.pane.Markdown("extension"),
        bottom=pn.pane.Markdown("bottom"),
        height_px=48,
        extension_height_px=40,
        bottom_height_px=48,
    )


def report(app, phase, scroll_y, velocity=0.0):
    app.sensor.param.update(scroll_y=scroll_y, scroll_height=5000.0, inner_height=800.0, velocity=velocity)
    app.dispatch(phase)


def browse(app, phase, scroll_y, velocity=0.0):
    """Report like the page does, and return where the page ends up scrolled."""
    app.sensor.target_y = None
    report(app, phase, scroll_y, velocity)
    if app.sensor.target_y is None:
        return scroll_y
    return app.sensor.target_y


def test_initial_layout(app):
    coordinator = app.coordinator
    assert coordinator.navbar.is_expanded()
    assert coordinator.extension.surface.center_y == 68.0
    # toolbar plus extension
    assert app.sensor.padding_top == 88.0

    report(app, "layout", 0.0)
    assert app.screen.height == 800.0
    assert app.scroll_view.offset == -88.0
    assert app.scroll_view.content_height == 5000.0 - 88.0
    assert coordinator.bottom.surface.center_y == 776.0


def test_scrolling_moves_bars(app):
    y = browse(app, "layout", 0.0)
    y = browse(app, "began", y)
    y = browse(app, "changed", y + 10.0)
    y = browse(app, "changed", y + 10.0)

    coordinator = app.coordinator
    assert coordinator.state == State.CONTRACTING
    assert coordinator.extension.surface.center_y == 58.0
    assert coordinator.bottom.surface.center_y == 786.0
    assert app.sensor.padding_top == app.scroll_view.content_inset.top == 78.0
    # the padding shrank instead, so the page is held where it was
    assert y == 10.0
    assert app._extension.styles["transform"] == "translateY(-10.0px)"
    assert app._bottom.styles["transform"] == "translateY(10.0px)"
    assert app._extension.styles["transition"] == "none"


def test_bars_move_one_to_one_with_the_page():
    app = hider.Hider(pn.pane.Markdown("**toolbar**"), lines(100), height_px=48)
    navbar = app.coordinator.navbar.surface

    y = browse(app, "layout", 0.0)
    y = browse(app, "began", y)
    y = browse(app, "changed", y + 10.0)
    assert navbar.center_y == 24.0

    for expected in (14.0, 4.0, -6.0):
        y = browse(app, "changed", y + 10.0)
        assert navbar.center_y == pytest.approx(expected)
        assert app.sensor.padding_top == pytest.approx(expected + 24.0)


def test_release_snaps_with_transition(app):
    y = browse(app, "layout", 0.0)
    y = browse(app, "began", y)
    y = browse(app, "changed", y + 10.0)
    y = browse(app, "changed", y + 10.0)
    y = browse(app, "ended", y)

    coordinator = app.coordinator
    assert coordinator.extension.is_expanded()
    assert coordinator.bottom.is_expanded()
    assert app.sensor.padding_top == 88.0
    # the content comes back down with the bars
    assert app.scroll_view.offset == -78.0
    assert y == 10.0
    assert "0.2s" in app._toolbar.styles["transition"]


def test_failed_report_still_restyles(app, capsys):
    y = browse(app, "layout", 0.0)
    y = browse(app, "began", y)
    y = browse(app, "changed", y + 10.0)

    def fail(state):
        raise RuntimeError("listener broke")

    app.coordinator.on_state_changed = fail
    app.sensor.param.update(scroll_y=y + 10.0, phase="changed")
    app.sensor.tick += 1

    assert app.coordinator.extension.surface.center_y == 58.0
    assert app._extension.styles["transform"] == "translateY(-10.0px)"
    err = capsys.readouterr().err
    assert "error in 'changed' report" in err
    assert "RuntimeError: listener broke" in err


def test_resume_runs_foreground_action(app):
    app.coordinator.foreground_action = "hide"
    report(app, "layout", 0.0)
    report(app, "resume", 0.0)
    assert app.coordinator.navbar.is_contracted()
    assert app.toolbar.styles["opacity"] == "0.000"


def test_scroll_to_top(app):
    report(app, "layout", 0.0)
    app.coordinator.contract()
    app.scroll_to_top()
    assert app.coordinator.navbar.is_expanded()
    assert app.sensor.target_y == 0.0
