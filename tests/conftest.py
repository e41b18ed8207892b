"""
Shared fixtures: a phone-sized screen with a status bar and a 44 high
navigation bar, over a long scroll view, driven by a coordinator that
records its state changes.

Geometry with these numbers: the navigation bar's center is 42 when
open and -2 when closed, and the top inset is 64 with the bar open, so
the scroll view rests at offset -64.
"""

import pytest

import host
from coordinator import ScrollCoordinator

NAVBAR_HEIGHT = 44.0
STATUS_BAR_HEIGHT = 20.0


def make_navbar():
    return host.Surface(
        host.Element(name="background"),
        host.Element(host.Element(name="icon"), name="title"),
        height=NAVBAR_HEIGHT,
        center_y=NAVBAR_HEIGHT / 2 + STATUS_BAR_HEIGHT,
        name="navbar",
    )


def drag(scroll_view, *offsets, velocity=None):
    """Pan through offsets, starting where the scroll view is now."""
    scroll_view.pan("began")
    for offset in offsets:
        scroll_view.offset = offset
        scroll_view.pan("changed")
    if velocity is not None:
        scroll_view.pan("ended", velocity)


@pytest.fixture
def screen():
    return host.Screen(navigation_bar=make_navbar(), height=800.0, status_bar_height=STATUS_BAR_HEIGHT)


@pytest.fixture
def scroll_view():
    return host.ScrollView(height=800.0, content_height=5000.0)


@pytest.fixture
def events():
    return []


@pytest.fixture
def coordinator(screen, scroll_view, events):
    coordinator = ScrollCoordinator(screen, scroll_view, on_state_changed=events.append)
    scroll_view.offset = -scroll_view.adjusted_inset.top
    coordinator.view_will_appear()
    yield coordinator
    coordinator.teardown()
