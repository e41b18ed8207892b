"""
ScrollCoordinator turns scrolling into bar movement.

It drives the navigation bar (with its extension panel chained under it)
and optionally an independent bottom bar. Each scroll notification
becomes an offset delta, clamped to the content bounds and damped by
resistance; the bars absorb it, the top content inset follows the bars,
and the discrete state (open, closed, or on the way) is reported when it
changes. When a drag ends the bars snap fully open or closed.

The host publishes gesture phases on the ScrollView and app events on
the Screen (see host.py); the coordinator watches those until teardown().
"""

import contextlib
import enum
import math

import param

import util
from controller import DOWN, SNAP_DURATION, PanelController
from geometry import clamp, close, negligible, unset
from host import Animator, Screen, ScrollView, Surface

# flick speed (units/s, toward the top of the content) that always shows the bars
MIN_VELOCITY = 500.0


class State(enum.Enum):
    CLOSED = "Closed"
    CONTRACTING = "Contracting"
    EXPANDING = "Expanding"
    OPEN = "Open"


class NavigationError(RuntimeError):
    """The screen has no navigation bar to hide."""


class ScrollCoordinator(param.Parameterized):

    contraction_resistance = param.Number(default=0.0, bounds=(0.0, None), doc="""
        Distance to scroll toward the end before the bars start to hide.""")

    expansion_resistance = param.Number(default=0.0, bounds=(0.0, None), doc="""
        Distance to scroll back before the bars start to show again.""")

    foreground_action = param.Selector(default="default", objects=["default", "show", "hide"], doc="""
        What to do with the bars when the app comes back to the foreground.""")

    on_should_update_insets = param.Callable(default=None, doc="""
        Called with the proposed Insets; returning False discards the update.""")

    on_insets_updated = param.Callable(default=None)

    on_state_changed = param.Callable(default=None, doc="""
        Called with the new State on every state transition.""")

    def __init__(self, screen: Screen, scroll_view: ScrollView, animator=None, bottom_bar=None, **params):

        if screen.navigation_bar is None:
            raise NavigationError("screen must be inside a navigation context with a navigation bar")

        super().__init__(**params)

        self.screen = screen
        self.scroll_view = scroll_view
        self.animator = animator or Animator()

        # bar chain: navigation bar on top, extension container below it
        self.extension = PanelController(
            expanded_position=self._extension_center,
            animator=self.animator,
        )
        self.navbar = PanelController(
            screen.navigation_bar,
            expanded_position=self._navbar_center,
            fade=True,
            child=self.extension,
            animator=self.animator,
        )
        self.extension.surface.center_y = self.extension.expanded_position()
        self.extension_view = None

        self.bottom = None
        if bottom_bar is not None:
            self.manage_bottom_bar(bottom_bar)

        # scroll calculation values
        self._top_inset = 0.0
        self._previous_offset = math.nan
        self._resistance_consumed = 0.0
        self._updating = False

        # discrete state, and separately the last direction seen, which
        # decides when resistance starts over
        self._state = State.OPEN
        self._direction = None
        self._previous_direction = None

        self.gestures_enabled = True

        self._watchers = [
            (scroll_view, scroll_view.param.watch(self._on_pan, ["began", "changed", "ended"])),
            (screen, screen.param.watch(self._on_became_active, "became_active")),
            (screen, screen.param.watch(self._on_laid_out, "laid_out")),
        ]

        self.update_content_insets()

    #
    # expanded positions
    #

    def status_bar_height(self):
        return self.screen.status_bar_height

    def _navbar_center(self, surface):
        return surface.height / 2 + self.status_bar_height()

    def _extension_center(self, surface):
        top = self.navbar.contraction_amount() + self.status_bar_height()
        return surface.height / 2 + top

    def _bottom_center(self, surface):
        return self.screen.height - surface.height / 2

    #
    # read-only state
    #

    @property
    def state(self):
        return self._state

    @property
    def direction(self):
        return self._direction

    @property
    def resistance_consumed(self):
        return self._resistance_consumed

    @property
    def previous_offset(self):
        return self._previous_offset

    #
    # setup and lifecycle
    #

    def manage_bottom_bar(self, surface: Surface):
        self.bottom = PanelController(
            surface,
            expanded_position=self._bottom_center,
            direction=DOWN,
            animator=self.animator,
        )

    def add_extension_view(self, view: Surface):
        container = self.extension.surface
        self.extension_view = view
        container.param.update(children=[view], height=view.height, width=view.width)
        self.extension.expand()
        self.update_content_insets()

    def view_will_appear(self):
        self.gestures_enabled = True
        self.expand()

    def view_did_layout(self):
        self.update_content_insets()

    def view_will_disappear(self):
        self.expand()
        self.gestures_enabled = False

    def teardown(self):
        for owner, watcher in self._watchers:
            owner.param.unwatch(watcher)
        self._watchers = []
        self.gestures_enabled = False

    @contextlib.contextmanager
    def _updating_values(self):
        # inset and offset writes can make the host report a scroll;
        # that must not come back into the update that caused it
        self._updating = True
        try:
            yield
        finally:
            self._updating = False

    def update_values(self):
        """Re-read the extension view's size after the host changed it."""
        with self._updating_values():
            scroll_view = self.scroll_view
            at_top = close(scroll_view.adjusted_inset.top, -scroll_view.offset)

            if self.extension_view is not None:
                view = self.extension_view
                self.extension.surface.param.update(height=view.height, width=view.width)

            self.update_content_insets()

            if at_top:
                scroll_view.offset = -scroll_view.adjusted_inset.top

    #
    # public movement
    #

    def should_scroll_to_top(self):
        top = self.status_bar_height() + self.navbar.total_height()
        self.update_inset_top(top)
        self.navbar.snap(False)
        if self.bottom:
            self.bottom.snap(False)

    def contract(self):
        self.navbar.contract()
        if self.bottom:
            self.bottom.contract()
        self._previous_offset = math.nan
        self.handle_scrolling()

    def expand(self):
        self.navbar.expand()
        if self.bottom:
            self.bottom.expand()
        self._previous_offset = math.nan
        self.handle_scrolling()

    #
    # host events
    #

    def handle_pan(self, phase, velocity=0.0):
        if not self.gestures_enabled:
            return
        if phase == "began":
            self._top_inset = (
                self.navbar.surface.height
                + self.extension.surface.height
                + self.status_bar_height()
            )
            self.handle_scrolling()
        elif phase == "changed":
            self.handle_scrolling()
        elif phase == "ended":
            self.handle_scrolling_ended(velocity)
        else:
            raise ValueError(f"unknown gesture phase {phase!r}")

    def _on_pan(self, event):
        self.handle_pan(event.name, self.scroll_view.velocity)

    def _on_laid_out(self, event):
        self.view_did_layout()

    def _on_became_active(self, event):
        self.application_did_become_active()

    def application_did_become_active(self):
        action = self.foreground_action
        util.trace("foreground action", action)
        if action == "show":
            self.navbar.expand()
            if self.bottom:
                self.bottom.expand()
        elif action == "hide":
            self.navbar.contract()
            if self.bottom:
                self.bottom.contract()
        self.handle_scrolling()

    #
    # scrolling
    #

    def should_handle_scrolling(self):
        scroll_view = self.scroll_view
        inset = scroll_view.adjusted_inset

        # pulled down past the top, e.g. bouncing
        if scroll_view.offset <= -inset.top and self._state == State.OPEN:
            return False

        if scroll_view.refreshing:
            return False

        visible_height = scroll_view.height - inset.top - inset.bottom
        scrollable = scroll_view.content_height - visible_height
        long_enough = scrollable > self.navbar.total_height() * 3

        return self.screen.visible and long_enough and not self._updating

    def handle_scrolling(self):
        if not self.should_handle_scrolling():
            return

        before = self._state
        offset = self.scroll_view.offset

        if not unset(self._previous_offset):
            delta = self._clamped_delta(offset)
            self._classify(delta)
            delta = self._resist(delta, offset)
            self.navbar.apply_offset_delta(delta)
            if self.bottom:
                self.bottom.apply_offset_delta(delta)

        with self._updating_values():
            self.update_content_insets()
        self._previous_offset = offset

        if self.navbar.is_expanded() and self.extension.is_expanded():
            self._state = State.OPEN
        elif self.navbar.is_contracted() and self.extension.is_contracted():
            self._state = State.CLOSED

        if self._state != before:
            self._state_changed()

    def _clamped_delta(self, offset):
        scroll_view = self.scroll_view
        previous = self._previous_offset
        delta = previous - offset

        # ignore whatever happens beyond the top...
        start = -self._top_inset
        if previous < start:
            delta = min(0.0, delta - (previous - start))

        # ...and the bottom; rounded down against jitter in the offset
        end = math.floor(scroll_view.content_height - scroll_view.height + scroll_view.adjusted_inset.bottom - 0.5)
        if previous > end:
            delta = max(0.0, delta - previous + end)

        return delta

    def _classify(self, delta):
        if not negligible(delta):
            self._direction = State.CONTRACTING if delta < 0 else State.EXPANDING
            self._state = self._direction

        # turning around starts the resistance over
        if self._direction != self._previous_direction:
            self._previous_direction = self._direction
            self._resistance_consumed = 0.0

    def _resist(self, delta, offset):
        consumed = self._resistance_consumed
        if self._direction == State.CONTRACTING:
            limit = self.contraction_resistance
            available = limit - consumed
            self._resistance_consumed = clamp(consumed - delta, 0.0, limit)
            delta = min(0.0, available + delta)
        elif offset > -self.status_bar_height():
            limit = self.expansion_resistance
            available = limit - consumed
            self._resistance_consumed = clamp(consumed + delta, 0.0, limit)
            delta = max(0.0, delta - available)
        return delta

    def _state_changed(self):
        util.trace("state", self._state.value)
        if self.on_state_changed:
            self.on_state_changed(self._state)

    def handle_scrolling_ended(self, velocity):
        if not self.screen.visible:
            return
        if self.navbar.is_contracted() and velocity < MIN_VELOCITY:
            return

        self._resistance_consumed = 0.0

        moving = self._state in (State.CONTRACTING, State.EXPANDING)
        if not (moving or velocity > MIN_VELOCITY):
            return

        # a fast flick back toward the top always shows the bars
        contracting = self._state == State.CONTRACTING and velocity <= MIN_VELOCITY
        util.trace("snap", "closed" if contracting else "open", "velocity", velocity)

        delta = self.navbar.snap(contracting)
        if self.bottom:
            self.bottom.snap(delta < 0)

        # move the content with the bars so it doesn't jump
        scroll_view = self.scroll_view
        offset = scroll_view.offset - delta
        top = scroll_view.adjusted_inset.top + delta

        def changes():
            with self._updating_values():
                self.update_inset_top(top)
                scroll_view.offset = offset

        self.animator.animate(SNAP_DURATION, changes)
        self._previous_offset = math.nan

    #
    # insets
    #

    def update_content_insets(self):
        navbar = self.navbar.surface
        if not self.extension.is_contracted():
            top = self.extension.surface.bottom
        else:
            top = navbar.bottom
        self.update_inset_top(top)

    def update_inset_top(self, top):
        scroll_view = self.scroll_view
        top = top - scroll_view.safe_area_top

        proposed = scroll_view.adjusted_inset.with_top(top)
        if self.on_should_update_insets and self.on_should_update_insets(proposed) is False:
            util.trace("inset update vetoed", proposed)
            return

        if self.screen.adjusts_insets:
            scroll_view.content_inset = scroll_view.content_inset.with_top(top)
        scroll_view.indicator_insets = scroll_view.indicator_insets.with_top(top)

        if self.on_insets_updated:
            self.on_insets_updated()
