#
# Panel front end for the hiding bars: a toolbar (plus an optional
# extension under it) that slides away and fades as the page is
# scrolled, an optional bottom bar that slides down with it, and
# snapping to fully open or closed when a drag or wheel gesture ends.
#
# The browser side only reports what happens (ScrollSensor); every
# decision is made in Python by a ScrollCoordinator, and the results are
# pushed back as css transforms, opacity, body padding and scroll position.
#

import panel as pn
import param

import coordinator as co
import host
import util
from geometry import close


class ScrollSensor(pn.reactive.ReactiveHTML):
    """
    Reports window scrolling, touch and wheel gestures, resizes and page
    visibility. Each report sets the metrics, then phase, then bumps tick,
    so watch tick.
    """

    # browser -> python
    scroll_y = param.Number(default=0.0)
    scroll_height = param.Number(default=0.0)
    inner_height = param.Number(default=0.0)
    velocity = param.Number(default=0.0, doc="px/s, positive when moving toward the top")
    page_visible = param.Boolean(default=True)
    phase = param.String(default="")
    tick = param.Integer(default=0)

    # python -> browser
    padding_top = param.Number(default=0.0)
    target_y = param.Number(default=None, allow_None=True)

    _template = "<div id='sensor' style='display: none'></div>"

    _scripts = {
        "render": """
        function report(phase) {
          data.scroll_y = window.scrollY
          data.scroll_height = document.documentElement.scrollHeight
          data.inner_height = window.innerHeight
          data.phase = phase
          data.tick = data.tick + 1
        }

        // velocity from the last two scroll samples
        state.y = window.scrollY
        state.t = performance.now()
        state.v = 0
        function sample() {
          const t = performance.now()
          const y = window.scrollY
          if (t > state.t)
            state.v = -(y - state.y) / (t - state.t) * 1000
          state.y = y
          state.t = t
        }

        function end() {
          data.velocity = state.v
          report('ended')
        }

        state.dragging = false
        state.wheel = null
        window.addEventListener('touchstart', () => {
          state.dragging = true
          report('began')
        }, {passive: true})
        window.addEventListener('touchend', () => {
          state.dragging = false
          end()
        }, {passive: true})

        // a wheel gesture ends when the wheel has been quiet for a bit
        window.addEventListener('wheel', () => {
          if (state.wheel === null)
            report('began')
          clearTimeout(state.wheel)
          state.wheel = setTimeout(() => {
            state.wheel = null
            end()
          }, 150)
        }, {passive: true})

        window.addEventListener('scroll', () => {
          sample()
          if (state.dragging || state.wheel !== null)
            report('changed')
        }, {passive: true})

        window.addEventListener('resize', () => report('layout'))

        document.addEventListener('visibilitychange', () => {
          data.page_visible = document.visibilityState === 'visible'
          report(data.page_visible ? 'resume' : 'hidden')
        })

        document.body.style.paddingTop = data.padding_top + 'px'
        report('layout')
        """,
        "padding_top": "document.body.style.paddingTop = data.padding_top + 'px'",
        "target_y": "if (data.target_y !== null) window.scrollTo(0, data.target_y)",
    }


class CssAnimator(host.Animator):
    """
    Animations become css transitions: the changes are made right away,
    and the longest duration requested since the last render is used for
    the transition that shows them.
    """

    def __init__(self):
        self.duration = 0.0

    def animate(self, duration, changes, completion=None):
        self.duration = max(self.duration, duration)
        changes()
        if completion:
            doc = pn.state.curdoc
            if doc is not None:
                doc.add_timeout_callback(lambda: completion(True), int(duration * 1000))
            else:
                completion(True)

    def take(self):
        duration, self.duration = self.duration, 0.0
        return duration


def fixed(**styles):
    return dict(position="fixed", left="0px", right="0px", **styles)


class Hider(pn.Column):
    """
    Lays out a page with a fixed toolbar over body, an optional extension
    bar pinned under the toolbar and an optional bottom bar. Scrolling
    the body toward its end slides the toolbar and extension up (the
    toolbar content fading as it goes) and the bottom bar down; scrolling
    back brings them out again. When a drag or wheel gesture ends the bars
    snap fully open or closed.
    """

    def __init__(
        self,
        toolbar: pn.viewable.Viewable,
        body: pn.viewable.Viewable,
        *,
        extension: pn.viewable.Viewable = None,
        bottom: pn.viewable.Viewable = None,
        height_px: int = 48,
        extension_height_px: int = 40,
        bottom_height_px: int = 48,
        contraction_resistance: float = 0.0,
        expansion_resistance: float = 0.0,
        foreground_action: str = "default",
        z_index: int = 1000,
        background: str = "white",
        border: str = "1px solid #ddd",
        **kwargs,
    ):
        pn.extension()

        self.toolbar = toolbar

        # host model; the toolbar's content is what fades
        self.screen = host.Screen(
            navigation_bar=host.Surface(
                host.Element(name="background"),
                host.Element(name="content"),
                height=height_px,
                center_y=height_px / 2,
                name="toolbar",
            ),
        )
        self.scroll_view = host.ScrollView()
        self.animator = CssAnimator()

        self.coordinator = co.ScrollCoordinator(
            self.screen,
            self.scroll_view,
            animator=self.animator,
            contraction_resistance=contraction_resistance,
            expansion_resistance=expansion_resistance,
            foreground_action=foreground_action,
        )

        # python -> browser
        self.sensor = ScrollSensor(padding_top=self.scroll_view.content_inset.top)
        self._syncing = False
        # where the page is scrolled to, as last reported or requested
        self._page_y = 0.0
        self.sensor.param.watch(self._on_tick, "tick")
        self.scroll_view.param.watch(self._push_inset, "content_inset")
        self.scroll_view.param.watch(self._push_offset, "offset")

        # fixed wrappers that get moved around
        bar = dict(background=background, **{"z-index": str(z_index)})
        self._toolbar = pn.Column(
            toolbar,
            styles=fixed(top="0px", **{"border-bottom": border}, **bar),
            sizing_mode="stretch_width",
        )
        layout = [self.sensor, self._toolbar]

        self._extension = None
        if extension is not None:
            self.coordinator.add_extension_view(host.Surface(height=extension_height_px, name="extension"))
            self._extension = pn.Column(
                extension,
                styles=fixed(top=f"{height_px}px", **bar),
                sizing_mode="stretch_width",
            )
            layout.append(self._extension)

        layout.append(body)

        self._bottom = None
        if bottom is not None:
            self.coordinator.manage_bottom_bar(host.Surface(height=bottom_height_px, name="bottom"))
            self._bottom = pn.Column(
                bottom,
                styles=fixed(bottom="0px", **{"border-top": border}, **bar),
                sizing_mode="stretch_width",
            )
            # room to scroll the end of the body out from under the bar
            layout += [pn.Spacer(height=bottom_height_px), self._bottom]

        super().__init__(*layout, sizing_mode="stretch_width", **kwargs)
        self._render()

    #
    # browser -> python
    #

    def _on_tick(self, event):
        # errors here would otherwise vanish into the server log
        try:
            self.dispatch(self.sensor.phase)
        except Exception:
            util.report_error(f"{self.sensor.phase!r} report")

    def dispatch(self, phase):
        """
        Bring the host model up to date with the sensor, then act on phase.
        The page is restyled afterwards even if acting on it fails, so it
        shows whatever the model got to.
        """

        sensor = self.sensor
        inset = self.scroll_view.content_inset.top
        self._syncing = True
        try:
            self.scroll_view.param.update(
                offset=sensor.scroll_y - inset,
                content_height=max(0.0, sensor.scroll_height - inset),
                height=sensor.inner_height,
            )
        finally:
            self._syncing = False
        self._page_y = sensor.scroll_y
        self.screen.visible = sensor.page_visible

        try:
            if phase in host.PHASES:
                self.scroll_view.pan(phase, sensor.velocity)
            elif phase == "layout":
                self._layout(sensor.inner_height)
            elif phase == "resume":
                self.screen.param.trigger("became_active")
        finally:
            self._render()

    def _layout(self, height):
        bottom = self.coordinator.bottom
        # first layout, or open before it
        was_open = self.screen.height == 0 or (bottom is not None and not bottom.is_contracted())
        self.screen.height = height
        if bottom is not None:
            # the bottom bar hangs off the window height
            if was_open:
                bottom.expand()
            else:
                bottom.contract()
        self.screen.param.trigger("laid_out")

    def scroll_to_top(self):
        self.coordinator.should_scroll_to_top()
        self._syncing = True
        try:
            self.scroll_view.offset = -self.scroll_view.adjusted_inset.top
        finally:
            self._syncing = False
        self._scroll_page(0.0)
        self._render()

    #
    # python -> browser
    #

    def _scroll_page(self, y):
        self._page_y = y
        if self.sensor.target_y == y:
            # the browser may have moved since, so send it again
            self.sensor.param.trigger("target_y")
        else:
            self.sensor.target_y = y

    def _follow_offset(self):
        # scrollY is the offset measured from the top of the padding, so a
        # new padding or offset moves the page; nothing to move before the
        # browser has reported a layout
        if self._syncing or not self.screen.height:
            return
        scroll_view = self.scroll_view
        y = scroll_view.offset + scroll_view.content_inset.top
        if not close(y, self._page_y):
            self._scroll_page(y)

    def _push_inset(self, event):
        self.sensor.padding_top = event.new.top
        self._follow_offset()

    def _push_offset(self, event):
        self._follow_offset()

    def _render(self):
        duration = self.animator.take()
        transition = f"transform {duration}s ease-in-out, opacity {duration}s" if duration else "none"

        def place(wrapper, controller):
            surface = controller.surface
            shift = surface.center_y - controller.expanded_position()
            wrapper.styles = dict(
                wrapper.styles,
                transform=f"translateY({shift:.1f}px)",
                transition=transition,
                visibility="hidden" if surface.hidden else "visible",
            )

        coordinator = self.coordinator
        place(self._toolbar, coordinator.navbar)
        content = coordinator.navbar.surface.children[1]
        self.toolbar.styles = dict(self.toolbar.styles, opacity=f"{content.alpha:.3f}", transition=transition)

        if self._extension is not None:
            place(self._extension, coordinator.extension)
        if self._bottom is not None:
            place(self._bottom, coordinator.bottom)
