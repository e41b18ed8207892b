"""
The host side of the hiding machinery, modelled as observable objects.

A host (the panel app in hider.py, or a test) owns these objects, keeps
them in sync with whatever it draws, and publishes gesture phases and
screen events on them. The coordinator reads them, writes bar positions,
opacities, insets and the scroll offset back, and watches their events.
"""

import param

from geometry import Insets


class Element(param.Parameterized):
    """A node in a content tree; only opacity and visibility matter here."""

    alpha = param.Number(default=1.0, bounds=(0.0, 1.0))
    hidden = param.Boolean(default=False)
    children = param.List(default=[], item_type=param.Parameterized)

    def __init__(self, *children, **params):
        super().__init__(children=list(children), **params)

    def walk(self):
        yield self
        for child in self.children:
            yield from child.walk()


class Surface(Element):
    """
    A rectangle that slides vertically, e.g. a toolbar. The first child
    is taken to be its background.
    """

    center_y = param.Number(default=0.0)
    height = param.Number(default=0.0, bounds=(0.0, None))
    width = param.Number(default=0.0, bounds=(0.0, None))

    @property
    def top(self):
        return self.center_y - self.height / 2

    @property
    def bottom(self):
        return self.center_y + self.height / 2


PHASES = ("began", "changed", "ended")

class ScrollView(param.Parameterized):

    offset = param.Number(default=0.0, doc="Vertical content offset")
    content_height = param.Number(default=0.0, bounds=(0.0, None))
    height = param.Number(default=0.0, bounds=(0.0, None), doc="Height of the visible bounds")

    content_inset = param.ClassSelector(class_=Insets, default=Insets())
    indicator_insets = param.ClassSelector(class_=Insets, default=Insets())
    safe_area_top = param.Number(default=0.0)

    refreshing = param.Boolean(default=False, doc="A pull to refresh is running")

    # gesture stream; changed doubles as the scroll notification
    velocity = param.Number(default=0.0, doc="Vertical velocity of the last ended gesture")
    began = param.Event()
    changed = param.Event()
    ended = param.Event()

    @property
    def adjusted_inset(self):
        """Content inset after the safe area is added in."""
        inset = self.content_inset
        return inset.with_top(inset.top + self.safe_area_top)

    def pan(self, phase, velocity=0.0):
        if phase not in PHASES:
            raise ValueError(f"unknown gesture phase {phase!r}")
        self.velocity = velocity
        self.param.trigger(phase)


class Screen(param.Parameterized):

    navigation_bar = param.ClassSelector(class_=Surface, default=None, allow_None=True)
    visible = param.Boolean(default=True)
    height = param.Number(default=0.0, bounds=(0.0, None))
    status_bar_height = param.Number(default=0.0, bounds=(0.0, None), doc="0 if the status bar is hidden")
    adjusts_insets = param.Boolean(default=True, doc="Content insets follow the bars")

    became_active = param.Event(doc="App came back to the foreground")
    laid_out = param.Event()


class Animator:
    """
    Executes animation blocks. The changes are made synchronously so
    callers can read results right away; completion is called once the
    host has finished showing them. This one has nothing to show, so it
    completes immediately.
    """

    def animate(self, duration, changes, completion=None):
        changes()
        if completion:
            completion(True)
