"""
A PanelController slides one bar between its expanded and contracted
positions. Controllers chain: a parent passes whatever part of an offset
delta it could not absorb on to its child, so e.g. an extension panel
under a toolbar hides first and shows last.
"""

from geometry import EPSILON, clamp32, close
from host import Animator, Surface

UP = "up"
DOWN = "down"

SNAP_DURATION = 0.2


class PanelController:

    def __init__(self, surface=None, expanded_position=None, direction=UP, fade=False, child=None, animator=None):

        # a bare container if the caller doesn't have a surface for us yet
        self.surface = surface if surface is not None else Surface(name="container")

        # callable (surface) -> center; geometry is live, so never cached
        self.expanded_fn = expanded_position
        self.direction = direction
        self.child = child
        self.animator = animator or Animator()

        self._fade_enabled = fade
        self._faded = None

    #
    # targets
    #

    def expanded_position(self):
        if self.expanded_fn:
            return self.expanded_fn(self.surface)
        return 0.0

    def contraction_amount(self):
        return self.surface.height

    def contracted_position(self):
        if self.direction == UP:
            return self.expanded_position() - self.contraction_amount()
        return self.expanded_position() + self.contraction_amount()

    def is_contracted(self):
        return close(self.surface.center_y, self.contracted_position())

    def is_expanded(self):
        return close(self.surface.center_y, self.expanded_position())

    def total_height(self):
        height = self.expanded_position() - self.contracted_position()
        if self.child:
            return self.child.total_height() + height
        return height

    #
    # fading
    #

    @property
    def fade_enabled(self):
        return self._fade_enabled

    @fade_enabled.setter
    def fade_enabled(self, enabled):
        self._fade_enabled = enabled
        if not enabled:
            self._set_alpha(1.0)
            self.invalidate_faded()

    def invalidate_faded(self):
        self._faded = None

    def faded_elements(self):
        """
        The content that fades with the bar: the surface's visible direct
        children, minus the first one, which is the background. Captured
        on first use, since fading makes everything look hidden afterwards.
        """
        if self._faded is None:
            content = self.surface.children
            self._faded = [
                element for element in content[1:]
                if not element.hidden and element.alpha >= EPSILON
            ]
        return self._faded

    def _set_alpha(self, alpha):
        for element in self.faded_elements():
            for e in element.walk():
                e.alpha = alpha

    #
    # movement
    #

    def apply_offset_delta(self, delta):
        """
        Move by delta (negative contracts) as far as our targets allow,
        cascading through the child, and return the part not absorbed.
        """

        # contracting: the child goes first
        if self.child is not None and delta < 0:
            delta = self.child.apply_offset_delta(delta)
            self.child.surface.hidden = delta < 0

        expanded = self.expanded_position()
        contracted = self.contracted_position()
        if self.direction == UP:
            target = self.surface.center_y + delta
            position = max(min(expanded, target), contracted)
        else:
            target = self.surface.center_y - delta
            position = min(max(expanded, target), contracted)
        self.surface.center_y = position

        if self._fade_enabled and self.contraction_amount() > 0:
            alpha = 1.0 - (expanded - position) * 2 / self.contraction_amount()
            self._set_alpha(clamp32(alpha, EPSILON, 1.0))

        residual = target - position

        # expanding: the child goes last, with what we didn't use
        if self.child is not None and delta > 0 and residual > 0:
            unused = residual
            residual = self.child.apply_offset_delta(residual)
            self.child.surface.hidden = residual - unused > 0

        return residual

    def expand(self):
        self.surface.hidden = False

        if self._fade_enabled:
            self._set_alpha(1.0)
            self.invalidate_faded()

        expanded = self.expanded_position()
        moved = expanded - self.surface.center_y
        self.surface.center_y = expanded

        if self.child:
            moved += self.child.expand()
        return moved

    def contract(self):
        if self._fade_enabled:
            self._set_alpha(0.0)

        contracted = self.contracted_position()
        moved = contracted - self.surface.center_y
        self.surface.center_y = contracted
        return moved

    def snap(self, contract, completion=None):
        """
        Animate fully open or fully closed and return the distance moved.
        A parent whose child is still showing is never closed over it.
        """
        moved = 0.0

        def changes():
            nonlocal moved
            if self.child is not None:
                close_it = contract and self.child.is_contracted()
            else:
                close_it = contract
            moved = self.contract() if close_it else self.expand()

        def done(finished):
            if completion:
                completion()

        self.animator.animate(SNAP_DURATION, changes, done)
        return moved
