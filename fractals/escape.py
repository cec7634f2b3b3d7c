"""Numerical escape radius for escape-time iterations."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

DEFAULT_RADIUS = 2.0
MAX_NEWTON_STEPS = 20
CONVERGENCE_THRESHOLD = 0.01


def find_escape_radius(c_norm: float) -> float:
    """Solve ``R**2 - R - c_norm = 0`` with Newton's method.

    Once ``|z| > R`` the orbit grows monotonically, so ``R`` is a valid
    bailout. Starts at 2.0 and stops as soon as the residual lies in
    ``[0, 0.01]``. A solution that undershoots the root or exceeds 2.0 is
    rejected in favour of the default radius.
    """

    radius = DEFAULT_RADIUS

    for _ in range(MAX_NEWTON_STEPS):
        delta_r = radius * radius - radius - c_norm
        if 0.0 <= delta_r <= CONVERGENCE_THRESHOLD:
            break

        gradient = 2.0 * radius - 1.0
        if gradient == 0.0:
            logger.warning("stuck on the zero gradient for c_norm=%s", c_norm)
            radius = DEFAULT_RADIUS
            break

        radius -= delta_r / gradient

    if radius * radius - radius - c_norm >= 0.0 and radius <= DEFAULT_RADIUS:
        return radius
    return DEFAULT_RADIUS
