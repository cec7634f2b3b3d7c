"""Whole-frame escape-time rendering with TensorFlow."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import tensorflow as tf

from .escape import CONVERGENCE_THRESHOLD, DEFAULT_RADIUS, MAX_NEWTON_STEPS, find_escape_radius
from .params import FractalParams, FractalType


@dataclass(frozen=True)
class RenderResult:
    """Iteration counts of a full frame, indexed ``[row, column]``."""

    iterations: np.ndarray
    params: FractalParams


def _escape_radius(c_norm: tf.Tensor) -> tf.Tensor:
    """Element-wise Newton solve matching :func:`fractals.escape.find_escape_radius`."""

    default = tf.constant(DEFAULT_RADIUS, dtype=c_norm.dtype)
    radius = tf.fill(tf.shape(c_norm), default)
    active = tf.ones_like(c_norm, tf.bool)

    for _ in range(MAX_NEWTON_STEPS):
        delta_r = radius * radius - radius - c_norm
        converged = tf.logical_and(delta_r >= 0.0, delta_r <= CONVERGENCE_THRESHOLD)
        active = tf.logical_and(active, tf.logical_not(converged))
        gradient = 2.0 * radius - 1.0
        stuck = tf.logical_and(active, tf.equal(gradient, 0.0))
        radius = tf.where(stuck, default, radius)
        active = tf.logical_and(active, tf.logical_not(stuck))
        safe_gradient = tf.where(active, gradient, tf.ones_like(gradient))
        radius = tf.where(active, radius - delta_r / safe_gradient, radius)

    valid = tf.logical_and(radius * radius - radius - c_norm >= 0.0, radius <= default)
    return tf.where(valid, radius, default)


def _mul(ar: tf.Tensor, ai: tf.Tensor, br: tf.Tensor, bi: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor]:
    return ar * br - ai * bi, ar * bi + ai * br


def _powi(zr: tf.Tensor, zi: tf.Tensor, power: int) -> tuple[tf.Tensor, tf.Tensor]:
    if power == 2:
        return _mul(zr, zi, zr, zi)
    if power == 3:
        sr, si = _mul(zr, zi, zr, zi)
        return _mul(sr, si, zr, zi)

    res_r, res_i = tf.ones_like(zr), tf.zeros_like(zi)
    curr_r, curr_i = zr, zi
    while True:
        if power & 0x1:
            res_r, res_i = _mul(res_r, res_i, curr_r, curr_i)
        power >>= 1
        if power == 0:
            break
        curr_r, curr_i = _mul(curr_r, curr_i, curr_r, curr_i)
    return res_r, res_i


def _escape_loop(zr, zi, step, max_sq, max_iterations):
    """Run ``step`` until every sample escaped or the iteration cap is hit."""

    not_escaped = tf.cast(max_iterations + 1, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    ns = tf.fill(tf.shape(zr), not_escaped)
    active = tf.ones_like(zr, tf.bool)

    def cond(i, zr, zi, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zr, zi, ns, active):
        idx = i + 1
        new_r, new_i = step(zr, zi)
        zr = tf.where(active, new_r, zr)
        zi = tf.where(active, new_i, zi)
        escaped = tf.logical_and(active, zr * zr + zi * zi >= max_sq)
        ns = tf.where(escaped, tf.fill(tf.shape(ns), idx), ns)
        active = tf.logical_and(active, tf.logical_not(escaped))
        return idx, zr, zi, ns, active

    _, _, _, ns, _ = tf.while_loop(cond, body, (i, zr, zi, ns, active))
    return ns


@tf.function
def _mandelbrot_run(cr: tf.Tensor, ci: tf.Tensor, max_iterations: tf.Tensor, power: int) -> tf.Tensor:
    radius = _escape_radius(tf.sqrt(cr * cr + ci * ci))
    max_sq = radius * radius

    def step(zr, zi):
        pr, pi = _powi(zr, zi, power)
        return pr + cr, pi + ci

    return _escape_loop(tf.zeros_like(cr), tf.zeros_like(ci), step, max_sq, max_iterations)


@tf.function
def _julia_run(zr: tf.Tensor, zi: tf.Tensor, cr: float, ci: float, max_sq: float, max_iterations: tf.Tensor) -> tf.Tensor:
    def step(zr, zi):
        sr, si = _mul(zr, zi, zr, zi)
        return sr + cr, si + ci

    return _escape_loop(zr, zi, step, tf.constant(max_sq, dtype=zr.dtype), max_iterations)


def render_frame(params: FractalParams, width: int, height: int) -> RenderResult:
    """Render all ``width x height`` iteration counts in a single pass on the CPU."""

    scale_real = (params.max.real - params.min.real) / width
    scale_imag = (params.max.imag - params.min.imag) / height
    x = np.arange(width, dtype=np.float64) * np.float64(scale_real) + np.float64(params.min.real)
    y = np.arange(height, dtype=np.float64) * np.float64(scale_imag) + np.float64(params.min.imag)

    max_iterations = tf.constant(params.max_iterations, dtype=tf.int32)

    with tf.device("/CPU:0"):
        X, Y = tf.meshgrid(tf.convert_to_tensor(x), tf.convert_to_tensor(y))
        if params.fractal_type is FractalType.MANDELBROT:
            ns = _mandelbrot_run(X, Y, max_iterations, params.power)
        else:
            radius = find_escape_radius(params.c.norm())
            ns = _julia_run(X, Y, params.c.real, params.c.imag, radius * radius, max_iterations)

    return RenderResult(iterations=ns.numpy().astype(np.uint32), params=params)
