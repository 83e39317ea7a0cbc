"""Density profiles and the sampled functions used to draw nucleon positions."""

from __future__ import annotations

import enum
import math
from collections.abc import Callable, Sequence
from functools import cached_property

import numpy as np
from scipy.special import gammainc

PROTON_RMAX = 5.0
NN_PROFILE_RMAX = 3.0


class ProfileKind(enum.IntEnum):
    """Type of radial (or radial-angular) nuclear density distribution."""

    PROTON_EXP = 0
    THREE_PF = 1
    THREE_PG = 2
    HULTHEN = 3
    HULTHEN_CONSTRAINED = 4
    ELLIPSOID = 5
    FROM_FILE = 6
    DEFORMED_BOX = 7
    DEFORMED = 8
    PROTON_GAUSS = 9
    PROTON_DGAUSS = 10
    THREE_PF_PN = 11
    REWEIGHTED = 12
    REWEIGHTED_PN = 13
    DEFORMED_REWEIGHTED = 14
    HARMONIC_OSCILLATOR = 15
    TWO_PF = 16


def _default_rng(rng: np.random.Generator | None) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def _evaluate(func: Callable, *args: np.ndarray) -> np.ndarray:
    with np.errstate(over="ignore", divide="ignore", invalid="ignore", under="ignore"):
        out = func(*args)
    return np.broadcast_to(np.asarray(out, dtype=float), np.broadcast(*args).shape)


class Function1D:
    """A one-dimensional function on a fixed range that can be sampled from."""

    def __init__(
        self,
        func: Callable[[np.ndarray], np.ndarray],
        xmin: float,
        xmax: float,
        npx: int = 100,
    ) -> None:
        if xmax <= xmin:
            raise ValueError(f"empty range [{xmin}, {xmax}]")
        if npx < 1:
            raise ValueError("npx must be positive")
        self._func = func
        self.xmin = float(xmin)
        self.xmax = float(xmax)
        self.npx = int(npx)

    @property
    def range(self) -> tuple[float, float]:
        return self.xmin, self.xmax

    def eval(self, x):
        """Evaluate the function at a scalar or an array of points."""
        out = _evaluate(self._func, np.asarray(x, dtype=float))
        return float(out) if out.ndim == 0 else np.array(out)

    @cached_property
    def _table(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        edges = np.linspace(self.xmin, self.xmax, self.npx + 1)
        values = np.nan_to_num(_evaluate(self._func, edges), nan=0.0, posinf=0.0)
        values = np.clip(values, 0.0, None)
        dx = edges[1] - edges[0]
        areas = 0.5 * (values[:-1] + values[1:]) * dx
        cdf = np.concatenate(([0.0], np.cumsum(areas)))
        if cdf[-1] <= 0.0:
            raise ValueError("function has no positive integral on its range")
        return edges, values, cdf

    def random(self, rng: np.random.Generator | None = None) -> float:
        """Draw one value distributed according to the function."""
        edges, values, cdf = self._table
        rng = _default_rng(rng)
        target = rng.random() * cdf[-1]
        i = int(np.searchsorted(cdf, target, side="right")) - 1
        i = min(max(i, 0), self.npx - 1)
        dx = edges[1] - edges[0]
        v0, v1 = values[i], values[i + 1]
        q = (target - cdf[i]) / dx
        a = 0.5 * (v1 - v0)
        disc = max(v0 * v0 + 4.0 * a * q, 0.0)
        denom = v0 + math.sqrt(disc)
        t = 2.0 * q / denom if denom > 0.0 else 0.0
        t = min(max(t, 0.0), 1.0)
        return float(edges[i] + t * dx)

    def mean(self) -> float:
        """Mean of the function taken as a distribution, from bin centres."""
        width = (self.xmax - self.xmin) / self.npx
        centres = self.xmin + width * (np.arange(self.npx) + 0.5)
        weights = _evaluate(self._func, centres)
        total = weights.sum()
        if total == 0.0:
            raise ValueError("function sums to zero on its range")
        return float((centres * weights).sum() / total)


class Function2D:
    """A two-dimensional function on a rectangle that can be sampled from."""

    def __init__(
        self,
        func: Callable[[np.ndarray, np.ndarray], np.ndarray],
        xmin: float,
        xmax: float,
        ymin: float,
        ymax: float,
        npx: int = 30,
        npy: int = 30,
    ) -> None:
        if xmax <= xmin or ymax <= ymin:
            raise ValueError("empty range")
        if npx < 1 or npy < 1:
            raise ValueError("npx and npy must be positive")
        self._func = func
        self.xmin, self.xmax = float(xmin), float(xmax)
        self.ymin, self.ymax = float(ymin), float(ymax)
        self.npx, self.npy = int(npx), int(npy)

    def eval(self, x, y):
        """Evaluate the function at scalar or array points."""
        out = _evaluate(self._func, np.asarray(x, dtype=float), np.asarray(y, dtype=float))
        return float(out) if out.ndim == 0 else np.array(out)

    @cached_property
    def _cdf(self) -> np.ndarray:
        dx = (self.xmax - self.xmin) / self.npx
        dy = (self.ymax - self.ymin) / self.npy
        cx = self.xmin + dx * (np.arange(self.npx) + 0.5)
        cy = self.ymin + dy * (np.arange(self.npy) + 0.5)
        gx, gy = np.meshgrid(cx, cy, indexing="ij")
        cells = np.nan_to_num(_evaluate(self._func, gx, gy), nan=0.0, posinf=0.0)
        cdf = np.cumsum(np.clip(cells, 0.0, None).ravel())
        if cdf[-1] <= 0.0:
            raise ValueError("function has no positive integral on its range")
        return cdf

    def random(self, rng: np.random.Generator | None = None) -> tuple[float, float]:
        """Draw one (x, y) pair distributed according to the function."""
        cdf = self._cdf
        rng = _default_rng(rng)
        cell = int(np.searchsorted(cdf, rng.random() * cdf[-1], side="right"))
        cell = min(cell, cdf.size - 1)
        ix, iy = divmod(cell, self.npy)
        dx = (self.xmax - self.xmin) / self.npx
        dy = (self.ymax - self.ymin) / self.npy
        x = self.xmin + dx * (ix + rng.random())
        y = self.ymin + dy * (iy + rng.random())
        return float(x), float(y)


def _fermi(x, r, a, w):
    return x * x * (1 + w * (x / r) ** 2) / (1 + np.exp((x - r) / a))


def make_radial_function(
    kind: ProfileKind | int, params: Sequence[float], rmax: float
) -> Function1D:
    """Build the radial density r^2 rho(r) for a profile kind.

    Parameters are, by kind: proton exp/gauss/dgauss (R); 3pF, 3pG,
    ellipsoid and 3pF-pn (R, a, w); Hulthen (a, b); reweighted
    (R, a, w, r0, r1, r2); harmonic oscillator and 2pF (R, a).
    """
    kind = ProfileKind(kind)
    p = [float(v) for v in params]
    if kind is ProfileKind.PROTON_EXP:
        (r,) = p[:1]
        return Function1D(lambda x: x * x * np.exp(-x / r), 0.0, PROTON_RMAX)
    if kind is ProfileKind.PROTON_GAUSS:
        (r,) = p[:1]
        return Function1D(lambda x: x * x * np.exp(-x * x / r / r / 2), 0.0, PROTON_RMAX)
    if kind is ProfileKind.PROTON_DGAUSS:
        (r,) = p[:1]
        frac = 0.5
        inner = 0.4 * r
        return Function1D(
            lambda x: x
            * x
            * (
                (1 - frac) / r**3 * np.exp(-x * x / r / r)
                + frac / inner**3 * np.exp(-x * x / inner**2)
            ),
            0.0,
            PROTON_RMAX,
        )
    if kind in (ProfileKind.THREE_PF, ProfileKind.THREE_PF_PN):
        r, a, w = p[:3]
        return Function1D(lambda x: _fermi(x, r, a, w), 0.0, rmax)
    if kind is ProfileKind.ELLIPSOID:
        r, a = p[:2]
        return Function1D(lambda x: _fermi(x, r, a, 0.0), 0.0, rmax)
    if kind is ProfileKind.THREE_PG:
        r, a, w = p[:3]
        return Function1D(
            lambda x: x * x * (1 + w * (x / r) ** 2) / (1 + np.exp((x * x - r * r) / (a * a))),
            0.0,
            rmax,
        )
    if kind in (ProfileKind.HULTHEN, ProfileKind.HULTHEN_CONSTRAINED):
        a, b = p[:2]
        norm = a * b * (a + b) / (2 * math.pi * (a - b) ** 2)
        return Function1D(lambda x: norm * (np.exp(-a * x) - np.exp(-b * x)) ** 2, 0.0, rmax)
    if kind in (ProfileKind.REWEIGHTED, ProfileKind.REWEIGHTED_PN):
        r, a, w, r0, r1, r2 = p[:6]
        return Function1D(
            lambda x: _fermi(x, r, a, w) / (r0 + r1 * x + r2 * x * x), 0.0, rmax
        )
    if kind is ProfileKind.HARMONIC_OSCILLATOR:
        r, a = p[:2]
        return Function1D(
            lambda x: x * x * (1 + r * (x * x / (a * a))) * np.exp(-x * x / (a * a)),
            0.0,
            rmax,
        )
    if kind is ProfileKind.TWO_PF:
        r, a = p[:2]
        return Function1D(lambda x: x * x / (1 + np.exp((x - r) / a)), 0.0, rmax)
    raise ValueError(f"profile kind {kind.name} has no radial function")


def make_deformed_function(
    params: Sequence[float], rmax: float, reweighted: bool = False
) -> Function2D:
    """Build the density of a deformed nucleus in (r, theta).

    Parameters are (R, a, beta2, beta4), followed by (r0, r1, r2) when
    the profile is reweighted.
    """
    p = [float(v) for v in params]
    r, a, beta2, beta4 = p[:4]
    if reweighted:
        r0, r1, r2 = p[4:7]
    else:
        r0, r1, r2 = 1.0, 0.0, 0.0

    def density(x, y):
        c2 = np.cos(y) ** 2
        radius = r * (1 + beta2 * 0.315 * (3 * c2 - 1.0) + beta4 * 0.105 * (35 * c2 * c2 - 30 * c2 + 3))
        value = x * x * np.sin(y) / (1 + np.exp((x - radius) / a))
        return value / (r0 + r1 * x + r2 * x * x)

    return Function2D(density, 0.0, rmax, 0.0, math.pi, 120, 120)


def nn_profile(snn: float = 67.6, omega: float = 0.4, g: float = 1.0) -> Function1D:
    """Nucleon-nucleon collision probability as a function of impact parameter."""
    if omega < 0 or omega > 1:
        raise ValueError(f"omega must lie in [0, 1], got {omega}")
    r2 = snn / 10.0 / math.pi
    shape = 1.0 / omega
    scale = g / omega / r2
    return Function1D(lambda x: g * (1 - gammainc(shape, scale * x * x)), 0.0, NN_PROFILE_RMAX)