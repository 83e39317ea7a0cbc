"""Gaussian smearing of wounded nucleons: eccentricities, densities and energy maps."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .collision import GlauberMC
from .nucleon import Nucleon
from .profiles import Function1D

HARMONICS = 10
DENSITY_BINS = 121
DENSITY_EDGE = 15.5


@dataclass(frozen=True)
class SmearedResult:
    """Participant-plane angles and eccentricities of Gaussian-smeared sources.

    ``psi`` and ``ecc`` are indexed by harmonic; entries 1 to 8 are filled,
    the others are zero. ``sx2`` and ``sy2`` are the mean variances in x and y.
    """

    psi: tuple[float, ...]
    ecc: tuple[float, ...]
    sx2: float
    sy2: float


def _wounded(mc: GlauberMC) -> list[Nucleon]:
    return [n for n in (*mc.nucleus_a.nucleons, *mc.nucleus_b.nucleons) if n.is_wounded]


def _radial_smearing(sigs: float) -> Function1D:
    if sigs <= 0:
        raise ValueError(f"smearing width must be positive, got {sigs}")
    return Function1D(lambda x: x * np.exp(-x * x / (2.0 * sigs * sigs)), 0.0, 3 * sigs)


def _smear(
    centre: tuple[float, float], rad: Function1D, rng: np.random.Generator
) -> tuple[float, float]:
    sr = rad.random(rng)
    sp = rng.uniform(-math.pi, math.pi)
    return centre[0] + sr * math.cos(sp), centre[1] + sr * math.sin(sp)


def smeared_eccentricities(
    mc: GlauberMC,
    sigs: float = 0.4,
    nsamp: int = 100,
    rng: np.random.Generator | None = None,
) -> SmearedResult:
    """Eccentricities of the current event with each wounded nucleon smeared by a Gaussian."""
    if nsamp < 1:
        raise ValueError("nsamp must be positive")
    rng = rng if rng is not None else mc.rng
    wounded = _wounded(mc)
    if not wounded:
        raise ValueError("the current event has no wounded nucleons")
    rad = _radial_smearing(sigs)

    cos_sum = np.zeros(HARMONICS)
    sin_sum = np.zeros(HARMONICS)
    rn = np.zeros(HARMONICS)
    sx2 = sy2 = 0.0
    for _ in range(nsamp):
        points = np.array([_smear((n.x, n.y), rad, rng) for n in wounded])
        xs, ys = points[:, 0], points[:, 1]
        mx, my = float(xs.mean()), float(ys.mean())
        sx2 += float((xs * xs).mean()) - mx * mx
        sy2 += float((ys * ys).mean()) - my * my
        dx, dy = xs - mx, ys - my
        r = np.hypot(dx, dy)
        phi = np.arctan2(dy, dx)
        for j in range(1, 9):
            rw = r ** (3 if j == 1 else j)
            cos_sum[j] += float((rw * np.cos(j * phi)).sum())
            sin_sum[j] += float((rw * np.sin(j * phi)).sum())
            rn[j] += float(rw.sum())

    psi = [0.0] * HARMONICS
    ecc = [0.0] * HARMONICS
    for j in range(1, 9):
        psi[j] = (math.atan2(sin_sum[j], cos_sum[j]) + math.pi) / j
        ecc[j] = math.hypot(sin_sum[j], cos_sum[j]) / rn[j] if rn[j] > 0 else -1.0
    return SmearedResult(tuple(psi), tuple(ecc), sx2 / nsamp, sy2 / nsamp)


def density_histogram(
    mc: GlauberMC,
    alpha: float = 0.1,
    sigs: float | None = None,
    nsamp: int = 100,
    rng: np.random.Generator | None = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Normalised transverse density of the current event on a 121x121 grid.

    Wounded nucleons carry weight (1-alpha)/2 and binary collisions, placed
    midway between the two nucleons, weight alpha. Returns the histogram
    indexed [x, y] together with the x and y bin edges.
    """
    if nsamp < 1:
        raise ValueError("nsamp must be positive")
    rng = rng if rng is not None else mc.rng
    if sigs is None:
        sigs = math.sqrt(mc.xsect / 20 / math.pi)
    rad = _radial_smearing(sigs)
    wp = (1 - alpha) / 2
    wb = alpha

    xs: list[float] = []
    ys: list[float] = []
    weights: list[float] = []

    def fill(centre: tuple[float, float], weight: float) -> None:
        for _ in range(nsamp):
            x, y = _smear(centre, rad, rng)
            xs.append(x)
            ys.append(y)
            weights.append(weight)

    for nucleon in _wounded(mc):
        fill((nucleon.x, nucleon.y), wp)

    if alpha > 0:
        for ia, na in enumerate(mc.nucleus_a.nucleons):
            if not na.is_wounded:
                continue
            for jb, nb in enumerate(mc.nucleus_b.nucleons):
                if mc.is_binary_collision(jb, ia):
                    fill(((na.x + nb.x) / 2, (na.y + nb.y) / 2), wb)

    edge_range = [[-DENSITY_EDGE, DENSITY_EDGE], [-DENSITY_EDGE, DENSITY_EDGE]]
    hist, xedges, yedges = np.histogram2d(
        np.asarray(xs, dtype=float),
        np.asarray(ys, dtype=float),
        bins=DENSITY_BINS,
        range=edge_range,
        weights=np.asarray(weights, dtype=float),
    )
    total = float(hist.sum())
    if total == 0.0:
        raise ValueError("density histogram is empty")
    return hist / total, xedges, yedges


def energy_density_grid(
    mc: GlauberMC, sigs: float = 0.4, nbins: int = 1000, max_x: float = 7.5
) -> np.ndarray:
    """Energy density map (arbitrary units) from Gaussian-smeared wounded nucleons.

    The grid spans [-max_x, max_x] in both directions and is indexed [x, y]
    by bin, each value taken at the bin centre.
    """
    if sigs <= 0:
        raise ValueError(f"smearing width must be positive, got {sigs}")
    if nbins < 1:
        raise ValueError("nbins must be positive")
    if max_x <= 0:
        raise ValueError("max_x must be positive")
    width = 2 * max_x / nbins
    centres = -max_x + width * (np.arange(nbins) + 0.5)
    wounded = _wounded(mc)
    if not wounded:
        return np.zeros((nbins, nbins))
    px = np.array([n.x for n in wounded])
    py = np.array([n.y for n in wounded])
    two_s2 = 2.0 * sigs * sigs
    gx = np.exp(-((px[:, None] - centres[None, :]) ** 2) / two_s2)
    gy = np.exp(-((py[:, None] - centres[None, :]) ** 2) / two_s2)
    return (gx.T @ gy) / (math.pi * two_s2)