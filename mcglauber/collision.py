"""Monte Carlo Glauber collisions of two nuclei and their event observables."""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass

import numpy as np

from .nucleon import Nucleon
from .nucleus import Nucleus
from .profiles import Function1D

log = logging.getLogger(__name__)

VERSION = "v3.2"
MAX_HARMONIC = 9

_BASE_FIELDS = (
    "Npart", "Ncoll", "Nhard", "B", "BNN", "Ncollpp", "Ncollpn", "Ncollnn",
    "VarX", "VarY", "VarXY", "NpartA", "NpartB", "Npart0", "AreaW",
)
_FLOW_FIELDS = ("Psi1", "Ecc1", "Psi2", "Ecc2", "Psi3", "Ecc3", "Psi4", "Ecc4", "Psi5", "Ecc5")
_AREA_FIELDS = ("AreaO", "AreaA", "X0", "Y0", "Phi0", "Length")
_MEAN_FIELDS = (
    "MeanX", "MeanY", "MeanX2", "MeanY2", "MeanXY", "MeanXSystem", "MeanYSystem",
    "MeanXA", "MeanYA", "MeanXB", "MeanYB",
)
_ANGLE_FIELDS = ("PhiA", "ThetaA", "PhiB", "ThetaB")

# Ntuple column name -> Event attribute.
_COLUMNS = {
    "Npart": "npart", "Ncoll": "ncoll", "Nhard": "nhard", "B": "b", "BNN": "bnn",
    "Ncollpp": "ncollpp", "Ncollpn": "ncollpn", "Ncollnn": "ncollnn",
    "VarX": "var_x", "VarY": "var_y", "VarXY": "var_xy",
    "NpartA": "npart_a", "NpartB": "npart_b", "Npart0": "npart0", "AreaW": "area_w",
    "Psi1": "psi1", "Ecc1": "ecc1", "Psi2": "psi2", "Ecc2": "ecc2", "Psi3": "psi3",
    "Ecc3": "ecc3", "Psi4": "psi4", "Ecc4": "ecc4", "Psi5": "psi5", "Ecc5": "ecc5",
    "AreaO": "area_or", "AreaA": "area_and", "X0": "x0", "Y0": "y0",
    "Phi0": "phi0", "Length": "length",
    "MeanX": "mean_x", "MeanY": "mean_y", "MeanX2": "mean_x2", "MeanY2": "mean_y2",
    "MeanXY": "mean_xy", "MeanXSystem": "mean_x_system", "MeanYSystem": "mean_y_system",
    "MeanXA": "mean_xa", "MeanYA": "mean_ya", "MeanXB": "mean_xb", "MeanYB": "mean_yb",
    "PhiA": "phi_a", "ThetaA": "theta_a", "PhiB": "phi_b", "ThetaB": "theta_b",
}


def ntuple_fields(detail: int = 99) -> list[str]:
    """Column names stored per event for a given level of detail."""
    fields = list(_BASE_FIELDS)
    for level, group in ((1, _FLOW_FIELDS), (2, _AREA_FIELDS), (3, _MEAN_FIELDS), (4, _ANGLE_FIELDS)):
        if detail > level:
            fields.extend(group)
    return fields


def version() -> str:
    """Version of the Glauber model implementation."""
    return VERSION


@dataclass
class Event:
    """Observables of one Glauber event."""

    npart: int = 0
    ncoll: int = 0
    nhard: int = 0
    b: float = 0.0
    bnn: float = 0.0
    ncollpp: int = 0
    ncollpn: int = 0
    ncollnn: int = 0
    var_x: float = 0.0
    var_y: float = 0.0
    var_xy: float = 0.0
    npart_a: int = 0
    npart_b: int = 0
    npart0: int = 0
    area_w: float = 0.0
    psi1: float = 0.0
    ecc1: float = 0.0
    psi2: float = 0.0
    ecc2: float = 0.0
    psi3: float = 0.0
    ecc3: float = 0.0
    psi4: float = 0.0
    ecc4: float = 0.0
    psi5: float = 0.0
    ecc5: float = 0.0
    area_or: float = 0.0
    area_and: float = 0.0
    x0: float = 0.0
    y0: float = 0.0
    phi0: float = 0.0
    length: float = 0.0
    mean_x: float = 0.0
    mean_y: float = 0.0
    mean_x2: float = 0.0
    mean_y2: float = 0.0
    mean_xy: float = 0.0
    mean_x_system: float = 0.0
    mean_y_system: float = 0.0
    mean_xa: float = 0.0
    mean_ya: float = 0.0
    mean_xb: float = 0.0
    mean_yb: float = 0.0
    phi_a: float = 0.0
    theta_a: float = 0.0
    phi_b: float = 0.0
    theta_b: float = 0.0

    def reset(self) -> None:
        """Set every observable back to zero."""
        for field in dataclasses.fields(self):
            setattr(self, field.name, type(field.default)(0))

    def row(self, fields) -> tuple[float, ...]:
        """Values of the named ntuple columns, in the order given."""
        try:
            return tuple(float(getattr(self, _COLUMNS[name])) for name in fields)
        except KeyError as exc:
            raise KeyError(f"unknown ntuple column {exc.args[0]!r}") from None


def _cross_section_distribution(xsect: float, omega: float, lam: float) -> Function1D:
    def density(x):
        s = x / lam
        return (s / (s + xsect)) * np.exp(-((s / xsect - 1) ** 2) / (omega * omega)) / lam

    return Function1D(density, 0.0, 300.0, 1000)


def _arrays(nucleons: list[Nucleon]) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    x = np.fromiter((n.x for n in nucleons), dtype=float, count=len(nucleons))
    y = np.fromiter((n.y for n in nucleons), dtype=float, count=len(nucleons))
    ncoll = np.fromiter((n.ncoll for n in nucleons), dtype=int, count=len(nucleons))
    return x, y, ncoll


class GlauberMC:
    """Monte Carlo Glauber model of collisions of nucleus A with nucleus B."""

    def __init__(
        self,
        name_a: str = "Pb",
        name_b: str = "Pb",
        xsect: float = 42.0,
        xsect_sigma: float = 0.0,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()
        self.nucleus_a = Nucleus(name_a, self.rng)
        self.nucleus_b = Nucleus(name_b, self.rng)
        self.xsect = float(xsect)
        self.xsect_omega = 0.0
        self.xsect_lambda = 0.0
        self.xsect_event = 0.0
        self.xsect_dist: Function1D | None = None
        self.nn_prof: Function1D | None = None
        self.events = 0
        self.total_events = 0
        self.bmin = 0.0
        self.bmax = 20.0
        self.hard_frac = 0.65
        self.detail = 99
        self.calc_area = False
        self.calc_length = False
        self.do_core = False
        self.do_aagg = True
        self.two_component_x = 0.0
        self.max_npart_found = 0
        self.psi_n = [0.0] * (MAX_HARMONIC + 1)
        self.ecc_n = [0.0] * (MAX_HARMONIC + 1)
        self.event = Event()
        self.ntuple: list[tuple[float, ...]] | None = None
        self.ntuple_columns: list[str] = []
        self.ntuple_title = ""
        self._bc = np.zeros((0, 0), dtype=bool)
        self._tagged = False

        if xsect_sigma > 0:
            self.xsect_omega = float(xsect_sigma)
            dist = _cross_section_distribution(self.xsect, self.xsect_omega, 1.0)
            self.xsect_lambda = self.xsect / dist.mean()
            log.info("final lambda=%g", self.xsect_lambda)
            self.xsect_dist = _cross_section_distribution(
                self.xsect, self.xsect_omega, self.xsect_lambda
            )
            log.info("final <sigma>=%g", self.xsect_dist.mean())

        self.name = f"Glauber_{name_a}_{name_b}"
        self.title = f"Glauber {name_a}+{name_b} Version"

    def __repr__(self) -> str:
        return f"GlauberMC({self.nucleus_a.name!r}, {self.nucleus_b.name!r}, xsect={self.xsect})"

    @property
    def ntuple_name(self) -> str:
        return f"nt_{self.nucleus_a.name}_{self.nucleus_b.name}"

    def set_min_distance(self, d: float) -> None:
        self.nucleus_a.min_dist = d
        self.nucleus_b.min_dist = d

    def set_node_distance(self, d: float) -> None:
        self.nucleus_a.node_dist = d
        self.nucleus_b.node_dist = d

    def set_lattice(self, lattice: int) -> None:
        self.nucleus_a.lattice = lattice
        self.nucleus_b.lattice = lattice

    def set_recenter(self, mode: int) -> None:
        self.nucleus_a.recenter = mode
        self.nucleus_b.recenter = mode

    def set_shift_max(self, s: float) -> None:
        self.nucleus_a.shift_max = s
        self.nucleus_b.shift_max = s

    def set_smearing(self, s: float) -> None:
        self.nucleus_a.smearing = s
        self.nucleus_b.smearing = s

    def describe(self) -> str:
        """Short string identifying the system and its settings."""
        a, b = self.nucleus_a, self.nucleus_b
        return (
            f"gmc-{a.name}{b.name}-snn{self.xsect:.1f}-md{b.min_dist:.1f}"
            f"-nd{b.node_dist:.1f}-rc{b.recenter:d}-smax{b.shift_max:.1f}"
        )

    def eccentricity(self, n: int = 2) -> float:
        return self.ecc_n[n]

    def psi(self, n: int = 2) -> float:
        return self.psi_n[n]

    def is_binary_collision(self, i: int, j: int) -> bool:
        """Whether nucleon i of nucleus B collided with nucleon j of nucleus A."""
        if 0 <= i < self._bc.shape[0] and 0 <= j < self._bc.shape[1]:
            return bool(self._bc[i, j])
        return False

    def nucleons(self) -> list[Nucleon]:
        """All nucleons of the current event, those of nucleus A first."""
        return [*self.nucleus_a.nucleons, *self.nucleus_b.nucleons]

    def total_cross_section(self) -> float:
        """Total cross section in barn estimated from the generated events."""
        if self.total_events == 0:
            raise ValueError("no events have been generated")
        return (self.events / self.total_events) * math.pi * self.bmax * self.bmax / 100

    def total_cross_section_error(self) -> float:
        """Statistical error of the total cross section estimate."""
        if self.events == 0:
            raise ValueError("no events with collisions have been generated")
        return (
            self.total_cross_section()
            / math.sqrt(self.events)
            * math.sqrt(1.0 - self.events // self.total_events)
        )

    def next_event(self, bgen: float = -1) -> bool:
        """Generate one event; True if at least one collision happened."""
        if bgen < 0:
            bgen = math.sqrt(
                (self.bmax * self.bmax - self.bmin * self.bmin) * self.rng.random()
                + self.bmin * self.bmin
            )
        self.nucleus_a.throw_nucleons(-bgen / 2.0)
        self.nucleus_b.throw_nucleons(bgen / 2.0)
        return self._calc_event(bgen)

    def run(self, nevents: int, b: float = -1) -> None:
        """Generate events with collisions and append their rows to the ntuple."""
        if self.ntuple is None:
            self.ntuple = []
            self.ntuple_columns = ntuple_fields(self.detail)
            self.ntuple_title = (
                f"{self.nucleus_a.name} + {self.nucleus_b.name} "
                f"(x-sect = {self.xsect:.1f} mb) str {self.describe()}"
            )
        for i in range(nevents):
            while not self.next_event(b):
                pass
            self.ntuple.append(self.event.row(self.ntuple_columns))
            if i > 0 and i % 100 == 0:
                log.info(
                    "Event # %d x-sect = %g +- %g b",
                    i, self.total_cross_section(), self.total_cross_section_error(),
                )
        if nevents > 99:
            log.info("Done!")

    def calc_density(self, profile: Function1D, xval: float, yval: float) -> float:
        """Sum of a radial profile centred on every wounded nucleon, at (xval, yval)."""
        r2max = profile.xmax * profile.xmax
        x, y, ncoll = _arrays(self.nucleons())
        wounded = ncoll > 0
        r2 = (xval - x[wounded]) ** 2 + (yval - y[wounded]) ** 2
        inside = r2[r2 <= r2max]
        if inside.size == 0:
            return 0.0
        return float(np.sum(np.atleast_1d(profile.eval(np.sqrt(inside)))))

    def _calc_event(self, bgen: float) -> bool:
        a_nucs = self.nucleus_a.nucleons
        b_nucs = self.nucleus_b.nucleons
        if not self._tagged:
            for nucleon in a_nucs:
                nucleon.in_nucleus_a = True
            for nucleon in b_nucs:
                nucleon.in_nucleus_a = False
            self._tagged = True
        na, nb = len(a_nucs), len(b_nucs)
        rng = self.rng

        xsec_a = xsec_b = None
        if self.xsect_dist is not None:
            self.xsect_event = self.xsect_dist.random(rng)
            if self.do_aagg:
                xsec_a = np.array([self.xsect_dist.random(rng) for _ in range(na)])
                xsec_b = np.array([self.xsect_dist.random(rng) for _ in range(nb)])
        else:
            self.xsect_event = self.xsect

        d2 = self.xsect_event / (math.pi * 10)
        bh = math.sqrt(d2 * self.hard_frac)
        if self.nn_prof is not None:
            d2 = self.nn_prof.xmax * self.nn_prof.xmax
        if xsec_a is not None:
            d2 = 0.5 * (xsec_a[None, :] + xsec_b[:, None]) / (math.pi * 10)

        ev = self.event
        ev.reset()
        ax, ay, _ = _arrays(a_nucs)
        bx, by, _ = _arrays(b_nucs)
        ta = np.fromiter((n.type for n in a_nucs), dtype=int, count=na)
        tb = np.fromiter((n.type for n in b_nucs), dtype=int, count=nb)
        dist2 = (bx[:, None] - ax[None, :]) ** 2 + (by[:, None] - ay[None, :]) ** 2
        hit = dist2 <= d2
        if self.nn_prof is not None:
            candidates = np.flatnonzero(hit)
            if candidates.size:
                prob = np.atleast_1d(self.nn_prof.eval(np.sqrt(dist2.flat[candidates])))
                rejected = rng.random(candidates.size) > prob
                hit.flat[candidates[rejected]] = False
        self._bc = hit

        for nucleon, count in zip(a_nucs, hit.sum(axis=0)):
            nucleon.ncoll += int(count)
        for nucleon, count in zip(b_nucs, hit.sum(axis=1)):
            nucleon.ncoll += int(count)

        nc = int(hit.sum())
        bij = np.sqrt(dist2[hit])
        ev.bnn = float(bij.sum())
        type_a = np.broadcast_to(ta[None, :], hit.shape)[hit]
        type_b = np.broadcast_to(tb[:, None], hit.shape)[hit]
        same = type_a == type_b
        ev.ncollpn = int((~same).sum())
        ev.ncollpp = int((same & (type_a == 1)).sum())
        ev.ncollnn = int((same & (type_a != 1)).sum())
        if nc:
            i, j = np.argwhere(hit)[0]
            ev.x0 = float((ax[j] + bx[i]) / 2)
            ev.y0 = float((ay[j] + by[i]) / 2)

        ev.b = bgen
        self.total_events += 1
        if nc > 0:
            self.events += 1
            ev.ncoll = nc
            ev.nhard = int((bij < bh).sum())
            ev.bnn /= nc
            return self._calc_results(bgen)
        return False

    def _calc_results(self, bgen: float) -> bool:
        ev = self.event
        a_nucs = self.nucleus_a.nucleons
        b_nucs = self.nucleus_b.nucleons
        na, nb = len(a_nucs), len(b_nucs)
        ax, ay, nca = _arrays(a_nucs)
        bx, by, ncb = _arrays(b_nucs)
        x = np.concatenate((ax, bx))
        y = np.concatenate((ay, by))
        ncoll = np.concatenate((nca, ncb))
        k_nc = int(self.do_core)

        wounded = ncoll > 0
        ev.npart = int(wounded.sum())
        ev.npart0 = int((ncoll == 1).sum())
        ev.npart_a = int((nca > 0).sum())
        ev.npart_b = int((ncb > 0).sum())
        if ev.npart > 0:
            xw, yw = x[wounded], y[wounded]
            fx = self.two_component_x
            w = 2.0 * (0.5 * (1 - fx) + 0.5 * fx * ncoll[wounded])
            sum_w = float(w.sum())
            ev.mean_x = float((xw * w).sum() / sum_w)
            ev.mean_y = float((yw * w).sum() / sum_w)
            ev.mean_x2 = float((xw * xw * w).sum() / sum_w)
            ev.mean_y2 = float((yw * yw * w).sum() / sum_w)
            ev.mean_xy = float((xw * yw * w).sum() / sum_w)
        ev.mean_x_system = float(x.mean()) if na + nb > 0 else 0.0
        ev.mean_y_system = float(y.mean()) if na + nb > 0 else 0.0
        ev.mean_xa = float(ax.mean()) if na > 0 else 0.0
        ev.mean_ya = float(ay.mean()) if na > 0 else 0.0
        ev.mean_xb = float(bx.mean()) if nb > 0 else 0.0
        ev.mean_yb = float(by.mean()) if nb > 0 else 0.0

        ev.var_x = ev.mean_x2 - ev.mean_x * ev.mean_x
        ev.var_y = ev.mean_y2 - ev.mean_y * ev.mean_y
        ev.var_xy = ev.mean_xy - ev.mean_x * ev.mean_y
        det = ev.var_x * ev.var_y - ev.var_xy * ev.var_xy
        ev.area_w = -1.0 if det < 0 else math.sqrt(det)

        if ev.npart > 0:
            self._calc_moments(x, y, ncoll, k_nc)

        ev.b = bgen
        ev.phi_a = self.nucleus_a.phi_rot
        ev.theta_a = self.nucleus_a.theta_rot
        ev.phi_b = self.nucleus_b.phi_rot
        ev.theta_b = self.nucleus_b.theta_rot
        ev.psi1, ev.ecc1 = self.psi_n[1], self.ecc_n[1]
        ev.psi2, ev.ecc2 = self.psi_n[2], self.ecc_n[2]
        ev.psi3, ev.ecc3 = self.psi_n[3], self.ecc_n[3]
        ev.psi4, ev.ecc4 = self.psi_n[4], self.ecc_n[4]
        ev.psi5, ev.ecc5 = self.psi_n[5], self.ecc_n[5]

        if self.calc_area:
            self._calc_area(ax, ay, nca, bx, by, ncb, k_nc)
        if self.calc_length:
            self._calc_length()

        self.max_npart_found = max(self.max_npart_found, ev.npart)
        return True

    def _calc_moments(self, x: np.ndarray, y: np.ndarray, ncoll: np.ndarray, k_nc: int) -> None:
        ev = self.event
        sel = ncoll > k_nc
        dx = x[sel] - ev.mean_x
        dy = y[sel] - ev.mean_y
        r = np.hypot(dx, dy)
        phi = np.arctan2(dy, dx)
        for n in range(1, MAX_HARMONIC + 1):
            rw = r ** (3 if n == 1 else n)
            cos_sum = float((rw * np.cos(n * phi)).sum()) / ev.npart
            sin_sum = float((rw * np.sin(n * phi)).sum()) / ev.npart
            rn = float(rw.sum()) / ev.npart
            if rn > 0:
                self.psi_n[n] = (math.atan2(sin_sum, cos_sum) + math.pi) / n
                self.ecc_n[n] = math.hypot(sin_sum, cos_sum) / rn
            else:
                self.psi_n[n] = -1.0
                self.ecc_n[n] = -1.0
        if not k_nc:
            denom = (ev.var_y + ev.var_x) * self.ecc_n[2]
            if denom != 0:
                t = math.sqrt((ev.var_y - ev.var_x) ** 2 + 4.0 * ev.var_xy * ev.var_xy) / denom
                if t < 0.99 or t > 1.01:
                    log.warning("expected t=1 but found t=%g", t)

    def _calc_area(self, ax, ay, nca, bx, by, ncb, k_nc: int) -> None:
        ev = self.event
        nbins, ell = 200, 10.0
        da = 2 * ell * 2 * ell / nbins / nbins
        r2 = self.xsect_event / (math.pi * 10) / 4.0
        centres = -ell + (2 * ell / nbins) * (np.arange(nbins) + 0.5)
        gx, gy = np.meshgrid(centres, centres, indexing="ij")

        def coverage(xs, ys, nc):
            covered = np.zeros_like(gx, dtype=bool)
            for xi, yi in zip(xs[(nc > 0) & (nc != k_nc)], ys[(nc > 0) & (nc != k_nc)]):
                covered |= (xi - ev.mean_x - gx) ** 2 + (yi - ev.mean_y - gy) ** 2 < r2
            return covered

        area_a = coverage(ax, ay, nca)
        area_b = coverage(bx, by, ncb)
        ev.area_and = float((area_a & area_b).sum()) * da
        ev.area_or = float((area_a | area_b).sum()) * da

    def _calc_length(self) -> None:
        ev = self.event
        krhs = math.sqrt(self.xsect_event / 40.0 / math.pi)
        ksg = krhs / math.sqrt(5)
        step = 0.1
        rad = Function1D(
            lambda r: 2 * math.pi / ksg / ksg * np.exp(-r * r / (2.0 * ksg * ksg)), 0.0, 5 * ksg
        )
        minval = rad.eval(5 * ksg)
        ev.phi0 = float(self.rng.uniform(0, 2 * math.pi))
        cphi, sphi = math.cos(ev.phi0), math.sin(ev.phi0)
        x, y = ev.x0, ev.y0
        i0a = i1a = path = 0.0
        val = self.calc_density(rad, x, y)
        while val > minval:
            x += step * cphi
            y += step * sphi
            i0a += val
            i1a += path * val
            path += step
            val = self.calc_density(rad, x, y)
        ev.length = 2 * i1a / i0a if i0a else math.nan