"""Nuclei built from nucleons placed according to a density profile."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from scipy.special import eval_legendre

from .nucleon import Nucleon
from .profiles import (
    Function1D,
    Function2D,
    ProfileKind,
    make_deformed_function,
    make_radial_function,
)

log = logging.getLogger(__name__)

MAX_CONFIGURATIONS = 6000
STARTING_EDGE = 20.0
MAX_SMEAR_ATTEMPTS = 99

CONFIGURATION_FILES = {
    "He3": "he3_plaintext.dat",
    "H3": "h3_plaintext.dat",
    "He4": "he4_plaintext.dat",
    "C": "carbon_plaintext.dat",
    "O": "oxygen_plaintext.dat",
}

# Words before and after the coordinates of one configuration, by nucleon count.
_CONFIG_LAYOUTS = {3: (0, 4), 4: (0, 0), 12: (2, 0), 16: (0, 0)}

_PN_REWEIGHT = (1.00866, -0.000461484, -0.000203571)

_K = ProfileKind
_PROTON_KINDS = (_K.PROTON_EXP, _K.PROTON_GAUSS, _K.PROTON_DGAUSS)
_HULTHEN_KINDS = (_K.HULTHEN, _K.HULTHEN_CONSTRAINED)
_BOX_KINDS = (_K.ELLIPSOID, _K.DEFORMED_BOX)
_DEFORMED_KINDS = (_K.DEFORMED, _K.DEFORMED_REWEIGHTED)
_ROTATED_KINDS = _BOX_KINDS + _DEFORMED_KINDS
_REWEIGHTED_KINDS = (_K.REWEIGHTED, _K.REWEIGHTED_PN, _K.DEFORMED_REWEIGHTED)

_SET_A_KINDS = (_K.THREE_PF, _K.REWEIGHTED, _K.THREE_PG, _K.ELLIPSOID, _K.DEFORMED, _K.THREE_PF_PN)
_SET_R_KINDS = (
    _K.PROTON_EXP,
    _K.PROTON_GAUSS,
    _K.THREE_PF,
    _K.REWEIGHTED,
    _K.THREE_PG,
    _K.ELLIPSOID,
    _K.DEFORMED,
    _K.PROTON_DGAUSS,
    _K.THREE_PF_PN,
)
_SET_W_KINDS = (_K.THREE_PF, _K.THREE_PG)


class NucleusError(Exception):
    """Raised for unknown nuclei, bad settings or missing configuration data."""


@dataclass(frozen=True)
class NucleusSpec:
    """Tabulated parameters of a named nucleus."""

    n: int
    z: int
    r: float
    a: float
    w: float
    kind: ProfileKind
    r2: float = 0.0
    a2: float = 0.0
    w2: float = 0.0
    beta2: float = 0.0
    beta4: float = 0.0
    reweight: tuple[float, float, float] = (0.0, 0.0, 0.0)


def _s(n, z, r, a, w, kind, **extra) -> NucleusSpec:
    return NucleusSpec(n, z, r, a, w, kind, **extra)


_NUCLEI: dict[str, NucleusSpec] = {
    "p": _s(1, 1, 0.234, 0, 0, _K.PROTON_EXP),
    "pg": _s(1, 1, 0.514, 0, 0, _K.PROTON_GAUSS),
    "pdg": _s(1, 1, 1, 0, 0, _K.PROTON_DGAUSS),
    "dpf": _s(2, 1, 0.01, 0.5882, 0, _K.THREE_PF),
    "dh": _s(2, 1, 0.2283, 1.1765, 0, _K.HULTHEN),
    "d": _s(2, 1, 0.2283, 1.1765, 0, _K.HULTHEN_CONSTRAINED),
    "He3": _s(3, 1, 0.0, 0.0, 0, _K.FROM_FILE),
    "H3": _s(3, 2, 0.0, 0.0, 0, _K.FROM_FILE),
    "He4": _s(4, 2, 0.0, 0.0, 0, _K.FROM_FILE),
    "C": _s(12, 6, 2.608, 0.513, -0.051, _K.FROM_FILE),
    "O": _s(16, 8, 2.608, 0.513, -0.051, _K.FROM_FILE),
    "Opar": _s(16, 8, 2.608, 0.513, -0.051, _K.THREE_PF),
    "Oho": _s(16, 8, 1.833, 1.544, 0, _K.HARMONIC_OSCILLATOR),
    "Al": _s(27, 13, 3.34, 0.580, 0.0, _K.DEFORMED, beta2=-0.448, beta4=0.239),
    "Si": _s(28, 14, 3.34, 0.580, -0.233, _K.THREE_PF),
    "Si2": _s(28, 14, 3.34, 0.580, 0, _K.DEFORMED, beta2=-0.478, beta4=0.250),
    "S": _s(32, 16, 2.54, 2.191, 0.16, _K.THREE_PG),
    "Ar": _s(40, 18, 3.53, 0.542, 0, _K.THREE_PF),
    "Ca": _s(40, 20, 3.766, 0.586, -0.161, _K.THREE_PF),
    "Ni": _s(58, 28, 4.309, 0.517, -0.1308, _K.THREE_PF),
    "Cu": _s(63, 29, 4.20, 0.596, 0, _K.THREE_PF),
    "Curw ": _s(63, 29, 4.20, 0.596, 0, _K.REWEIGHTED, reweight=(1.00898, -0.000790403, -0.000389897)),
    "Cu2": _s(63, 29, 4.20, 0.596, 0, _K.DEFORMED, beta2=0.162, beta4=-0.006),
    "Cu2rw": _s(
        63, 29, 4.20, 0.596, 0, _K.DEFORMED_REWEIGHTED,
        beta2=0.162, beta4=-0.006, reweight=(1.01269, -0.00298083, -9.97222e-05),
    ),
    "CuHN": _s(63, 29, 4.28, 0.5, 0, _K.THREE_PF),
    "Ag": _s(108, 47, 5.71, 0.5, 0, _K.THREE_PF),
    "I": _s(127, 53, 5.66, 0.54, 0, _K.THREE_PF),
    "IHS": _s(127, 53, 5.66, 0.00001, 0, _K.THREE_PF),
    "Xe": _s(129, 54, 5.36, 0.59, 0, _K.THREE_PF),
    "Xes": _s(129, 54, 5.42, 0.57, 0, _K.THREE_PF),
    "Xe2": _s(129, 54, 5.36, 0.59, 0, _K.DEFORMED, beta2=0.161, beta4=-0.003),
    "Xe2a": _s(129, 54, 5.36, 0.59, 0, _K.DEFORMED, beta2=0.18, beta4=0),
    "Xerw": _s(129, 54, 5.36, 0.59, 0, _K.REWEIGHTED, reweight=(1.00911, -0.000722999, -0.0002663)),
    "Xesrw": _s(129, 54, 5.42, 0.57, 0, _K.REWEIGHTED, reweight=(1.0096, -0.000874123, -0.000256708)),
    "Xe2arw": _s(
        129, 54, 5.36, 0.59, 0, _K.DEFORMED_REWEIGHTED,
        beta2=0.18, beta4=0, reweight=(1.01246, -0.0024851, -5.72464e-05),
    ),
    "Xe124": _s(124, 54, 5.431, 0.5978, 0, _K.DEFORMED, beta2=0.212, beta4=-0.018),
    "Xe124HS": _s(124, 54, 5.431, 0.00001, 0, _K.THREE_PF),
    "CsI": _s(130, 54, 5.71, 0.54, 0, _K.THREE_PF),
    "CsIHS": _s(130, 54, 5.71, 0.00001, 0, _K.THREE_PF),
    "Cs": _s(133, 55, 5.76, 0.54, 0, _K.THREE_PF),
    "CsHS": _s(133, 55, 5.76, 0.00001, 0, _K.THREE_PF),
    "W184": _s(184, 74, 6.52, 0.535, 0, _K.THREE_PF),
    "W": _s(186, 74, 6.58, 0.480, 0, _K.THREE_PF),
    "Au": _s(197, 79, 6.38, 0.535, 0, _K.THREE_PF),
    "Au3": _s(197, 79, 6.5541, 0.523, 0, _K.THREE_PF),
    "Aurw": _s(197, 79, 6.38, 0.535, 0, _K.REWEIGHTED, reweight=(1.00899, -0.000590908, -0.000210598)),
    "Au2": _s(197, 79, 6.38, 0.535, 0, _K.DEFORMED, beta2=-0.131, beta4=-0.031),
    "Au2rw": _s(
        197, 79, 6.38, 0.535, 0, _K.DEFORMED_REWEIGHTED,
        beta2=-0.131, beta4=-0.031, reweight=(1.01261, -0.00225517, -3.71513e-05),
    ),
    "AuHN": _s(197, 79, 6.42, 0.44, 0, _K.THREE_PF),
    "Pb": _s(208, 82, 6.62, 0.546, 0, _K.THREE_PF),
    "Pbrw": _s(208, 82, 6.62, 0.546, 0, _K.REWEIGHTED, reweight=(1.00863, -0.00044808, -0.000205872)),
    "Pb*": _s(208, 82, 6.624, 0.549, 0, _K.THREE_PF),
    "PbHN": _s(208, 82, 6.65, 0.460, 0, _K.THREE_PF),
    "Pbpn": _s(208, 82, 6.68, 0.447, 0, _K.THREE_PF_PN, r2=6.69, a2=0.56, w2=0),
    "Pbpnrw": _s(208, 82, 6.68, 0.447, 0, _K.REWEIGHTED_PN, r2=6.69, a2=0.56, w2=0),
    "Bi": _s(209, 83, 6.75, 0.468, 0, _K.THREE_PF),
    "BiGS": _s(209, 83, 6.315, 2.881, 0.39, _K.THREE_PG),
    # Uranium after Heinz & Kuhlman: R = 6.8*0.91, w = 6.8*0.26
    "U": _s(238, 92, 6.188, 0.54, 1.77, _K.ELLIPSOID),
    "U2": _s(238, 92, 6.67, 0.44, 0, _K.DEFORMED, beta2=0.280, beta4=0.093),
}


def lookup(name: str) -> NucleusSpec:
    """Return the tabulated parameters of a nucleus by name."""
    try:
        return _NUCLEI[name]
    except KeyError:
        raise NucleusError(f"could not find nucleus {name!r}") from None


def read_configurations(path: str | Path, n: int) -> np.ndarray:
    """Read nucleon configurations from a whitespace-separated text file.

    Returns an array of shape (count, n, 3), holding at most 6000 configurations.
    """
    try:
        lead, trail = _CONFIG_LAYOUTS[n]
    except KeyError:
        raise NucleusError(f"no configuration file layout for {n} nucleons") from None
    try:
        text = Path(path).read_text()
    except OSError as exc:
        raise NucleusError(f"no file for nucleon configurations found with name = {path}") from exc
    try:
        values = np.array(text.split(), dtype=float)
    except ValueError as exc:
        raise NucleusError(f"malformed configuration file {path}") from exc
    size = lead + 3 * n + trail
    count = min(values.size // size, MAX_CONFIGURATIONS)
    records = values[: count * size].reshape(count, size)
    return records[:, lead : lead + 3 * n].reshape(count, n, 3).copy()


def _fermi_probability(arg: float) -> float:
    if arg > 700.0:
        return 0.0
    return 1.0 / (1.0 + math.exp(arg))


def _sph_legendre0(l: int, theta: float) -> float:
    return math.sqrt((2 * l + 1) / (4 * math.pi)) * float(eval_legendre(l, math.cos(theta)))


class Nucleus:
    """A nucleus whose nucleons are thrown anew for every event."""

    def __init__(self, name: str = "Pb", rng: np.random.Generator | None = None) -> None:
        spec = lookup(name)
        self.name = name
        self.n = spec.n
        self.z = spec.z
        self.r = spec.r
        self.a = spec.a
        self.w = spec.w
        self.r2 = spec.r2
        self.a2 = spec.a2
        self.w2 = spec.w2
        self.beta2 = spec.beta2
        self.beta4 = spec.beta4
        self.reweight = spec.reweight
        self.kind = spec.kind
        self.min_dist = 0.4
        self.node_dist = 0.0
        self.smearing = 0.0
        self.recenter = 1
        self.lattice = 0
        self.shift_max = 0.1 if spec.kind in _REWEIGHTED_KINDS else 99.0
        self.max_r = 14.0
        self.trials = 0
        self.non_smeared = 0
        self.phi_rot = 0.0
        self.theta_rot = 0.0
        self.x_rot = 0.0
        self.y_rot = 0.0
        self.z_rot = 0.0
        self.nucleons: list[Nucleon] = []
        self.config_dir = Path(".")
        self.rng = rng if rng is not None else np.random.default_rng()
        self._configurations: np.ndarray | None = None
        self._config_index = 0
        self.func1: Function1D | None = None
        self.func2: Function1D | None = None
        self.func3: Function2D | None = None
        self._build_functions()

    def __repr__(self) -> str:
        return f"Nucleus({self.name!r}, n={self.n}, z={self.z})"

    def _build_functions(self) -> None:
        kind, rmax = self.kind, self.max_r
        self.func1 = self.func2 = self.func3 = None
        if kind in _PROTON_KINDS:
            self.func1 = make_radial_function(kind, (self.r,), rmax)
        elif kind in (_K.THREE_PF, _K.THREE_PG):
            self.func1 = make_radial_function(kind, (self.r, self.a, self.w), rmax)
        elif kind in _HULTHEN_KINDS or kind in (_K.ELLIPSOID, _K.HARMONIC_OSCILLATOR, _K.TWO_PF):
            self.func1 = make_radial_function(kind, (self.r, self.a), rmax)
        elif kind is _K.THREE_PF_PN:
            self.func1 = make_radial_function(kind, (self.r, self.a, self.w), rmax)
            self.func2 = make_radial_function(kind, (self.r2, self.a2, self.w2), rmax)
        elif kind is _K.REWEIGHTED:
            self.func1 = make_radial_function(kind, (self.r, self.a, self.w, *self.reweight), rmax)
        elif kind is _K.REWEIGHTED_PN:
            self.func1 = make_radial_function(kind, (self.r, self.a, self.w, *_PN_REWEIGHT), rmax)
            self.func2 = make_radial_function(kind, (self.r2, self.a2, self.w2, *_PN_REWEIGHT), rmax)
        elif kind is _K.DEFORMED:
            self.func3 = make_deformed_function((self.r, self.a, self.beta2, self.beta4), rmax)
        elif kind is _K.DEFORMED_REWEIGHTED:
            self.func3 = make_deformed_function(
                (self.r, self.a, self.beta2, self.beta4, *self.reweight), rmax, reweighted=True
            )

    def set_a(self, a: float, a2: float = -1) -> None:
        """Change the diffuseness (and the neutron one, for p/n profiles)."""
        if self.kind not in _SET_A_KINDS:
            raise NucleusError(f"a is not needed for profile {self.kind.name}")
        self.a = a
        self.a2 = a2
        self._build_functions()

    def set_r(self, r: float, r2: float = -1) -> None:
        """Change the radius (and the neutron one, for p/n profiles)."""
        if self.kind not in _SET_R_KINDS:
            raise NucleusError(f"R is not needed for profile {self.kind.name}")
        self.r = r
        self.r2 = r2
        self._build_functions()

    def set_w(self, w: float) -> None:
        """Change the w parameter of 3pF and 3pG profiles."""
        if self.kind not in _SET_W_KINDS:
            raise NucleusError(f"w is not needed for profile {self.kind.name}")
        self.w = w
        self._build_functions()

    def set_beta(self, beta2: float, beta4: float) -> None:
        """Change the deformation parameters."""
        self.beta2 = beta2
        self.beta4 = beta4
        if self.func3 is not None:
            self._build_functions()

    def _min_dist_ok(self, count: int, x: float, y: float, z: float) -> bool:
        if self.min_dist <= 0:
            return True
        md2 = self.min_dist * self.min_dist
        return all(
            (x - o.x) ** 2 + (y - o.y) ** 2 + (z - o.z) ** 2 >= md2
            for o in self.nucleons[:count]
        )

    def _random_direction(self, r: float) -> tuple[float, float, float]:
        phi = self.rng.random() * 2 * math.pi
        ctheta = 2 * self.rng.random() - 1
        stheta = math.sqrt(1 - ctheta * ctheta)
        return r * stheta * math.cos(phi), r * stheta * math.sin(phi), r * ctheta

    def throw_nucleons(self, xshift: float = 0.0) -> tuple[float, float, float]:
        """Place all nucleons for a new event, shifted by xshift along x.

        Returns the centre-of-mass offset found before recentering.
        """
        rng = self.rng
        if not self.nucleons:
            self.nucleons = [Nucleon(type=1 if i < self.z else 0) for i in range(self.n)]
        protons = 0
        for i, nucleon in enumerate(self.nucleons):
            if rng.random() < (self.z - protons) / (self.n - i):
                nucleon.type = 1
                protons += 1
            else:
                nucleon.type = 0

        while True:
            self._throw_once()
            centre = np.mean([(nu.x, nu.y, nu.z) for nu in self.nucleons], axis=0)
            if float(np.linalg.norm(centre)) <= self.shift_max:
                break
        self._recenter(centre, xshift)
        return float(centre[0]), float(centre[1]), float(centre[2])

    def _throw_once(self) -> None:
        rng = self.rng
        self.trials = 0
        self.non_smeared = 0
        self.phi_rot = rng.random() * 2 * math.pi
        self.theta_rot = math.acos(2 * rng.random() - 1)
        self.x_rot = rng.random() * 2 * math.pi
        self.y_rot = rng.random() * 2 * math.pi
        self.z_rot = rng.random() * 2 * math.pi

        if self.n == 1:
            nucleon = self.nucleons[0]
            nucleon.reset()
            nucleon.set_xyz(*self._random_direction(self.func1.random(rng)))
            self.trials = 1
        elif self.n == 2 and self.kind in _HULTHEN_KINDS:
            first, second = self.nucleons
            first.reset()
            first.set_xyz(*self._random_direction(self.func1.random(rng) / 2))
            second.reset()
            if self.kind is _K.HULTHEN_CONSTRAINED:
                second.set_xyz(-first.x, -first.y, -first.z)
            else:
                second.set_xyz(*self._random_direction(self.func1.random(rng) / 2))
            self.trials = 1
        elif 2 < self.n < 20 and self.name in CONFIGURATION_FILES:
            configuration = self._next_configuration()
            for nucleon, (x, y, z) in zip(self.nucleons, configuration):
                nucleon.reset()
                nucleon.set_xyz(float(x), float(y), float(z))
                nucleon.rotate(self.phi_rot, self.theta_rot)
            self.trials = 1
        else:
            self._throw_general()

    def _next_configuration(self) -> np.ndarray:
        if self._configurations is None:
            path = Path(self.config_dir) / CONFIGURATION_FILES[self.name]
            log.info("reading %s for nucleon configurations with n = %d", path, self.n)
            configurations = read_configurations(path, self.n)
            if len(configurations) == 0:
                raise NucleusError(f"no nucleon configurations in {path}")
            self._configurations = configurations
            self._config_index = 0
        if self._config_index >= len(self._configurations):
            self._config_index = 0
        configuration = self._configurations[self._config_index]
        self._config_index += 1
        return configuration

    def _throw_general(self) -> None:
        rng = self.rng
        node = self.node_dist
        edges = tuple(STARTING_EDGE + node * rng.random() - 0.5 * node for _ in range(3))
        used: set[tuple[int, int, int]] = set()
        if node > 0 and self.min_dist > node:
            raise NucleusError(
                f"minimum distance (nucleon hard core diameter) [{self.min_dist}] cannot be "
                f"larger than the nodal spacing of the grid [{node}]"
            )
        for i, nucleon in enumerate(self.nucleons):
            nucleon.reset()
            while True:
                self.trials += 1
                if self.kind in _BOX_KINDS:
                    x, y, z = self._sample_box()
                elif self.kind in _DEFORMED_KINDS:
                    r, theta = self.func3.random(rng)
                    phi = 2 * math.pi * rng.random()
                    x = r * math.sin(phi) * math.sin(theta)
                    y = r * math.cos(phi) * math.sin(theta)
                    z = r * math.cos(theta)
                else:
                    ff = self.func2 if self.func2 is not None and nucleon.type == 0 else self.func1
                    if node <= 0:
                        x, y, z = self._random_direction(ff.random(rng))
                    else:
                        placed = self._sample_lattice(i, ff, edges, used)
                        if placed is None:
                            continue
                        x, y, z = placed
                nucleon.set_xyz(x, y, z)
                if self.kind in _ROTATED_KINDS:
                    nucleon.rotate(self.phi_rot, self.theta_rot)
                if node > 0:
                    nucleon.rotate_3d(self.x_rot, self.y_rot, self.z_rot)
                    break
                if self._min_dist_ok(i, x, y, z):
                    break

    def _sample_box(self) -> tuple[float, float, float]:
        rng = self.rng
        while True:
            x, y, z = ((self.r * 2) * (rng.random() * 2 - 1) for _ in range(3))
            theta = math.atan2(math.hypot(x, y), z)
            radius = math.sqrt(x * x + y * y + z * z)
            if self.kind is _K.ELLIPSOID:
                rtheta = self.r + self.w * math.cos(theta) ** 2
            else:
                rtheta = self.r * (
                    1
                    + self.beta2 * _sph_legendre0(2, theta)
                    + self.beta4 * _sph_legendre0(4, theta)
                )
            if rng.random() < _fermi_probability((radius - rtheta) / self.a):
                return x, y, z

    def _sample_lattice(
        self,
        index: int,
        ff: Function1D,
        edges: tuple[float, float, float],
        used: set[tuple[int, int, int]],
    ) -> tuple[float, float, float] | None:
        rng = self.rng
        node = self.node_dist
        span = 2 * STARTING_EDGE / node
        slot = (int(span * rng.random()), int(span * rng.random()), int(span * rng.random()))
        if slot in used:
            return None
        i, j, k = slot
        ex, ey, ez = edges
        if self.lattice == 1:  # primitive cubic
            x, y, z = node * i - ex, node * j - ey, node * k - ez
        elif self.lattice == 2:  # body-centred cubic
            x = 0.5 * node * (-i + j + k) - 0.5 * ex
            y = 0.5 * node * (i - j + k) - 0.5 * ey
            z = 0.5 * node * (i + j - k) - 0.5 * ez
        elif self.lattice == 3:  # face-centred cubic
            x = 0.5 * node * (j + k) - ex
            y = 0.5 * node * (i + k) - ey
            z = 0.5 * node * (i + j) - ez
        else:  # hexagonal close packing
            x = 0.5 * node * (2 * i + (j + k) % 2) - ex
            y = 0.5 * node * math.sqrt(3) * j - ey
            z = 0.5 * node * (k * 2 * math.sqrt(6) / 3) - ez
        r2 = x * x + y * y + z * z
        r = math.sqrt(r2)
        if r > self.max_r or r2 * rng.random() > ff.eval(r):
            return None
        if self.smearing > 0.0:
            for _ in range(MAX_SMEAR_ATTEMPTS):
                xs = x * rng.normal(1.0, self.smearing)
                ys = y * rng.normal(1.0, self.smearing)
                zs = z * rng.normal(1.0, self.smearing)
                if self._min_dist_ok(index, xs, ys, zs):
                    x, y, z = xs, ys, zs
                    break
            else:
                log.warning(
                    "could not place on node (%d,%d,%d) at [%g,%g,%g] r = %g fm; not smeared",
                    i, j, k, x, y, z, r,
                )
                self.non_smeared += 1
        used.add(slot)
        return x, y, z

    def _recenter(self, centre: np.ndarray, xshift: float) -> None:
        sx, sy, sz = (float(c) for c in centre)
        fx = fy = fz = 0.0
        if self.recenter == 1:
            fx, fy, fz = sx, sy, sz
        elif self.recenter == 2:
            last = self.nucleons[-1]
            last.set_xyz(last.x - self.n * sx, last.y - self.n * sy, last.z - self.n * sz)
        elif self.recenter in (3, 4):
            shift = np.array([sx, sy, sz])
            magnitude = float(np.linalg.norm(shift))
            axis = np.cross(shift, np.array([0.0, 0.0, 1.0]))
            axis_norm = float(np.linalg.norm(axis))
            if axis_norm > 0.0:
                angle = math.acos(max(-1.0, min(1.0, sz / magnitude)))
                k = axis / axis_norm
                cos_a, sin_a = math.cos(angle), math.sin(angle)
                for nucleon in self.nucleons:
                    v = np.array([nucleon.x, nucleon.y, nucleon.z])
                    rotated = v * cos_a + np.cross(k, v) * sin_a + k * float(k @ v) * (1 - cos_a)
                    nucleon.set_xyz(*(float(c) for c in rotated))
            if self.recenter == 3:
                fz = magnitude
        for nucleon in self.nucleons:
            nucleon.set_xyz(nucleon.x - fx + xshift, nucleon.y - fy, nucleon.z - fz)