"""Batch runs of the Glauber model that store their results in .npz files.

Each stored table is an array of rows under its own key, with the column
names under the same key followed by ``_columns``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

import numpy as np

from .collision import GlauberMC
from .profiles import nn_profile
from .smearing import smeared_eccentricities

log = logging.getLogger(__name__)

SMEAR_SAMPLES = 100

NUCLEON_COLUMNS = ("X", "Y", "Z", "Type", "InNucleusA", "NColl", "Energy")

SMEAR_COLUMNS = (
    "Npart", "Ncoll", "B",
    "Psi1P", "Ecc1P", "Psi2P", "Ecc2P", "Psi3P", "Ecc3P", "Psi4P", "Ecc4P", "Psi5P", "Ecc5P",
    "Psi1G", "Ecc1G", "Psi2G", "Ecc2G", "Psi3G", "Ecc3G", "Psi4G", "Ecc4G", "Psi5G", "Ecc5G",
    "Sx2P", "Sy2P", "Sx2G", "Sy2G",
)


def _table(columns: Sequence[str], rows) -> np.ndarray:
    return np.asarray(rows, dtype=float).reshape(-1, len(columns))


def _write_tables(
    path: str | Path, tables: Mapping[str, tuple[Sequence[str], np.ndarray]]
) -> Path:
    arrays: dict[str, np.ndarray] = {}
    for key, (columns, rows) in tables.items():
        arrays[key] = _table(columns, rows)
        arrays[f"{key}_columns"] = np.array(list(columns), dtype=str)
    path = Path(path)
    with path.open("wb") as fh:
        np.savez_compressed(fh, **arrays)
    return path


def _configured(
    sys_a: str,
    sys_b: str,
    signn: float,
    sigwidth: float,
    mind: float,
    rng: np.random.Generator | None,
) -> GlauberMC:
    mc = GlauberMC(sys_a, sys_b, signn, sigwidth, rng=rng)
    mc.set_min_distance(mind)
    return mc


def run_and_save_ntuple(
    n: int,
    sys_a: str = "Pb",
    sys_b: str = "Pb",
    signn: float = 67.6,
    sigwidth: float = -1,
    mind: float = 0.4,
    omega: float = -1,
    noded: float = -1,
    fname: str | Path | None = None,
    rng: np.random.Generator | None = None,
) -> Path:
    """Generate n events and save their ntuple; returns the path written.

    Without a file name one is built from the run settings.
    """
    mc = _configured(sys_a, sys_b, signn, sigwidth, mind, rng)
    mc.set_node_distance(noded)
    mc.calc_length = False
    mc.calc_area = False
    mc.do_core = False
    mc.detail = 99
    suffix = ""
    if 0 <= omega <= 1:
        mc.nn_prof = nn_profile(signn, omega)
        suffix = f"-om{omega:.1f}"
    if fname is None:
        nodes = f"-nd{noded:.1f}" if noded > 0 else ""
        fname = f"{mc.describe()}{suffix}{nodes}.npz"
    mc.run(n)
    return _write_tables(fname, {mc.ntuple_name: (mc.ntuple_columns, mc.ntuple or [])})


def _nucleon_rows(mc: GlauberMC) -> np.ndarray:
    rows = [
        (nu.x, nu.y, nu.z, nu.type, float(nu.in_nucleus_a), nu.ncoll, nu.energy)
        for nu in mc.nucleons()
    ]
    return _table(NUCLEON_COLUMNS, rows)


def _print_event(index: int, mc: GlauberMC) -> None:
    print(f"\n\nEVENT NO: {index}")
    print(f"B = {mc.event.b}  Npart = {mc.event.npart}\n")
    print("Nucleus\t X\t Y\t Z\tNcoll")
    for nu in mc.nucleons():
        label = "B" if nu.in_nucleus_b else "A"
        print(f"   {label}\t{nu.x:2.2f}\t{nu.y:2.2f}\t{nu.z:2.2f}\t{nu.ncoll:3d}")


def run_and_save_nucleons(
    n: int,
    sys_a: str = "Pb",
    sys_b: str = "Pb",
    signn: float = 67.6,
    sigwidth: float = -1,
    mind: float = 0.4,
    verbose: bool = False,
    bmin: float = 0.0,
    bmax: float = 20.0,
    fname: str | Path | None = None,
    rng: np.random.Generator | None = None,
) -> list[np.ndarray]:
    """Generate n events and return the nucleons of each one.

    Each event gives an array with the columns of NUCLEON_COLUMNS, nucleus A
    first. With a file name, every array is stored as ``nucleonarray<i>``
    together with the event ntuple.
    """
    mc = _configured(sys_a, sys_b, signn, sigwidth, mind, rng)
    mc.bmin = bmin
    mc.bmax = bmax
    events: list[np.ndarray] = []
    for index in range(n):
        mc.run(1)
        if index % 100 == 0:
            log.info("%g%% done", 100.0 * index / n)
        events.append(_nucleon_rows(mc))
        if verbose:
            _print_event(index, mc)
    print("\nDone!")
    if fname is not None:
        tables: dict[str, tuple[Sequence[str], np.ndarray]] = {
            f"nucleonarray{index}": (NUCLEON_COLUMNS, rows) for index, rows in enumerate(events)
        }
        tables[mc.ntuple_name] = (mc.ntuple_columns, mc.ntuple or [])
        path = _write_tables(fname, tables)
        if verbose:
            print(f"{path}: {', '.join(tables)}")
    return events


def run_and_smear_ntuple(
    n: int,
    sigs: float = 0.4,
    sys_a: str = "p",
    sys_b: str = "Pb",
    signn: float = 67.6,
    mind: float = 0.4,
    bmin: float = 0.0,
    bmax: float = 20.0,
    fname: str | Path | None = None,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Generate n events with point-like and Gaussian-smeared eccentricities.

    Returns one row per event with the columns of SMEAR_COLUMNS; with a file
    name the table is also stored under the key ``nt``.
    """
    mc = _configured(sys_a, sys_b, signn, 0.0, mind, rng)
    mc.bmin = bmin
    mc.bmax = bmax
    rows = []
    for _ in range(n):
        while not mc.next_event():
            pass
        smeared = smeared_eccentricities(mc, sigs, SMEAR_SAMPLES, mc.rng)
        ev = mc.event
        row = [ev.npart, ev.ncoll, ev.b]
        for harmonic in range(1, 6):
            row.extend((mc.psi(harmonic), mc.eccentricity(harmonic)))
        for harmonic in range(1, 6):
            row.extend((smeared.psi[harmonic], smeared.ecc[harmonic]))
        row.extend((ev.var_x, ev.var_y, smeared.sx2, smeared.sy2))
        rows.append(row)
    table = _table(SMEAR_COLUMNS, rows)
    if fname is not None:
        _write_tables(fname, {"nt": (SMEAR_COLUMNS, table)})
    return table