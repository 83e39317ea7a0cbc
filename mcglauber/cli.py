"""Command-line entry point that generates events and saves their ntuple."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass

import numpy as np

from .macros import run_and_save_ntuple

USAGE = "runGlauber -nev Nev -targ TARGET -proj PROJECTILE -sigmNN CROSS_SECTION -seed SEED -o OUTPUTFILE"

MIN_DISTANCE = 0.4
OMEGA = -1.0
NODE_DISTANCE = -1.0
CROSS_SECTION_WIDTH = -1.0

_MISSING = {
    "-o": ("Output file is not defined!", 12),
    "-targ": ("Target name is not defined!", 13),
    "-proj": ("Projectile name is not defined!", 14),
    "-nev": ("Number of events is not defined!", 15),
    "-sigmNN": ("Cross section is not defined!", 16),
    "-seed": ("Seed is not defined!", 17),
}


class UsageError(Exception):
    """Bad command line; ``code`` is the exit status to return."""

    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class _Settings:
    nev: int
    target: str
    projectile: str
    cross_section: float
    seed: int | None
    output: str


def _number(kind, flag: str, text: str):
    try:
        return kind(text)
    except ValueError:
        raise UsageError(f"Invalid value for {flag}: {text}", 1) from None


def parse_args(argv) -> _Settings:
    """Parse the command-line arguments (without the program name)."""
    args = list(argv)
    if len(args) < 10:
        raise UsageError(USAGE, 10)
    values: dict[str, str] = {}
    it = iter(enumerate(args))
    for index, arg in it:
        if arg not in _MISSING:
            raise UsageError(f"Unknown parameter: {arg}", 11)
        if index == len(args) - 1:
            message, code = _MISSING[arg]
            raise UsageError(message, code)
        values[arg] = next(it)[1]

    seed = None
    if "-seed" in values:
        seed = _number(int, "-seed", values["-seed"])
        if seed <= 0:
            print("WARNING: wrong value for seed! Set to default.", file=sys.stderr)
            seed = None

    required = ("-o", "-targ", "-proj", "-nev", "-sigmNN")
    if any(not values.get(flag) for flag in required):
        raise UsageError("Output/Target/Projectile has not been set properly!", 17)

    return _Settings(
        nev=_number(int, "-nev", values["-nev"]),
        target=values["-targ"],
        projectile=values["-proj"],
        cross_section=_number(float, "-sigmNN", values["-sigmNN"]),
        seed=seed,
        output=values["-o"],
    )


def main(argv=None) -> int:
    """Run the generator; returns the exit status."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        settings = parse_args(argv)
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return exc.code

    rng = np.random.default_rng(settings.seed)
    wall = time.perf_counter()
    cpu = time.process_time()
    run_and_save_ntuple(
        settings.nev,
        settings.target,
        settings.projectile,
        settings.cross_section,
        CROSS_SECTION_WIDTH,
        MIN_DISTANCE,
        OMEGA,
        NODE_DISTANCE,
        settings.output,
        rng,
    )
    elapsed = time.perf_counter() - wall
    hours, rest = divmod(int(elapsed), 3600)
    minutes, seconds = divmod(rest, 60)
    print(f"Real time {hours}:{minutes:02d}:{seconds:02d}, CP time {time.process_time() - cpu:.3f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())