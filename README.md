# mcglauber

A Monte Carlo Glauber model for nucleus–nucleus collisions. Nuclei are built
from tabulated density profiles or from per-event nucleon configurations. The
profiles include Woods–Saxon (3pF), 2pF, 3pG, Hulthén, deformed,
harmonic-oscillator and proton profiles. Each event throws the two nuclei at a
sampled impact parameter. It then counts participants and binary collisions,
and computes participant moments and the eccentricities ε₁…ε₉ with their
event-plane angles.

## Installation

```
pip install .
```

## Command line

```
runglauber -nev 1000 -targ Pb -proj Pb -sigmNN 67.6 -seed 42 -o events.npz
```

`-nev`, `-targ`, `-proj`, `-sigmNN` and `-o` are required. `-seed` is
optional. A seed that is missing or not positive gives an unseeded generator,
and a seed that is not positive also prints a warning. Bad command lines print
a message to standard error and return a non-zero exit status.

The output is a compressed NumPy archive (`numpy.load`). It holds the event
table under the key `nt_<TARGET>_<PROJECTILE>` and that table's column names
under the same key with `_columns` appended. The columns are those given by
`mcglauber.collision.ntuple_fields()`. When the run ends, the command prints
the real time and the CPU time.

## Library use

```python
import numpy as np
from mcglauber.collision import GlauberMC

rng = np.random.default_rng(1)
mc = GlauberMC("Pb", "Pb", 67.6, 0, rng)
mc.set_min_distance(0.4)
mc.run(100, -1)                    # appends one row per event to mc.ntuple
print(mc.ntuple_columns[:4], mc.ntuple[0][:4])
print(mc.total_cross_section(), mc.total_cross_section_error())
print(mc.eccentricity(2), mc.psi(2))
```

`GlauberMC.next_event(bgen)` generates a single event. It returns `True` if
at least one binary collision occurred. `mc.event` then holds the event's
observables, and `mc.nucleons()` holds the nucleons of nucleus A followed by
those of nucleus B.

### Modules

- `mcglauber.profiles`: `Function1D` and `Function2D` are sampled density
  functions with `eval` and `random`. `make_radial_function`,
  `make_deformed_function` and `nn_profile` build them, and the `ProfileKind`
  enum selects the profile.
- `mcglauber.nucleon`: the `Nucleon` dataclass.
- `mcglauber.nucleus`:
  - `lookup(name)` returns the `NucleusSpec` of a named nucleus and raises
    `NucleusError` for unknown names.
  - `Nucleus.throw_nucleons(xshift)` samples a configuration.
  - `read_configurations(path, n)` loads precomputed configurations.
- `mcglauber.collision`: `GlauberMC`, `Event`, `ntuple_fields` and
  `version`.
- `mcglauber.smearing`: functions that work on the current event.
  - `smeared_eccentricities` returns Gaussian-smeared eccentricities.
  - `density_histogram` returns a normalised 121×121 transverse density with
    its bin edges.
  - `energy_density_grid` returns a Gaussian-smeared energy-density map.
- `mcglauber.macros`: ready-made runs that write `.npz` archives.
  - `run_and_save_ntuple` writes the event table and returns the path.
  - `run_and_save_nucleons` returns the per-event nucleon arrays and, given a
    file name, stores them as `nucleonarray<i>`.
  - `run_and_smear_ntuple` returns, and optionally stores, point-like and
    smeared eccentricities.
- `mcglauber.cli`: `parse_args` and `main`, the functions behind the
  `runglauber` command.

### Light nuclei from files

The nuclei `He3`, `H3`, `He4`, `C` and `O` take their nucleon positions from
configuration files. These are `he3_plaintext.dat`, `h3_plaintext.dat`,
`he4_plaintext.dat`, `carbon_plaintext.dat` and `oxygen_plaintext.dat`. They
are looked up in `Nucleus.config_dir`, which is the current directory unless
set otherwise. The files are not included in this package.

## What the package does not do

- It does not draw events or collision geometries.
- It writes NumPy `.npz` archives only, never any other data format.
- There is no ready-made run that writes per-event density histograms, or
  nucleon coordinates with energy-density maps, to a file. For the current
  event, `density_histogram` and `energy_density_grid` compute these, and the
  caller stores them.

## Running the tests

```
pip install .[test]
pytest
```