import math

import numpy as np
import pytest

from mcglauber.collision import Event, GlauberMC, ntuple_fields, version
from mcglauber.nucleus import NucleusError
from mcglauber.profiles import Function1D, nn_profile


def make(a="Opar", b="Opar", seed=1, **kwargs):
    return GlauberMC(a, b, rng=np.random.default_rng(seed), **kwargs)


def central_event(mc, tries=50):
    for _ in range(tries):
        if mc.next_event(0.0):
            return mc
    raise AssertionError("no central collision")


def test_ntuple_fields_by_detail():
    basic = ntuple_fields(1)
    assert basic[0] == "Npart"
    assert basic[-1] == "AreaW"
    full = ntuple_fields(99)
    assert full[: len(basic)] == basic
    assert full[-1] == "ThetaB"
    assert "Ecc5" in full and "Length" in full and "MeanYB" in full
    assert "Ecc2" not in basic


def test_version():
    assert version() == "v3.2"


def test_describe_defaults():
    mc = GlauberMC("Pb", "Pb", 42)
    assert mc.describe() == "gmc-PbPb-snn42.0-md0.4-nd0.0-rc1-smax99.0"
    assert mc.name == "Glauber_Pb_Pb"


def test_unknown_nucleus():
    with pytest.raises(NucleusError):
        GlauberMC("Unobtainium", "Pb")


def test_event_row_and_reset():
    ev = Event()
    ev.npart = 5
    ev.area_or = 2.5
    ev.area_and = 1.5
    assert ev.row(["AreaO", "AreaA", "Npart"]) == (2.5, 1.5, 5.0)
    ev.reset()
    assert ev.row(ntuple_fields(99)) == tuple(0.0 for _ in ntuple_fields(99))


def test_event_row_unknown_column():
    with pytest.raises(KeyError):
        Event().row(["Nothing"])


def test_proton_proton_head_on():
    mc = make("p", "p")
    assert mc.next_event(0.0) is True
    assert mc.event.npart == 2
    assert mc.event.ncoll == 1
    assert mc.event.ncollpp == 1
    assert mc.eccentricity(2) == -1.0
    assert mc.psi(2) == -1.0
    assert mc.is_binary_collision(0, 0)


def test_proton_proton_far_apart():
    mc = make("p", "p")
    assert mc.next_event(19.0) is False
    assert mc.total_events == 1
    assert mc.events == 0


def test_event_invariants():
    mc = central_event(make())
    ev = mc.event
    wounded = [n for n in mc.nucleons() if n.is_wounded]
    assert ev.npart == len(wounded) == ev.npart_a + ev.npart_b
    assert ev.ncoll == ev.ncollpp + ev.ncollpn + ev.ncollnn
    assert 0 <= ev.nhard <= ev.ncoll
    assert sum(n.ncoll for n in mc.nucleus_a.nucleons) == ev.ncoll
    assert sum(n.ncoll for n in mc.nucleus_b.nucleons) == ev.ncoll
    pairs = sum(
        mc.is_binary_collision(i, j)
        for i in range(len(mc.nucleus_b.nucleons))
        for j in range(len(mc.nucleus_a.nucleons))
    )
    assert pairs == ev.ncoll


def test_nucleons_order_and_tags():
    mc = central_event(make())
    nucleons = mc.nucleons()
    assert len(nucleons) == 32
    assert all(n.in_nucleus_a for n in nucleons[:16])
    assert all(n.in_nucleus_b for n in nucleons[16:])


def test_eccentricity_bounds_and_consistency():
    mc = central_event(make(seed=3))
    for n in range(1, 10):
        assert 0.0 <= mc.eccentricity(n) <= 1.0
        assert 0.0 <= mc.psi(n) <= 2 * math.pi / n + 1e-12
    ev = mc.event
    t = math.sqrt((ev.var_y - ev.var_x) ** 2 + 4 * ev.var_xy**2) / (ev.var_y + ev.var_x)
    assert t == pytest.approx(mc.eccentricity(2), rel=1e-9)
    assert ev.ecc2 == mc.eccentricity(2)


def test_run_fills_ntuple():
    mc = make(seed=5)
    mc.bmax = 8.0
    mc.run(4)
    assert len(mc.ntuple) == 4
    columns = ntuple_fields(99)
    assert mc.ntuple_columns == columns
    b_index = columns.index("B")
    for row in mc.ntuple:
        assert len(row) == len(columns)
        assert row[0] >= 2
        assert 0.0 <= row[b_index] <= 8.0
    assert mc.events == 4
    assert 0 < mc.total_cross_section() <= math.pi * 64 / 100
    assert mc.total_cross_section_error() >= 0.0


def test_cross_section_needs_events():
    mc = make()
    with pytest.raises(ValueError):
        mc.total_cross_section()


def test_reproducible_with_seed():
    first, second = make(seed=11), make(seed=11)
    first.bmax = second.bmax = 8.0
    first.run(3)
    second.run(3)
    assert first.ntuple == second.ntuple


def test_calc_density_counts_wounded():
    mc = central_event(make())
    flat = Function1D(lambda r: np.ones_like(r), 0.0, 100.0)
    assert mc.calc_density(flat, 0.0, 0.0) == pytest.approx(mc.event.npart)


def test_fluctuating_cross_section_mean():
    mc = make(xsect=42.0, xsect_sigma=0.5)
    assert mc.xsect_dist.mean() == pytest.approx(42.0, rel=1e-2)
    central_event(mc)
    assert mc.xsect_event > 0


def test_nn_profile_event():
    mc = make(seed=7)
    mc.nn_prof = nn_profile(42.0, 0.4)
    central_event(mc)
    assert mc.event.ncoll == mc.event.ncollpp + mc.event.ncollpn + mc.event.ncollnn
    assert mc.event.bnn <= 3.0


def test_area_and_length():
    mc = make(seed=9)
    mc.calc_area = True
    mc.calc_length = True
    central_event(mc)
    assert 0.0 < mc.event.area_and <= mc.event.area_or
    assert mc.event.length >= 0.0
    assert 0.0 <= mc.event.phi0 <= 2 * math.pi


def test_setters_apply_to_both_nuclei():
    mc = make()
    mc.set_min_distance(0.2)
    mc.set_recenter(2)
    mc.set_shift_max(5.0)
    mc.set_smearing(0.1)
    mc.set_lattice(3)
    mc.set_node_distance(1.0)
    for nucleus in (mc.nucleus_a, mc.nucleus_b):
        assert nucleus.min_dist == 0.2
        assert nucleus.recenter == 2
        assert nucleus.shift_max == 5.0
        assert nucleus.smearing == 0.1
        assert nucleus.lattice == 3
        assert nucleus.node_dist == 1.0