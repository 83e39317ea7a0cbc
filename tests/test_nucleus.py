import math

import numpy as np
import pytest

from mcglauber.nucleus import (
    Nucleus,
    NucleusError,
    lookup,
    read_configurations,
)
from mcglauber.profiles import ProfileKind


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


def _positions(nucleus):
    return np.array([(n.x, n.y, n.z) for n in nucleus.nucleons])


def _pairwise(points):
    points = np.asarray(points, dtype=float)
    diff = points[:, None, :] - points[None, :, :]
    return np.sqrt((diff**2).sum(axis=-1))


def test_lookup_lead():
    spec = lookup("Pb")
    assert (spec.n, spec.z) == (208, 82)
    assert spec.r == pytest.approx(6.62)
    assert spec.a == pytest.approx(0.546)
    assert spec.kind is ProfileKind.THREE_PF


def test_lookup_proton_neutron_profile():
    spec = lookup("Pbpn")
    assert spec.kind is ProfileKind.THREE_PF_PN
    assert spec.r2 == pytest.approx(6.69)
    assert spec.a2 == pytest.approx(0.56)


def test_lookup_deformed_reweighted():
    spec = lookup("Au2rw")
    assert spec.kind is ProfileKind.DEFORMED_REWEIGHTED
    assert spec.beta2 == pytest.approx(-0.131)
    assert spec.reweight == pytest.approx((1.01261, -0.00225517, -3.71513e-05))


def test_lookup_unknown_raises():
    with pytest.raises(NucleusError):
        lookup("Unobtainium")


def test_unknown_nucleus_constructor_raises(rng):
    with pytest.raises(NucleusError):
        Nucleus("Nope", rng)


def test_reweighted_nucleus_has_tight_shift_max(rng):
    assert Nucleus("Pbrw", rng).shift_max == pytest.approx(0.1)
    assert Nucleus("Pb", rng).shift_max == pytest.approx(99)


def test_proton_sits_at_shift(rng):
    nucleus = Nucleus("p", rng)
    nucleus.throw_nucleons(1.5)
    (nucleon,) = nucleus.nucleons
    assert nucleon.x == pytest.approx(1.5)
    assert nucleon.y == pytest.approx(0.0, abs=1e-12)
    assert nucleon.z == pytest.approx(0.0, abs=1e-12)
    assert nucleus.trials == 1


def test_constrained_deuteron_is_back_to_back(rng):
    nucleus = Nucleus("d", rng)
    shift = nucleus.throw_nucleons(0.0)
    first, second = nucleus.nucleons
    assert np.linalg.norm(shift) == pytest.approx(0.0, abs=1e-12)
    assert first.x == pytest.approx(-second.x)
    assert first.y == pytest.approx(-second.y)
    assert first.z == pytest.approx(-second.z)


def test_copper_counts_and_centre(rng):
    nucleus = Nucleus("Cu", rng)
    nucleus.throw_nucleons(-3.0)
    assert len(nucleus.nucleons) == 63
    assert sum(n.is_proton for n in nucleus.nucleons) == 29
    centre = _positions(nucleus).mean(axis=0)
    assert centre == pytest.approx([-3.0, 0.0, 0.0], abs=1e-9)
    assert nucleus.trials >= 63


def test_proton_count_constant_across_events(rng):
    nucleus = Nucleus("Ca", rng)
    for _ in range(3):
        nucleus.throw_nucleons()
        assert sum(n.is_proton for n in nucleus.nucleons) == nucleus.z


def test_minimum_distance_respected(rng):
    nucleus = Nucleus("Cu", rng)
    nucleus.throw_nucleons()
    distances = _pairwise(_positions(nucleus))
    np.fill_diagonal(distances, np.inf)
    assert distances.min() >= nucleus.min_dist - 1e-9


def test_throw_resets_collisions(rng):
    nucleus = Nucleus("Cu", rng)
    nucleus.throw_nucleons()
    for nucleon in nucleus.nucleons:
        nucleon.collide()
    nucleus.throw_nucleons()
    assert all(n.ncoll == 0 for n in nucleus.nucleons)


def test_recenter_zero_returns_centre(rng):
    nucleus = Nucleus("Cu", rng)
    nucleus.recenter = 0
    shift = nucleus.throw_nucleons()
    assert _positions(nucleus).mean(axis=0) == pytest.approx(shift, abs=1e-9)


def test_recenter_two_moves_last_nucleon(rng):
    nucleus = Nucleus("Cu", rng)
    nucleus.recenter = 2
    nucleus.throw_nucleons(2.0)
    assert _positions(nucleus).mean(axis=0) == pytest.approx([2.0, 0.0, 0.0], abs=1e-9)


def test_recenter_three_by_rotation(rng):
    nucleus = Nucleus("Cu", rng)
    nucleus.recenter = 3
    nucleus.throw_nucleons()
    assert _positions(nucleus).mean(axis=0) == pytest.approx([0.0, 0.0, 0.0], abs=1e-9)


def test_recenter_four_puts_centre_on_z_axis(rng):
    nucleus = Nucleus("Cu", rng)
    nucleus.recenter = 4
    shift = nucleus.throw_nucleons()
    centre = _positions(nucleus).mean(axis=0)
    assert centre[:2] == pytest.approx([0.0, 0.0], abs=1e-9)
    assert centre[2] == pytest.approx(np.linalg.norm(shift), abs=1e-9)


def test_recenter_rotation_preserves_distances(rng):
    nucleus = Nucleus("Ar", rng)
    nucleus.recenter = 0
    nucleus.throw_nucleons()
    before = _pairwise(_positions(nucleus))
    nucleus.rng = np.random.default_rng(12345)
    nucleus.recenter = 3
    nucleus.throw_nucleons()
    after = _pairwise(_positions(nucleus))
    assert after == pytest.approx(before, abs=1e-9)


def test_shift_max_limits_centre_offset(rng):
    nucleus = Nucleus("Cu", rng)
    nucleus.shift_max = 0.3
    for _ in range(3):
        shift = nucleus.throw_nucleons()
        assert np.linalg.norm(shift) <= 0.3


def test_lattice_nodes_are_distinct(rng):
    nucleus = Nucleus("Si", rng)
    nucleus.node_dist = 0.8
    nucleus.lattice = 1
    nucleus.throw_nucleons()
    distances = _pairwise(_positions(nucleus))
    np.fill_diagonal(distances, np.inf)
    assert len(nucleus.nucleons) == 28
    assert distances.min() >= 0.8 - 1e-9
    assert _positions(nucleus).mean(axis=0) == pytest.approx([0, 0, 0], abs=1e-9)


def test_lattice_spacing_smaller_than_core_raises(rng):
    nucleus = Nucleus("Si", rng)
    nucleus.node_dist = 0.3
    with pytest.raises(NucleusError):
        nucleus.throw_nucleons()


def test_deformed_nucleus(rng):
    nucleus = Nucleus("Cu2", rng)
    nucleus.throw_nucleons(1.0)
    assert len(nucleus.nucleons) == 63
    assert _positions(nucleus).mean(axis=0) == pytest.approx([1.0, 0.0, 0.0], abs=1e-9)
    radii = np.linalg.norm(_positions(nucleus) - [1.0, 0.0, 0.0], axis=1)
    assert radii.max() < 2 * nucleus.max_r


def test_ellipsoid_box_method(rng):
    nucleus = Nucleus("U", rng)
    nucleus.throw_nucleons()
    assert len(nucleus.nucleons) == 238
    assert sum(n.is_proton for n in nucleus.nucleons) == 92
    assert np.abs(_positions(nucleus)).max() <= 4 * nucleus.r


def test_set_w_changes_profile(rng):
    nucleus = Nucleus("Pb", rng)
    before = nucleus.func1.eval(7.0)
    nucleus.set_w(0.1)
    assert nucleus.w == pytest.approx(0.1)
    assert nucleus.func1.eval(7.0) > before


def test_set_r_changes_profile(rng):
    nucleus = Nucleus("Pb", rng)
    before = nucleus.func1.eval(6.8)
    nucleus.set_r(7.0)
    assert nucleus.r == pytest.approx(7.0)
    assert nucleus.func1.eval(6.8) > before


def test_set_a_proton_neutron(rng):
    nucleus = Nucleus("Pbpn", rng)
    nucleus.set_a(0.5, 0.6)
    assert (nucleus.a, nucleus.a2) == (0.5, 0.6)
    assert nucleus.func2 is not nucleus.func1


def test_set_a_not_needed_raises(rng):
    with pytest.raises(NucleusError):
        Nucleus("p", rng).set_a(0.5)


def test_set_w_not_needed_raises(rng):
    with pytest.raises(NucleusError):
        Nucleus("Au2", rng).set_w(0.1)


def test_set_beta_changes_deformed_profile(rng):
    nucleus = Nucleus("Au2", rng)
    before = nucleus.func3.eval(7.0, 0.3)
    nucleus.set_beta(0.3, 0.0)
    assert nucleus.beta2 == pytest.approx(0.3)
    assert nucleus.func3.eval(7.0, 0.3) > before


def test_read_configurations_he4(tmp_path):
    path = tmp_path / "he4.dat"
    path.write_text(" ".join(str(v) for v in range(24)) + "\n")
    configs = read_configurations(path, 4)
    assert configs.shape == (2, 4, 3)
    assert configs[1, 0].tolist() == [12.0, 13.0, 14.0]


def test_read_configurations_skips_isospin_words(tmp_path):
    path = tmp_path / "he3.dat"
    path.write_text(" ".join(str(v) for v in range(13 * 2)))
    configs = read_configurations(path, 3)
    assert configs.shape == (2, 3, 3)
    assert configs[1, 0, 0] == 13.0


def test_read_configurations_skips_leading_words(tmp_path):
    path = tmp_path / "carbon.dat"
    path.write_text(" ".join(str(v) for v in range(38)))
    configs = read_configurations(path, 12)
    assert configs.shape == (1, 12, 3)
    assert configs[0, 0, 0] == 2.0


def test_read_configurations_ignores_partial_record(tmp_path):
    path = tmp_path / "he4.dat"
    path.write_text(" ".join(str(v) for v in range(17)))
    assert read_configurations(path, 4).shape == (1, 4, 3)


def test_read_configurations_missing_file(tmp_path):
    with pytest.raises(NucleusError):
        read_configurations(tmp_path / "absent.dat", 4)


def test_read_configurations_unsupported_size(tmp_path):
    path = tmp_path / "x.dat"
    path.write_text("1 2 3")
    with pytest.raises(NucleusError):
        read_configurations(path, 5)


def test_nucleus_from_file_cycles_configurations(tmp_path, rng):
    first = np.array([[0.0, 0.0, 1.0], [0.0, 1.0, 0.0], [1.0, 0.0, 0.0], [0.5, 0.5, 0.5]])
    second = 2.0 * first
    text = " ".join(str(v) for v in np.concatenate([first.ravel(), second.ravel()]))
    (tmp_path / "he4_plaintext.dat").write_text(text)
    nucleus = Nucleus("He4", rng)
    nucleus.config_dir = tmp_path
    for expected in (first, second, first):
        nucleus.throw_nucleons()
        assert _pairwise(_positions(nucleus)) == pytest.approx(_pairwise(expected), abs=1e-9)
        assert _positions(nucleus).mean(axis=0) == pytest.approx([0, 0, 0], abs=1e-9)


def test_nucleus_from_missing_file_raises(tmp_path, rng):
    nucleus = Nucleus("He3", rng)
    nucleus.config_dir = tmp_path
    with pytest.raises(NucleusError):
        nucleus.throw_nucleons()


def test_rotation_angles_in_range(rng):
    nucleus = Nucleus("Ar", rng)
    nucleus.throw_nucleons()
    assert 0.0 <= nucleus.phi_rot < 2 * math.pi
    assert 0.0 <= nucleus.theta_rot <= math.pi