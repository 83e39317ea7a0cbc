import numpy as np
import pytest

from mcglauber.collision import ntuple_fields
from mcglauber.macros import (
    NUCLEON_COLUMNS,
    SMEAR_COLUMNS,
    run_and_save_nucleons,
    run_and_save_ntuple,
    run_and_smear_ntuple,
)
from mcglauber.nucleus import NucleusError


def _column(data, key, name):
    columns = list(data[f"{key}_columns"])
    return data[key][:, columns.index(name)]


def test_save_ntuple_columns_and_rows(tmp_path):
    path = run_and_save_ntuple(
        3, "p", "Cu", fname=tmp_path / "out.npz", rng=np.random.default_rng(1)
    )
    assert path == tmp_path / "out.npz"
    with np.load(path) as data:
        assert list(data["nt_p_Cu_columns"]) == ntuple_fields(99)
        assert data["nt_p_Cu"].shape == (3, len(ntuple_fields(99)))
        npart = _column(data, "nt_p_Cu", "Npart")
        npart_a = _column(data, "nt_p_Cu", "NpartA")
        npart_b = _column(data, "nt_p_Cu", "NpartB")
        ncoll = _column(data, "nt_p_Cu", "Ncoll")
    assert np.all(npart == npart_a + npart_b)
    assert np.all(npart_a == 1)
    assert np.all(ncoll == npart_b)
    assert np.all(ncoll >= 1)


def test_save_ntuple_is_reproducible(tmp_path):
    first = run_and_save_ntuple(2, "p", "Cu", fname=tmp_path / "a.npz", rng=np.random.default_rng(7))
    second = run_and_save_ntuple(2, "p", "Cu", fname=tmp_path / "b.npz", rng=np.random.default_rng(7))
    with np.load(first) as a, np.load(second) as b:
        np.testing.assert_array_equal(a["nt_p_Cu"], b["nt_p_Cu"])


def test_save_ntuple_default_name_with_profile(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = run_and_save_ntuple(1, "p", "Cu", omega=0.4, rng=np.random.default_rng(3))
    assert path.name.startswith("gmc-pCu-snn67.6")
    assert path.name.endswith("-om0.4.npz")
    assert (tmp_path / path).exists()


def test_save_ntuple_unknown_nucleus(tmp_path):
    with pytest.raises(NucleusError):
        run_and_save_ntuple(1, "Xx", "Pb", fname=tmp_path / "x.npz")


def test_save_nucleons_arrays_and_file(tmp_path, capsys):
    events = run_and_save_nucleons(
        3, "p", "Cu", bmin=1.0, bmax=1.0, fname=tmp_path / "nuc.npz",
        rng=np.random.default_rng(5),
    )
    assert len(events) == 3
    for rows in events:
        assert rows.shape == (64, len(NUCLEON_COLUMNS))
        in_a = rows[:, NUCLEON_COLUMNS.index("InNucleusA")]
        ncoll = rows[:, NUCLEON_COLUMNS.index("NColl")]
        assert in_a[0] == 1.0
        assert np.all(in_a[1:] == 0.0)
        assert ncoll[in_a == 1].sum() == ncoll[in_a == 0].sum()
        assert ncoll.sum() > 0
    with np.load(tmp_path / "nuc.npz") as data:
        for index, rows in enumerate(events):
            np.testing.assert_array_equal(data[f"nucleonarray{index}"], rows)
        assert np.all(_column(data, "nt_p_Cu", "B") == 1.0)
        assert data["nt_p_Cu"].shape[0] == 3
    assert "Done!" in capsys.readouterr().out


def test_save_nucleons_verbose_prints_events(capsys):
    run_and_save_nucleons(1, "p", "Cu", verbose=True, rng=np.random.default_rng(2))
    out = capsys.readouterr().out
    assert "EVENT NO: 0" in out
    assert "Nucleus\t X\t Y\t Z\tNcoll" in out
    assert out.count("   B\t") == 63


def test_smear_ntuple_values_and_file(tmp_path):
    table = run_and_smear_ntuple(
        2, 0.4, "p", "Cu", fname=tmp_path / "smear.npz", rng=np.random.default_rng(11)
    )
    assert table.shape == (2, len(SMEAR_COLUMNS))
    col = {name: table[:, i] for i, name in enumerate(SMEAR_COLUMNS)}
    assert np.all(col["Npart"] >= 2)
    assert np.all(col["Ncoll"] >= 1)
    for harmonic in range(1, 6):
        ecc = col[f"Ecc{harmonic}G"]
        assert np.all((ecc >= 0) & (ecc <= 1))
    assert np.all(col["Sx2G"] > 0)
    assert np.all(col["Sy2G"] > 0)
    with np.load(tmp_path / "smear.npz") as data:
        np.testing.assert_array_equal(data["nt"], table)
        assert list(data["nt_columns"]) == list(SMEAR_COLUMNS)


def test_smear_ntuple_rejects_zero_width():
    with pytest.raises(ValueError):
        run_and_smear_ntuple(1, 0.0, "p", "Cu", rng=np.random.default_rng(4))