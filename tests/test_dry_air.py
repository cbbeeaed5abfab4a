import numpy as np
import pytest

from fluidized_bed_heat_transfer.bubbling_bed import dry_air
from fluidized_bed_heat_transfer.bubbling_bed.dry_air import DryAir, DryAirTable


# Synthetic table

def test_density_is_ideal_gas():
    air = DryAir()
    assert float(air.rho(101325.0, 300.0)) == pytest.approx(101325.0/(287.12*300.0))


def test_density_broadcasts():
    rho = DryAir().rho(np.array([1e5, 2e5]), np.array([[300.0], [600.0]]))
    assert rho.shape == (2, 1)
    np.testing.assert_allclose(rho[:, 0], [1e5/(287.12*300.0), 2e5/(287.12*600.0)])


def test_density_does_not_load_table():
    air = DryAir()
    air.rho(1e5, 300.0)
    assert air._table is None


def test_linear_interpolation(air, table):
    T = 0.5*(table.T[1] + table.T[2])
    assert float(air.eta(T)) == pytest.approx(0.5*(table.eta[1] + table.eta[2]))
    assert float(air.lam(table.T[3])) == pytest.approx(table.lam[3])


def test_outside_table_is_nan(air):
    out = air.c_p(np.array([100.0, 300.0, 2000.0]))
    assert np.isnan(out[0]) and np.isnan(out[2])
    assert np.isfinite(out[1])


def test_derived_properties(air):
    T = 700.0
    p = 2e5
    assert float(air.kappa(T)) == pytest.approx(float(air.c_p(T)/air.c_v(T)))
    assert float(air.ny(p, T)) == pytest.approx(float(air.eta(T)/air.rho(p, T)))
    assert float(air.a(p, T)) == pytest.approx(float(air.ny(p, T)/air.Pr(T)))


def test_inverse_lookup_round_trip(air):
    T = np.array([260.0, 300.0, 750.0, 1400.0])
    np.testing.assert_allclose(air.T_h(air.h(T)), T)


def test_inverse_lookup_outside_table_is_nan(air, table):
    assert np.isnan(air.T_h(table.h[-1] + 1.0))


def test_table_requires_increasing_temperatures(table):
    cols = {k: getattr(table, k) for k in table.__dataclass_fields__}
    cols["T"] = cols["T"][::-1]
    with pytest.raises(ValueError):
        DryAirTable(**cols)


def test_table_requires_matching_columns(table):
    cols = {k: getattr(table, k) for k in table.__dataclass_fields__}
    cols["eta"] = cols["eta"][:-1]
    with pytest.raises(ValueError):
        DryAirTable(**cols)


def test_table_is_read_only(table):
    with pytest.raises(ValueError):
        table.T[0] = 1.0


def test_interpolants_are_built_once(table):
    assert table.interpolant("eta") is table.interpolant("eta")
    assert table.inverse_interpolant("h") is table.inverse_interpolant("h")
    air = DryAir(table)
    assert float(air.T_h(air.h(400.0))) == pytest.approx(400.0)
    assert table.inverse_interpolant("h") is table.inverse_interpolant("h")


# Reference table sampled from CoolProp

def test_default_table_is_built_once():
    assert dry_air.load_dry_air_table() is dry_air.load_dry_air_table()
    assert dry_air.default_air() is dry_air.default_air()


def test_reference_values_near_ambient():
    air = dry_air.default_air()
    assert float(air.eta(300.0)) == pytest.approx(1.85e-5, rel=0.03)
    assert float(air.lam(300.0)) == pytest.approx(0.0263, rel=0.03)
    assert float(air.Pr(300.0)) == pytest.approx(0.707, rel=0.03)
    assert float(air.c_p(300.0)) == pytest.approx(1006.0, rel=0.01)
    assert float(air.kappa(300.0)) == pytest.approx(1.40, rel=0.01)
    assert float(air.h(273.15)) == pytest.approx(0.0, abs=1e-6)


def test_reference_round_trip():
    air = dry_air.default_air()
    T = np.array([300.0, 500.0, 800.0, 1200.0])
    np.testing.assert_allclose(air.T_h(air.h(T)), T, atol=0.5)


def test_reference_out_of_range_is_nan():
    air = dry_air.default_air()
    assert np.all(np.isnan(air.eta(np.array([100.0, 2000.0]))))


def test_module_shortcuts_use_default_table():
    air = dry_air.default_air()
    T = np.array([300.0, 600.0])
    np.testing.assert_array_equal(dry_air.eta(T), air.eta(T))
    np.testing.assert_array_equal(dry_air.Pr(T), air.Pr(T))
    np.testing.assert_array_equal(dry_air.rho(1e5, T), air.rho(1e5, T))
    np.testing.assert_array_equal(dry_air.T_h(dry_air.h(T)), air.T_h(air.h(T)))
