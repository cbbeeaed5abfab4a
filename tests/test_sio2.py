import numpy as np
import pytest

from fluidized_bed_heat_transfer.bubbling_bed import sio2
from fluidized_bed_heat_transfer.bubbling_bed.sio2 import LIMITS, Phase


@pytest.mark.parametrize("phase", list(Phase))
def test_phase_partition_is_total_inside_range(phase):
    lim = LIMITS[phase]
    T = np.concatenate([np.linspace(lim.T_min, lim.T_melt, 501), [lim.T_trans, lim.T_alpha_max]])
    alpha, beta = sio2.phases(T, phase)
    assert np.all(alpha ^ beta)


@pytest.mark.parametrize("phase", list(Phase))
def test_outside_range_is_in_no_phase(phase):
    lim = LIMITS[phase]
    T = np.array([lim.T_min - 1.0, lim.T_melt + 1.0, np.nan])
    alpha, beta = sio2.phases(T, phase)
    assert not np.any(alpha | beta)
    assert np.all(np.isnan(sio2.c_p(T, phase)))
    assert np.all(np.isnan(sio2.rho(T, phase)))


def test_transition_temperature_belongs_to_beta():
    alpha, beta = sio2.phases(847.0)
    assert not alpha and beta


def test_quartz_is_default_phase():
    np.testing.assert_array_equal(sio2.c_p([300.0, 900.0]), sio2.c_p([300.0, 900.0], "quartz"))


def test_unknown_phase_raises():
    with pytest.raises(ValueError):
        sio2.c_p(300.0, "glass")


def test_quartz_heat_capacity_and_entropy_at_reference():
    assert float(sio2.c_p(298.15)) == pytest.approx(742.0, rel=1e-3)
    assert float(sio2.s(298.15)) == pytest.approx(690.0, rel=1e-3)


def test_heat_capacities_are_positive():
    for phase in Phase:
        lim = LIMITS[phase]
        T = np.linspace(max(lim.T_min, 10.0), lim.T_melt, 200)
        assert np.all(sio2.c_p(T, phase) > 0)


def test_densities():
    np.testing.assert_array_equal(sio2.rho([300.0, 900.0]), [2648.0, 2533.0])
    np.testing.assert_array_equal(sio2.rho([300.0, 400.0], Phase.TRIDYMITE), [2265.0, 2185.0])
    np.testing.assert_array_equal(sio2.rho([300.0, 600.0], "cristobalite"), [2334.0, 2448.0])


def test_enthalpy_reference_point():
    # Offset left by the normalization constant of the quartz correlation
    assert float(sio2.h(298.15)) == pytest.approx(-50.97, abs=0.01)
    assert float(sio2.h(298.15, Phase.TRIDYMITE)) == pytest.approx(0.0, abs=1e-6)
    assert float(sio2.h(298.15, Phase.CRISTOBALITE)) == pytest.approx(0.0, abs=1e-6)


def test_enthalpy_slope_matches_heat_capacity():
    for phase in Phase:
        T = 700.0 if phase is not Phase.CRISTOBALITE else 400.0
        dh = float(sio2.h(T + 0.5, phase) - sio2.h(T - 0.5, phase))
        assert dh == pytest.approx(float(sio2.c_p(T, phase)), rel=1e-3)


@pytest.mark.parametrize("phase", [Phase.TRIDYMITE, Phase.CRISTOBALITE])
def test_latent_heat_at_transition(phase):
    lim = LIMITS[phase]
    jump = float(sio2.h(lim.T_trans, phase) - sio2.h(lim.T_alpha_max, phase))
    assert jump == pytest.approx(lim.dh_trans, abs=1.0)


def test_tables_are_built_once():
    assert sio2.load_enthalpy_tables() is sio2.load_enthalpy_tables()


@pytest.mark.parametrize("phase", list(Phase))
def test_inverse_round_trip(phase):
    lim = LIMITS[phase]
    T = np.array([max(lim.T_min, 20.0) + 30.0, lim.T_trans - 20.0, lim.T_trans + 20.0, lim.T_melt - 50.0])
    np.testing.assert_allclose(sio2.T_h(sio2.h(T, phase), phase), T, atol=0.1)


@pytest.mark.parametrize("phase", list(Phase))
def test_inverse_transition_plateau(phase):
    h_alpha_min, h_alpha_max, h_beta_min, h_beta_max = sio2.load_enthalpy_tables().bands[phase]
    assert h_alpha_max < h_beta_min
    assert float(sio2.T_h(0.5*(h_alpha_max + h_beta_min), phase)) == LIMITS[phase].T_trans


@pytest.mark.parametrize("phase", list(Phase))
def test_inverse_outside_bands_is_nan(phase):
    h_alpha_min, _, _, h_beta_max = sio2.load_enthalpy_tables().bands[phase]
    out = sio2.T_h(np.array([h_alpha_min - 1e4, h_beta_max + 1e4]), phase)
    assert np.all(np.isnan(out))
