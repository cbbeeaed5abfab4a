"""Thermophysical properties of silicon dioxide (SiO2) particles.

Correlations for quartz, tridymite and cristobalite, each split into an
alpha and a beta sub-phase at its transition temperature. Quartz uses
Shomate-type correlations that integrate in closed form; tridymite and
cristobalite enthalpies are tabulated once by integrating their heat
capacities numerically. Inverse functions (enthalpy to temperature) use
monotonic lookup tables built on the same grids.

Elements outside the valid temperature (or enthalpy) range of the selected
phase are returned as NaN.

Reference:
    Thanheiser, S. Dissertation, TU Wien (2023).

Module Summary:
- Classes:
    - ``Phase``: Closed set of SiO2 phases ('quartz', 'tridymite', 'cristobalite').
    - ``PhaseLimits``: Temperature bounds, transition temperature and densities of a phase.
    - ``EnthalpyTables``: Lookup tables for tridymite / cristobalite h(T) and all T(h).
- Functions:
    - ``phases(T, phase)``: Boolean alpha / beta masks.
    - ``c_p(T, phase)``, ``h(T, phase)``, ``s(T)``, ``rho(T, phase)``: Properties.
    - ``T_h(h, phase)``: Temperature from specific enthalpy.
    - ``load_enthalpy_tables()``: Process-wide lookup tables, built once.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union

import numpy as np
from scipy.integrate import cumulative_trapezoid
from scipy.interpolate import interp1d

logger = logging.getLogger(__name__)

M = 60.0843e-3      # Molar mass, kg/mol
T0 = 298.15         # Zero reference point for enthalpy, K
N_GRID = 10000      # Points per sub-phase in the lookup tables


class Phase(str, Enum):
    QUARTZ = "quartz"
    TRIDYMITE = "tridymite"
    CRISTOBALITE = "cristobalite"


@dataclass(frozen=True)
class PhaseLimits:
    T_min: float        # Minimum temperature of the correlations, K
    T_trans: float      # Alpha-beta transition temperature, K
    T_melt: float       # Melting temperature, K
    rho_alpha: float    # Density of the alpha phase, kg/m³
    rho_beta: float     # Density of the beta phase, kg/m³
    dh_trans: float     # Latent heat of the alpha-beta transition, J/kg

    @property
    def T_alpha_max(self) -> float:
        # Largest temperature still in the alpha phase
        return self.T_trans - np.spacing(self.T_trans)


LIMITS: Dict[Phase, PhaseLimits] = {
    Phase.QUARTZ: PhaseLimits(100.0, 847.0, 1696.0, 2648.0, 2533.0, np.nan),
    Phase.TRIDYMITE: PhaseLimits(298.0, 390.0, 1743.0, 2265.0, 2185.0, 2785.0),
    Phase.CRISTOBALITE: PhaseLimits(0.0, 543.0, 1996.0, 2334.0, 2448.0, 22353.0),
}

# Shomate coefficients of quartz, T in kK, results per mol
_QUARTZ_ALPHA = dict(A=-6.076591, B=251.6755, C=-324.7964, D=168.5604, E=0.002548,
                     F=-917.6893, G=-27.96962)
_QUARTZ_BETA = dict(A=58.75340, B=10.27925, C=-0.131384, D=0.025210, E=0.025601,
                    F=-929.3292, G=105.8092)
_H_QUARTZ = -910.8568   # Normalization constant, h(298.15 K) ≈ 0

# Tridymite
_A_TRI = 3.27*4.184/M
_B_TRI = 24.8e-3*4.184/M
_C_TRI = 74.904/M
_D_TRI = 3.0999e-3/M
_E_TRI = -2.3669e2/M
_F_TRI = -1.174e6/M

# Cristobalite
_A_CRI = -0.0025
_B_CRI = 3.2550
_C_CRI = -9.5255
_D_CRI = -8.5069e+06
_E_CRI = -1.6403
_F_CRI = 1.2666e+03

PhaseLike = Union[Phase, str]


def phases(T, phase: PhaseLike = Phase.QUARTZ) -> Tuple[np.ndarray, np.ndarray]:
    """Partition temperatures into the alpha and beta sub-phase.

    Args:
        T: Temperature(s) (K)
        phase: SiO2 phase, default quartz

    Returns:
        Tuple of boolean masks (alpha, beta) shaped like ``T``:
            - alpha: T_min <= T < T_trans
            - beta: T_trans <= T <= T_melt
        Elements outside [T_min, T_melt] (or NaN) are in neither mask.

    Raises:
        ValueError: If ``phase`` is not a known phase tag.
    """
    lim = LIMITS[Phase(phase)]
    T = np.asarray(T, dtype=float)
    alpha = (lim.T_min <= T) & (T < lim.T_trans)
    beta = (lim.T_trans <= T) & (T <= lim.T_melt)
    return alpha, beta


def _c_p_quartz(t, A, B, C, D, E, **_):
    return (A + B*t + C*t**2 + D*t**3 + E/t**2)/M


def _h_quartz(t, A, B, C, D, E, F, **_):
    return (A*t + B*t**2/2 + C*t**3/3 + D*t**4/4 - E/t + F - _H_QUARTZ)/M*1000


def _s_quartz(t, A, B, C, D, E, G, **_):
    return (A*np.log(t) + B*t + C*t**2/2 + D*t**3/3 - E/(2*t**2) + G)/M


def c_p(T, phase: PhaseLike = Phase.QUARTZ) -> np.ndarray:
    """Specific isobaric heat capacity (J/kg/K).

    Note:
        - Quartz: Shomate polynomial in T/1000 per branch
        - Tridymite: linear (alpha), linear plus T^-0.5 and T^-2 terms (beta)
        - Cristobalite: quadratic (alpha), power law (beta)
    """
    phase = Phase(phase)
    T = np.asarray(T, dtype=float)
    alpha, beta = phases(T, phase)
    out = np.full(T.shape, np.nan)

    if phase is Phase.QUARTZ:
        t = T/1000
        out[alpha] = _c_p_quartz(t[alpha], **_QUARTZ_ALPHA)
        out[beta] = _c_p_quartz(t[beta], **_QUARTZ_BETA)
    elif phase is Phase.TRIDYMITE:
        Tb = T[beta]
        out[alpha] = _A_TRI + _B_TRI*T[alpha]
        out[beta] = _C_TRI + _D_TRI*Tb + _E_TRI*Tb**-0.5 + _F_TRI*Tb**-2
    else:
        Ta = T[alpha]
        out[alpha] = _A_CRI*Ta**2 + _B_CRI*Ta + _C_CRI
        out[beta] = _D_CRI*T[beta]**_E_CRI + _F_CRI
    return out


def rho(T, phase: PhaseLike = Phase.QUARTZ) -> np.ndarray:
    """Particle density (kg/m³), constant per sub-phase."""
    lim = LIMITS[Phase(phase)]
    alpha, beta = phases(T, phase)
    out = np.full(alpha.shape, np.nan)
    out[alpha] = lim.rho_alpha
    out[beta] = lim.rho_beta
    return out


def s(T) -> np.ndarray:
    """Specific entropy of quartz (J/kg/K)."""
    T = np.asarray(T, dtype=float)
    alpha, beta = phases(T, Phase.QUARTZ)
    t = T/1000
    out = np.full(T.shape, np.nan)
    out[alpha] = _s_quartz(t[alpha], **_QUARTZ_ALPHA)
    out[beta] = _s_quartz(t[beta], **_QUARTZ_BETA)
    return out


@dataclass(frozen=True)
class EnthalpyTables:
    """Lookup tables built once from the heat-capacity correlations.

    ``h_T`` maps (phase, branch) to an h(T) interpolant for tridymite and
    cristobalite. ``T_h`` maps (phase, branch) to a T(h) interpolant for
    all phases. ``bands`` holds (h_alpha_min, h_alpha_max, h_beta_min,
    h_beta_max) per phase.
    """
    h_T: Dict[Tuple[Phase, str], interp1d]
    T_h: Dict[Tuple[Phase, str], interp1d]
    bands: Dict[Phase, Tuple[float, float, float, float]]


def _lookup(x: np.ndarray, y: np.ndarray) -> interp1d:
    return interp1d(x, y, bounds_error=False, fill_value=np.nan)


def build_enthalpy_tables(n: int = N_GRID) -> EnthalpyTables:
    """Integrate the heat capacities and build the enthalpy lookup tables.

    Tridymite and cristobalite enthalpies are anchored at h(298.15 K) = 0
    on the alpha branch. The beta branch continues from the end of the
    alpha branch plus the latent heat of the transition.

    Args:
        n: Number of grid points per sub-phase

    Returns:
        ``EnthalpyTables``
    """
    logger.debug("Building SiO2 enthalpy tables with %d points per sub-phase", n)
    h_T = {}
    T_h = {}
    bands = {}

    for phase, lim in LIMITS.items():
        T_alpha = np.linspace(lim.T_min, lim.T_alpha_max, n)
        T_beta = np.linspace(lim.T_trans, lim.T_melt, n)

        if phase is Phase.QUARTZ:
            h_alpha = h(T_alpha, phase)
            h_beta = h(T_beta, phase)
        else:
            h_alpha = cumulative_trapezoid(c_p(T_alpha, phase), T_alpha, initial=0)
            h_alpha = h_alpha - np.interp(T0, T_alpha, h_alpha)
            h_beta = cumulative_trapezoid(c_p(T_beta, phase), T_beta, initial=0)
            h_beta = h_beta + h_alpha[-1] + lim.dh_trans

            h_T[phase, "alpha"] = _lookup(T_alpha, h_alpha)
            h_T[phase, "beta"] = _lookup(T_beta, h_beta)

        T_h[phase, "alpha"] = _lookup(h_alpha, T_alpha)
        T_h[phase, "beta"] = _lookup(h_beta, T_beta)
        bands[phase] = (float(h_alpha[0]), float(h_alpha[-1]), float(h_beta[0]), float(h_beta[-1]))

    return EnthalpyTables(h_T=h_T, T_h=T_h, bands=bands)


_tables_lock = threading.Lock()
_tables: Optional[EnthalpyTables] = None


def load_enthalpy_tables() -> EnthalpyTables:
    """Return the process-wide enthalpy tables, building them on first use (thread-safe)."""
    global _tables
    with _tables_lock:
        if _tables is None:
            _tables = build_enthalpy_tables()
    return _tables


def h(T, phase: PhaseLike = Phase.QUARTZ) -> np.ndarray:
    """Specific enthalpy (J/kg), h(298.15 K) = 0.

    Quartz is evaluated in closed form; tridymite and cristobalite are
    interpolated in the tables of ``load_enthalpy_tables()``, which are
    anchored exactly. The quartz zero point is approximate: the
    normalization constant of the correlation leaves h(298.15 K) at about
    -51 J/kg.
    """
    phase = Phase(phase)
    T = np.asarray(T, dtype=float)
    alpha, beta = phases(T, phase)
    out = np.full(T.shape, np.nan)

    if phase is Phase.QUARTZ:
        t = T/1000
        out[alpha] = _h_quartz(t[alpha], **_QUARTZ_ALPHA)
        out[beta] = _h_quartz(t[beta], **_QUARTZ_BETA)
    else:
        tables = load_enthalpy_tables()
        out[alpha] = tables.h_T[phase, "alpha"](T[alpha])
        out[beta] = tables.h_T[phase, "beta"](T[beta])
    return out


def T_h(h, phase: PhaseLike = Phase.QUARTZ) -> np.ndarray:
    """Temperature (K) as a function of specific enthalpy.

    Enthalpies between the end of the alpha branch and the start of the
    beta branch (the latent heat of the transition) map to the transition
    temperature. Enthalpies outside all bands yield NaN.
    """
    phase = Phase(phase)
    h = np.asarray(h, dtype=float)
    tables = load_enthalpy_tables()
    h_alpha_min, h_alpha_max, h_beta_min, h_beta_max = tables.bands[phase]

    alpha = (h_alpha_min <= h) & (h <= h_alpha_max)
    trans = (h_alpha_max < h) & (h < h_beta_min)
    beta = (h_beta_min <= h) & (h <= h_beta_max)

    out = np.full(h.shape, np.nan)
    out[alpha] = tables.T_h[phase, "alpha"](h[alpha])
    out[trans] = LIMITS[phase].T_trans
    out[beta] = tables.T_h[phase, "beta"](h[beta])
    return out
