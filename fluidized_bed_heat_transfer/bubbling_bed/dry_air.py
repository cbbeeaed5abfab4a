"""Thermophysical properties of dry air as an ideal gas.

Properties other than the density are looked up in a temperature-indexed
reference table by piecewise-linear interpolation. The table holds the
VDI Heat Atlas dry-air data at p = 1 bar; it is sampled once per process
from CoolProp's ``Air`` fluid, which implements the same formulation
(Lemmon et al. equation of state, Lemmon & Jacobsen transport
properties).

Temperatures or enthalpies outside the sampled range yield NaN instead of
raising, so that array calls with a few bad elements still return the
valid ones.

Note: Requires CoolProp when the default table is used.

Module Summary:
- Classes:
    - ``DryAirTable``: Immutable reference table (T, rho, h, s, c_p, c_v, beta, w_s, lam, eta, ny, a, Pr).
    - ``DryAir``: Property functions bound to a ``DryAirTable``.
- Functions:
    - ``sample_coolprop_table(T_C, p)``: Build a ``DryAirTable`` from CoolProp.
    - ``load_dry_air_table()``: Process-wide default table, built once.
    - ``default_air()``: Process-wide ``DryAir`` instance using the default table.
    - ``rho``, ``h``, ``lam``, ``eta``, ``Pr``, ...: Shortcuts to the methods of ``default_air()``.
"""

import logging
import threading
from dataclasses import dataclass, fields
from typing import Optional

import numpy as np
from scipy.interpolate import interp1d
from CoolProp.CoolProp import PropsSI

from ..implicit_expansion import C2K, infer_shape, normalize

logger = logging.getLogger(__name__)

M = 28.9583e-3      # Molar mass, kg/mol
R = 287.12          # Specific gas constant, J/kg/K
P_TABLE = 1e5       # Pressure of the reference table, Pa

# Temperature grid of the reference table, °C
T_GRID_C = np.concatenate([
    np.arange(-50.0, 200.0, 10.0),
    np.arange(200.0, 400.0, 20.0),
    np.arange(400.0, 1201.0, 50.0),
])


@dataclass(frozen=True)
class DryAirTable:
    """Dry-air reference table, one row per temperature.

    All columns in SI base units. ``lam`` is the thermal conductivity.
    Arrays are made read-only on construction, and the forward
    interpolants of all columns are built once at the same time.
    """
    T: np.ndarray
    rho: np.ndarray
    h: np.ndarray
    s: np.ndarray
    c_p: np.ndarray
    c_v: np.ndarray
    beta: np.ndarray
    w_s: np.ndarray
    lam: np.ndarray
    eta: np.ndarray
    ny: np.ndarray
    a: np.ndarray
    Pr: np.ndarray

    def __post_init__(self):
        for f in fields(self):
            col = np.array(getattr(self, f.name), dtype=float)
            if col.shape != np.shape(self.T):
                raise ValueError(f"Column {f.name} has shape {col.shape}, expected {np.shape(self.T)}")
            col.setflags(write=False)
            object.__setattr__(self, f.name, col)

        if self.T.ndim != 1 or self.T.size < 2 or np.any(np.diff(self.T) <= 0):
            raise ValueError("Table temperatures must be a strictly increasing 1D sequence")

        forward = {f.name: interp1d(self.T, getattr(self, f.name), bounds_error=False,
                                    fill_value=np.nan, assume_sorted=True)
                   for f in fields(self)}
        object.__setattr__(self, "_forward", forward)
        object.__setattr__(self, "_inverse", {})
        object.__setattr__(self, "_inverse_lock", threading.Lock())

    def interpolant(self, column: str) -> interp1d:
        """Interpolant T -> ``column``, built once per table."""
        return self._forward[column]

    def inverse_interpolant(self, column: str) -> interp1d:
        """Interpolant ``column`` -> T, built on first use and kept."""
        with self._inverse_lock:
            if column not in self._inverse:
                self._inverse[column] = interp1d(getattr(self, column), self.T, bounds_error=False,
                                                 fill_value=np.nan)
            return self._inverse[column]

    def interpolate(self, column: str, T) -> np.ndarray:
        """Piecewise-linear lookup of ``column`` at temperature(s) ``T``; NaN outside the table."""
        return self.interpolant(column)(np.asarray(T, dtype=float))

    def interpolate_inverse(self, column: str, y) -> np.ndarray:
        """Temperature at which ``column`` takes the value(s) ``y``; NaN outside the table.

        Only well defined if ``column`` is monotonic over the table. For
        non-monotonic columns the result depends on the sort order of the
        samples and is not corrected.
        """
        return self.inverse_interpolant(column)(np.asarray(y, dtype=float))


def sample_coolprop_table(T_C: np.ndarray = T_GRID_C, p: float = P_TABLE) -> DryAirTable:
    """Sample the dry-air reference table from CoolProp.

    Args:
        T_C: Temperature grid (°C), strictly increasing
        p: Pressure of the table (Pa), default 1 bar

    Returns:
        ``DryAirTable`` with specific enthalpy and entropy referenced to
        zero at 0 °C.
    """
    T = C2K(np.asarray(T_C, dtype=float))
    logger.debug("Sampling dry-air table from CoolProp: %d points, %.1f-%.1f K at %.0f Pa",
                 T.size, T[0], T[-1], p)

    def props(key: str) -> np.ndarray:
        return np.array([PropsSI(key, "T", Ti, "P", p, "Air") for Ti in T])

    rho = props("Dmass")
    c_p = props("Cpmass")
    lam = props("conductivity")
    eta = props("viscosity")

    # Reference state: h = 0, s = 0 at 0 °C
    h0 = PropsSI("Hmass", "T", C2K(0.0), "P", p, "Air")
    s0 = PropsSI("Smass", "T", C2K(0.0), "P", p, "Air")

    return DryAirTable(
        T=T,
        rho=rho,
        h=props("Hmass") - h0,
        s=props("Smass") - s0,
        c_p=c_p,
        c_v=props("Cvmass"),
        beta=props("isobaric_expansion_coefficient"),
        w_s=props("speed_of_sound"),
        lam=lam,
        eta=eta,
        ny=eta/rho,
        a=lam/(rho*c_p),
        Pr=props("Prandtl"),
    )


_table_lock = threading.Lock()
_default_table: Optional[DryAirTable] = None
_default_air: Optional["DryAir"] = None


def load_dry_air_table() -> DryAirTable:
    """Return the process-wide default table, sampling it on first use.

    Thread-safe: concurrent first calls build the table only once. The
    table is never modified afterwards.
    """
    global _default_table
    with _table_lock:
        if _default_table is None:
            _default_table = sample_coolprop_table()
    return _default_table


class DryAir:
    """Property functions of dry air. All parameters and results in SI base units.

    Args:
        table: Reference table. If None, the process-wide default table is
            loaded on first access.
    """
    M = M
    R = R

    def __init__(self, table: Optional[DryAirTable] = None):
        self._table = table

    @property
    def table(self) -> DryAirTable:
        if self._table is None:
            self._table = load_dry_air_table()
        return self._table

    # prop(p, T) functions

    def rho(self, p, T) -> np.ndarray:
        """Density from the ideal gas law."""
        sz = infer_shape(p, T)
        p, T = normalize(sz, p, T)
        with np.errstate(divide="ignore", invalid="ignore"):
            return (p/(self.R*T)).reshape(sz)

    def ny(self, p, T) -> np.ndarray:
        """Kinematic viscosity."""
        sz = infer_shape(p, T)
        p, T = normalize(sz, p, T)
        with np.errstate(divide="ignore", invalid="ignore"):
            return (self.eta(T)/self.rho(p, T)).reshape(sz)

    def a(self, p, T) -> np.ndarray:
        """Thermal diffusivity."""
        sz = infer_shape(p, T)
        p, T = normalize(sz, p, T)
        with np.errstate(divide="ignore", invalid="ignore"):
            return (self.ny(p, T)/self.Pr(T)).reshape(sz)

    # prop(T) functions

    def h(self, T) -> np.ndarray:
        """Specific enthalpy, zero at 0 °C."""
        return self.table.interpolate("h", T)

    def s(self, T) -> np.ndarray:
        # Does not account for pressure variations
        return self.table.interpolate("s", T)

    def c_p(self, T) -> np.ndarray:
        return self.table.interpolate("c_p", T)

    def c_v(self, T) -> np.ndarray:
        return self.table.interpolate("c_v", T)

    def kappa(self, T) -> np.ndarray:
        """Isentropic exponent c_p/c_v."""
        return self.c_p(T)/self.c_v(T)

    def beta(self, T) -> np.ndarray:
        """Coefficient of thermal expansion."""
        return self.table.interpolate("beta", T)

    def w_s(self, T) -> np.ndarray:
        """Speed of sound."""
        return self.table.interpolate("w_s", T)

    def lam(self, T) -> np.ndarray:
        """Thermal conductivity."""
        return self.table.interpolate("lam", T)

    def eta(self, T) -> np.ndarray:
        """Dynamic viscosity."""
        return self.table.interpolate("eta", T)

    def Pr(self, T) -> np.ndarray:
        """Prandtl number."""
        return self.table.interpolate("Pr", T)

    # Backward equations

    def T_h(self, h) -> np.ndarray:
        """Temperature as a function of specific enthalpy."""
        return self.table.interpolate_inverse("h", h)


def default_air() -> DryAir:
    """Process-wide ``DryAir`` instance bound to ``load_dry_air_table()``."""
    global _default_air
    with _table_lock:
        if _default_air is None:
            _default_air = DryAir()
    return _default_air


# Module-level shortcuts to the default instance

def rho(p, T):
    return default_air().rho(p, T)


def ny(p, T):
    return default_air().ny(p, T)


def a(p, T):
    return default_air().a(p, T)


def h(T):
    return default_air().h(T)


def s(T):
    return default_air().s(T)


def c_p(T):
    return default_air().c_p(T)


def c_v(T):
    return default_air().c_v(T)


def kappa(T):
    return default_air().kappa(T)


def beta(T):
    return default_air().beta(T)


def w_s(T):
    return default_air().w_s(T)


def lam(T):
    return default_air().lam(T)


def eta(T):
    return default_air().eta(T)


def Pr(T):
    return default_air().Pr(T)


def T_h(h):
    return default_air().T_h(h)
