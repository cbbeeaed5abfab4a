"""Fluidization quantities of a bubbling fluidized bed fluidized with dry air.

All parameters and results in SI base units. Inputs may be scalars or
arrays of any implicitly expandable shapes (see ``implicit_expansion``);
results have the expanded shape.

Module Summary:
- Constants:
    - ``g``: Gravitational acceleration (m/s²).
- Functions:
    - ``Ar(d_p, rho_p, p, T)``: Archimedes number.
    - ``Re(d_p, w, p, T)``: Particle Reynolds number.
    - ``wmf(d_p, rho_p, p, T)``: Minimum fluidization velocity, Richardson approximation.
    - ``wmf_ergun(d_p, rho_p, phi_s, eps_mf, p, T)``: Minimum fluidization velocity, Ergun equation.
    - ``phi_s(wmf, d_p, rho_p, eps_mf, p, T)``: Effective sphericity from a measured wmf.
    - ``eps(delta_p, delta_h, rho_p)``: Bed porosity between two submerged pressure taps.
    - ``bed_level(delta_p, eps, rho_p)``: Bed level above the lower pressure tap.
    - ``delta_p(delta_h, eps, rho_p)``: Pressure drop across a bed height.
    - ``porosity(w0, eps_mf, pitch, d_p, rho_p, p, T, d_H, z)``: Bubbling-bed porosity and bubble diameter.
    - ``Gamma(w, href, d_p, rho_p, p, T)``: Horizontal particle mass diffusivity.
"""

import warnings
from typing import Optional, Tuple, Union

import numpy as np
from scipy.optimize import brentq

from ..implicit_expansion import infer_shape, normalize
from .dry_air import DryAir, default_air

g = 9.81  # Gravitational acceleration, m/s²

# Richardson (1971) constants of the wmf approximation, see Kunii & Levenspiel,
# Fluidization Engineering, 2nd ed., p. 70. They correspond to phi_s = 1,
# eps_mf = 0.4 or roughly to phi_s = 0.8, eps_mf = 0.45.
C1_RICHARDSON = 25.7
C2_RICHARDSON = 0.0365

# Mass diffusivity fit
GAMMA_C = 24968.3343446693
GAMMA_A = 1.07653015217829
GAMMA_HREF0 = 1.0


def Ar(d_p, rho_p, p, T, air: Optional[DryAir] = None) -> np.ndarray:
    """Archimedes number with dry air as fluidizing gas.

    Ar = rho_g*d_p³*(rho_p - rho_g)*g / eta²

    Args:
        d_p: Particle diameter (m)
        rho_p: Particle density (kg/m³)
        p: Pressure (Pa)
        T: Gas temperature (K)
        air: Dry-air property functions, default ``default_air()``

    Returns:
        Archimedes number (dimensionless); NaN where T is outside the air table
    """
    air = air or default_air()
    sz = infer_shape(d_p, rho_p, p, T)
    d_p, rho_p, p, T = normalize(sz, d_p, rho_p, p, T)

    rho_g = air.rho(p, T)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = rho_g*d_p**3*(rho_p - rho_g)*g/air.eta(T)**2
    return out.reshape(sz)


def Re(d_p, w, p, T, air: Optional[DryAir] = None) -> np.ndarray:
    """Reynolds number with respect to the particle diameter, Re = d_p*w/ny."""
    air = air or default_air()
    sz = infer_shape(d_p, w, p, T)
    d_p, w, p, T = normalize(sz, d_p, w, p, T)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = d_p*w/air.ny(p, T)
    return out.reshape(sz)


def wmf(d_p, rho_p, p, T, air: Optional[DryAir] = None,
        return_all: bool = False) -> Union[np.ndarray, Tuple[np.ndarray, np.ndarray]]:
    """Minimum fluidization velocity, approximation to the Ergun equation.

    Uses Re_mf = sqrt(C1² + C2*Ar) - C1 with Richardson's constants, which
    avoids specifying the sphericity and porosity at minimum fluidization.

    Args:
        d_p: Particle diameter (m)
        rho_p: Particle density (kg/m³)
        p: Pressure (Pa)
        T: Gas temperature (K)
        air: Dry-air property functions, default ``default_air()``
        return_all: If True, also return the Reynolds number

    Returns:
        wmf (m/s), or the tuple (wmf, Re_mf) if ``return_all``
    """
    air = air or default_air()
    sz = infer_shape(d_p, rho_p, p, T)
    d_p, rho_p, p, T = normalize(sz, d_p, rho_p, p, T)

    ar = Ar(d_p, rho_p, p, T, air=air)
    with np.errstate(divide="ignore", invalid="ignore"):
        Re_mf = np.sqrt(C1_RICHARDSON**2 + C2_RICHARDSON*ar) - C1_RICHARDSON
        w = Re_mf*air.eta(T)/(d_p*air.rho(p, T))

    if return_all:
        return w.reshape(sz), Re_mf.reshape(sz)
    return w.reshape(sz)


def wmf_ergun(d_p, rho_p, phi_s, eps_mf, p, T, air: Optional[DryAir] = None,
              return_all: bool = False):
    """Minimum fluidization velocity according to the Ergun equation.

    Solves K1*Re² + K2*Re = Ar for its positive root with
    K1 = 1.75/(phi_s*eps_mf³) and K2 = 150*(1 - eps_mf)/(phi_s²*eps_mf³).

    Args:
        d_p: Particle diameter (m)
        rho_p: Particle density (kg/m³)
        phi_s: Particle sphericity (dimensionless)
        eps_mf: Bed porosity at minimum fluidization (dimensionless)
        p: Pressure (Pa)
        T: Gas temperature (K)
        air: Dry-air property functions, default ``default_air()``
        return_all: If True, also return Re_mf and Ar

    Returns:
        wmf (m/s), or the tuple (wmf, Re_mf, Ar) if ``return_all``
    """
    air = air or default_air()
    sz = infer_shape(d_p, rho_p, phi_s, eps_mf, p, T)
    d_p, rho_p, phi_s, eps_mf, p, T = normalize(sz, d_p, rho_p, phi_s, eps_mf, p, T)

    ar = Ar(d_p, rho_p, p, T, air=air)
    with np.errstate(divide="ignore", invalid="ignore"):
        K1 = 1.75/(phi_s*eps_mf**3)
        K2 = 150*(1 - eps_mf)/(phi_s**2*eps_mf**3)

        C1 = K2/(2*K1)
        C2 = 1/K1
        Re_mf = -C1 + np.sqrt(C1**2 + C2*ar)

        w = Re_mf*air.eta(T)/(d_p*air.rho(p, T))

    if return_all:
        return w.reshape(sz), Re_mf.reshape(sz), ar.reshape(sz)
    return w.reshape(sz)


def phi_s(wmf: float, d_p: float, rho_p: float, eps_mf: float, p: float, T: float,
          air: Optional[DryAir] = None) -> Tuple[float, float, float]:
    """Effective sphericity from a measured minimum fluidization velocity.

    Finds phi_s in [0.1, 0.9] such that ``wmf_ergun`` reproduces the
    measurement. All values at minimum fluidization conditions; scalars only.

    Args:
        wmf: Measured minimum fluidization velocity (m/s)
        d_p: Particle diameter (m)
        rho_p: Particle density (kg/m³)
        eps_mf: Measured bed porosity at minimum fluidization
        p: Pressure (Pa)
        T: Gas temperature (K)
        air: Dry-air property functions, default ``default_air()``

    Returns:
        Tuple of (phi_s, C1, C2), where C1, C2 are the equivalent constants
        of the approximation Re_mf = sqrt(C1² + C2*Ar) - C1.

    Raises:
        ValueError: If no sphericity in [0.1, 0.9] matches ``wmf``.
    """
    air = air or default_air()

    def residual(phi):
        return float(wmf_ergun(d_p, rho_p, phi, eps_mf, p, T, air=air)) - wmf

    lo, hi = 0.1, 0.9
    r_lo, r_hi = residual(lo), residual(hi)
    if not np.isfinite(r_lo) or not np.isfinite(r_hi) or r_lo*r_hi > 0:
        raise ValueError(f"wmf={wmf} m/s is not reached by any sphericity in [{lo}, {hi}]")

    phi = brentq(residual, lo, hi)

    K1 = 1.75/(phi*eps_mf**3)
    K2 = 150*(1 - eps_mf)/(phi**2*eps_mf**3)
    return phi, K2/(2*K1), 1/K1


def eps(delta_p, delta_h, rho_p) -> np.ndarray:
    """Bed porosity when both pressure taps, delta_h apart vertically, are in the bed."""
    sz = infer_shape(delta_p, delta_h, rho_p)
    delta_p, delta_h, rho_p = normalize(sz, delta_p, delta_h, rho_p)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = 1 - delta_p/(rho_p*g*delta_h)
    return out.reshape(sz)


def bed_level(delta_p, eps, rho_p) -> np.ndarray:
    """Bed level above the lower pressure tap when the upper tap is not in the bed."""
    sz = infer_shape(delta_p, eps, rho_p)
    delta_p, eps, rho_p = normalize(sz, delta_p, eps, rho_p)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = delta_p/(rho_p*g*(1 - eps))
    return out.reshape(sz)


def delta_p(delta_h, eps, rho_p) -> np.ndarray:
    """Pressure drop across a fluidized bed of height delta_h."""
    sz = infer_shape(delta_h, eps, rho_p)
    delta_h, eps, rho_p = normalize(sz, delta_h, eps, rho_p)
    return (rho_p*g*delta_h*(1 - eps)).reshape(sz)


def porosity(w0, eps_mf, pitch, d_p, rho_p, p, T, d_H, z,
             air: Optional[DryAir] = None) -> Tuple[np.ndarray, np.ndarray]:
    """Porosity of a bubbling bed from a two-phase bubble model.

    The bubble diameter is the maximum bubble diameter within a tube bank,
    limited to the horizontal tube pitch. Bubble and emulsion phase are
    combined via the bubble fraction ("holdup").

    Args:
        w0: Superficial gas velocity (m/s)
        eps_mf: Bed porosity at minimum fluidization
        pitch: Horizontal tube pitch (m)
        d_p: Particle diameter (m)
        rho_p: Particle density (kg/m³)
        p: Pressure (Pa)
        T: Gas temperature (K)
        d_H: Hydraulic diameter of the floor, 4*l*w/(l + w) (m)
        z: Height above the distributor (m)
        air: Dry-air property functions, default ``default_air()``

    Returns:
        Tuple of (eps, d_b):
            - eps: Bed porosity (dimensionless)
            - d_b: Bubble diameter (m)

    Note:
        - d_H is limited to 1.2 m (Grace)
        - Initial bubble diameter 3.685/g*(w0 - wmf)² (Choi, after Miwa)
        - Maximum bubble diameter 2.59*(A*(w0 - wmf)/sqrt(g))^0.4 (Grace)
        - Bubble phase particle-free, emulsion at eps_mf (Kunii & Levenspiel)

    Warns:
        UserWarning: If bubbles are slower than the emulsion gas
            (w_b < wmf/eps_mf); the holdup may then be overestimated.
    """
    air = air or default_air()
    sz = infer_shape(w0, eps_mf, pitch, d_p, rho_p, p, T, d_H, z)
    w0, eps_mf, pitch, d_p, rho_p, p, T, d_H, z = normalize(sz, w0, eps_mf, pitch, d_p, rho_p, p, T, d_H, z)

    # Floor area based on hydraulic diameter
    d_H = np.minimum(d_H, 1.2)
    A = d_H**2*np.pi/4

    # Bubble diameter
    w_mf = wmf(d_p, rho_p, p, T, air=air)
    d_b0 = 3.685/g*(w0 - w_mf)**2
    d_bm = 2.59*(A*(w0 - w_mf)/g**0.5)**0.4
    d_b = d_bm - (d_bm - d_b0)*np.exp(-0.3*z/d_H)
    d_b = np.minimum(d_b, pitch)

    # Bubble velocity: single bubble rise velocity plus excess gas
    w_br = 0.711*np.sqrt(g*d_b)
    w_b = w0 - w_mf + w_br

    # Fraction of the bed in bubbles
    if np.any(w_b < w_mf/eps_mf):
        warnings.warn("w_b < wmf/eps_mf: bubbles may be slower than the emulsion gas, "
                      "the bubble fraction (holdup) may be overestimated", stacklevel=2)
    c = np.minimum((w_b*eps_mf/w_mf - 1)*w_mf/4, 2*w_mf)  # Smoothing factor
    delta = (w0 - w_mf)/(w_b + w_mf - c)

    eps_b = 1.0     # Bubble phase assumed particle-free
    eps_e = eps_mf  # Emulsion phase at minimum fluidization
    out = delta*eps_b + (1 - delta)*eps_e
    return out.reshape(sz), d_b.reshape(sz)


def Gamma(w, href, d_p, rho_p, p, T, air: Optional[DryAir] = None) -> np.ndarray:
    """Horizontal particle mass diffusivity (m²/s).

    Gamma = C*href/href0*pi^a*wmf*d_p with pi = (w - wmf)/wmf; zero where
    the bed is not fluidized (pi <= 0), NaN where wmf is undefined.
    """
    air = air or default_air()
    sz = infer_shape(w, href, d_p, rho_p, p, T)
    w, href, d_p, rho_p, p, T = normalize(sz, w, href, d_p, rho_p, p, T)

    w_mf = wmf(d_p, rho_p, p, T, air=air)
    with np.errstate(divide="ignore", invalid="ignore"):
        pi2 = (w - w_mf)/w_mf

    idx = pi2 > 0
    out = np.where(np.isnan(pi2), np.nan, 0.0)
    out[idx] = GAMMA_C*href[idx]/GAMMA_HREF0*pi2[idx]**GAMMA_A*w_mf[idx]*d_p[idx]
    return out.reshape(sz)
