"""Heat transfer between a bubbling fluidized bed and an immersed surface.

Implements the model of Molerus, which blends particle-convective and
gas-convective heat transfer according to the flow regime of the bed:

- laminar (Ar <= 1e2): pure particle convection
- mixed (1e2 < Ar < 1e5): mixed particle convection plus gas convection
- turbulent (1e5 <= Ar <= 1e8): gas convection

Each contribution is a closed-form maximum Nusselt number damped by a
saturating function of the excess gas velocity w - wmf. Particle
convection is scaled with the laminar length scale, gas convection with the
turbulent one.

Elements with w < wmf, or with an Archimedes number outside all three
regimes, are NaN in the regime-selected result.

Reference:
    Molerus, O.; Wirth, K.-E. Heat Transfer in Fluidized Beds. Springer
    Netherlands, 1997. Section and equation numbers in the comments refer
    to this book.

Module Summary:
- Classes:
    - ``MolerusResult``: Named bundle of the total and all branch values.
    - ``Regime``: Flow regime of the bed.
- Functions:
    - ``classify_regime(Ar)``: Boolean masks of the three regimes.
    - ``gas_damping(pi6, G1)`` / ``particle_damping(pi5, pi6, P1)``: Excess-velocity damping functions.
    - ``molerus(w, T_b, T_s, p, d_p, rho_p, eps_mf)``: Model with approximate wmf.
    - ``molerus_ergun(w, T_b, T_s, p, d_p, phi_s, eps_mf, rho_p=None)``: Model with Ergun wmf.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from ..implicit_expansion import infer_shape, normalize
from . import fluidization, sio2
from .dry_air import DryAir, default_air

g = fluidization.g

# Model constants
G1 = 0.05
G2 = 0.165
P1 = 25.0
P2 = 0.19
P1_AST = 33.3
P2_AST = 0.125

# Archimedes number limits of the flow regimes
AR_LAMINAR = 1e2
AR_TURBULENT = 1e5
AR_MAX = 1e8


class Regime(Enum):
    LAMINAR = "laminar"
    MIXED = "mixed"
    TURBULENT = "turbulent"


@dataclass(frozen=True)
class MolerusResult:
    """Nusselt numbers or heat transfer coefficients of the Molerus model.

    Attributes:
        total: Regime-selected value
        gcMax: Maximum gas convection
        pcMax: Maximum particle convection
        gc: Gas convection
        pcPure: Pure particle convection
        pcMix: Mixed particle convection
        mix: Mixed particle and gas convection
    """
    total: np.ndarray
    gcMax: np.ndarray
    pcMax: np.ndarray
    gc: np.ndarray
    pcPure: np.ndarray
    pcMix: np.ndarray
    mix: np.ndarray


def classify_regime(Ar) -> dict:
    """Boolean masks {Regime: mask} of the flow regimes for Archimedes number(s) ``Ar``.

    The bands do not overlap; NaN or Ar > 1e8 are in no band.
    """
    Ar = np.asarray(Ar, dtype=float)
    return {
        Regime.LAMINAR: Ar <= AR_LAMINAR,
        Regime.MIXED: (AR_LAMINAR < Ar) & (Ar < AR_TURBULENT),
        Regime.TURBULENT: (AR_TURBULENT <= Ar) & (Ar <= AR_MAX),
    }


def gas_damping(pi6, G1: float = G1) -> np.ndarray:
    """g(w_e) = 1/(1 + G1/pi6), Section 7.3."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return (1 + G1*np.asarray(pi6, dtype=float)**-1)**-1


def particle_damping(pi5, pi6, P1: float = P1) -> np.ndarray:
    """p(w_e) = 1/(1 + P1/(pi6^(1/3)*pi5)), Section 7.5.

    Increases monotonically from 0 towards 1 with the excess velocity.
    """
    pi5 = np.asarray(pi5, dtype=float)
    pi6 = np.asarray(pi6, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        return (1 + P1*(pi6**(1/3)*pi5)**-1)**-1


def _molerus(w, T_b, T_s, p, d_p, rho_p, eps_mf, w_mf, air: DryAir,
             G1=G1, G2=G2, P1=P1, P2=P2, P1_ast=P1_AST, P2_ast=P2_AST) -> Tuple[MolerusResult, MolerusResult]:
    # Inputs are flat arrays of equal length

    # Gas and particle properties
    k_g = air.lam(T_s)
    my = air.eta(T_b)
    c_p = sio2.c_p(T_b)
    rho_g = air.rho(p, T_b)
    rho_e = rho_p - rho_g   # Excess density

    with np.errstate(divide="ignore", invalid="ignore"):
        # Excess velocity, negative values are outside the model
        w_e = w - w_mf
        w_e[w_e < 0] = np.nan

        # Pi-factors, p. 70 (pi1 = Nu)
        pi2 = k_g/(2*c_p*my)
        pi3 = air.Pr(T_s)
        pi4 = rho_g/rho_e
        pi5 = (rho_p*c_p/(k_g*g))**(1/3)*w_e
        pi6 = w_e/w_mf
        pi7 = 1 - eps_mf

        # Flow length scales
        l_t = (my/np.sqrt(g*rho_e*rho_g))**(2/3)    # Eq. 4.25, p. 45
        turb2lam = pi4**(1/3)                       # Eq. 7.16, p. 64
        l_l = l_t*turb2lam

        # Maximum particle convection (laminar regime), Section 4.3, Eq. 7.13
        Nu_pcMax = P2*pi7/(1 + pi2)
        h_pcMax = Nu_pcMax*k_g/l_l

        # Maximum gas convection (turbulent regime), Section 4.4
        Nu_gcMax = G2*pi3**(1/3)
        h_gcMax = Nu_gcMax*k_g/l_t

        # Gas convection, Section 7.3
        Nu_gc = Nu_gcMax*gas_damping(pi6, G1)
        h_gc = Nu_gc*k_g/l_t

        # Pure particle convection, Section 7.5
        Nu_pcPure = Nu_pcMax*particle_damping(pi5, pi6, P1)
        h_pcPure = Nu_pcPure*k_g/l_l

        # Mixed particle convection, Section 7.6
        d = 0.28*pi2*pi7**2*np.sqrt(pi4)*pi5**2*pi6**-1
        Nu_pcMix = P2_ast*pi7/(1 + pi2 + d)*particle_damping(pi5, pi6, P1_ast)
        h_pcMix = Nu_pcMix*k_g/l_l

        # Mixed gas and particle convection, Section 7.6
        Nu_mix = Nu_pcMix + Nu_gc*turb2lam
        h_mix = Nu_mix*k_g/l_l

        # Flow regimes, Section 4
        regime = classify_regime(fluidization.Ar(d_p, rho_p, p, T_b, air=air))
        lam = regime[Regime.LAMINAR]
        mix = regime[Regime.MIXED]
        turb = regime[Regime.TURBULENT]

        Nu_total = np.full(w.shape, np.nan)
        Nu_total[lam] = Nu_pcPure[lam]
        Nu_total[mix] = Nu_mix[mix]
        Nu_total[turb] = Nu_gc[turb]*turb2lam[turb]
        h_total = Nu_total*k_g/l_l

    h = MolerusResult(total=h_total, gcMax=h_gcMax, pcMax=h_pcMax, gc=h_gc,
                      pcPure=h_pcPure, pcMix=h_pcMix, mix=h_mix)
    Nu = MolerusResult(total=Nu_total, gcMax=Nu_gcMax, pcMax=Nu_pcMax, gc=Nu_gc,
                       pcPure=Nu_pcPure, pcMix=Nu_pcMix, mix=Nu_mix)
    return h, Nu


def _reshape(result: MolerusResult, sz) -> MolerusResult:
    return MolerusResult(**{k: np.reshape(v, sz) for k, v in vars(result).items()})


def molerus(w, T_b, T_s, p, d_p, rho_p, eps_mf,
            air: Optional[DryAir] = None, **constants) -> Tuple[MolerusResult, MolerusResult]:
    """Heat transfer coefficient with wmf from the Richardson approximation.

    Gas conductivity and Prandtl number are evaluated at the surface
    temperature, viscosity, density and the particle heat capacity (quartz)
    at the bulk temperature.

    Args:
        w: Superficial gas velocity (m/s)
        T_b: Bulk (bed) temperature (K)
        T_s: Surface temperature (K)
        p: Pressure (Pa)
        d_p: Particle diameter (m)
        rho_p: Particle density (kg/m³)
        eps_mf: Bed porosity at minimum fluidization
        air: Dry-air property functions, default ``default_air()``
        **constants: Overrides of the model constants G1, G2, P1, P2,
            P1_ast, P2_ast

    Returns:
        Tuple of (h, Nu):
            - h: ``MolerusResult`` of heat transfer coefficients (W/m²/K)
            - Nu: ``MolerusResult`` of Nusselt numbers (dimensionless)
        All arrays have the implicitly expanded shape of the inputs.

    Example:
        >>> h, Nu = molerus(0.5, 573.15, 573.15, 101325, 174.494e-6, 2650, 0.45)
        >>> h_total = float(h.total)  # W/m²/K
    """
    air = air or default_air()
    sz = infer_shape(w, T_b, T_s, p, d_p, rho_p, eps_mf)
    w, T_b, T_s, p, d_p, rho_p, eps_mf = normalize(sz, w, T_b, T_s, p, d_p, rho_p, eps_mf)

    w_mf = fluidization.wmf(d_p, rho_p, p, T_b, air=air)
    h, Nu = _molerus(w, T_b, T_s, p, d_p, rho_p, eps_mf, w_mf, air, **constants)
    return _reshape(h, sz), _reshape(Nu, sz)


def molerus_ergun(w, T_b, T_s, p, d_p, phi_s, eps_mf, rho_p=None,
                  air: Optional[DryAir] = None, **constants) -> Tuple[MolerusResult, MolerusResult]:
    """Heat transfer coefficient with wmf from the Ergun equation.

    Same model as ``molerus``, but the minimum fluidization velocity follows
    from the Ergun equation with explicit sphericity and porosity.

    Args:
        w: Superficial gas velocity (m/s)
        T_b: Bulk (bed) temperature (K)
        T_s: Surface temperature (K)
        p: Pressure (Pa)
        d_p: Particle diameter (m)
        phi_s: Particle sphericity
        eps_mf: Bed porosity at minimum fluidization
        rho_p: Particle density (kg/m³). If None, the density of quartz at
            the bulk temperature.
        air: Dry-air property functions, default ``default_air()``
        **constants: Overrides of the model constants

    Returns:
        Tuple of (h, Nu) as in ``molerus``
    """
    air = air or default_air()
    if rho_p is None:
        rho_p = sio2.rho(T_b)
    sz = infer_shape(w, T_b, T_s, p, d_p, phi_s, eps_mf, rho_p)
    w, T_b, T_s, p, d_p, phi_s, eps_mf, rho_p = normalize(sz, w, T_b, T_s, p, d_p, phi_s, eps_mf, rho_p)

    w_mf = fluidization.wmf_ergun(d_p, rho_p, phi_s, eps_mf, p, T_b, air=air)
    h, Nu = _molerus(w, T_b, T_s, p, d_p, rho_p, eps_mf, w_mf, air, **constants)
    return _reshape(h, sz), _reshape(Nu, sz)
