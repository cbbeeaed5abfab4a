"""Constants of the bubbling fluidized bed test rig.

The defaults describe the rig the measurements were taken on. Individual
values can be overridden from a YAML file with a flat mapping of field
names to numbers, e.g.::

    d_p: 180.0e-6
    eps_mf: 0.46
    tap: flange

Module Summary:
- Classes:
    - ``OrificeTap``: Pressure tap arrangement of the orifice plates.
    - ``RigConstants``: Rig geometry, particle data and reference states.
- Functions:
    - ``load_rig_constants(path=None)``: Defaults, optionally overridden from YAML.
"""

import logging
import math
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import yaml

from ..implicit_expansion import C2K
from .dry_air import DryAir

logger = logging.getLogger(__name__)


class OrificeTap(str, Enum):
    CORNER = "corner"
    FLANGE = "flange"
    D_D2 = "D-D/2"


@dataclass(frozen=True)
class RigConstants:
    # Particles (GRANUSIL, Wedron IL #801, Grade 7020)
    d_p: float = 174.494e-6     # Particle diameter, m
    rho_p: float = 2650.0       # Particle density, kg/m³
    eps_mf: float = 0.45        # Bed porosity at minimum fluidization

    # Porosity measurement
    dh_eps1: float = 50e-3      # Height difference of taps p1 and p3, m
    dh_eps2: float = 100e-3     # Height difference of taps p2, m

    # Air supply
    p_N: float = 1014e2         # Flowmeter reference pressure, Pa
    T_N: float = C2K(21.0)      # Flowmeter reference temperature, K
    d_pipe: float = 154.08e-3   # Inner diameter of the main air line (6 inch, schedule 40), m
    on_limit: float = 50e-3     # Minimum mass flow at which the air supply counts as on, kg/s

    # Bed level
    h_bed: float = 461.5e-3 + 14e-3  # Persistent bed height incl. 14 mm from weir to probe, m
    h_ref: float = 1.0          # Reference bed height, m
    h_ref0: float = 1.0         # Reference bed height, normalized

    # Orifice plates
    d_orif: float = 14.75e-3    # Orifice inner diameter, m
    D_orif: float = 82.5e-3     # Orifice outer diameter (= inner pipe diameter), m
    tap: OrificeTap = OrificeTap.D_D2

    # Chambers
    x1: float = 202e-3          # Length of inlet / outlet chamber, m
    x2: float = 1.06            # Length of second chamber, m
    x3: float = 0.8             # Length of third chamber, m
    x_press: float = 37e-3      # Distance of bed level pressure taps next to baffles, m
    l: float = 0.5              # Width of all chambers, m

    # Test tube
    d_tube: float = 20e-3       # Tube diameter, m

    def __post_init__(self):
        object.__setattr__(self, "tap", OrificeTap(self.tap))

    @property
    def rho_N(self) -> float:
        """Reference density of the flowmeter."""
        return float(DryAir().rho(self.p_N, self.T_N))

    @property
    def A_pipe(self) -> float:
        return self.d_pipe**2*math.pi/4

    @property
    def A_floor1(self) -> float:
        """Distributor floor area of the inlet / outlet chamber."""
        return self.x1*self.l

    @property
    def A_floor2(self) -> float:
        return self.x2*self.l

    @property
    def A_floor3(self) -> float:
        return self.x3*self.l

    @property
    def A_test_tube(self) -> float:
        """Plain outside surface area of the test tube."""
        return self.d_tube*math.pi*self.l


def load_rig_constants(path: Optional[Union[str, Path]] = None) -> RigConstants:
    """Load the rig constants, overriding the defaults from a YAML file.

    Args:
        path: YAML file with a mapping of ``RigConstants`` field names to
            values. If None, the defaults are returned.

    Returns:
        ``RigConstants``

    Raises:
        FileNotFoundError: If ``path`` does not exist
        TypeError: If the document is not a mapping
        KeyError: If the document contains unknown fields
        ValueError: If ``tap`` is not a known tap type
    """
    c = RigConstants()
    if path is None:
        return c

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rig constants file {path} not found.")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise TypeError(f"{path} must contain a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(RigConstants)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise KeyError(f"Unknown rig constants in {path}: {', '.join(unknown)}")

    logger.debug("Overriding rig constants from %s: %s", path, sorted(data))
    return replace(c, **data)
