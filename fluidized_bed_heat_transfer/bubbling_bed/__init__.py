"""
bubbling_bed: property correlations and heat transfer models for bubbling fluidized beds.
"""

from . import dry_air
from . import sio2
from . import fluidization
from . import molerus
from . import rig
