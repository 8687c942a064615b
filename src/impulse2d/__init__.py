"""impulse2d - 2D rigid-body physics with SAT collision detection and impulse resolution."""

from .core import *  # noqa: F401,F403
from .core import __all__

__version__ = "0.1.0"
