"""Heuristics for the traveling salesman problem on dense distance matrices"""

from .bounds import *
from .construction import *
from .errors import *
from .matrix import *
from .refinement import *
from .repetitive import *
from .solver import *
from .tours import *


__version__ = "0.1.0"
