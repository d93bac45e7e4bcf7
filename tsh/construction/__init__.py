from .cheapest import *
from .farthest import *
from .nearest import *
