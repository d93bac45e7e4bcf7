from .annealing import *
from .two_opt import *
