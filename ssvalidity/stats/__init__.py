"""Random number, data generation, imputation and descriptive statistics modules."""

from . import data_generation as data_generation
from . import descriptives as descriptives
from . import imputation as imputation
from . import random_normal as random_normal
