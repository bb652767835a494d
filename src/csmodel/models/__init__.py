"""A module for defining optimization models and their building blocks. From simplest to
most complex, and following the inheritance hierarchy, these are:

- :class:`csmodel.models.HasVariables`: a class for the creation and storage of decision
  variables, each with a domain (continuous, integer or binary) and bounds
- :class:`csmodel.models.HasConstraints`: a class for the creation and storage of
  constraints (dependent on variables) in insertion order. The constraints can be
  equalities or lower/upper inequalities.
- :class:`csmodel.models.HasObjective`: a class for the assignment of a scalar objective
  to be minimized or maximized
- :class:`csmodel.Model`: a class that combines all the above building blocks into a
  full-fledged model that can be solved with any adapter in :mod:`csmodel.adapters`.
"""

__all__ = [
    "Constraint",
    "HasConstraints",
    "HasObjective",
    "HasVariables",
    "Model",
    "Objective",
]

from .constraints import Constraint, HasConstraints
from .model import Model
from .objective import HasObjective, Objective
from .variables import HasVariables
