r"""This module contains the core components, aside :class:`csmodel.Model` and its base
classes, that are used to build the package.

Overview
========

It contains the following submodules:

- :mod:`csmodel.core.cache`: a collection of methods to handle caching in the package.
  In particular, it offers a decorator :func:`invalidate_cache` that, when a model is
  modified, invalidates the given cached properties and discards the model's stale
  solution.
- :mod:`csmodel.core.debug`: contains classes for storing debug information on the
  variables, constraints and objective of an instance of the :class:`csmodel.Model`
  class.
- :mod:`csmodel.core.expressions`: contains the decision variables and the immutable
  linear, quadratic and nonlinear expressions built out of them, together with the
  functions that build such expressions.
- :mod:`csmodel.core.orchestrator`: contains the state machine that drives a single
  solve of a model through a solver adapter.
- :mod:`csmodel.core.solutions`: contains classes and methods to store the solution of
  a model after a call to :meth:`csmodel.Model.solve`, and to classify the statuses of
  failed solver runs.

Submodules
==========

.. autosummary::
   :toctree: generated
   :template: module.rst

   cache
   debug
   expressions
   orchestrator
   solutions
"""
