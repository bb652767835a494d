"""Contains classes for storing debug information on the variables, constraints and
objective of an instance of the :class:`csmodel.Model` class."""

from inspect import currentframe as _currentframe
from inspect import getframeinfo as _getframeinfo
from itertools import dropwhile as _dropwhile
from traceback import walk_stack as _walk_stack
from types import MappingProxyType as _MappingProxyType
from typing import Literal, Optional
from typing import NamedTuple as _NamedTuple


class ModelDebugEntry(_NamedTuple):
    """Class representing a single entry of the debug information for a
    :class:`csmodel.Model` instance."""

    name: str
    """Name of the quantity."""

    type: Literal["Decision variable", "Constraint", "Objective"]
    """Type of the quantity."""

    filename: str
    """Name of the file where the quantity is defined."""

    function: str
    """Name of the function/method where the quantity is defined."""

    lineno: int
    """Line number where the quantity is defined."""

    context: str
    """Context in which the quantity is defined."""

    def __str__(self) -> str:
        return (
            f"{self.type} '{self.name}' defined at\n"
            f"  filename: {self.filename}\n"
            f"  function: {self.function}:{self.lineno}\n"
            f"  context:  {self.context}"
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.__str__()})"


class ModelDebug:
    """Model debug class for information about variables, constraints and objective of
    an instance of the :class:`csmodel.Model` class. In particular, it records where in
    the user's code

    - the decision variables ``x``
    - the constraints ``c``
    - the objective ``f``

    were defined.
    """

    types = _MappingProxyType(
        {"x": "Decision variable", "c": "Constraint", "f": "Objective"}
    )
    """Possible types of quantities and their definition."""

    def __init__(self) -> None:
        self._x_info: list[ModelDebugEntry] = []
        self._c_info: list[ModelDebugEntry] = []
        self._f_info: list[ModelDebugEntry] = []

    def x_describe(self, index: int) -> ModelDebugEntry:
        """Returns debug information on the variable at the given ``index``.

        Raises
        ------
        IndexError
            Index outside bounds of the variables.
        """
        return self.__describe(self._x_info, index)

    def c_describe(self, index: int) -> ModelDebugEntry:
        """Returns debug information on the constraint at the given ``index``.

        Raises
        ------
        IndexError
            Index outside bounds of the constraints.
        """
        return self.__describe(self._c_info, index)

    def f_describe(self) -> Optional[ModelDebugEntry]:
        """Returns debug information on the current objective, or ``None`` if the
        objective was never set."""
        return self._f_info[-1] if self._f_info else None

    def register(self, group: Literal["x", "c", "f"], name: str) -> None:
        """Registers debug information on new object name under the specific group.

        Parameters
        ----------
        group : {"x", "c", "f"}
            Indentifies the group the object belongs to: variables, constraints or
            objective.
        name : str
            Name of the object.

        Raises
        ------
        AttributeError
            Raises in case the given group is invalid.
        """
        info: list[ModelDebugEntry] = getattr(self, f"_{group}_info")
        stack = _dropwhile(
            lambda f: f[0].f_globals["__name__"].startswith("csmodel."),
            _walk_stack(_currentframe()),
        )
        frame, lineno = next(stack)
        traceback = _getframeinfo(frame, context=1)
        info.append(
            ModelDebugEntry(
                name,
                self.types[group],
                traceback.filename,
                traceback.function,
                lineno,
                (
                    "".join(traceback.code_context).strip()
                    if traceback.code_context is not None
                    else ""
                ),
            )
        )

    @staticmethod
    def __describe(info: list[ModelDebugEntry], index: int) -> ModelDebugEntry:
        if index < 0 or index >= len(info):
            raise IndexError(f"Index {index} not found.")
        return info[index]
