"""A collection of methods to handle caching and invalidation in the package. In
particular, it offers a decorator :func:`invalidate_cache` that, when the decorated
method is invoked, clears the given cached properties of the instance and, since the
method is assumed to modify the model, also discards any solution stored in it."""

import functools
from typing import Callable


def _is_cached_property(c: object) -> bool:
    """Returns True if the object is a cached property."""
    return isinstance(c, functools.cached_property)


def _discard_solution(self: object) -> None:
    """Drops the stored solution, if the object holds one."""
    discard = getattr(self, "_discard_solution", None)
    if discard is not None:
        discard()


def invalidate_cache(*cached_properties: functools.cached_property) -> Callable:
    """Decorator for methods that modify a model. When the decorated method is invoked,
    the cache of the given target properties is cleared and the model's solution, if
    any, is discarded, so that stale results are never returned.

    Parameters
    ----------
    cached_properties : cached_property
        The cached properties to be reset when the decorated method is called. Can be
        empty, in which case only the solution is discarded.

    Returns
    -------
    decorating_function : Callable
        Returns the function wrapped with this decorator.

    Raises
    ------
    TypeError
        Raises if the given inputs are not instances of
        :func:`functools.cached_property`.

    Notes
    -----
    The wrapper assumes the instance owning the properties to invalidate is the first
    argument of the wrapped method. The invalidation happens after the wrapped method
    returns successfully, so that a modification rejected with an exception leaves the
    model, and its solution, untouched.
    """
    for p in cached_properties:
        if not _is_cached_property(p):
            raise TypeError(
                f"Expected cached properties; got {p.__class__.__name__} instead."
            )

    def decorating_function(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):  # noqa: ANN001, ANN002, ANN003, ANN202
            out = func(self, *args, **kwargs)
            for prop in cached_properties:
                self.__dict__.pop(prop.attrname, None)
            _discard_solution(self)
            return out

        return wrapper

    return decorating_function

