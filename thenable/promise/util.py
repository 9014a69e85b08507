# -*- coding: utf-8 -*-

from inspect import getattr_static

_PRIMITIVE_TYPES = (bool, int, float, complex, str, bytes)

_missing = object()


def get_then(value):
    """Read the attribute 'then' of an object, once.

    An attribute defined on the object (or its class) whose reading raises
    an AttributeError is not considered as missing: the error is raised.

    Returns:
        the attribute 'then', or None if the object has none.
    Raises:
        Exception: any error raised while reading an existing attribute.
    """
    try:
        return value.then
    except AttributeError:
        if getattr_static(value, 'then', _missing) is _missing:
            return None
        raise


def is_thenable(value):
    """Check if an object can be chained, like a Promise, or is a "result".

    The promise module uses this function to differentiate "chainable" objects
    and direct return values, when using a callback who can returns both.

    Returns:
        boolean: True if the value has an attribute 'then' who is callable.
            False if not.
    Raises:
        Exception: any error raised while reading the attribute 'then'.
    """
    return callable(get_then(value))


def is_primitive(value):
    """Check if a value is a plain value, who can't hold a `then` method."""
    return value is None or isinstance(value, _PRIMITIVE_TYPES)
