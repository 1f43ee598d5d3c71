"""
Predicates used to decide which methods become generated bindings.

All functions are pure and only look at the method's name, descriptor and
access flags.
"""

from .classfile import AccessFlags, CONSTRUCTOR_NAME
from .classreader import RawMethodFacts


def _has_capitalized_suffix(name: str, prefix: str) -> bool:
    return name.startswith(prefix) and len(name) > len(prefix) and name[len(prefix)].isupper()


def is_public(method: RawMethodFacts) -> bool:
    return method.has_flag(AccessFlags.PUBLIC)


def is_overridden(method: RawMethodFacts) -> bool:
    """Bridge methods are compiler-generated overrides."""
    return method.has_flag(AccessFlags.BRIDGE)


def is_static(method: RawMethodFacts) -> bool:
    return method.has_flag(AccessFlags.STATIC)


def is_synthetic(method: RawMethodFacts) -> bool:
    return method.has_flag(AccessFlags.SYNTHETIC)


def is_constructor(method: RawMethodFacts) -> bool:
    return method.name == CONSTRUCTOR_NAME


def is_getter(method: RawMethodFacts) -> bool:
    """getX() or isX() with no parameters, a non-void result, and public access."""
    name = method.name
    is_non_boolean_getter = _has_capitalized_suffix(name, "get")
    is_boolean_getter = _has_capitalized_suffix(name, "is")
    return (
        (is_non_boolean_getter or is_boolean_getter)
        and len(method.parameter_types) == 0
        and not method.return_type.is_void
        and is_public(method)
    )


def is_listener_setter(method: RawMethodFacts, match_set: bool = True, match_add: bool = True) -> bool:
    """setOnXListener (when match_set) or addXListener (when match_add)."""
    name = method.name
    return ((match_set and name.startswith("setOn")) or (match_add and name.startswith("add"))) and name.endswith("Listener")


def is_non_listener_setter(method: RawMethodFacts) -> bool:
    """setX(value) that is public and not a listener setter."""
    name = method.name
    if not _has_capitalized_suffix(name, "set"):
        return False
    if is_listener_setter(method) or name.endswith("Listener"):
        return False
    return len(method.parameter_types) == 1 and is_public(method)


def is_generated_candidate(method: RawMethodFacts) -> bool:
    """Public, non-synthetic, non-bridge methods."""
    return is_public(method) and not is_synthetic(method) and not is_overridden(method)
