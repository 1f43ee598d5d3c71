"""
Parameter name resolution.

Names come from, in order: an external name oracle, the method's
LocalVariableTable, and finally a positional "p<index>" fallback.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .descriptor import JvmType, fq_name

logger = logging.getLogger(__name__)


class NameOracle(ABC):
    """Resolves parameter names from a secondary source such as SDK sources."""

    @abstractmethod
    def get_parameter_names(
        self, class_name: str, method_name: str, parameter_types: Sequence[str]
    ) -> Optional[Sequence[str]]:
        """Return names for (fq class name, method name, Java parameter types), or None."""
        pass


class EmptyNameOracle(NameOracle):
    """Knows nothing."""

    def get_parameter_names(self, class_name, method_name, parameter_types):
        return None


class MappingNameOracle(NameOracle):
    """Looks names up in a nested mapping.

    Layout: {fq class: {method name: {"type1, type2": [name1, name2]}}}. The
    parameter key is the Java parameter types joined by ", ".
    """

    def __init__(self, names: Mapping[str, Mapping[str, Mapping[str, Sequence[str]]]]):
        self._names = names

    @classmethod
    def from_json(cls, path: str | Path) -> "MappingNameOracle":
        with open(path, encoding="utf-8") as f:
            return cls(json.load(f))

    def get_parameter_names(self, class_name, method_name, parameter_types):
        methods = self._names.get(class_name)
        if not methods:
            return None
        overloads = methods.get(method_name)
        if not overloads:
            return None
        return overloads.get(", ".join(parameter_types))


def parameter_name_fallback(index: int) -> str:
    return f"p{index}"


def resolve_parameter_names(
    class_name: str,
    method_name: str,
    parameter_types: Sequence[JvmType],
    local_variables: Optional[Mapping[int, str]],
    oracle: Optional[NameOracle],
    is_static: bool,
) -> list[str]:
    """One name per parameter. Never fails."""
    count = len(parameter_types)
    oracle_names = None
    if oracle is not None:
        java_types = [t.java_name for t in parameter_types]
        oracle_names = oracle.get_parameter_names(fq_name(class_name), method_name, java_types)
        if oracle_names is not None and len(oracle_names) != count:
            logger.warning(
                "Ignoring %d parameter names for %s.%s: expected %d",
                len(oracle_names), class_name, method_name, count,
            )
            oracle_names = None
        if not oracle_names:
            oracle_names = None

    local_variables = local_variables or {}
    names = []
    slot = 0 if is_static else 1
    for index, param_type in enumerate(parameter_types):
        name = oracle_names[index] if oracle_names else None
        if not name:
            name = local_variables.get(slot)
        if not name:
            logger.debug("No name for parameter %d of %s.%s", index, class_name, method_name)
            name = parameter_name_fallback(index)
        names.append(name)
        slot += param_type.size
    return names
