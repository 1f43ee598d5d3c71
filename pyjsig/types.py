"""
Canonical, language-neutral type and method models.
"""

from dataclasses import dataclass
from enum import Enum


class Variance(Enum):
    INVARIANT = "invariant"
    COVARIANT = "covariant"
    CONTRAVARIANT = "contravariant"

    @property
    def prefix(self) -> str:
        return _VARIANCE_PREFIXES[self]


_VARIANCE_PREFIXES = {
    Variance.INVARIANT: "",
    Variance.COVARIANT: "out ",
    Variance.CONTRAVARIANT: "in ",
}


@dataclass(frozen=True)
class TypeRef:
    """A resolved target-language type.

    Only parameterized classes carry arguments; type variables never do.
    """
    qualified_name: str
    is_nullable: bool = False
    variance: Variance = Variance.INVARIANT
    arguments: tuple["TypeRef", ...] = ()
    is_type_variable: bool = False

    def __str__(self) -> str:
        args = ""
        if self.arguments:
            args = "<" + ", ".join(str(a) for a in self.arguments) + ">"
        nullability = "?" if self.is_nullable else ""
        return f"{self.variance.prefix}{self.qualified_name}{args}{nullability}"

    def to_dict(self) -> dict:
        return {
            "name": self.qualified_name,
            "nullable": self.is_nullable,
            "variance": self.variance.value,
            "arguments": [a.to_dict() for a in self.arguments],
            "type_variable": self.is_type_variable,
        }


STAR_TYPE = TypeRef("*")


@dataclass(frozen=True)
class TypeParameterRef:
    """A method type parameter with its resolved upper bounds."""
    name: str
    upper_bounds: tuple[TypeRef, ...] = ()

    def __str__(self) -> str:
        """Declaration form. Several bounds cannot be written inline: they
        are listed by constraints() for a where clause and only the name is
        rendered here."""
        if len(self.upper_bounds) == 1:
            return f"{self.name} : {self.upper_bounds[0]}"
        return self.name

    def constraints(self) -> list[str]:
        """Where clause entries ("T : Bound"), empty unless there are several bounds."""
        if len(self.upper_bounds) < 2:
            return []
        return [f"{self.name} : {bound}" for bound in self.upper_bounds]

    def to_dict(self) -> dict:
        return {"name": self.name, "upper_bounds": [b.to_dict() for b in self.upper_bounds]}


@dataclass(frozen=True)
class MethodParameter:
    """A named method parameter."""
    name: str
    type: TypeRef

    def __str__(self) -> str:
        return f"{self.name}: {self.type}"

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type.to_dict(), "rendered": str(self.type)}


@dataclass(frozen=True)
class MethodSignature:
    """The canonical description of one method."""
    name: str
    type_parameters: tuple[TypeParameterRef, ...]
    parameters: tuple[MethodParameter, ...]
    return_type: TypeRef

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type_parameters": [tp.to_dict() for tp in self.type_parameters],
            "parameters": [p.to_dict() for p in self.parameters],
            "return_type": self.return_type.to_dict(),
            "rendered_return_type": str(self.return_type),
        }
