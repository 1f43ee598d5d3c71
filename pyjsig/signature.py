"""
JVM generic signature parser.

Parses Signature attributes from class files into generic type trees.
See JVM Spec 4.7.9.1 for the signature grammar.

A GenericType is a classifier (class, base type or type variable), its type
arguments and an array dimension count. The classifier and argument kinds are
closed sets: code consuming these trees matches them exhaustively.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .errors import MalformedSignatureError


class Wildcard(Enum):
    EXTENDS = "+"
    SUPER = "-"


@dataclass(frozen=True)
class TopLevelClass:
    """Class classifier. Inner classes are folded into a '$'-joined internal name."""
    internal_name: str


@dataclass(frozen=True)
class BaseType:
    """Primitive classifier (B, C, D, F, I, J, S, Z, V)."""
    descriptor: str

    @property
    def name(self) -> str:
        names = {
            "B": "byte", "C": "char", "D": "double", "F": "float",
            "I": "int", "J": "long", "S": "short", "Z": "boolean", "V": "void"
        }
        return names[self.descriptor]


@dataclass(frozen=True)
class TypeVariable:
    """Type variable reference (T<name>;)."""
    name: str


Classifier = Union[TopLevelClass, BaseType, TypeVariable]


@dataclass(frozen=True)
class GenericType:
    """A generic type expression."""
    classifier: Classifier
    arguments: tuple["TypeArgument", ...] = ()
    array_dimensions: int = 0

    @property
    def is_array(self) -> bool:
        return self.array_dimensions > 0

    @property
    def component_type(self) -> "GenericType":
        """The type with one array dimension removed."""
        if not self.is_array:
            raise ValueError(f"Not an array type: {self}")
        return GenericType(self.classifier, self.arguments, self.array_dimensions - 1)


@dataclass(frozen=True)
class NoWildcard:
    """A plain type argument (List<String>)."""
    generic_type: GenericType


@dataclass(frozen=True)
class UnboundedWildcard:
    """The '*' type argument (List<?>)."""
    pass


@dataclass(frozen=True)
class BoundedWildcard:
    """A '+' or '-' type argument (List<? extends Number>)."""
    wildcard: Wildcard
    bound: GenericType


TypeArgument = Union[NoWildcard, UnboundedWildcard, BoundedWildcard]


@dataclass(frozen=True)
class TypeParameter:
    """A type parameter declaration (T extends Comparable<T>)."""
    name: str
    upper_bounds: tuple[GenericType, ...] = ()


@dataclass(frozen=True)
class GenericMethodSignature:
    """A parsed method signature. throws is parsed but not used for formatting."""
    type_parameters: tuple[TypeParameter, ...]
    value_parameters: tuple[GenericType, ...]
    return_type: GenericType
    throws: tuple[GenericType, ...] = ()


class SignatureParser:
    """Parses JVM generic signatures."""

    def __init__(self, signature: str):
        self.sig = signature
        self.pos = 0

    def _peek(self) -> str:
        if self.pos >= len(self.sig):
            return ""
        return self.sig[self.pos]

    def _read(self) -> str:
        ch = self._peek()
        self.pos += 1
        return ch

    def _error(self, message: str) -> MalformedSignatureError:
        return MalformedSignatureError(message, self.sig, self.pos)

    def _expect(self, expected: str):
        ch = self._peek()
        if ch != expected:
            raise self._error(f"Expected '{expected}', got '{ch}'")
        self.pos += 1

    def _expect_end(self):
        if self.pos != len(self.sig):
            raise self._error("Trailing characters")

    def _read_identifier(self) -> str:
        """Read an identifier (ends at /;.<>:)."""
        start = self.pos
        while self.pos < len(self.sig) and self.sig[self.pos] not in "/;.<>:":
            self.pos += 1
        if start == self.pos:
            raise self._error("Expected identifier")
        return self.sig[start:self.pos]

    def parse_method_signature(self) -> GenericMethodSignature:
        """Parse a method signature."""
        type_params = self._parse_type_parameters()
        self._expect("(")
        params = []
        while self._peek() != ")":
            params.append(self._parse_type_signature())
        self._read()  # consume ')'
        return_type = self._parse_return_type()
        throws = []
        while self._peek() == "^":
            self._read()  # consume '^'
            if self._peek() == "T":
                throws.append(self._parse_type_variable_signature())
            else:
                throws.append(self._parse_class_type_signature())
        self._expect_end()
        return GenericMethodSignature(
            type_parameters=tuple(type_params),
            value_parameters=tuple(params),
            return_type=return_type,
            throws=tuple(throws),
        )

    def parse_field_signature(self) -> GenericType:
        """Parse a field type signature."""
        result = self._parse_field_type_signature()
        self._expect_end()
        return result

    def _parse_type_parameters(self) -> list[TypeParameter]:
        """Parse optional type parameters (<T:..>)."""
        if self._peek() != "<":
            return []
        self._read()  # consume '<'
        params = []
        while self._peek() != ">":
            params.append(self._parse_type_parameter())
        self._read()  # consume '>'
        if not params:
            raise self._error("Empty type parameter list")
        return params

    def _parse_type_parameter(self) -> TypeParameter:
        """Parse a single type parameter. The class bound may be empty."""
        name = self._read_identifier()
        self._expect(":")
        bounds = []
        if self._peek() not in (":", ">"):
            bounds.append(self._parse_field_type_signature())
        while self._peek() == ":":
            self._read()  # consume ':'
            bounds.append(self._parse_field_type_signature())
        return TypeParameter(name=name, upper_bounds=tuple(bounds))

    def _parse_type_signature(self) -> GenericType:
        """Parse a value type signature (base type or field type)."""
        ch = self._peek()
        if ch and ch in "BCDFIJSZ":
            return self._parse_base_type()
        return self._parse_field_type_signature()

    def _parse_return_type(self) -> GenericType:
        """Parse return type (type signature or V)."""
        if self._peek() == "V":
            self._read()
            return GenericType(BaseType("V"))
        return self._parse_type_signature()

    def _parse_base_type(self) -> GenericType:
        return GenericType(BaseType(self._read()))

    def _parse_field_type_signature(self) -> GenericType:
        """Parse a field type signature (class, array, or type variable)."""
        ch = self._peek()
        if ch == "L":
            return self._parse_class_type_signature()
        elif ch == "[":
            return self._parse_array_type_signature()
        elif ch == "T":
            return self._parse_type_variable_signature()
        else:
            raise self._error(f"Unexpected char '{ch}' in field type signature")

    def _parse_class_type_signature(self) -> GenericType:
        """Parse a class type signature (L...;)."""
        self._expect("L")
        parts = [self._read_identifier()]
        while self._peek() == "/":
            self._read()  # consume '/'
            parts.append(self._read_identifier())
        name = "/".join(parts)

        type_args = self._parse_type_arguments()

        # Inner classes: keep the innermost type arguments
        while self._peek() == ".":
            self._read()  # consume '.'
            name = f"{name}${self._read_identifier()}"
            type_args = self._parse_type_arguments()

        self._expect(";")
        return GenericType(TopLevelClass(name), tuple(type_args))

    def _parse_type_arguments(self) -> list:
        """Parse optional type arguments (<...>)."""
        if self._peek() != "<":
            return []
        self._read()  # consume '<'
        args = []
        while self._peek() != ">":
            args.append(self._parse_type_argument())
        self._read()  # consume '>'
        if not args:
            raise self._error("Empty type argument list")
        return args

    def _parse_type_argument(self) -> TypeArgument:
        """Parse a single type argument."""
        ch = self._peek()
        if ch == "*":
            self._read()
            return UnboundedWildcard()
        elif ch == "+":
            self._read()
            return BoundedWildcard(Wildcard.EXTENDS, self._parse_field_type_signature())
        elif ch == "-":
            self._read()
            return BoundedWildcard(Wildcard.SUPER, self._parse_field_type_signature())
        else:
            return NoWildcard(self._parse_field_type_signature())

    def _parse_array_type_signature(self) -> GenericType:
        """Parse an array type signature ([...)."""
        dimensions = 0
        while self._peek() == "[":
            self._read()
            dimensions += 1
        element = self._parse_type_signature()
        return GenericType(element.classifier, element.arguments, dimensions)

    def _parse_type_variable_signature(self) -> GenericType:
        """Parse a type variable signature (T<name>;)."""
        self._expect("T")
        name = self._read_identifier()
        self._expect(";")
        return GenericType(TypeVariable(name))


def parse_generic_method_signature(signature: str) -> GenericMethodSignature:
    """Parse a method Signature attribute."""
    return SignatureParser(signature).parse_method_signature()


def parse_generic_field_signature(signature: str) -> GenericType:
    """Parse a field Signature attribute."""
    return SignatureParser(signature).parse_field_signature()
