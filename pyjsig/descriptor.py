"""
Erased JVM type descriptors.

Decodes field and method descriptors (JVM Spec 4.3) into type tokens. The
descriptor is the ground truth for a method's arity and local variable slot
layout.
"""

from dataclasses import dataclass
from abc import ABC, abstractmethod

from .errors import MalformedSignatureError


def fq_name(internal_name: str) -> str:
    """Convert an internal name (android/view/View$OnClickListener) to a dotted one."""
    return internal_name.replace("/", ".").replace("$", ".")


class JvmType(ABC):
    """Base class for erased descriptor types."""

    @abstractmethod
    def descriptor(self) -> str:
        """Return the JVM type descriptor."""
        pass

    @property
    @abstractmethod
    def java_name(self) -> str:
        """Java source spelling (int, java.lang.String, int[])."""
        pass

    @property
    def is_primitive(self) -> bool:
        return False

    @property
    def is_void(self) -> bool:
        return False

    @property
    def size(self) -> int:
        """Local variable slots used by this type (1 or 2)."""
        return 1


@dataclass(frozen=True)
class PrimitiveType(JvmType):
    """Primitive types, including void."""
    name: str
    _descriptor: str
    _size: int = 1

    def descriptor(self) -> str:
        return self._descriptor

    @property
    def java_name(self) -> str:
        return self.name

    @property
    def is_primitive(self) -> bool:
        return True

    @property
    def is_void(self) -> bool:
        return self._descriptor == "V"

    @property
    def size(self) -> int:
        return self._size


VOID = PrimitiveType("void", "V", 0)
BOOLEAN = PrimitiveType("boolean", "Z")
BYTE = PrimitiveType("byte", "B")
CHAR = PrimitiveType("char", "C")
SHORT = PrimitiveType("short", "S")
INT = PrimitiveType("int", "I")
LONG = PrimitiveType("long", "J", 2)
FLOAT = PrimitiveType("float", "F")
DOUBLE = PrimitiveType("double", "D", 2)

PRIMITIVE_TYPES = {
    t.descriptor(): t
    for t in (VOID, BOOLEAN, BYTE, CHAR, SHORT, INT, LONG, FLOAT, DOUBLE)
}


@dataclass(frozen=True)
class ObjectType(JvmType):
    """Class or interface type."""
    internal_name: str  # java/lang/String

    def descriptor(self) -> str:
        return f"L{self.internal_name};"

    @property
    def java_name(self) -> str:
        return fq_name(self.internal_name)


@dataclass(frozen=True)
class ArrayType(JvmType):
    """Array type. element_type is never itself an ArrayType."""
    element_type: JvmType
    dimensions: int = 1

    def descriptor(self) -> str:
        return "[" * self.dimensions + self.element_type.descriptor()

    @property
    def java_name(self) -> str:
        return self.element_type.java_name + "[]" * self.dimensions

    @property
    def component_type(self) -> JvmType:
        """The type with one array dimension removed."""
        if self.dimensions == 1:
            return self.element_type
        return ArrayType(self.element_type, self.dimensions - 1)


class DescriptorParser:
    """Parses field and method descriptors."""

    def __init__(self, descriptor: str):
        self.desc = descriptor
        self.pos = 0

    def _peek(self) -> str:
        if self.pos >= len(self.desc):
            return ""
        return self.desc[self.pos]

    def _read(self) -> str:
        ch = self._peek()
        self.pos += 1
        return ch

    def _error(self, message: str) -> MalformedSignatureError:
        return MalformedSignatureError(message, self.desc, self.pos)

    def _expect_end(self):
        if self.pos != len(self.desc):
            raise self._error("Trailing characters in descriptor")

    def parse_field_descriptor(self) -> JvmType:
        jtype = self._parse_field_type()
        self._expect_end()
        return jtype

    def parse_method_descriptor(self) -> tuple[tuple[JvmType, ...], JvmType]:
        if self._read() != "(":
            raise self._error("Expected '('")
        params = []
        while self._peek() != ")":
            if not self._peek():
                raise self._error("Unterminated parameter list")
            params.append(self._parse_field_type())
        self._read()  # consume ')'
        if self._peek() == "V":
            self._read()
            return_type = VOID
        else:
            return_type = self._parse_field_type()
        self._expect_end()
        return tuple(params), return_type

    def _parse_field_type(self) -> JvmType:
        ch = self._read()
        if ch in PRIMITIVE_TYPES and ch != "V":
            return PRIMITIVE_TYPES[ch]
        if ch == "L":
            end = self.desc.find(";", self.pos)
            if end <= self.pos:
                raise self._error("Unterminated class name")
            name = self.desc[self.pos:end]
            self.pos = end + 1
            return ObjectType(name)
        if ch == "[":
            dimensions = 1
            while self._peek() == "[":
                self._read()
                dimensions += 1
            element = self._parse_field_type()
            return ArrayType(element, dimensions)
        self.pos -= 1
        raise self._error(f"Unexpected char '{ch}'")


def parse_field_descriptor(descriptor: str) -> JvmType:
    """Parse a field descriptor such as 'Ljava/lang/String;' or '[I'."""
    return DescriptorParser(descriptor).parse_field_descriptor()


def parse_method_descriptor(descriptor: str) -> tuple[tuple[JvmType, ...], JvmType]:
    """Parse a method descriptor into (parameter types, return type)."""
    return DescriptorParser(descriptor).parse_method_descriptor()


def argument_types(descriptor: str) -> tuple[JvmType, ...]:
    return parse_method_descriptor(descriptor)[0]


def return_type(descriptor: str) -> JvmType:
    return parse_method_descriptor(descriptor)[1]
