"""
Maps JVM types to Kotlin type references.

Two inputs are supported: erased descriptor tokens (for methods without a
Signature attribute) and generic type trees parsed from Signature attributes.
The lookup tables below are module constants and are never modified.
"""

from .descriptor import JvmType, PrimitiveType, ArrayType, ObjectType, fq_name
from .errors import UnsupportedClassifierError
from .signature import (
    GenericType,
    TopLevelClass,
    BaseType,
    TypeVariable,
    NoWildcard,
    UnboundedWildcard,
    BoundedWildcard,
    Wildcard,
)
from .types import TypeRef, Variance, STAR_TYPE

JAVA_TO_KOTLIN_TYPES = {
    "java.lang.CharSequence": "kotlin.CharSequence",
    "java.lang.Number": "kotlin.Number",
    "java.lang.String": "kotlin.String",
    "java.lang.Integer": "kotlin.Int",
    "java.lang.Object": "kotlin.Any",
    "java.lang.Comparable": "kotlin.Comparable",
    "java.util.List": "kotlin.collections.List",
    "java.util.Set": "kotlin.collections.Set",
    "java.util.Map": "kotlin.collections.Map",
}

PRIMITIVE_NAMES = {
    "Z": "kotlin.Boolean",
    "I": "kotlin.Int",
    "F": "kotlin.Float",
    "D": "kotlin.Double",
    "J": "kotlin.Long",
    "B": "kotlin.Byte",
    "C": "kotlin.Char",
    "S": "kotlin.Short",
    "V": "kotlin.Unit",
}

PRIMITIVE_ARRAY_NAMES = {
    "Z": "kotlin.BooleanArray",
    "I": "kotlin.IntArray",
    "F": "kotlin.FloatArray",
    "D": "kotlin.DoubleArray",
    "J": "kotlin.LongArray",
    "B": "kotlin.ByteArray",
    "C": "kotlin.CharArray",
    "S": "kotlin.ShortArray",
}

PRIMITIVE_DEFAULT_VALUES = {
    "Z": "false",
    "I": "0",
    "F": "0.0",
    "D": "0.0",
    "J": "0",
    "B": "0",
    "C": "'\\u0000'",
    "S": "0",
    "V": "",
}

GENERIC_ARRAY = "kotlin.Array"


def map_java_to_kotlin_type(name: str) -> str:
    """Substitute well-known Java library types; other names pass through."""
    return JAVA_TO_KOTLIN_TYPES.get(name, name)


def _short_name(name: str) -> str:
    return name[len("kotlin."):] if name.startswith("kotlin.") else name


# Descriptor path

def jvm_type_as_string(jvm_type: JvmType, is_nullable: bool = True) -> str:
    """Render an erased type as a Kotlin type string."""
    nullability = "?" if is_nullable else ""
    if isinstance(jvm_type, PrimitiveType):
        return PRIMITIVE_NAMES[jvm_type.descriptor()]
    elif isinstance(jvm_type, ArrayType):
        component = jvm_type.component_type
        if isinstance(component, PrimitiveType):
            return PRIMITIVE_ARRAY_NAMES[component.descriptor()] + nullability
        return f"{GENERIC_ARRAY}<{jvm_type_as_string(component, is_nullable=False)}>{nullability}"
    elif isinstance(jvm_type, ObjectType):
        return map_java_to_kotlin_type(fq_name(jvm_type.internal_name)) + nullability
    raise UnsupportedClassifierError(f"Unexpected descriptor type: {jvm_type!r}")


def jvm_type_to_type_ref(jvm_type: JvmType, is_nullable: bool = False) -> TypeRef:
    """Erased types never carry type arguments; the whole rendering is the name."""
    return TypeRef(
        jvm_type_as_string(jvm_type, is_nullable=False),
        is_nullable=is_nullable and not jvm_type.is_primitive,
    )


def default_value(jvm_type: JvmType, only_primitive: bool = False) -> str:
    """A Kotlin expression for the type's default value.

    Returns "" when there is no default: for void, and for reference types when
    only_primitive is set.
    """
    if isinstance(jvm_type, PrimitiveType):
        return PRIMITIVE_DEFAULT_VALUES[jvm_type.descriptor()]
    if only_primitive:
        return ""
    if isinstance(jvm_type, ArrayType):
        component = jvm_type.component_type
        if isinstance(component, PrimitiveType):
            return _short_name(PRIMITIVE_ARRAY_NAMES[component.descriptor()]) + "()"
        return f"Array<{jvm_type_as_string(component, is_nullable=False)}>()"
    return jvm_type_as_string(jvm_type, is_nullable=False) + "()"


# Generic signature path

def generic_type_to_type_ref(
    generic_type: GenericType,
    is_nullable: bool = False,
    variance: Variance = Variance.INVARIANT,
) -> TypeRef:
    """Resolve a generic type tree, recursing into its type arguments."""
    if generic_type.is_array:
        return _generic_array_to_type_ref(generic_type, is_nullable, variance)

    classifier = generic_type.classifier
    if isinstance(classifier, TopLevelClass):
        name = map_java_to_kotlin_type(fq_name(classifier.internal_name))
    elif isinstance(classifier, BaseType):
        return TypeRef(PRIMITIVE_NAMES[classifier.descriptor], variance=variance)
    elif isinstance(classifier, TypeVariable):
        return TypeRef(classifier.name, variance=variance, is_type_variable=True)
    else:
        raise UnsupportedClassifierError(f"Invalid classifier type: {classifier!r}")

    arguments = tuple(type_argument_to_type_ref(arg) for arg in generic_type.arguments)
    return TypeRef(name, is_nullable, variance, arguments)


def _generic_array_to_type_ref(generic_type: GenericType, is_nullable: bool, variance: Variance) -> TypeRef:
    component = generic_type.component_type
    if not component.is_array and isinstance(component.classifier, BaseType):
        return TypeRef(PRIMITIVE_ARRAY_NAMES[component.classifier.descriptor], is_nullable, variance)
    return TypeRef(GENERIC_ARRAY, is_nullable, variance, (generic_type_to_type_ref(component),))


def type_argument_to_type_ref(arg) -> TypeRef:
    if isinstance(arg, UnboundedWildcard):
        return STAR_TYPE
    elif isinstance(arg, NoWildcard):
        return generic_type_to_type_ref(arg.generic_type)
    elif isinstance(arg, BoundedWildcard):
        # Wildcard bounds carry no nullability information; treat them as not-null.
        if arg.wildcard is Wildcard.EXTENDS:
            return generic_type_to_type_ref(arg.bound, False, Variance.COVARIANT)
        elif arg.wildcard is Wildcard.SUPER:
            return generic_type_to_type_ref(arg.bound, False, Variance.CONTRAVARIANT)
    raise UnsupportedClassifierError(f"Unexpected generic argument type: {arg!r}")
