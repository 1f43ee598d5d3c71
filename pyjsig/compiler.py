"""
Builds canonical method signatures from raw bytecode facts.

The erased descriptor decides how many parameters a method has and which
local variable slots they occupy. The generic Signature attribute, parameter
annotations, external annotations and the name oracle only enrich that
skeleton with better types, nullability and names.
"""

import logging
from typing import Callable, Iterable, Optional

from .annotations import AnnotationEvidence, RETURN_INDEX
from .classifier import is_constructor, is_static
from .classreader import RawMethodFacts
from .descriptor import JvmType
from .errors import AnalysisError, MethodAnalysisError
from .formatter import jvm_type_to_type_ref, generic_type_to_type_ref, default_value
from .names import NameOracle, EmptyNameOracle, resolve_parameter_names
from .nullability import Nullability, nullability_of, resolve_nullability
from .signature import GenericType, TopLevelClass, TypeParameter, parse_generic_method_signature
from .types import MethodParameter, MethodSignature, TypeParameterRef, TypeRef

logger = logging.getLogger(__name__)

WRAP_CONTENT = "android.view.ViewGroup.LayoutParams.WRAP_CONTENT"

SPECIAL_LAYOUT_PARAMS_ARGUMENTS = {
    "width": WRAP_CONTENT,
    "height": WRAP_CONTENT,
    "w": WRAP_CONTENT,
    "h": WRAP_CONTENT,
}

SPECIAL_LAYOUT_PARAMS_NAMES = {"w": "width", "h": "height"}

NOT_NULL_ASSERTION = "!!"


def annotation_method_key(method: RawMethodFacts) -> str:
    """The method part of an annotations.xml item name.

    "android.widget.TextView void setText(java.lang.CharSequence)"; constructors
    use the simple class name and no return type.
    """
    args = ", ".join(t.java_name for t in method.parameter_types)
    class_fq = method.class_fq_name
    if is_constructor(method):
        simple_name = class_fq.rpartition(".")[2]
        return f"{class_fq} {simple_name}({args})"
    return f"{class_fq} {method.return_type.java_name} {method.name}({args})"


def _is_plain_object(generic_type: GenericType) -> bool:
    return (
        not generic_type.is_array
        and not generic_type.arguments
        and generic_type.classifier == TopLevelClass("java/lang/Object")
    )


def _type_parameter_ref(type_parameter: TypeParameter) -> TypeParameterRef:
    bounds = tuple(
        generic_type_to_type_ref(bound)
        for bound in type_parameter.upper_bounds
        if not _is_plain_object(bound)
    )
    return TypeParameterRef(type_parameter.name, bounds)


class SignatureCompiler:
    """Combines descriptor, generic signature, nullability and names into a MethodSignature."""

    def __init__(
        self,
        annotation_evidence: Optional[AnnotationEvidence] = None,
        name_oracle: Optional[NameOracle] = None,
    ):
        self.annotation_evidence = annotation_evidence
        self.name_oracle = name_oracle or EmptyNameOracle()

    def _nullability(self, method: RawMethodFacts, method_key: str, index: int,
                     annotations: Optional[Iterable[str]]) -> bool:
        evidence = nullability_of(annotations)
        if evidence is Nullability.ABSENT and self.annotation_evidence is not None:
            evidence = self.annotation_evidence.query(method.class_name, method_key, index)
        return resolve_nullability(evidence)

    def _parameter_nullability(self, method: RawMethodFacts, method_key: str) -> list[bool]:
        result = []
        for index in range(len(method.parameter_types)):
            annotations = None
            if index < len(method.parameter_annotations):
                annotations = method.parameter_annotations[index]
            result.append(self._nullability(method, method_key, index, annotations))
        return result

    def compile(self, method: RawMethodFacts) -> MethodSignature:
        """Build the canonical signature of one method.

        Raises MalformedSignatureError or UnsupportedClassifierError for
        structurally invalid input.
        """
        raw_parameters = method.parameter_types
        raw_return = method.return_type
        method_key = annotation_method_key(method)

        nullable = self._parameter_nullability(method, method_key)
        return_nullable = self._nullability(method, method_key, RETURN_INDEX, method.annotations)

        parameter_types: list[TypeRef] = [
            jvm_type_to_type_ref(t, nullable[i]) for i, t in enumerate(raw_parameters)
        ]
        return_type = jvm_type_to_type_ref(raw_return, return_nullable)
        type_parameters: tuple[TypeParameterRef, ...] = ()

        if method.signature is None:
            logger.debug("No generic signature for %s", method)
        else:
            generic = parse_generic_method_signature(method.signature)
            generic_parameters = generic.value_parameters
            # Synthetic leading parameters (outer instance, enum name/ordinal)
            # are missing from the signature; align it to the trailing ones.
            offset = len(raw_parameters) - len(generic_parameters)
            if offset < 0:
                logger.warning(
                    "Signature of %s declares %d parameters, descriptor has %d; using erased types",
                    method, len(generic_parameters), len(raw_parameters),
                )
            else:
                for i, generic_type in enumerate(generic_parameters):
                    index = offset + i
                    parameter_types[index] = generic_type_to_type_ref(generic_type, nullable[index])
            return_type = generic_type_to_type_ref(generic.return_type, return_nullable)
            type_parameters = tuple(_type_parameter_ref(tp) for tp in generic.type_parameters)

        names = resolve_parameter_names(
            method.class_name,
            method.name,
            raw_parameters,
            method.local_variables,
            self.name_oracle,
            is_static(method),
        )

        parameters = tuple(
            MethodParameter(name, param_type) for name, param_type in zip(names, parameter_types)
        )
        return MethodSignature(method.name, type_parameters, parameters, return_type)

    def compile_all(
        self,
        methods: Iterable[RawMethodFacts],
        predicate: Optional[Callable[[RawMethodFacts], bool]] = None,
    ) -> tuple[list[tuple[RawMethodFacts, MethodSignature]], list[MethodAnalysisError]]:
        """Compile many methods; a failing method is reported and skipped.

        Methods rejected by predicate are left out. The predicate runs for each
        method separately, so a method it cannot classify counts as a failure.
        """
        compiled = []
        errors = []
        for method in methods:
            try:
                if predicate is not None and not predicate(method):
                    continue
                compiled.append((method, self.compile(method)))
            except AnalysisError as e:
                error = MethodAnalysisError(method.class_fq_name, method.name, method.descriptor, e)
                logger.error("Failed to analyze %s", error)
                errors.append(error)
        return compiled, errors


def format_arguments(signature: MethodSignature) -> str:
    """name: Type, name: Type"""
    return ", ".join(f"{p.name}: {p.type}" for p in signature.parameters)


def format_arguments_with_defaults(
    signature: MethodSignature, method: RawMethodFacts, only_primitive: bool = False
) -> str:
    """name: Type = default, ... ; parameters without a safe default get none."""
    parts = []
    raw_parameters: tuple[JvmType, ...] = method.parameter_types
    for param, raw_type in zip(signature.parameters, raw_parameters):
        default = default_value(raw_type, only_primitive)
        if default:
            parts.append(f"{param.name}: {param.type} = {default}")
        else:
            parts.append(f"{param.name}: {param.type}")
    return ", ".join(parts)


def format_type_parameters(signature: MethodSignature) -> str:
    """<T, U : Bound> or "" for non-generic methods."""
    if not signature.type_parameters:
        return ""
    return "<" + ", ".join(str(tp) for tp in signature.type_parameters) + ">"


def format_where_clause(signature: MethodSignature) -> str:
    """where T : A, T : B for type parameters with several bounds, else ""."""
    constraints = [c for tp in signature.type_parameters for c in tp.constraints()]
    if not constraints:
        return ""
    return "where " + ", ".join(constraints)


def format_argument_types(signature: MethodSignature) -> str:
    return ", ".join(str(p.type) for p in signature.parameters)


def format_argument_names(signature: MethodSignature) -> str:
    return ", ".join(p.name for p in signature.parameters)


def format_layout_params_arguments(
    signature: MethodSignature, render_type: Callable[[TypeRef], str] = str
) -> list[str]:
    """Declarations for a LayoutParams factory: w/h become width/height with WRAP_CONTENT defaults."""
    result = []
    for param in signature.parameters:
        rendered = render_type(param.type)
        default = SPECIAL_LAYOUT_PARAMS_ARGUMENTS.get(param.name)
        real_name = SPECIAL_LAYOUT_PARAMS_NAMES.get(param.name, param.name)
        if default is None:
            result.append(f"{real_name}: {rendered}")
        else:
            result.append(f"{real_name}: {rendered} = {default}")
    return result


def format_layout_params_arguments_invoke(signature: MethodSignature) -> str:
    """Arguments for calling a LayoutParams constructor; nullable ones get a not-null assertion."""
    parts = []
    for param in signature.parameters:
        real_name = SPECIAL_LAYOUT_PARAMS_NAMES.get(param.name, param.name)
        explicit_not_null = NOT_NULL_ASSERTION if param.type.is_nullable else ""
        parts.append(f"{real_name}{explicit_not_null}")
    return ", ".join(parts)
