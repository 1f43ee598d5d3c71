"""pyjsig - describes JVM method signatures for Kotlin binding generation."""

from .classreader import RawMethodFacts, ClassPath, read_class_file
from .compiler import (
    SignatureCompiler,
    format_arguments,
    format_arguments_with_defaults,
    format_argument_names,
    format_argument_types,
    format_layout_params_arguments,
    format_layout_params_arguments_invoke,
    format_type_parameters,
    format_where_clause,
)
from .errors import (
    AnalysisError,
    MalformedSignatureError,
    UnsupportedClassifierError,
    MethodAnalysisError,
)
from .types import TypeRef, Variance, MethodParameter, MethodSignature

__version__ = "0.1.0"
__all__ = [
    "RawMethodFacts",
    "ClassPath",
    "read_class_file",
    "SignatureCompiler",
    "format_arguments",
    "format_arguments_with_defaults",
    "format_argument_names",
    "format_argument_types",
    "format_layout_params_arguments",
    "format_layout_params_arguments_invoke",
    "format_type_parameters",
    "format_where_clause",
    "AnalysisError",
    "MalformedSignatureError",
    "UnsupportedClassifierError",
    "MethodAnalysisError",
    "TypeRef",
    "Variance",
    "MethodParameter",
    "MethodSignature",
]
