"""
Exceptions raised while analyzing method signatures.
"""

from typing import Optional


class AnalysisError(Exception):
    """Base class for all analyzer errors."""
    pass


class MalformedSignatureError(AnalysisError, ValueError):
    """A descriptor or generic signature does not match the JVM grammar."""

    def __init__(self, message: str, signature: Optional[str] = None, position: Optional[int] = None):
        self.signature = signature
        self.position = position
        if signature is not None:
            where = f" at pos {position}" if position is not None else ""
            message = f"{message}{where} in '{signature}'"
        super().__init__(message)


class UnsupportedClassifierError(AnalysisError, TypeError):
    """A generic type node is not one of the known classifier or argument kinds."""
    pass


class ClassFormatError(AnalysisError, ValueError):
    """A class file could not be decoded."""
    pass


class AnnotationFormatError(AnalysisError):
    """An external annotations.xml file could not be parsed."""
    pass


class MethodAnalysisError(AnalysisError):
    """Analysis of a single method failed; carries the method identity."""

    def __init__(self, class_name: str, method_name: str, descriptor: str, cause: Exception):
        self.class_name = class_name
        self.method_name = method_name
        self.descriptor = descriptor
        self.cause = cause
        super().__init__(f"{class_name}.{method_name}{descriptor}: {cause}")
