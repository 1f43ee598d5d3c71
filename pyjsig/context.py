"""
Analyzer context: annotation sources, parameter name oracle and logging.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .annotations import (
    AnnotationManager,
    AnnotationProvider,
    CachingAnnotationProvider,
    CompoundAnnotationProvider,
    DirectoryAnnotationProvider,
    EmptyAnnotationProvider,
    ZipFileAnnotationProvider,
)
from .compiler import SignatureCompiler
from .names import NameOracle, EmptyNameOracle, MappingNameOracle

LOGGER_NAME = "pyjsig"

SDK_ANNOTATIONS_JAR = "kotlin-android-sdk-annotations-1.0.0.jar"
ANNOTATIONS_DIR = "annotations"


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a stderr console handler to the pyjsig logger."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.propagate = False

    # Prevent duplicate handlers on reconfiguration
    logger.handlers.clear()
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=False,
        markup=False,
    )
    handler.setLevel(logger.level)
    logger.addHandler(handler)
    return logger


@dataclass
class AnalyzerContext:
    """Collaborators shared by every signature compiled in one run."""
    annotation_manager: AnnotationManager = field(
        default_factory=lambda: AnnotationManager(EmptyAnnotationProvider())
    )
    name_oracle: NameOracle = field(default_factory=EmptyNameOracle)

    @classmethod
    def create(
        cls,
        props_dir: Optional[str | Path] = None,
        log_level: Optional[str] = None,
        parameter_names: Optional[str | Path] = None,
    ) -> "AnalyzerContext":
        """Wire the SDK annotations jar and annotations/ directory found under props_dir.

        Console logging is configured only when log_level is given.
        """
        if log_level:
            configure_logging(log_level)

        provider: AnnotationProvider = EmptyAnnotationProvider()
        if props_dir is not None:
            props_dir = Path(props_dir)
            zip_provider = ZipFileAnnotationProvider(props_dir / SDK_ANNOTATIONS_JAR)
            directory_provider = DirectoryAnnotationProvider(props_dir / ANNOTATIONS_DIR)
            provider = CompoundAnnotationProvider(
                CachingAnnotationProvider(zip_provider),
                CachingAnnotationProvider(directory_provider),
            )

        name_oracle: NameOracle = EmptyNameOracle()
        if parameter_names is not None:
            name_oracle = MappingNameOracle.from_json(parameter_names)

        return cls(AnnotationManager(provider), name_oracle)

    def compiler(self) -> SignatureCompiler:
        return SignatureCompiler(self.annotation_manager, self.name_oracle)
