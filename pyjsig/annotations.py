"""
External annotations in the IntelliJ annotations.xml format.

Each package may carry an annotations.xml file:

    <root>
      <item name="android.widget.TextView void setText(java.lang.CharSequence) 0">
        <annotation name="org.jetbrains.annotations.NotNull"/>
      </item>
    </root>

Item names are "<method key> <parameter index>" for parameters and the bare
method key for return values. Providers read these files from a directory tree
or a zip/jar; CachingAnnotationProvider and CompoundAnnotationProvider wrap
other providers.
"""

import logging
import zipfile
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .errors import AnnotationFormatError
from .nullability import Nullability, nullability_of

logger = logging.getLogger(__name__)

ANNOTATIONS_FILE = "annotations.xml"

# Parameter index used when querying the return value
RETURN_INDEX = -1

PackageAnnotations = dict[str, list[str]]


def parse_annotations_xml(data: bytes, source: str = "<memory>") -> PackageAnnotations:
    """Parse one annotations.xml document into item name -> annotation names."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise AnnotationFormatError(f"Malformed annotations file {source}: {e}") from e
    items: PackageAnnotations = {}
    for item in root.iter("item"):
        name = item.get("name")
        if not name:
            continue
        names = [a.get("name") for a in item.iter("annotation") if a.get("name")]
        items.setdefault(name, []).extend(names)
    return items


def _package_path(package_name: str) -> str:
    if not package_name:
        return ANNOTATIONS_FILE
    return package_name.replace(".", "/") + "/" + ANNOTATIONS_FILE


class AnnotationProvider(ABC):
    """Supplies the annotations declared for one package."""

    @abstractmethod
    def get_annotations(self, package_name: str) -> PackageAnnotations:
        pass


class DirectoryAnnotationProvider(AnnotationProvider):
    """Reads <root>/<package path>/annotations.xml."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def get_annotations(self, package_name: str) -> PackageAnnotations:
        path = self.root / _package_path(package_name)
        if not path.is_file():
            return {}
        logger.debug("Loading annotations for %s from %s", package_name, path)
        return parse_annotations_xml(path.read_bytes(), str(path))


class ZipFileAnnotationProvider(AnnotationProvider):
    """Reads <package path>/annotations.xml entries from a zip or jar."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def get_annotations(self, package_name: str) -> PackageAnnotations:
        if not self.path.is_file():
            return {}
        entry = _package_path(package_name)
        with zipfile.ZipFile(self.path, "r") as zf:
            try:
                data = zf.read(entry)
            except KeyError:
                return {}
        logger.debug("Loading annotations for %s from %s!%s", package_name, self.path, entry)
        return parse_annotations_xml(data, f"{self.path}!{entry}")


class CachingAnnotationProvider(AnnotationProvider):
    """Memoizes another provider per package."""

    def __init__(self, provider: AnnotationProvider):
        self.provider = provider
        self._cache: dict[str, PackageAnnotations] = {}

    def get_annotations(self, package_name: str) -> PackageAnnotations:
        if package_name not in self._cache:
            self._cache[package_name] = self.provider.get_annotations(package_name)
        return self._cache[package_name]


class CompoundAnnotationProvider(AnnotationProvider):
    """Merges several providers; annotations of earlier providers come first."""

    def __init__(self, *providers: AnnotationProvider):
        self.providers = providers

    def get_annotations(self, package_name: str) -> PackageAnnotations:
        merged: PackageAnnotations = {}
        for provider in self.providers:
            for name, annotations in provider.get_annotations(package_name).items():
                merged.setdefault(name, []).extend(annotations)
        return merged


class EmptyAnnotationProvider(AnnotationProvider):

    def get_annotations(self, package_name: str) -> PackageAnnotations:
        return {}


class AnnotationEvidence(ABC):
    """Nullability evidence for a method's parameters and return value."""

    @abstractmethod
    def query(self, class_name: str, method_key: str, index: int) -> Nullability:
        """index is a zero-based parameter index or RETURN_INDEX."""
        pass


class AnnotationManager(AnnotationEvidence):
    """Answers nullability queries from an AnnotationProvider."""

    def __init__(self, provider: AnnotationProvider):
        self.provider = provider

    def annotations(self, class_name: str, method_key: str, index: int) -> Optional[list[str]]:
        """Annotation names for an item; class_name is an internal name."""
        package_name = class_name.rpartition("/")[0].replace("/", ".")
        item = method_key if index == RETURN_INDEX else f"{method_key} {index}"
        return self.provider.get_annotations(package_name).get(item)

    def query(self, class_name: str, method_key: str, index: int) -> Nullability:
        return nullability_of(self.annotations(class_name, method_key, index))
