"""
Java class file reader for extracting method metadata from compiled libraries.
Supports class files up to current JDK versions; only the attributes needed for
signature analysis are decoded.
"""

import logging
import struct
import zipfile
from dataclasses import dataclass, field
from typing import Iterator, Optional
from pathlib import Path

from .classfile import AccessFlags, ConstantPoolTag, CLASS_MAGIC
from .descriptor import JvmType, argument_types, return_type, fq_name
from .errors import ClassFormatError

logger = logging.getLogger(__name__)


@dataclass
class ConstantPoolEntry:
    """A constant pool entry."""
    tag: int
    value: object


@dataclass
class AnnotationValue:
    """An annotation element value."""
    tag: str
    value: object


@dataclass
class Annotation:
    """A parsed annotation. type_name is a descriptor (Lorg/jetbrains/annotations/NotNull;)."""
    type_name: str
    elements: dict = field(default_factory=dict)


@dataclass
class LocalVariable:
    """A LocalVariableTable entry."""
    start_pc: int
    length: int
    name: str
    descriptor: str
    index: int


@dataclass
class MethodInfo:
    """Parsed method information."""
    access_flags: int
    name: str
    descriptor: str
    signature: Optional[str] = None
    annotations: tuple[Annotation, ...] = ()
    parameter_annotations: tuple[tuple[Annotation, ...], ...] = ()
    local_variables: tuple[LocalVariable, ...] = ()

    def local_variable_names(self) -> dict[int, str]:
        """Slot -> name. Variables live from pc 0 (the parameters) take precedence."""
        names: dict[int, str] = {}
        for var in sorted(self.local_variables, key=lambda v: v.start_pc != 0):
            names.setdefault(var.index, var.name)
        return names


@dataclass(frozen=True)
class RawMethodFacts:
    """Bytecode-level facts about one method, as consumed by the analyzer."""
    class_name: str  # internal name: android/widget/TextView
    name: str
    descriptor: str
    signature: Optional[str] = None
    access_flags: int = AccessFlags.PUBLIC
    local_variables: dict[int, str] = field(default_factory=dict)
    parameter_annotations: tuple[tuple[str, ...], ...] = ()
    annotations: tuple[str, ...] = ()

    @property
    def class_fq_name(self) -> str:
        return fq_name(self.class_name)

    @property
    def parameter_types(self) -> tuple[JvmType, ...]:
        return argument_types(self.descriptor)

    @property
    def return_type(self) -> JvmType:
        return return_type(self.descriptor)

    def has_flag(self, flag: AccessFlags) -> bool:
        return (self.access_flags & flag) != 0

    def __str__(self) -> str:
        return f"{self.class_fq_name}.{self.name}{self.descriptor}"


@dataclass
class ClassInfo:
    """Parsed class file information. Fields and class attributes are skipped."""
    version: tuple[int, int]
    access_flags: int
    name: str
    super_class: Optional[str]
    methods: tuple[MethodInfo, ...]

    @property
    def fq_name(self) -> str:
        return fq_name(self.name)

    def raw_methods(self) -> Iterator[RawMethodFacts]:
        """Yield analyzer input for every method in declaration order."""
        for method in self.methods:
            yield RawMethodFacts(
                class_name=self.name,
                name=method.name,
                descriptor=method.descriptor,
                signature=method.signature,
                access_flags=method.access_flags,
                local_variables=method.local_variable_names(),
                parameter_annotations=tuple(
                    tuple(a.type_name for a in anns) for anns in method.parameter_annotations
                ),
                annotations=tuple(a.type_name for a in method.annotations),
            )


class ClassReader:
    """Reads Java class files."""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0
        self.constant_pool: list[Optional[ConstantPoolEntry]] = [None]  # 1-indexed

    def _read_u1(self) -> int:
        val = self.data[self.pos]
        self.pos += 1
        return val

    def _read_u2(self) -> int:
        val = struct.unpack_from(">H", self.data, self.pos)[0]
        self.pos += 2
        return val

    def _read_u4(self) -> int:
        val = struct.unpack_from(">I", self.data, self.pos)[0]
        self.pos += 4
        return val

    def _read_i4(self) -> int:
        val = struct.unpack_from(">i", self.data, self.pos)[0]
        self.pos += 4
        return val

    def _read_i8(self) -> int:
        val = struct.unpack_from(">q", self.data, self.pos)[0]
        self.pos += 8
        return val

    def _read_f4(self) -> float:
        val = struct.unpack_from(">f", self.data, self.pos)[0]
        self.pos += 4
        return val

    def _read_f8(self) -> float:
        val = struct.unpack_from(">d", self.data, self.pos)[0]
        self.pos += 8
        return val

    def _read_bytes(self, length: int) -> bytes:
        val = self.data[self.pos:self.pos + length]
        self.pos += length
        return val

    def _entry(self, index: int) -> ConstantPoolEntry:
        if index <= 0 or index >= len(self.constant_pool) or self.constant_pool[index] is None:
            raise ClassFormatError(f"Invalid constant pool index {index}")
        return self.constant_pool[index]

    def _get_utf8(self, index: int) -> Optional[str]:
        """Get UTF8 string from constant pool."""
        if index == 0:
            return None
        entry = self._entry(index)
        if entry.tag == ConstantPoolTag.UTF8:
            return entry.value
        raise ClassFormatError(f"Expected UTF8 at index {index}, got tag {entry.tag}")

    def _get_class_name(self, index: int) -> Optional[str]:
        """Get class name from constant pool."""
        if index == 0:
            return None
        entry = self._entry(index)
        if entry.tag == ConstantPoolTag.CLASS:
            return self._get_utf8(entry.value)
        raise ClassFormatError(f"Expected CLASS at index {index}, got tag {entry.tag}")

    def _read_constant_pool(self):
        """Read the constant pool."""
        count = self._read_u2()
        i = 1
        while i < count:
            tag = self._read_u1()
            entry = None

            if tag == ConstantPoolTag.UTF8:
                length = self._read_u2()
                value = self._read_bytes(length).decode("utf-8", errors="replace")
                entry = ConstantPoolEntry(tag, value)

            elif tag == ConstantPoolTag.INTEGER:
                entry = ConstantPoolEntry(tag, self._read_i4())

            elif tag == ConstantPoolTag.FLOAT:
                entry = ConstantPoolEntry(tag, self._read_f4())

            elif tag in (ConstantPoolTag.LONG, ConstantPoolTag.DOUBLE):
                value = self._read_i8() if tag == ConstantPoolTag.LONG else self._read_f8()
                self.constant_pool.append(ConstantPoolEntry(tag, value))
                self.constant_pool.append(None)  # Long and Double take 2 slots
                i += 2
                continue

            elif tag in (ConstantPoolTag.CLASS, ConstantPoolTag.STRING, ConstantPoolTag.METHOD_TYPE,
                         ConstantPoolTag.MODULE, ConstantPoolTag.PACKAGE):
                entry = ConstantPoolEntry(tag, self._read_u2())

            elif tag in (ConstantPoolTag.FIELDREF, ConstantPoolTag.METHODREF,
                         ConstantPoolTag.INTERFACE_METHODREF, ConstantPoolTag.NAME_AND_TYPE,
                         ConstantPoolTag.DYNAMIC, ConstantPoolTag.INVOKE_DYNAMIC):
                first = self._read_u2()
                second = self._read_u2()
                entry = ConstantPoolEntry(tag, (first, second))

            elif tag == ConstantPoolTag.METHOD_HANDLE:
                kind = self._read_u1()
                ref_idx = self._read_u2()
                entry = ConstantPoolEntry(tag, (kind, ref_idx))

            else:
                raise ClassFormatError(f"Unknown constant pool tag: {tag}")

            self.constant_pool.append(entry)
            i += 1

    def _read_annotation(self) -> Annotation:
        """Read a single annotation."""
        type_idx = self._read_u2()
        type_name = self._get_utf8(type_idx)
        num_pairs = self._read_u2()
        elements = {}
        for _ in range(num_pairs):
            name_idx = self._read_u2()
            name = self._get_utf8(name_idx)
            value = self._read_element_value()
            elements[name] = value
        return Annotation(type_name=type_name, elements=elements)

    def _read_annotations(self) -> list[Annotation]:
        num_ann = self._read_u2()
        return [self._read_annotation() for _ in range(num_ann)]

    def _read_parameter_annotations(self) -> list[list[Annotation]]:
        num_params = self._read_u1()
        return [self._read_annotations() for _ in range(num_params)]

    def _read_element_value(self) -> AnnotationValue:
        """Read an annotation element value."""
        tag = chr(self._read_u1())

        if tag in "BCDFIJSZs":
            # Constant value
            const_idx = self._read_u2()
            if tag == "s":
                value = self._get_utf8(const_idx)
            else:
                value = self._entry(const_idx).value
            return AnnotationValue(tag, value)

        elif tag == "e":
            # Enum constant
            type_idx = self._read_u2()
            const_idx = self._read_u2()
            return AnnotationValue(tag, (self._get_utf8(type_idx), self._get_utf8(const_idx)))

        elif tag == "c":
            # Class
            class_idx = self._read_u2()
            return AnnotationValue(tag, self._get_utf8(class_idx))

        elif tag == "@":
            # Nested annotation
            return AnnotationValue(tag, self._read_annotation())

        elif tag == "[":
            # Array
            num_values = self._read_u2()
            values = [self._read_element_value() for _ in range(num_values)]
            return AnnotationValue(tag, values)

        else:
            raise ClassFormatError(f"Unknown annotation element value tag: {tag}")

    def _read_local_variable_table(self) -> list[LocalVariable]:
        count = self._read_u2()
        variables = []
        for _ in range(count):
            start_pc = self._read_u2()
            length = self._read_u2()
            name_idx = self._read_u2()
            desc_idx = self._read_u2()
            index = self._read_u2()
            variables.append(LocalVariable(
                start_pc=start_pc,
                length=length,
                name=self._get_utf8(name_idx),
                descriptor=self._get_utf8(desc_idx),
                index=index,
            ))
        return variables

    def _read_code(self) -> dict:
        """Read a Code attribute body, keeping only its nested attributes."""
        self._read_u2()  # max_stack
        self._read_u2()  # max_locals
        code_length = self._read_u4()
        self.pos += code_length
        exception_table_length = self._read_u2()
        self.pos += 8 * exception_table_length
        return self._read_attributes()

    def _read_attributes(self) -> dict:
        """Read the attributes the analyzer uses; others are skipped by length."""
        count = self._read_u2()
        attrs = {}
        for _ in range(count):
            name_idx = self._read_u2()
            name = self._get_utf8(name_idx)
            length = self._read_u4()
            start = self.pos

            if name == "Signature":
                sig_idx = self._read_u2()
                attrs["Signature"] = self._get_utf8(sig_idx)

            elif name in ("RuntimeVisibleAnnotations", "RuntimeInvisibleAnnotations"):
                attrs[name] = self._read_annotations()

            elif name in ("RuntimeVisibleParameterAnnotations", "RuntimeInvisibleParameterAnnotations"):
                attrs[name] = self._read_parameter_annotations()

            elif name == "Code":
                attrs["Code"] = self._read_code()

            elif name == "LocalVariableTable":
                attrs["LocalVariableTable"] = self._read_local_variable_table()

            self.pos = start + length

        return attrs

    def _skip_attributes(self):
        count = self._read_u2()
        for _ in range(count):
            self._read_u2()  # name
            self.pos += self._read_u4()

    def _skip_field(self):
        self.pos += 6  # access, name, descriptor
        self._skip_attributes()

    def _read_method(self) -> MethodInfo:
        """Read a method."""
        access = self._read_u2()
        name_idx = self._read_u2()
        desc_idx = self._read_u2()
        attrs = self._read_attributes()

        annotations = (
            attrs.get("RuntimeInvisibleAnnotations", []) + attrs.get("RuntimeVisibleAnnotations", [])
        )

        # Invisible annotations come first for each parameter
        invisible = attrs.get("RuntimeInvisibleParameterAnnotations", [])
        visible = attrs.get("RuntimeVisibleParameterAnnotations", [])
        parameter_annotations = []
        for i in range(max(len(invisible), len(visible))):
            anns = []
            if i < len(invisible):
                anns.extend(invisible[i])
            if i < len(visible):
                anns.extend(visible[i])
            parameter_annotations.append(tuple(anns))

        code = attrs.get("Code", {})

        return MethodInfo(
            access_flags=access,
            name=self._get_utf8(name_idx),
            descriptor=self._get_utf8(desc_idx),
            signature=attrs.get("Signature"),
            annotations=tuple(annotations),
            parameter_annotations=tuple(parameter_annotations),
            local_variables=tuple(code.get("LocalVariableTable", ())),
        )

    def read(self) -> ClassInfo:
        """Read the class file and return ClassInfo."""
        try:
            return self._read_class()
        except (struct.error, IndexError) as e:
            raise ClassFormatError(f"Truncated class file at offset {self.pos}") from e

    def _read_class(self) -> ClassInfo:
        # Magic number
        magic = self._read_u4()
        if magic != CLASS_MAGIC:
            raise ClassFormatError(f"Invalid class file magic: {hex(magic)}")

        # Version
        minor = self._read_u2()
        major = self._read_u2()

        # Constant pool
        self._read_constant_pool()

        # Access flags
        access_flags = self._read_u2()

        # This/super class
        this_class_idx = self._read_u2()
        super_class_idx = self._read_u2()
        this_class = self._get_class_name(this_class_idx)
        super_class = self._get_class_name(super_class_idx)

        # Interfaces
        interfaces_count = self._read_u2()
        self.pos += 2 * interfaces_count

        # Fields
        fields_count = self._read_u2()
        for _ in range(fields_count):
            self._skip_field()

        # Methods
        methods_count = self._read_u2()
        methods = tuple(self._read_method() for _ in range(methods_count))

        # Class attributes
        self._skip_attributes()

        if self.pos > len(self.data):
            raise ClassFormatError(f"Truncated class file at offset {self.pos}")

        return ClassInfo(
            version=(major, minor),
            access_flags=access_flags,
            name=this_class,
            super_class=super_class,
            methods=methods,
        )


class ClassPath:
    """Manages a classpath of directories and jars for looking up classes."""

    def __init__(self):
        self.entries: list[Path | zipfile.ZipFile] = []
        self._cache: dict[str, ClassInfo] = {}
        self._zip_files: list[zipfile.ZipFile] = []

    def add_path(self, path: str | Path):
        """Add a path to the classpath (directory or jar/zip)."""
        path = Path(path)
        if path.suffix in (".jar", ".zip", ".aar"):
            zf = zipfile.ZipFile(path, "r")
            self._zip_files.append(zf)
            self.entries.append(zf)
        elif path.is_dir():
            self.entries.append(path)
        else:
            raise ValueError(f"Invalid classpath entry: {path}")

    def find_class(self, class_name: str) -> Optional[ClassInfo]:
        """Find and parse a class by internal name (e.g., 'java/lang/String')."""
        if class_name in self._cache:
            return self._cache[class_name]

        info = self._load(class_name)
        if info is not None:
            self._cache[class_name] = info
        return info

    def _load(self, class_name: str) -> Optional[ClassInfo]:
        class_file = class_name + ".class"

        for entry in self.entries:
            if isinstance(entry, zipfile.ZipFile):
                try:
                    data = entry.read(class_file)
                except KeyError:
                    continue
            else:
                path = entry / class_file
                if not path.exists():
                    continue
                data = path.read_bytes()
            logger.debug("Reading %s from %s", class_name, entry)
            return ClassReader(data).read()

        return None

    def class_names(self) -> Iterator[str]:
        """Internal names of all classes on the classpath, in entry order."""
        seen = set()
        for entry in self.entries:
            if isinstance(entry, zipfile.ZipFile):
                names = (n for n in entry.namelist() if n.endswith(".class"))
            else:
                names = (p.relative_to(entry).as_posix() for p in sorted(entry.rglob("*.class")))
            for name in names:
                class_name = name[:-len(".class")]
                if class_name.endswith(("module-info", "package-info")) or class_name in seen:
                    continue
                seen.add(class_name)
                yield class_name

    def iter_classes(self, errors: Optional[list[ClassFormatError]] = None) -> Iterator[ClassInfo]:
        """Parse every class on the classpath. Results are not cached.

        When errors is given, unreadable classes are logged, collected there
        and skipped; otherwise the first one raises.
        """
        for class_name in self.class_names():
            try:
                info = self._cache.get(class_name) or self._load(class_name)
            except ClassFormatError as e:
                if errors is None:
                    raise
                logger.error("Skipping %s: %s", class_name, e)
                errors.append(e)
                continue
            if info is not None:
                yield info

    def close(self):
        """Close all zip files."""
        for zf in self._zip_files:
            zf.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def read_class_file(path: str | Path) -> ClassInfo:
    """Read a single class file."""
    data = Path(path).read_bytes()
    reader = ClassReader(data)
    return reader.read()
