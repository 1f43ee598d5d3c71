#!/usr/bin/env python3
"""
Command-line interface for pyjsig - JVM method signature analyzer.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

FILTERS = ("all", "public", "getters", "setters", "listeners", "constructors")


def _method_filter(name: str):
    from . import classifier

    if name == "public":
        return classifier.is_generated_candidate
    if name == "getters":
        return lambda m: classifier.is_generated_candidate(m) and classifier.is_getter(m)
    if name == "setters":
        return lambda m: classifier.is_generated_candidate(m) and classifier.is_non_listener_setter(m)
    if name == "listeners":
        return lambda m: classifier.is_generated_candidate(m) and classifier.is_listener_setter(m)
    if name == "constructors":
        return lambda m: classifier.is_generated_candidate(m) and classifier.is_constructor(m)
    return lambda m: not classifier.is_synthetic(m) and not classifier.is_overridden(m)


def _load_classes(paths: list[str], classpath, errors: list):
    """Yield ClassInfo for every class file, jar or directory given.

    Unreadable classes are logged, appended to errors and skipped.
    """
    from .classreader import read_class_file
    from .errors import ClassFormatError

    class_files = []
    for source in paths:
        path = Path(source)
        if not path.exists():
            print(f"Error: File not found: {source}", file=sys.stderr)
            sys.exit(1)
        if path.suffix == ".class":
            class_files.append(path)
        else:
            classpath.add_path(path)

    for path in class_files:
        try:
            info = read_class_file(path)
        except ClassFormatError as e:
            logger.error("Skipping %s: %s", path, e)
            errors.append(e)
            continue
        yield info
    yield from classpath.iter_classes(errors)


def describe_command(args):
    """Compile every selected method and print the results as JSON."""
    from .classreader import ClassPath
    from .compiler import format_arguments, format_type_parameters, format_where_clause
    from .context import AnalyzerContext

    level = "ERROR" if args.quiet else ("DEBUG" if args.verbose else "WARNING")
    context = AnalyzerContext.create(
        props_dir=args.props_dir,
        log_level=level,
        parameter_names=args.names,
    )
    compiler = context.compiler()
    selected = _method_filter(args.filter)

    results = []
    method_failures = 0
    class_errors = []
    with ClassPath() as classpath:
        for info in _load_classes(args.paths, classpath, class_errors):
            if args.class_name and info.fq_name != args.class_name:
                continue
            compiled, errors = compiler.compile_all(info.raw_methods(), selected)
            method_failures += len(errors)
            for method, signature in compiled:
                results.append({
                    "class": info.fq_name,
                    "descriptor": method.descriptor,
                    "arguments": format_arguments(signature),
                    "rendered_type_parameters": format_type_parameters(signature),
                    "where_clause": format_where_clause(signature),
                    **signature.to_dict(),
                })

    json.dump(results, sys.stdout, indent=2)
    sys.stdout.write("\n")

    if method_failures or class_errors:
        if not args.quiet:
            if method_failures:
                print(f"{method_failures} method(s) could not be analyzed", file=sys.stderr)
            if class_errors:
                print(f"{len(class_errors)} class(es) could not be read", file=sys.stderr)
        sys.exit(1)


def main(argv=None):
    """Main entry point for pyjsig CLI."""
    parser = argparse.ArgumentParser(
        prog="pyjsig",
        description="Describe JVM method signatures from compiled class files",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    describe_parser = subparsers.add_parser(
        "describe",
        help="Print method signatures of class files, jars or directories as JSON",
    )
    describe_parser.add_argument(
        "paths",
        nargs="+",
        help=".class files, .jar files or class directories",
    )
    describe_parser.add_argument(
        "--props-dir",
        help="Directory holding the SDK annotations jar and an annotations/ tree",
    )
    describe_parser.add_argument(
        "--names",
        help="JSON file mapping class -> method -> parameter types -> parameter names",
    )
    describe_parser.add_argument(
        "--filter",
        choices=FILTERS,
        default="all",
        help="Which methods to describe (default: all non-synthetic methods)",
    )
    describe_parser.add_argument(
        "--class",
        dest="class_name",
        help="Only describe this fully qualified class",
    )
    describe_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log fallbacks and skipped information",
    )
    describe_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors",
    )
    describe_parser.set_defaults(func=describe_command)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
