"""Tests for analyzer context wiring."""

import dataclasses
import json
import logging

from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from pyjsig.classreader import RawMethodFacts
from pyjsig.context import AnalyzerContext, LOGGER_NAME
from pyjsig.names import MappingNameOracle


def test_context_holds_only_collaborators():
    assert [f.name for f in dataclasses.fields(AnalyzerContext)] == ["annotation_manager", "name_oracle"]


def test_create_without_log_level_leaves_logging_alone(tmp_path):
    logger = logging.getLogger(LOGGER_NAME)
    handlers = list(logger.handlers)
    AnalyzerContext.create(props_dir=tmp_path)
    assert logger.handlers == handlers


def test_create_wires_providers_and_names(tmp_path):
    package_dir = tmp_path / "annotations" / "android" / "widget"
    package_dir.mkdir(parents=True)
    (package_dir / "annotations.xml").write_text(
        '<root><item name="android.widget.TextView void setText(java.lang.CharSequence) 0">'
        '<annotation name="org.jetbrains.annotations.Nullable"/></item></root>'
    )
    names = tmp_path / "names.json"
    names.write_text(json.dumps({
        "android.widget.TextView": {"setText": {"java.lang.CharSequence": ["text"]}},
    }))

    context = AnalyzerContext.create(props_dir=tmp_path, parameter_names=names)
    assert isinstance(context.name_oracle, MappingNameOracle)

    sig = context.compiler().compile(
        RawMethodFacts("android/widget/TextView", "setText", "(Ljava/lang/CharSequence;)V")
    )
    assert str(sig.parameters[0]) == "text: kotlin.CharSequence?"
