"""Tests for signature compilation and argument formatting."""

import logging

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from pyjsig.annotations import AnnotationEvidence, RETURN_INDEX
from pyjsig.classfile import AccessFlags
from pyjsig.classifier import is_getter
from pyjsig.classreader import RawMethodFacts
from pyjsig.compiler import (
    SignatureCompiler, annotation_method_key, WRAP_CONTENT,
    format_arguments, format_arguments_with_defaults, format_argument_types,
    format_argument_names, format_layout_params_arguments, format_layout_params_arguments_invoke,
    format_type_parameters, format_where_clause,
)
from pyjsig.errors import MalformedSignatureError, MethodAnalysisError
from pyjsig.names import NameOracle
from pyjsig.nullability import Nullability
from pyjsig.types import Variance

NOT_NULL = "Lorg/jetbrains/annotations/NotNull;"
NULLABLE = "Lorg/jetbrains/annotations/Nullable;"


def method(name="m", descriptor="()V", **kwargs):
    kwargs.setdefault("class_name", "android/widget/TextView")
    return RawMethodFacts(name=name, descriptor=descriptor, **kwargs)


class RecordingEvidence(AnnotationEvidence):
    def __init__(self, answers=None):
        self.answers = answers or {}
        self.queries = []

    def query(self, class_name, method_key, index):
        self.queries.append((class_name, method_key, index))
        return self.answers.get(index, Nullability.ABSENT)


class TestDescriptorOnly:
    def test_arity_and_erased_types(self):
        sig = SignatureCompiler().compile(method("setText", "(Ljava/lang/CharSequence;I)V"))
        assert [str(p.type) for p in sig.parameters] == ["kotlin.CharSequence", "kotlin.Int"]
        assert all(p.type.arguments == () for p in sig.parameters)
        assert not any(p.type.is_type_variable for p in sig.parameters)
        assert str(sig.return_type) == "kotlin.Unit"
        assert sig.type_parameters == ()

    def test_default_is_not_null(self):
        sig = SignatureCompiler().compile(method("getTag", "()Ljava/lang/Object;"))
        assert not sig.return_type.is_nullable

    def test_names_default_to_positions(self):
        sig = SignatureCompiler().compile(method("m", "(II)V"))
        assert [p.name for p in sig.parameters] == ["p0", "p1"]

    def test_local_variable_names(self):
        sig = SignatureCompiler().compile(
            method("setPadding", "(JI)V", local_variables={0: "this", 1: "left", 3: "top"})
        )
        assert [p.name for p in sig.parameters] == ["left", "top"]


class TestGenericSignature:
    def test_enrichment_preserves_order_and_count(self):
        m = method(
            "put",
            "(Ljava/util/Map;ILjava/util/List;)Ljava/util/List;",
            signature="<T:Ljava/lang/Object;>(Ljava/util/Map<Ljava/lang/String;TT;>;ILjava/util/List<+TT;>;)Ljava/util/List<TT;>;",
        )
        sig = SignatureCompiler().compile(m)
        assert [str(p.type) for p in sig.parameters] == [
            "kotlin.collections.Map<kotlin.String, T>",
            "kotlin.Int",
            "kotlin.collections.List<out T>",
        ]
        assert str(sig.return_type) == "kotlin.collections.List<T>"
        assert [str(tp) for tp in sig.type_parameters] == ["T"]

    def test_type_parameter_bounds(self):
        m = method(
            "max",
            "(Ljava/lang/Comparable;)Ljava/lang/Comparable;",
            signature="<T::Ljava/lang/Comparable<TT;>;>(TT;)TT;",
            access_flags=AccessFlags.PUBLIC | AccessFlags.STATIC,
        )
        sig = SignatureCompiler().compile(m)
        assert [str(tp) for tp in sig.type_parameters] == ["T : kotlin.Comparable<T>"]
        assert sig.parameters[0].type.is_type_variable

    def test_synthetic_leading_parameters(self):
        # Inner class constructors take the outer instance first
        m = method(
            "<init>",
            "(Landroid/widget/TextView;Ljava/util/List;)V",
            signature="(Ljava/util/List<Ljava/lang/String;>;)V",
        )
        sig = SignatureCompiler().compile(m)
        assert len(sig.parameters) == 2
        assert str(sig.parameters[0].type) == "android.widget.TextView"
        assert str(sig.parameters[1].type) == "kotlin.collections.List<kotlin.String>"

    def test_longer_signature_falls_back_to_descriptor(self, caplog):
        m = method("m", "(Ljava/util/List;)V", signature="(Ljava/util/List<TT;>;I)V")
        with caplog.at_level(logging.WARNING, logger="pyjsig"):
            sig = SignatureCompiler().compile(m)
        assert [str(p.type) for p in sig.parameters] == ["kotlin.collections.List"]
        assert "using erased types" in caplog.text

    def test_idempotent(self):
        m = method("m", "(Ljava/util/List;)V", signature="(Ljava/util/List<*>;)V")
        compiler = SignatureCompiler()
        assert compiler.compile(m) == compiler.compile(m)

    def test_malformed_signature(self):
        with pytest.raises(MalformedSignatureError):
            SignatureCompiler().compile(method("m", "(Ljava/util/List;)V", signature="(Ljava/util/List<>;)V"))


class TestNullability:
    def test_bytecode_annotations(self):
        m = method(
            "setText",
            "(Ljava/lang/CharSequence;Ljava/lang/Object;)Ljava/lang/String;",
            parameter_annotations=((NULLABLE,), (NOT_NULL,)),
            annotations=(NULLABLE,),
        )
        sig = SignatureCompiler().compile(m)
        assert [p.type.is_nullable for p in sig.parameters] == [True, False]
        assert sig.return_type.is_nullable

    def test_bytecode_wins_over_external(self):
        evidence = RecordingEvidence({0: Nullability.NOT_NULL, 1: Nullability.NULLABLE})
        m = method(
            "m",
            "(Ljava/lang/String;Ljava/lang/String;)V",
            parameter_annotations=((NULLABLE,),),
        )
        sig = SignatureCompiler(evidence).compile(m)
        assert [p.type.is_nullable for p in sig.parameters] == [True, True]
        assert [q[2] for q in evidence.queries] == [1, RETURN_INDEX]

    def test_external_evidence_uses_annotation_key(self):
        evidence = RecordingEvidence({RETURN_INDEX: Nullability.NULLABLE})
        m = method("getText", "()Ljava/lang/CharSequence;")
        sig = SignatureCompiler(evidence).compile(m)
        assert sig.return_type.is_nullable
        assert evidence.queries == [
            ("android/widget/TextView", "android.widget.TextView java.lang.CharSequence getText()", RETURN_INDEX)
        ]

    def test_generic_parameter_keeps_nullability(self):
        m = method(
            "m",
            "(Ljava/util/List;)V",
            signature="(Ljava/util/List<+Ljava/lang/Number;>;)V",
            parameter_annotations=((NULLABLE,),),
        )
        param_type = SignatureCompiler().compile(m).parameters[0].type
        assert str(param_type) == "kotlin.collections.List<out kotlin.Number>?"
        assert param_type.arguments[0].variance is Variance.COVARIANT
        assert not param_type.arguments[0].is_nullable

    def test_primitives_ignore_annotations(self):
        m = method("m", "(I)V", parameter_annotations=((NULLABLE,),))
        assert not SignatureCompiler().compile(m).parameters[0].type.is_nullable


class TestNames:
    def test_oracle_wins(self):
        class Oracle(NameOracle):
            def get_parameter_names(self, class_name, method_name, parameter_types):
                return ["alpha"]

        m = method("m", "(I)V", local_variables={1: "beta"})
        sig = SignatureCompiler(name_oracle=Oracle()).compile(m)
        assert sig.parameters[0].name == "alpha"


def test_annotation_method_key():
    assert annotation_method_key(method("setText", "(Ljava/lang/CharSequence;I)V")) == \
        "android.widget.TextView void setText(java.lang.CharSequence, int)"
    assert annotation_method_key(method("<init>", "(Landroid/content/Context;)V")) == \
        "android.widget.TextView TextView(android.content.Context)"


class TestCompileAll:
    def test_failure_is_isolated(self):
        good = method("good", "(I)V")
        bad = method("bad", "(I)V", signature="(Q)V")
        also_good = method("alsoGood", "()I")
        compiled, errors = SignatureCompiler().compile_all([good, bad, also_good])
        assert [m.name for m, _ in compiled] == ["good", "alsoGood"]
        assert len(errors) == 1
        assert isinstance(errors[0], MethodAnalysisError)
        assert errors[0].method_name == "bad"
        assert isinstance(errors[0].cause, MalformedSignatureError)

    def test_predicate_runs_inside_isolation(self):
        good = method("getOk", "()I")
        bad = method("getBad", "(Q)I")
        skipped = method("setOk", "(I)V")
        compiled, errors = SignatureCompiler().compile_all([good, bad, skipped], is_getter)
        assert [m.name for m, _ in compiled] == ["getOk"]
        assert [e.method_name for e in errors] == ["getBad"]
        assert isinstance(errors[0].cause, MalformedSignatureError)


class TestTypeParameters:
    def test_single_bound_is_inline(self):
        m = method(
            "max", "(Ljava/lang/Comparable;)Ljava/lang/Comparable;",
            signature="<T::Ljava/lang/Comparable<TT;>;U:Ljava/lang/Object;>(TT;)TT;",
        )
        sig = SignatureCompiler().compile(m)
        assert format_type_parameters(sig) == "<T : kotlin.Comparable<T>, U>"
        assert format_where_clause(sig) == ""

    def test_several_bounds_use_where_clause(self):
        m = method(
            "append", "(Ljava/lang/CharSequence;)V",
            signature="<T::Ljava/lang/CharSequence;:Ljava/lang/Comparable<TT;>;>(TT;)V",
        )
        sig = SignatureCompiler().compile(m)
        assert format_type_parameters(sig) == "<T>"
        assert format_where_clause(sig) == "where T : kotlin.CharSequence, T : kotlin.Comparable<T>"
        assert sig.type_parameters[0].constraints() == [
            "T : kotlin.CharSequence", "T : kotlin.Comparable<T>",
        ]

    def test_non_generic(self):
        sig = SignatureCompiler().compile(method("m", "()V"))
        assert format_type_parameters(sig) == ""
        assert format_where_clause(sig) == ""


class TestFormatting:
    def setup_method(self):
        m = method(
            "setText",
            "(Ljava/lang/CharSequence;I)V",
            local_variables={1: "text", 2: "start"},
            parameter_annotations=((NULLABLE,),),
        )
        self.method = m
        self.signature = SignatureCompiler().compile(m)

    def test_arguments(self):
        assert format_arguments(self.signature) == "text: kotlin.CharSequence?, start: kotlin.Int"
        assert format_argument_types(self.signature) == "kotlin.CharSequence?, kotlin.Int"
        assert format_argument_names(self.signature) == "text, start"

    def test_arguments_with_defaults(self):
        assert format_arguments_with_defaults(self.signature, self.method) == \
            "text: kotlin.CharSequence? = kotlin.CharSequence(), start: kotlin.Int = 0"
        assert format_arguments_with_defaults(self.signature, self.method, only_primitive=True) == \
            "text: kotlin.CharSequence?, start: kotlin.Int = 0"


class TestLayoutParams:
    def test_width_and_height(self):
        m = method("<init>", "(II)V", class_name="android/widget/FrameLayout$LayoutParams",
                    local_variables={1: "w", 2: "h"})
        sig = SignatureCompiler().compile(m)
        assert format_layout_params_arguments(sig) == [
            f"width: kotlin.Int = {WRAP_CONTENT}",
            f"height: kotlin.Int = {WRAP_CONTENT}",
        ]
        assert format_layout_params_arguments_invoke(sig) == "width, height"

    def test_nullable_arguments_are_asserted(self):
        m = method("<init>", "(Landroid/view/ViewGroup$LayoutParams;)V",
                    class_name="android/widget/FrameLayout$LayoutParams",
                    local_variables={1: "source"}, parameter_annotations=((NULLABLE,),))
        sig = SignatureCompiler().compile(m)
        assert format_layout_params_arguments(sig) == ["source: android.view.ViewGroup.LayoutParams?"]
        assert format_layout_params_arguments_invoke(sig) == "source!!"

    def test_custom_type_rendering(self):
        m = method("<init>", "(I)V", local_variables={1: "width"})
        sig = SignatureCompiler().compile(m)
        assert format_layout_params_arguments(sig, lambda t: "Int") == [f"width: Int = {WRAP_CONTENT}"]
