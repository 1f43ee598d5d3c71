"""Tests for method classification predicates."""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from pyjsig.classfile import AccessFlags
from pyjsig.classifier import (
    is_getter, is_listener_setter, is_non_listener_setter, is_generated_candidate,
    is_constructor, is_static, is_overridden, is_synthetic, is_public,
)
from pyjsig.classreader import RawMethodFacts


def method(name, descriptor, access_flags=AccessFlags.PUBLIC):
    return RawMethodFacts("android/view/View", name, descriptor, access_flags=access_flags)


class TestGetters:
    @pytest.mark.parametrize("name,descriptor", [
        ("getValue", "()I"),
        ("isEnabled", "()Z"),
        ("getText", "()Ljava/lang/CharSequence;"),
    ])
    def test_getters(self, name, descriptor):
        assert is_getter(method(name, descriptor))

    @pytest.mark.parametrize("name,descriptor", [
        ("get", "()I"),
        ("getter", "()I"),
        ("island", "()Z"),
        ("getValue", "(I)I"),
        ("getNothing", "()V"),
    ])
    def test_not_getters(self, name, descriptor):
        assert not is_getter(method(name, descriptor))

    def test_private_getter(self):
        assert not is_getter(method("getValue", "()I", AccessFlags.PRIVATE))


class TestSetters:
    def test_listener_setter(self):
        m = method("setOnClickListener", "(Landroid/view/View$OnClickListener;)V")
        assert is_listener_setter(m)
        assert not is_listener_setter(m, match_set=False)
        assert not is_non_listener_setter(m)

    def test_add_listener(self):
        m = method("addTextChangedListener", "(Landroid/text/TextWatcher;)V")
        assert is_listener_setter(m)
        assert not is_listener_setter(m, match_add=False)

    def test_plain_setter(self):
        m = method("setText", "(Ljava/lang/CharSequence;)V")
        assert is_non_listener_setter(m)
        assert not is_listener_setter(m)

    def test_setter_arity(self):
        assert not is_non_listener_setter(method("setText", "(Ljava/lang/CharSequence;I)V"))
        assert not is_non_listener_setter(method("setup", "(I)V"))

    def test_listener_named_setter(self):
        assert not is_non_listener_setter(method("setLongClickListener", "(Ljava/lang/Object;)V"))


class TestAccess:
    def test_flags(self):
        m = method("run", "()V", AccessFlags.PUBLIC | AccessFlags.STATIC)
        assert is_public(m)
        assert is_static(m)
        assert not is_synthetic(m)
        assert not is_overridden(m)

    def test_generated_candidate(self):
        assert is_generated_candidate(method("run", "()V"))
        assert not is_generated_candidate(method("run", "()V", AccessFlags.PUBLIC | AccessFlags.BRIDGE))
        assert not is_generated_candidate(method("run", "()V", AccessFlags.PUBLIC | AccessFlags.SYNTHETIC))
        assert not is_generated_candidate(method("run", "()V", AccessFlags.PROTECTED))

    def test_constructor(self):
        assert is_constructor(method("<init>", "(Landroid/content/Context;)V"))
        assert not is_constructor(method("<clinit>", "()V"))
