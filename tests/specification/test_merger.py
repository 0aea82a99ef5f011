"""
Tests for specification records and the specification merger.
"""

import logging

import pytest

from formtree.exceptions import InvalidSpecificationError, SpecificationTypeMismatch
from formtree.processing.validators import StringLength
from formtree.specification import (
    ContainerSpecification,
    InputSpecification,
    UnitReference,
    compile_specification,
)
from formtree.structure import Element, Fieldset, FileElement, Form, SelectElement


class TestRecords:
    """Tests for record literals."""

    def test_defaults(self):
        record = InputSpecification.from_literal("name", {}, "name")
        assert record.required is False
        assert record.filters == ()
        assert record.validators == ()
        assert record.type is None
        assert record.effective_type == "input"

    def test_camel_case_keys(self):
        record = InputSpecification.from_literal(
            "name",
            {"continueIfEmpty": True, "allowEmpty": True, "breakOnFailure": True},
            "name",
        )
        assert record.continue_if_empty and record.allow_empty and record.break_on_failure

    def test_unit_entries(self):
        prebuilt = StringLength(min=1)
        record = InputSpecification.from_literal(
            "name",
            {"filters": ["StringTrim"], "validators": [{"name": "NotEmpty"}, prebuilt]},
            "name",
        )
        assert record.filters == (UnitReference("StringTrim"),)
        assert record.validators[0] == UnitReference("NotEmpty")
        assert record.validators[1] is prebuilt

    def test_unknown_key_rejected(self):
        with pytest.raises(InvalidSpecificationError, match="unknown record key"):
            InputSpecification.from_literal("name", {"requried": True}, "name")

    def test_invalid_unit_entry(self):
        with pytest.raises(InvalidSpecificationError):
            InputSpecification.from_literal("name", {"validators": [42]}, "name")

    def test_container_literal(self):
        spec = ContainerSpecification.from_literal(
            "message",
            {"subject": {"required": True}, "sender": {"email": {"required": True}}},
        )
        assert isinstance(spec.get("sender"), ContainerSpecification)
        assert spec.get("sender.email").required
        assert spec.paths() == ["subject", "sender.email"]
        assert "sender.email" in spec


class TestPrecedence:
    """Explicit record > container hint > element hint > default."""

    def test_default_record(self):
        form = Form("f")
        form.add(Element("plain"))
        record = compile_specification(form).get("plain")
        assert record == InputSpecification(name="plain")

    def test_element_hint_used(self, nested_form):
        record = compile_specification(nested_form).get("sender.email")
        assert record.required
        assert record.validators == (UnitReference("EmailAddress"),)

    def test_container_hint_overrides_element_hint(self):
        form = Form("f")
        sender = Fieldset(
            "sender", options={"validation_hint": {"email": {"required": False}}}
        )
        sender.add({"name": "email", "type": "email"})
        form.add(sender)
        record = compile_specification(form).get("sender.email")
        assert record.required is False
        # shallow merge keeps the element's validators
        assert record.validators == (UnitReference("EmailAddress"),)

    def test_parent_entry_overrides_container_own_hint(self):
        form = Form(
            "f",
            options={"validation_hint": {"sender": {"name": {"required": False}}}},
        )
        sender = Fieldset("sender", options={"validation_hint": {"name": {"required": True}}})
        sender.add(Element("name"))
        form.add(sender)
        assert compile_specification(form).get("sender.name").required is False

    def test_explicit_record_used_verbatim(self, nested_form):
        spec = compile_specification(nested_form, {"sender": {"email": {"required": False}}})
        record = spec.get("sender.email")
        assert record.required is False
        assert record.validators == ()

    def test_explicit_type_wins(self):
        form = Form("f")
        form.add(SelectElement("tags", attributes={"multiple": True}))
        assert compile_specification(form).get("tags").type == "array"
        spec = compile_specification(form, {"tags": {"type": "input"}})
        assert spec.get("tags").type == "input"

    def test_unmatched_explicit_key_warns(self, nested_form, caplog):
        with caplog.at_level(logging.WARNING, logger="formtree.specification.merger"):
            compile_specification(nested_form, {"missing": {"required": True}})
        assert "missing" in caplog.text


class TestTypeCompatibility:
    """Merged types must fit the element kind."""

    def test_file_element_hint_selects_file(self):
        form = Form("f")
        form.add(FileElement("avatar"))
        assert compile_specification(form).get("avatar").type == "file"

    def test_explicit_record_resets_file_type(self):
        form = Form("profile")
        form.add(FileElement("avatar"))
        with pytest.raises(SpecificationTypeMismatch) as exc_info:
            compile_specification(form, {"avatar": {"required": True}})
        assert exc_info.value.path == "avatar"

    def test_explicit_record_respecifying_type(self):
        form = Form("profile")
        form.add(FileElement("avatar"))
        spec = compile_specification(form, {"avatar": {"required": True, "type": "file"}})
        assert spec.get("avatar").type == "file"

    def test_mismatch_names_nested_path(self):
        form = Form("f")
        profile = form.add(Fieldset("profile"))
        profile.add(FileElement("avatar"))
        with pytest.raises(SpecificationTypeMismatch, match="profile.avatar"):
            compile_specification(form, {"profile": {"avatar": {"type": "array"}}})

    def test_container_type(self, nested_form):
        spec = compile_specification(nested_form, {"sender": {"type": "input_filter"}})
        assert spec.get("sender").type == "input_filter"
        with pytest.raises(SpecificationTypeMismatch):
            compile_specification(nested_form, {"sender": {"type": "input"}})


class TestFormExplicitSpecification:
    """Explicit records stored on a form replace earlier ones."""

    def test_replacement_does_not_append(self, sender_form):
        sender_form.set_input_specification(
            {"name": {"required": True, "validators": [{"name": "Digits"}]}}
        )
        record = sender_form.specification.get("name")
        assert record.validators == (UnitReference("Digits"),)
        # other paths are untouched
        assert sender_form.specification.get("email").validators == (
            UnitReference("EmailAddress"),
        )

    def test_add_input_specification(self, nested_form):
        nested_form.add_input_specification("sender.name", {"required": False})
        assert nested_form.explicit_specification == {"sender": {"name": {"required": False}}}
        assert nested_form.specification.get("sender.name").required is False
        assert nested_form.specification.get("sender.email").required is True

    def test_nested_merge_keeps_siblings(self, nested_form):
        nested_form.set_input_specification({"sender": {"name": {"required": False}}})
        nested_form.set_input_specification({"sender": {"email": {"required": False}}})
        assert set(nested_form.explicit_specification["sender"]) == {"name", "email"}
