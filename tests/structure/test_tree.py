"""
Tests for elements, fieldsets and the element registry.
"""

import pytest

from formtree.exceptions import (
    CyclicContainerError,
    DuplicateElementNameError,
    ElementOwnershipError,
    InvalidSpecificationError,
    ServiceNotFoundError,
    TreeStructureError,
)
from formtree.structure import (
    CheckboxElement,
    Element,
    ElementRegistry,
    EmailElement,
    Fieldset,
    FileElement,
    Form,
    NumberElement,
    SelectElement,
)


class TestElement:
    """Tests for leaf element options, attributes and hints."""

    def test_label_option_sets_label(self):
        element = Element("name", options={"label": "Your name"})
        assert element.label == "Your name"
        assert element.get_option("label") == "Your name"

    def test_attributes_keep_insertion_order(self):
        element = Element("name", attributes={"b": 1, "a": 2})
        element.set_attribute("c", 3)
        assert list(element.get_attributes()) == ["b", "a", "c"]
        element.remove_attribute("a")
        assert not element.has_attribute("a")

    def test_plain_element_has_no_hint(self):
        assert Element("name").get_input_specification() is None

    def test_validation_hint_option_overlays_default(self):
        element = EmailElement("email", options={"validation_hint": {"required": False}})
        hint = element.get_input_specification()
        assert hint["required"] is False
        assert hint["validators"] == [{"name": "EmailAddress"}]

    def test_number_range_attributes(self):
        element = NumberElement("age", attributes={"min": 1, "max": 99})
        names = [v["name"] for v in element.get_input_specification()["validators"]]
        assert names == ["Regex", "Between"]

    def test_checkbox_values(self):
        element = CheckboxElement("agree")
        element.value = "1"
        assert element.is_checked
        haystack = element.get_input_specification()["validators"][0]["options"]["haystack"]
        assert haystack == ["1", "0"]

    def test_multiple_select_uses_array_type(self):
        element = SelectElement(
            "tags", options={"value_options": {"a": "A", "b": "B"}}, attributes={"multiple": True}
        )
        hint = element.get_input_specification()
        assert hint["type"] == "array"
        assert hint["validators"][0]["options"]["haystack"] == ["a", "b"]

    def test_file_accepts_only_file_type(self):
        element = FileElement("avatar")
        assert element.accepts_input_type("file")
        assert not element.accepts_input_type("input")

    def test_rename_while_parented_fails(self):
        fieldset = Fieldset("sender")
        element = fieldset.add(Element("name"))
        with pytest.raises(TreeStructureError):
            element.name = "other"


class TestFieldsetComposition:
    """Tests for strict tree ownership."""

    def test_duplicate_name_does_not_mutate(self):
        fieldset = Fieldset("sender")
        first = fieldset.add(Element("name"))
        duplicate = Element("name")
        with pytest.raises(DuplicateElementNameError) as exc_info:
            fieldset.add(duplicate)
        assert exc_info.value.container == "sender"
        assert len(fieldset) == 1
        assert fieldset.get("name") is first
        assert duplicate.parent is None

    def test_element_belongs_to_one_container(self):
        element = Element("name")
        Fieldset("a").add(element)
        with pytest.raises(ElementOwnershipError):
            Fieldset("b").add(element)

    def test_container_cannot_contain_itself(self):
        fieldset = Fieldset("sender")
        with pytest.raises(CyclicContainerError):
            fieldset.add(fieldset)

    def test_container_cannot_contain_ancestor(self):
        outer = Fieldset("outer")
        inner = outer.add(Fieldset("inner"))
        outer.remove("inner")
        inner.add(outer)
        with pytest.raises(CyclicContainerError):
            outer.add(inner)

    def test_unnamed_element_rejected(self):
        with pytest.raises(ValueError):
            Fieldset("sender").add(Element())

    def test_name_override(self):
        fieldset = Fieldset("sender")
        fieldset.add(Element(), name="email")
        assert fieldset.has("email")

    def test_remove_detaches(self):
        fieldset = Fieldset("sender")
        element = fieldset.add(Element("name"))
        assert fieldset.remove("name") is element
        assert element.parent is None
        assert fieldset.remove("name") is None

    def test_get_by_path(self, nested_form):
        assert nested_form.get("sender.email").name == "email"
        assert nested_form.get("sender[name]").name == "name"
        with pytest.raises(KeyError):
            nested_form.get("sender.phone")


class TestFieldsetOrdering:
    """Priority ordering and preserved declaration order."""

    def test_priority_descending_with_stable_ties(self):
        fieldset = Fieldset("f")
        fieldset.add(Element("a"))
        fieldset.add(Element("b"), priority=10)
        fieldset.add(Element("c"))
        fieldset.add(Element("d"), priority=10)
        assert fieldset.names() == ["b", "d", "a", "c"]

    def test_preserved_order_ignores_priority(self):
        fieldset = Fieldset("f", options={"preserve_defined_order": True})
        fieldset.add(Element("a"))
        fieldset.add(Element("b"), priority=10)
        assert fieldset.names() == ["a", "b"]

    def test_set_priority(self):
        fieldset = Fieldset("f")
        fieldset.add(Element("a"))
        fieldset.add(Element("b"))
        fieldset.set_priority("b", 5)
        assert fieldset.names() == ["b", "a"]
        assert fieldset.get_priority("b") == 5

    def test_walk_visits_container_before_children(self, nested_form):
        paths = [path for path, _ in nested_form.walk()]
        assert paths == ["subject", "sender", "sender.name", "sender.email"]


class TestFieldsetValues:
    """Nested value population."""

    def test_populate_values(self, nested_form):
        nested_form.populate_values({"subject": "Hi", "sender": {"name": "John"}})
        assert nested_form.get("subject").value == "Hi"
        assert nested_form.get("sender.name").value == "John"
        assert nested_form.value["sender"] == {"name": "John", "email": None}


class TestElementRegistry:
    """Creating elements from spec dicts."""

    def test_create_by_type_name(self):
        registry = ElementRegistry()
        assert isinstance(registry.create({"name": "email", "type": "Email"}), EmailElement)
        assert isinstance(registry.create({"name": "x", "type": "multiCheckbox"}), SelectElement)

    def test_create_container_with_children(self):
        fieldset = ElementRegistry().create(
            {
                "name": "sender",
                "type": "fieldset",
                "elements": [
                    {"name": "name"},
                    {"name": "email", "type": "email", "priority": 5},
                ],
            }
        )
        assert fieldset.names() == ["email", "name"]

    def test_create_form(self):
        assert isinstance(ElementRegistry().create({"name": "f", "type": "form"}), Form)

    def test_unknown_type(self):
        with pytest.raises(ServiceNotFoundError):
            ElementRegistry().create({"name": "x", "type": "nope"})

    def test_unknown_keys(self):
        with pytest.raises(InvalidSpecificationError):
            ElementRegistry().create({"name": "x", "label": "X"})

    def test_leaf_cannot_declare_elements(self):
        with pytest.raises(InvalidSpecificationError):
            ElementRegistry().create({"name": "x", "elements": [{"name": "y"}]})

    def test_add_spec_dict_uses_registry(self):
        fieldset = Fieldset("f")
        element = fieldset.add({"name": "avatar", "type": "file"})
        assert isinstance(element, FileElement)
