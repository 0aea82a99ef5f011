"""
Tests for building forms from annotated pydantic models.
"""

from typing import Annotated, Optional

import pytest
from pydantic import BaseModel, Field

from formtree.annotation import (
    AnnotationBuilder,
    AttributeBuilder,
    BuilderState,
    Exclude,
    Filter,
    Hydrator,
    InputFilter,
    Name,
    Options,
    Priority,
    Required,
    Type,
    Validator,
    form_annotations,
)
from formtree.binding import MappingHydrator, PydanticModelHydrator
from formtree.events import AbstractListenerAggregate, EventManager
from formtree.exceptions import (
    CyclicContainerError,
    DuplicateElementNameError,
    IncompatibleRuntimeError,
)
from formtree.structure import EmailElement, Fieldset, Form


class DocSender(BaseModel):
    """
    @Name("sender")

    Who sent the message.
    """

    name: str = Field(
        "", description='@Required\n@Validator("StringLength", {"min": 3})\nFull name'
    )
    email: str = Field("", description='@Type("email")')


class AddressModel(BaseModel):
    city: Annotated[str, Required()] = ""


class CustomerModel(BaseModel):
    name: Annotated[str, Required(), Filter("StringTrim")] = ""
    email: Annotated[str, Type("email")] = ""
    internal: Annotated[str, Exclude()] = ""
    address: AddressModel = AddressModel()
    billing: Optional[AddressModel] = None


class Ordered(BaseModel):
    first: Annotated[str, Priority(1)] = ""
    second: Annotated[str, Priority(10)] = ""
    third: str = ""


class Duplicated(BaseModel):
    first: Annotated[str, Name("same")] = ""
    second: Annotated[str, Name("same")] = ""


class Node(BaseModel):
    label: str = ""
    child: Optional["Node"] = None


@form_annotations(
    Name("signup"),
    Hydrator("mapping"),
    InputFilter(password={"required": True, "validators": [{"name": "StringLength", "options": {"min": 8}}]}),
)
class Signup(BaseModel):
    password: Annotated[str, Options(label="Password")] = ""


class TestAnnotationBuilder:
    """Docstring annotations."""

    def test_create_form(self):
        form = AnnotationBuilder().create_form(DocSender)
        assert isinstance(form, Form)
        assert form.name == "sender"
        assert form.names() == ["name", "email"]
        assert form.get("name").label == "Full name"
        assert isinstance(form.get("email"), EmailElement)
        assert isinstance(form.hydrator, PydanticModelHydrator)

    def test_form_validates_and_binds(self):
        sender = DocSender()
        form = AnnotationBuilder().create_form(DocSender)
        form.bind(sender)
        form.set_data({"name": "John", "email": "john@doe.tld"})
        assert form.is_valid()
        assert sender.name == "John"
        assert sender.email == "john@doe.tld"

        form.set_data({"name": "Jo", "email": "john@doe.tld"})
        assert not form.is_valid()
        assert "name" in form.get_messages()

    def test_specification_dict(self):
        spec = AnnotationBuilder().get_form_specification(DocSender)
        assert spec["name"] == "sender"
        assert spec["type"] == "form"
        name_spec = spec["elements"][0]
        assert name_spec["options"]["validation_hint"] == {
            "required": True,
            "validators": [{"name": "StringLength", "options": {"min": 3}}],
        }

    def test_state_transitions(self):
        builder = AnnotationBuilder()
        assert builder.state is BuilderState.IDLE
        builder.create_form(DocSender)
        assert builder.state is BuilderState.BUILT

    def test_reader_selected_before_idle(self):
        states = []

        class RecordingBuilder(AnnotationBuilder):
            def create_reader(self):
                states.append(self.state)
                return super().create_reader()

        builder = RecordingBuilder()
        assert states == [BuilderState.SELECTING_VARIANT]
        assert builder.state is BuilderState.IDLE


class TestAttributeBuilder:
    """``typing.Annotated`` annotations."""

    def test_nested_containers(self):
        form = AttributeBuilder().create_form(CustomerModel)
        assert form.name == "customer_model"
        assert form.names() == ["name", "email", "address", "billing"]
        address = form.get("address")
        assert isinstance(address, Fieldset)
        assert not isinstance(address, Form)
        assert address.names() == ["city"]
        assert isinstance(form.get("billing"), Fieldset)

    def test_exclude(self):
        form = AttributeBuilder().create_form(CustomerModel)
        assert not form.has("internal")

    def test_default_labels(self):
        form = AttributeBuilder().create_form(CustomerModel)
        assert form.get("name").label == "Name"

    def test_nested_binding(self):
        customer = CustomerModel(address=AddressModel(city="Paris"))
        form = AttributeBuilder().create_form(CustomerModel)
        form.bind(customer)
        form.set_validation_group(["name", "address"])
        form.set_data({"name": " John ", "address": {"city": "Lyon"}})
        assert form.is_valid()
        assert customer.name == "John"
        assert customer.address.city == "Lyon"

    def test_nested_required(self):
        form = AttributeBuilder().create_form(CustomerModel)
        form.set_validation_group(["address"])
        form.set_data({"address": {"city": ""}})
        assert not form.is_valid()

    def test_priority_and_preserved_order(self):
        assert AttributeBuilder().create_form(Ordered).names() == ["second", "first", "third"]
        builder = AttributeBuilder(preserve_defined_order=True)
        assert builder.create_form(Ordered).names() == ["first", "second", "third"]

    def test_class_level_annotations(self):
        form = AttributeBuilder().create_form(Signup)
        assert form.name == "signup"
        assert isinstance(form.hydrator, MappingHydrator)
        assert form.get("password").label == "Password"
        form.set_data({"password": "short"})
        assert not form.is_valid()
        form.set_data({"password": "long enough"})
        assert form.is_valid()

    def test_duplicate_names(self):
        builder = AttributeBuilder()
        with pytest.raises(DuplicateElementNameError):
            builder.create_form(Duplicated)
        assert builder.state is BuilderState.FAILED

    def test_cycle(self):
        with pytest.raises(CyclicContainerError):
            AttributeBuilder().create_form(Node)

    def test_unsupported_runtime(self, monkeypatch):
        monkeypatch.setattr(
            "formtree.annotation.readers.attribute_reflection_supported", lambda: False
        )
        with pytest.raises(IncompatibleRuntimeError):
            AttributeBuilder()
        assert AnnotationBuilder().create_form(DocSender).name == "sender"


class RenamingListener(AbstractListenerAggregate):
    """Renames ``email`` members and excludes members named ``internal``."""

    def __init__(self):
        super().__init__()
        self.built = []

    def attach(self, events, priority=1):
        self.listen(events, "discover_name", self.on_discover_name, priority)
        self.listen(events, "check_for_exclude", self.on_check_for_exclude, priority)
        self.listen(events, "configure_element", self.on_configure_element, priority)
        self.listen(events, "build.post", self.on_build_post, priority)

    def on_discover_name(self, event):
        if event.get_param("name") == "email":
            event.set_param("name", "contact_email")

    def on_check_for_exclude(self, event):
        if event.target.field_name == "third":
            event.set_param("exclude", True)

    def on_configure_element(self, event):
        event.get_param("spec")["options"]["label"] = event.get_param("name").upper()

    def on_build_post(self, event):
        self.built.append(event.target)


class TestBuilderEvents:
    """Listeners change names, exclusions and element specs."""

    def test_listener_aggregate(self):
        events = EventManager()
        listener = RenamingListener()
        listener.attach(events)
        builder = AttributeBuilder(events=events)

        form = builder.create_form(CustomerModel)
        assert form.has("contact_email")
        assert not form.has("email")
        assert form.get("contact_email").label == "CONTACT_EMAIL"
        assert listener.built == [form]

        ordered = builder.create_form(Ordered)
        assert ordered.names() == ["second", "first"]

    def test_configure_form(self):
        builder = AnnotationBuilder()

        def rename_root(event):
            if event.get_param("root"):
                event.get_param("spec")["name"] = "renamed"

        builder.events.attach("configure_form", rename_root)
        assert builder.create_form(DocSender).name == "renamed"

    def test_configure_element_renames(self):
        builder = AnnotationBuilder()

        def rename_email(event):
            if event.get_param("name") == "email":
                event.set_param("name", "contact")

        builder.events.attach("configure_element", rename_email)
        form = builder.create_form(DocSender)
        assert form.names() == ["name", "contact"]
        assert builder.get_form_specification(DocSender)["elements"][1]["name"] == "contact"

    def test_configure_element_rename_collision(self):
        builder = AnnotationBuilder()

        def rename_email(event):
            if event.get_param("name") == "email":
                event.set_param("name", "name")

        builder.events.attach("configure_element", rename_email)
        with pytest.raises(DuplicateElementNameError):
            builder.create_form(DocSender)
        assert builder.state is BuilderState.FAILED

    def test_listener_failure_marks_builder_failed(self):
        builder = AnnotationBuilder()

        def explode(event):
            raise RuntimeError("listener failed")

        builder.events.attach("discover_name", explode)
        with pytest.raises(RuntimeError):
            builder.create_form(DocSender)
        assert builder.state is BuilderState.FAILED
