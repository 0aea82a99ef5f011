"""
Tests for inputs, the InputFilter engine and its factory.
"""

import pytest

from formtree.exceptions import FormStateError, InvalidSpecificationError, UnknownProcessingUnitError
from formtree.processing.filters import Callback as CallbackFilter
from formtree.processing.filters import StringTrim
from formtree.processing.validators import Callback, StringLength
from formtree.validation import (
    ArrayInput,
    ChainEntry,
    FileInput,
    Input,
    InputFilter,
    InputFilterFactory,
)


class TestInputEmptyValues:
    """Empty-value handling of a single input."""

    def test_optional_empty_is_skipped(self):
        field = Input("nickname", validators=[StringLength(min=3)])
        field.set_value("")
        assert field.is_valid()
        assert field.skipped

    def test_absent_optional_is_skipped(self):
        field = Input("nickname")
        assert field.is_valid()
        assert field.skipped

    def test_required_empty_fails_with_is_empty(self):
        field = Input("name", required=True)
        field.set_value(None)
        assert not field.is_valid()
        assert field.get_messages() == {"isEmpty": "Value is required and can't be empty"}

    def test_required_empty_uses_error_message(self):
        field = Input("name", required=True, error_message="Name please")
        assert not field.is_valid()
        assert field.get_messages() == {"isEmpty": "Name please"}

    def test_allow_empty(self):
        field = Input("name", required=True, allow_empty=True)
        field.set_value("")
        assert field.is_valid()
        assert field.skipped

    def test_continue_if_empty_runs_validators(self):
        seen = []
        field = Input(
            "name",
            continue_if_empty=True,
            validators=[Callback(callback=lambda v: seen.append(v) or False)],
        )
        field.set_value("")
        assert not field.is_valid()
        assert seen == [""]


class TestInputChains:
    """Filter then validator chains."""

    def test_filters_run_before_validators(self):
        field = Input("name", filters=[StringTrim()], validators=[StringLength(min=3)])
        field.set_value("  Jo  ")
        assert not field.is_valid()
        assert field.raw_value == "  Jo  "
        assert field.get_value() == "Jo"

    def test_messages_accumulate_without_break(self):
        field = Input(
            "code",
            validators=[
                StringLength(min=5),
                Callback(callback=lambda v: False),
            ],
        )
        field.set_value("abc")
        assert not field.is_valid()
        assert set(field.get_messages()) == {"stringLengthTooShort", "callbackValue"}

    def test_break_on_failure_stops_chain(self):
        field = Input(
            "code",
            break_on_failure=True,
            validators=[StringLength(min=5), Callback(callback=lambda v: False)],
        )
        field.set_value("abc")
        field.is_valid()
        assert set(field.get_messages()) == {"stringLengthTooShort"}

    def test_per_validator_break_flag(self):
        field = Input(
            "code",
            validators=[
                ChainEntry(StringLength(min=5), break_chain_on_failure=True),
                Callback(callback=lambda v: False),
            ],
        )
        field.set_value("abc")
        field.is_valid()
        assert set(field.get_messages()) == {"stringLengthTooShort"}

    def test_error_message_replaces_validator_messages(self):
        field = Input("code", validators=[StringLength(min=5)], error_message="Too short")
        field.set_value("abc")
        field.is_valid()
        assert field.get_messages() == {"errorMessage": "Too short"}


class TestArrayAndFileInputs:
    """Array and upload inputs."""

    def test_array_input_validates_each_item(self):
        field = ArrayInput("tags", filters=[StringTrim()], validators=[StringLength(min=2)])
        field.set_value([" ab ", "cd"])
        assert field.is_valid()
        assert field.get_value() == ["ab", "cd"]
        field.set_value(["ab", "c"])
        assert not field.is_valid()

    def test_array_input_filters_each_item_once(self):
        calls = []
        field = ArrayInput(
            "tags", filters=[CallbackFilter(callback=lambda v: calls.append(v) or v)]
        )
        field.set_value(["ab", "cd"])
        assert field.is_valid()
        assert field.get_value() == ["ab", "cd"]
        assert calls == ["ab", "cd"]

    def test_array_input_requires_list(self):
        field = ArrayInput("tags")
        field.set_value("ab")
        assert not field.is_valid()
        assert "arrayInvalid" in field.get_messages()

    def test_file_input_filters_after_validation(self):
        rename = MoveUpload()
        field = FileInput("avatar", filters=[CallbackFilter(callback=rename)])
        upload = {"tmp_name": "/tmp/php123", "name": "me.png", "error": 0}
        field.set_value(upload)
        assert field.get_value() == upload
        assert rename.calls == 0
        assert field.is_valid()
        assert field.get_value()["tmp_name"] == "/uploads/me.png"
        field.get_value()
        assert rename.calls == 1

    def test_file_input_prepends_upload_validator(self):
        field = FileInput("avatar", required=True)
        field.set_value({"tmp_name": "", "error": 1})
        assert not field.is_valid()
        assert "fileUploadFileErrorAttack" in field.get_messages()

    def test_no_file_upload_is_empty(self):
        field = FileInput("avatar")
        field.set_value({"tmp_name": "", "error": 4})
        assert field.is_valid()
        assert field.skipped


class MoveUpload:
    """Callable filter moving uploads and counting calls."""

    def __init__(self):
        self.calls = 0

    def __call__(self, value):
        self.calls += 1
        return {**value, "tmp_name": f"/uploads/{value['name']}"}


@pytest.fixture
def message_filter():
    return InputFilterFactory().create_input_filter(
        {
            "subject": {"required": True, "filters": ["StringTrim"]},
            "sender": {
                "email": {"required": True, "validators": [{"name": "EmailAddress"}]},
                "nickname": {"validators": [{"name": "StringLength", "options": {"min": 3}}]},
            },
        },
        name="message",
    )


class TestInputFilter:
    """Validation passes over nested data."""

    def test_valid_pass(self, message_filter):
        result = message_filter.validate(
            {"subject": " Hi ", "sender": {"email": "j@d.tld"}}
        )
        assert result.is_valid
        assert result.values == {"subject": "Hi", "sender": {"email": "j@d.tld"}}
        assert result.raw_values["subject"] == " Hi "
        assert result.get_field("sender.nickname").skipped

    def test_invalid_pass_reports_nested_messages(self, message_filter):
        result = message_filter.validate({"subject": "", "sender": {"email": "bad"}})
        assert not result.is_valid
        assert "isEmpty" in result.messages["subject"]
        assert "emailAddressInvalidFormat" in result.messages["sender"]["email"]
        assert [f.path for f in result.invalid_fields()] == ["subject", "sender.email"]

    def test_stateful_surface(self, message_filter):
        message_filter.set_data({"subject": "Hi", "sender": {"email": "j@d.tld"}})
        assert message_filter.is_valid()
        assert message_filter.get_value("sender.email") == "j@d.tld"
        assert message_filter.get_raw_value("subject") == "Hi"
        assert message_filter.get_invalid_input() == {}

    def test_is_valid_without_data(self, message_filter):
        with pytest.raises(FormStateError):
            message_filter.is_valid()

    def test_values_need_a_validation(self, message_filter):
        message_filter.set_data({})
        with pytest.raises(FormStateError):
            message_filter.get_values()

    def test_get_unknown_path(self, message_filter):
        with pytest.raises(KeyError):
            message_filter.get("sender.phone")

    def test_paths(self, message_filter):
        assert message_filter.paths() == ["subject", "sender.email", "sender.nickname"]

    def test_filters_run_once_per_pass(self):
        calls = []

        def record(value):
            calls.append(value)
            return value.upper()

        engine = InputFilter("person")
        engine.add(Input("name", filters=[CallbackFilter(callback=record)]))
        result = engine.validate({"name": "John"})
        assert result.values == {"name": "JOHN"}
        assert calls == ["John"]

    def test_values_are_the_validated_values(self):
        tokens = iter(range(10))
        seen = []
        engine = InputFilter("session")
        engine.add(
            Input(
                "token",
                filters=[CallbackFilter(callback=lambda v: f"{v}-{next(tokens)}")],
                validators=[Callback(callback=lambda v: seen.append(v) is None)],
            )
        )
        result = engine.validate({"token": "abc"})
        assert result.is_valid
        assert seen == ["abc-0"]
        assert result.values == {"token": "abc-0"}


class TestInputFilterFactory:
    """Building engines from literals and records."""

    def test_input_types(self):
        engine = InputFilterFactory().create_input_filter(
            {"tags": {"type": "array"}, "avatar": {"type": "file"}, "name": {}}
        )
        assert isinstance(engine.get("tags"), ArrayInput)
        assert isinstance(engine.get("avatar"), FileInput)
        assert type(engine.get("name")) is Input

    def test_unknown_input_type(self):
        with pytest.raises(InvalidSpecificationError):
            InputFilterFactory().create_input_filter({"name": {"type": "nope"}})

    def test_unknown_unit(self):
        with pytest.raises(UnknownProcessingUnitError) as exc_info:
            InputFilterFactory().create_input_filter({"name": {"validators": ["Nope"]}})
        assert exc_info.value.kind == "validator"
        assert exc_info.value.path == "name"

    def test_break_chain_flag_carried(self):
        engine = InputFilterFactory().create_input_filter(
            {"name": {"validators": [{"name": "NotEmpty", "break_chain_on_failure": True}]}}
        )
        assert engine.get("name").validators[0].break_chain_on_failure

    def test_nested_engine(self):
        engine = InputFilterFactory().create_input_filter(
            {"sender": {"email": {"required": True}}}
        )
        assert isinstance(engine.get("sender"), InputFilter)
