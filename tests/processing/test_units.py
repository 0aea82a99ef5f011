"""
Tests for built-in filters, validators and the unit registries.
"""

import pytest

from formtree.exceptions import ServiceNotFoundError
from formtree.processing import FilterRegistry, ValidatorRegistry, normalize_unit_name
from formtree.processing.filters import (
    Boolean,
    StringToLower,
    StringTrim,
    StripTags,
    ToFloat,
    ToInt,
    ToNull,
)
from formtree.processing.validators import (
    Between,
    Callback,
    Digits,
    EmailAddress,
    InArray,
    NotEmpty,
    Regex,
    StringLength,
    UploadFile,
)


class TestFilters:
    """Filters transform supported values and pass others through."""

    def test_string_trim(self):
        assert StringTrim().process("  John  ") == "John"
        assert StringTrim(charlist="-").process("--x--") == "x"
        assert StringTrim().process(42) == 42

    def test_case_and_tags(self):
        assert StringToLower().process("ABC") == "abc"
        assert StripTags().process("<b>bold</b>") == "bold"

    def test_numeric_casts(self):
        assert ToInt().process(" 12 ") == 12
        assert ToInt().process("12a") == "12a"
        assert ToFloat().process("1.5") == 1.5
        assert ToFloat().process(3) == 3.0

    def test_to_null_and_boolean(self):
        assert ToNull().process("") is None
        assert Boolean().process("yes") is True
        assert Boolean().process("0") is False
        assert Boolean().process("maybe") == "maybe"

    def test_filters_are_callable(self):
        assert StringTrim()(" a ") == "a"


class TestValidators:
    """Validators report keyed messages for the last call only."""

    def test_string_length_too_short(self):
        validator = StringLength(min=3, max=256)
        assert not validator.is_valid("Jo")
        assert validator.get_messages() == {
            StringLength.TOO_SHORT: "The input is less than 3 characters long"
        }

    def test_messages_reset_between_calls(self):
        validator = StringLength(min=3)
        validator.is_valid("Jo")
        assert validator.is_valid("John")
        assert validator.get_messages() == {}

    def test_string_length_rejects_bad_bounds(self):
        with pytest.raises(ValueError):
            StringLength(min=5, max=2)

    def test_email_address(self):
        validator = EmailAddress()
        assert validator.is_valid("j@d.tld")
        assert validator.is_valid("x@y.z")
        assert not validator.is_valid("not-an-email")
        assert EmailAddress.INVALID_FORMAT in validator.get_messages()

    def test_not_empty(self):
        validator = NotEmpty()
        assert not validator.is_valid("")
        assert validator.get_messages() == {"isEmpty": "Value is required and can't be empty"}

    def test_regex_digits_between(self):
        assert Regex(pattern=r"^\d{3}$").is_valid("123")
        assert not Digits().is_valid("12a")
        assert Between(min=1, max=10).is_valid(10)
        assert not Between(min=1, max=10, inclusive=False).is_valid(10)

    def test_in_array_strictness(self):
        assert InArray(haystack=["1", "0"]).is_valid(1)
        assert not InArray(haystack=["1", "0"], strict=True).is_valid(1)

    def test_callback(self):
        assert Callback(callback=lambda v: v == "ok").is_valid("ok")

    def test_custom_message_template(self):
        validator = StringLength(min=3, messages={StringLength.TOO_SHORT: "min {min}"})
        validator.is_valid("a")
        assert validator.get_messages() == {StringLength.TOO_SHORT: "min 3"}

    def test_set_message_unknown_key(self):
        with pytest.raises(KeyError):
            NotEmpty().set_message("nope", "x")

    def test_upload_file(self):
        validator = UploadFile()
        assert validator.is_valid({"tmp_name": "/tmp/abc", "error": 0})
        assert not validator.is_valid({"tmp_name": "", "error": 4})
        assert UploadFile.NO_FILE in validator.get_messages()


class TestRegistries:
    """Registries resolve units by case-insensitive name."""

    def test_name_normalization(self):
        assert normalize_unit_name("StringLength") == "string_length"
        assert normalize_unit_name("stringLength") == "string_length"

    def test_get_with_options(self):
        validator = ValidatorRegistry().get("string_length", {"min": 2})
        assert isinstance(validator, StringLength)
        assert validator.min == 2

    def test_unknown_name(self):
        with pytest.raises(ServiceNotFoundError) as exc_info:
            FilterRegistry().get("Nope")
        assert "string_trim" in exc_info.value.available

    def test_register_custom_unit(self):
        registry = FilterRegistry()
        registry.register("Shout", StringToLower)
        assert registry.has("shout")
        assert isinstance(registry.get("Shout"), StringToLower)
