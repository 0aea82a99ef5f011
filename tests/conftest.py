"""
Shared test fixtures and utilities for the formtree test suite.
"""

from unittest.mock import Mock

import pytest

from formtree.structure import Fieldset, Form

SENDER_SPECIFICATION = {
    "name": {
        "required": True,
        "validators": [
            {"name": "StringLength", "options": {"min": 3, "max": 256}},
        ],
    },
    "email": {
        "required": True,
        "validators": [{"name": "EmailAddress"}],
    },
}


@pytest.fixture
def sender_form():
    """Form with a ``name`` and ``email`` element and an explicit specification."""
    form = Form("sender")
    form.add({"name": "name", "type": "text"})
    form.add({"name": "email", "type": "text"})
    form.set_input_specification(SENDER_SPECIFICATION)
    return form


@pytest.fixture
def nested_form():
    """Form ``message`` with a ``subject`` element and a ``sender`` fieldset."""
    form = Form("message")
    form.add({"name": "subject", "options": {"validation_hint": {"required": True}}})
    sender = Fieldset("sender")
    sender.add({"name": "name", "options": {"validation_hint": {"required": True}}})
    sender.add({"name": "email", "type": "email"})
    form.add(sender)
    return form


@pytest.fixture
def make_container():
    """Build a mock service container from a ``{name: service}`` map.

    Usage:
        def test_something(make_container):
            container = make_container({"config": {...}})
            container.has("config")  # True
    """

    def factory(services: dict):
        container = Mock()
        container.has.side_effect = lambda name: name in services
        container.get.side_effect = lambda name: services[name]
        return container

    return factory
