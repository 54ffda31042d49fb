"""Shared fixtures for the placelist_extractor test suite."""

import pytest
import structlog

from payloads import SCRIPT_TEXT, wrap_html


@pytest.fixture
def script_text():
    return SCRIPT_TEXT


@pytest.fixture
def list_html():
    return wrap_html(SCRIPT_TEXT, extra_scripts=['var a = "[not it]";'])


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
