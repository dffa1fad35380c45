"""
Global pytest configuration and fixtures for the ruletree test suite.

Provides an isolated settings environment for every test (no RULETREE_*
variables leak in from the host shell, the cached settings are reloaded),
structlog reset after tests that reconfigure logging, and sample documents
and rule trees shared by the unit and integration suites.
"""

import logging

import pytest
import structlog
from prometheus_client import REGISTRY

from ruletree.config.settings import get_settings

SETTINGS_VARIABLES = (
    'RULETREE_LOG_LEVEL',
    'RULETREE_LOG_FORMAT',
    'RULETREE_TRACE_RULES',
    'RULETREE_METRICS_ENABLED',
)


def pytest_configure(config):
    """Register custom test markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "unit: Unit tests for individual components and functions"
    )
    config.addinivalue_line(
        "markers",
        "integration: End-to-end validation workflows across components"
    )


# ============================================================================
# ENVIRONMENT ISOLATION
# ============================================================================

@pytest.fixture(autouse=True)
def clean_settings_environment(monkeypatch):
    """
    Remove RULETREE_* variables for the duration of a test.

    Each variable is set and then deleted through monkeypatch so that any
    value written during the test (including by python-dotenv) is removed
    again on teardown.
    """
    for name in SETTINGS_VARIABLES:
        monkeypatch.setenv(name, 'unset')
        monkeypatch.delenv(name)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def reset_structlog():
    """Restore structlog's defaults and the stdlib root logger after the test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def metric_value():
    """Read the current value of a prometheus sample, treating absent samples as zero."""
    def read(name, **labels):
        return REGISTRY.get_sample_value(name, labels) or 0.0
    return read


# ============================================================================
# SAMPLE DATA
# ============================================================================

@pytest.fixture
def vehicle_rules():
    """Rule tree describing a vehicle document with nested coordinates."""
    return {
        'id': {'required': True, 'format': 'uuid'},
        'coordinates': {
            'required': True,
            'format': 'array',
            'minLength': 1,
            'childRules': {
                '*': {
                    'format': 'array',
                    'length': 2,
                    'childRules': {'*': {'format': 'geo', 'required': True}}
                }
            }
        },
        'vehicle': {
            'format': 'object',
            'childRules': {
                'energysource': {'allowedValues': ['muscle', 'fossilfuel', 'electricity']},
                'wheels': {'format': 'number', 'required': True, 'range': [1, 18]}
            }
        }
    }


@pytest.fixture
def vehicle_document():
    """Document satisfying ``vehicle_rules``."""
    return {
        'id': '123e4567-e89b-12d3-a456-426614174000',
        'coordinates': [[13.4, 52.5], [13.5, 52.6]],
        'vehicle': {
            'energysource': 'electricity',
            'wheels': 4
        }
    }


@pytest.fixture
def is_big():
    """Condition predicate selecting values above 100."""
    def predicate(parent, value):
        return value > 100
    return predicate
