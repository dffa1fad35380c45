"""
Unit tests for validation option loading.
"""

import pytest

from ruletree.formats import FormatRegistry, default_format_registry
from ruletree.validation.conditions import ConditionRegistry
from ruletree.validation.exceptions import ConfigurationError
from ruletree.validation.options import ValidationOptions, load_options, resolve_options

pytestmark = pytest.mark.unit


class TestLoadOptions:
    """Mapping options loaded through the marshmallow schema."""

    def test_defaults(self):
        options = load_options()

        assert options.filter is False
        assert options.debug is False
        assert options.convert is False
        assert isinstance(options.conditions, ConditionRegistry)
        assert len(options.conditions) == 0
        assert options.formats is default_format_registry

    def test_values_are_loaded(self, is_big):
        formats = FormatRegistry()

        options = load_options({
            'filter': True,
            'debug': True,
            'convert': 'true',
            'conditions': {'isBig': is_big},
            'formats': formats
        })

        assert options.filter is True
        assert options.debug is True
        assert options.convert is True
        assert options.conditions.lookup('isBig') is is_big
        assert options.formats is formats

    def test_unknown_keys_are_ignored(self):
        options = load_options({'filter': True, 'colour': 'blue'})

        assert options.filter is True

    @pytest.mark.parametrize('options', [
        {'filter': 'sometimes'},
        {'conditions': ['isBig']},
        {'conditions': {'isBig': 'not callable'}},
        {'formats': {'kg': len}},
    ])
    def test_wrong_types_are_configuration_errors(self, options):
        with pytest.raises(ConfigurationError) as exc_info:
            load_options(options)

        assert exc_info.value.error_code == 'INVALID_OPTIONS'

    def test_debug_defaults_to_trace_setting(self, monkeypatch):
        from ruletree.config.settings import get_settings

        monkeypatch.setenv('RULETREE_TRACE_RULES', 'true')
        get_settings.cache_clear()

        assert load_options().debug is True
        assert load_options({'debug': False}).debug is False


class TestResolveOptions:
    """Accepted option forms."""

    def test_options_instance_is_used_as_is(self):
        options = ValidationOptions(filter=True)

        assert resolve_options(options) is options

    def test_overrides_on_options_instance(self):
        options = resolve_options(ValidationOptions(filter=True), convert=True)

        assert options.filter is True
        assert options.convert is True

    def test_mapping_with_overrides(self):
        options = resolve_options({'filter': True}, filter=False)

        assert options.filter is False

    def test_rejects_other_types(self):
        with pytest.raises(ConfigurationError):
            resolve_options(['filter'])

    def test_dataclass_wraps_plain_conditions(self, is_big):
        options = ValidationOptions(conditions={'isBig': is_big})

        assert isinstance(options.conditions, ConditionRegistry)
