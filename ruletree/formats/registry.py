"""
Format registry capability for rule tree validation.

A ``FormatRegistry`` holds two parallel name-keyed tables: validators
(``value -> bool``) and converters (``value -> converted value``). The engine
never resolves formats through module globals; the registry is injected at
call time through the validation options.
"""

from typing import Any, Callable, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)

Validator = Callable[[Any], bool]
Converter = Callable[[Any], Any]


class FormatRegistry:
    """
    Named validator/converter pairs keyed by format identifier.

    Example:
        registry = create_default_format_registry().copy()

        @registry.converter('kg')
        def to_kilograms(value):
            ...
    """

    def __init__(
        self,
        validators: Optional[Dict[str, Validator]] = None,
        converters: Optional[Dict[str, Converter]] = None
    ):
        self._validators: Dict[str, Validator] = dict(validators or {})
        self._converters: Dict[str, Converter] = dict(converters or {})

    def register_validator(self, name: str, function: Validator) -> None:
        if not callable(function):
            raise TypeError(f"validator for format '{name}' must be callable")
        self._validators[name] = function
        logger.debug("Format validator registered", format_name=name)

    def register_converter(self, name: str, function: Converter) -> None:
        if not callable(function):
            raise TypeError(f"converter for format '{name}' must be callable")
        self._converters[name] = function
        logger.debug("Format converter registered", format_name=name)

    def validator(self, name: str) -> Callable[[Validator], Validator]:
        """Decorator form of :meth:`register_validator`."""
        def decorator(function: Validator) -> Validator:
            self.register_validator(name, function)
            return function
        return decorator

    def converter(self, name: str) -> Callable[[Converter], Converter]:
        """Decorator form of :meth:`register_converter`."""
        def decorator(function: Converter) -> Converter:
            self.register_converter(name, function)
            return function
        return decorator

    def lookup_validator(self, name: str) -> Optional[Validator]:
        return self._validators.get(name)

    def lookup_converter(self, name: str) -> Optional[Converter]:
        return self._converters.get(name)

    def has_format(self, name: str) -> bool:
        return name in self._validators or name in self._converters

    def format_names(self) -> list:
        return sorted(set(self._validators) | set(self._converters))

    def copy(self) -> 'FormatRegistry':
        """Return an independent registry with the same entries."""
        return FormatRegistry(self._validators, self._converters)

    def __repr__(self) -> str:
        return f"FormatRegistry(formats={self.format_names()!r})"
