#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/extensions/metadata.py
"""Metadata classes for syntax extensions.

Extension metadata describes an extension for registration, listing and
plugin discovery through entry points.

Examples
--------
Define an extension with a parameter:

    >>> from sitemark.extensions import ExtensionMetadata, ParameterSpec
    >>>
    >>> METADATA = ExtensionMetadata(
    ...     name="heading-ids",
    ...     description="Assign anchor ids to headings",
    ...     extension_class=HeadingIdsExtension,
    ...     parameters={
    ...         "id_prefix": ParameterSpec(type=str, default="", help="Prefix for every id"),
    ...     },
    ... )

"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Type

from sitemark.extensions.base import Extension

logger = logging.getLogger(__name__)


@dataclass
class ParameterSpec:
    """Specification for an extension parameter.

    Parameters
    ----------
    type : type
        Python type of the parameter (e.g., int, str, bool)
    default : Any, optional
        Default value if the parameter is not provided
    help : str, optional
        Description shown by ``sitemark extensions NAME``
    required : bool, default = False
        Whether this parameter must be provided
    choices : list, optional
        Valid values for this parameter
    validator : callable, optional
        Custom check: takes the value, returns bool or raises ValueError

    Examples
    --------
        >>> param = ParameterSpec(type=str, default="", help="Prefix for every id")
        >>> param.validate("doc-")
        True

    """

    type: Type
    default: Any = None
    help: str = ""
    required: bool = False
    choices: Optional[list[Any]] = None
    validator: Optional[Callable[[Any], bool]] = None

    def validate(self, value: Any) -> bool:
        """Validate a parameter value.

        Parameters
        ----------
        value : Any
            Value to validate. Tuples are accepted for list parameters.

        Returns
        -------
        bool
            True if valid

        Raises
        ------
        ValueError
            If the value has the wrong type, is not one of ``choices``, or
            fails the custom validator

        """
        if self.type is list and isinstance(value, tuple):
            value = list(value)

        # bool is a subclass of int; do not accept True for an int parameter
        if not isinstance(value, self.type) or (self.type is int and isinstance(value, bool)):
            raise ValueError(f"Expected type {self.type.__name__}, got {type(value).__name__}")

        if self.choices is not None and value not in self.choices:
            raise ValueError(f"Value must be one of {self.choices}, got {value}")

        if self.validator is not None and not self.validator(value):
            raise ValueError(f"Validation failed for value: {value}")

        return True


@dataclass
class ExtensionMetadata:
    """Metadata for a syntax extension.

    Parameters
    ----------
    name : str
        Extension id used in configuration (e.g., "gfm-tables")
    description : str
        Human-readable description of what the extension does
    extension_class : type[Extension]
        The extension class (must inherit from Extension)
    parameters : dict[str, ParameterSpec], default = empty dict
        Parameters accepted by the extension constructor
    version : str, default = "1.0.0"
        Extension version
    author : str, optional
        Extension author or maintainer
    tags : list[str], default = empty list
        Tags for categorization (e.g., ["gfm", "inline"])

    """

    name: str
    description: str
    extension_class: Type[Extension]
    parameters: dict[str, ParameterSpec] = field(default_factory=dict)
    version: str = "1.0.0"
    author: Optional[str] = None
    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate metadata after initialization."""
        if not self.name:
            raise ValueError("Extension name cannot be empty")

        if not (isinstance(self.extension_class, type) and issubclass(self.extension_class, Extension)):
            raise ValueError(f"extension_class must inherit from Extension, got {self.extension_class!r}")

    def validate_parameters(self, params: dict[str, Any]) -> dict[str, Any]:
        """Check parameters and fill in defaults.

        Parameters
        ----------
        params : dict
            Parameter values supplied by configuration

        Returns
        -------
        dict
            Validated parameters including defaults

        Raises
        ------
        ValueError
            If a required parameter is missing, a value is invalid, or an
            unknown parameter is given

        """
        unknown = set(params) - set(self.parameters)
        if unknown:
            raise ValueError(
                f"Extension '{self.name}' received unknown parameter(s): {', '.join(sorted(unknown))}. "
                f"Valid parameters are: {', '.join(sorted(self.parameters)) or '(none)'}"
            )

        validated: dict[str, Any] = {}
        for param_name, param_spec in self.parameters.items():
            if param_name in params:
                param_spec.validate(params[param_name])
                validated[param_name] = params[param_name]
            elif param_spec.required:
                raise ValueError(f"Required parameter '{param_name}' not provided for extension '{self.name}'")
            elif param_spec.default is not None:
                validated[param_name] = param_spec.default
        return validated

    def create_instance(self, **kwargs: Any) -> Extension:
        """Create an instance of the extension with given parameters.

        Parameters
        ----------
        **kwargs
            Parameters for the extension constructor

        Returns
        -------
        Extension
            Extension instance

        Raises
        ------
        ValueError
            If parameters are invalid or the constructor rejects them

        """
        params = self.validate_parameters(kwargs)
        try:
            return self.extension_class(**params)
        except TypeError as e:
            raise ValueError(f"Failed to create extension instance: {e}") from e


__all__ = [
    "ExtensionMetadata",
    "ParameterSpec",
]
