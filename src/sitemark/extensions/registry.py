#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/extensions/registry.py
"""Extension registry for discovery and lookup.

The registry maps extension ids to :class:`ExtensionMetadata`. Built-in
extensions are registered when :mod:`sitemark.extensions` is imported; third
party packages add their own through the ``sitemark.extensions`` entry point
group, which is scanned on first access.

Examples
--------
Register an extension:

    >>> from sitemark.extensions import extension_registry, ExtensionMetadata
    >>> extension_registry.register(my_extension_metadata)

Resolve a configured extension list up front:

    >>> from sitemark.extensions import resolve_extensions
    >>> resolved = resolve_extensions(["gfm-tables", "emphasis"])

"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

from sitemark.exceptions import ConfigurationError, UnknownExtensionError

if TYPE_CHECKING:
    from sitemark.extensions.base import Extension
    from sitemark.extensions.metadata import ExtensionMetadata

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "sitemark.extensions"


class ExtensionRegistry:
    """Registry of syntax extensions.

    This singleton class is the central table of extension ids. Plugin
    discovery via the ``sitemark.extensions`` entry point group runs once, on
    first lookup.

    Examples
    --------
    Use the global registry instance:
        >>> from sitemark.extensions import extension_registry
        >>> extension_registry.list_extensions()
        ['autolink', 'emphasis', 'gfm-strikethrough', 'gfm-tables', 'gfm-tasklist', 'heading-ids', 'highlight']

    """

    _instance: Optional[ExtensionRegistry] = None
    _extensions: dict[str, ExtensionMetadata]
    _initialized: bool

    def __new__(cls) -> ExtensionRegistry:
        """Create or return singleton instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._extensions = {}
            cls._instance._initialized = False
        return cls._instance

    def _ensure_initialized(self) -> None:
        """Ensure plugin discovery has been run."""
        if not self._initialized:
            self._initialized = True
            self.discover_plugins()

    def register(self, metadata: ExtensionMetadata) -> None:
        """Register an extension with its metadata.

        Parameters
        ----------
        metadata : ExtensionMetadata
            Extension metadata to register

        Notes
        -----
        Registering an id that already exists replaces it and logs a warning.

        """
        if metadata.name in self._extensions and self._extensions[metadata.name] is not metadata:
            logger.warning(f"Extension '{metadata.name}' already registered, overwriting")

        self._extensions[metadata.name] = metadata
        logger.debug(f"Registered extension: {metadata.name}")

    def unregister(self, name: str) -> bool:
        """Unregister an extension.

        Parameters
        ----------
        name : str
            Extension id to remove

        Returns
        -------
        bool
            True if the extension was removed, False if it was not registered

        """
        if name in self._extensions:
            del self._extensions[name]
            logger.debug(f"Unregistered extension: {name}")
            return True
        return False

    def get_metadata(self, name: str) -> ExtensionMetadata:
        """Get metadata for an extension.

        Parameters
        ----------
        name : str
            Extension id

        Returns
        -------
        ExtensionMetadata
            Extension metadata

        Raises
        ------
        UnknownExtensionError
            If the extension is not registered

        """
        self._ensure_initialized()

        if name not in self._extensions:
            raise UnknownExtensionError([name], available=self._extensions)

        return self._extensions[name]

    def get_extension(self, name: str, **kwargs: Any) -> Extension:
        """Create an extension instance by id.

        Parameters
        ----------
        name : str
            Extension id
        **kwargs
            Parameters for the extension constructor

        Returns
        -------
        Extension
            New extension instance

        """
        return self.get_metadata(name).create_instance(**kwargs)

    def has_extension(self, name: str) -> bool:
        """Check if an extension id is registered."""
        self._ensure_initialized()
        return name in self._extensions

    def list_extensions(self, tags: Optional[list[str]] = None) -> list[str]:
        """List registered extension ids.

        Parameters
        ----------
        tags : list[str], optional
            Only return extensions carrying at least one of these tags

        Returns
        -------
        list[str]
            Extension ids, sorted alphabetically

        """
        self._ensure_initialized()

        if tags is None:
            return sorted(self._extensions)

        return sorted(name for name, metadata in self._extensions.items() if any(tag in metadata.tags for tag in tags))

    def discover_plugins(self) -> int:
        """Discover and register extensions from entry points.

        Each entry point in the ``sitemark.extensions`` group must load to an
        :class:`ExtensionMetadata` object. Entry points that fail to load are
        logged and skipped.

        Returns
        -------
        int
            Number of extensions discovered and registered

        """
        from sitemark.extensions.metadata import ExtensionMetadata

        discovered_count = 0
        for ep in importlib.metadata.entry_points().select(group=ENTRY_POINT_GROUP):
            try:
                metadata = ep.load()
            except Exception as e:
                logger.warning(f"Failed to load extension entry point '{ep.name}': {e}")
                continue

            if not isinstance(metadata, ExtensionMetadata):
                logger.warning(f"Entry point '{ep.name}' did not return ExtensionMetadata, skipping")
                continue

            # Built-ins are advertised as entry points too; skip re-registration
            if self._extensions.get(metadata.name) is metadata:
                continue

            self.register(metadata)
            discovered_count += 1
            logger.debug(f"Discovered extension from entry point: {ep.name}")

        logger.debug(f"Discovered {discovered_count} extension(s) from entry points")
        return discovered_count

    def resolve(
        self, extension_ids: Iterable[str], extension_options: Optional[Mapping[str, Mapping[str, Any]]] = None
    ) -> list[tuple[ExtensionMetadata, dict[str, Any]]]:
        """Resolve an ordered list of extension ids to metadata and parameters.

        Parameters
        ----------
        extension_ids : iterable of str
            Extension ids in chain order
        extension_options : mapping, optional
            Per-extension constructor parameters, keyed by id

        Returns
        -------
        list of (ExtensionMetadata, dict)
            Metadata and validated parameters in chain order

        Raises
        ------
        UnknownExtensionError
            If any id is not registered; every unknown id is listed
        ConfigurationError
            If parameters are given for an extension outside the list, or
            fail validation

        """
        self._ensure_initialized()
        ids = list(extension_ids)
        extension_options = extension_options or {}

        unknown = [name for name in ids if name not in self._extensions]
        if unknown:
            raise UnknownExtensionError(unknown, available=self._extensions)

        stray = sorted(set(extension_options) - set(ids))
        if stray:
            raise ConfigurationError(f"Options given for extension(s) not in the chain: {', '.join(stray)}")

        resolved: list[tuple[ExtensionMetadata, dict[str, Any]]] = []
        for name in ids:
            metadata = self._extensions[name]
            try:
                params = metadata.validate_parameters(dict(extension_options.get(name, {})))
            except ValueError as e:
                raise ConfigurationError(str(e), original_error=e) from e
            resolved.append((metadata, params))
        return resolved

    def clear(self) -> None:
        """Clear all registered extensions.

        This is primarily useful for testing.

        """
        self._extensions.clear()
        self._initialized = False
        logger.debug("Cleared extension registry")


# Global registry instance (preferred access pattern)
extension_registry = ExtensionRegistry()


def resolve_extensions(
    extension_ids: Iterable[str], extension_options: Optional[Mapping[str, Mapping[str, Any]]] = None
) -> list[Extension]:
    """Resolve extension ids to fresh extension instances, in order.

    Parameters
    ----------
    extension_ids : iterable of str
        Extension ids in chain order
    extension_options : mapping, optional
        Per-extension constructor parameters, keyed by id

    Returns
    -------
    list of Extension
        One new instance per id

    Raises
    ------
    UnknownExtensionError
        If any id is not registered

    """
    resolved = extension_registry.resolve(extension_ids, extension_options)
    return [metadata.extension_class(**params) for metadata, params in resolved]


__all__ = [
    "ENTRY_POINT_GROUP",
    "ExtensionRegistry",
    "extension_registry",
    "resolve_extensions",
]
