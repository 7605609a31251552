#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/options.py
"""Compiler configuration.

:class:`CompilerOptions` is the configuration record a document is compiled
with: the ordered extension list and the component binding table. It is
immutable; use :meth:`~CloneFrozenMixin.create_updated` to derive a variant.

Examples
--------
    >>> options = CompilerOptions(components={"Card": render_card})
    >>> no_tables = options.create_updated(extensions=("emphasis",))

"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from sitemark.constants import DEFAULT_EXTENSIONS, DEFAULT_EXTRACT_METADATA, DEFAULT_TITLE_FROM_HEADING
from sitemark.render.emitter import ComponentRenderer


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with the given fields replaced

        """
        return replace(self, **kwargs)


@dataclass(frozen=True)
class CompilerOptions(CloneFrozenMixin):
    """Configuration for compiling documents.

    Parameters
    ----------
    extensions : tuple of str
        Extension ids in the order they run
    extension_options : mapping, default = empty
        Constructor parameters per extension id
    components : mapping, default = empty
        Component tag name -> renderer callable
    extract_metadata : bool, default = True
        Read title/description from front matter or a ``meta`` export
    title_from_heading : bool, default = True
        Use the first level-1 heading as the title when metadata has none

    Notes
    -----
    Mutable arguments are copied and wrapped read-only, so an options object
    cannot change after construction.

    """

    extensions: tuple[str, ...] = field(
        default=DEFAULT_EXTENSIONS,
        metadata={"help": "Extension ids in chain order", "cli_name": "extensions"},
    )
    extension_options: Mapping[str, Mapping[str, Any]] = field(
        default_factory=dict,
        metadata={"help": "Constructor parameters for extensions, keyed by extension id"},
    )
    components: Mapping[str, ComponentRenderer] = field(
        default_factory=dict,
        metadata={"help": "Component renderers keyed by tag name", "cli_name": "component"},
    )
    extract_metadata: bool = field(
        default=DEFAULT_EXTRACT_METADATA,
        metadata={"help": "Read title/description from leading metadata"},
    )
    title_from_heading: bool = field(
        default=DEFAULT_TITLE_FROM_HEADING,
        metadata={"help": "Fall back to the first level-1 heading for the page title"},
    )

    def __post_init__(self) -> None:
        """Freeze mutable collections.

        Raises
        ------
        TypeError
            If ``extensions`` is a single string instead of a sequence

        """
        if isinstance(self.extensions, str):
            raise TypeError("extensions must be a sequence of extension ids, not a string")
        object.__setattr__(self, "extensions", tuple(self.extensions))
        object.__setattr__(
            self,
            "extension_options",
            MappingProxyType({name: MappingProxyType(dict(params)) for name, params in self.extension_options.items()}),
        )
        if not isinstance(self.components, MappingProxyType):
            object.__setattr__(self, "components", MappingProxyType(dict(self.components)))
