"""Pytest configuration and shared fixtures for the sitemark test suite."""

import os
from typing import Generator

import pytest
from hypothesis import Phase, Verbosity, settings

from sitemark.extensions import extension_registry
from sitemark.render import Element

# Register custom Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


@pytest.fixture
def restore_registry() -> Generator[None, None, None]:
    """Restore the global extension registry after a test registers extensions."""
    extension_registry.list_extensions()
    saved = dict(extension_registry._extensions)
    try:
        yield
    finally:
        extension_registry._extensions.clear()
        extension_registry._extensions.update(saved)


def render_card(props, children):
    """Component renderer used across tests."""
    attributes = {"class": "card"}
    if "title" in props:
        attributes["data-title"] = props["title"]
    return Element(tag="div", attributes=attributes, children=children)


@pytest.fixture
def card_bindings() -> dict:
    """Provide a binding table with a Card component."""
    return {"Card": render_card}


@pytest.fixture
def sample_page() -> str:
    """Provide a page that exercises every built-in extension.

    Returns
    -------
    str
        Page source

    """
    return """---
title: Uses
description: Things I use
---

# Tools I Use

I use *vim* and **tmux**, never ~~emacs~~. See https://example.com.

| Tool | Kind |
|:-----|-----:|
| vim | editor |

- [x] dotfiles
- [ ] backups

Backups run nightly[^cron].

```python
print("hi")
```

[^cron]: Driven by *cron*.
"""
