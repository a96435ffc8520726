"""Shared pytest fixtures for the inlineil test suite."""

from __future__ import annotations

import pytest

from tests.helpers import FOO_CS, FOO_IL


@pytest.fixture
def foo_source(tmp_path):
    """Foo.cs written to disk, with its ildasm output referring to it."""
    path = tmp_path / "Foo.cs"
    path.write_text(FOO_CS)
    return path


@pytest.fixture
def foo_il(tmp_path, foo_source):
    path = tmp_path / "Foo.il"
    path.write_text(FOO_IL.replace("{path}", str(foo_source)))
    return path
