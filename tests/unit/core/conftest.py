"""Shared fixtures for core unit tests"""

import pytest

from kindlepdf.core.models import Document


@pytest.fixture(name="make_doc")
def make_doc_fixture(vault):
    def _make(path: str, content, links=None) -> Document:
        return vault.add(path, content, links=links or [])
    return _make
