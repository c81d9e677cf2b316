"""Unit tests for the livescribe entry point module."""

import importlib
import sys

import pytest


@pytest.mark.unit
def test_entry_point_imports_without_pyaudio(monkeypatch):
    monkeypatch.setitem(sys.modules, "pyaudio", None)
    for name in ("livescribe.main", "livescribe.audio", "livescribe.audio.capture"):
        monkeypatch.delitem(sys.modules, name, raising=False)

    module = importlib.import_module("livescribe.main")

    assert callable(module.main)
    assert "livescribe.audio.capture" not in sys.modules
