"""
Tests for the deployment preview command.
"""

from __future__ import annotations

import argparse

import pytest

from poa_deployer.config import settings
from poa_deployer.deployment.preview import _parse_answers, run_preview

REGISTRY = "0x" + "22" * 20


class TestParseAnswers:
    def test_pairs(self):
        assert _parse_answers(["group_size=small", " trust_level = high "]) == {
            "group_size": "small",
            "trust_level": "high",
        }

    def test_missing_separator(self):
        with pytest.raises(argparse.ArgumentTypeError):
            _parse_answers(["group_size"])


class TestRunPreview:
    def test_ready(self, capsys):
        ok = run_preview(
            "worker-coop",
            "Bike Coop",
            "A worker-owned repair shop",
            answers={"group_size": "small", "trust_level": "high"},
            registry_address=REGISTRY,
            verbose=True,
        )
        assert ok
        output = capsys.readouterr().out
        assert "READY" in output
        assert "Permission bitmaps" in output

    def test_unknown_template(self, capsys):
        assert not run_preview("no-such-template", "X", "Y")
        assert "Unknown template" in capsys.readouterr().out

    def test_missing_registry_fails(self, monkeypatch, capsys):
        monkeypatch.setattr(settings, "registry_address", "")
        assert not run_preview("custom", "Solo", "Just me")
        assert "registry_missing" in capsys.readouterr().out

    def test_blank_name_is_invalid(self, capsys):
        assert not run_preview("custom", "", "No name", registry_address=REGISTRY)
        assert "INVALID" in capsys.readouterr().out
