"""Tests for source map generation."""

from __future__ import annotations

import json

from bundleprune.editing import PatchedString, encode_vlq


def test_encode_vlq_matches_reference_values() -> None:
    assert encode_vlq(0) == "A"
    assert encode_vlq(1) == "C"
    assert encode_vlq(-1) == "D"
    assert encode_vlq(-2) == "F"
    assert encode_vlq(16) == "gB"


def test_generate_map_tracks_replacements_across_lines() -> None:
    patched = PatchedString("abc\ndef")
    patched.overwrite(1, 2, "XY")

    source_map = patched.generate_map(source="bundle.js", file="bundle.js")

    assert source_map.mappings == "AAAA,CAAC,EAAC;AACF"
    assert source_map.sources == ["bundle.js"]


def test_generate_map_serialises_v3_document() -> None:
    patched = PatchedString("var a = 1;\nvar b = 2;\n")
    patched.remove(0, 11)

    payload = json.loads(patched.generate_map(source="a.js", include_content=True).to_json())

    assert payload["version"] == 3
    assert payload["sources"] == ["a.js"]
    assert payload["sourcesContent"] == ["var a = 1;\nvar b = 2;\n"]
    assert "file" not in payload
    assert payload["mappings"].count(";") == 1
