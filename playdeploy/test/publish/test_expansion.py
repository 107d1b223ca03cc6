from __future__ import annotations

from pathlib import Path

import pytest

from playdeploy.core.result import Err, Ok
from playdeploy.publish.expansion import parse_expansion_entry
from playdeploy.publish.model import ExpansionFileType


@pytest.mark.parametrize(
    ("entry", "expected_type", "expected_path"),
    [
        ("main:/file/path/1.obb", ExpansionFileType.MAIN, "/file/path/1.obb"),
        ("patch:/file/path/2.obb", ExpansionFileType.PATCH, "/file/path/2.obb"),
        ("  main: /spaced/path.obb  ", ExpansionFileType.MAIN, "/spaced/path.obb"),
        ("main:relative/main.obb", ExpansionFileType.MAIN, "relative/main.obb"),
    ],
)
def test_parse_valid_entries(entry: str, expected_type: ExpansionFileType, expected_path: str) -> None:
    parsed = parse_expansion_entry(entry)
    assert isinstance(parsed, Ok)
    assert parsed.value.type is expected_type
    assert parsed.value.path == Path(expected_path)


def test_path_keeps_embedded_colons() -> None:
    parsed = parse_expansion_entry("main:/a:b/c.obb")
    assert isinstance(parsed, Ok)
    assert str(parsed.value.path) == "/a:b/c.obb"


@pytest.mark.parametrize(
    "entry",
    [
        "/file/path/1.obb",
        "",
        "extra:/file/path/1.obb",
        "Main:/file/path/1.obb",
        "PATCH:/file/path/1.obb",
        " main :/file/path/1.obb",
    ],
)
def test_parse_rejects_invalid_entries(entry: str) -> None:
    parsed = parse_expansion_entry(entry)
    assert isinstance(parsed, Err)
    assert parsed.error.kind == "invalid_config"
    assert parsed.error.hint is not None
