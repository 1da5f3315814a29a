import argparse
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

GENERATOR_DIR = Path(__file__).resolve().parent.parent
if str(GENERATOR_DIR) not in sys.path:
    sys.path.insert(0, str(GENERATOR_DIR))

import glgen  # noqa: E402

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


def _blob(attrs: dict[str, str]) -> tuple[str, ...]:
    flat: list[str] = []
    for key, value in attrs.items():
        flat.extend((key, value))
    return tuple(flat)


@pytest.fixture
def fixture_gl_xml() -> Path:
    return FIXTURES_DIR / "gl_minimal.xml"


@pytest.fixture
def existing_paths(tmp_path: Path) -> dict[str, Path]:
    gl_xml = tmp_path / "gl.xml"
    gl_xml.write_text("<registry />\n", encoding="utf-8")
    return {"gl_xml": gl_xml, "output_dir": tmp_path / "out"}


@pytest.fixture
def missing_path(tmp_path: Path) -> Path:
    return tmp_path / "missing"


@pytest.fixture
def make_args(existing_paths: dict[str, Path]) -> Callable[..., argparse.Namespace]:
    def _make_args(**overrides: object) -> argparse.Namespace:
        base_args: dict[str, object] = {
            "api": None,
            "gl_xml": existing_paths["gl_xml"],
            "output_dir": existing_paths["output_dir"],
            "keep_prefix": False,
            "prefix": "GL_",
            "negative_radix": 10,
            "list_groups": False,
            "info": None,
            "filter": None,
        }
        base_args.update(overrides)
        return argparse.Namespace(**base_args)

    return _make_args


@pytest.fixture
def make_entry() -> Callable[..., glgen.EmptyTag]:
    def _make_entry(line: int = 0, **attrs: str) -> glgen.EmptyTag:
        return glgen.EmptyTag("enum", _blob(attrs), line)

    return _make_entry


@pytest.fixture
def make_scope(
    make_entry: Callable[..., glgen.EmptyTag],
) -> Callable[..., list[glgen.Event]]:
    """Events for one scope body: entries followed by the closing tag."""

    def _make_scope(*entries: dict[str, str]) -> list[glgen.Event]:
        events: list[glgen.Event] = [make_entry(**attrs) for attrs in entries]
        events.append(glgen.EndTag("enums"))
        return events

    return _make_scope
