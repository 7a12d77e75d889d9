"""Unit tests for the include merger."""

from collections.abc import Callable
from pathlib import Path

import pytest

from codegen.errors import FileAccessError, ParseError, Phase
from codegen.templates import build_base


class TestBuildBase:
    """Tests for build_base."""

    def test_empty_includes(self) -> None:
        """Test that no fragments gives an empty, frozen namespace."""
        base = build_base([])

        assert len(base) == 0
        assert base.frozen

    def test_parses_all_fragments(self, write_file: Callable[[str, str], Path]) -> None:
        """Test that definitions from every fragment are merged."""
        first = write_file("a.j2", "{% macro header() %}H{% endmacro %}")
        second = write_file(
            "b.j2",
            "{% macro footer() %}F{% endmacro %}\n{% macro nav() %}N{% endmacro %}\n",
        )

        base = build_base([first, second])

        assert base.names == ["header", "footer", "nav"]
        assert base.origin("nav") == second

    def test_missing_fragment(self, tmp_path: Path) -> None:
        """Test that an unreadable fragment names its path."""
        missing = tmp_path / "missing.j2"

        with pytest.raises(FileAccessError) as exc_info:
            build_base([missing])

        assert exc_info.value.path == missing
        assert exc_info.value.phase == Phase.READ
        assert "failed to read include file" in str(exc_info.value)
        assert str(missing) in str(exc_info.value)

    def test_syntax_error(self, write_file: Callable[[str, str], Path]) -> None:
        """Test that a malformed fragment fails the merge."""
        good = write_file("good.j2", "{% macro ok() %}ok{% endmacro %}")
        bad = write_file("bad.j2", "{% macro broken() %}{{ x }{% endmacro %}")

        with pytest.raises(ParseError) as exc_info:
            build_base([good, bad])

        assert str(exc_info.value).startswith("failed parsing include files")
        assert exc_info.value.phase == Phase.PARSE_INCLUDE
        assert exc_info.value.path == bad

    def test_duplicate_definition(self, write_file: Callable[[str, str], Path]) -> None:
        """Test that two fragments defining the same name are rejected."""
        first = write_file("first.j2", "{% macro content() %}one{% endmacro %}")
        second = write_file("second.j2", "{% macro content() %}two{% endmacro %}")

        with pytest.raises(ParseError) as exc_info:
            build_base([first, second])

        message = str(exc_info.value)
        assert message.startswith("failed parsing include files")
        assert "content" in message
        assert str(first) in message
        assert str(second) in message

    def test_all_files_read_before_parsing(
        self,
        write_file: Callable[[str, str], Path],
        tmp_path: Path,
    ) -> None:
        """Test that a read failure wins over a later syntax error."""
        bad = write_file("bad.j2", "{% macro broken() %}")
        missing = tmp_path / "missing.j2"

        with pytest.raises(FileAccessError):
            build_base([bad, missing])
