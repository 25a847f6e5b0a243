"""Tests for code block metadata and comment annotations."""

import pytest
from postpress.codehike.annotations import (
    extract_annotations,
    parse_line_ranges,
    parse_meta,
)


class TestParseLineRanges:
    """Tests for parse_line_ranges()."""

    def test__single_line__returns_it(self) -> None:
        assert parse_line_ranges("3") == [3]

    def test__ranges_and_lists__expand_sorted(self) -> None:
        """Expand ranges and sort the union."""
        assert parse_line_ranges("5,1:3,2") == [1, 2, 3, 5]

    @pytest.mark.parametrize("spec", ["a", "3:1", "0", "1-3"])
    def test__malformed__raises(self, spec: str) -> None:
        """Reject malformed specs."""
        with pytest.raises(ValueError, match="Invalid line range"):
            parse_line_ranges(spec)


class TestParseMeta:
    """Tests for parse_meta()."""

    def test__empty__returns_defaults(self) -> None:
        meta = parse_meta(None)

        assert meta.lang == ""
        assert meta.name == ""
        assert meta.ranges == {}

    def test__lang_name_and_ranges__parsed(self) -> None:
        """Parse language, file name and key=range pairs."""
        meta = parse_meta("js index.js focus=2:4 mark=3")

        assert meta.lang == "js"
        assert meta.name == "index.js"
        assert meta.ranges == {"focus": "2:4", "mark": "3"}

    def test__unknown_keys__ignored(self) -> None:
        """Unknown key=value words are skipped."""
        meta = parse_meta("py title=x app.py")

        assert meta.name == "app.py"
        assert meta.ranges == {}


class TestExtractAnnotations:
    """Tests for extract_annotations()."""

    def test__no_annotations__returns_code_unchanged(self) -> None:
        code = "a = 1\nb = 2"

        assert extract_annotations(code) == (code, {})

    def test__focus_comment__applies_to_next_line(self) -> None:
        """A bare annotation targets the following line and is removed."""
        code = "const a = 1\n// focus\nconst b = 2\nconst c = 3"

        clean, annotations = extract_annotations(code)

        assert clean == "const a = 1\nconst b = 2\nconst c = 3"
        assert annotations == {"focus": [2]}

    def test__range_comment__counts_from_next_line(self) -> None:
        """Ranges are relative to the line after the comment."""
        code = "# mark(1:2)\nx = 1\ny = 2\nz = 3"

        clean, annotations = extract_annotations(code)

        assert clean == "x = 1\ny = 2\nz = 3"
        assert annotations == {"mark": [1, 2]}

    def test__block_comment_styles__recognized(self) -> None:
        """HTML and C block comments work too."""
        code = "<!-- focus -->\n<p>hi</p>\n/* mark */\nbody {}"

        clean, annotations = extract_annotations(code)

        assert clean == "<p>hi</p>\nbody {}"
        assert annotations == {"focus": [1], "mark": [2]}

    def test__meta_ranges__merged(self) -> None:
        """Fence meta ranges are absolute and merged with comments."""
        code = "a\n// mark\nb\nc"

        _, annotations = extract_annotations(code, parse_meta("js focus=1,3 mark=1"))

        assert annotations == {"focus": [1, 3], "mark": [1, 2]}

    def test__out_of_range__dropped(self) -> None:
        """Lines past the end are ignored."""
        code = "a\n// focus(1:5)\nb"

        _, annotations = extract_annotations(code)

        assert annotations == {"focus": [2]}

    def test__comment_with_other_text__kept(self) -> None:
        """Only standalone annotation comments are stripped."""
        code = "// focus on this part\nx"

        assert extract_annotations(code) == (code, {})
