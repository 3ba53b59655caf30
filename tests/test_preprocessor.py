# =============================================================================
# test_preprocessor.py - Preprocessor Tests
# =============================================================================
# Tests for comment stripping, directives, conditional compilation,
# line-number preservation and fail-fast error reporting.
# =============================================================================

import pytest

from minic.comments import strip_comments
from minic.errors import (
    InvalidDirectiveError,
    InvalidMacroNameError,
    MacroCycleError,
    MacroRecursionError,
    PreprocessorError,
    UnclosedCommentError,
    UnmatchedElseError,
    UnmatchedEndifError,
    UnterminatedConditionalError,
)
from minic.position import Position
from minic.preprocessor import Preprocessor, preprocess, split_lines


# =============================================================================
# Helper Function
# =============================================================================

def run(source: str, preserve: bool = False, **defines) -> str:
    """Preprocess source, collapsing removed lines unless preserve is set."""
    pp = Preprocessor(source)
    pp.preserve_line_numbers(preserve)
    for name, value in defines.items():
        pp.define(name, value)
    return pp.process()


# =============================================================================
# Comment Stripping
# =============================================================================

class TestCommentStripping:
    """Whole-source comment removal."""

    def test_line_comment_collapsed(self):
        assert strip_comments("int a; // note\nint b;", False) == "int a; \nint b;"

    def test_line_comment_preserved_width(self):
        stripped = strip_comments("int a; // note\nint b;", True)
        assert stripped == "int a; " + " " * 7 + "\nint b;"

    def test_block_comment_collapsed(self):
        assert strip_comments("a /* x\ny */ b", False) == "a  b"

    def test_block_comment_keeps_lines(self):
        stripped = strip_comments("a /* x\ny */ b", True)
        assert stripped.count("\n") == 1
        assert stripped.split("\n")[1].endswith(" b")
        assert len(stripped.split("\n")[1]) == len("y */ b")

    def test_comment_markers_inside_string(self):
        source = 'string s = "// not /* a comment";'
        assert strip_comments(source, False) == source

    def test_escaped_quote_inside_string(self):
        source = 'string s = "a \\" // still string"; // gone'
        assert strip_comments(source, False) == 'string s = "a \\" // still string"; '

    def test_block_comments_do_not_nest(self):
        """The first */ closes the comment."""
        assert strip_comments("x /* a /* b */ y", False) == "x  y"

    def test_unterminated(self):
        with pytest.raises(UnclosedCommentError) as info:
            strip_comments("int a;\n  /* unterminated")
        assert info.value.position == Position(2, 3)


# =============================================================================
# Macros
# =============================================================================

class TestDefineDirective:
    """#define and #undef."""

    def test_define_and_expand(self):
        output = run("#define MAX 100\nint x = MAX;")
        assert "int x = 100;" in output
        assert "MAX" not in output

    def test_multiword_value(self):
        assert run("#define SUM a  +   b\nSUM") == "a + b\n"

    def test_empty_value(self):
        assert run("#define EMPTY\nint EMPTY x;") == "int  x;\n"

    def test_indented_directive(self):
        assert run("   #define X 1\nX") == "1\n"

    def test_undef(self):
        assert run("#define A 1\nA\n#undef A\nA") == "1\nA\n"

    def test_undef_unknown(self):
        assert run("#undef NOTHING\nok") == "ok\n"

    def test_invalid_name(self):
        with pytest.raises(InvalidMacroNameError):
            run("#define 1X 5")

    def test_missing_name(self):
        with pytest.raises(InvalidDirectiveError) as info:
            run("ok\n#define")
        assert info.value.directive == "#define"
        assert info.value.reason == "Missing macro name"
        assert info.value.position == Position(2, 1)

    def test_undef_missing_name(self):
        with pytest.raises(InvalidDirectiveError):
            run("#undef")

    def test_recursion_is_fatal(self):
        with pytest.raises(MacroRecursionError):
            run("#define A B\n#define B A\nint x = A;")

    def test_cycle_reports_line(self):
        with pytest.raises(MacroCycleError) as info:
            run("#define A B\n#define B A\n\nint x = A;")
        assert info.value.position == Position(4, 1)
        assert str(info.value).startswith("4:1: error: recursive macro cycle")

    def test_self_reference_reports_line(self):
        with pytest.raises(MacroRecursionError) as info:
            run("ok\n#define N N + 1\nN")
        assert info.value.position == Position(3, 1)

    def test_invalid_name_reports_line(self):
        with pytest.raises(InvalidMacroNameError) as info:
            run("ok\n#define 1X 5")
        assert info.value.position == Position(2, 1)

    def test_api_define(self):
        assert run("int n = N;", N="42") == "int n = 42;\n"

    def test_api_define_invalid(self):
        pp = Preprocessor("")
        with pytest.raises(InvalidMacroNameError):
            pp.define("bad name")

    def test_api_undefine(self):
        pp = Preprocessor("#ifdef DEBUG\ndebug\n#endif")
        pp.define("DEBUG")
        pp.undefine("DEBUG")
        pp.preserve_line_numbers(False)
        assert pp.process() == ""

    def test_definitions_visible_through_macros(self):
        pp = Preprocessor("#define A 1")
        pp.process()
        assert pp.macros.is_defined("A")


# =============================================================================
# Conditional Compilation
# =============================================================================

class TestConditionals:
    """#ifdef / #ifndef / #else / #endif."""

    SOURCE = "#ifdef DEBUG\nlog();\n#else\nrun();\n#endif\n"

    def test_ifdef_defined(self):
        output = run(self.SOURCE, DEBUG="")
        assert "log();" in output
        assert "run();" not in output

    def test_ifdef_undefined(self):
        output = run(self.SOURCE)
        assert "run();" in output
        assert "log();" not in output

    def test_ifndef(self):
        source = "#ifndef GUARD\nfirst\n#endif"
        assert run(source) == "first\n"
        assert run(source, GUARD="1") == ""

    def test_define_from_source(self):
        assert run("#define FEATURE\n#ifdef FEATURE\non\n#endif") == "on\n"

    def test_nested(self):
        source = (
            "#define OUTER\n"
            "#ifdef OUTER\n"
            "#ifndef INNER\n"
            "yes\n"
            "#else\n"
            "no\n"
            "#endif\n"
            "#endif\n"
        )
        assert run(source) == "yes\n"

    def test_inactive_outer_hides_inner_else(self):
        source = "#ifdef NO\n#ifdef NO2\na\n#else\nb\n#endif\n#endif\nc"
        assert run(source) == "c\n"

    def test_define_inside_inactive_region_applies(self):
        """#define and #undef are not subject to conditionals."""
        assert run("#ifdef NO\n#define A 1\n#endif\nA") == "1\n"

    def test_undef_inside_inactive_region_applies(self):
        assert run("#define A 1\n#ifdef NO\n#undef A\n#endif\nA") == "A\n"

    def test_define_in_inactive_branch_controls_later_blocks(self):
        source = "#ifndef X\n#else\n#define Y\n#endif\n#ifdef Y\nyes\n#endif"
        assert run(source) == "yes\n"

    def test_unterminated(self):
        with pytest.raises(UnterminatedConditionalError) as info:
            run("int a;\n#ifdef X\nint b;")
        assert info.value.position == Position(2, 1)

    def test_unmatched_else(self):
        with pytest.raises(UnmatchedElseError):
            run("#else")

    def test_unmatched_endif(self):
        with pytest.raises(UnmatchedEndifError) as info:
            run("a\nb\n#endif")
        assert info.value.position == Position(3, 1)

    def test_ifdef_missing_name(self):
        with pytest.raises(InvalidDirectiveError) as info:
            run("#ifdef")
        assert info.value.reason == "Missing condition"

    def test_conditionals_disabled(self):
        pp = Preprocessor(self.SOURCE)
        pp.enable_conditionals(False)
        pp.preserve_line_numbers(False)
        assert pp.process() == "log();\nrun();\n"

    def test_disabled_conditionals_tolerate_unbalanced(self):
        pp = Preprocessor("#endif\nx\n#ifdef A")
        pp.enable_conditionals(False)
        pp.preserve_line_numbers(False)
        assert pp.process() == "x\n"


# =============================================================================
# Other Lines and Line Numbers
# =============================================================================

class TestLineHandling:
    """Pass-through lines and preserved line numbering."""

    def test_unknown_directive_is_ordinary_text(self):
        """Unrecognized directives pass through after macro expansion."""
        assert run("#define X 1\n#pragma X") == "#pragma 1\n"

    def test_lone_hash_consumed(self):
        assert run("#\nx") == "x\n"

    def test_preserve_line_numbers_default(self):
        source = "#define A 1\n#ifdef B\nhidden\n#endif\nA // one"
        output = Preprocessor(source).process()
        lines = output.split("\n")
        assert lines[:4] == ["", "", "", ""]
        assert lines[4].rstrip() == "1"

    def test_preserved_comment_lines(self):
        output = run("a\n/* one\ntwo */\nb", preserve=True)
        assert output.split("\n")[3] == "b"

    def test_collapsed_output(self):
        source = "#define A 1\n#ifdef B\nhidden\n#endif\nA"
        assert run(source) == "1\n"

    def test_empty_source(self):
        assert run("") == ""

    def test_blank_lines_kept(self):
        assert run("a\n\nb") == "a\n\nb\n"

    def test_crlf_line_endings(self):
        assert run("#define A 1\r\nA\r\nb\r\n") == "1\nb\n"

    def test_form_feed_does_not_end_line(self):
        output = run("a\x0cb\nc", preserve=True)
        assert output == "a\x0cb\nc\n"

    def test_lone_carriage_return_does_not_start_directive(self):
        assert run("x = 1;\r#define A 2\nA") == "x = 1;\r#define A 2\nA\n"

    @pytest.mark.parametrize("text,lines", [
        ("", []),
        ("a", ["a"]),
        ("a\n", ["a"]),
        ("a\n\n", ["a", ""]),
        ("a\r\nb", ["a", "b"]),
        ("a\rb\x0cc d", ["a\rb\x0cc d"]),
    ])
    def test_split_lines(self, text, lines):
        assert split_lines(text) == lines

    def test_fail_fast_on_unterminated_comment(self):
        with pytest.raises(PreprocessorError):
            run("int a;\n/* unterminated")

    def test_process_is_repeatable(self):
        pp = Preprocessor("#define A 1\nA")
        assert pp.process() == pp.process()


class TestPreprocessFunction:
    """Module-level convenience wrapper."""

    def test_defaults_preserve_lines(self):
        assert preprocess("#define A 2\nA") == "\n2\n"

    def test_with_defines(self):
        output = preprocess("#ifdef DEBUG\nd\n#endif", defines={"DEBUG": "1"},
                            preserve_line_numbers=False)
        assert output == "d\n"
