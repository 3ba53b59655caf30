# =============================================================================
# test_cli.py - minic Command-Line Tests
# =============================================================================
# Tests for the minic command group: lex, check, preprocess, full and info,
# output formats and exit codes.
# =============================================================================

import json
from pathlib import Path

from click.testing import CliRunner

from minic import __version__
from minic.cli.minic import main


VALID_SOURCE = "int x = 42;\n"
INVALID_SOURCE = "int x = @ ;\n"


def invoke(args, files=None, input=None):
    """Run minic in an isolated directory, writing files first."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        for name, text in (files or {}).items():
            Path(name).write_text(text)
        result = runner.invoke(main, args, input=input)
        outputs = {
            name: Path(name).read_text()
            for name in ("out.txt", "out.mc")
            if Path(name).exists()
        }
    return result, outputs


# =============================================================================
# lex
# =============================================================================

class TestLexCommand:
    """Tokenizing from a file or stdin."""

    def test_text_output(self):
        result, _ = invoke(["lex", "-i", "prog.mc"], {"prog.mc": VALID_SOURCE})
        assert result.exit_code == 0, result.output
        assert "Found 5 tokens:" in result.output
        assert '1:1 KW_INT "int"' in result.output
        assert '1:9 INT_LITERAL "42" 42' in result.output
        assert "END_OF_FILE" not in result.output

    def test_errors_exit_code(self):
        result, _ = invoke(["lex", "-i", "prog.mc"], {"prog.mc": INVALID_SOURCE})
        assert result.exit_code == 2
        assert "Found 1 error:" in result.output
        assert "1:9: error: unexpected character '@'" in result.output
        # Scanning continues after the error
        assert 'SEMICOLON ";"' in result.output

    def test_json_output(self):
        result, _ = invoke(
            ["--format", "json", "lex", "-i", "prog.mc"],
            {"prog.mc": INVALID_SOURCE},
        )
        assert result.exit_code == 2
        report = json.loads(result.output)
        assert report["success"] is False
        assert report["errors"][0]["type"] == "UnexpectedCharacter"
        assert report["errors"][0]["position"] == {"line": 1, "column": 9}
        assert report["tokens"][-1]["is_eof"] is True
        assert report["statistics"]["error_count"] == 1

    def test_json_literal_value(self):
        result, _ = invoke(
            ["--format", "json", "lex", "-i", "prog.mc"],
            {"prog.mc": VALID_SOURCE},
        )
        report = json.loads(result.output)
        literal = report["tokens"][3]
        assert literal["type"] == "INT_LITERAL"
        assert literal["value"] == 42

    def test_json_overflowing_float(self):
        """A float too large for a double still yields valid JSON."""
        result, _ = invoke(
            ["--format", "json", "lex", "-i", "prog.mc"],
            {"prog.mc": "1" * 400 + ".5"},
        )
        assert result.exit_code == 0, result.output
        report = json.loads(result.output)
        assert report["tokens"][0]["type"] == "FLOAT_LITERAL"
        assert report["tokens"][0]["value"] == "inf"

    def test_minimal_output(self):
        result, _ = invoke(
            ["--format", "minimal", "lex", "-i", "prog.mc"],
            {"prog.mc": VALID_SOURCE},
        )
        assert result.exit_code == 0
        assert result.output.strip() == "OK"

    def test_minimal_errors(self):
        result, _ = invoke(
            ["--format", "minimal", "lex", "-i", "prog.mc"],
            {"prog.mc": INVALID_SOURCE},
        )
        assert result.output.strip() == "ERROR: 1:9: unexpected character '@'"

    def test_verbose_format(self):
        result, _ = invoke(
            ["--format", "verbose", "lex", "-i", "prog.mc"],
            {"prog.mc": INVALID_SOURCE},
        )
        assert "=== Lexical Analysis Report ===" in result.output
        assert "Characters skipped: 1" in result.output
        assert "Token categories:" in result.output
        assert "Keywords: 1" in result.output

    def test_quiet(self):
        result, _ = invoke(["lex", "-i", "prog.mc", "-q"], {"prog.mc": VALID_SOURCE})
        assert result.output.strip() == "OK"

    def test_fail_fast(self):
        result, _ = invoke(
            ["lex", "-i", "prog.mc", "--fail-fast"],
            {"prog.mc": "a @ b # c"},
        )
        assert result.exit_code == 2
        assert "Found 1 error:" in result.output
        assert 'IDENTIFIER "b"' not in result.output

    def test_interactive(self):
        result, _ = invoke(["lex", "--interactive"], input="x = 1;")
        assert result.exit_code == 0
        assert "Found 4 tokens:" in result.output

    def test_output_file(self):
        result, outputs = invoke(
            ["lex", "-i", "prog.mc", "-o", "out.txt"],
            {"prog.mc": VALID_SOURCE},
        )
        assert result.exit_code == 0
        assert "Found 5 tokens:" in outputs["out.txt"]

    def test_no_input(self):
        result, _ = invoke(["lex"])
        assert result.exit_code == 3
        assert "no input given" in result.output

    def test_missing_file(self):
        result, _ = invoke(["lex", "-i", "missing.mc"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_preprocessor_directives_not_handled(self):
        """lex does not preprocess: '#' is an unexpected character."""
        result, _ = invoke(["lex", "-i", "prog.mc"], {"prog.mc": "#define A 1\n"})
        assert result.exit_code == 2
        assert "unexpected character '#'" in result.output


# =============================================================================
# check
# =============================================================================

class TestCheckCommand:
    """Lexical validation of a file."""

    def test_valid(self):
        result, _ = invoke(["check", "-i", "prog.mc"], {"prog.mc": VALID_SOURCE})
        assert result.exit_code == 0
        assert "OK: prog.mc is valid (6 tokens)" in result.output

    def test_invalid_non_strict(self):
        result, _ = invoke(["check", "-i", "prog.mc"], {"prog.mc": INVALID_SOURCE})
        assert result.exit_code == 0
        assert "Found 1 error in prog.mc:" in result.output
        assert "--strict" in result.output

    def test_invalid_strict(self):
        result, _ = invoke(
            ["check", "-i", "prog.mc", "--strict"],
            {"prog.mc": INVALID_SOURCE},
        )
        assert result.exit_code == 2

    def test_input_required(self):
        result, _ = invoke(["check"])
        assert result.exit_code != 0


# =============================================================================
# preprocess
# =============================================================================

class TestPreprocessCommand:
    """Macro expansion and conditionals from the command line."""

    SOURCE = "#ifdef DEBUG\nint level = LEVEL;\n#endif\nint done;\n"

    def test_defines(self):
        result, _ = invoke(
            ["preprocess", "-i", "prog.mc", "-D", "DEBUG", "-D", "LEVEL=3"],
            {"prog.mc": self.SOURCE},
        )
        assert result.exit_code == 0, result.output
        assert result.output == "int level = 3;\nint done;\n"

    def test_without_defines(self):
        result, _ = invoke(["preprocess", "-i", "prog.mc"], {"prog.mc": self.SOURCE})
        assert result.output == "int done;\n"

    def test_preserve_lines(self):
        result, _ = invoke(
            ["preprocess", "-i", "prog.mc", "--preserve-lines"],
            {"prog.mc": self.SOURCE},
        )
        assert result.output == "\n\n\nint done;\n"

    def test_show(self):
        result, _ = invoke(
            ["preprocess", "-i", "prog.mc", "--show"],
            {"prog.mc": self.SOURCE},
        )
        lines = result.output.splitlines()
        assert lines[0] == "=== Preprocessor output ==="
        assert lines[1] == "int done;"
        assert lines[2].startswith("====")

    def test_output_file(self):
        result, outputs = invoke(
            ["preprocess", "-i", "prog.mc", "-D", "DEBUG", "-D", "LEVEL=1", "-o", "out.mc"],
            {"prog.mc": self.SOURCE},
        )
        assert result.exit_code == 0
        assert result.output == ""
        assert outputs["out.mc"] == "int level = 1;\nint done;\n"

    def test_invalid_define(self):
        result, _ = invoke(
            ["preprocess", "-i", "prog.mc", "-D", "=1"],
            {"prog.mc": self.SOURCE},
        )
        assert result.exit_code == 3

    def test_preprocessor_error(self):
        result, _ = invoke(
            ["preprocess", "-i", "prog.mc"],
            {"prog.mc": "#ifdef A\nint x;\n"},
        )
        assert result.exit_code == 2
        assert "1:1: error:" in result.output

    def test_preprocessor_error_json(self):
        result, _ = invoke(
            ["--format", "json", "preprocess", "-i", "prog.mc"],
            {"prog.mc": "#endif\n"},
        )
        assert result.exit_code == 2
        report = json.loads(result.output)
        assert report["success"] is False
        assert report["errors"][0]["position"] == {"line": 1, "column": 1}


# =============================================================================
# full
# =============================================================================

class TestFullCommand:
    """Preprocess, then tokenize."""

    def test_macro_tokens(self):
        result, _ = invoke(
            ["full", "-i", "prog.mc"],
            {"prog.mc": "#define MAX 100\nint x = MAX;\n"},
        )
        assert result.exit_code == 0, result.output
        assert '2:9 INT_LITERAL "100" 100' in result.output

    def test_command_line_define(self):
        result, _ = invoke(
            ["full", "-i", "prog.mc", "-D", "SIZE=8"],
            {"prog.mc": "int a[SIZE];\n"},
        )
        assert '1:7 INT_LITERAL "8" 8' in result.output

    def test_lexical_error(self):
        result, _ = invoke(
            ["full", "-i", "prog.mc"],
            {"prog.mc": "#define BAD @\nint x = BAD;\n"},
        )
        assert result.exit_code == 2
        assert "2:9: error: unexpected character '@'" in result.output

    def test_recursive_macro(self):
        result, _ = invoke(
            ["full", "-i", "prog.mc"],
            {"prog.mc": "#define A B\n#define B A\nA\n"},
        )
        assert result.exit_code == 2
        assert "recursive" in result.output

    def test_minimal(self):
        result, _ = invoke(
            ["--format", "minimal", "full", "-i", "prog.mc"],
            {"prog.mc": "#define N 1\nint x = N;\n"},
        )
        assert result.exit_code == 0
        assert result.output.strip() == "OK"


# =============================================================================
# info and global options
# =============================================================================

class TestInfoAndOptions:
    """info, --version and --help."""

    def test_info(self):
        result, _ = invoke(["info"])
        assert result.exit_code == 0
        assert f"minic v{__version__}" in result.output

    def test_version(self):
        result, _ = invoke(["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self):
        result, _ = invoke(["--help"])
        assert result.exit_code == 0
        for command in ("lex", "check", "preprocess", "full", "info"):
            assert command in result.output

    def test_unknown_format(self):
        result, _ = invoke(["--format", "xml", "info"])
        assert result.exit_code == 2
