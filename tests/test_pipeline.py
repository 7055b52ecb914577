"""
End-to-end tests for the porting pipeline (PortProgramTask / transform) and
the dry-run analysis helpers.
"""
from __future__ import annotations

import textwrap

import pytest

from qb64_porter import (
    InvalidOptionsError,
    PortingError,
    PortingOptions,
    PortProgramTask,
    analyze,
    get_dialect_rules,
    get_supported_dialects,
    run_diagnostics,
    transform,
)
from qb64_porter.pipeline.assessment import assess_compatibility
from qb64_porter.pipeline.rules import SIGIL_TYPES


def _src(text: str) -> str:
    return textwrap.dedent(text).strip("\n")


GRAPHICS_PROGRAM = _src("""
    ' Bouncing Ball Demo
    SCREEN 12
    CIRCLE (320, 240), 50, 15
    END
""")

LEGACY_PROGRAM = _src("""
    DECLARE SUB Show ()
    CLS
    pi = 4 * ATN(1)
    PRINT "Pi is"; pi
    Rest 1
    END
""")

MODERN_PROGRAM = _src("""
    ' Modern program
    Dim total As Long
    For i = 1 To 10
        total = total + i
    Next i
    Print "Total:"; total
    System 0
""")

SAMPLES = [
    "",
    "PRINT 1",
    GRAPHICS_PROGRAM,
    LEGACY_PROGRAM,
    MODERN_PROGRAM,
    "DEF FNSquare(x#) = x# * x#\nPRINT FNSquare(2)",
    "GOSUB Greet\nEND\nGreet:\nPRINT 1\nRETURN",
    "GOSUB Nowhere",
    "$NOPREFIX\nDIM x% AS INTEGER",
    'PRINT "END": REM END',
]


def _descriptions(result):
    return [t.description for t in result.transformations]


# ─────────────────────────────────────────────────────────────────────────────
# Scenarios
# ─────────────────────────────────────────────────────────────────────────────


class TestScenarios:
    def test_single_line_def_fn(self):
        result = transform("DEF FNSquare(x#) = x# * x#")
        assert result.ported_code == (
            "Function Square (x As DOUBLE)\n"
            "    Square = x * x\n"
            "End Function"
        )
        assert any(
            d.startswith("Converted 1 DEF FN statement(s)") for d in _descriptions(result)
        )
        assert result.compatibility == "high"

    def test_chained_conditionals_single_warning(self):
        src = "IF a THEN PRINT 1: IF b THEN PRINT 2\nIF c THEN PRINT 3: IF d THEN PRINT 4"
        result = transform(src)
        matching = [w for w in result.warnings if "Multi-statement" in w]
        assert len(matching) == 1
        assert "2 occurrence(s)" in matching[0]

    def test_gosub_becomes_sub(self):
        src = _src("""
            PRINT "Start"
            GOSUB Greet
            END
            Greet:
              PRINT "Hello"
            RETURN
        """)
        result = transform(src)
        assert result.ported_code.split("\n") == [
            'Print "Start"',
            "Greet",
            "System 0",
            "Sub Greet",
            '  Print "Hello"',
            "End Sub",
        ]
        assert any("requires manual verification" in w for w in result.warnings)
        assert any(t.best_effort for t in result.transformations)

    def test_empty_input(self):
        result = transform("")
        assert result.ported_code == ""
        assert result.transformations == ()
        assert result.warnings == ()
        assert result.errors == ()
        assert result.compatibility == "high"


# ─────────────────────────────────────────────────────────────────────────────
# Whole-pipeline behaviour
# ─────────────────────────────────────────────────────────────────────────────


class TestPortProgram:
    def test_graphics_program(self):
        result = transform(GRAPHICS_PROGRAM)
        assert result.ported_code.split("\n") == [
            "' Bouncing Ball Demo",
            "$Resize:Smooth",
            '_Title "Bouncing Ball Demo"',
            "",
            "Screen 12",
            "_AllowFullScreen _SquarePixels , _Smooth",
            "Circle (320, 240), 50, 15",
            "System 0",
        ]
        assert result.compatibility == "high"

    def test_legacy_program(self):
        result = transform(LEGACY_PROGRAM)
        assert result.ported_code.split("\n") == [
            "Cls",
            "pi = _Pi",
            'Print "Pi is"; pi',
            "_Delay 1",
            "System 0",
        ]
        assert "Removed 1 forward declaration(s): Show" in _descriptions(result)

    def test_noprefix_removed(self):
        result = transform("$NOPREFIX\nPRINT 1")
        assert result.ported_code == "Print 1"
        assert "Removed deprecated $NOPREFIX metacommand" in _descriptions(result)
        assert len(result.warnings) == 1

    def test_mixed_dim(self):
        result = transform("DIM x% AS INTEGER")
        assert result.ported_code == "Dim x As INTEGER"
        assert (
            "Fixed 1 DIM statement(s) mixing type suffixes with AS clauses"
            in _descriptions(result)
        )

    def test_gwbasic_line_numbers_and_gosub(self):
        src = _src("""
            10 GOSUB 100
            20 END
            100 PRINT "SUB"
            110 RETURN
        """)
        result = transform(src, {"sourceDialect": "gwbasic"})
        assert result.ported_code.split("\n") == [
            "L100",
            "System 0",
            "Sub L100",
            'Print "SUB"',
            "End Sub",
        ]
        assert result.errors == ()

    def test_line_numbers_kept_for_qbasic(self):
        result = transform("10 GOSUB 100\n100 RETURN")
        assert result.errors
        assert result.compatibility == "low"

    def test_errors_leave_code_and_rate_low(self):
        result = transform("GOSUB Nowhere")
        assert result.ported_code == "GOSUB Nowhere"
        assert result.compatibility == "low"
        assert "1 error(s)" in result.summary

    def test_modern_features_off(self):
        result = transform(GRAPHICS_PROGRAM, {"addModernFeatures": False})
        assert "$Resize:Smooth" not in result.ported_code
        assert result.ported_code.split("\n")[-1] == "END"

    def test_graphics_off(self):
        src = "SCREEN 13\nPUT (1, 1), sprite"
        result = transform(src, {"convertGraphics": False, "addModernFeatures": False})
        assert result.ported_code == "Screen 13\nPut (1, 1), sprite"

    def test_graphics_on(self):
        src = "SCREEN 13\nPUT (1, 1), sprite"
        result = transform(src, {"addModernFeatures": False})
        assert result.ported_code == (
            "Screen 13\n_AllowFullScreen _SquarePixels , _Smooth\nPut (1, 1), sprite()"
        )

    def test_performance_advisories_follow_option(self):
        src = "start# = TIMER\nelapsed = TIMER - start#"
        assert any("Timer(.001)" in w for w in transform(src).warnings)
        quiet = transform(src, {"optimizePerformance": False})
        assert not any("Timer(.001)" in w for w in quiet.warnings)

    def test_to_dict(self):
        data = transform(LEGACY_PROGRAM).to_dict()
        assert data["originalCode"] == LEGACY_PROGRAM
        assert data["portedCode"].startswith("Cls")
        assert data["compatibility"] == "high"
        assert len(data["transformations"]) == len(data["transformationRecords"])
        assert data["usage"]["originalLines"] == 6
        assert data["usage"]["portedLines"] == 5

    def test_comment_after_then_left_alone(self):
        result = transform("IF done THEN REM print the screen")
        assert result.ported_code == "If done Then REM print the screen"
        assert "$Resize" not in result.ported_code
        assert {t.category for t in result.transformations} == {"LEXICAL"}

    def test_error_handler_reached_by_gosub_still_converted(self):
        result = transform("ON ERROR GOTO Handler\nGOSUB Handler\nHandler:\nRETURN")
        assert "Sub Handler" in result.ported_code
        assert result.ported_code.endswith("End Sub")
        assert result.errors == ()
        assert result.compatibility == "high"

    def test_rest_assignment_with_spaces_untouched(self):
        assert transform("Rest  = 5").ported_code == "Rest  = 5"

    def test_pass_list_follows_options(self):
        names = [type(p).__name__ for p in PortProgramTask().passes()]
        assert names[0] == "DeprecatedMetacommandPass"
        assert names[-1] == "DiagnosticsPass"
        assert "LineNumberLabelPass" not in names
        gw = [type(p).__name__ for p in PortProgramTask({"sourceDialect": "gwbasic"}).passes()]
        assert gw[1] == "LineNumberLabelPass"


# ─────────────────────────────────────────────────────────────────────────────
# Properties
# ─────────────────────────────────────────────────────────────────────────────


class TestProperties:
    @pytest.mark.parametrize("src", SAMPLES)
    def test_deterministic(self, src):
        assert transform(src) == transform(src)

    @pytest.mark.parametrize("src", SAMPLES)
    def test_no_silent_change(self, src):
        result = transform(src)
        if result.ported_code != src:
            assert len(result.transformations) + len(result.warnings) > 0

    def test_modern_code_untouched(self):
        result = transform(MODERN_PROGRAM)
        assert result.ported_code == MODERN_PROGRAM
        assert result.transformations == ()
        assert result.warnings == ()
        assert result.errors == ()

    @pytest.mark.parametrize("src", [LEGACY_PROGRAM, GRAPHICS_PROGRAM])
    def test_ported_output_is_stable(self, src):
        ported = transform(src).ported_code
        again = transform(ported)
        assert again.ported_code == ported
        assert again.transformations == ()
        assert again.warnings == ()

    @pytest.mark.parametrize("src", SAMPLES)
    def test_error_always_lowers_high_rating(self, src):
        result = transform(src)
        if result.compatibility == "high":
            assert assess_compatibility(len(result.errors) + 1, len(result.warnings)) == "low"

    @pytest.mark.parametrize("sigil, type_name", sorted(SIGIL_TYPES.items()))
    def test_every_sigil_converted(self, sigil, type_name):
        result = transform(f"DEF FNv{sigil}(a{sigil}) = a{sigil}")
        assert f"Function v (a As {type_name}) As {type_name}" in result.ported_code

    def test_input_not_mutated(self):
        src = LEGACY_PROGRAM
        result = transform(src)
        assert result.original_code == src


# ─────────────────────────────────────────────────────────────────────────────
# Options
# ─────────────────────────────────────────────────────────────────────────────


class TestOptions:
    def test_defaults(self):
        opts = PortingOptions.coerce(None)
        assert opts.source_dialect == "qbasic"
        assert opts.add_modern_features
        assert opts.preserve_comments
        assert opts.convert_graphics
        assert opts.optimize_performance

    def test_camel_and_snake_case(self):
        assert PortingOptions.coerce({"addModernFeatures": False}).add_modern_features is False
        assert PortingOptions.coerce({"convert_graphics": False}).convert_graphics is False

    def test_instance_passed_through(self):
        opts = PortingOptions(source_dialect="gwbasic")
        assert PortingOptions.coerce(opts) is opts

    @pytest.mark.parametrize(
        "options",
        [{"sourceDialect": "cobol"}, {"bogus": True}, {"addModernFeatures": [1]}, 42],
    )
    def test_invalid_options_raise(self, options):
        with pytest.raises(InvalidOptionsError):
            transform("PRINT 1", options)

    def test_invalid_options_error_is_value_error(self):
        assert issubclass(InvalidOptionsError, ValueError)
        assert issubclass(InvalidOptionsError, PortingError)

    def test_non_string_source(self):
        with pytest.raises(PortingError):
            transform(None)

    def test_dry_run_options(self):
        opts = PortingOptions(source_dialect="gwbasic").dry_run()
        assert opts.source_dialect == "gwbasic"
        assert not opts.add_modern_features
        assert not opts.convert_graphics
        assert not opts.optimize_performance


# ─────────────────────────────────────────────────────────────────────────────
# Dialects / analysis
# ─────────────────────────────────────────────────────────────────────────────


class TestDialects:
    def test_supported_dialects(self):
        dialects = get_supported_dialects()
        assert len(dialects) == 12
        assert "qbasic" in dialects
        assert "gwbasic" in dialects

    def test_qbasic_rules(self):
        assert "Convert ALL CAPS keywords to Pascal Case" in get_dialect_rules("qbasic")

    def test_unknown_dialect_gets_generic_rules(self):
        assert get_dialect_rules("vbnet") == ["Basic BASIC to QB64PE conversion rules"]
        assert get_dialect_rules("nonsense") == ["Basic BASIC to QB64PE conversion rules"]


class TestAnalysis:
    def test_graphics_program(self):
        analysis = analyze(GRAPHICS_PROGRAM)
        assert analysis.source_dialect == "qbasic"
        assert analysis.total_lines == 4
        assert analysis.features["has_graphics"]
        assert not analysis.features["has_sound"]
        assert analysis.level == "high"
        assert analysis.transformations_needed > 0

    def test_dry_run_does_not_add_metacommands(self):
        analysis = analyze(GRAPHICS_PROGRAM)
        assert not any("window title" in p for p in analysis.potential_problems)

    def test_features(self):
        src = _src("""
            DECLARE SUB Tune ()
            OPEN "data.txt" FOR INPUT AS #1
            LINE INPUT #1, a$
            DEF FNA(x) = x
            GOSUB Tune
            PLAY "CDE"
            x = 1: IF x THEN PRINT x
        """)
        features = analyze(src).features
        assert all(features.values())

    def test_critical_issues(self):
        analysis = analyze("ON k GOSUB A, B")
        assert analysis.level == "low"
        assert analysis.critical_issues
        assert analysis.issues_found >= 1

    def test_to_dict(self):
        data = analyze(GRAPHICS_PROGRAM, "quickbasic").to_dict()
        assert data["sourceDialect"] == "quickbasic"
        assert data["codeAnalysis"]["totalLines"] == 4
        assert data["codeAnalysis"]["hasGraphics"] is True
        assert "hasFileIO" in data["codeAnalysis"]
        assert data["compatibility"]["level"] == "high"

    def test_invalid_dialect(self):
        with pytest.raises(InvalidOptionsError):
            analyze("PRINT 1", "cobol")

    def test_run_diagnostics(self):
        diagnostics = run_diagnostics("IF a THEN x = 1: IF b THEN y = 2")
        assert len(diagnostics) == 1
        assert diagnostics[0].severity == "warning"

    def test_run_diagnostics_respects_performance_flag(self):
        text = "elapsed = TIMER - start#"
        assert run_diagnostics(text)
        assert run_diagnostics(text, {"optimizePerformance": False}) == []
