"""
Tests for the individual porting passes.

Each test class corresponds to one pass.
"""
from __future__ import annotations

import textwrap

import pytest

from qb64_porter.models import PortingReport
from qb64_porter.passes.declarations import ForwardDeclarationPass, MixedDeclarationPass
from qb64_porter.passes.idioms import (
    ArraySyntaxPass,
    ExitStatementPass,
    PiConstantPass,
    TimingPass,
    TypeFieldCasingPass,
)
from qb64_porter.passes.keyword_casing import KeywordCasingPass
from qb64_porter.passes.line_numbers import LineNumberLabelPass, label_for
from qb64_porter.passes.metacommands import (
    FULLSCREEN_STATEMENT,
    DeprecatedMetacommandPass,
    GraphicsEnhancementPass,
    WindowMetacommandPass,
)


def _src(text: str) -> str:
    return textwrap.dedent(text).strip("\n")


def _descriptions(report: PortingReport):
    return [t.description for t in report.transformations]


# ─────────────────────────────────────────────────────────────────────────────
# KeywordCasingPass
# ─────────────────────────────────────────────────────────────────────────────


class TestKeywordCasingPass:
    def _run(self, text):
        return KeywordCasingPass().run(text, PortingReport())

    def test_keywords_converted_and_counted_per_table(self):
        text, report = self._run('IF x THEN PRINT "DONE"\nEND IF')
        assert text == 'If x Then Print "DONE"\nEnd If'
        assert _descriptions(report) == [
            "Converted 4 keyword(s) from ALL CAPS to Pascal Case"
        ]

    def test_string_functions_have_their_own_record(self):
        text, report = self._run("a$ = LEFT$(b$, 2) + MID$(b$, 3)")
        assert text == "a$ = Left$(b$, 2) + Mid$(b$, 3)"
        assert _descriptions(report) == [
            "Converted 2 string function(s) to proper casing"
        ]

    def test_comments_untouched(self):
        text, _ = self._run("PRINT x ' PRINT this")
        assert text == "Print x ' PRINT this"

    def test_lower_case_keyword_normalised(self):
        text, report = self._run("print x")
        assert text == "Print x"
        assert len(report.transformations) == 1

    def test_already_cased_code_unchanged(self):
        text, report = self._run("Print x\nEnd If")
        assert text == "Print x\nEnd If"
        assert report.transformations == ()

    def test_elseif_not_split(self):
        text, _ = self._run("ELSEIF y THEN")
        assert text == "ElseIf y Then"


# ─────────────────────────────────────────────────────────────────────────────
# ForwardDeclarationPass / MixedDeclarationPass
# ─────────────────────────────────────────────────────────────────────────────


class TestForwardDeclarationPass:
    def _run(self, text):
        return ForwardDeclarationPass().run(text, PortingReport())

    def test_declarations_removed_by_name(self):
        text, report = self._run(
            "DECLARE SUB Foo ()\nDECLARE FUNCTION Bar% (x)\nPRINT 1"
        )
        assert text == "PRINT 1"
        assert _descriptions(report) == ["Removed 2 forward declaration(s): Foo, Bar%"]

    def test_no_declarations(self):
        text, report = self._run("PRINT 1")
        assert text == "PRINT 1"
        assert report.transformations == ()

    def test_declare_in_string_kept(self):
        text, _ = self._run('PRINT "DECLARE SUB x"')
        assert text == 'PRINT "DECLARE SUB x"'


class TestMixedDeclarationPass:
    def _run(self, text):
        return MixedDeclarationPass().run(text, PortingReport())

    def test_sigil_removed_as_clause_kept(self):
        text, report = self._run("DIM x% AS INTEGER")
        assert text == "DIM x As INTEGER"
        assert _descriptions(report) == [
            "Fixed 1 DIM statement(s) mixing type suffixes with AS clauses"
        ]
        assert report.warnings == ()

    def test_array_dimensions_kept(self):
        text, _ = self._run("DIM grid%(10, 10) AS INTEGER")
        assert text == "DIM grid(10, 10) As INTEGER"

    def test_conflicting_suffix_warns(self):
        text, report = self._run("DIM n& AS INTEGER")
        assert text == "DIM n As INTEGER"
        assert len(report.warnings) == 1
        assert "n&" in report.warnings[0]

    def test_non_declaration_untouched(self):
        text, report = self._run('x% = 5\nPRINT "DIM a% AS INTEGER"')
        assert text == 'x% = 5\nPRINT "DIM a% AS INTEGER"'
        assert report.transformations == ()


# ─────────────────────────────────────────────────────────────────────────────
# DeprecatedMetacommandPass
# ─────────────────────────────────────────────────────────────────────────────


class TestDeprecatedMetacommandPass:
    def _run(self, text):
        return DeprecatedMetacommandPass().run(text, PortingReport())

    def test_noprefix_removed_with_warning(self):
        text, report = self._run("$NOPREFIX\nPRINT 1")
        assert text == "PRINT 1"
        assert _descriptions(report) == ["Removed deprecated $NOPREFIX metacommand"]
        assert len(report.warnings) == 1

    def test_other_metacommands_kept(self):
        text, report = self._run("$DYNAMIC\nPRINT 1")
        assert text == "$DYNAMIC\nPRINT 1"
        assert report.transformations == ()


# ─────────────────────────────────────────────────────────────────────────────
# LineNumberLabelPass
# ─────────────────────────────────────────────────────────────────────────────


class TestLineNumberLabelPass:
    def _run(self, text):
        return LineNumberLabelPass().run(text, PortingReport())

    def test_label_for(self):
        assert label_for("0100") == "L100"

    def test_referenced_lines_become_labels(self):
        src = _src("""
            10 PRINT "A"
            20 GOTO 10
            30 END
        """)
        text, report = self._run(src)
        assert text == 'L10:\nPRINT "A"\nGOTO L10\nEND'
        assert _descriptions(report) == [
            "Converted 1 referenced line number(s) to labels (labels placed on their own line)",
            "Removed 2 unreferenced line number(s)",
            "Re-pointed 1 line-number reference(s) at labels",
        ]

    def test_then_target_becomes_goto(self):
        src = _src("""
            10 IF X THEN 30
            20 PRINT 1
            30 PRINT 2
        """)
        text, _ = self._run(src)
        assert text.split("\n") == ["IF X THEN GoTo L30", "PRINT 1", "L30:", "PRINT 2"]

    def test_on_goto_list_repointed(self):
        src = _src("""
            10 ON K GOTO 20, 30
            20 PRINT 1
            30 PRINT 2
        """)
        text, _ = self._run(src)
        assert text.split("\n")[0] == "ON K GOTO L20, L30"

    def test_undefined_reference_is_error(self):
        text, report = self._run("10 GOTO 99")
        assert text == "GOTO 99"
        assert len(report.errors) == 1
        assert "99" in report.errors[0]

    def test_unnumbered_program_unchanged(self):
        text, report = self._run("PRINT 1\nPRINT 2")
        assert text == "PRINT 1\nPRINT 2"
        assert report.transformations == ()


# ─────────────────────────────────────────────────────────────────────────────
# Type / array / idiom passes
# ─────────────────────────────────────────────────────────────────────────────


class TestTypeFieldCasingPass:
    def _run(self, text):
        return TypeFieldCasingPass().run(text, PortingReport())

    def test_fields_inside_type_block_only(self):
        src = _src("""
            TYPE Point
              x AS INTEGER
              name AS STRING * 10
            END TYPE
            DIM p AS Point
        """)
        text, report = self._run(src)
        assert text.split("\n") == [
            "TYPE Point",
            "  x As INTEGER",
            "  name As STRING * 10",
            "END TYPE",
            "DIM p AS Point",
        ]
        assert _descriptions(report) == [
            "Converted 2 TYPE field declaration(s) to modern syntax"
        ]


class TestArraySyntaxPass:
    def _run(self, text):
        return ArraySyntaxPass().run(text, PortingReport())

    def test_put_and_get_operands(self):
        text, report = self._run("GET (0, 0)-(15, 15), sprite\nPUT (10, 20), sprite")
        assert text == "GET (0, 0)-(15, 15), sprite()\nPUT (10, 20), sprite()"
        assert _descriptions(report) == [
            "Converted 2 array syntax statement(s) to QB64PE format"
        ]

    def test_action_verb_kept(self):
        text, _ = self._run("PUT (1, 1), sprite, PSET")
        assert text == "PUT (1, 1), sprite(), PSET"

    @pytest.mark.parametrize(
        "line",
        ["PUT (10, 20), sprite(0)", "PUT (1, 1), sprite()", "PUT #1, , rec"],
    )
    def test_already_indexed_or_file_put_unchanged(self, line):
        text, report = self._run(line)
        assert text == line
        assert report.transformations == ()


class TestPiConstantPass:
    def _run(self, text):
        return PiConstantPass().run(text, PortingReport())

    @pytest.mark.parametrize(
        "line, expected",
        [
            ("pi = 4 * ATN(1)", "pi = _Pi"),
            ("r = ATN(1) * 4", "r = _Pi"),
            ("p# = 4# * ATN(1#)", "p# = _Pi"),
        ],
    )
    def test_idiom_replaced(self, line, expected):
        text, report = self._run(line)
        assert text == expected
        assert _descriptions(report) == [
            "Converted 1 manual pi calculation(s) to built-in _Pi constant"
        ]

    def test_bound_to_division_unchanged(self):
        text, report = self._run("x = y / 4 * ATN(1)")
        assert text == "x = y / 4 * ATN(1)"
        assert report.transformations == ()

    def test_string_unchanged(self):
        text, _ = self._run('PRINT "4 * ATN(1)"')
        assert text == 'PRINT "4 * ATN(1)"'


class TestExitStatementPass:
    def _run(self, text):
        return ExitStatementPass().run(text, PortingReport())

    def test_bare_end(self):
        text, report = self._run("PRINT 1\nEND")
        assert text == "PRINT 1\nSystem 0"
        assert _descriptions(report) == ["Converted 1 END statement(s) to System 0"]

    @pytest.mark.parametrize(
        "line, expected",
        [
            ("IF done THEN END", "IF done THEN System 0"),
            ("x = 1: END: y = 2", "x = 1: System 0: y = 2"),
            ("END ' bye", "System 0 ' bye"),
        ],
    )
    def test_end_in_statement_positions(self, line, expected):
        text, _ = self._run(line)
        assert text == expected

    @pytest.mark.parametrize("line", ["END IF", "END SUB", "legend = 1", "END_X = 2"])
    def test_block_ends_and_identifiers_unchanged(self, line):
        text, report = self._run(line)
        assert text == line
        assert report.transformations == ()


class TestTimingPass:
    def _run(self, text):
        return TimingPass().run(text, PortingReport())

    def test_rest_becomes_delay(self):
        text, report = self._run("Rest 0.5\nx = 1: REST 2")
        assert text == "_Delay 0.5\nx = 1: _Delay 2"
        assert _descriptions(report) == ["Converted 2 Rest call(s) to _Delay command"]

    @pytest.mark.parametrize(
        "line", ["rest = 5", "Rest  = 5", "REST(1) = 2", "RESTORE 10", "SLEEP 1"]
    )
    def test_other_statements_unchanged(self, line):
        text, report = self._run(line)
        assert text == line
        assert report.transformations == ()


# ─────────────────────────────────────────────────────────────────────────────
# GraphicsEnhancementPass / WindowMetacommandPass
# ─────────────────────────────────────────────────────────────────────────────


class TestGraphicsEnhancementPass:
    def _run(self, text):
        return GraphicsEnhancementPass().run(text, PortingReport())

    def test_fullscreen_added_after_screen(self):
        text, report = self._run("SCREEN 12\nCIRCLE (1, 1), 5")
        assert text.split("\n") == ["SCREEN 12", FULLSCREEN_STATEMENT, "CIRCLE (1, 1), 5"]
        assert len(report.transformations) == 1
        assert report.transformations[0].category == "GRAPHICS"

    def test_skipped_when_present(self):
        src = f"SCREEN 12\n{FULLSCREEN_STATEMENT}"
        text, report = self._run(src)
        assert text == src
        assert report.transformations == ()

    def test_screen_function_is_not_a_statement(self):
        text, report = self._run("c = SCREEN(1, 1)")
        assert text == "c = SCREEN(1, 1)"
        assert report.transformations == ()


class TestWindowMetacommandPass:
    def _run(self, text):
        return WindowMetacommandPass().run(text, PortingReport())

    def test_inserted_after_leading_comment(self):
        src = _src("""
            ' Bouncing ball
            SCREEN 12
            CIRCLE (320, 240), 50
        """)
        text, report = self._run(src)
        assert text.split("\n") == [
            "' Bouncing ball",
            "$Resize:Smooth",
            '_Title "Bouncing ball"',
            "",
            "SCREEN 12",
            "CIRCLE (320, 240), 50",
        ]
        assert _descriptions(report) == [
            "Added $Resize:Smooth for smooth window resizing",
            'Added window title: "Bouncing ball"',
        ]

    def test_default_title(self):
        text, _ = self._run("SCREEN 12")
        assert '_Title "Ported QB64PE Program"' in text

    def test_metacommand_comment_is_not_a_title(self):
        text, _ = self._run("'$DYNAMIC\nREM $INCLUDE: 'lib.bi'\n' Starfield\nSCREEN 13")
        assert '_Title "Starfield"' in text
        assert "$DYNAMIC\"" not in text

    def test_only_metacommand_comments_gives_default_title(self):
        text, _ = self._run("'$DYNAMIC\nSCREEN 13")
        assert '_Title "Ported QB64PE Program"' in text

    def test_text_program_untouched(self):
        text, report = self._run('PRINT "LINE"')
        assert text == 'PRINT "LINE"'
        assert report.transformations == ()

    def test_existing_metacommands_respected(self):
        src = '$RESIZE:ON\n_TITLE "Mine"\nSCREEN 12'
        text, report = self._run(src)
        assert text == src
        assert report.transformations == ()
