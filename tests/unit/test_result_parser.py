# tests/unit/test_result_parser.py

"""Unit tests for parsing Unity runner output."""

from unity_explorer.runtime.result_parser import Failed, NoMatch, Passed, check_result

OUTPUT = """\
tests/math_test.c:12:test_addTwoNumbers:PASS
tests/math_test.c:20:test_sub:FAIL: Expected 4 Was 5
tests/math_test.c:31:test_ignored:IGNORE

-----------------------
3 Tests 1 Failures 1 Ignored
FAIL
"""


class TestCheckResult:
    def test_pass_line(self) -> None:
        assert check_result("test_addTwoNumbers", ":12:test_addTwoNumbers:PASS\n") == Passed()

    def test_fail_line_converts_to_zero_based_line(self) -> None:
        outcome = check_result("test_sub", ":20:test_sub:FAIL: Expected 4 Was 5")

        assert outcome == Failed(line=19, message="Expected 4 Was 5")

    def test_finds_results_in_full_runner_output(self) -> None:
        assert check_result("test_addTwoNumbers", OUTPUT) == Passed()
        assert check_result("test_sub", OUTPUT) == Failed(line=19, message="Expected 4 Was 5")

    def test_missing_test_is_no_match(self) -> None:
        assert check_result("test_missing", OUTPUT) == NoMatch()

    def test_unrecognised_status_is_no_match(self) -> None:
        assert check_result("test_ignored", OUTPUT) == NoMatch()

    def test_empty_output_is_no_match(self) -> None:
        assert check_result("test_sub", "") == NoMatch()

    def test_first_match_wins(self) -> None:
        output = ":3:test_flaky:FAIL: first\n:9:test_flaky:PASS\n"

        assert check_result("test_flaky", output) == Failed(line=2, message="first")

    def test_pretty_label_matches_inside_full_name(self) -> None:
        assert check_result("addTwoNumbers", OUTPUT) == Passed()

    def test_label_is_matched_literally(self) -> None:
        assert check_result("test.sub", OUTPUT) == NoMatch()

    def test_windows_line_endings_are_trimmed_from_message(self) -> None:
        output = "x.c:5:test_crlf:FAIL: Expected 1 Was 2\r\n"

        assert check_result("test_crlf", output) == Failed(line=4, message="Expected 1 Was 2")
