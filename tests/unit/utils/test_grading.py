"""
Unit Tests for the Angolan grading rules
"""
import pytest

from synexa.utils.grading import (
    term_mt,
    calculate_mt,
    classify,
    final_status,
    general_average,
    format_shift,
    format_shift_period,
    format_academic_year,
)


class TestTermMT:

    def test_all_components_passing(self):
        assert term_mt(12, 14, 13) == (13.0, "APROVADO")

    def test_failing_average(self):
        assert term_mt(8, 9, 10) == (9.0, "REPROVADO")

    def test_pass_mark_is_inclusive(self):
        assert term_mt(10, 10, 10) == (10.0, "APROVADO")

    def test_missing_component_is_incomplete(self):
        assert term_mt(12, None, 14) == (0.0, "INCOMPLETO")

    def test_rounded_to_one_decimal(self):
        mt, _ = term_mt(10, 11, 11)
        assert mt == 10.7


class TestReportCardMT:

    def test_mean_of_launched_components(self):
        assert calculate_mt(12, None, 15) == 13.5

    def test_nothing_launched(self):
        assert calculate_mt(None, None, None) is None


class TestClassification:

    @pytest.mark.parametrize("grade,label", [
        (18, "Excelente"),
        (15, "Muito Bom"),
        (12.5, "Bom"),
        (10, "Satisfatório"),
        (9.9, "Não Satisfatório"),
        (None, "Não Avaliado"),
    ])
    def test_bands(self, grade, label):
        assert classify(grade) == label


class TestFinalStatus:

    def test_all_subjects_passed(self):
        assert final_status([10, 14.5, None]) == "Aprovado"

    def test_one_subject_failed(self):
        assert final_status([15, 9.5]) == "Reprovado"

    def test_no_evaluation(self):
        assert final_status([None, None]) == "Sem Avaliação"

    def test_general_average_ignores_missing(self):
        assert general_average([12, None, 15]) == 13.5
        assert general_average([]) is None


class TestFormatting:

    def test_shift_labels(self):
        assert format_shift("MORNING") == "Manhã"
        assert format_shift_period("EVENING") == "Noturno"

    def test_academic_year(self):
        assert format_academic_year(2025) == "2025/2026"
