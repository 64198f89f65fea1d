"""Unit tests for the respiratory calculators."""

import pytest

from thoraxlab.core.errors import ValidationError
from thoraxlab.server.services.medical import ards_net, bode_index, calculate, gold_stage


class TestGoldStage:
    @pytest.mark.parametrize(
        "fev1,stage,value",
        [
            (95, "GOLD 1 (Mild)", 1),
            (80, "GOLD 1 (Mild)", 1),
            (79.9, "GOLD 2 (Moderate)", 2),
            (50, "GOLD 2 (Moderate)", 2),
            (30, "GOLD 3 (Severe)", 3),
            (29, "GOLD 4 (Very Severe)", 4),
        ],
    )
    def test_stage_boundaries(self, fev1, stage, value):
        result = gold_stage(fev1)

        assert result["stage"] == stage
        assert result["value"] == value
        assert result["fev1_percent"] == fev1


class TestBodeIndex:
    def test_best_case_scores_zero(self):
        result = bode_index(fev1_percent=70, six_mwt=400, mmrc=0, bmi=25)

        assert result["score"] == 0
        assert result["risk"] == "Low"
        assert result["mortality"] == "~10% annual mortality"

    def test_poor_inputs_score_very_high(self):
        result = bode_index(fev1_percent=20, six_mwt=100, mmrc=3, bmi=18)

        assert result["score"] == 10
        assert result["risk"] == "Very High"
        assert result["mortality"] == "~40% annual mortality"

    def test_mmrc_is_clamped(self):
        assert bode_index(70, 400, 9, 25)["score"] == 4
        assert bode_index(70, 400, -2, 25)["score"] == 0

    def test_bmi_boundary(self):
        assert bode_index(70, 400, 0, 21)["score"] == 1
        assert bode_index(70, 400, 0, 21.1)["score"] == 0

    @pytest.mark.parametrize(
        "args,risk",
        [
            ((55, 300, 1, 25), "Medium"),  # 1 + 1 + 1 = 3
            ((40, 200, 2, 25), "High"),  # 2 + 2 + 2 = 6
        ],
    )
    def test_risk_bands(self, args, risk):
        assert bode_index(*args)["risk"] == risk

    def test_components_are_echoed(self):
        components = bode_index(55, 300, 1, 25)["components"]

        assert components == {"fev1_percent": 55, "six_mwt": 300, "mmrc": 1, "bmi": 25}


class TestArdsNet:
    @pytest.mark.parametrize(
        "pao2,fio2,ratio,severity,mortality",
        [
            (60, 0.8, 75, "Severe", "45%"),
            (80, 0.8, 100, "Severe", "45%"),
            (90, 0.5, 180, "Moderate", "32%"),
            (100, 0.4, 250, "Mild", "27%"),
        ],
    )
    def test_severity(self, pao2, fio2, ratio, severity, mortality):
        result = ards_net(pao2, fio2)

        assert result["pao2_fio2_ratio"] == ratio
        assert result["severity"] == severity
        assert result["mortality_risk"] == mortality

    def test_peep_recommendation(self):
        assert ards_net(60, 0.8)["peep_recommendation"] == "Consider higher PEEP"
        assert ards_net(100, 0.4)["peep_recommendation"] == "Standard PEEP"


class TestCalculate:
    def test_dispatches_by_type(self):
        assert calculate("gold-stage", {"fev1_percent": 45})["value"] == 3

    def test_accepts_numeric_strings(self):
        assert calculate("ards-net", {"pao2": "90", "fio2": "0.5"})["pao2_fio2_ratio"] == 180

    def test_zero_is_a_valid_input(self):
        result = calculate("bode-index", {"fev1_percent": 70, "six_mwt": 400, "mmrc": 0, "bmi": 25})

        assert result["score"] == 0

    def test_unknown_type(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate("fev1-predictor", {})

        assert exc_info.value.status_code == 400
        assert "gold-stage" in exc_info.value.message

    def test_missing_fields_are_listed(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate("bode-index", {"fev1_percent": 50, "bmi": ""})

        assert exc_info.value.details == {"missing": ["six_mwt", "mmrc", "bmi"]}

    def test_non_numeric_input(self):
        with pytest.raises(ValidationError):
            calculate("gold-stage", {"fev1_percent": "low"})

    def test_fio2_must_be_positive(self):
        with pytest.raises(ValidationError):
            calculate("ards-net", {"pao2": 80, "fio2": 0})

    @pytest.mark.parametrize(
        "calculation,data,invalid",
        [
            ("ards-net", {"pao2": "nan", "fio2": "0.5"}, ["pao2"]),
            ("ards-net", {"pao2": "inf", "fio2": "0.5"}, ["pao2"]),
            ("bode-index", {"fev1_percent": 40, "six_mwt": 300, "mmrc": "nan", "bmi": 22}, ["mmrc"]),
            ("gold-stage", {"fev1_percent": float("-inf")}, ["fev1_percent"]),
        ],
    )
    def test_non_finite_inputs_rejected(self, calculation, data, invalid):
        with pytest.raises(ValidationError) as exc_info:
            calculate(calculation, data)

        assert exc_info.value.status_code == 400
        assert exc_info.value.details == {"invalid": invalid}
