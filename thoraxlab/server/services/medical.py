"""
Respiratory medicine calculators.

- ``gold-stage``: COPD airflow limitation grade from FEV1 % predicted.
- ``bode-index``: BODE mortality index from FEV1 %, six-minute walk distance,
  mMRC dyspnea grade and BMI.
- ``ards-net``: ARDS severity from the PaO2/FiO2 ratio (Berlin definition).
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, Mapping, Sequence

from thoraxlab.core.errors import ValidationError


def gold_stage(fev1_percent: float) -> Dict[str, Any]:
    if fev1_percent >= 80:
        stage, value = "GOLD 1 (Mild)", 1
    elif fev1_percent >= 50:
        stage, value = "GOLD 2 (Moderate)", 2
    elif fev1_percent >= 30:
        stage, value = "GOLD 3 (Severe)", 3
    else:
        stage, value = "GOLD 4 (Very Severe)", 4
    return {"stage": stage, "value": value, "fev1_percent": fev1_percent}


def bode_index(fev1_percent: float, six_mwt: float, mmrc: float, bmi: float) -> Dict[str, Any]:
    """Compute the BODE index (0-10) and its annual mortality band."""
    score = 0
    if fev1_percent >= 65:
        score += 0
    elif fev1_percent >= 50:
        score += 1
    elif fev1_percent >= 36:
        score += 2
    else:
        score += 3

    if six_mwt >= 350:
        score += 0
    elif six_mwt >= 250:
        score += 1
    elif six_mwt >= 150:
        score += 2
    else:
        score += 3

    score += int(min(max(mmrc, 0), 4))
    if bmi <= 21:
        score += 1

    if score <= 2:
        risk, mortality = "Low", "~10% annual mortality"
    elif score <= 4:
        risk, mortality = "Medium", "~20% annual mortality"
    elif score <= 6:
        risk, mortality = "High", "~30% annual mortality"
    else:
        risk, mortality = "Very High", "~40% annual mortality"

    return {
        "score": score,
        "risk": risk,
        "mortality": mortality,
        "components": {"fev1_percent": fev1_percent, "six_mwt": six_mwt, "mmrc": mmrc, "bmi": bmi},
    }


def ards_net(pao2: float, fio2: float) -> Dict[str, Any]:
    ratio = pao2 / fio2
    if ratio <= 100:
        severity = "Severe"
    elif ratio <= 200:
        severity = "Moderate"
    else:
        severity = "Mild"
    return {
        "pao2_fio2_ratio": round(ratio),
        "severity": severity,
        "mortality_risk": {"Mild": "27%", "Moderate": "32%", "Severe": "45%"}[severity],
        "peep_recommendation": "Consider higher PEEP" if severity == "Severe" else "Standard PEEP",
    }


_CALCULATORS: Dict[str, tuple[Sequence[str], Callable[..., Dict[str, Any]]]] = {
    "gold-stage": (("fev1_percent",), gold_stage),
    "bode-index": (("fev1_percent", "six_mwt", "mmrc", "bmi"), bode_index),
    "ards-net": (("pao2", "fio2"), ards_net),
}

SUPPORTED_CALCULATIONS = tuple(_CALCULATORS)


def calculate(calculation: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Run a named calculator on ``data``.

    Args:
        calculation: One of ``gold-stage``, ``bode-index`` or ``ards-net``
        data: Calculator inputs

    Returns:
        Calculator result

    Raises:
        ValidationError: For an unknown calculator, or missing, non-numeric or non-finite inputs
    """
    if calculation not in _CALCULATORS:
        raise ValidationError(
            f"Unsupported calculation type '{calculation}'. Supported: {', '.join(SUPPORTED_CALCULATIONS)}"
        )
    required, func = _CALCULATORS[calculation]
    missing = [name for name in required if data.get(name) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", details={"missing": missing})

    try:
        values = {name: float(data[name]) for name in required}
    except (TypeError, ValueError):
        raise ValidationError(f"Inputs for {calculation} must be numeric") from None
    not_finite = [name for name, value in values.items() if not math.isfinite(value)]
    if not_finite:
        raise ValidationError(
            f"Inputs for {calculation} must be finite numbers", details={"invalid": not_finite}
        )
    if calculation == "ards-net" and values["fio2"] <= 0:
        raise ValidationError("fio2 must be greater than zero")
    return func(**values)
