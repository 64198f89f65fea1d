"""
Research template catalogue.

A static set of study designs that projects can be based on. Each template
lists the fields a protocol of that design needs plus simple validation
ranges.
"""

from __future__ import annotations

from typing import Dict, List

from thoraxlab.core.errors import NotFoundError, ValidationError
from thoraxlab.core.models.io import ResearchTemplate

TEMPLATES: Dict[str, ResearchTemplate] = {
    template.id: template
    for template in (
        ResearchTemplate(
            id="rct",
            name="Randomized Controlled Trial",
            description="Gold standard for interventional studies",
            category="Interventional",
            required_fields=["title", "hypothesis", "primary_endpoint", "sample_size"],
            optional_fields=[
                "secondary_endpoints",
                "inclusion_criteria",
                "exclusion_criteria",
                "intervention",
                "control",
                "statistical_plan",
                "timeline",
            ],
            medical_fields=["patient_population", "diagnosis_criteria", "outcome_measures", "safety_monitoring"],
            validation_rules={"sample_size": {"min": 10, "max": 10000}, "duration_months": {"min": 1, "max": 60}},
        ),
        ResearchTemplate(
            id="cohort",
            name="Observational Cohort Study",
            description="Long-term follow-up of patient groups",
            category="Observational",
            required_fields=["title", "study_population", "exposure", "outcome", "followup_duration"],
            optional_fields=["data_collection_methods", "confounding_factors", "analysis_plan", "ethical_considerations"],
            medical_fields=[
                "baseline_characteristics",
                "inclusion_exclusion",
                "outcome_definitions",
                "statistical_methods",
            ],
            validation_rules={"followup_duration_months": {"min": 1, "max": 240}},
        ),
        ResearchTemplate(
            id="case",
            name="Case Report / Series",
            description="Detailed report of interesting cases",
            category="Descriptive",
            required_fields=["title", "patient_presentation", "diagnostic_workup", "treatment_course"],
            optional_fields=["outcome", "discussion", "clinical_pearls", "literature_review"],
            medical_fields=["patient_demographics", "clinical_findings", "diagnostic_results", "treatment_details"],
        ),
        ResearchTemplate(
            id="review",
            name="Systematic Review / Meta-analysis",
            description="Comprehensive evidence synthesis",
            category="Review",
            required_fields=["title", "research_question", "inclusion_criteria", "search_strategy"],
            optional_fields=["quality_assessment", "data_extraction", "synthesis_methods", "publication_bias"],
            medical_fields=["picot_question", "evidence_grading", "clinical_implications", "research_gaps"],
        ),
    )
}


def list_templates() -> List[ResearchTemplate]:
    return list(TEMPLATES.values())


def get_template(template_id: str) -> ResearchTemplate:
    try:
        return TEMPLATES[template_id]
    except KeyError:
        raise NotFoundError("Template", template_id) from None


def ensure_known_template(template_id: str) -> None:
    """Reject a project ``template_id`` that names no catalogue entry (422)."""
    if template_id not in TEMPLATES:
        raise ValidationError(
            f"Unknown template '{template_id}'. Known templates: {', '.join(TEMPLATES)}",
            code="UNKNOWN_TEMPLATE",
            status_code=422,
        )
