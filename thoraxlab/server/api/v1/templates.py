"""
Research Template API Endpoints.
"""

from typing import List

from fastapi import APIRouter

from thoraxlab.core.models.io import ResearchTemplate
from thoraxlab.server.services.templates import get_template, list_templates

router = APIRouter(tags=["templates"])


@router.get(
    "",
    response_model=List[ResearchTemplate],
    summary="List Templates",
    description="The research template catalogue.",
)
async def get_templates() -> List[ResearchTemplate]:
    return list_templates()


@router.get(
    "/{template_id}",
    response_model=ResearchTemplate,
    summary="Get Template",
    responses={404: {"description": "Template not found"}},
)
async def get_template_by_id(template_id: str) -> ResearchTemplate:
    return get_template(template_id)
