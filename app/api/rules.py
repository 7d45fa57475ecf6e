"""
Rule catalog endpoints.

Lists rules and answers "where would this file go?" queries.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import List
from loguru import logger

from app.api.deps import get_app_settings, get_catalog
from app.models.schemas import Classification, Rule
from app.utils.config import Settings
from domains.file_sorting.rules import RuleCatalog

router = APIRouter()


class RuleList(BaseModel):
    """Ordered rule list."""
    rules: List[Rule]
    total: int


class ClassifyRequest(BaseModel):
    """File to classify."""
    path: str


@router.get("", response_model=RuleList)
async def list_rules(catalog: RuleCatalog = Depends(get_catalog)):
    """
    List all rules in catalog order.

    Returns:
        Rules and count
    """
    return RuleList(rules=list(catalog.rules), total=len(catalog))


@router.get("/match/{extension}", response_model=Rule)
async def match_extension(extension: str, catalog: RuleCatalog = Depends(get_catalog)):
    """
    Find the rule for an extension.

    Args:
        extension: Extension with or without leading dot

    Returns:
        First matching rule
    """
    rule = catalog.match_extension(extension)
    if rule is None:
        raise HTTPException(status_code=404, detail=f"No rule for extension '{extension}'")
    return rule


@router.post("/classify", response_model=Classification)
async def classify_file(
    request: ClassifyRequest,
    catalog: RuleCatalog = Depends(get_catalog),
    settings: Settings = Depends(get_app_settings),
):
    """
    Classify a file path and resolve its destination folder.

    Returns:
        Classification (rule and destination are null when unmatched)
    """
    result = catalog.classify(request.path, settings.get_destination_root())
    logger.info(f"Classify {request.path}: {result.rule.id if result.rule else 'no match'}")
    return result
