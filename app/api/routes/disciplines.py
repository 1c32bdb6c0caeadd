from typing import List

from fastapi import APIRouter

from app.schemas.report_data import DisciplineDefinition
from app.services.utils.report_helpers import get_8d_discipline_definitions

router = APIRouter()


@router.get("", response_model=List[DisciplineDefinition])
def list_disciplines():
    """The eight 8D disciplines, in order."""
    return get_8d_discipline_definitions()
