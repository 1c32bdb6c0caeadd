from typing import Any

from pydantic import BaseModel, Field


# ============================================================================
# Positional list edits (D1 team, D3/D5 actions, D4 whys and causes)
# ============================================================================
class TeamMemberAdd(BaseModel):
    name: str = ""
    role: str = ""


class ItemFieldEdit(BaseModel):
    """One key of a list item, e.g. {"field": "responsible", "value": "Ana"}"""
    field: str = Field(..., description="Key inside the item")
    value: Any = None


class CauseAdd(BaseModel):
    cause: str = ""


class TextValue(BaseModel):
    value: str = ""
