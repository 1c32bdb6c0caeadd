from datetime import datetime
from typing import Annotated, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from app.models.enums import DisciplineEnum, FishboneCategoryEnum
from app.services.utils.report_helpers import parse_discipline


# ============================================================================
# D1 - Establish the Team
# ============================================================================
class TeamMember(BaseModel):
    """Team member of the 8D team"""
    name: str = Field("", description="Full name")
    role: str = Field("", description="Role in the team")


# ============================================================================
# D2 - Describe the Problem (5W2H)
# ============================================================================
class ProblemDescription(BaseModel):
    """5W2H problem description"""
    what: str = Field("", description="What is wrong?")
    where: str = Field("", description="Where is it observed?")
    when: str = Field("", description="When does it occur?")
    who: str = Field("", description="Who is affected?")
    why: str = Field("", description="Why is it a problem?")
    how: str = Field("", description="How does it occur?")
    how_many: str = Field("", description="How many units/instances are affected?")


# ============================================================================
# D3 / D5 - Containment and Corrective Actions
# ============================================================================
class ActionItem(BaseModel):
    """Containment (D3) or permanent corrective (D5) action"""
    action: str = Field("", description="Action description")
    responsible: str = Field("", description="Responsible person")
    date: str = Field("", description="Due / implementation date")
    verified: bool = Field(False, description="Verified effective?")


# ============================================================================
# D4 - Root Cause Analysis
# ============================================================================
def _all_categories(value: Dict[FishboneCategoryEnum, List[str]]) -> Dict[FishboneCategoryEnum, List[str]]:
    # legacy documents may miss categories; keep the fixed order
    return {category: list(value.get(category, [])) for category in FishboneCategoryEnum}


Fishbone = Annotated[Dict[FishboneCategoryEnum, List[str]], AfterValidator(_all_categories)]


class RootCauseAnalysis(BaseModel):
    """5 Whys + Ishikawa diagram"""
    five_whys: List[str] = Field(default_factory=lambda: [""])
    fishbone: Fishbone = Field(default_factory=lambda: _all_categories({}))


# ============================================================================
# D6 / D7 / D8
# ============================================================================
class Implementation(BaseModel):
    """D6 - Implement and validate permanent corrective actions"""
    summary: str = Field("", description="How the actions were implemented")
    validation_results: str = Field("", description="Data confirming the fix")


class Prevention(BaseModel):
    """D7 - Prevent recurrence"""
    updated_docs: str = Field("", description="FMEA, control plan, SOPs...")
    new_standards: str = Field("", description="New standards or practices")


class Recognition(BaseModel):
    """D8 - Recognize the team"""
    summary: str = Field("", description="How the team was recognized")
    celebration_date: str = Field("", description="Celebration date")


# ============================================================================
# Report
# ============================================================================
class ReportData(BaseModel):
    """Full report document.

    Missing discipline slices are filled with their defaults so legacy
    documents can be read without existence checks.
    """
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    created_by: Optional[str] = Field(None, alias="createdBy")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    current_discipline: DisciplineEnum = Field(DisciplineEnum.D1, alias="currentDiscipline")

    d1_team: List[TeamMember] = Field(default_factory=list)
    d2_problem: ProblemDescription = Field(default_factory=ProblemDescription)
    d3_containment: List[ActionItem] = Field(default_factory=list)
    d4_root_cause: RootCauseAnalysis = Field(default_factory=RootCauseAnalysis)
    d5_corrective_actions: List[ActionItem] = Field(default_factory=list)
    d6_implementation: Implementation = Field(default_factory=Implementation)
    d7_prevention: Prevention = Field(default_factory=Prevention)
    d8_recognition: Recognition = Field(default_factory=Recognition)

    @field_validator("current_discipline", mode="before")
    @classmethod
    def _default_discipline(cls, value):
        # missing or unknown codes written by other clients open at D1
        return parse_discipline(value) or DisciplineEnum.D1


class ReportRead(ReportData):
    id: str


class ReportCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)


class ReportListItem(BaseModel):
    """Lightweight schema for the dashboard"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    current_discipline: Optional[str] = Field(None, alias="currentDiscipline")
    created_by: Optional[str] = Field(None, alias="createdBy")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class DisciplineSelect(BaseModel):
    discipline: DisciplineEnum


class DisciplineDefinition(BaseModel):
    code: DisciplineEnum
    name: str
