from datetime import date
from typing import Any, Dict, List, Optional

from app.models.enums import DisciplineEnum, FishboneCategoryEnum, ProblemKeyEnum


def get_8d_discipline_definitions() -> List[Dict[str, str]]:
    """Definition of the eight 8D disciplines"""
    return [
        {'code': 'D1', 'name': 'Establish the Team'},
        {'code': 'D2', 'name': 'Describe the Problem'},
        {'code': 'D3', 'name': 'Containment Actions'},
        {'code': 'D4', 'name': 'Root Cause Analysis'},
        {'code': 'D5', 'name': 'Permanent Corrective Actions'},
        {'code': 'D6', 'name': 'Implement and Validate'},
        {'code': 'D7', 'name': 'Prevent Recurrence'},
        {'code': 'D8', 'name': 'Recognize the Team'},
    ]


def get_discipline_name(code: DisciplineEnum) -> str:
    code = DisciplineEnum(code)
    return next(d['name'] for d in get_8d_discipline_definitions() if d['code'] == code.value)


def generate_report_title(today: Optional[date] = None) -> str:
    """Default title for a freshly created report"""
    today = today or date.today()
    return f"New Report – {today.isoformat()}"


def empty_action() -> Dict[str, Any]:
    return {'action': '', 'responsible': '', 'date': '', 'verified': False}


def build_default_report(identity: str, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Skeleton of a new 8D report. createdAt is left to the store.
    """
    return {
        'title': generate_report_title(today),
        'createdBy': identity,
        'currentDiscipline': DisciplineEnum.D1.value,
        'd1_team': [{'name': f"User {identity[:6]}", 'role': 'Leader'}],
        'd2_problem': {key.value: '' for key in ProblemKeyEnum},
        'd3_containment': [empty_action()],
        'd4_root_cause': {
            'five_whys': [''],
            'fishbone': {category.value: [] for category in FishboneCategoryEnum},
        },
        'd5_corrective_actions': [empty_action()],
        'd6_implementation': {'summary': '', 'validation_results': ''},
        'd7_prevention': {'updated_docs': '', 'new_standards': ''},
        'd8_recognition': {'summary': '', 'celebration_date': ''},
    }


def parse_discipline(value: Any) -> Optional[DisciplineEnum]:
    """Discipline code from a stored value, None when unknown/missing"""
    try:
        return DisciplineEnum(value)
    except (TypeError, ValueError):
        return None
