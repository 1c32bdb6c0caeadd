# app/services/navigation.py
"""
Discipline navigation.

Any of D1..D8 can be selected from any other at any time; selection is
operator-driven, not a workflow gate. Selecting also persists
currentDiscipline so the report reopens where it was left.
"""

import logging
from typing import Any, Callable, Mapping, Optional

from app.models.enums import DisciplineEnum
from app.services.utils.report_helpers import parse_discipline

logger = logging.getLogger(__name__)

Persist = Callable[[DisciplineEnum], bool]


class DisciplineNavigator:

    def __init__(self, persist: Optional[Persist] = None):
        self._persist = persist
        self.active: Optional[DisciplineEnum] = None

    @property
    def has_report(self) -> bool:
        return self.active is not None

    def load(self, report: Optional[Mapping[str, Any]]) -> Optional[DisciplineEnum]:
        """Initialise from a loaded report; None returns to the no-report state."""
        if report is None:
            self.active = None
            return None
        self.active = parse_discipline(report.get("currentDiscipline")) or DisciplineEnum.D1
        return self.active

    def select(self, discipline: Any, persist: Optional[Persist] = None) -> DisciplineEnum:
        discipline = DisciplineEnum(discipline)
        self.active = discipline
        persist = persist or self._persist
        if persist is not None and not persist(discipline):
            logger.warning("Could not persist current discipline %s", discipline.value)
        return discipline

    def reset(self) -> None:
        self.active = None
