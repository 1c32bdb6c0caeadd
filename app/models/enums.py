import enum

class DisciplineEnum(str, enum.Enum):
    """The eight 8D disciplines"""
    D1 = "D1"
    D2 = "D2"
    D3 = "D3"
    D4 = "D4"
    D5 = "D5"
    D6 = "D6"
    D7 = "D7"
    D8 = "D8"


class FishboneCategoryEnum(str, enum.Enum):
    """Ishikawa categories, in display order"""
    MANPOWER = "Manpower"
    MACHINE = "Machine"
    METHOD = "Method"
    MATERIAL = "Material"
    MEASUREMENT = "Measurement"
    ENVIRONMENT = "Environment"


class ProblemKeyEnum(str, enum.Enum):
    """5W2H keys, in display order"""
    WHAT = "what"
    WHERE = "where"
    WHEN = "when"
    WHO = "who"
    WHY = "why"
    HOW = "how"
    HOW_MANY = "how_many"


class ScreenEnum(str, enum.Enum):
    DASHBOARD = "dashboard"
    WORKSPACE = "workspace"
