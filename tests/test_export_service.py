"""Report export: section order and the content of each table."""
import pytest

from app.services.export_service import TableSection, TextSection, build_export_document, export_filename
from app.services.utils.report_helpers import build_default_report


@pytest.fixture
def report():
    data = build_default_report("abcdef123456")
    data["id"] = "r42"
    data["title"] = "Cracked housings"
    data["d2_problem"]["what"] = "Cracked housing"
    data["d3_containment"] = [
        {"action": "Sort stock", "responsible": "Ana", "date": "2024-03-01", "verified": True},
    ]
    data["d4_root_cause"]["five_whys"] = ["no calibration", "sensor drift", "no maintenance schedule"]
    data["d4_root_cause"]["fishbone"]["Machine"] = ["worn bearing"]
    data["d7_prevention"]["updated_docs"] = "PFMEA rev C"
    return data


def _by_title(document):
    return {section.title: section for section in document.sections}


def test_filename_and_header(report):
    document = build_export_document(report)

    assert document.filename == "8D_Report_r42.pdf"
    assert export_filename("abc") == "8D_Report_abc.pdf"
    assert document.title == "8D Report"
    assert document.subtitle == "Cracked housings"


def test_section_order(report):
    titles = [section.title for section in build_export_document(report).sections]

    assert titles == [
        "D1: Establish the Team",
        "D2: Describe the Problem (5W2H)",
        "D3: Containment Actions",
        "D4: Root Cause Analysis - 5 Whys",
        "Ishikawa Diagram",
        "D5: Permanent Corrective Actions",
        "D6: Implement and Validate",
        "D7: Prevent Recurrence",
        "D8: Recognize the Team",
    ]


def test_team_and_problem_tables(report):
    sections = _by_title(build_export_document(report))

    team = sections["D1: Establish the Team"]
    assert team.head == ["Name", "Role"]
    assert team.rows == [["User abcdef", "Leader"]]

    problem = sections["D2: Describe the Problem (5W2H)"]
    assert problem.head == ["Question", "Description"]
    assert [row[0] for row in problem.rows] == ["what", "where", "when", "who", "why", "how", "how_many"]
    assert problem.rows[0] == ["what", "Cracked housing"]


def test_action_tables_have_three_columns(report):
    sections = _by_title(build_export_document(report))

    containment = sections["D3: Containment Actions"]
    assert containment.head == ["Action", "Responsible", "Date"]
    assert containment.rows == [["Sort stock", "Ana", "2024-03-01"]]
    assert sections["D5: Permanent Corrective Actions"].rows == [["", "", ""]]


def test_five_whys_are_numbered(report):
    whys = _by_title(build_export_document(report))["D4: Root Cause Analysis - 5 Whys"]

    assert isinstance(whys, TextSection)
    assert whys.lines == ["1. no calibration", "2. sensor drift", "3. no maintenance schedule"]


def test_fishbone_has_a_row_per_category(report):
    fishbone = _by_title(build_export_document(report))["Ishikawa Diagram"]

    assert isinstance(fishbone, TableSection)
    assert fishbone.head == ["Category", "Potential Causes"]
    assert len(fishbone.rows) == 6
    rows = dict((category, causes) for category, causes in fishbone.rows)
    assert rows["Machine"] == "worn bearing"
    assert all(causes == "" for category, causes in rows.items() if category != "Machine")


def test_multiple_causes_are_one_per_line(report):
    report["d4_root_cause"]["fishbone"]["Method"] = ["no work instruction", "wrong torque"]

    fishbone = _by_title(build_export_document(report))["Ishikawa Diagram"]

    assert dict(fishbone.rows)["Method"] == "no work instruction\nwrong torque"


def test_legacy_report_without_categories_still_exports(report):
    report["d4_root_cause"]["fishbone"] = {"Machine": ["worn bearing"]}

    fishbone = _by_title(build_export_document(report))["Ishikawa Diagram"]

    assert [category for category, _ in fishbone.rows] == [
        "Manpower", "Machine", "Method", "Material", "Measurement", "Environment",
    ]


def test_free_text_tables(report):
    prevention = _by_title(build_export_document(report))["D7: Prevent Recurrence"]

    assert prevention.head == ["Field", "Value"]
    assert prevention.rows == [["Updated documents", "PFMEA rev C"], ["New standards", ""]]
