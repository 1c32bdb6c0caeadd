# app/services/pdf_renderer.py
"""
PDF rendering of exported 8D reports with ReportLab Platypus.

ReportLab is only imported the first time a PDF is requested, so the API
starts without it. ensure_loaded() is idempotent; a failed load raises
RendererUnavailableError and nothing is produced.

Platypus takes a list of flowables (paragraphs, tables, spacers) and handles
line wrapping and page flow itself; this module only decides the content.
"""

import importlib
import logging
import threading
from io import BytesIO
from types import SimpleNamespace
from typing import List, Optional
from xml.sax.saxutils import escape

from app.services.export_service import ExportDocument, TableSection, TextSection

logger = logging.getLogger(__name__)


class RendererUnavailableError(RuntimeError):
    """The PDF library could not be loaded"""


class PdfRenderer:

    def __init__(self, module_prefix: str = "reportlab"):
        self._module_prefix = module_prefix
        self._lib: Optional[SimpleNamespace] = None
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._lib is not None

    def ensure_loaded(self) -> SimpleNamespace:
        if self._lib is not None:
            return self._lib
        with self._lock:
            if self._lib is None:
                try:
                    self._lib = SimpleNamespace(
                        colors=importlib.import_module(f"{self._module_prefix}.lib.colors"),
                        pagesizes=importlib.import_module(f"{self._module_prefix}.lib.pagesizes"),
                        styles=importlib.import_module(f"{self._module_prefix}.lib.styles"),
                        units=importlib.import_module(f"{self._module_prefix}.lib.units"),
                        platypus=importlib.import_module(f"{self._module_prefix}.platypus"),
                    )
                except ImportError as e:
                    logger.error("Failed to load PDF renderer: %s", e)
                    raise RendererUnavailableError(str(e)) from e
                logger.info("PDF renderer loaded")
        return self._lib

    # ─────────────────────────────────────────────────────────────────────────
    # RENDER
    # ─────────────────────────────────────────────────────────────────────────

    def render(self, document: ExportDocument) -> bytes:
        lib = self.ensure_loaded()
        platypus = lib.platypus
        styles = self._build_styles(lib)

        buffer = BytesIO()
        doc = platypus.SimpleDocTemplate(
            buffer,
            pagesize=lib.pagesizes.A4,
            title=document.title,
            leftMargin=14 * lib.units.mm,
            rightMargin=14 * lib.units.mm,
        )

        story: List = [
            platypus.Paragraph(escape(document.title), styles["title"]),
            platypus.Paragraph(escape(document.subtitle), styles["subtitle"]),
        ]
        for section in document.sections:
            story.append(platypus.Paragraph(escape(section.title), styles["h2"]))
            if isinstance(section, TableSection):
                story.append(self._table(lib, section, styles))
            elif isinstance(section, TextSection):
                for line in section.lines:
                    story.append(platypus.Paragraph(escape(line), styles["body"]))
            story.append(platypus.Spacer(1, 4 * lib.units.mm))

        doc.build(story)
        return buffer.getvalue()

    @staticmethod
    def _build_styles(lib: SimpleNamespace) -> dict:
        base = lib.styles.getSampleStyleSheet()
        return {
            "title": lib.styles.ParagraphStyle("ReportTitle", parent=base["Title"], fontSize=22),
            "subtitle": lib.styles.ParagraphStyle(
                "ReportSubtitle", parent=base["Heading2"], alignment=1, spaceAfter=12,
            ),
            "h2": lib.styles.ParagraphStyle("SectionTitle", parent=base["Heading3"], fontSize=14, spaceBefore=8),
            "body": lib.styles.ParagraphStyle("Body", parent=base["Normal"], fontSize=11, leading=14),
            "cell": lib.styles.ParagraphStyle("Cell", parent=base["Normal"], fontSize=10, leading=12),
        }

    @staticmethod
    def _table(lib: SimpleNamespace, section: TableSection, styles: dict):
        platypus = lib.platypus

        def cell(text: str):
            return platypus.Paragraph(escape(text or "").replace("\n", "<br/>"), styles["cell"])

        data = [[cell(h) for h in section.head]]
        data += [[cell(value) for value in row] for row in section.rows]
        table = platypus.Table(data, repeatRows=1)
        table.setStyle(platypus.TableStyle([
            ("GRID", (0, 0), (-1, -1), 0.5, lib.colors.grey),
            ("BACKGROUND", (0, 0), (-1, 0), lib.colors.lightgrey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]))
        return table


pdf_renderer = PdfRenderer()
