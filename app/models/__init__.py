from .report import ReportDocument

__all__ = ["ReportDocument"]
