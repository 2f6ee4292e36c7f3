"""Export-Modul: Excel (openpyxl) für den Kursplan."""

from export.excel_export import PlanExcelExporter

__all__ = ["PlanExcelExporter"]
