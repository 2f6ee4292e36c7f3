"""Excel-Export für den Kursplan (openpyxl)."""

from pathlib import Path

from models.catalog import Catalog
from models.plan import PlannedSection
from models.section import Weekday
from planner.conflicts import detect_plan_conflicts

from export.helpers import (
    COLORS, blocks_by_hour, format_crn, format_schedule_display,
    get_course_color, hour_range, today_str,
)
from config.defaults import WEEKDAY_SHORT


class PlanExcelExporter:
    """Exportiert einen Kursplan in eine Excel-Datei (Übersicht + Wochenraster)."""

    # Spaltenbreiten (Excel-Einheiten)
    COL_HOUR_W = 12
    COL_DAY_W  = 18

    # Zeilenhöhen (Punkte)
    ROW_HEADER_H = 22
    ROW_HOUR_H   = 36

    def __init__(self, plan: list[PlannedSection], catalog: Catalog, title: str = "Kursplan"):
        self.plan    = list(plan)
        self.catalog = catalog
        self.title   = title

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei mit beiden Sheets."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_uebersicht(wb)
        self._sheet_wochenplan(wb)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _center_align(self, wrap: bool = True):
        from openpyxl.styles import Alignment
        return Alignment(wrap_text=wrap, horizontal="center", vertical="center")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_header(self, ws, row: int, headers: list[str]) -> None:
        from openpyxl.styles import Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = self._center_align(wrap=False)
            cell.border = border
        ws.row_dimensions[row].height = self.ROW_HEADER_H

    # ─── Sheet: Übersicht ─────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(title="Übersicht", index=0)

        row = 1
        ws.cell(row=row, column=1, value=self.title).font = Font(bold=True, size=14)
        row += 1
        total = sum(
            c.credits for c in (self.catalog.course_by_id(e.course_id) for e in self.plan) if c
        )
        ws.cell(row=row, column=1, value=f"Erstellt: {today_str()}")
        ws.cell(row=row, column=3, value=f"Kurse: {len(self.plan)}")
        ws.cell(row=row, column=4, value=f"Credits: {total}")
        row += 2

        headers = ["Kurs", "Name", "CRN", "Credits", "Raum", "Stundenplan"]
        self._write_header(ws, row, headers)
        row += 1

        border = self._thin_border()
        for entry in self.plan:
            course = self.catalog.course_by_id(entry.course_id)
            values = [
                entry.course_id,
                course.name if course else "?",
                format_crn(entry.section_crn),
                course.credits if course else 0,
                entry.section.room,
                format_schedule_display(entry.section),
            ]
            fill = self._fill(get_course_color(course))
            for col, value in enumerate(values, 1):
                c = ws.cell(row=row, column=col, value=value)
                c.border = border
                c.fill = fill
            row += 1

        conflicts = detect_plan_conflicts(self.plan)
        if conflicts:
            row += 1
            ws.cell(row=row, column=1, value="Konflikte").font = Font(bold=True, color="C00000")
            row += 1
            for conflict in conflicts:
                c = ws.cell(
                    row=row, column=1,
                    value=f"{conflict.course1} ↔ {conflict.course2}: {conflict.conflict_time}",
                )
                c.fill = self._fill(COLORS["conflict"])
                row += 1

        for col, width in zip("ABCDEF", [12, 34, 16, 9, 12, 36]):
            ws.column_dimensions[col].width = width

    # ─── Sheet: Wochenplan ────────────────────────────────────────────────────

    def _sheet_wochenplan(self, wb) -> None:
        from openpyxl.styles import Font
        from openpyxl.utils import get_column_letter
        ws = wb.create_sheet(title="Wochenplan")

        days = [d for d in Weekday if d != Weekday.SUNDAY or self._uses(d)]
        self._write_header(ws, 1, ["Zeit"] + [WEEKDAY_SHORT[d.value] for d in days])
        ws.column_dimensions["A"].width = self.COL_HOUR_W
        for col in range(2, 2 + len(days)):
            ws.column_dimensions[get_column_letter(col)].width = self.COL_DAY_W

        sections = [e.section for e in self.plan]
        grid = blocks_by_hour([(e.course_id, e.section) for e in self.plan])
        border = self._thin_border()

        excel_row = 2
        for hour in hour_range(sections):
            c = ws.cell(row=excel_row, column=1, value=f"{hour:02d}:00–{hour + 1:02d}:00")
            c.alignment = self._center_align(wrap=False)
            c.border = border
            c.font = Font(size=8)

            for i, day in enumerate(days):
                here = grid.get((day, hour), [])
                if len(here) > 1:
                    color = COLORS["conflict"]
                elif here:
                    color = get_course_color(self.catalog.course_by_id(here[0]))
                else:
                    color = COLORS["free"]
                c = ws.cell(row=excel_row, column=i + 2, value="\n".join(here))
                c.fill = self._fill(color)
                c.alignment = self._center_align()
                c.border = border
                c.font = Font(size=8)

            ws.row_dimensions[excel_row].height = self.ROW_HOUR_H
            excel_row += 1

        untimed = [e for e in self.plan if not e.section.timed_blocks]
        if untimed:
            excel_row += 1
            ws.cell(row=excel_row, column=1, value="Ohne feste Zeit").font = Font(bold=True)
            for entry in untimed:
                excel_row += 1
                ws.cell(row=excel_row, column=1, value=entry.course_id)
                ws.cell(row=excel_row, column=2, value=format_schedule_display(entry.section))
                ws.cell(row=excel_row, column=2).fill = self._fill(COLORS["virtual"])

    def _uses(self, day: Weekday) -> bool:
        return any(day in e.section.scheduling_days for e in self.plan)
