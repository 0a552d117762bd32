"""
Excel generation utilities for attendance reports
"""

import io
from typing import Any, Dict, List, Optional, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from attendance_engine.schemas.common.enums import AttendanceBand

BAND_FILLS = {
    AttendanceBand.GOOD: 'DCFCE7',
    AttendanceBand.WARNING: 'FEF9C3',
    AttendanceBand.CRITICAL: 'FEE2E2',
}


class AttendanceExcelGenerator:
    """Builds single-sheet report workbooks in memory"""

    def __init__(self):
        self.default_styles = self._create_default_styles()

    def _create_default_styles(self) -> Dict[str, Dict[str, Any]]:
        """Create default cell styles"""
        thin = Side(style='thin')
        return {
            'header': {
                'font': Font(bold=True, color='FFFFFF'),
                'fill': PatternFill(start_color='366092', end_color='366092', fill_type='solid'),
                'alignment': Alignment(horizontal='center', vertical='center'),
                'border': Border(left=thin, right=thin, top=thin, bottom=thin)
            },
            'data': {
                'font': Font(size=10),
                'alignment': Alignment(horizontal='left', vertical='center'),
                'border': Border(left=thin, right=thin, top=thin, bottom=thin)
            },
            'title': {
                'font': Font(bold=True, size=16, color='366092'),
                'alignment': Alignment(horizontal='center', vertical='center')
            },
            'subtitle': {
                'font': Font(bold=True, size=11),
                'alignment': Alignment(horizontal='left', vertical='center')
            },
        }

    def render(
        self,
        sheet_name: str,
        title: str,
        headers: List[str],
        data: List[List[Any]],
        header_fields: Sequence[Tuple[str, str]] = (),
        row_bands: Optional[List[AttendanceBand]] = None,
        band_column: Optional[int] = None,
    ) -> bytes:
        """
        Write one sheet and return the xlsx bytes.

        Args:
            row_bands: Band per data row; fills the cell at `band_column`
                (0-based) with the band colour
        """
        wb = Workbook()
        ws = wb.active
        ws.title = sheet_name[:31]

        width = max(len(headers), 1)
        ws.merge_cells(f'A1:{get_column_letter(width)}1')
        ws['A1'] = title
        self._apply_style(ws['A1'], self.default_styles['title'])

        row = 2
        for label, value in header_fields:
            cell = ws.cell(row=row, column=1, value=f"{label}: {value}")
            self._apply_style(cell, self.default_styles['subtitle'])
            row += 1
        row += 1

        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            self._apply_style(cell, self.default_styles['header'])
        ws.freeze_panes = ws.cell(row=row + 1, column=1)

        for row_idx, row_data in enumerate(data):
            for col_idx, cell_value in enumerate(row_data):
                cell = ws.cell(row=row + 1 + row_idx, column=col_idx + 1, value=cell_value)
                self._apply_style(cell, self.default_styles['data'])
                if row_bands and col_idx == band_column:
                    color = BAND_FILLS[AttendanceBand(row_bands[row_idx])]
                    cell.fill = PatternFill(start_color=color, end_color=color, fill_type='solid')

        self._auto_adjust_columns(ws, header_row=row)

        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    def _apply_style(self, cell, style_dict: Dict[str, Any]):
        """Apply style to a cell"""
        for attr, value in style_dict.items():
            setattr(cell, attr, value)

    def _auto_adjust_columns(self, worksheet, header_row: int = 1):
        """Auto-adjust column widths from the table rows"""
        for column_cells in worksheet.iter_cols(min_row=header_row):
            length = max(len(str(cell.value or '')) for cell in column_cells)
            worksheet.column_dimensions[get_column_letter(column_cells[0].column)].width = min(length + 2, 50)
