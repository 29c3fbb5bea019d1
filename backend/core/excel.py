"""
Spreadsheet export helpers built on openpyxl.
"""
import io
import logging
from decimal import Decimal

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from django.http import HttpResponse

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

HEADER_FONT = Font(bold=True, color='FFFFFF')
HEADER_FILL = PatternFill(start_color='1F4E78', end_color='1F4E78', fill_type='solid')


def _cell_value(value):
    if isinstance(value, Decimal):
        return float(value)
    if value is None:
        return ''
    return value


def build_workbook(sheets):
    """
    Build a workbook from a list of (title, headers, rows) tuples.
    Each row is a sequence of cell values matching the headers.
    """
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for title, headers, rows in sheets:
        ws = wb.create_sheet(title=title[:31])
        ws.sheet_view.rightToLeft = True
        ws.append(list(headers))
        for cell in ws[1]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = Alignment(horizontal='center')
        for row in rows:
            ws.append([_cell_value(value) for value in row])
        for index, header in enumerate(headers, start=1):
            ws.column_dimensions[get_column_letter(index)].width = max(14, len(str(header)) + 4)
    return wb


def workbook_response(wb, filename):
    """Serialize a workbook into an attachment response"""
    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    response = HttpResponse(output.getvalue(), content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    logger.debug(f"Exported workbook {filename}")
    return response


def export_response(filename, title, headers, rows):
    return workbook_response(build_workbook([(title, headers, rows)]), filename)
