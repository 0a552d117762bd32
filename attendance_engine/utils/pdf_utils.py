"""
PDF generation utilities for attendance reports
"""

import io
from typing import Any, Dict, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from attendance_engine.schemas.common.enums import AttendanceBand

HEADER_COLOR = HexColor('#366092')

BAND_COLORS = {
    AttendanceBand.GOOD: HexColor('#DCFCE7'),
    AttendanceBand.WARNING: HexColor('#FEF9C3'),
    AttendanceBand.CRITICAL: HexColor('#FEE2E2'),
}


class AttendancePDFGenerator:
    """
    Builds report PDFs in memory.

    Documents are written in reportlab's invariant mode, so the same content
    always produces the same bytes (no creation timestamp, fixed document
    ID).
    """

    def __init__(self, page_size=A4, margins=None):
        self.page_size = page_size
        self.margins = margins or {'top': 1.5*cm, 'bottom': 1.5*cm, 'left': 1.5*cm, 'right': 1.5*cm}
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Setup custom paragraph styles"""
        self.styles.add(ParagraphStyle(
            name='Institution',
            parent=self.styles['Heading1'],
            fontSize=18,
            textColor=HEADER_COLOR,
            spaceAfter=6,
            alignment=TA_CENTER
        ))

        self.styles.add(ParagraphStyle(
            name='ReportTitle',
            parent=self.styles['Heading2'],
            fontSize=14,
            spaceAfter=4,
            alignment=TA_CENTER
        ))

        self.styles.add(ParagraphStyle(
            name='Subtitle',
            parent=self.styles['Normal'],
            fontSize=11,
            spaceAfter=2,
            alignment=TA_CENTER
        ))

        self.styles.add(ParagraphStyle(
            name='Info',
            parent=self.styles['Normal'],
            fontSize=10,
            spaceAfter=2,
            alignment=TA_LEFT
        ))

        self.styles.add(ParagraphStyle(
            name='SectionHeading',
            parent=self.styles['Heading3'],
            fontSize=12,
            spaceBefore=10,
            spaceAfter=6
        ))

    def render(
        self,
        title: str,
        institution: Optional[str] = None,
        subtitles: Sequence[str] = (),
        header_fields: Sequence[Tuple[str, str]] = (),
        content: Sequence[Dict[str, Any]] = (),
    ) -> bytes:
        """
        Render a report and return the PDF bytes.

        Args:
            title: Document and heading title
            institution: Printed above the title when set
            subtitles: Centered lines under the title
            header_fields: (label, value) pairs printed before the content
            content: Items of type 'heading', 'paragraph', 'table' or 'spacer'
        """
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.page_size,
            topMargin=self.margins['top'],
            bottomMargin=self.margins['bottom'],
            leftMargin=self.margins['left'],
            rightMargin=self.margins['right'],
            title=title,
            author=institution or '',
            invariant=1,
        )

        story = []
        if institution:
            story.append(Paragraph(escape(institution), self.styles['Institution']))
        story.append(Paragraph(escape(title), self.styles['ReportTitle']))
        for line in subtitles:
            story.append(Paragraph(escape(line), self.styles['Subtitle']))
        story.append(Spacer(1, 8))

        for label, value in header_fields:
            story.append(Paragraph(f"<b>{escape(label)}:</b> {escape(str(value))}", self.styles['Info']))
        if header_fields:
            story.append(Spacer(1, 10))

        for item in content:
            if item.get('type') == 'heading':
                story.append(Paragraph(escape(item['text']), self.styles['SectionHeading']))
            elif item.get('type') == 'paragraph':
                story.append(Paragraph(escape(item['text']), self.styles['Info']))
            elif item.get('type') == 'table':
                story.append(self._create_table(
                    item['data'],
                    item.get('headers'),
                    item.get('col_widths'),
                    item.get('extra_styles'),
                ))
            elif item.get('type') == 'spacer':
                story.append(Spacer(1, item.get('height', 12)))

        doc.build(story, onFirstPage=self._draw_footer, onLaterPages=self._draw_footer)
        return buffer.getvalue()

    def _create_table(
        self,
        data: List[List[str]],
        headers: Optional[List[str]] = None,
        col_widths: Optional[List[float]] = None,
        extra_styles: Optional[List[tuple]] = None,
    ) -> Table:
        """Create a formatted table; the header row repeats on every page"""
        table_data = []

        if headers:
            table_data.append(headers)

        table_data.extend(data)
        if not table_data:
            table_data = [['']]

        table = Table(table_data, colWidths=col_widths, repeatRows=1 if headers else 0)

        style = [
            ('BACKGROUND', (0, 0), (-1, 0), HEADER_COLOR) if headers else None,
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white) if headers else None,
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold') if headers else None,
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 6) if headers else None,
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey)
        ]

        style = [s for s in style if s is not None]
        style.extend(extra_styles or [])
        table.setStyle(TableStyle(style))

        return table

    @staticmethod
    def band_style(column: int, row: int, band: AttendanceBand) -> tuple:
        """Background command for one banded cell"""
        return ('BACKGROUND', (column, row), (column, row), BAND_COLORS[AttendanceBand(band)])

    def _draw_footer(self, canvas, doc):
        canvas.saveState()
        canvas.setFont('Helvetica', 8)
        canvas.drawRightString(
            self.page_size[0] - self.margins['right'],
            self.margins['bottom'] / 2,
            f"Page {doc.page}",
        )
        canvas.restoreState()
