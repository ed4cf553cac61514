"""
Rendu PDF des feuilles de temps (reportlab).

Le moteur ne reçoit qu'un TimesheetDocument (en-tête + lignes de texte) :
aucune règle métier ici, uniquement la mise en page.
"""

import logging
from io import BytesIO
from typing import Any, List, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import LongTable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.schemas.timesheet import TimesheetDocument

logger = logging.getLogger(__name__)

PAGE_SIZE = landscape(A4)
MARGIN = 14 * mm
CONTENT_WIDTH = PAGE_SIZE[0] - 2 * MARGIN

PALETTE = {
    "navy": colors.HexColor("#0F172A"),
    "muted": colors.HexColor("#64748B"),
    "grid": colors.HexColor("#E2E8F0"),
    "stripe_even": colors.HexColor("#F8FAFC"),
    "stripe_odd": colors.HexColor("#F1F5F9"),
}

_STYLES = getSampleStyleSheet()
TITLE_STYLE = ParagraphStyle(
    "timesheet-title",
    parent=_STYLES["Heading2"],
    fontName="Helvetica-Bold",
    textColor=PALETTE["navy"],
    spaceAfter=6,
)
HEADER_LABEL_STYLE = ParagraphStyle(
    "header-label",
    parent=_STYLES["BodyText"],
    fontName="Helvetica-Bold",
    fontSize=9,
    leading=11,
    textColor=PALETTE["muted"],
)
HEADER_VALUE_STYLE = ParagraphStyle(
    "header-value",
    parent=_STYLES["BodyText"],
    fontName="Helvetica",
    fontSize=9,
    leading=11,
    textColor=PALETTE["navy"],
)
TABLE_HEADER_STYLE = ParagraphStyle(
    "table-header",
    parent=_STYLES["BodyText"],
    fontName="Helvetica-Bold",
    fontSize=9,
    leading=11,
    textColor=colors.white,
)
TABLE_CELL_STYLE = ParagraphStyle(
    "table-cell",
    parent=_STYLES["BodyText"],
    fontName="Helvetica",
    fontSize=8.6,
    leading=10,
    textColor=PALETTE["navy"],
    wordWrap="CJK",
)
FOOTER_STYLE = ParagraphStyle(
    "footer",
    parent=_STYLES["BodyText"],
    fontSize=8,
    textColor=PALETTE["muted"],
)


def _cell(value: Any, style: ParagraphStyle) -> Paragraph:
    text = "" if value is None else str(value)
    return Paragraph(escape(text), style)


def _build_header(document: TimesheetDocument) -> Table:
    """En-tête sur deux colonnes de couples (libellé, valeur)."""
    pairs = [
        [_cell(field.label, HEADER_LABEL_STYLE), _cell(field.value, HEADER_VALUE_STYLE)]
        for field in document.header
    ]
    half = (len(pairs) + 1) // 2
    left, right = pairs[:half], pairs[half:]
    empty = [_cell("", HEADER_LABEL_STYLE), _cell("", HEADER_VALUE_STYLE)]

    data = []
    for index in range(half):
        data.append(left[index] + (right[index] if index < len(right) else empty))

    width = CONTENT_WIDTH / 4
    table = Table(data, colWidths=[width * 0.6, width * 1.4, width * 0.6, width * 1.4], hAlign="LEFT")
    table.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
    ]))
    return table


def _build_rows_table(columns: Sequence[str], rows: Sequence[Sequence[str]]) -> LongTable:
    """Tableau des pointages, en-tête répété sur chaque page, lignes alternées."""
    table_data: List[List[Paragraph]] = [[_cell(c, TABLE_HEADER_STYLE) for c in columns]]

    if rows:
        for row in rows:
            cells = [_cell(value, TABLE_CELL_STYLE) for value in row][: len(columns)]
            cells.extend(_cell("", TABLE_CELL_STYLE) for _ in range(len(columns) - len(cells)))
            table_data.append(cells)
    else:
        table_data.append(
            [_cell("No attendance records", TABLE_CELL_STYLE)]
            + [_cell("", TABLE_CELL_STYLE) for _ in range(len(columns) - 1)]
        )

    col_width = CONTENT_WIDTH / max(1, len(columns))
    table = LongTable(table_data, colWidths=[col_width] * len(columns), repeatRows=1, hAlign="LEFT")

    style_commands = [
        ("BACKGROUND", (0, 0), (-1, 0), PALETTE["navy"]),
        ("GRID", (0, 0), (-1, -1), 0.4, PALETTE["grid"]),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]
    for row_index in range(1, len(table_data)):
        background = PALETTE["stripe_even"] if row_index % 2 else PALETTE["stripe_odd"]
        style_commands.append(("BACKGROUND", (0, row_index), (-1, row_index), background))

    table.setStyle(TableStyle(style_commands))
    return table


def render_timesheet_pdf(document: TimesheetDocument) -> bytes:
    """Génère le PDF d'une feuille de temps et retourne son contenu binaire."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=PAGE_SIZE,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
        title=document.title,
    )

    story = [
        Paragraph(escape(document.title), TITLE_STYLE),
        _build_header(document),
        Spacer(1, 8),
        _build_rows_table(document.columns, document.rows),
        Spacer(1, 6),
        Paragraph(
            f"Generated at {document.generated_at.strftime('%Y-%m-%d %H:%M:%S')} UTC",
            FOOTER_STYLE,
        ),
    ]
    doc.build(story)

    pdf_bytes = buffer.getvalue()
    logger.debug("PDF '%s' généré : %d lignes, %d octets", document.title, len(document.rows), len(pdf_bytes))
    return pdf_bytes
