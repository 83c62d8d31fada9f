from __future__ import annotations  # Styled PDF rendering for interview reports

import os
from datetime import datetime
from typing import Any, List, Optional, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from models import InterviewSession, ReportJson, ReportQuestionEvaluation

DEJAVU_SANS = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"  # System font
DEJAVU_SANS_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"  # System font

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 248, 255)  # Highlight background

VERDICT_COLORS = {
    "pass": (46, 160, 67),
    "improve": (219, 150, 20),
    "reject": (207, 34, 46),
}


def _format_datetime(value: Optional[datetime]) -> str:  # Format timestamp for display
    if not value:
        return "-"
    return value.strftime("%d %b %Y, %I:%M %p").lstrip("0").replace(" 0", " ")


def _effective_width(pdf: FPDF) -> float:
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


class ReportPDF(FPDF):  # PDF with custom header/footer styling
    def __init__(self, *args, accent: Tuple[int, int, int] = ACCENT, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "Interview Report"
        self.font_regular = "Helvetica"
        self.font_bold = "Helvetica"
        self.supports_unicode = False

    def use_dejavu(self) -> None:  # Switch to the unicode system font when installed
        if not (os.path.exists(DEJAVU_SANS) and os.path.exists(DEJAVU_SANS_BOLD)):
            return
        self.add_font("DejaVu", "", DEJAVU_SANS)
        self.add_font("DejaVu", "B", DEJAVU_SANS_BOLD)
        self.font_regular = "DejaVu"
        self.font_bold = "DejaVu"
        self.supports_unicode = True

    def prepare_text(self, text: Any) -> str:  # Core fonts only cover latin-1
        value = "" if text is None else str(text)
        if self.supports_unicode:
            return value
        cleaned = value.replace("•", "-").replace("’", "'").replace("“", '"').replace("”", '"')
        return cleaned.encode("latin-1", "ignore").decode("latin-1")

    def line_text(self, height: float, text: Any, **kwargs: Any) -> None:
        self.cell(0, height, self.prepare_text(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT, **kwargs)

    def paragraph(self, height: float, text: Any, *, width: float = 0) -> None:
        self.set_x(self.l_margin)
        self.multi_cell(width or _effective_width(self), height, self.prepare_text(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def header(self) -> None:  # Render header banner
        usable = _effective_width(self)
        if self.page_no() == 1:
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, 18, style="F")
            self.set_text_color(255, 255, 255)
            self.set_font(self.font_bold, "B", 16)
            self.set_xy(self.l_margin, 5)
            self.cell(usable, 8, self.prepare_text(self.header_title))
            self.set_text_color(*TEXT)
            self.set_y(24)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font(self.font_bold, "B", 12)
            self.cell(usable, 6, self.prepare_text(self.header_title))
            self.set_draw_color(*self.accent)
            self.set_line_width(0.4)
            self.line(self.l_margin, 15, self.w - self.r_margin, 15)
            self.set_text_color(*TEXT)
            self.set_y(19)

    def footer(self) -> None:  # Render footer with pagination
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font(self.font_regular, "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: ReportPDF, title: str) -> None:
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_bold, "B", 13)
    pdf.line_text(9, title)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: ReportPDF, rows: List[Tuple[str, str]]) -> None:  # Draw two-column metadata
    col = _effective_width(pdf) / 2.0
    line = 6
    for idx in range(0, len(rows), 2):
        left = rows[idx]
        right = rows[idx + 1] if idx + 1 < len(rows) else ("", "")
        for slot, size, style, color in ((0, 10, "", MUTED), (1, 11, "B", TEXT)):
            pdf.set_x(pdf.l_margin)
            pdf.set_text_color(*color)
            pdf.set_font(pdf.font_bold if style else pdf.font_regular, style, size)
            pdf.cell(col, line, pdf.prepare_text(left[slot]), new_x=XPos.RIGHT, new_y=YPos.TOP)
            pdf.cell(col, line, pdf.prepare_text(right[slot]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _render_score_banner(pdf: ReportPDF, report: ReportJson) -> None:
    top = pdf.get_y()
    width = _effective_width(pdf)
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    pdf.rect(pdf.l_margin, top, width, 16, style="F")
    pdf.set_xy(pdf.l_margin + 6, top + 4)
    pdf.set_text_color(*MUTED)
    pdf.set_font(pdf.font_regular, "", 10)
    pdf.cell(width / 2, 8, "Overall Score")
    pdf.set_text_color(*ACCENT)
    pdf.set_font(pdf.font_bold, "B", 14)
    pdf.cell(width / 4, 8, pdf.prepare_text(f"{report.overall}/10"))
    verdict = report.verdict or "-"
    pdf.set_text_color(*VERDICT_COLORS.get(verdict.lower(), TEXT))
    pdf.cell(width / 4 - 12, 8, pdf.prepare_text(verdict), align="R")
    pdf.set_y(top + 20)
    pdf.set_text_color(*TEXT)


def _render_list(pdf: ReportPDF, label: str, items: List[str]) -> None:
    if not items:
        return
    bullet = "•" if pdf.supports_unicode else "-"
    pdf.set_font(pdf.font_bold, "B", 10)
    pdf.set_text_color(*MUTED)
    pdf.paragraph(5.5, label)
    pdf.set_font(pdf.font_regular, "", 10)
    pdf.set_text_color(*TEXT)
    for item in items:
        pdf.paragraph(5.5, f"{bullet} {item}")


def _render_evaluation(pdf: ReportPDF, index: int, entry: ReportQuestionEvaluation) -> None:
    if pdf.get_y() + 40 > pdf.page_break_trigger:
        pdf.add_page()
    pdf.set_font(pdf.font_bold, "B", 11)
    pdf.set_text_color(*ACCENT)
    pdf.paragraph(6, f"Q{index}: {entry.question_text or '-'}  ({entry.score}/10)")
    pdf.set_font(pdf.font_regular, "", 10)
    pdf.set_text_color(60, 60, 60)
    pdf.paragraph(5.5, f"A: {entry.user_answer or '(no answer)'}")
    if entry.feedback:
        pdf.set_text_color(*TEXT)
        pdf.paragraph(5.5, entry.feedback)
    _render_list(pdf, "Strengths", entry.strengths)
    _render_list(pdf, "Weaknesses", entry.weaknesses)
    _render_list(pdf, "Suggestions", entry.suggestions)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y() + 2
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.set_y(y + 3)


def generate_report_pdf(session: InterviewSession, report: ReportJson) -> bytes:  # Build PDF payload for a report
    pdf = ReportPDF()
    pdf.alias_nb_pages()
    pdf.use_dejavu()
    pdf.header_title = "Mock Interview Evaluation Report"
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    answered = sum(1 for question in session.questions if question.answered)
    _section_title(pdf, "Session Overview")
    _meta_block(
        pdf,
        [
            ("Session ID", session.id),
            ("Status", session.status),
            ("Started", _format_datetime(session.started_at)),
            ("Finished", _format_datetime(session.ended_at)),
            ("Questions", str(len(session.questions))),
            ("Answered", str(answered)),
        ],
    )

    _render_score_banner(pdf, report)

    _section_title(pdf, "Question Evaluations")
    if not report.question_evaluations:
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.paragraph(6, "No per-question evaluations were included in this report.")
    for index, entry in enumerate(report.question_evaluations, start=1):
        _render_evaluation(pdf, index, entry)

    return bytes(pdf.output())


__all__ = ["ReportPDF", "generate_report_pdf"]
