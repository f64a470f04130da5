from __future__ import annotations  # PDF summary of a marathon session

from datetime import datetime, timezone
from typing import List, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from cms.models import Company
from marathon.progress import average_score, is_completed, round_outcome
from marathon.state import Session

ACCENT = (16, 150, 110)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
DANGER = (200, 40, 40)  # Failed rounds and termination


def _latin1(text: str) -> str:  # Core fonts only cover latin-1
    return text.encode("latin-1", "replace").decode("latin-1")


def _effective_width(pdf: FPDF) -> float:  # Compute effective page width
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


class ReportPDF(FPDF):  # Page chrome for marathon reports
    header_title = "Mock Marathon Report"

    def header(self) -> None:
        self.set_font("Helvetica", "B", 9)
        self.set_text_color(*MUTED)
        self.cell(0, 8, _latin1(self.header_title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def footer(self) -> None:
        self.set_y(-12)
        self.set_font("Helvetica", "", 8)
        self.set_text_color(*MUTED)
        self.cell(0, 8, f"Page {self.page_no()}/{{nb}}", align="C")


def _section_title(pdf: FPDF, title: str) -> None:  # Render styled section title
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font("Helvetica", "B", 13)
    pdf.cell(0, 9, _latin1(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: FPDF, rows: List[Tuple[str, str]]) -> None:  # Label/value pairs
    label_width = 45
    for label, value in rows:
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font("Helvetica", "", 10)
        pdf.cell(label_width, 6, _latin1(label), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.set_text_color(*TEXT)
        pdf.set_font("Helvetica", "B", 10)
        pdf.cell(0, 6, _latin1(value), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _round_rows(company: Company, session: Session) -> List[Tuple[str, str, str, str, str]]:
    rows = []
    for index, round_ in enumerate(company.workflow):
        score = session.scores.get(index)
        cutoff = f"{round_.cutoff:g}%" if round_.cutoff is not None else "-"
        outcome = round_outcome(score, round_.cutoff)
        if score is None:
            status = "current" if index == session.current_round_index else "pending"
        else:
            status = outcome or "scored"
        rows.append((str(index + 1), round_.type.upper(), "-" if score is None else f"{score:g}", cutoff, status))
    return rows


def _render_round_table(pdf: FPDF, company: Company, session: Session) -> None:
    widths = [12, 40, 30, 30, 0]
    headers = ["#", "Round", "Score", "Cutoff", "Status"]
    pdf.set_font("Helvetica", "B", 10)
    pdf.set_text_color(*MUTED)
    for width, title in zip(widths, headers):
        last = width == 0
        pdf.cell(width, 7, title, new_x=XPos.LMARGIN if last else XPos.RIGHT, new_y=YPos.NEXT if last else YPos.TOP)
    pdf.set_font("Helvetica", "", 10)
    for row in _round_rows(company, session):
        for width, value in zip(widths, row):
            last = width == 0
            pdf.set_text_color(*(DANGER if value == "fail" else TEXT))
            pdf.cell(width, 7, value, new_x=XPos.LMARGIN if last else XPos.RIGHT, new_y=YPos.NEXT if last else YPos.TOP)
    pdf.ln(3)


def generate_marathon_report_pdf(company: Company, session: Session) -> bytes:  # Build PDF payload
    pdf = ReportPDF()
    pdf.header_title = f"{company.name} - {company.target_role or 'Mock Marathon'} - Report"
    pdf.alias_nb_pages()
    pdf.set_margins(15, 18, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    if session.is_terminated:
        status = "Terminated"
    elif is_completed(session, len(company.workflow)):
        status = "Completed"
    else:
        status = f"Round {session.current_round_index + 1} of {len(company.workflow)}"
    average = average_score(session)

    _section_title(pdf, "Session Overview")
    _meta_block(
        pdf,
        [
            ("Company", company.name),
            ("Target role", company.target_role or "-"),
            ("Status", status),
            ("Warnings", str(session.warnings)),
            ("Average score", "-" if average is None else f"{average}%"),
            ("Generated", datetime.now(timezone.utc).strftime("%d %b %Y, %H:%M UTC")),
        ],
    )

    _section_title(pdf, "Rounds")
    _render_round_table(pdf, company, session)

    if session.round_feedback:
        _section_title(pdf, "Latest Feedback")
        pdf.set_font("Helvetica", "", 10)
        pdf.set_text_color(*TEXT)
        pdf.multi_cell(_effective_width(pdf), 5, _latin1(session.round_feedback.replace("**", "")))

    return bytes(pdf.output())


__all__ = ["generate_marathon_report_pdf"]
