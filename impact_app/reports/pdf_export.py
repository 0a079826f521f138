from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Union
import logging

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas
from reportlab.lib.units import inch

logger = logging.getLogger(__name__)


def export_pdf(path: Union[str, Path], report: Dict[str, Any], title: str = "Organizational Impact Assessment") -> None:
    c = canvas.Canvas(str(path), pagesize=letter)
    width, height = letter
    x = 0.75 * inch
    y = height - 0.75 * inch

    def line(txt: str, dy: float = 14):
        nonlocal y
        c.drawString(x, y, txt[:120])
        y -= dy
        if y < 0.75 * inch:
            c.showPage()
            y = height - 0.75 * inch

    project = report.get("project", {})
    line(title)
    line(f"Generated: {report.get('generated_at', '')}")
    line(f"Project: {project.get('name', '')}  |  Organization: {project.get('organization_name', '')}")
    if project.get("lead_consultant"):
        team = [project["lead_consultant"], project.get("research_consultant"), project.get("data_consultant")]
        line("Consultants: " + ", ".join(t for t in team if t))
    line("")
    line(f"Overall Score: {report.get('overall_score', '')}  |  Rating: {report.get('overall_label', '')}")
    line("")
    line("Domain Scores:")
    for name, score, progress in report.get("domain_scores_named", []):
        line(f" - {name}: {score} ({progress}% complete)")

    notes = [a for a in report.get("answers", []) if a.get("notes")]
    line("")
    line("Notes:")
    if not notes:
        line(" - None recorded")
    else:
        for a in notes:
            line(f" - {a['question_id']} (Score: {a['score']}): {a['notes']}")

    c.save()
    logger.info(f"Wrote PDF report to {path}")
