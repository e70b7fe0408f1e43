#!/usr/bin/env python3
"""
Generate a sample FAQ PDF for the chat knowledge base.

The questions and answers are illustrative and cover the topics the
chat widget is most often asked about: storage, delivery, display life
and ordering.

Usage:
    python scripts/generate_faqs_pdf.py [output_path]

Output:
    faqs.pdf (or output_path)
"""

import sys
from pathlib import Path

from fpdf import FPDF

FAQS: list[tuple[str, str]] = [
    (
        "What temperature should ice be stored at?",
        "Ice sculptures should be stored at -10°F (-23°C) for optimal "
        "preservation. Storing ice any warmer than 0°F causes the surface "
        "to soften and fine details to round off.",
    ),
    (
        "How long does an ice sculpture last on display?",
        "Indoors at room temperature a typical sculpture displays well for "
        "four to six hours. Outdoors the display life depends on sun, wind "
        "and air temperature.",
    ),
    (
        "Do you deliver and set up the sculpture?",
        "Yes. The Ice Butcher delivers in insulated vehicles and our team "
        "sets up every piece on a drip tray with lighting where requested.",
    ),
    (
        "How far in advance should I order?",
        "We recommend ordering at least two weeks before your event. Large "
        "or custom pieces may need four weeks of lead time.",
    ),
    (
        "Can I see a sculpture in augmented reality before ordering?",
        "Yes. Many of our designs have AR previews, for example the "
        '42" Seafood Table: https://nexreality.io/ice_sculptures/06/',
    ),
    (
        "Can logos be frozen into the ice?",
        "Yes. We can embed printed logos, flowers and other objects in clear "
        "ice blocks, or engrave logos directly into the surface.",
    ),
    (
        "How do I contact The Ice Butcher?",
        "Visit our website at https://theicebutcher.com/ to request a quote "
        "or browse the sculpture catalogue.",
    ),
]


class FaqDocument(FPDF):
    """PDF with a running header and page footer."""

    def header(self):
        self.set_font("Helvetica", "B", 10)
        self.set_text_color(100, 100, 100)
        self.cell(0, 8, "The Ice Butcher  - Frequently Asked Questions", 0, 1, "C")
        self.line(10, self.get_y(), 200, self.get_y())
        self.ln(4)

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(150, 150, 150)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", 0, 0, "C")

    def question(self, text: str):
        self.set_font("Helvetica", "B", 11)
        self.set_text_color(0, 0, 0)
        self.ln(3)
        self.multi_cell(0, 6, f"Q: {text}")

    def answer(self, text: str):
        self.set_font("Helvetica", "", 10)
        self.set_text_color(30, 30, 30)
        self.multi_cell(0, 5.5, f"A: {text}")
        self.ln(2)


def generate_faqs(output_path: Path) -> None:
    pdf = FaqDocument()
    pdf.alias_nb_pages()
    pdf.set_auto_page_break(auto=True, margin=20)
    pdf.add_page()

    for question, answer in FAQS:
        pdf.question(question)
        pdf.answer(answer)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    pdf.output(str(output_path))
    print(f"Generated: {output_path} ({output_path.stat().st_size:,} bytes)")


if __name__ == "__main__":
    generate_faqs(Path(sys.argv[1] if len(sys.argv) > 1 else "faqs.pdf"))
