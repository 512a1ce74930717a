"""Builders for test documents and AI payloads."""

import io
import json

from docx import Document

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SAMPLE_RESUME_LINES = [
    "Jane Doe",
    "jane.doe@example.com | +1 555 0100",
    "Summary: Backend engineer with ten years of work in payments.",
    "Experience: Acme Corp, Senior Engineer, 2019 - Present",
    "Education: BS Computer Science, State University",
    "Skills: Python, FastAPI, PostgreSQL",
]


def make_docx_bytes(paragraphs: list[str]) -> bytes:
    doc = Document()
    for text in paragraphs:
        doc.add_paragraph(text)
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def _pdf_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def make_pdf_bytes(lines: list[str]) -> bytes:
    """Build a one-page PDF that draws each line with Helvetica."""
    operations = ["BT", "/F1 12 Tf", "14 TL", "72 720 Td"]
    operations += [f"({_pdf_escape(line)}) Tj T*" for line in lines]
    operations.append("ET")
    stream = "\n".join(operations).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_offset
    return bytes(out)


def make_ai_payload(**overrides) -> dict:
    """A well-formed model answer in the camelCase shape the prompt asks for."""
    data = {
        "fullName": "Jane Doe",
        "email": "Jane.Doe@Example.com",
        "phone": "+1 555 0100",
        "address": None,
        "summary": "Backend engineer",
        "linkedinLink": "https://linkedin.com/in/janedoe",
        "githubLink": None,
        "skills": ["Python", "FastAPI", "PostgreSQL"],
        "experience": [
            {
                "company": "Acme Corp",
                "position": "Senior Engineer",
                "startDate": "2019",
                "endDate": "Present",
                "description": "Payments platform",
                "isCurrent": False,
            }
        ],
        "education": [
            {
                "institution": "State University",
                "degree": "BS",
                "fieldOfStudy": "Computer Science",
                "startDate": "2010",
                "endDate": "2014",
                "gpa": None,
                "description": None,
            }
        ],
        "projects": [],
        "languages": ["English"],
        "certifications": [],
    }
    data.update(overrides)
    return data


def make_ai_response(**overrides) -> str:
    return json.dumps(make_ai_payload(**overrides))


def auth_headers(user) -> dict[str, str]:
    return {"X-User-Id": str(user.id)}
