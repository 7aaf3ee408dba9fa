"""
PDF Service - renders school documents with reportlab

Every renderer takes the data dict produced by the owning service
(report card, certificate, declaration, transcript, invoice) and returns
the PDF bytes. Layout is A4 portrait with the school header on top.
"""

from datetime import datetime
from typing import Any, Dict, List
import io

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from synexa.core.config import settings
from synexa.core.exceptions import DocumentGenerationError
from synexa.core.logging_config import get_logger

logger = get_logger(__name__)

PRIMARY = colors.HexColor('#1a365d')
MUTED = colors.HexColor('#4a5568')
HEADER_BG = colors.HexColor('#e2e8f0')
GRID = colors.HexColor('#cbd5e0')

MONTHS_PT = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]


def _fmt(value, digits: int = 1) -> str:
    return "-" if value is None else f"{value:.{digits}f}"


def _long_date(when: datetime) -> str:
    return f"{when.day} de {MONTHS_PT[when.month - 1]} de {when.year}"


def _kz(value) -> str:
    """Kwanza amount, 1.234,56 Kz"""
    text = f"{float(value):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"{text} Kz"


class PdfService:
    """Build A4 school documents"""

    def __init__(self):
        styles = getSampleStyleSheet()
        self.styles = {
            "school": ParagraphStyle(
                'School', parent=styles['Heading1'], fontSize=16,
                textColor=PRIMARY, alignment=TA_CENTER, spaceAfter=2,
            ),
            "school_info": ParagraphStyle(
                'SchoolInfo', parent=styles['Normal'], fontSize=9,
                textColor=MUTED, alignment=TA_CENTER, spaceAfter=2,
            ),
            "title": ParagraphStyle(
                'DocTitle', parent=styles['Heading2'], fontSize=15,
                textColor=PRIMARY, alignment=TA_CENTER, spaceBefore=14, spaceAfter=14,
            ),
            "body": ParagraphStyle(
                'DocBody', parent=styles['Normal'], fontSize=11, leading=16,
                alignment=TA_JUSTIFY, spaceAfter=8,
            ),
            "section": ParagraphStyle(
                'Section', parent=styles['Heading3'], fontSize=11,
                textColor=PRIMARY, spaceBefore=10, spaceAfter=6,
            ),
            "right": ParagraphStyle(
                'Right', parent=styles['Normal'], fontSize=10, alignment=TA_RIGHT,
            ),
            "small": ParagraphStyle(
                'Small', parent=styles['Normal'], fontSize=8,
                textColor=MUTED, alignment=TA_CENTER,
            ),
        }

    def _header(self) -> List:
        content = [Paragraph(settings.SCHOOL_NAME, self.styles["school"])]
        if settings.SCHOOL_ADDRESS:
            content.append(Paragraph(settings.SCHOOL_ADDRESS, self.styles["school_info"]))
        if settings.SCHOOL_NIF:
            content.append(Paragraph(f"NIF: {settings.SCHOOL_NIF}", self.styles["school_info"]))
        content.append(Spacer(1, 8))
        return content

    def _footer(self, place_date: bool = True) -> List:
        content = [Spacer(1, 24)]
        if place_date:
            content.append(Paragraph(f"Luanda, {_long_date(datetime.utcnow())}", self.styles["right"]))
            content.append(Spacer(1, 40))
        content.append(Paragraph("_______________________________", self.styles["small"]))
        content.append(Paragraph("A Direção", self.styles["small"]))
        content.append(Spacer(1, 12))
        content.append(Paragraph(
            f"Documento emitido por {settings.APP_NAME} em {datetime.utcnow().strftime('%d/%m/%Y %H:%M')}",
            self.styles["small"],
        ))
        return content

    def _table(self, rows: List[List[Any]], col_widths: List[float]) -> Table:
        table = Table(rows, colWidths=col_widths, repeatRows=1)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), HEADER_BG),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.HexColor('#2d3748')),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('ALIGN', (1, 0), (-1, -1), 'CENTER'),
            ('GRID', (0, 0), (-1, -1), 0.5, GRID),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('TOPPADDING', (0, 0), (-1, -1), 5),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
        ]))
        return table

    def _build(self, content: List, doc_type: str) -> bytes:
        buffer = io.BytesIO()
        try:
            doc = SimpleDocTemplate(
                buffer,
                pagesize=A4,
                rightMargin=2 * cm,
                leftMargin=2 * cm,
                topMargin=1.5 * cm,
                bottomMargin=1.5 * cm,
                title=doc_type,
            )
            doc.build(content)
            return buffer.getvalue()
        except Exception as e:
            logger.error(f"[PdfService] Error rendering {doc_type}: {e}", exc_info=True)
            raise DocumentGenerationError(f"Falha ao gerar o documento: {e}", doc_type=doc_type)
        finally:
            buffer.close()

    # ==================== REPORT CARD ====================

    def report_card(self, data: Dict[str, Any]) -> bytes:
        student = data["student"]
        school_class = data["class"]
        content = self._header()
        content.append(Paragraph("BOLETIM DE NOTAS", self.styles["title"]))
        content.append(Paragraph(
            f"<b>Aluno:</b> {student['name']} &nbsp;&nbsp; <b>Nº:</b> {student['student_number']}<br/>"
            f"<b>Turma:</b> {school_class['name']} &nbsp;&nbsp; <b>Turno:</b> {school_class['shift_label']}"
            f" &nbsp;&nbsp; <b>Ano letivo:</b> {data['academic_year']}",
            self.styles["body"],
        ))

        terms = data["terms"]
        header = ["Disciplina"]
        for term in terms:
            header += [f"MAC {term}", f"NPP {term}", f"NPT {term}", f"MT {term}"]
        header += ["Média", "Classificação"]
        rows = [header]
        for subject in data["subjects"]:
            row = [subject["subject"]]
            columns = {t["term"]: t for t in subject["terms"]}
            for term in terms:
                col = columns.get(term, {})
                row += [_fmt(col.get("mac")), _fmt(col.get("npp")), _fmt(col.get("npt")), _fmt(col.get("mt"))]
            row += [_fmt(subject["final_average"]), subject["classification"]]
            rows.append(row)

        name_width = 4 * cm
        tail_width = 1.4 * cm + 2.4 * cm
        grade_width = (A4[0] - 4 * cm - name_width - tail_width) / max(1, len(terms) * 4)
        widths = [name_width] + [grade_width] * (len(terms) * 4) + [1.4 * cm, 2.4 * cm]
        content.append(self._table(rows, widths))

        content.append(Spacer(1, 12))
        content.append(Paragraph(
            f"<b>Média geral:</b> {_fmt(data['general_average'], 2)} &nbsp;&nbsp; "
            f"<b>Situação final:</b> {data['final_status']}",
            self.styles["body"],
        ))
        content += self._footer()
        return self._build(content, "REPORT_CARD")

    # ==================== CERTIFICATE ====================

    def certificate(self, data: Dict[str, Any]) -> bytes:
        student = data["student"]
        content = self._header()
        content.append(Paragraph("CERTIFICADO DE HABILITAÇÕES", self.styles["title"]))
        content.append(Paragraph(
            f"Certifica-se que <b>{student['name']}</b>, nascido(a) em {student['birth_date']}, "
            f"portador(a) do BI nº {student.get('bi_number') or '-'}, filho(a) de {student.get('guardian_name') or '-'}, "
            f"frequentou no ano letivo de {data['academic_year']} a turma <b>{data['class']['name']}</b>, "
            f"período {data['class']['period']}, tendo obtido as seguintes classificações:",
            self.styles["body"],
        ))

        rows = [["Disciplina", "Média anual", "Resultado"]]
        for subject in data["subjects"]:
            rows.append([subject["subject"], _fmt(subject["average"]), subject["status"]])
        content.append(self._table(rows, [8 * cm, 4 * cm, 5 * cm]))

        content.append(Spacer(1, 12))
        content.append(Paragraph(
            f"Média final: <b>{_fmt(data['overall_average'])}</b> valores. "
            f"Por ser verdade e me ter sido solicitado, passa-se o presente certificado.",
            self.styles["body"],
        ))
        content += self._footer()
        return self._build(content, "CERTIFICATE")

    # ==================== DECLARATION ====================

    def declaration(self, data: Dict[str, Any]) -> bytes:
        student = data["student"]
        content = self._header()
        content.append(Paragraph("DECLARAÇÃO DE MATRÍCULA", self.styles["title"]))
        content.append(Paragraph(
            f"Declara-se, para os devidos efeitos, que <b>{student['name']}</b>, "
            f"aluno(a) nº {student['student_number']}, nascido(a) em {student['birth_date']}, "
            f"encontra-se regularmente matriculado(a) nesta instituição no ano letivo de "
            f"{data['academic_year']}, na turma <b>{data['class']['name']}</b>, período {data['class']['period']}.",
            self.styles["body"],
        ))
        if data.get("purpose"):
            content.append(Paragraph(
                f"A presente declaração destina-se a: {data['purpose']}.", self.styles["body"]
            ))
        content.append(Paragraph(
            "Por ser verdade e me ter sido solicitado, passa-se a presente declaração, "
            "que vai assinada e autenticada com o carimbo em uso nesta escola.",
            self.styles["body"],
        ))
        content += self._footer()
        return self._build(content, "DECLARATION")

    # ==================== TRANSCRIPT ====================

    def transcript(self, data: Dict[str, Any]) -> bytes:
        student = data["student"]
        content = self._header()
        content.append(Paragraph("HISTÓRICO ESCOLAR", self.styles["title"]))
        content.append(Paragraph(
            f"<b>Aluno:</b> {student['name']} &nbsp;&nbsp; <b>Nº:</b> {student['student_number']} "
            f"&nbsp;&nbsp; <b>Nascimento:</b> {student['birth_date']}",
            self.styles["body"],
        ))

        for year in data["years"]:
            content.append(Paragraph(
                f"Ano letivo {year['academic_year']} · Turma {year['class_name']} · {year['status']}",
                self.styles["section"],
            ))
            rows = [["Disciplina", "Média", "Resultado"]]
            for subject in year["subjects"]:
                rows.append([subject["subject"], _fmt(subject["average"]), subject["status"]])
            rows.append(["Média do ano", _fmt(year["average"]), ""])
            content.append(self._table(rows, [9 * cm, 3.5 * cm, 4.5 * cm]))

        content.append(Spacer(1, 12))
        content.append(Paragraph(
            f"<b>Média global:</b> {_fmt(data['overall_average'])} &nbsp;&nbsp; "
            f"<b>Situação:</b> {data['status']}",
            self.styles["body"],
        ))
        content += self._footer()
        return self._build(content, "TRANSCRIPT")

    # ==================== INVOICE ====================

    def invoice(self, data: Dict[str, Any]) -> bytes:
        content = self._header()
        content.append(Paragraph(
            f"{'FATURA-RECIBO' if data['is_paid'] else 'FATURA'} {data['document_number']}",
            self.styles["title"],
        ))
        content.append(Paragraph(
            f"<b>Aluno:</b> {data['student_name']} &nbsp;&nbsp; <b>Nº:</b> {data['student_number']}<br/>"
            f"<b>Referente a:</b> {data['period']} &nbsp;&nbsp; <b>Vencimento:</b> {data['due_date']}<br/>"
            f"<b>Estado:</b> {data['status']}",
            self.styles["body"],
        ))

        rows = [["Descrição", "Valor"], [data["description"], _kz(data["amount"])]]
        content.append(self._table(rows, [12 * cm, 5 * cm]))

        if data["payments"]:
            content.append(Paragraph("Pagamentos", self.styles["section"]))
            rows = [["Data", "Método", "Referência", "Valor"]]
            for payment in data["payments"]:
                rows.append([payment["paid_at"], payment["method"], payment["reference"] or "-", _kz(payment["amount"])])
            content.append(self._table(rows, [3.5 * cm, 4 * cm, 5 * cm, 4.5 * cm]))

        content.append(Spacer(1, 10))
        content.append(Paragraph(
            f"<b>Total pago:</b> {_kz(data['total_paid'])} &nbsp;&nbsp; "
            f"<b>Em dívida:</b> {_kz(data['remaining_balance'])}",
            self.styles["right"],
        ))
        content += self._footer(place_date=False)
        return self._build(content, "INVOICE")


pdf_service = PdfService()
