import pytest
from docx import Document as DocxDocument
from PIL import Image
from pypdf import PdfWriter

from docarchive.services.text_extraction_service import EXTRACTION_ERROR_PREFIX, TextExtractionService
from docarchive.services.text_extractors import (
    DOCXExtractor,
    ImageOCRExtractor,
    PDF_PLACEHOLDER_TEXT,
    PDFExtractor,
    TextExtractionError,
    TextExtractorFactory,
    UNSUPPORTED_OFFICE_TEXT,
    clean_ocr_text,
)
from docarchive.services.text_extractors import image_extractor

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def test_clean_ocr_text():
    raw = "Nota  Fiscal\n\n\n nº 123 ★\tTotal: R$ 1.500,00 — pago"
    assert clean_ocr_text(raw) == "Nota Fiscal n 123 Total: R 1.500,00 pago"
    assert clean_ocr_text("Ação  judicial") == "Ação judicial"


def test_factory_selects_extractor_by_media_type():
    assert isinstance(TextExtractorFactory.get_extractor("image/png"), ImageOCRExtractor)
    assert isinstance(TextExtractorFactory.get_extractor("image/jpeg"), ImageOCRExtractor)
    assert isinstance(TextExtractorFactory.get_extractor(DOCX_MIME), DOCXExtractor)
    assert isinstance(TextExtractorFactory.get_extractor("application/msword"), DOCXExtractor)
    assert isinstance(TextExtractorFactory.get_extractor("application/pdf"), PDFExtractor)
    assert TextExtractorFactory.get_extractor("application/vnd.ms-excel") is None


def test_docx_paragraphs_and_tables(tmp_path):
    path = tmp_path / "contrato.docx"
    doc = DocxDocument()
    doc.add_paragraph("Contrato de locação")
    doc.add_paragraph("")
    table = doc.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Locador"
    table.rows[0].cells[1].text = "Maria"
    doc.save(path)

    text = DOCXExtractor().extract(path)
    assert text == "Contrato de locação\nLocador | Maria"


def test_unreadable_word_file_returns_sentinel(tmp_path):
    path = tmp_path / "antigo.doc"
    path.write_bytes(b"\xd0\xcf\x11\xe0 legacy binary")
    assert DOCXExtractor().extract(path) == UNSUPPORTED_OFFICE_TEXT


def test_pdf_without_text_layer_returns_placeholder(tmp_path):
    path = tmp_path / "scan.pdf"
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    with open(path, "wb") as fh:
        writer.write(fh)

    assert PDFExtractor().extract(path) == PDF_PLACEHOLDER_TEXT


def test_broken_pdf_raises(tmp_path):
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"not a pdf at all")
    with pytest.raises(TextExtractionError):
        PDFExtractor().extract(path)


def test_image_extractor_passes(tmp_path, monkeypatch):
    path = tmp_path / "scan.png"
    Image.new("RGB", (3000, 1000), "white").save(path)
    seen = []

    def fake_image_to_string(image, lang=None, config=None):
        seen.append((image.size, image.mode, lang, config))
        return "  Recibo  nº 42 ★ \n\n valor "

    monkeypatch.setattr(image_extractor.pytesseract, "image_to_string", fake_image_to_string)
    extractor = ImageOCRExtractor(languages="por+eng", max_dimension=2000)

    assert extractor.extract(path) == "Recibo  nº 42 ★ \n\n valor"
    assert extractor.extract(path, advanced=True) == "Recibo n 42 valor"

    quick, advanced = seen
    assert quick[1] == "L" and quick[2] == "por+eng"
    assert quick[3] == "--oem 1 --psm 3"
    assert max(advanced[0]) <= 2000
    assert "tessedit_char_whitelist" in advanced[3]


def test_transparent_background_becomes_white(tmp_path, monkeypatch):
    path = tmp_path / "assinatura.png"
    image = Image.new("RGBA", (40, 40), (0, 0, 0, 0))
    image.paste((0, 0, 0, 255), (15, 15, 25, 25))
    image.save(path)
    seen = []

    def fake_image_to_string(image, lang=None, config=None):
        seen.append(image)
        return "Assinatura"

    monkeypatch.setattr(image_extractor.pytesseract, "image_to_string", fake_image_to_string)
    assert ImageOCRExtractor().extract(path) == "Assinatura"

    ocr_input = seen[0]
    assert ocr_input.mode == "L"
    assert ocr_input.getpixel((5, 5)) > 200
    assert ocr_input.getpixel((20, 20)) < 50


def test_image_extractor_wraps_ocr_errors(tmp_path, monkeypatch):
    path = tmp_path / "scan.png"
    Image.new("RGB", (10, 10), "white").save(path)

    def failing(image, lang=None, config=None):
        raise image_extractor.pytesseract.TesseractNotFoundError()

    monkeypatch.setattr(image_extractor.pytesseract, "image_to_string", failing)
    with pytest.raises(TextExtractionError):
        ImageOCRExtractor().extract(path)


def test_quick_pass_never_raises(tmp_path):
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"garbage")

    text = TextExtractionService().extract_quick(path, "application/pdf")
    assert text.startswith(f"{EXTRACTION_ERROR_PREFIX}: ")


def test_unsupported_types_yield_empty_text(tmp_path):
    path = tmp_path / "planilha.xlsx"
    path.write_bytes(b"PK")
    service = TextExtractionService()
    assert service.extract_quick(path, "application/vnd.ms-excel") == ""
    assert service.extract_advanced(path, "application/vnd.ms-excel") == ""


def test_advanced_pass_reports_missing_file(tmp_path):
    with pytest.raises(TextExtractionError):
        TextExtractionService().extract_advanced(tmp_path / "gone.png", "image/png")


def test_word_quick_pass(tmp_path):
    path = tmp_path / "a.docx"
    doc = DocxDocument()
    doc.add_paragraph("Relatório anual")
    doc.save(path)
    assert TextExtractionService().extract_quick(path, DOCX_MIME) == "Relatório anual"
