import io
import logging

from pdfminer.high_level import extract_text as extract_pdf_text
from pdfminer.pdfparser import PDFSyntaxError
from docx import Document as DocxDocument

from verifyai.config import ALLOWED_EXTENSIONS, MAX_FILE_SIZE_MB
from verifyai.exceptions import ExtractionError

logger = logging.getLogger("file_utils")


def allowed_file(filename: str) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS


def extract_text_from_file(content_bytes: bytes, filename: str) -> str:
    if not filename or not allowed_file(filename):
        raise ExtractionError(filename or "<unnamed>", "unsupported file type")

    size_mb = len(content_bytes) / (1024 * 1024)
    if size_mb > MAX_FILE_SIZE_MB:
        raise ExtractionError(filename, f"file exceeds {MAX_FILE_SIZE_MB}MB ({size_mb:.1f}MB)")

    ext = filename.rsplit(".", 1)[1].lower()
    try:
        if ext == "txt":
            text = content_bytes.decode("utf-8", errors="ignore")
        elif ext == "pdf":
            text = extract_pdf_text(io.BytesIO(content_bytes))
        else:
            doc = DocxDocument(io.BytesIO(content_bytes))
            text = "\n".join([p.text for p in doc.paragraphs])
    except PDFSyntaxError as e:
        raise ExtractionError(filename, "not a readable PDF") from e
    except Exception as e:
        logger.error(f"❌ Extraction failed for {filename}: {e}")
        raise ExtractionError(filename, str(e) or type(e).__name__) from e

    text = text.strip()
    if not text:
        raise ExtractionError(filename, "no text found")

    logger.info(f"📄 Extracted {len(text)} chars from {filename}")
    return text
