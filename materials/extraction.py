import io
import logging
import os
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional
from urllib.parse import urlparse

import PyPDF2
import docx
import pytesseract
import requests
from django.conf import settings
from pdf2image import convert_from_bytes
from pdf2image.exceptions import PDFPopplerTimeoutError
from PIL import Image, UnidentifiedImageError
from pptx import Presentation

from core.exceptions import ExtractionError
from .arabic import normalize_arabic_text

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
FETCH_CHUNK_SIZE = 64 * 1024

PDF_MIME = 'application/pdf'
DOCX_MIME = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
PPTX_MIME = 'application/vnd.openxmlformats-officedocument.presentationml.presentation'
JSON_MIME = 'application/json'

EXTENSION_MIME_TYPES = {
    '.pdf': PDF_MIME,
    '.docx': DOCX_MIME,
    '.pptx': PPTX_MIME,
    '.txt': 'text/plain',
    '.md': 'text/markdown',
    '.json': JSON_MIME,
    '.png': 'image/png',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.webp': 'image/webp',
    '.tif': 'image/tiff',
    '.tiff': 'image/tiff',
}

ProgressCallback = Callable[[float], None]


@dataclass
class DocumentSource:
    """Where to read a document from. At least one of url/buffer is set."""
    url: Optional[str] = None
    buffer: Optional[bytes] = None
    mime_type: Optional[str] = None
    name: str = ''


@dataclass
class ExtractedText:
    text: str
    used_ocr: bool = False
    # set when the text layer failed and OCR recovered the document
    error: Optional[str] = None


def normalize_mime_type(mime_type: Optional[str]) -> str:
    return (mime_type or '').split(';', 1)[0].strip().lower()


def guess_mime_type(name: str) -> str:
    """Map a filename or URL path to a MIME type by extension."""
    path = urlparse(name).path if '://' in (name or '') else (name or '')
    ext = os.path.splitext(path.lower())[1]
    return EXTENSION_MIME_TYPES.get(ext, '')


def _log_progress(fraction: float):
    logger.debug(f"OCR progress: {round(fraction * 100)}%")


class TextExtractor:
    """
    Turns a document (URL or in-memory bytes) into normalized plain text.

    PDFs are read from their text layer first and fall back to OCR on
    rendered pages when that yields nothing. Images go straight to OCR.
    Unsupported types fail explicitly; placeholder text is never returned.
    """

    def __init__(self, max_file_size: int = MAX_FILE_SIZE, fetch_timeout: float = 30,
                 ocr_languages: str = 'ara+eng', ocr_page_timeout: float = 60,
                 ocr_timeout: float = 300, ocr_dpi: int = 200,
                 session: Optional[requests.Session] = None):
        self.max_file_size = max_file_size
        self.fetch_timeout = fetch_timeout
        self.ocr_languages = ocr_languages
        self.ocr_page_timeout = ocr_page_timeout
        self.ocr_timeout = ocr_timeout
        self.ocr_dpi = ocr_dpi
        self.session = session or requests.Session()

    def extract(self, source: DocumentSource, on_progress: Optional[ProgressCallback] = None) -> ExtractedText:
        data = source.buffer
        mime_type = normalize_mime_type(source.mime_type)

        if data is None:
            if not source.url:
                raise ExtractionError('No document URL or content given', kind=ExtractionError.FETCH_FAILED)
            data, fetched_type = self.fetch(source.url)
            mime_type = mime_type or normalize_mime_type(fetched_type)

        if len(data) > self.max_file_size:
            raise ExtractionError(f'Document is {len(data)} bytes (max {self.max_file_size})',
                                  kind=ExtractionError.FILE_TOO_LARGE,
                                  public_message='حجم الملف كبير جدًا (الحد الأقصى 10 ميجابايت)')

        # generic binary types tell us nothing; fall back to the extension
        if not mime_type or mime_type == 'application/octet-stream':
            mime_type = guess_mime_type(source.name or source.url or '') or mime_type

        result = self._extract_by_type(data, mime_type, on_progress or _log_progress)
        result.text = normalize_arabic_text(result.text)
        if not result.text:
            raise ExtractionError('No readable text could be extracted from the document',
                                  kind=ExtractionError.NO_TEXT_FOUND,
                                  public_message='لم يتم العثور على محتوى نصي في الملف')

        logger.info(f"Extracted {len(result.text)} chars from {mime_type}{' (using OCR)' if result.used_ocr else ''}")
        return result

    def fetch(self, url: str):
        """Download a document; returns (bytes, content_type). Not retried."""
        too_large = ExtractionError('Remote document exceeds the size limit',
                                    kind=ExtractionError.FILE_TOO_LARGE,
                                    public_message='حجم الملف كبير جدًا (الحد الأقصى 10 ميجابايت)')
        try:
            resp = self.session.get(url, timeout=self.fetch_timeout, stream=True)
            try:
                resp.raise_for_status()
                declared = resp.headers.get('Content-Length')
                if declared and declared.isdigit() and int(declared) > self.max_file_size:
                    raise too_large
                buf = io.BytesIO()
                for chunk in resp.iter_content(FETCH_CHUNK_SIZE):
                    buf.write(chunk)
                    if buf.tell() > self.max_file_size:
                        raise too_large
                return buf.getvalue(), resp.headers.get('Content-Type', '')
            finally:
                resp.close()
        except requests.RequestException as e:
            raise ExtractionError(f'Failed to fetch {url}: {e}', kind=ExtractionError.FETCH_FAILED,
                                  public_message='فشل في جلب الملف من الرابط') from e

    # -----------------------------
    # Format handlers
    # -----------------------------
    def _extract_by_type(self, data: bytes, mime_type: str, on_progress: ProgressCallback) -> ExtractedText:
        if mime_type.startswith('text/') or mime_type == JSON_MIME:
            return ExtractedText(data.decode('utf-8', errors='ignore'))
        if mime_type == PDF_MIME:
            return self._extract_pdf(data, on_progress)
        if mime_type.startswith('image/'):
            deadline = time.monotonic() + self.ocr_timeout
            text = self._ocr_image(self._open_image(data), deadline)
            on_progress(1.0)
            return ExtractedText(text, used_ocr=True)
        if mime_type == DOCX_MIME:
            return ExtractedText(self._extract_docx(data))
        if mime_type == PPTX_MIME:
            return ExtractedText(self._extract_pptx(data))

        raise ExtractionError(f'Unsupported document type: {mime_type or "unknown"}',
                              kind=ExtractionError.UNSUPPORTED_TYPE,
                              public_message='نوع الملف غير مدعوم')

    def _extract_pdf(self, data: bytes, on_progress: ProgressCallback) -> ExtractedText:
        layer_error = None
        try:
            text = self._pdf_text_layer(data)
            if text.strip():
                return ExtractedText(text)
            logger.info("PDF has no text layer, falling back to OCR")
        except Exception as e:
            layer_error = f'Text layer extraction failed: {e}'
            logger.warning(f"{layer_error}; falling back to OCR")

        text = self._ocr_pdf(data, on_progress)
        return ExtractedText(text, used_ocr=True, error=layer_error)

    @staticmethod
    def _pdf_text_layer(data: bytes) -> str:
        reader = PyPDF2.PdfReader(io.BytesIO(data))
        return '\n'.join(page.extract_text() or '' for page in reader.pages)

    def _ocr_pdf(self, data: bytes, on_progress: ProgressCallback) -> str:
        deadline = time.monotonic() + self.ocr_timeout
        try:
            pages = convert_from_bytes(data, dpi=self.ocr_dpi, timeout=self.ocr_timeout)
        except PDFPopplerTimeoutError as e:
            raise ExtractionError(f'Rendering PDF pages timed out: {e}', kind=ExtractionError.OCR_TIMEOUT) from e
        except Exception as e:
            raise ExtractionError(f'Failed to render PDF pages for OCR: {e}',
                                  kind=ExtractionError.NO_TEXT_FOUND) from e

        texts = []
        for index, page in enumerate(pages, start=1):
            texts.append(self._ocr_image(page, deadline))
            on_progress(index / len(pages))
        return '\n'.join(texts)

    @staticmethod
    def _open_image(data: bytes):
        try:
            return Image.open(io.BytesIO(data))
        except Image.DecompressionBombError as e:
            raise ExtractionError(f'Image exceeds the pixel limit: {e}', kind=ExtractionError.FILE_TOO_LARGE,
                                  public_message='أبعاد الصورة كبيرة جدًا') from e
        except (UnidentifiedImageError, OSError) as e:
            raise ExtractionError(f'Unreadable image: {e}', kind=ExtractionError.UNSUPPORTED_TYPE,
                                  public_message='تعذر قراءة الصورة') from e

    def _ocr_image(self, image, deadline: float) -> str:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise ExtractionError('OCR deadline exceeded', kind=ExtractionError.OCR_TIMEOUT)
        # pytesseract treats 0 as "no timeout"
        timeout = max(0.1, min(self.ocr_page_timeout, remaining))
        try:
            return pytesseract.image_to_string(image, lang=self.ocr_languages, timeout=timeout)
        except RuntimeError as e:
            if 'timeout' in str(e).lower():
                raise ExtractionError(f'OCR timed out after {timeout:.0f}s', kind=ExtractionError.OCR_TIMEOUT) from e
            raise ExtractionError(f'OCR failed: {e}', kind=ExtractionError.NO_TEXT_FOUND) from e
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            raise ExtractionError(f'OCR failed: {e}', kind=ExtractionError.NO_TEXT_FOUND) from e

    @staticmethod
    def _extract_docx(data: bytes) -> str:
        try:
            doc = docx.Document(io.BytesIO(data))
        except Exception as e:
            raise ExtractionError(f'Failed to read DOCX: {e}', kind=ExtractionError.NO_TEXT_FOUND) from e
        return '\n'.join(para.text for para in doc.paragraphs)

    @staticmethod
    def _extract_pptx(data: bytes) -> str:
        try:
            prs = Presentation(io.BytesIO(data))
        except Exception as e:
            raise ExtractionError(f'Failed to read PPTX: {e}', kind=ExtractionError.NO_TEXT_FOUND) from e
        return ''.join(shape.text + '\n' for slide in prs.slides for shape in slide.shapes
                       if hasattr(shape, 'text') and shape.text)


@lru_cache(maxsize=1)
def get_text_extractor() -> TextExtractor:
    return TextExtractor(
        max_file_size=settings.MAX_UPLOAD_SIZE,
        fetch_timeout=settings.FETCH_TIMEOUT,
        ocr_languages=settings.OCR_LANGUAGES,
        ocr_page_timeout=settings.OCR_PAGE_TIMEOUT,
        ocr_timeout=settings.OCR_TIMEOUT,
        ocr_dpi=settings.OCR_DPI,
    )


def extract_text(source: DocumentSource, on_progress: Optional[ProgressCallback] = None) -> ExtractedText:
    """Extract text with the process-wide extractor."""
    return get_text_extractor().extract(source, on_progress)
