# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Plain-text extraction from uploaded course documents.

Supported: pdf, doc, docx, ppt, pptx. Legacy binary doc/ppt files are
read with the docx/pptx readers, which only succeed when the file is
really in the newer format.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Union

import pdfplumber
from docx import Document
from pptx import Presentation


logger = logging.getLogger(__name__)

MIME_TYPES: Dict[str, str] = {
    'pdf': 'application/pdf',
    'doc': 'application/msword',
    'docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'ppt': 'application/vnd.ms-powerpoint',
    'pptx': 'application/vnd.openxmlformats-officedocument.presentationml.presentation',
}

SUPPORTED_EXTENSIONS = tuple(MIME_TYPES)


class DocumentExtractionError(Exception):
    """Raised when a supported document cannot be read."""
    pass


class UnsupportedDocumentError(DocumentExtractionError):
    """Raised for file extensions outside the supported set."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(
            f"Unsupported file type: {extension or '(none)'}. "
            f"Supported types: {', '.join(SUPPORTED_EXTENSIONS)}"
        )


@dataclass(frozen=True)
class ExtractedDocument:
    """Text pulled out of a document, tagged with its source format."""
    text: str
    source_format: str


def normalize_extension(extension: str) -> str:
    return extension.strip().lower().lstrip('.')


def mime_type_for(extension: str) -> str:
    """MIME type for a supported extension."""
    ext = normalize_extension(extension)
    if ext not in MIME_TYPES:
        raise UnsupportedDocumentError(ext)
    return MIME_TYPES[ext]


def _extract_pdf(data: bytes) -> str:
    parts = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            parts.append(page.extract_text() or "")
    return "\n".join(parts)


def _extract_docx(data: bytes) -> str:
    document = Document(io.BytesIO(data))
    return "\n".join(p.text for p in document.paragraphs if p.text.strip())


def _extract_pptx(data: bytes) -> str:
    presentation = Presentation(io.BytesIO(data))
    slides = []
    for slide in presentation.slides:
        texts = [
            shape.text_frame.text
            for shape in slide.shapes
            if shape.has_text_frame and shape.text_frame.text.strip()
        ]
        if texts:
            slides.append(" ".join(texts))
    return "\n\n".join(slides)


_EXTRACTORS = {
    'pdf': _extract_pdf,
    'doc': _extract_docx,
    'docx': _extract_docx,
    'ppt': _extract_pptx,
    'pptx': _extract_pptx,
}


def extract_text(data: bytes, extension: str) -> ExtractedDocument:
    """
    Extract plain text from document bytes.

    Args:
        data: Raw file contents
        extension: File extension, with or without the leading dot

    Returns:
        ExtractedDocument with the text and normalized extension

    Raises:
        UnsupportedDocumentError: If the extension is not supported
        DocumentExtractionError: If the file cannot be parsed
    """
    ext = normalize_extension(extension)
    extractor = _EXTRACTORS.get(ext)
    if extractor is None:
        raise UnsupportedDocumentError(ext)

    try:
        text = extractor(data)
    except Exception as e:
        # pdfminer and the OOXML readers raise their own exception types
        raise DocumentExtractionError(f"Could not read {ext} document: {e}") from e

    logger.debug(f"Extracted {len(text)} characters from {ext} document")
    return ExtractedDocument(text=text, source_format=ext)


def extract_file(path: Union[str, Path]) -> ExtractedDocument:
    """Read a document from disk and extract its text."""
    path = Path(path)
    return extract_text(path.read_bytes(), path.suffix)
