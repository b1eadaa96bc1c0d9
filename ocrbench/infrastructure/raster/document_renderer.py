"""Document decoding for the canvas.

A :class:`DocumentHandle` is opened once per loaded file and reused for every
page turn or zoom change.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import fitz  # type: ignore
import numpy as np

from ocrbench.domain.exceptions import RenderError
from ocrbench.domain.value_objects.source_context import FileType

from .image_processor import decode_image, ensure_bgr, scale_image

logger = logging.getLogger(__name__)


class DocumentHandle(ABC):
    """An opened source file that can render any of its pages."""

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Number of pages in the document."""

    @abstractmethod
    def render_page(self, page_number: int, zoom: int) -> np.ndarray:
        """Render the 1-based ``page_number`` at ``zoom`` percent as a BGR buffer."""

    def close(self) -> None:
        """Release any resources held by the handle."""

    def _check_page(self, page_number: int) -> None:
        if page_number < 1 or page_number > self.page_count:
            raise RenderError(f"Page {page_number} is out of range (1-{self.page_count}).")


class PdfDocumentHandle(DocumentHandle):
    """PyMuPDF document kept open across page navigation."""

    def __init__(self, document: "fitz.Document") -> None:
        self._document = document

    @property
    def page_count(self) -> int:
        return self._document.page_count

    def render_page(self, page_number: int, zoom: int) -> np.ndarray:
        self._check_page(page_number)
        scale = zoom / 100.0
        try:
            page = self._document.load_page(page_number - 1)
            pixmap = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
        except RuntimeError as exc:
            logger.exception("Failed to render PDF page %s", page_number)
            raise RenderError(cause=exc) from exc

        pixels = np.frombuffer(pixmap.samples, dtype=np.uint8).reshape(pixmap.height, pixmap.width, pixmap.n)
        # PyMuPDF yields RGB samples; buffers are kept in BGR.
        if pixmap.n >= 3:
            pixels = pixels[:, :, 2::-1] if pixmap.n == 3 else pixels[:, :, [2, 1, 0, 3]]
        return np.ascontiguousarray(ensure_bgr(pixels))

    def close(self) -> None:
        self._document.close()


class ImageDocumentHandle(DocumentHandle):
    """A single raster image, decoded once."""

    def __init__(self, pixels: np.ndarray) -> None:
        self._pixels = ensure_bgr(pixels)

    @property
    def page_count(self) -> int:
        return 1

    def render_page(self, page_number: int, zoom: int) -> np.ndarray:
        self._check_page(page_number)
        return np.ascontiguousarray(scale_image(self._pixels, zoom))


class DocumentRenderer:
    """Opens uploaded files as :class:`DocumentHandle` objects."""

    def open(self, data: bytes, file_type: FileType) -> DocumentHandle:
        if file_type == "pdf":
            return self._open_pdf(data)
        if file_type == "image":
            return ImageDocumentHandle(decode_image(data))
        raise RenderError(f"Unsupported file type: {file_type}")

    @staticmethod
    def _open_pdf(data: bytes) -> PdfDocumentHandle:
        try:
            document = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as exc:
            logger.warning("Unable to open PDF payload: %s", exc)
            raise RenderError(cause=exc) from exc

        if document.page_count < 1:
            document.close()
            raise RenderError("The PDF has no pages.")

        logger.debug("Opened PDF with %s pages", document.page_count)
        return PdfDocumentHandle(document)
