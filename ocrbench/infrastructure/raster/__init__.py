"""Raster infrastructure: document decoding, canvas geometry and encoding."""

from .canvas import CanvasGeometryManager, crop_original
from .document_renderer import DocumentHandle, DocumentRenderer, ImageDocumentHandle, PdfDocumentHandle
from .image_processor import decode_image, encode_base64, encode_png, to_data_url

__all__ = [
    "CanvasGeometryManager",
    "DocumentHandle",
    "DocumentRenderer",
    "ImageDocumentHandle",
    "PdfDocumentHandle",
    "crop_original",
    "decode_image",
    "encode_base64",
    "encode_png",
    "to_data_url",
]
