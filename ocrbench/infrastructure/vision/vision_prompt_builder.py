"""Utilities for constructing vision prompts for each workflow.

Each builder returns a :class:`VisionRequest` whose prompt and response
format match the configured response grammar.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from ocrbench.infrastructure.raster.image_processor import to_data_url

OCR_INSTRUCTIONS = (
    "You are an expert OCR system. Extract ALL visible text from this image with maximum accuracy.\n\n"
    "CRITICAL INSTRUCTIONS:\n"
    "1. Extract EVERY piece of text, no matter how small.\n"
    "2. Maintain exact formatting, spacing, and line breaks.\n"
    "3. Support multiple languages.\n"
    "4. Identify mathematical equations, formulas, and special characters.\n"
    "5. **Vector Notation**: Recognize vector arrows above characters. Represent them by placing a combining "
    "overline character (U+0305) over EACH character in the vector.\n"
    "6. Provide a confidence score for your extraction from 0-100.\n"
)

QAC_INSTRUCTIONS = (
    "You are an expert text and mathematical expression correction specialist. Analyze the following "
    "OCR-extracted text, using the provided image as the absolute source of truth.\n\n"
    "**CRITICAL INSTRUCTIONS:**\n"
    "1. Fix all spelling, grammar, and character recognition errors.\n"
    "2. Ensure formatting (spacing, line breaks) perfectly matches the image.\n"
    "3. Format ALL mathematical expressions for MS Word/Google Docs compatibility using proper Unicode symbols "
    "(e.g., superscripts x², subscripts H₂O, symbols ∫∑√π, and vectors with a combining overline U+0305 over "
    "EACH character).\n"
    "4. List every change you make. If no changes are needed, return an empty list of fixes.\n\n"
    "Original Text to Correct:\n---\n{original_text}\n---\n"
)

DETECT_INSTRUCTIONS = (
    "You are a document layout analyst. Locate every non-text visual element on this page: photographs, "
    "diagrams, charts, drawings, logos and figures. Ignore plain text, tables made only of text, and page "
    "decorations such as rules or borders.\n"
    "Express each region as percentages (0-100) of the full image: x and y of the top-left corner, then width "
    "and height. Add a short description of each element.\n"
)

ENHANCE_INSTRUCTIONS = (
    "You are an expert image restoration tool. Your task is to enhance the quality of this image for maximum "
    "clarity and readability, as if it were for high-accuracy OCR.\n\n"
    "CRITICAL INSTRUCTIONS:\n"
    "1. **Enhance Quality:** Improve sharpness, contrast, and resolution. Remove noise or compression artifacts.\n"
    "2. **Preserve Content ABSOLUTELY:** DO NOT alter, add, or remove ANY existing text, numbers, symbols, lines, "
    "diagrams, or markings.\n"
    "3. **No Creative Changes:** This is a technical restoration, not an artistic enhancement.\n"
)

COLORIZE_INSTRUCTION = (
    "4. **Apply Colorization:** Colorize the image realistically, but this must NOT interfere with the "
    "legibility or accuracy of the content.\n"
)

STRUCTURED_SUFFIX = "Return a JSON object that strictly adheres to the provided schema."

DELIMITED_OCR_SUFFIX = (
    "Respond in exactly this format and nothing else:\n"
    "TEXT: <all extracted text>\n---\nCONFIDENCE: <integer 0-100>"
)

DELIMITED_QAC_SUFFIX = (
    "Respond in exactly this format and nothing else:\n"
    "CORRECTED_TEXT: <the fully corrected text>\n---\n"
    "FIXES:\n<one fix per line as: original | corrected | type | description>\n"
    "Write FIXES: None when nothing was changed."
)

DELIMITED_DETECT_SUFFIX = (
    "Respond in exactly this format and nothing else:\n"
    "COORDINATES:\n<one region per line as: x, y, width, height, description>\n"
    "Write COORDINATES: None when there are no such elements."
)

OCR_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "text": {"type": "string", "description": "All extracted text from the image, preserving original formatting."},
        "confidence": {"type": "integer", "description": "Your confidence in the extraction accuracy from 0 to 100."},
    },
    "required": ["text", "confidence"],
    "additionalProperties": False,
}

QAC_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "correctedText": {"type": "string", "description": "The fully corrected text with properly formatted math expressions."},
        "fixes": {
            "type": "array",
            "description": "A list of fixes made.",
            "items": {
                "type": "object",
                "properties": {
                    "original": {"type": "string", "description": "The original incorrect text snippet."},
                    "corrected": {"type": "string", "description": "The corrected text snippet."},
                    "type": {"type": "string", "description": "The type of correction (e.g., 'Spelling', 'Formatting', 'Math')."},
                    "description": {"type": "string", "description": "A brief description of the fix."},
                },
                "required": ["original", "corrected", "type", "description"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["correctedText", "fixes"],
    "additionalProperties": False,
}

DETECT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "images": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "x": {"type": "number"},
                    "y": {"type": "number"},
                    "width": {"type": "number"},
                    "height": {"type": "number"},
                    "description": {"type": "string"},
                },
                "required": ["x", "y", "width", "height", "description"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["images"],
    "additionalProperties": False,
}


@dataclass(frozen=True)
class VisionRequest:
    """Encapsulates a single chat request to the vision model."""

    messages: List[dict[str, Any]]
    response_format: Optional[dict[str, Any]] = None


class VisionPromptBuilder:
    """Builds requests for the configured response grammar."""

    def __init__(self, response_format: str = "structured") -> None:
        if response_format not in {"structured", "delimited"}:
            raise ValueError(f"Unknown response format: {response_format}")
        self._structured = response_format == "structured"

    def build_ocr_request(self, image_base64: str) -> VisionRequest:
        suffix = STRUCTURED_SUFFIX if self._structured else DELIMITED_OCR_SUFFIX
        return self._request(OCR_INSTRUCTIONS + suffix, image_base64, "ocr_result", OCR_SCHEMA)

    def build_qac_request(self, original_text: str, image_base64: str) -> VisionRequest:
        prompt = QAC_INSTRUCTIONS.format(original_text=original_text)
        suffix = STRUCTURED_SUFFIX if self._structured else DELIMITED_QAC_SUFFIX
        return self._request(prompt + "\n" + suffix, image_base64, "qac_result", QAC_SCHEMA)

    def build_detect_request(self, image_base64: str) -> VisionRequest:
        suffix = STRUCTURED_SUFFIX if self._structured else DELIMITED_DETECT_SUFFIX
        return self._request(DETECT_INSTRUCTIONS + suffix, image_base64, "detected_images", DETECT_SCHEMA)

    def _request(self, prompt: str, image_base64: str, schema_name: str, schema: dict[str, Any]) -> VisionRequest:
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": to_data_url(image_base64)}},
                ],
            },
        ]
        response_format = None
        if self._structured:
            response_format = {
                "type": "json_schema",
                "json_schema": {"name": schema_name, "schema": schema, "strict": True},
            }
        return VisionRequest(messages=messages, response_format=response_format)


def build_enhance_prompt(colorize: bool) -> str:
    """Prompt for the image edit model; colorization is only requested when asked for."""
    prompt = ENHANCE_INSTRUCTIONS
    if colorize:
        prompt += COLORIZE_INSTRUCTION
    return prompt + "Return ONLY the enhanced image."
