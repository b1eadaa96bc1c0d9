from __future__ import annotations

# Single source of truth for static constants.

# Confidence reported when the model omits one (0-100 scale).
DEFAULT_CONFIDENCE = 90

# Zoom is a percentage of the native render size.
ZOOM_DEFAULT = 100
ZOOM_MIN = 25
ZOOM_MAX = 200
ZOOM_STEP = 25

# Selections at or below this size (raster pixels) resolve to "no crop".
MIN_SELECTION_SIZE = 10

# Detected sub-images at or below this size (percent of the page) are noise.
MIN_DETECTED_IMAGE_PERCENT = 5.0

# Lower-cased substrings that mark a transient service failure.
RETRYABLE_ERROR_PHRASES = (
    "503",
    "unavailable",
    "overloaded",
    "model is busy",
)

# Lower-cased substrings that mark a rejected credential.
INVALID_CREDENTIAL_PHRASES = (
    "api key not valid",
    "incorrect api key",
    "invalid api key",
    "access denied due to invalid subscription key",
    "401",
)

PDF_MEDIA_TYPE = "application/pdf"
IMAGE_MEDIA_PREFIX = "image/"

PAYLOAD_MIME = "image/png"
