from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Ensure environment variables from the repository root .env are available
# regardless of the working directory used to start the process.
ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(ROOT_DIR / ".env")


class Settings(BaseSettings):
  azure_openai_api_key: str | None = Field(default=None, alias="AZURE_OPENAI_API_KEY")
  azure_openai_endpoint: str = Field(default="", alias="AZURE_OPENAI_ENDPOINT")
  azure_openai_api_version: str = Field(default="2024-12-01-preview", alias="AZURE_OPENAI_API_VERSION")
  ocr_model: str = Field(default="gpt-4.1", alias="OCRBENCH_OCR_MODEL")
  image_model: str = Field(default="gpt-image-1", alias="OCRBENCH_IMAGE_MODEL")
  response_format: Literal["structured", "delimited"] = Field(default="structured", alias="OCRBENCH_RESPONSE_FORMAT")
  credential_mode: Literal["api_key", "managed"] = Field(default="api_key", alias="OCRBENCH_CREDENTIAL_MODE")
  detect_images: bool = Field(default=True, alias="OCRBENCH_DETECT_IMAGES")
  retry_max_attempts: int = Field(default=3, alias="OCRBENCH_RETRY_MAX_ATTEMPTS")
  retry_base_delay: float = Field(default=1.0, alias="OCRBENCH_RETRY_BASE_DELAY")
  retry_max_jitter: float = Field(default=1.0, alias="OCRBENCH_RETRY_MAX_JITTER")
  default_confidence: int = Field(default=90, alias="OCRBENCH_DEFAULT_CONFIDENCE")
  max_output_tokens: int = Field(default=8192, alias="OCRBENCH_MAX_OUTPUT_TOKENS")
  temperature: float | None = Field(default=0.1, alias="OCRBENCH_TEMPERATURE")
  log_level: str = Field(default="INFO", alias="LOG_LEVEL")
  structured_logging: bool = Field(default=True, alias="OCRBENCH_STRUCTURED_LOGGING")

  def ensure_endpoint(self) -> str:
    endpoint = (self.azure_openai_endpoint or "").strip()
    if not endpoint:
      return ""
    return endpoint.rstrip("/") + "/"

  class Config:
    case_sensitive = False
    populate_by_name = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  return Settings()  # type: ignore[arg-type]
