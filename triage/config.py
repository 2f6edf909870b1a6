"""Application configuration via Pydantic Settings.

NOTE: Every field maps an explicit env name (GEMINI_API_KEY, CSV_DATA_PATH,
etc.) to avoid silent misconfiguration. List values such as FALLBACK_OFFICES
are given as JSON, e.g. FALLBACK_OFFICES='["Астана", "Алматы"]'.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Gemini / Gemma generateContent endpoint
    gemini_api_key: str = Field(default="", validation_alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemma-3-4b-it", validation_alias="GEMINI_MODEL")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        validation_alias="GEMINI_BASE_URL",
    )
    gemini_max_requests_per_run: int = Field(default=0, validation_alias="GEMINI_MAX_REQUESTS_PER_RUN")
    gemini_min_delay_ms: int = Field(default=0, validation_alias="GEMINI_MIN_DELAY_MS")
    gemini_timeout_seconds: float = Field(default=30.0, validation_alias="GEMINI_TIMEOUT_SECONDS")

    # Datasets
    project_dir: str = Field(default=".", validation_alias="PROJECT_DIR")
    csv_data_path: str = Field(default="data", validation_alias="CSV_DATA_PATH")
    results_path: str = Field(default="data/routing_results.csv", validation_alias="RESULTS_PATH")

    # Routing
    home_country: str = Field(default="казахстан", validation_alias="HOME_COUNTRY")
    fallback_offices: list[str] = Field(
        default_factory=lambda: ["Астана", "Алматы"],
        validation_alias="FALLBACK_OFFICES",
    )

    # App
    debug: bool = Field(default=False, validation_alias="DEBUG")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
