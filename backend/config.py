import os
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    ai_temperature: float = 0.3
    ai_max_output_tokens: int = 4096

    # Stored artifacts (uploaded resumes + preview images) and analysis records
    storage_dir: str = "data/uploads"
    kv_path: str = "data/kv.json"  # empty string keeps records in memory

    max_upload_size_mb: int = 5
    max_job_description_chars: int = 10000
    preview_resolution: int = 150  # DPI of the first-page preview image
    max_suggestion_managers: int = 256  # idle per-record suggestion state kept in memory
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
