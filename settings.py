# settings.py
from pydantic import BaseModel, Field
from dotenv import load_dotenv
import os

# Load variables from .env at import time
load_dotenv()

_PORT = int(os.getenv("PORT", "3000"))


class Settings(BaseModel):
    # Shared secret the frontend sends as "Authorization: Bearer <token>"
    backend_public_token: str = Field(default=os.getenv("BACKEND_PUBLIC_TOKEN", ""))

    # Provider (no key -> simulation mode)
    gemini_api_key: str = Field(default=os.getenv("GEMINI_API_KEY", ""))
    gemini_api_base: str = Field(default=os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"))
    veo_model: str = Field(default=os.getenv("VEO_MODEL", "veo-3.1-generate-001"))
    veo_fast_model: str = Field(default=os.getenv("VEO_FAST_MODEL", "veo-3.1-fast-generate-001"))
    provider_timeout_seconds: float = Field(default=float(os.getenv("PROVIDER_TIMEOUT_SEC", "120")))

    # Completion callbacks
    callback_url: str = Field(default=os.getenv("CALLBACK_URL", ""))
    callback_timeout_seconds: float = Field(default=float(os.getenv("CALLBACK_TIMEOUT_SEC", "10")))

    # Storage: "local" or "s3" ("object-store" is accepted as an alias)
    storage_provider: str = Field(default=os.getenv("STORAGE_PROVIDER", "local"))
    local_storage_dir: str = Field(default=os.getenv("LOCAL_STORAGE_DIR", "./storage"))
    app_base_url: str = Field(default=os.getenv("APP_BASE_URL", f"http://localhost:{_PORT}"))
    port: int = Field(default=_PORT)
    s3_bucket: str = Field(default=os.getenv("S3_BUCKET", ""))
    aws_region: str = Field(default=os.getenv("AWS_REGION", "us-east-1"))
    aws_access_key_id: str = Field(default=os.getenv("AWS_ACCESS_KEY_ID", ""))
    aws_secret_access_key: str = Field(default=os.getenv("AWS_SECRET_ACCESS_KEY", ""))
    s3_endpoint_url: str = Field(default=os.getenv("S3_ENDPOINT_URL", ""))
    s3_public_base: str = Field(default=os.getenv("S3_PUBLIC_BASE", ""))

    cors_origins: str = Field(default=os.getenv("CORS_ORIGINS", "*"))

    @property
    def uses_object_store(self) -> bool:
        return self.storage_provider.strip().lower() in {"s3", "object-store"}

    @property
    def simulation_mode(self) -> bool:
        return not self.gemini_api_key


settings = Settings()
