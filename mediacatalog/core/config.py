import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent.parent  # go up to project root
env_path = BASE_DIR / ".env.development"

load_dotenv(env_path)


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


class Settings:
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DB: str = os.getenv("MONGO_DB", "media_catalog")
    MONGO_COLLECTION: str = os.getenv("MONGO_COLLECTION", "videos")
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = _int_env("MONGO_SERVER_SELECTION_TIMEOUT_MS", 5000)

    AWS_S3_BUCKET: str = os.getenv("AWS_S3_BUCKET", "")
    AWS_REGION: str = os.getenv("AWS_REGION", "us-east-1")
    AWS_ACCESS_KEY_ID: str = os.getenv("AWS_ACCESS_KEY_ID", "")
    AWS_SECRET_ACCESS_KEY: str = os.getenv("AWS_SECRET_ACCESS_KEY", "")
    S3_ENDPOINT_URL: str = os.getenv("S3_ENDPOINT_URL", "")
    STORAGE_PUBLIC_BASE_URL: str = os.getenv("STORAGE_PUBLIC_BASE_URL", "")

    VIDEO_FOLDER: str = os.getenv("VIDEO_FOLDER", "videos")
    THUMBNAIL_FOLDER: str = os.getenv("THUMBNAIL_FOLDER", "thumbnails")
    MAX_UPLOAD_BYTES: int = _int_env("MAX_UPLOAD_BYTES", 500 * 1024 * 1024)
    MAX_THUMBNAIL_BYTES: int = _int_env("MAX_THUMBNAIL_BYTES", 5 * 1024 * 1024)
    STORAGE_UPLOAD_RETRIES: int = _int_env("STORAGE_UPLOAD_RETRIES", 1)
    STORAGE_RETRY_BASE_SEC: float = float(os.getenv("STORAGE_RETRY_BASE_SEC") or 0.5)

    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")

    DEFAULT_PAGE_SIZE: int = _int_env("DEFAULT_PAGE_SIZE", 12)
    MAX_PAGE_SIZE: int = _int_env("MAX_PAGE_SIZE", 100)
    SITE_URL: str = os.getenv("SITE_URL", "http://localhost:8000")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    CELERY_BROKER_URL: str = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    CELERY_RESULT_BACKEND: str = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")
    ORPHAN_GRACE_MINUTES: int = _int_env("ORPHAN_GRACE_MINUTES", 60)
    RECONCILE_INTERVAL_MINUTES: int = _int_env("RECONCILE_INTERVAL_MINUTES", 60)

    @property
    def cors_origins(self) -> list:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
