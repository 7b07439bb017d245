from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # Fallback provider (Pexels)
    pexels_api_key: str | None = Field(default=None, alias="PEXELS_API_KEY")
    pexels_api_url: str = Field(default="https://api.pexels.com", alias="PEXELS_API_URL")
    provider_timeout_s: float = Field(10.0, alias="PROVIDER_TIMEOUT_S")
    # Always prepended to fallback queries so results stay on-topic
    fallback_base_term: str = Field("water", alias="FALLBACK_BASE_TERM")

    # Object storage (S3-compatible, MinIO client)
    minio_endpoint: str = Field("localhost:9000", alias="MINIO_ENDPOINT")
    minio_access_key: str | None = Field(default=None, alias="MINIO_ACCESS_KEY")
    minio_secret_key: str | None = Field(default=None, alias="MINIO_SECRET_KEY")
    minio_bucket: str = Field("gallery", alias="MINIO_BUCKET")
    minio_secure: bool = Field(default=False, alias="MINIO_SECURE")
    minio_region: str | None = Field(default=None, alias="MINIO_REGION")
    storage_public_url: str | None = Field(default=None, alias="STORAGE_PUBLIC_URL")
    storage_timeout_s: float = Field(10.0, alias="STORAGE_TIMEOUT_S")

    photos_prefix: str = Field("photos/", alias="PHOTOS_PREFIX")
    videos_prefix: str = Field("videos/", alias="VIDEOS_PREFIX")
    collections_prefix: str = Field("collections/", alias="COLLECTIONS_PREFIX")

    # --- Search & paging ---
    match_threshold: float = Field(0.3, alias="MATCH_THRESHOLD")
    default_per_page: int = Field(20, alias="DEFAULT_PER_PAGE")

    # --- Catalog listing cache ---
    catalog_cache_ttl: float = Field(60.0, alias="CATALOG_CACHE_TTL")  # 0 disables
    catalog_cache_max: int = Field(64, alias="CATALOG_CACHE_MAX")
    disable_redis: bool = Field(default=True, alias="DISABLE_REDIS")
    redis_url: str | None = Field(default=None, alias="REDIS_URL")

    # Environment and CORS
    environment: str = Field("dev", alias="ENVIRONMENT")  # dev|prod
    allow_origins: str = Field("http://localhost:3000", alias="ALLOW_ORIGINS")
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(3000, alias="PORT")

    # --- Build info ---
    app_version: str = Field("0.1.0", alias="APP_VERSION")
    git_sha: str | None = Field(None, alias="GIT_SHA")

    def resolved_storage_url(self) -> str:
        """Base URL that object keys are appended to when building public links."""
        if self.storage_public_url:
            return self.storage_public_url.rstrip("/")
        scheme = "https" if self.minio_secure else "http"
        return f"{scheme}://{self.minio_endpoint}/{self.minio_bucket}"

    def resolved_redis_url(self) -> str | None:
        if self.disable_redis:
            return None
        return self.redis_url

    def origins(self) -> list[str]:
        return [o.strip() for o in self.allow_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
