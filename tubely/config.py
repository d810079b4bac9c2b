from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./tubely.db"

    # JWT
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 1 day

    # Server
    host: str = "0.0.0.0"
    port: int = 8091
    log_level: str = "info"

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:3000"

    # Object storage (S3 or any S3-compatible endpoint such as MinIO)
    s3_bucket: str = "tubely-videos"
    s3_region: str = "us-east-1"
    s3_endpoint_url: str = ""  # empty = AWS S3
    s3_access_key_id: str = ""  # empty = default boto3 credential chain
    s3_secret_access_key: str = ""
    # Public base URL for stored objects (CloudFront distribution or bucket URL)
    s3_cf_distribution: str = "http://localhost:9000/tubely-videos"

    # Local asset root (disk thumbnails) and scratch dir for uploads in flight
    assets_root: str = "./assets"
    tmp_dir: str = "./tmp"

    # Thumbnail storage: "memory" (lost on restart) or "disk" (under assets_root)
    thumbnail_storage: str = "memory"

    # External media tools
    ffprobe_bin: str = "ffprobe"
    ffmpeg_bin: str = "ffmpeg"
    media_tool_timeout_seconds: int = 600

    # Upload limits
    max_video_upload_bytes: int = 1 << 30  # 1 GB
    max_thumbnail_upload_bytes: int = 10 << 20  # 10 MB

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
