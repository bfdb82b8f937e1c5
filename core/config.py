from pydantic_settings import BaseSettings
from pydantic import ConfigDict

class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env", extra="ignore")

    ENV: str = "development"

    DATABASE_URL: str

    # Bearer tokens
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30

    # Server-side sessions
    SESSION_SECRET: str
    SESSION_COOKIE_NAME: str = "sessionId"
    SESSION_MAX_AGE_DAYS: int = 7
    SESSION_TOUCH_AFTER_HOURS: int = 24
    SESSION_COOKIE_SECURE: bool = False

    # Mail
    MAIL_USERNAME: str
    MAIL_PASSWORD: str
    MAIL_FROM: str
    MAIL_SERVER: str
    MAIL_PORT: int

    # Credential lifecycles
    FRONTEND_URL: str = "http://localhost:3000"
    PASSWORD_RESET_EXPIRE_MINUTES: int = 10
    VERIFICATION_CODE_EXPIRE_MINUTES: int = 1

    # Object storage
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str | None = None
    AWS_SECRET_ACCESS_KEY: str | None = None
    AWS_S3_BUCKET_NAME: str = "marketplace-uploads"
    SIGNED_URL_EXPIRES_SECONDS: int = 3600

    # Number of reverse proxies in front of the app
    TRUST_PROXY_HOPS: int = 1

    DEFAULT_ADMIN_EMAIL: str = "admin@admin.com"
    DEFAULT_ADMIN_PASSWORD: str | None = None

    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]


settings = Settings()
