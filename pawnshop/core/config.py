import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() not in ("false", "0", "no")


class Settings:
    PROJECT_NAME: str = "Pawnshop Ledger"
    USE_IN_MEMORY_DB: bool = _env_bool("USE_IN_MEMORY_DB", "true")
    MONGODB_URI: str = os.getenv("MONGODB_URI")
    MONGODB_DB_NAME: str = os.getenv("MONGODB_DB_NAME", "pawnshop")
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "120"))
    CORS_ORIGIN: str = os.getenv("CORS_ORIGIN", "*")
    SMS_API_URL: str = os.getenv("SMS_API_URL")
    SMS_API_TOKEN: str = os.getenv("SMS_API_TOKEN")
    SMS_SENDER_ID: str = os.getenv("SMS_SENDER_ID")
    SHOP_NAME: str = os.getenv("SHOP_NAME", "Pawn Shop")
    REDIS_URL: str = os.getenv("REDIS_URL")
    OTP_TTL_SECONDS: int = int(os.getenv("OTP_TTL_SECONDS", "600"))
    EXPOSE_OTP: bool = _env_bool("EXPOSE_OTP", "false")
    STORE_RETRY_ATTEMPTS: int = int(os.getenv("STORE_RETRY_ATTEMPTS", "3"))
    STORE_RETRY_DELAY_SECONDS: float = float(os.getenv("STORE_RETRY_DELAY_SECONDS", "1.0"))

    @property
    def cors_origins(self) -> list:
        return [o.strip() for o in (self.CORS_ORIGIN or "").split(",") if o.strip()] or ["*"]


settings = Settings()

if settings.JWT_SECRET_KEY == "change-me-in-production":
    print("DEBUG: JWT_SECRET_KEY is using the development default!")
