import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


APP_ENV = os.getenv("APP_ENV", "development")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./salon.db")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

BUSINESS_NAME = os.getenv("BUSINESS_NAME", "Hair Salon")
BUSINESS_HOURS_START = _get_int(os.getenv("BUSINESS_HOURS_START"), 9)
BUSINESS_HOURS_END = _get_int(os.getenv("BUSINESS_HOURS_END"), 18)
SLOT_INCREMENT_MINUTES = 30
MAX_APPOINTMENT_NOTES_LENGTH = 1000
SEED_DEFAULT_SERVICES = _get_bool(os.getenv("SEED_DEFAULT_SERVICES"), default=True)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

EMAIL_HOST = os.getenv("EMAIL_HOST", "smtp.sendgrid.net")
EMAIL_PORT = _get_int(os.getenv("EMAIL_PORT"), 587)
EMAIL_USERNAME = os.getenv("EMAIL_USERNAME", "apikey")
EMAIL_API_KEY = os.getenv("EMAIL_API_KEY", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", "noreply@salon.com")
EMAIL_USE_TLS = _get_bool(os.getenv("EMAIL_USE_TLS"), default=True)

TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID", "")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER", "")


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")

    if not 0 <= BUSINESS_HOURS_START < BUSINESS_HOURS_END <= 24:
        raise RuntimeError("BUSINESS_HOURS_START must be before BUSINESS_HOURS_END (0-24).")
