import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Tankhah API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # License settings
    # Length of the implicit trial granted on first session (and of the offline fallback)
    trial_days: int = int(os.getenv("TRIAL_DAYS", "3"))
    # Emails allowed to redeem master keys; empty unless the deployment sets it
    admin_emails: list[str] = [e.lower() for e in _csv_env("ADMIN_EMAILS", "")]
    # Hard-coded permanent keys; they never touch the key registry
    master_admin_keys: list[str] = [
        k.upper() for k in _csv_env("MASTER_ADMIN_KEYS", "PERM-ADMIN-XXXX-YYYY-ZZZZ,TANKHAH-PRO-2024-FULL")
    ]


settings = Settings()  # Instantiate configuration
