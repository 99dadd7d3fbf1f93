import os
from pathlib import Path
from dotenv import load_dotenv

# Force-load .env (Windows-safe, reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=BASE_DIR / ".env")

DEFAULT_CLIENT_DOMAIN = "http://localhost:5173"
DEFAULT_CURRENCY = "usd"


def stripe_secret_key():
    return os.getenv("STRIPE_SECRET_KEY")


def stripe_webhook_secret():
    return os.getenv("STRIPE_WEBHOOK_SECRET")


def jwt_secret():
    return os.getenv("JWT_SECRET")


def jwt_algorithm():
    return os.getenv("JWT_ALGORITHM", "HS256")


def client_domain():
    return os.getenv("CLIENT_DOMAIN", DEFAULT_CLIENT_DOMAIN).rstrip("/")


def currency():
    # One currency for every checkout session
    return os.getenv("CURRENCY", DEFAULT_CURRENCY).lower()


def log_level():
    return os.getenv("LOG_LEVEL", "INFO").upper()
