import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "default-secret-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'linksaver.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    METADATA_API_URL = os.environ.get("METADATA_API_URL", "https://api.microlink.io/")
    METADATA_FETCH_TIMEOUT = float(os.environ.get("METADATA_FETCH_TIMEOUT", "10"))
    METADATA_TRANSPORT = None
    VAULT_SCAN_SECONDS = float(os.environ.get("VAULT_SCAN_SECONDS", "2.0"))
    VAULT_SUCCESS_SECONDS = float(os.environ.get("VAULT_SUCCESS_SECONDS", "0.8"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    METADATA_API_URL = "http://metadata.test/"
    VAULT_SCAN_SECONDS = 0.0
    VAULT_SUCCESS_SECONDS = 0.0
