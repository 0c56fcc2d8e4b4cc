import os
from typing import List
from dotenv import load_dotenv
from pydantic import BaseModel
from sqlalchemy.engine import URL

# Load environment variables from .env file if it exists
load_dotenv()

# Database configuration
DB_DRIVER = os.getenv("DB_DRIVER", "mysql+pymysql")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = int(os.getenv("DB_PORT", "3306"))
DB_USER = os.getenv("DB_USER", "root")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_NAME = os.getenv("DB_NAME", "form_app_db")

# DATABASE_URL overrides the individual settings, e.g. "sqlite:///./form_app.db"
DATABASE_URL = os.getenv("DATABASE_URL") or URL.create(
    DB_DRIVER,
    username=DB_USER,
    password=DB_PASSWORD or None,
    host=DB_HOST,
    port=DB_PORT,
    database=DB_NAME,
).render_as_string(hide_password=False)

# "sql" for the relational database, "memory" for the in-process fake
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sql")
SEED_SAMPLE_DATA = os.getenv("SEED_SAMPLE_DATA", "false").lower() == "true"
STRICT_STARTUP = os.getenv("STRICT_STARTUP", "false").lower() == "true"

# Upload configuration
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
UPLOAD_URL_PATH = "uploads"

# Application configuration
APP_ENV = os.getenv("APP_ENV", "development")
DEBUG = APP_ENV == "development"
PORT = int(os.getenv("PORT", "5000"))
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# API configuration
API_PREFIX = "/api"


class Settings(BaseModel):
    database_url: str = DATABASE_URL
    storage_backend: str = STORAGE_BACKEND
    seed_sample_data: bool = SEED_SAMPLE_DATA
    strict_startup: bool = STRICT_STARTUP
    upload_dir: str = UPLOAD_DIR
    upload_url_path: str = UPLOAD_URL_PATH
    cors_origins: List[str] = CORS_ORIGINS
    debug: bool = DEBUG
    port: int = PORT
