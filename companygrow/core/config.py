from pathlib import Path
import os

from dotenv import load_dotenv

load_dotenv()

# Raíz del paquete companygrow/  ->  .../companygrow
PKG_DIR = Path(__file__).resolve().parents[1]
REPO_ROOT = PKG_DIR.parent

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{REPO_ROOT / 'companygrow.db'}")
DEV_AUTO_CREATE = os.getenv("DEV_AUTO_CREATE", "1" if DATABASE_URL.startswith("sqlite") else "0") == "1"

SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
# 7 días, igual que el cliente (token guardado en localStorage)
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))

CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS_LIST = [o.strip() for o in CORS_ORIGINS.split(",") if o.strip()] or ["http://localhost:3000"]

AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "10/15minutes")
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "1") == "1"

RESET_CODE_TTL_SECONDS = int(os.getenv("RESET_CODE_TTL_SECONDS", "600"))

# === SMTP (sin host/credenciales se registra el correo en el log) ===
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASS = os.getenv("SMTP_PASS")
SMTP_FROM = os.getenv("SMTP_FROM", SMTP_USER or "no-reply@companygrow.com")

# === Uploads (avatars, course images) ===
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", REPO_ROOT / "uploads")).resolve()
AVATARS_DIR = UPLOAD_DIR / "avatars"


def ensure_upload_dirs() -> None:
    AVATARS_DIR.mkdir(parents=True, exist_ok=True)


def upload_url_for(abs_path: Path) -> str:
    """Devuelve /uploads/... para un Path dentro de UPLOAD_DIR."""
    rel = abs_path.resolve().relative_to(UPLOAD_DIR)
    return f"/uploads/{rel.as_posix()}"
