import hmac
import secrets
from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from companygrow.core.config import SECRET_KEY, ACCESS_TOKEN_EXPIRE_MINUTES, RESET_CODE_TTL_SECONDS

ALGORITHM = "HS256"
RESET_CODE_DIGITS = 6

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(subject: str, expires_delta: timedelta | None = None, **claims) -> str:
    """JWT HS256 con sub = id de usuario; claims extra opcionales (p.ej. role)."""
    now = datetime.now(tz=timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {**claims, "sub": subject, "iat": now, "exp": expire}
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    # lanza ExpiredSignatureError / JWTError; deps.py las traduce a ApiError
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])


def new_reset_code() -> tuple[str, datetime]:
    """Código numérico de 6 dígitos y su vencimiento."""
    code = f"{secrets.randbelow(10 ** RESET_CODE_DIGITS):0{RESET_CODE_DIGITS}d}"
    return code, datetime.now(timezone.utc) + timedelta(seconds=RESET_CODE_TTL_SECONDS)


def codes_match(expected: str, given: str) -> bool:
    return hmac.compare_digest(expected.encode(), given.strip().encode())
