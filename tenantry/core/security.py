"""Password hashing."""

from passlib.context import CryptContext

# pbkdf2 has no input length limit and needs no native backend
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a plaintext password for storage."""
    return pwd_context.hash(password)
