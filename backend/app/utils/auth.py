from passlib.context import CryptContext
import os
import re

# Configure bcrypt rounds explicitly for predictable performance.
# Tests lower this through BCRYPT_ROUNDS to keep hashing fast.
_BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10") or 10)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=_BCRYPT_ROUNDS,
)

_PASSWORD_RULES = (
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"[0-9]"), "Password must contain at least one number"),
    (
        re.compile(r"[!@#$%^&*(),.?\":{}|<>]"),
        "Password must contain at least one special character (!@#$%^&*(),.?\":{}|<>)",
    ),
)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def password_problems(password: str) -> list[str]:
    """Return every strength rule ``password`` breaks, in display order."""
    problems = []
    if len(password) < 8:
        problems.append("Password must be at least 8 characters")
    problems.extend(msg for pattern, msg in _PASSWORD_RULES if not pattern.search(password))
    return problems


def normalize_email(email: str) -> str:
    """Return a normalized email address for comparison and storage."""
    return email.strip().lower()
