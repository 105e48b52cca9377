"""Password hashing and checks on roles, schedules and contract types."""

from __future__ import annotations

import bcrypt

from jobboard.entities import Role

_DEFAULT_COST = 10
_MAX_PASSWORD_BYTES = 72

VALID_SCHEDULES = frozenset({"nocturno", "vespertino", "matutino", "rotativo"})

CONTRACT_TYPES = frozenset(
    {
        "medio tiempo",
        "tiempo completo",
        "practicante",
        "temporal",
        "proyecto",
        "freelance",
    }
)


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


def generate_password(password: str | bytes) -> str:
    """Return the bcrypt hash of a password."""
    raw = _as_bytes(password)
    if len(raw) > _MAX_PASSWORD_BYTES:
        raise ValueError("bcrypt: password length exceeds 72 bytes")
    return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=_DEFAULT_COST)).decode("ascii")


def compare_password(hashed_password: str | bytes, password: str | bytes) -> bool:
    """Tell whether a password matches a bcrypt hash; malformed hashes never match."""
    try:
        return bcrypt.checkpw(_as_bytes(password), _as_bytes(hashed_password))
    except ValueError:
        return False


def verify_role(role: Role | str) -> bool:
    """Return True if the role is one of the predefined roles."""
    return role in (Role.USER, Role.COMPANY)


def verify_schedule(schedule: str) -> None:
    """Raise ValueError unless the schedule is a known one."""
    if schedule not in VALID_SCHEDULES:
        raise ValueError("invalid schedule")


def verify_contract_type(contract: str) -> None:
    """Raise ValueError unless the contract type is a known one."""
    if contract not in CONTRACT_TYPES:
        raise ValueError("invalid contract")