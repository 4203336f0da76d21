"""Field checks shared by the plan services. Each raises ``ValidationError``."""

from urllib.parse import urlparse

from fitadmin.errors import ValidationError

# Largest value a SQLite INTEGER column can hold.
MAX_INTEGER = 2**63 - 1


def require_name(value: str | None, label: str = "Name") -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()


def require_choice(value: str, choices: tuple[str, ...], label: str) -> str:
    if value not in choices:
        raise ValidationError(f"{label} must be one of: {', '.join(choices)}")
    return value


def in_range(value: int | None, minimum: int, label: str, maximum: int = MAX_INTEGER) -> None:
    """Check ``minimum <= value <= maximum``; ``None`` passes (optional fields)."""
    if value is None:
        return
    if value < minimum:
        raise ValidationError(f"{label} must be at least {minimum}")
    if value > maximum:
        raise ValidationError(f"{label} must be at most {maximum}")


def optional_url(value: str | None, label: str) -> str | None:
    """Normalize '' to None and require an absolute http(s) URL otherwise."""
    if value is None or value.strip() == "":
        return None
    parsed = urlparse(value.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"{label} must be a valid URL")
    return value.strip()


def reject_unknown_fields(changes: dict, allowed: set[str], entity: str) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"Cannot update {entity} field(s): {', '.join(sorted(unknown))}")
