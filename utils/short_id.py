import secrets
import string
from utils.logger_factory import new_logger

# Lowercase letters and digits, 36 possible characters
_ALPHABET = string.ascii_lowercase + string.digits


def generate_short_id(length: int = 10) -> str:
    """
    Generate a cryptographically secure short alphanumeric ID.

    Example:
        generate_short_id() -> "k3m9x7q2w5"
    """
    return ''.join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_unique_public_id(db, table_class, max_attempts: int = 5) -> str:
    """
    Generate a short ID not yet used as `public_id` in `table_class`.

    Raises RuntimeError if every attempt collides.
    """
    log = new_logger("generate_unique_public_id")
    for attempt in range(max_attempts):
        short_id = generate_short_id()
        if not db.query(table_class).filter_by(public_id=short_id).first():
            return short_id
        log.warning(f"ID collision for {table_class.__tablename__}: {short_id} (attempt {attempt + 1}/{max_attempts})")

    raise RuntimeError(f"Failed to generate unique public_id after {max_attempts} attempts")
