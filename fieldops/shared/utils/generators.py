"""ID and value generators (CUID document ids, human-facing numbers)."""

import secrets

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_document_number(prefix: str, digits: int = 6) -> str:
    """Return a display number such as ``INV-042317`` (random, not sequential)."""
    upper = 10**digits
    return f"{prefix}-{secrets.randbelow(upper):0{digits}d}"
