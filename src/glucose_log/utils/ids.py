"""Entry identifier generation."""

import uuid


def generate_entry_id() -> str:
    """
    Generate a fresh, opaque entry identifier.

    Returns:
        Random UUID4 in canonical string form.
    """
    return str(uuid.uuid4())
