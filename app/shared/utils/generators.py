"""ID generators: CUID2 for stored rows, UUID4 for request tracing."""

import uuid

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2) for a new row."""
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_request_id() -> str:
    """New request/correlation ID when the client sent none (or an unsafe one)."""
    return str(uuid.uuid4())
