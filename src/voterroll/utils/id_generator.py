import uuid


def new_record_id() -> str:
    """Opaque store-assigned record identifier."""
    return uuid.uuid4().hex
