from typing import Optional, Union
from uuid import UUID


def parse_uuid(value: Union[str, UUID, None]) -> Optional[UUID]:
    """Coerce a string or UUID to UUID; None if it is not a valid UUID."""
    if value is None:
        return None
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None
