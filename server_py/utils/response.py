"""Response utilities."""
from typing import Any, Optional


def success_response(data: Any = None, message: Optional[str] = None) -> dict:
    """Create success response."""
    return {"success": True, "data": data, "message": message}
