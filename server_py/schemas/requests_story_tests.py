"""Request/response models for the story test endpoint."""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class StoryTestRequest(BaseModel):
    """Generate a validated test file from a user story."""
    story: str = Field(..., min_length=1)
    workspace_root: Optional[str] = None
    max_attempts: int = Field(3, ge=1, le=10)
    extra_instructions: str = ""
    write_file: bool = False


class StoryTestData(BaseModel):
    """Outcome of one story test run."""
    file_name: str
    code: str
    passed: bool
    attempts: int
    last_error: Optional[str] = None
    framework: str
    matched_interfaces: List[str] = []
    matched_classes: List[str] = []
    warnings: List[str] = []
    events: List[Dict[str, Any]] = []
    written_path: Optional[str] = None
