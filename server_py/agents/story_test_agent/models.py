from enum import Enum
from typing import List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TestFramework(str, Enum):
    __test__ = False

    JEST = "jest"
    VITEST = "vitest"
    PLAYWRIGHT = "playwright"
    UNKNOWN = "unknown"


class PropertyInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str


class InterfaceInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    file_path: str
    properties: List[PropertyInfo] = []
    is_default_export: bool = False
    is_named_export: bool = False

    @property
    def is_exported(self) -> bool:
        return self.is_named_export or self.is_default_export


class ClassInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    file_path: str
    methods: List[str] = []
    is_default_export: bool = False
    is_named_export: bool = False

    @property
    def is_exported(self) -> bool:
        return self.is_named_export or self.is_default_export


class CodebaseIndex(BaseModel):
    model_config = ConfigDict(frozen=True)

    interfaces: List[InterfaceInfo] = []
    classes: List[ClassInfo] = []


class ParsedStory(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw_text: str
    entities: Set[str] = set()
    actions: Set[str] = set()


class SearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    matched_interfaces: List[InterfaceInfo] = []
    matched_classes: List[ClassInfo] = []

    @property
    def is_empty(self) -> bool:
        return not self.matched_interfaces and not self.matched_classes


class GeneratedArtifact(BaseModel):
    code: str
    file_name: str


class ExecutionResult(BaseModel):
    passed: bool
    error: Optional[str] = None


class ValidationOutcome(BaseModel):
    code: str
    file_name: str
    attempts: int = Field(ge=1)
    passed: bool
    last_error: Optional[str] = None

    @model_validator(mode="after")
    def _passed_has_no_error(self) -> "ValidationOutcome":
        if self.passed and self.last_error is not None:
            raise ValueError("a passing outcome cannot carry last_error")
        return self


class GitHubIssue(BaseModel):
    number: int
    title: str
    body: Optional[str] = None
    html_url: str = ""


class WorkflowResult(BaseModel):
    success: bool
    pr_url: Optional[str] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _one_outcome_field(self) -> "WorkflowResult":
        if self.success and (self.pr_url is None or self.error is not None):
            raise ValueError("a successful result carries pr_url and no error")
        if not self.success and (self.error is None or self.pr_url is not None):
            raise ValueError("a failed result carries error and no pr_url")
        return self
