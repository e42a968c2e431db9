"""Core data types for the vargos runtime.

Function metadata mirrors the on-disk ``<id>.meta.json`` format
(camelCase keys on disk, snake_case attributes in Python).
"""

from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Union

Role = Literal["system", "user", "assistant", "tool"]


@dataclass
class FunctionInput:
    """A declared input parameter of a function."""
    name: str
    type: str
    description: str = ""
    default_value: Optional[Union[str, int, float]] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "description": self.description,
        }
        if self.default_value is not None:
            data["defaultValue"] = self.default_value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FunctionInput":
        return cls(
            name=data["name"],
            type=data.get("type", "unknown"),
            description=data.get("description", ""),
            default_value=data.get("defaultValue"),
        )


@dataclass
class FunctionOutput:
    """A declared output value of a function."""
    name: str
    type: str
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "type": self.type}
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FunctionOutput":
        return cls(
            name=data["name"],
            type=data.get("type", "unknown"),
            description=data.get("description"),
        )


@dataclass
class FunctionMetadata:
    """Metadata describing one function.

    Attributes:
        id: Directory name of the function. Implicit on disk, never
            stored in the metadata file, immutable once created.
        name: Display name
        category: A single category or a list of categories
        description: What the function does
        tags: Free-form tags used for semantic indexing
        required_env_vars: Environment variables the function needs
        input: Declared input parameters
        output: Declared output values
    """
    name: str
    id: str = ""
    category: Union[str, list[str]] = ""
    description: str = ""
    tags: list[str] = field(default_factory=list)
    required_env_vars: list[str] = field(default_factory=list)
    input: list[FunctionInput] = field(default_factory=list)
    output: list[FunctionOutput] = field(default_factory=list)

    def to_dict(self, include_id: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if include_id:
            data["id"] = self.id
        data.update({
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "tags": list(self.tags),
            "requiredEnvVars": list(self.required_env_vars),
            "input": [i.to_dict() for i in self.input],
            "output": [o.to_dict() for o in self.output],
        })
        return data

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        function_id: Optional[str] = None,
    ) -> "FunctionMetadata":
        return cls(
            id=function_id if function_id is not None else data.get("id", ""),
            name=data["name"],
            category=data.get("category", ""),
            description=data.get("description", ""),
            tags=list(data.get("tags", [])),
            required_env_vars=list(data.get("requiredEnvVars", [])),
            input=[FunctionInput.from_dict(i) for i in data.get("input", [])],
            output=[FunctionOutput.from_dict(o) for o in data.get("output", [])],
        )


@dataclass
class FunctionListResponse:
    """All discovered functions."""
    functions: list[FunctionMetadata]
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "functions": [f.to_dict() for f in self.functions],
            "total": self.total,
        }


@dataclass
class CreateFunctionInput:
    """Request to create a new function.

    ``metadata.id`` is ignored; the id is derived from ``metadata.name``.
    When ``code`` is None a stub entry file is generated.
    """
    metadata: FunctionMetadata
    code: Optional[str] = None


@dataclass
class Message:
    """A chat message."""
    role: Role
    content: str


@dataclass
class ChatResponse:
    """The assistant's reply to a chat call."""
    content: str
    role: str


@dataclass
class VectorIndexData:
    """One point to upsert into a collection.

    ``id`` is the caller's logical id; providers store the point under
    ``derive_point_id(id)``.
    """
    collection_name: str
    id: str
    vector: list[float]
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class VectorSearchOptions:
    """Options for a similarity search."""
    collection_name: str
    limit: int = 10
    threshold: Optional[float] = None
    filter: Optional[dict[str, Any]] = None


@dataclass
class VectorSearchResult:
    """A search hit."""
    id: str
    score: float
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "score": self.score, "payload": self.payload}

    def __repr__(self) -> str:
        return f"VectorSearchResult(id={self.id[:8]}..., score={self.score:.3f})"


@dataclass
class ShellHistoryEntry:
    """A completed shell command and what it printed."""
    command: str
    output: str
    exit_code: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {"command": self.command, "output": self.output, "exit_code": self.exit_code}
