#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Base Contract Classes

Defines the foundation for all document contracts and the error taxonomy
shared by validation, layout and rendering.
Contracts are immutable, serializable, and validatable.

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
import json
import hashlib


class ContractError(Exception):
    """Base error for contract violations"""
    pass


@dataclass(frozen=True)
class SchemaViolation:
    """
    One broken structural invariant.

    ``path`` locates the offending element, e.g. ``blocks[3].annotations[0].span``.
    """
    path: str
    message: str
    code: str = "invalid"

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "message": self.message, "code": self.code}

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class DocumentValidationError(ContractError):
    """Raised when a document breaks one or more schema invariants"""
    def __init__(self, violations: Sequence[SchemaViolation]):
        self.violations = list(violations)
        super().__init__(
            f"Document validation failed with {len(self.violations)} violation(s): "
            + "; ".join(str(v) for v in self.violations)
        )


class ConfigurationError(ContractError):
    """Raised when a layout parameter is out of range, before layout starts"""
    def __init__(self, problems: Sequence[str]):
        self.problems = list(problems)
        super().__init__(f"Invalid layout configuration: {self.problems}")


class RenderBackendError(ContractError):
    """A format-specific failure that has no safe fallback"""
    def __init__(self, message: str, format: str = "", block_id: Optional[str] = None):
        self.format = format
        self.block_id = block_id
        location = f" (block '{block_id}')" if block_id else ""
        prefix = f"[{format}] " if format else ""
        super().__init__(f"{prefix}{message}{location}")


def calculate_checksum(data: Dict[str, Any]) -> str:
    """Checksum of a contract's canonical JSON form"""
    json_str = json.dumps(data, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(json_str.encode()).hexdigest()[:16]


class BaseContract(ABC):
    """
    Abstract base class for top-level contracts.

    All contracts must:
    1. Be serializable to JSON
    2. Be deserializable from JSON
    3. Be validatable
    """

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert contract to dictionary"""
        pass

    def to_json(self, indent: int = 2) -> str:
        """Convert contract to JSON string"""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseContract':
        """Create contract from dictionary"""
        pass

    @classmethod
    def from_json(cls, json_str: str) -> 'BaseContract':
        """Create contract from JSON string"""
        data = json.loads(json_str)
        return cls.from_dict(data)

    @abstractmethod
    def validate(self) -> List[Any]:
        """
        Validate contract.
        Returns list of validation problems (empty if valid).
        """
        pass

    def is_valid(self) -> bool:
        """Check if contract is valid"""
        return len(self.validate()) == 0

    def checksum(self) -> str:
        return calculate_checksum(self.to_dict())
