# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Backup Storage Provider configuration base classes."""

from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError


class StorageConfig(BaseModel):
    """Base Pydantic model for a storage provider ``config`` map."""

    model_config = ConfigDict(validate_by_name=True, validate_by_alias=True)

    @classmethod
    def verror_to_fields(cls, ve: ValidationError) -> List[Tuple[str, str, str]]:
        """Convert a Pydantic ValidationError to ``(key, error type, message)`` tuples."""
        errors = []
        for error in ve.errors():
            key = ".".join(map(str, error["loc"]))
            errors.append((key, error["type"], error["msg"].replace("Field ", "")))
        return errors

    @classmethod
    def check(cls, config: Dict[str, str]) -> List[Tuple[str, str, str]]:
        """Validate a ``config`` map, returning the errors found."""
        try:
            cls(**config)
        except ValidationError as ve:
            return cls.verror_to_fields(ve)
        return []
