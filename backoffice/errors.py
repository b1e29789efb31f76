"""
Back-Office Errors

Validation failures carry field-level detail so the HTTP layer can
report every problem with a payload at once.
"""

from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class ValidationError(Exception):
    """Input rejected before anything was written to the store."""
    
    def __init__(
        self,
        entity: str,
        errors: Dict[str, List[str]],
        message: Optional[str] = None,
    ):
        self.entity = entity
        self.errors = errors
        self.message = message or f"Invalid {entity} data"
        super().__init__(self.message)
    
    @classmethod
    def from_pydantic(cls, entity: str, exc: PydanticValidationError) -> "ValidationError":
        """Collapse pydantic error entries into field -> messages."""
        errors: Dict[str, List[str]] = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]) or "__root__"
            errors.setdefault(field, []).append(error["msg"])
        return cls(entity, errors)
    
    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


def validate_payload(
    model: Type[ModelT],
    data: Union[Mapping[str, Any], BaseModel],
    entity: str,
) -> ModelT:
    """
    Validate a plain record (or an already built model) against a schema.
    
    Raises:
        ValidationError: if the payload breaks any field constraint
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(entity, e) from e
