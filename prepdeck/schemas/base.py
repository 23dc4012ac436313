from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from prepdeck.errors import SchemaViolation

M = TypeVar("M", bound=BaseModel)


class DocumentModel(BaseModel):
    """Base for stored documents: camelCase on the wire, no type coercion."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        extra="ignore",
    )

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


def error_details(exc: ValidationError) -> list[dict]:
    return [
        {"loc": [str(part) for part in err["loc"]], "msg": err["msg"], "type": err["type"]}
        for err in exc.errors(include_url=False)
    ]


def parse_document(model: type[M], raw: Any) -> M:
    """Turn an untyped map (storage read, request body) into a validated model."""
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(by_alias=True, mode="json")
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise SchemaViolation(f"Invalid {model.__name__} document", details=error_details(exc)) from exc


def parse_with(adapter: TypeAdapter, raw: Any, name: str):
    try:
        return adapter.validate_python(raw)
    except ValidationError as exc:
        raise SchemaViolation(f"Invalid {name} document", details=error_details(exc)) from exc


def http_url(value):
    if value is not None and not value.startswith(("http://", "https://")):
        raise ValueError("must be an http(s) URL")
    return value
