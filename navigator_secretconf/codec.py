"""
Document codec — Convert configuration models to and from file bytes.

JSON is written with orjson (2-space indent), YAML with PyYAML
``safe_dump`` keeping field declaration order. Both formats carry the
same data: whatever ``model_dump(mode="json", by_alias=True)`` produces, so
fields declared with ``Field(alias=...)`` are stored under their alias.
"""
import os
import logging
from typing import Any, Optional, TypeVar

import orjson
import yaml
from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from .exceptions import DeserializeFailed, SerializeFailed

logger = logging.getLogger("navigator.secretconf")

FORMATS = ("yaml", "json")

_EXTENSIONS = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}

ModelT = TypeVar("ModelT", bound=BaseModel)


def detect_format(path: str, default: str = "yaml") -> str:
    """Guess the file format from the extension of ``path``."""
    _, ext = os.path.splitext(path)
    return _EXTENSIONS.get(ext.lower(), default)


def _merge(base: Any, override: Any) -> Any:
    """Overlay parsed file data on top of the default document data.

    Mappings are merged key by key; any other value in ``override``
    replaces the one in ``base``.
    """
    if isinstance(base, dict) and isinstance(override, dict):
        merged = dict(base)
        for key, value in override.items():
            merged[key] = _merge(base.get(key), value)
        return merged
    return override


def serialize(doc: BaseModel, fmt: str = "yaml") -> bytes:
    """Serialize a configuration model.

    Raises:
        SerializeFailed: The model cannot be dumped or encoded.
    """
    try:
        data = doc.model_dump(mode="json", by_alias=True)
        if fmt == "json":
            return orjson.dumps(
                data, option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE
            )
        if fmt == "yaml":
            return yaml.safe_dump(
                data,
                sort_keys=False,
                allow_unicode=True,
                default_flow_style=False,
            ).encode("utf-8")
    except (PydanticSerializationError, TypeError, yaml.YAMLError) as err:
        raise SerializeFailed(
            f"cannot serialize {type(doc).__name__}: {err}"
        ) from err
    raise SerializeFailed(f"Unsupported config format: {fmt}")


def deserialize(
    data: bytes,
    model_cls: type[ModelT],
    fmt: str = "yaml",
    base: Optional[BaseModel] = None,
) -> ModelT:
    """Parse file bytes into a new ``model_cls`` instance.

    Values missing from the file keep the value they have in ``base``
    (usually the caller's default document).

    Raises:
        DeserializeFailed: Syntax error, non-mapping document or model
            validation error.
    """
    try:
        if fmt == "json":
            parsed = orjson.loads(data)
        elif fmt == "yaml":
            parsed = yaml.safe_load(data)
        else:
            raise DeserializeFailed(f"Unsupported config format: {fmt}")
    except (orjson.JSONDecodeError, yaml.YAMLError) as err:
        raise DeserializeFailed(f"invalid {fmt} document: {err}") from err
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise DeserializeFailed(
            f"{fmt} document must be a mapping, got {type(parsed).__name__}"
        )
    if base is not None:
        parsed = _merge(base.model_dump(mode="json", by_alias=True), parsed)
    try:
        return model_cls.model_validate(parsed)
    except ValidationError as err:
        raise DeserializeFailed(
            f"config does not match {model_cls.__name__}: {err}"
        ) from err
