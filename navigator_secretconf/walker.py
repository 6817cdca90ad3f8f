"""
Field Walker — Visit secret string fields of a nested configuration model.

Secret fields are declared on pydantic models with ``Annotated``::

    class Database(BaseModel):
        hostname: str = "localhost"
        password: Annotated[str, Encrypted("k1")] = ""
        token: Optional[Annotated[str, Encrypted("k2")]] = None

The marker may annotate the field or a member of an Optional/Union field.
Placing it on items of a list or dict is rejected. Nested models,
optional nested models and lists/tuples/dicts holding models are walked
transparently.
"""
import types
import functools
import logging
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Optional, Union, get_args, get_origin

from pydantic import BaseModel, GetCoreSchemaHandler
from pydantic_core import core_schema

logger = logging.getLogger("navigator.secretconf")

_UNION_TYPES = tuple(
    t for t in (Union, getattr(types, "UnionType", None)) if t is not None
)


def _scalar_to_str(value: Any) -> Any:
    """Numbers written bare in a file (``Password: 12345``) are plaintext secrets."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


@dataclass(frozen=True)
class Encrypted:
    """Marks a string field as "encrypt this at rest".

    ``parameter`` is the field's secret. When empty, the store-wide secret
    is used instead. Numeric values are accepted and converted to strings.
    """

    parameter: str = ""

    def __get_pydantic_core_schema__(
        self, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_before_validator_function(
            _scalar_to_str, handler(source_type)
        )


def _find_marker(annotation: Any, in_container: bool = False) -> Optional[Encrypted]:
    """Search an annotation for an ``Encrypted`` marker.

    Raises:
        TypeError: The marker annotates items of a container type.
    """
    origin = get_origin(annotation)
    if origin is Annotated:
        for meta in annotation.__metadata__:
            if isinstance(meta, Encrypted):
                if in_container:
                    raise TypeError(
                        "Encrypted must annotate a string field, "
                        f"not the items of a container: {annotation}"
                    )
                return meta
        return _find_marker(get_args(annotation)[0], in_container)
    nested = in_container or origin not in _UNION_TYPES
    for arg in get_args(annotation):
        found = _find_marker(arg, nested)
        if found is not None:
            return found
    return None


@functools.lru_cache(maxsize=None)
def secret_fields(model_cls: type[BaseModel]) -> dict[str, str]:
    """Return the ``field name -> secret parameter`` table of a model class.

    Built once per class from pydantic field metadata and from markers
    nested in Optional/Union annotations.

    Raises:
        TypeError: A marker placed on container items, or secret fields
            on a frozen model (they are rewritten in place).
    """
    table: dict[str, str] = {}
    for name, info in model_cls.model_fields.items():
        marker = None
        for meta in info.metadata:
            if isinstance(meta, Encrypted):
                marker = meta
                break
        if marker is None:
            try:
                marker = _find_marker(info.annotation)
            except TypeError as err:
                raise TypeError(f"{model_cls.__name__}.{name}: {err}") from err
        if marker is None:
            continue
        if model_cls.model_config.get("frozen") or info.frozen:
            raise TypeError(
                f"{model_cls.__name__}.{name}: secret fields cannot be frozen"
            )
        table[name] = marker.parameter
    return table


def _model_types(annotation: Any):
    if get_origin(annotation) is None and isinstance(annotation, type):
        if issubclass(annotation, BaseModel):
            yield annotation
        return
    for arg in get_args(annotation):
        yield from _model_types(arg)


def check_model(model_cls: type[BaseModel], _seen: Optional[set] = None) -> None:
    """Build the secret tables of ``model_cls`` and every model it nests.

    Raises:
        TypeError: See :func:`secret_fields`.
    """
    seen = set() if _seen is None else _seen
    if model_cls in seen:
        return
    seen.add(model_cls)
    secret_fields(model_cls)
    for info in model_cls.model_fields.values():
        for nested in _model_types(info.annotation):
            check_model(nested, seen)


def _collect(
    obj: Any,
    fn: Callable[[str, str], str],
    staged: list[tuple[BaseModel, str, str]],
) -> None:
    if isinstance(obj, BaseModel):
        table = secret_fields(type(obj))
        for name in type(obj).model_fields:
            value = getattr(obj, name)
            if name in table:
                if isinstance(value, str):
                    staged.append((obj, name, fn(value, table[name])))
                continue
            _collect(value, fn, staged)
    elif isinstance(obj, (list, tuple)):
        for item in obj:
            _collect(item, fn, staged)
    elif isinstance(obj, dict):
        for item in obj.values():
            _collect(item, fn, staged)


def walk(doc: BaseModel, fn: Callable[[str, str], str]) -> int:
    """Replace every secret string field of ``doc`` with ``fn(value, parameter)``.

    Traversal is depth-first in field declaration order. All replacements
    are computed first and applied only when every call to ``fn``
    succeeded: an exception raised by ``fn`` propagates and leaves ``doc``
    untouched.

    Args:
        doc: Configuration model instance (must not be frozen).
        fn: Transformation for a single field value.

    Returns:
        Number of fields visited.
    """
    staged: list[tuple[BaseModel, str, str]] = []
    _collect(doc, fn, staged)
    for model, name, value in staged:
        setattr(model, name, value)
    logger.debug(
        "Walked %d secret field(s) of %s", len(staged), type(doc).__name__
    )
    return len(staged)
