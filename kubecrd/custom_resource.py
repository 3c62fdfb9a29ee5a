"""Custom resource root types generated from a spec type and resource options.

``custom_resource(**options)`` returns a function that takes a spec type and
returns a new root type.  The root type holds ``metadata``, ``spec`` and,
when a status is declared, ``status``.  It knows its group, version and kind,
serialises to the Kubernetes wire form, and builds its CustomResourceDefinition.

Spec and status types are usually dataclasses.  Field names are written in
camelCase.  Field metadata may hold ``name`` (the JSON name),
``skip_if_none`` (leave the field out when it is None) and ``description``.
A type can take over any of these steps by providing ``to_dict()``, a
``from_dict(data)`` classmethod or a ``json_schema()`` classmethod.
"""

from __future__ import annotations

import ast
import builtins
import copy
import dataclasses
import enum
import inspect
import types
import typing
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any, ClassVar, Union

from kubecrd.attrs import KubeAttrs, KubeAttrsError
from kubecrd.crd import build_crd

__all__ = ["CustomResource", "custom_resource"]

_NONE_TYPE = type(None)
_MISSING = dataclasses.MISSING
_BUILTINS: dict[str, Any] = dict(inspect.getmembers(builtins))


def _camel_case(name: str) -> str:
    first, *rest = name.split("_")
    return first + "".join(part[:1].upper() + part[1:] for part in rest)


def _json_name(f: dataclasses.Field) -> str:
    return f.metadata.get("name") or _camel_case(f.name)


def _field_default(f: dataclasses.Field) -> Any:
    if f.default is not _MISSING:
        return f.default
    if f.default_factory is not _MISSING:
        return f.default_factory()
    return _MISSING


def _members(obj: Any) -> dict[str, Any]:
    try:
        return dict(inspect.getmembers(obj))
    except Exception:
        return {}


class _AnnotationResolver:
    """Resolves annotation strings by walking their syntax tree; nothing is run."""

    def __init__(self, namespace: Mapping[str, Any]):
        self._namespace = namespace

    def resolve(self, annotation: Any) -> Any:
        if annotation is None:
            return _NONE_TYPE
        if isinstance(annotation, str):
            try:
                tree = ast.parse(annotation.strip(), mode="eval")
            except SyntaxError:
                raise TypeError(f"invalid type annotation {annotation!r}") from None
            annotation = self._node(tree.body)
            if annotation is None:
                return _NONE_TYPE
        if typing.get_origin(annotation) is typing.Annotated:
            annotation = typing.get_args(annotation)[0]
        return annotation

    def _lookup(self, name: str) -> Any:
        if name in self._namespace:
            return self._namespace[name]
        if name in _BUILTINS:
            return _BUILTINS[name]
        raise TypeError(f"cannot resolve name {name!r} in type annotation")

    def _node(self, node: ast.AST) -> Any:
        if isinstance(node, ast.Name):
            return self._lookup(node.id)
        if isinstance(node, ast.Attribute):
            base = self._node(node.value)
            members = _members(base)
            if node.attr not in members:
                raise TypeError(
                    f"cannot resolve attribute {node.attr!r} in type annotation"
                )
            return members[node.attr]
        if isinstance(node, ast.Subscript):
            base = self._node(node.value)
            index = node.slice
            if isinstance(index, ast.Tuple):
                arg: Any = tuple(self._node(item) for item in index.elts)
            else:
                arg = self._node(index)
            return base[arg]
        if isinstance(node, ast.Tuple):
            return tuple(self._node(item) for item in node.elts)
        if isinstance(node, ast.List):
            return [self._node(item) for item in node.elts]
        if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
            left = self._node(node.left)
            right = self._node(node.right)
            return Union[left, right]
        if isinstance(node, ast.Constant):
            if node.value is None or node.value is Ellipsis:
                return node.value
            if isinstance(node.value, str):
                return self.resolve(node.value)
        raise TypeError(f"unsupported type annotation syntax: {ast.dump(node)}")


def _namespace_for(owner: type) -> dict[str, Any]:
    namespace: dict[str, Any] = {}
    module = inspect.getmodule(owner)
    if module is not None:
        namespace.update(_members(module))
    namespace.update(vars(owner))
    return namespace


def _type_hints(cls: type) -> dict[str, Any]:
    """Resolved field types of a dataclass, keyed by field name."""
    hints: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        owner = next(
            (
                base
                for base in cls.__mro__
                if f.name in base.__dict__.get("__annotations__", {})
            ),
            cls,
        )
        hints[f.name] = _AnnotationResolver(_namespace_for(owner)).resolve(f.type)
    return hints


def _split_optional(tp: Any) -> tuple[Any, bool]:
    """Return the type inside an ``X | None`` and whether it was optional."""
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = typing.get_args(tp)
        others = [arg for arg in args if arg is not _NONE_TYPE]
        if len(others) == 1 and len(others) < len(args):
            return others[0], True
        raise TypeError(f"unsupported union type {tp!r}")
    return tp, False


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def _parse_datetime(text: Any) -> datetime:
    if not isinstance(text, str):
        raise ValueError(f"expected a timestamp string, got {text!r}")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        value = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"invalid timestamp {text!r}") from None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_json(value: Any) -> Any:
    """Turn a Python value into plain JSON-compatible data."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, enum.Enum):
        return _to_json(value.value)
    if isinstance(value, datetime):
        return _format_datetime(value)
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        out = {}
        for f in dataclasses.fields(value):
            item = getattr(value, f.name)
            if item is None and f.metadata.get("skip_if_none"):
                continue
            out[_json_name(f)] = _to_json(item)
        return out
    if isinstance(value, Mapping):
        return {str(key): _to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    raise TypeError(f"cannot serialise value of type {type(value).__name__}")


def _sequence_item_type(tp: Any, origin: Any) -> Any | None:
    args = typing.get_args(tp)
    if origin in (list, Sequence) and len(args) == 1:
        return args[0]
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return args[0]
    return None


def _from_json(value: Any, tp: Any) -> Any:
    """Turn plain JSON data into a value of the given type."""
    if tp is Any:
        return value
    inner, optional = _split_optional(tp)
    if value is None:
        if optional:
            return None
        raise ValueError(f"unexpected null for {inner!r}")
    tp = inner
    if tp is Any:
        return value
    from_dict = getattr(tp, "from_dict", None)
    if isinstance(tp, type) and callable(from_dict):
        return from_dict(value)
    if tp is bool:
        if not isinstance(value, bool):
            raise ValueError(f"expected a boolean, got {value!r}")
        return value
    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"expected an integer, got {value!r}")
        return value
    if tp is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"expected a number, got {value!r}")
        return float(value)
    if tp is str:
        if not isinstance(value, str):
            raise ValueError(f"expected a string, got {value!r}")
        return value
    if tp is datetime:
        return _parse_datetime(value)
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        try:
            return tp(value)
        except ValueError:
            raise ValueError(f"unknown variant {value!r} for {tp.__name__}") from None
    origin = typing.get_origin(tp)
    item_type = _sequence_item_type(tp, origin)
    if item_type is not None:
        if not isinstance(value, list):
            raise ValueError(f"expected a list, got {value!r}")
        items = [_from_json(item, item_type) for item in value]
        return tuple(items) if origin is tuple else items
    if origin in (dict, Mapping):
        key_type, value_type = typing.get_args(tp)
        if key_type is not str:
            raise TypeError(f"unsupported mapping key type {key_type!r}")
        if not isinstance(value, Mapping):
            raise ValueError(f"expected an object, got {value!r}")
        return {key: _from_json(item, value_type) for key, item in value.items()}
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return _dataclass_from_json(value, tp)
    raise TypeError(f"unsupported type {tp!r}")


def _dataclass_from_json(data: Any, cls: type) -> Any:
    if not isinstance(data, Mapping):
        raise ValueError(f"expected an object for {cls.__name__}, got {data!r}")
    hints = _type_hints(cls)
    kwargs = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        key = _json_name(f)
        if key in data:
            kwargs[f.name] = _from_json(data[key], hints[f.name])
        elif f.default is not _MISSING or f.default_factory is not _MISSING:
            continue
        elif _split_optional(hints[f.name])[1]:
            kwargs[f.name] = None
        else:
            raise ValueError(f"missing field `{key}` in {cls.__name__}")
    return cls(**kwargs)


def _type_schema(tp: Any) -> dict[str, Any]:
    inner, optional = _split_optional(tp)
    schema = _plain_schema(inner)
    if optional:
        schema = {**schema, "nullable": True}
    return schema


def _plain_schema(tp: Any) -> dict[str, Any]:
    custom = getattr(tp, "json_schema", None)
    if isinstance(tp, type) and callable(custom):
        return copy.deepcopy(custom())
    if tp is Any:
        return {"x-kubernetes-preserve-unknown-fields": True}
    if tp is bool:
        return {"type": "boolean"}
    if tp is int:
        return {"type": "integer", "format": "int64"}
    if tp is float:
        return {"type": "number", "format": "double"}
    if tp is str:
        return {"type": "string"}
    if tp is datetime:
        return {"type": "string", "format": "date-time"}
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        values = [_to_json(member.value) for member in tp]
        if all(isinstance(v, str) for v in values):
            return {"type": "string", "enum": values}
        if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
            return {"type": "integer", "enum": values}
        raise TypeError(f"enum {tp.__name__} mixes value types")
    origin = typing.get_origin(tp)
    item_type = _sequence_item_type(tp, origin)
    if item_type is not None:
        return {"type": "array", "items": _type_schema(item_type)}
    if origin in (dict, Mapping):
        key_type, value_type = typing.get_args(tp)
        if key_type is not str:
            raise TypeError(f"unsupported mapping key type {key_type!r}")
        return {"type": "object", "additionalProperties": _type_schema(value_type)}
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return _dataclass_schema(tp)
    raise TypeError(f"cannot derive a schema for {tp!r}")


def _dataclass_schema(cls: type) -> dict[str, Any]:
    hints = _type_hints(cls)
    properties: dict[str, Any] = {}
    required: list[str] = []
    for f in dataclasses.fields(cls):
        key = _json_name(f)
        prop = _type_schema(hints[f.name])
        default = _field_default(f)
        if default is not _MISSING and default is not None:
            prop["default"] = _to_json(default)
        description = f.metadata.get("description")
        if description:
            prop["description"] = description
        properties[key] = prop
        if default is _MISSING and not _split_optional(hints[f.name])[1]:
            required.append(key)
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = sorted(required)
    return schema


def _member_schema(tp: Any, derive: bool, role: str) -> dict[str, Any]:
    if not derive and not callable(getattr(tp, "json_schema", None)):
        raise KubeAttrsError(
            f"schema mode `manual` needs a json_schema() classmethod on the {role} type"
        )
    return _type_schema(tp)


class CustomResource:
    """Base of the root types that ``custom_resource`` generates."""

    _attrs: ClassVar[KubeAttrs | None] = None
    _spec_type: ClassVar[Any] = None
    _status_type: ClassVar[Any] = None

    def __init__(
        self,
        metadata: Mapping[str, Any] | None = None,
        spec: Any = None,
        status: Any = None,
    ):
        attrs = type(self)._options()
        if spec is None:
            if "Default" not in attrs.derives:
                raise TypeError(f"{type(self).__name__} requires a spec")
            spec = type(self)._spec_type()
        if status is not None and attrs.status is None:
            raise TypeError(f"{type(self).__name__} has no status")
        self.metadata: dict[str, Any] = dict(metadata or {})
        self.spec = spec
        if attrs.status is not None:
            self.status = status

    @classmethod
    def _options(cls) -> KubeAttrs:
        if cls._attrs is None:
            raise TypeError(f"{cls.__name__} was not created by custom_resource()")
        return cls._attrs

    @classmethod
    def new(cls, name: str, spec: Any) -> CustomResource:
        """Create a resource with the given name and spec."""
        return cls(metadata={"name": name}, spec=spec)

    @classmethod
    def group(cls) -> str:
        """The API group."""
        return cls._options().group

    @classmethod
    def kind(cls) -> str:
        """The kind."""
        return cls._options().kind

    @classmethod
    def version(cls) -> str:
        """The API version within the group."""
        return cls._options().version

    @classmethod
    def api_version(cls) -> str:
        """The ``group/version`` string."""
        return cls._options().api_version()

    @classmethod
    def plural(cls) -> str:
        """The plural resource name."""
        return cls._options().plural_name()

    @classmethod
    def crd_name(cls) -> str:
        """The name of the CustomResourceDefinition object."""
        return cls._options().crd_name()

    @classmethod
    def shortnames(cls) -> tuple[str, ...]:
        """The short names of the resource."""
        return cls._options().shortnames

    @classmethod
    def _root_schema(cls) -> dict[str, Any]:
        attrs = cls._options()
        derive = attrs.resolved_schema_mode().derive()
        properties = {"spec": _member_schema(cls._spec_type, derive, "spec")}
        if attrs.status is not None:
            if cls._status_type is None:
                raise KubeAttrsError(
                    f"status `{attrs.status}` was given by name only; "
                    "pass the status type to build a schema"
                )
            status = _member_schema(cls._status_type, derive, "status")
            properties["status"] = {**status, "nullable": True}
        return {
            "description": (
                f"Auto-generated derived type for {cls._spec_type.__name__} "
                "via `CustomResource`"
            ),
            "properties": properties,
            "required": ["spec"],
            "title": attrs.struct_name(),
            "type": "object",
        }

    @classmethod
    def crd(cls) -> dict[str, Any]:
        """The CustomResourceDefinition document for this resource."""
        attrs = cls._options()
        schema = None
        if attrs.apiextensions == "v1" and attrs.resolved_schema_mode().use_in_crd():
            schema = cls._root_schema()
        return build_crd(attrs, schema)

    def has_status(self) -> bool:
        """Whether a status is declared and currently set."""
        return type(self)._options().status is not None and self.status is not None

    def to_dict(self) -> dict[str, Any]:
        """The resource in its Kubernetes wire form."""
        out = {
            "apiVersion": self.api_version(),
            "kind": self.kind(),
            "metadata": _to_json(self.metadata),
            "spec": _to_json(self.spec),
        }
        if self.has_status():
            out["status"] = _to_json(self.status)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CustomResource:
        """Read a resource from its wire form."""
        attrs = cls._options()
        if not isinstance(data, Mapping):
            raise ValueError(f"expected an object, got {data!r}")
        for key in ("metadata", "spec"):
            if key not in data:
                raise ValueError(f"missing field `{key}`")
        metadata = data["metadata"]
        if not isinstance(metadata, Mapping):
            raise ValueError(f"expected an object for metadata, got {metadata!r}")
        spec = _from_json(data["spec"], cls._spec_type)
        status = None
        if attrs.status is not None and data.get("status") is not None:
            raw = data["status"]
            status = raw if cls._status_type is None else _from_json(raw, cls._status_type)
        return cls(metadata=metadata, spec=spec, status=status)

    def _fields(self) -> tuple[Any, Any, Any]:
        return self.metadata, self.spec, getattr(self, "status", None)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._fields() == other._fields()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        parts = f"metadata={self.metadata!r}, spec={self.spec!r}"
        if type(self)._options().status is not None:
            parts += f", status={self.status!r}"
        return f"{type(self).__name__}({parts})"


def custom_resource(**kwargs: Any):
    """Return a function that builds the root resource type for a spec type.

    The options are those of ``KubeAttrs.from_options``; ``status`` may be the
    status type itself rather than its name.
    """
    status_type = None
    status = kwargs.get("status")
    if isinstance(status, type):
        status_type = status
        kwargs["status"] = status.__name__
    attrs = KubeAttrs.from_options(**kwargs)

    def build(spec_type: type) -> type[CustomResource]:
        if not isinstance(spec_type, type):
            raise TypeError("a custom resource spec must be a class")
        if issubclass(spec_type, enum.Enum):
            raise KubeAttrsError("Enums or Unions can not be custom resource specs")
        name = attrs.struct_name()
        if spec_type.__name__ == name:
            raise KubeAttrsError(
                '`kind = "..."` must not equal the spec type name (this is generated)'
            )
        namespace = {
            "__doc__": (
                f"Auto-generated derived type for {spec_type.__name__} "
                "via `CustomResource`"
            ),
            "__module__": spec_type.__module__,
            "__qualname__": name,
            "_attrs": attrs,
            "_spec_type": spec_type,
            "_status_type": status_type,
        }
        return type(name, (CustomResource,), namespace)

    return build