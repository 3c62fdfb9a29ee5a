"""Options describing a custom resource, as given to the CRD generator."""

from __future__ import annotations

import difflib
import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

__all__ = ["KubeAttrsError", "SchemaMode", "KubeAttrs", "to_plural"]


class KubeAttrsError(ValueError):
    """Raised when custom resource options are missing, unknown or malformed."""

    def __init__(self, errors: str | Iterable[str]):
        if isinstance(errors, str):
            errors = [errors]
        self.errors: list[str] = list(errors)
        super().__init__("; ".join(self.errors))


class SchemaMode(enum.Enum):
    """How the JSON schema of a resource takes part in its CRD."""

    DISABLED = "disabled"
    MANUAL = "manual"
    DERIVED = "derived"

    def derive(self) -> bool:
        """Whether a schema is generated automatically."""
        return self is SchemaMode.DERIVED

    def use_in_crd(self) -> bool:
        """Whether a schema is placed in the generated CRD."""
        return self is not SchemaMode.DISABLED

    @classmethod
    def from_string(cls, value: str) -> SchemaMode:
        """Parse one of ``disabled``, ``manual`` or ``derived``."""
        try:
            return cls(value)
        except ValueError:
            raise KubeAttrsError(f"Unknown literal value `{value}`") from None


_REQUIRED = ("group", "version", "kind")
_STRINGS = ("struct", "plural", "singular", "apiextensions", "status", "scale")
_MULTIPLE = ("derive", "category", "shortname", "printcolumn")
_KNOWN = (*_REQUIRED, *_STRINGS, "namespaced", "schema", *_MULTIPLE)


def _as_strings(key: str, value: Any) -> tuple[str, ...]:
    values = (value,) if isinstance(value, str) else tuple(value)
    for item in values:
        if not isinstance(item, str):
            raise KubeAttrsError(f"Unexpected type for `{key}`: expected a string")
    return values


@dataclass(frozen=True)
class KubeAttrs:
    """The options of one custom resource kind."""

    group: str
    version: str
    kind: str
    kind_struct: str | None = None
    plural: str | None = None
    singular: str | None = None
    namespaced: bool = False
    apiextensions: str = "v1"
    derives: tuple[str, ...] = ()
    schema: SchemaMode | None = None
    status: str | None = None
    categories: tuple[str, ...] = ()
    shortnames: tuple[str, ...] = ()
    printcolumns: tuple[str, ...] = field(default=())
    scale: str | None = None

    @classmethod
    def from_options(cls, **kwargs: Any) -> KubeAttrs:
        """Build from option names as written on a resource declaration.

        Repeatable options (``derive``, ``category``, ``shortname``,
        ``printcolumn``) accept a single string or a sequence of strings.
        """
        errors: list[str] = []
        for key in kwargs:
            if key not in _KNOWN:
                message = f"Unknown field: `{key}`"
                close = difflib.get_close_matches(key, _KNOWN, n=1, cutoff=0.8)
                if close:
                    message += f". Did you mean `{close[0]}`?"
                errors.append(message)
        for key in _REQUIRED:
            if key not in kwargs:
                errors.append(f"Missing field `{key}`")
        if errors:
            raise KubeAttrsError(errors)

        for key in (*_REQUIRED, *_STRINGS):
            if key in kwargs and not isinstance(kwargs[key], str):
                raise KubeAttrsError(f"Unexpected type for `{key}`: expected a string")
        namespaced = kwargs.get("namespaced", False)
        if not isinstance(namespaced, bool):
            raise KubeAttrsError("Unexpected type for `namespaced`: expected a boolean")

        schema = kwargs.get("schema")
        if isinstance(schema, str):
            schema = SchemaMode.from_string(schema)
        elif schema is not None and not isinstance(schema, SchemaMode):
            raise KubeAttrsError("Unexpected type for `schema`: expected a string")

        return cls(
            group=kwargs["group"],
            version=kwargs["version"],
            kind=kwargs["kind"],
            kind_struct=kwargs.get("struct"),
            plural=kwargs.get("plural"),
            singular=kwargs.get("singular"),
            namespaced=namespaced,
            apiextensions=kwargs.get("apiextensions", "v1"),
            derives=_as_strings("derive", kwargs.get("derive", ())),
            schema=schema,
            status=kwargs.get("status"),
            categories=_as_strings("category", kwargs.get("category", ())),
            shortnames=_as_strings("shortname", kwargs.get("shortname", ())),
            printcolumns=_as_strings("printcolumn", kwargs.get("printcolumn", ())),
            scale=kwargs.get("scale"),
        )

    def resolved_schema_mode(self) -> SchemaMode:
        """The schema mode, defaulting to derived for v1 CRDs and disabled otherwise."""
        if self.schema is not None:
            return self.schema
        return SchemaMode.DERIVED if self.apiextensions == "v1" else SchemaMode.DISABLED

    def singular_name(self) -> str:
        """The singular name, defaulting to the lowercased kind."""
        if self.singular is not None:
            return self.singular
        return "".join(c.lower() if c.isascii() else c for c in self.kind)

    def plural_name(self) -> str:
        """The plural name, inferred from the singular name when not given."""
        return self.plural if self.plural is not None else to_plural(self.singular_name())

    def struct_name(self) -> str:
        """The name of the generated root type, defaulting to the kind."""
        return self.kind_struct if self.kind_struct is not None else self.kind

    def api_version(self) -> str:
        """The ``group/version`` string of the resource."""
        return f"{self.group}/{self.version}"

    def scope(self) -> str:
        """``Namespaced`` or ``Cluster``."""
        return "Namespaced" if self.namespaced else "Cluster"

    def crd_name(self) -> str:
        """The CRD object name, ``plural.group``."""
        return f"{self.plural_name()}.{self.group}"


def to_plural(word: str) -> str:
    """Pluralise an English word by the simple regular rules."""
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return f"{word}es"
    if word.endswith("y") and len(word) >= 2 and word[-2] not in "aeiou":
        return f"{word[:-1]}ies"
    return f"{word}s"