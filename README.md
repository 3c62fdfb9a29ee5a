# kubecrd

Declare a Kubernetes custom resource from a Python spec class and get, from
that one declaration:

- a root type holding `metadata`, `spec` and, when declared, `status`, which
  serialises itself with the right `apiVersion` and `kind`;
- the resource's group, version, kind, plural name and short names;
- a complete `CustomResourceDefinition` document (a plain `dict`), including
  an OpenAPI v3 schema derived from the spec and status types.

The package has no runtime dependencies.

## Declaring a resource

`kubecrd.custom_resource.custom_resource(**options)` returns a function that
takes a spec class and returns a new root class. The root class is named
after `kind` (or `struct=`); the kind must not equal the spec class's name.

```python
from dataclasses import dataclass
from kubecrd.custom_resource import custom_resource

@dataclass
class FooSpec:
    info: str

Foo = custom_resource(
    group="clux.dev",
    version="v1",
    kind="Foo",
    namespaced=True,
    shortname=["fo", "f"],
    category="clux",
)(FooSpec)

foo = Foo.new("foo-1", FooSpec(info="informative info"))
foo.to_dict()
# {'apiVersion': 'clux.dev/v1', 'kind': 'Foo',
#  'metadata': {'name': 'foo-1'}, 'spec': {'info': 'informative info'}}

Foo.from_dict(foo.to_dict()) == foo   # True
Foo.api_version()  # 'clux.dev/v1'
Foo.plural()       # 'foos'
Foo.crd_name()     # 'foos.clux.dev'
Foo.shortnames()   # ('fo', 'f')
crd = Foo.crd()    # the CustomResourceDefinition as a dict
```

Root classes derive from `kubecrd.custom_resource.CustomResource` and also
offer `group()`, `kind()`, `version()` and, on instances, `has_status()`.
Instances compare equal when their metadata, spec and status are equal.

### Status

Pass `status=` either as the status class itself or as its name. Given a
class, the status is read back by `from_dict` and its schema goes into the
CRD (marked `nullable`); given only a name, a `v1` CRD with a schema cannot
be built. A declared status enables the `status` subresource, and `scale`
is only added to the subresources when a status is declared.

### Spec and status types

Spec and status types are usually dataclasses. Python field names are written
in camelCase on the wire. Field metadata may set:

- `name`: the JSON name to use instead;
- `skip_if_none`: leave the field out of `to_dict()` when it is `None`;
- `description`: a description in the schema.

Supported field types are `bool`, `int` (schema format `int64`), `float`,
`str`, `datetime` (written as RFC 3339 in UTC with a `Z` suffix), enums with
all-string or all-integer values, `list[...]`, `tuple[X, ...]`,
`dict[str, ...]`, nested dataclasses, `Any`, and `X | None`. Optional fields
are `nullable` in the schema; fields without a default that are not optional
are `required`; non-`None` defaults appear as `default`.

A type can take over any step by defining `to_dict()`, a `from_dict(data)`
classmethod or a `json_schema()` classmethod. Under `schema="manual"` the spec
(and status) type must provide `json_schema()`.

## Options

| Option | Meaning |
| --- | --- |
| `group`, `version`, `kind` | Required. The API group, version and kind. |
| `struct` | Name of the generated root class (defaults to `kind`). |
| `singular` | Singular name (defaults to the lower-cased kind). |
| `plural` | Plural name (inferred from the singular when omitted). |
| `namespaced` | `True` for a namespaced rather than cluster-scoped resource. |
| `apiextensions` | `"v1"` (default) or `"v1beta1"`. |
| `schema` | `"derived"`, `"manual"` or `"disabled"`. Defaults to `"derived"` for `v1`, `"disabled"` otherwise. |
| `status` | The status class or its name; enables the status subresource. |
| `shortname`, `category`, `printcolumn` | A string or a list of strings. Printer columns are JSON text. |
| `scale` | JSON text for the scale subresource. |
| `derive` | Extra capabilities; `"Default"` lets the root type be built without a spec, using the spec type's no-argument constructor. |

For `v1beta1` CRDs, printer columns and subresources sit on the CRD spec
rather than on the version, `jsonPath` is spelled `JSONPath`, and no schema is
included.

Unknown options (with a suggestion for near misspellings), missing required
options, values of the wrong type, invalid JSON and unsupported
`apiextensions` versions raise `kubecrd.attrs.KubeAttrsError`, a
`ValueError`.

## Lower-level pieces

- `kubecrd.attrs.KubeAttrs.from_options(**options)` validates the options
  alone and answers name questions: `singular_name()`, `plural_name()`,
  `struct_name()`, `api_version()`, `scope()`, `crd_name()` and
  `resolved_schema_mode()`.
- `kubecrd.attrs.SchemaMode` is the schema mode enum.
- `kubecrd.attrs.to_plural(word)` is the simple English pluraliser used for
  default plural names (`foo` → `foos`, `box` → `boxes`, `policy` → `policies`).
- `kubecrd.crd.build_crd(attrs, schema)` builds the definition document from
  validated options and an OpenAPI v3 schema; `printer_columns`,
  `scale_subresource` and `subresources` build its parts.

## What it does not do

kubecrd only produces documents and Python objects. It does not connect to a
cluster, apply or watch resources, or write YAML; send the dicts it returns
with whatever client and serialiser you already use.