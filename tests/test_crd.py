import pytest

from kubecrd.attrs import KubeAttrs, KubeAttrsError, SchemaMode
from kubecrd.crd import build_crd, printer_columns, scale_subresource, subresources

COLUMN = '{"name":"Spec", "type":"string", "description":"name of foo", "jsonPath":".spec.name"}'
SCALE = '{"specReplicasPath":".spec.replicas", "statusReplicasPath":".status.replicas"}'


def foo_attrs(**extra):
    options = dict(group="clux.dev", version="v1", kind="Foo")
    options.update(extra)
    return KubeAttrs.from_options(**options)


def test_printer_columns_empty():
    assert printer_columns(foo_attrs()) == []


def test_printer_columns_v1_keeps_json_path():
    columns = printer_columns(foo_attrs(printcolumn=COLUMN))
    assert columns == [
        {"name": "Spec", "type": "string", "description": "name of foo", "jsonPath": ".spec.name"}
    ]


def test_printer_columns_v1beta1_renames_json_path():
    columns = printer_columns(foo_attrs(printcolumn=[COLUMN, COLUMN], apiextensions="v1beta1"))
    assert len(columns) == 2
    assert all(column["JSONPath"] == ".spec.name" for column in columns)
    assert all("jsonPath" not in column for column in columns)


def test_printer_columns_invalid_json():
    with pytest.raises(KubeAttrsError):
        printer_columns(foo_attrs(printcolumn="{not json"))


def test_scale_subresource():
    assert scale_subresource(foo_attrs()) is None
    assert scale_subresource(foo_attrs(scale="")) is None
    assert scale_subresource(foo_attrs(scale=SCALE)) == {
        "specReplicasPath": ".spec.replicas",
        "statusReplicasPath": ".status.replicas",
    }
    with pytest.raises(KubeAttrsError):
        scale_subresource(foo_attrs(scale="{"))


def test_subresources_depend_on_status():
    assert subresources(foo_attrs(scale=SCALE)) == {}
    assert subresources(foo_attrs(status="FooStatus")) == {"status": {}}
    with_scale = subresources(foo_attrs(status="FooStatus", scale=SCALE))
    assert with_scale["status"] == {}
    assert with_scale["scale"] == scale_subresource(foo_attrs(scale=SCALE))


def test_build_crd_v1_matches_expected():
    attrs = foo_attrs(namespaced=True, category="clux", shortname=["fo", "f"])
    schema = {"type": "object", "title": "Foo"}
    crd = build_crd(attrs, schema)
    assert crd == {
        "apiVersion": "apiextensions.k8s.io/v1",
        "kind": "CustomResourceDefinition",
        "metadata": {"name": "foos.clux.dev"},
        "spec": {
            "group": "clux.dev",
            "names": {
                "categories": ["clux"],
                "kind": "Foo",
                "plural": "foos",
                "shortNames": ["fo", "f"],
                "singular": "foo",
            },
            "scope": "Namespaced",
            "versions": [
                {
                    "name": "v1",
                    "served": True,
                    "storage": True,
                    "additionalPrinterColumns": [],
                    "schema": {"openAPIV3Schema": {"type": "object", "title": "Foo"}},
                    "subresources": {},
                }
            ],
        },
    }


def test_build_crd_copies_schema():
    schema = {"type": "object"}
    crd = build_crd(foo_attrs(), schema)
    crd["spec"]["versions"][0]["schema"]["openAPIV3Schema"]["type"] = "string"
    assert schema == {"type": "object"}


def test_build_crd_disabled_schema_is_left_out():
    crd = build_crd(foo_attrs(schema="disabled"), {"type": "object"})
    assert crd["spec"]["versions"][0]["schema"] == {}
    assert crd["spec"]["scope"] == "Cluster"


def test_build_crd_manual_schema_is_used():
    attrs = foo_attrs(schema=SchemaMode.MANUAL)
    crd = build_crd(attrs, {"type": "object"})
    assert crd["spec"]["versions"][0]["schema"]["openAPIV3Schema"] == {"type": "object"}


def test_build_crd_v1beta1_layout():
    attrs = foo_attrs(
        apiextensions="v1beta1",
        status="FooStatus",
        scale=SCALE,
        printcolumn=COLUMN,
        plural="feetz",
        singular="foot",
    )
    crd = build_crd(attrs, {"type": "object"})
    assert crd["apiVersion"] == "apiextensions.k8s.io/v1beta1"
    assert crd["metadata"] == {"name": "feetz.clux.dev"}
    spec = crd["spec"]
    assert spec["versions"] == [{"name": "v1", "served": True, "storage": True}]
    assert spec["additionalPrinterColumns"] == printer_columns(attrs)
    assert spec["subresources"] == subresources(attrs)
    assert spec["names"]["singular"] == "foot"
    assert spec["names"]["plural"] == "feetz"


def test_build_crd_metadata_name_matches_attrs():
    attrs = foo_attrs(kind="Policy")
    crd = build_crd(attrs, None)
    assert crd["metadata"]["name"] == attrs.crd_name()
    assert crd["spec"]["names"]["plural"] == attrs.plural_name()


def test_build_crd_unknown_apiextensions():
    with pytest.raises(KubeAttrsError):
        build_crd(foo_attrs(apiextensions="v2"), None)