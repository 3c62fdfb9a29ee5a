import pytest

from kubecrd.attrs import KubeAttrs, KubeAttrsError, SchemaMode, to_plural


def _foo(**extra):
    return KubeAttrs.from_options(group="clux.dev", version="v1", kind="Foo", **extra)


def test_apiextensions_default():
    attrs = _foo(namespaced=True)
    assert attrs.apiextensions == "v1"
    assert attrs.namespaced is True


def test_missing_required_reports_all_fields():
    with pytest.raises(KubeAttrsError) as info:
        KubeAttrs.from_options()
    assert info.value.errors == [
        "Missing field `group`",
        "Missing field `version`",
        "Missing field `kind`",
    ]


def test_missing_single_required_field():
    with pytest.raises(KubeAttrsError, match="Missing field `kind`"):
        KubeAttrs.from_options(group="clux.dev", version="v1")


def test_unknown_field_with_suggestion():
    with pytest.raises(KubeAttrsError) as info:
        _foo(shortnames="foo")
    assert info.value.errors == ["Unknown field: `shortnames`. Did you mean `shortname`?"]


def test_unknown_field_without_suggestion():
    with pytest.raises(KubeAttrsError) as info:
        _foo(zzzzz="x")
    assert info.value.errors == ["Unknown field: `zzzzz`"]


@pytest.mark.parametrize(
    "value, mode",
    [("disabled", SchemaMode.DISABLED), ("manual", SchemaMode.MANUAL), ("derived", SchemaMode.DERIVED)],
)
def test_schema_mode_from_string(value, mode):
    assert SchemaMode.from_string(value) is mode


def test_schema_mode_unknown():
    with pytest.raises(KubeAttrsError, match="Unknown literal value `auto`"):
        SchemaMode.from_string("auto")


@pytest.mark.parametrize(
    "mode, derive, use",
    [
        (SchemaMode.DISABLED, False, False),
        (SchemaMode.MANUAL, False, True),
        (SchemaMode.DERIVED, True, True),
    ],
)
def test_schema_mode_flags(mode, derive, use):
    assert mode.derive() is derive
    assert mode.use_in_crd() is use


def test_schema_mode_defaults_by_apiextensions():
    assert _foo().resolved_schema_mode() is SchemaMode.DERIVED
    assert _foo(apiextensions="v1beta1").resolved_schema_mode() is SchemaMode.DISABLED
    assert _foo(apiextensions="v1beta1", schema="manual").resolved_schema_mode() is SchemaMode.MANUAL


def test_invalid_schema_option():
    with pytest.raises(KubeAttrsError):
        _foo(schema="bogus")


def test_derived_names():
    attrs = _foo(namespaced=True)
    assert attrs.singular_name() == "foo"
    assert attrs.plural_name() == "foos"
    assert attrs.struct_name() == "Foo"
    assert attrs.api_version() == "clux.dev/v1"
    assert attrs.scope() == "Namespaced"
    assert attrs.crd_name() == "foos.clux.dev"


def test_explicit_names():
    attrs = _foo(struct="FooCrd", singular="foot", plural="feetz")
    assert attrs.struct_name() == "FooCrd"
    assert attrs.singular_name() == "foot"
    assert attrs.plural_name() == "feetz"
    assert attrs.scope() == "Cluster"
    assert attrs.crd_name() == "feetz.clux.dev"


def test_plural_inferred_from_singular():
    attrs = _foo(singular="policy")
    assert attrs.plural_name() == "policies"


def test_multiple_options_accept_string_or_list():
    attrs = _foo(shortname=["fo", "f"], category="clux", derive="PartialEq")
    assert attrs.shortnames == ("fo", "f")
    assert attrs.categories == ("clux",)
    assert attrs.derives == ("PartialEq",)
    assert attrs.printcolumns == ()


def test_wrong_types_rejected():
    with pytest.raises(KubeAttrsError):
        _foo(namespaced="yes")
    with pytest.raises(KubeAttrsError):
        KubeAttrs.from_options(group=1, version="v1", kind="Foo")
    with pytest.raises(KubeAttrsError):
        _foo(shortname=["f", 3])


@pytest.mark.parametrize(
    "word, plural",
    [
        ("fox", "foxes"),
        ("bus", "buses"),
        ("buzz", "buzzes"),
        ("church", "churches"),
        ("dish", "dishes"),
        ("puppy", "puppies"),
        ("day", "days"),
        ("key", "keys"),
        ("foo", "foos"),
        ("y", "ys"),
    ],
)
def test_to_plural(word, plural):
    assert to_plural(word) == plural