"""Assembly of CustomResourceDefinition documents from resource options."""

from __future__ import annotations

import copy
import json
from typing import Any

from kubecrd.attrs import KubeAttrs, KubeAttrsError

__all__ = ["printer_columns", "scale_subresource", "subresources", "build_crd"]

_SUPPORTED_APIEXTENSIONS = ("v1", "v1beta1")


def _load_json(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise KubeAttrsError(f"invalid {what} json: {exc}") from None


def printer_columns(attrs: KubeAttrs) -> list[dict[str, Any]]:
    """Parse the printer column options into a list of column definitions.

    For ``v1beta1`` CRDs the ``jsonPath`` key is spelled ``JSONPath``.
    """
    text = f"[ {','.join(attrs.printcolumns)} ]"
    if attrs.apiextensions == "v1beta1":
        text = text.replace("jsonPath", "JSONPath")
    columns = _load_json(text, "printer column")
    if not all(isinstance(column, dict) for column in columns):
        raise KubeAttrsError("invalid printer column json: expected objects")
    return columns


def scale_subresource(attrs: KubeAttrs) -> dict[str, Any] | None:
    """Parse the scale subresource option, or return None when it is unset."""
    if not attrs.scale:
        return None
    scale = _load_json(attrs.scale, "scale subresource")
    if scale is not None and not isinstance(scale, dict):
        raise KubeAttrsError("invalid scale subresource json: expected an object")
    return scale


def subresources(attrs: KubeAttrs) -> dict[str, Any]:
    """The subresources block: status (and scale) only when a status is declared."""
    scale = scale_subresource(attrs)
    if attrs.status is None:
        return {}
    if scale is not None:
        return {"status": {}, "scale": scale}
    return {"status": {}}


def build_crd(attrs: KubeAttrs, schema: dict[str, Any] | None) -> dict[str, Any]:
    """Build the CustomResourceDefinition document for a resource.

    ``schema`` is the OpenAPI v3 schema of the root object; it is only placed
    in ``v1`` CRDs, and only when the schema mode allows it.
    """
    if attrs.apiextensions not in _SUPPORTED_APIEXTENSIONS:
        raise KubeAttrsError(
            f"Unsupported apiextensions version `{attrs.apiextensions}`"
        )

    columns = printer_columns(attrs)
    subres = subresources(attrs)
    if not attrs.resolved_schema_mode().use_in_crd():
        schema = None

    names = {
        "categories": list(attrs.categories),
        "plural": attrs.plural_name(),
        "singular": attrs.singular_name(),
        "kind": attrs.kind,
        "shortNames": list(attrs.shortnames),
    }
    version: dict[str, Any] = {
        "name": attrs.version,
        "served": True,
        "storage": True,
    }
    spec: dict[str, Any] = {
        "group": attrs.group,
        "scope": attrs.scope(),
        "names": names,
        "versions": [version],
    }

    if attrs.apiextensions == "v1":
        validation: dict[str, Any] = {}
        if schema is not None:
            validation["openAPIV3Schema"] = copy.deepcopy(schema)
        version["schema"] = validation
        version["additionalPrinterColumns"] = columns
        version["subresources"] = subres
    else:
        spec["additionalPrinterColumns"] = columns
        spec["subresources"] = subres

    return {
        "apiVersion": f"apiextensions.k8s.io/{attrs.apiextensions}",
        "kind": "CustomResourceDefinition",
        "metadata": {"name": attrs.crd_name()},
        "spec": spec,
    }