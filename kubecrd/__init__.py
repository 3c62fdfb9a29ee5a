"""Declare Kubernetes custom resources and generate their CustomResourceDefinitions."""

__version__ = "0.1.0"
__all__ = ["attrs", "crd", "custom_resource"]