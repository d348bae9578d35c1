"""IR model for a compiled service."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from schema_to_ir.ir.resources import DataSourceDefinition, ResourceDefinition


class Provider(Enum):
    """Platform family a service belongs to."""

    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"
    KUBERNETES = "kubernetes"

    @classmethod
    def parse(cls, value: str | Provider) -> Provider:
        """Parse a provider from its value or name, case-insensitively."""
        if isinstance(value, Provider):
            return value
        lowered = value.strip().lower()
        for provider in cls:
            if lowered in (provider.value, provider.name.lower()):
                return provider
        raise ValueError(f"Unknown provider: {value!r}")


@dataclass(frozen=True)
class ServiceDefinition:
    """Top-level result of one conversion run.

    Attributes
    ----------
        provider: Platform family.
        name: Caller-supplied service name.
        sdk_version: Caller-supplied schema/API version.
        resources: Resources in the order their first operation appeared.
        data_sources: Read-only variants of the resources.

    """

    provider: Provider
    name: str
    sdk_version: str
    resources: tuple[ResourceDefinition, ...] = ()
    data_sources: tuple[DataSourceDefinition, ...] = ()

    def get_resource(self, name: str) -> ResourceDefinition | None:
        """Get a resource by name."""
        for resource in self.resources:
            if resource.name == name:
                return resource
        return None

    def get_data_source(self, name: str) -> DataSourceDefinition | None:
        """Get a data source by name."""
        for data_source in self.data_sources:
            if data_source.name == name:
                return data_source
        return None

    @property
    def resource_names(self) -> tuple[str, ...]:
        """Names of all resources, in order."""
        return tuple(resource.name for resource in self.resources)
