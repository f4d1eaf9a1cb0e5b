# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Self

from constants import RequestType
from constants import Status

REQUEST_TYPES = (RequestType.CREATE, RequestType.UPDATE, RequestType.DELETE)


@dataclass(frozen=True)
class ReconciliationRequest:
    request_type: str
    resource_properties: Mapping[str, Any] = field(default_factory=dict)
    physical_resource_id: str | None = None

    @classmethod
    def from_event(cls, event: dict[str, Any]) -> Self:
        """
        Builds a request from a CloudFormation custom resource lifecycle event.
        Raises ValueError when `RequestType` is missing or unknown.
        """
        request_type = event.get("RequestType", "")
        if request_type not in REQUEST_TYPES:
            raise ValueError(f"Unsupported RequestType: {request_type!r}")
        return cls(
            request_type=request_type,
            resource_properties=MappingProxyType(dict(event.get("ResourceProperties") or {})),
            physical_resource_id=event.get("PhysicalResourceId"),
        )

    @property
    def is_delete(self) -> bool:
        return self.request_type == RequestType.DELETE

    def get_property(self, key: str) -> str:
        value = self.resource_properties.get(key)
        if not value:
            raise ValueError(f"ResourceProperties.{key} is required")
        return value


@dataclass(frozen=True)
class ReconciliationResult:
    physical_resource_id: str | None
    status: str = Status.SUCCESS

    def to_response(self) -> dict[str, Any]:
        return {
            "PhysicalResourceId": self.physical_resource_id,
            "Status": self.status,
        }
