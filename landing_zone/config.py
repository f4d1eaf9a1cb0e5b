# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import os
from dataclasses import dataclass, field
from typing import Any, Self

from constructs import Node

import cdk_constants as constants
from landing_zone.organizations_policy import PolicyType
from landing_zone.organizations_policy import Tag


@dataclass
class PolicyConfig:
    name: str
    path: str
    policy_type: PolicyType
    description: str = ""
    tags: list[Tag] = field(default_factory=list)
    target_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_path: str = "") -> Self:
        """
        Builds a policy definition from one entry of the `policies` context list:

            {"name": ..., "path": ..., "type": "SERVICE_CONTROL_POLICY",
             "description": ..., "tags": {"key": "value"}, "targets": ["ou-..."]}

        A relative `path` is resolved against `base_path`.
        """
        for key in ("name", "path", "type"):
            if not data.get(key):
                raise ValueError(f"Policy definition is missing '{key}': {data}")

        try:
            policy_type = PolicyType(data["type"])
        except ValueError as error:
            raise ValueError(f"Unsupported policy type '{data['type']}' for policy '{data['name']}'") from error

        path = data["path"]
        if not os.path.isabs(path):
            path = os.path.join(base_path, path)

        return cls(
            name=data["name"],
            path=path,
            policy_type=policy_type,
            description=data.get("description", ""),
            tags=[Tag(key, str(value)) for key, value in (data.get("tags") or {}).items()],
            target_ids=list(data.get("targets") or []),
        )


@dataclass
class TesterPipelineConfig:
    source_repository_name: str
    source_branch_name: str = constants.DEFAULT_SOURCE_BRANCH_NAME
    tester_app_directory: str = constants.DEFAULT_TESTER_APP_DIRECTORY
    management_cross_account_role_name: str = constants.DEFAULT_MANAGEMENT_CROSS_ACCOUNT_ROLE_NAME
    management_account_id: str | None = None
    management_account_role_name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        keys = constants.ContextKeys
        if not data.get(keys.SOURCE_REPOSITORY_NAME):
            raise ValueError(f"'{keys.TESTER_PIPELINE}' requires '{keys.SOURCE_REPOSITORY_NAME}'")

        return cls(
            source_repository_name=data[keys.SOURCE_REPOSITORY_NAME],
            source_branch_name=data.get(keys.SOURCE_BRANCH_NAME, constants.DEFAULT_SOURCE_BRANCH_NAME),
            tester_app_directory=data.get(keys.TESTER_APP_DIRECTORY, constants.DEFAULT_TESTER_APP_DIRECTORY),
            management_cross_account_role_name=data.get(
                keys.MANAGEMENT_CROSS_ACCOUNT_ROLE_NAME, constants.DEFAULT_MANAGEMENT_CROSS_ACCOUNT_ROLE_NAME
            ),
            management_account_id=data.get(keys.MANAGEMENT_ACCOUNT_ID),
            management_account_role_name=data.get(keys.MANAGEMENT_ACCOUNT_ROLE_NAME),
        )


@dataclass
class LandingZoneConfig:
    qualifier: str = constants.DEFAULT_QUALIFIER
    policies: list[PolicyConfig] = field(default_factory=list)
    macie_admin_account_id: str | None = None
    macie_regions: list[str] = field(default_factory=list)
    tester_pipeline: TesterPipelineConfig | None = None

    @classmethod
    def from_context(cls, node: Node, base_path: str = "") -> Self:
        keys = constants.ContextKeys

        tester_pipeline_context = node.try_get_context(keys.TESTER_PIPELINE)

        return cls(
            qualifier=node.try_get_context(keys.QUALIFIER) or constants.DEFAULT_QUALIFIER,
            policies=[
                PolicyConfig.from_dict(policy, base_path) for policy in node.try_get_context(keys.POLICIES) or []
            ],
            macie_admin_account_id=node.try_get_context(keys.MACIE_ADMIN_ACCOUNT_ID),
            macie_regions=list(node.try_get_context(keys.MACIE_REGIONS) or []),
            tester_pipeline=(
                TesterPipelineConfig.from_dict(tester_pipeline_context) if tester_pipeline_context else None
            ),
        )
