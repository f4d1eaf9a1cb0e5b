# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from typing import Any

import aws_cdk as cdk
import cdk_nag
from constructs import Construct

from landing_zone.config import LandingZoneConfig
from landing_zone.config import PolicyConfig
from landing_zone.macie_members import MacieMembers
from landing_zone.naming import to_pascal_case
from landing_zone.organizations_policy import Policy
from landing_zone.policy_attachment import PolicyAttachment


class LandingZoneStack(cdk.Stack):
    def __init__(self, scope: Construct, construct_id: str, config: LandingZoneConfig, **kwargs: Any) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.policies = [self._create_policy(policy_config) for policy_config in config.policies]

        self.macie_members: list[MacieMembers] = []
        if config.macie_admin_account_id:
            for region in config.macie_regions or [self.region]:
                self.macie_members.append(
                    MacieMembers(
                        self,
                        f"MacieMembers{to_pascal_case(region)}" if config.macie_regions else "MacieMembers",
                        region=region,
                        admin_account_id=config.macie_admin_account_id,
                    )
                )

        self._add_cdk_nag_suppressions()

    def _create_policy(self, policy_config: PolicyConfig) -> Policy:
        policy = Policy(
            self,
            to_pascal_case(policy_config.name),
            path=policy_config.path,
            name=policy_config.name,
            policy_type=policy_config.policy_type,
            description=policy_config.description,
            tags=policy_config.tags,
        )

        for target_id in policy_config.target_ids:
            PolicyAttachment(
                policy,
                f"Attach{to_pascal_case(target_id)}",
                policy_id=policy.policy_id,
                target_id=target_id,
                policy_type=policy_config.policy_type,
            )

        return policy

    def _add_cdk_nag_suppressions(self) -> None:
        cdk_nag.NagSuppressions.add_stack_suppressions(
            stack=self,
            suppressions=[
                cdk_nag.NagPackSuppression(
                    id="AwsSolutions-IAM4",
                    reason="Allow AWS managed policies",
                ),
                cdk_nag.NagPackSuppression(
                    id="AwsSolutions-IAM5",
                    reason="Organizations and Macie list actions do not support resource-level permissions",
                ),
                cdk_nag.NagPackSuppression(
                    id="AwsSolutions-L1",
                    reason="The provider framework pins its own Node.js runtime",
                ),
            ],
        )
