# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import uuid
from typing import Any

import aws_cdk as cdk
from aws_cdk import aws_iam as iam
from constructs import Construct

from landing_zone.custom_resource_provider import CustomResourceProvider

MACIE_RESOURCE_TYPE = "Custom::MacieCreateMember"
MACIE_CREATE_MEMBER_LAMBDA_FUNCTION_HANDLER = "create_member.lambda_handler"


class MacieMembers(Construct):
    """Adds every active organization account as a Macie member of the delegated admin account in `region`."""

    def __init__(self, scope: Construct, _id: str, region: str, admin_account_id: str, **kwargs: Any) -> None:
        super().__init__(scope, _id, **kwargs)

        provider = CustomResourceProvider.get_or_create(
            self,
            MACIE_RESOURCE_TYPE,
            handler=MACIE_CREATE_MEMBER_LAMBDA_FUNCTION_HANDLER,
            policy_statements=[
                iam.PolicyStatement(
                    sid="MacieCreateMemberTaskOrganizationAction",
                    actions=["organizations:ListAccounts"],
                    effect=iam.Effect.ALLOW,
                    resources=["*"],
                    conditions={
                        "StringLikeIfExists": {
                            "organizations:ListAccounts": ["macie.amazonaws.com"],
                        },
                    },
                ),
                iam.PolicyStatement(
                    sid="MacieCreateMemberTaskMacieActions",
                    actions=[
                        "macie2:CreateMember",
                        "macie2:DeleteMember",
                        "macie2:DescribeOrganizationConfiguration",
                        "macie2:DisassociateMember",
                        "macie2:EnableMacie",
                        "macie2:GetMacieSession",
                        "macie2:ListMembers",
                        "macie2:UpdateOrganizationConfiguration",
                    ],
                    effect=iam.Effect.ALLOW,
                    resources=["*"],
                ),
            ],
        )

        resource = cdk.CustomResource(
            self,
            "Resource",
            resource_type=MACIE_RESOURCE_TYPE,
            service_token=provider.service_token,
            properties={
                "region": region,
                "adminAccountId": admin_account_id,
                "uuid": str(uuid.uuid4()),  # Forces the resource to update on every deployment
            },
        )

        self.members_id = resource.ref
