# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import uuid
from typing import Any

import aws_cdk as cdk
from aws_cdk import aws_iam as iam
from constructs import Construct

from landing_zone.custom_resource_provider import CustomResourceProvider
from landing_zone.organizations_policy import PolicyType

ATTACH_POLICY_RESOURCE_TYPE = "Custom::AttachPolicy"
ATTACH_POLICY_LAMBDA_FUNCTION_HANDLER = "attach_policy.lambda_handler"


class PolicyAttachment(Construct):
    """Attaches an Organizations policy to a root, OU or account, detaching it on delete."""

    def __init__(
        self,
        scope: Construct,
        _id: str,
        policy_id: str,
        target_id: str,
        policy_type: PolicyType,
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, _id, **kwargs)

        provider = CustomResourceProvider.get_or_create(
            self,
            ATTACH_POLICY_RESOURCE_TYPE,
            handler=ATTACH_POLICY_LAMBDA_FUNCTION_HANDLER,
            policy_statements=[
                iam.PolicyStatement(
                    actions=[
                        "organizations:AttachPolicy",
                        "organizations:DetachPolicy",
                        "organizations:ListPoliciesForTarget",
                    ],
                    effect=iam.Effect.ALLOW,
                    resources=["*"],
                )
            ],
        )

        # A new uuid on every synth forces CloudFormation to call the handler on every update
        resource = cdk.CustomResource(
            self,
            "Resource",
            resource_type=ATTACH_POLICY_RESOURCE_TYPE,
            service_token=provider.service_token,
            properties={
                "policyId": policy_id,
                "targetId": target_id,
                "type": policy_type.value,
                "uuid": str(uuid.uuid4()),
            },
        )

        self.attachment_id = resource.ref
