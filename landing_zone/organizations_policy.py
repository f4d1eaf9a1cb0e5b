# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any

import aws_cdk as cdk
from aws_cdk import aws_iam as iam
from aws_cdk import aws_s3_assets as s3_assets
from constructs import Construct

from landing_zone.custom_resource_provider import CustomResourceProvider

CREATE_POLICY_RESOURCE_TYPE = "Custom::CreatePolicy"
CREATE_POLICY_LAMBDA_FUNCTION_HANDLER = "create_policy.lambda_handler"


class PolicyType(Enum):
    AISERVICES_OPT_OUT_POLICY = "AISERVICES_OPT_OUT_POLICY"
    BACKUP_POLICY = "BACKUP_POLICY"
    SERVICE_CONTROL_POLICY = "SERVICE_CONTROL_POLICY"
    TAG_POLICY = "TAG_POLICY"


@dataclass
class Tag:
    """
    A key-value pair attached to an organization resource (account, OU, root or policy).
    The value may be an empty string but not None.
    """

    key: str
    value: str = ""

    def to_property(self) -> dict[str, str]:
        return {"Key": self.key, "Value": self.value}


class Policy(Construct):
    """
    Creates, or updates in place, an Organizations policy named `name` from the document at `path`.
    The document is uploaded as an S3 asset which the handler reads on every deployment.
    """

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        scope: Construct,
        _id: str,
        path: str,
        name: str,
        policy_type: PolicyType,
        description: str = "",
        tags: list[Tag] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, _id, **kwargs)

        self.path = path
        self.name = name
        self.description = description
        self.policy_type = policy_type
        self.tags = tags or []

        asset = s3_assets.Asset(self, "Policy", path=path)

        provider = CustomResourceProvider.get_or_create(
            self,
            CREATE_POLICY_RESOURCE_TYPE,
            handler=CREATE_POLICY_LAMBDA_FUNCTION_HANDLER,
            policy_statements=[
                iam.PolicyStatement(
                    actions=[
                        "organizations:CreatePolicy",
                        "organizations:DeletePolicy",
                        "organizations:ListPolicies",
                        "organizations:UpdatePolicy",
                    ],
                    effect=iam.Effect.ALLOW,
                    resources=["*"],
                )
            ],
        )
        asset.grant_read(provider.function)

        # A new uuid on every synth forces CloudFormation to call the handler on every update
        resource = cdk.CustomResource(
            self,
            "Resource",
            resource_type=CREATE_POLICY_RESOURCE_TYPE,
            service_token=provider.service_token,
            properties={
                "bucket": asset.s3_bucket_name,
                "key": asset.s3_object_key,
                "name": self.name,
                "description": self.description,
                "type": self.policy_type.value,
                "tags": [tag.to_property() for tag in self.tags],
                "uuid": str(uuid.uuid4()),
            },
        )

        self.policy_id = resource.ref
