# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import os
from typing import Any, Self, cast

import aws_cdk as cdk
from aws_cdk import aws_iam as iam
from aws_cdk import aws_lambda as _lambda
from aws_cdk import aws_logs as logs
from aws_cdk import custom_resources as cr
from constructs import Construct

from landing_zone.runtime.constants import EnvVarsNames

RUNTIME_PATH = os.path.join(os.path.dirname(os.path.realpath(__file__)), "runtime")
PYTHON_REQUIREMENTS_PATH = os.path.join(os.path.dirname(os.path.realpath(__file__)), "layer")

PYTHON_REQUIREMENTS_LAYER_ID = "PythonRequirementsLayer"
CUSTOM_RESOURCE_TYPE_PREFIX = "Custom::"
LOG_LEVEL = "INFO"


def get_or_create_python_requirements_layer(scope: Construct) -> _lambda.ILayerVersion:
    stack = cdk.Stack.of(scope)
    existing = stack.node.try_find_child(PYTHON_REQUIREMENTS_LAYER_ID)
    if existing is not None:
        return cast(_lambda.ILayerVersion, existing)

    # Code assets bind to a single stack, a new one is created for every layer and function
    return _lambda.LayerVersion(
        stack,
        PYTHON_REQUIREMENTS_LAYER_ID,
        compatible_runtimes=[_lambda.Runtime.PYTHON_3_12],
        code=_lambda.Code.from_asset(PYTHON_REQUIREMENTS_PATH),
        removal_policy=cdk.RemovalPolicy.DESTROY,
    )


def generate_provider_id(resource_type: str) -> str:
    return f"{resource_type.removeprefix(CUSTOM_RESOURCE_TYPE_PREFIX)}Provider"


class CustomResourceProvider(Construct):
    """
    A Python Lambda function from the `runtime` directory behind the CDK provider framework.
    Use `get_or_create` so every custom resource of one type in a stack shares a single function.
    """

    def __init__(
        self,
        scope: Construct,
        _id: str,
        resource_type: str,
        handler: str,
        policy_statements: list[iam.PolicyStatement],
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, _id, **kwargs)

        self.function = _lambda.Function(
            self,
            "Function",
            runtime=_lambda.Runtime.PYTHON_3_12,
            code=_lambda.Code.from_asset(RUNTIME_PATH),
            handler=handler,
            timeout=cdk.Duration.minutes(15),
            layers=[get_or_create_python_requirements_layer(self)],
            environment={
                EnvVarsNames.POWERTOOLS_SERVICE_NAME: resource_type,
                EnvVarsNames.LOG_LEVEL: LOG_LEVEL,
            },
        )

        self._allow_role(self.function.role, policy_statements)

        self.provider = cr.Provider(
            self,
            "Provider",
            on_event_handler=self.function,
            log_group=logs.LogGroup(
                self,
                "ProviderLogGroup",
                retention=logs.RetentionDays.ONE_MONTH,
                removal_policy=cdk.RemovalPolicy.DESTROY,
            ),
        )

        self.service_token = self.provider.service_token

    def _allow_role(self, lambda_role: iam.IRole | None, policy_statements: list[iam.PolicyStatement]) -> None:
        if lambda_role is None:
            raise ValueError("Lambda role is None")

        lambda_role.attach_inline_policy(
            iam.Policy(
                self,
                "Policy",
                document=iam.PolicyDocument(statements=policy_statements),
            )
        )

    @classmethod
    def get_or_create(
        cls,
        scope: Construct,
        resource_type: str,
        handler: str,
        policy_statements: list[iam.PolicyStatement],
    ) -> Self:
        stack = cdk.Stack.of(scope)
        provider_id = generate_provider_id(resource_type)
        existing = stack.node.try_find_child(provider_id)
        if existing is not None:
            return cast(Self, existing)

        return cls(
            stack,
            provider_id,
            resource_type=resource_type,
            handler=handler,
            policy_statements=policy_statements,
        )
