# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

# This file is named cdk_constants.py to avoid conflict with the runtime constants file.

import os

import aws_cdk as cdk

ENVIRONMENT = cdk.Environment(
    account=os.environ.get("CDK_DEFAULT_ACCOUNT"),
    region=os.environ.get("CDK_DEFAULT_REGION"),
)

LANDING_ZONE_STACK_NAME = "LandingZone"
TESTER_PIPELINE_STACK_NAME = "TesterPipeline"

DEFAULT_QUALIFIER = "aws-landing-zone"
DEFAULT_SOURCE_BRANCH_NAME = "main"
DEFAULT_MANAGEMENT_CROSS_ACCOUNT_ROLE_NAME = "AWSControlTowerExecution"
# CDK app of the functional tests, relative to the root of the source repository
DEFAULT_TESTER_APP_DIRECTORY = "tester"

# CDK context keys, set in cdk.json or with `cdk deploy --context key=value`
# pylint: disable=too-few-public-methods
class ContextKeys:
    QUALIFIER = "qualifier"
    POLICIES = "policies"
    MACIE_ADMIN_ACCOUNT_ID = "macie-admin-account-id"
    MACIE_REGIONS = "macie-regions"
    TESTER_PIPELINE = "tester-pipeline"
    SOURCE_REPOSITORY_NAME = "source-repository-name"
    SOURCE_BRANCH_NAME = "source-branch-name"
    TESTER_APP_DIRECTORY = "tester-app-directory"
    MANAGEMENT_CROSS_ACCOUNT_ROLE_NAME = "management-cross-account-role-name"
    MANAGEMENT_ACCOUNT_ID = "management-account-id"
    MANAGEMENT_ACCOUNT_ROLE_NAME = "management-account-role-name"
