# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import json
from typing import Any

import boto3
from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext
from botocore.exceptions import ClientError
from constants import BOTO_CONFIG
from constants import PropertyKeys
from custom_resource import ReconciliationRequest
from custom_resource import ReconciliationResult
from mypy_boto3_organizations.type_defs import PolicySummaryTypeDef
from mypy_boto3_organizations.type_defs import TagTypeDef
from throttling import throttling_back_off

ORGANIZATIONS_CLIENT = boto3.client("organizations", config=BOTO_CONFIG)
S3_CLIENT = boto3.client("s3", config=BOTO_CONFIG)

POLICY_NOT_FOUND_ERROR_CODE = "PolicyNotFoundException"

logger = Logger()


# pylint: disable=unused-argument
@logger.inject_lambda_context(log_event=True)
def lambda_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    request = ReconciliationRequest.from_event(event)
    result = reconcile(request)
    return result.to_response()


def reconcile(request: ReconciliationRequest) -> ReconciliationResult:
    if request.is_delete:
        delete_policy(request.physical_resource_id)
        return ReconciliationResult(request.physical_resource_id)

    name = request.get_property(PropertyKeys.NAME)
    policy_type = request.get_property(PropertyKeys.TYPE)
    description = request.resource_properties.get(PropertyKeys.DESCRIPTION, "")
    tags = parse_tags(request.resource_properties.get(PropertyKeys.TAGS))
    content = read_policy_content(
        request.get_property(PropertyKeys.BUCKET),
        request.get_property(PropertyKeys.KEY),
    )

    existing_policy = find_policy_by_name(name, policy_type)
    if existing_policy:
        policy_id = existing_policy["Id"]
        throttling_back_off(
            lambda: ORGANIZATIONS_CLIENT.update_policy(
                PolicyId=policy_id,
                Name=name,
                Description=description,
                Content=content,
            )
        )
        logger.info("Policy updated", extra={"policy_id": policy_id, "policy_name": name})
        return ReconciliationResult(policy_id)

    response = throttling_back_off(
        lambda: ORGANIZATIONS_CLIENT.create_policy(
            Content=content,
            Description=description,
            Name=name,
            Type=policy_type,  # type: ignore
            Tags=tags,
        )
    )
    policy_id = response["Policy"]["PolicySummary"]["Id"]
    logger.info("Policy created", extra={"policy_id": policy_id, "policy_name": name})
    return ReconciliationResult(policy_id)


def read_policy_content(bucket: str, key: str) -> str:
    response = S3_CLIENT.get_object(Bucket=bucket, Key=key)
    return response["Body"].read().decode("utf-8")


def find_policy_by_name(name: str, policy_type: str) -> PolicySummaryTypeDef | None:
    paginator = ORGANIZATIONS_CLIENT.get_paginator("list_policies")
    for page in paginator.paginate(Filter=policy_type):  # type: ignore
        for policy in page.get("Policies", []):
            if policy.get("Name") == name:
                return policy
    return None


def delete_policy(policy_id: str | None) -> None:
    if not policy_id:
        return
    try:
        throttling_back_off(lambda: ORGANIZATIONS_CLIENT.delete_policy(PolicyId=policy_id))
        logger.info("Policy deleted", extra={"policy_id": policy_id})
    except ClientError as error:
        if error.response["Error"]["Code"] != POLICY_NOT_FOUND_ERROR_CODE:
            raise
        logger.info("Policy already deleted", extra={"policy_id": policy_id})


def parse_tags(tags: Any) -> list[TagTypeDef]:
    """
    CloudFormation passes the tags either as a list of {Key, Value} or, when the
    property was serialized by the construct, as a JSON string of that list.
    """
    if not tags:
        return []
    if isinstance(tags, str):
        tags = json.loads(tags)
    return [{"Key": tag["Key"], "Value": tag.get("Value", "")} for tag in tags]
