# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from typing import Any

import boto3
from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext
from constants import BOTO_CONFIG
from constants import FULL_AWS_ACCESS_POLICY_ID
from constants import PropertyKeys
from custom_resource import ReconciliationRequest
from custom_resource import ReconciliationResult
from throttling import throttling_back_off

ORGANIZATIONS_CLIENT = boto3.client("organizations", config=BOTO_CONFIG)

logger = Logger()


# pylint: disable=unused-argument
@logger.inject_lambda_context(log_event=True)
def lambda_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    request = ReconciliationRequest.from_event(event)
    result = reconcile(request)
    return result.to_response()


def reconcile(request: ReconciliationRequest) -> ReconciliationResult:
    policy_id = request.get_property(PropertyKeys.POLICY_ID)
    target_id = request.get_property(PropertyKeys.TARGET_ID)
    policy_type = request.get_property(PropertyKeys.TYPE)

    if request.is_delete:
        detach_policy(policy_id, target_id, policy_type)
        return ReconciliationResult(request.physical_resource_id)

    attach_policy(policy_id, target_id, policy_type)
    return ReconciliationResult(generate_physical_resource_id(policy_id, target_id))


def attach_policy(policy_id: str, target_id: str, policy_type: str) -> None:
    if is_policy_attached(policy_id, target_id, policy_type):
        logger.info("Policy already attached", extra={"policy_id": policy_id, "target_id": target_id})
        return

    throttling_back_off(
        lambda: ORGANIZATIONS_CLIENT.attach_policy(PolicyId=policy_id, TargetId=target_id)
    )
    logger.info("Policy attached", extra={"policy_id": policy_id, "target_id": target_id})


def detach_policy(policy_id: str, target_id: str, policy_type: str) -> None:
    # Detaching FullAWSAccess would deny every action on the target
    if policy_id == FULL_AWS_ACCESS_POLICY_ID:
        logger.info("Skipping detach of protected policy", extra={"policy_id": policy_id})
        return

    if not is_policy_attached(policy_id, target_id, policy_type):
        logger.info("Policy not attached", extra={"policy_id": policy_id, "target_id": target_id})
        return

    throttling_back_off(
        lambda: ORGANIZATIONS_CLIENT.detach_policy(PolicyId=policy_id, TargetId=target_id)
    )
    logger.info("Policy detached", extra={"policy_id": policy_id, "target_id": target_id})


def is_policy_attached(policy_id: str, target_id: str, policy_type: str) -> bool:
    # Pages are fetched lazily, returning on a match stops further ListPoliciesForTarget calls
    paginator = ORGANIZATIONS_CLIENT.get_paginator("list_policies_for_target")
    for page in paginator.paginate(TargetId=target_id, Filter=policy_type):
        for policy in page.get("Policies", []):
            if policy.get("Id") == policy_id:
                return True
    return False


def generate_physical_resource_id(policy_id: str, target_id: str) -> str:
    return f"{policy_id}_{target_id}"
