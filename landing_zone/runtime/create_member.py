# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from typing import Any, Iterator

import boto3
from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext
from botocore.exceptions import ClientError
from constants import ACTIVE_ACCOUNT_STATUS
from constants import BOTO_CONFIG
from constants import PropertyKeys
from custom_resource import ReconciliationRequest
from custom_resource import ReconciliationResult
from mypy_boto3_macie2.client import Macie2Client
from mypy_boto3_macie2.type_defs import MemberTypeDef
from mypy_boto3_organizations.type_defs import AccountTypeDef
from throttling import throttling_back_off

ORGANIZATIONS_CLIENT = boto3.client("organizations", config=BOTO_CONFIG)

# GetMacieSession answers with one of these while Macie is disabled in the account
MACIE_NOT_ENABLED_ERROR_CODES = ("AccessDeniedException", "ResourceNotFoundException")
MEMBER_NOT_FOUND_ERROR_CODE = "ResourceNotFoundException"

# Removed and Resigned members are listed too, CreateMember associates them again
ASSOCIATED_RELATIONSHIP_STATUSES = ("Created", "Enabled", "Invited", "Paused")

logger = Logger()


# pylint: disable=unused-argument
@logger.inject_lambda_context(log_event=True)
def lambda_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    request = ReconciliationRequest.from_event(event)
    result = reconcile(request)
    return result.to_response()


def reconcile(request: ReconciliationRequest) -> ReconciliationResult:
    region = request.get_property(PropertyKeys.REGION)
    admin_account_id = request.get_property(PropertyKeys.ADMIN_ACCOUNT_ID)
    macie_client = create_macie_client(region)

    if request.is_delete:
        disable_members(macie_client)
        return ReconciliationResult(request.physical_resource_id)

    enable_members(macie_client, admin_account_id)
    return ReconciliationResult(generate_physical_resource_id(admin_account_id, region))


def create_macie_client(region: str) -> Macie2Client:
    return boto3.client("macie2", region_name=region, config=BOTO_CONFIG)


# pylint: disable=cell-var-from-loop
def enable_members(macie_client: Macie2Client, admin_account_id: str) -> None:
    enable_macie_session(macie_client)

    member_account_ids = {
        member["accountId"]
        for member in list_members(macie_client)
        if member.get("relationshipStatus") in ASSOCIATED_RELATIONSHIP_STATUSES
    }
    for account in list_active_accounts():
        account_id = account["Id"]
        if account_id == admin_account_id or account_id in member_account_ids:
            continue
        throttling_back_off(
            lambda: macie_client.create_member(
                account={"accountId": account_id, "email": account["Email"]},
            )
        )
        logger.info("Macie member created", extra={"account_id": account_id})

    enable_organization_auto_enable(macie_client, True)


# pylint: disable=cell-var-from-loop
def disable_members(macie_client: Macie2Client) -> None:
    try:
        enable_organization_auto_enable(macie_client, False)
        members = list(list_members(macie_client))
    except ClientError as error:
        if error.response["Error"]["Code"] not in MACIE_NOT_ENABLED_ERROR_CODES:
            raise
        logger.info("Macie is not enabled, no members to remove")
        return

    for member in members:
        account_id = member["accountId"]
        try:
            if member.get("relationshipStatus") in ASSOCIATED_RELATIONSHIP_STATUSES:
                throttling_back_off(lambda: macie_client.disassociate_member(id=account_id))
            throttling_back_off(lambda: macie_client.delete_member(id=account_id))
        except ClientError as error:
            if error.response["Error"]["Code"] != MEMBER_NOT_FOUND_ERROR_CODE:
                raise
        logger.info("Macie member removed", extra={"account_id": account_id})


def enable_macie_session(macie_client: Macie2Client) -> None:
    try:
        macie_client.get_macie_session()
        return
    except ClientError as error:
        if error.response["Error"]["Code"] not in MACIE_NOT_ENABLED_ERROR_CODES:
            raise

    throttling_back_off(lambda: macie_client.enable_macie(status="ENABLED"))
    logger.info("Macie enabled")


def enable_organization_auto_enable(macie_client: Macie2Client, auto_enable: bool) -> None:
    configuration = macie_client.describe_organization_configuration()
    if configuration.get("autoEnable", False) == auto_enable:
        return

    throttling_back_off(lambda: macie_client.update_organization_configuration(autoEnable=auto_enable))
    logger.info("Macie organization auto-enable updated", extra={"auto_enable": auto_enable})


def list_members(macie_client: Macie2Client) -> Iterator[MemberTypeDef]:
    paginator = macie_client.get_paginator("list_members")
    for page in paginator.paginate(onlyAssociated="false"):
        for member in page.get("members", []):
            yield member


def list_active_accounts() -> Iterator[AccountTypeDef]:
    paginator = ORGANIZATIONS_CLIENT.get_paginator("list_accounts")
    for page in paginator.paginate():
        for account in page.get("Accounts", []):
            if account.get("Status") == ACTIVE_ACCOUNT_STATUS:
                yield account


def generate_physical_resource_id(admin_account_id: str, region: str) -> str:
    return f"{admin_account_id}_{region}"
