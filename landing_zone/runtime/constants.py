# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from botocore.config import Config


# pylint: disable=too-few-public-methods
class EnvVarsNames:
    POWERTOOLS_SERVICE_NAME = "POWERTOOLS_SERVICE_NAME"
    LOG_LEVEL = "POWERTOOLS_LOG_LEVEL"


# pylint: disable=too-few-public-methods
class RequestType:
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


# pylint: disable=too-few-public-methods
class Status:
    SUCCESS = "SUCCESS"


# pylint: disable=too-few-public-methods
class PropertyKeys:
    POLICY_ID = "policyId"
    TARGET_ID = "targetId"
    TYPE = "type"
    BUCKET = "bucket"
    KEY = "key"
    NAME = "name"
    DESCRIPTION = "description"
    TAGS = "tags"
    REGION = "region"
    ADMIN_ACCOUNT_ID = "adminAccountId"


# Attached to every root, OU and account by default; detaching it locks the target out
FULL_AWS_ACCESS_POLICY_ID = "p-FullAWSAccess"

ACTIVE_ACCOUNT_STATUS = "ACTIVE"

BOTO_CONFIG = Config(
    retries={
        "max_attempts": 10,
        "mode": "adaptive",
    },
)
