import os
from dataclasses import dataclass

import pytest

# Lambda handlers create their boto3 clients at import time
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "landing-zone-tests")

ACCOUNT_ID = "123456789012"
REGION = "us-east-1"


@dataclass
class FakeLambdaContext:
    function_name: str = "test"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = f"arn:aws:lambda:{REGION}:{ACCOUNT_ID}:function:test"
    aws_request_id: str = "da658bd3-2d6f-4e7b-8ec2-937234644fdc"
    tenant_id: str | None = None


@pytest.fixture
def lambda_context():
    return FakeLambdaContext()


def _cfn_event(request_type, properties, physical_resource_id=None):
    event = {
        "RequestType": request_type,
        "ServiceToken": f"arn:aws:lambda:{REGION}:{ACCOUNT_ID}:function:provider",
        "ResponseURL": "https://cloudformation-custom-resource-response.example.com/",
        "StackId": f"arn:aws:cloudformation:{REGION}:{ACCOUNT_ID}:stack/LandingZone/guid",
        "RequestId": "request-id",
        "LogicalResourceId": "Resource",
        "ResourceType": "Custom::Test",
        "ResourceProperties": properties,
    }
    if physical_resource_id is not None:
        event["PhysicalResourceId"] = physical_resource_id
    return event


@pytest.fixture
def cfn_event():
    return _cfn_event
