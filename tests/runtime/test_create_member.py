"""Unit tests for the Macie member enablement handler."""

from unittest.mock import MagicMock, call, patch

import pytest
from botocore.exceptions import ClientError

import create_member

ADMIN_ACCOUNT_ID = "111111111111"
REGION = "eu-west-1"
PROPERTIES = {"region": REGION, "adminAccountId": ADMIN_ACCOUNT_ID, "uuid": "uuid-1"}

ACCOUNTS = [
    {"Id": ADMIN_ACCOUNT_ID, "Email": "admin@example.com", "Status": "ACTIVE"},
    {"Id": "222222222222", "Email": "workload@example.com", "Status": "ACTIVE"},
    {"Id": "333333333333", "Email": "member@example.com", "Status": "ACTIVE"},
    {"Id": "444444444444", "Email": "closed@example.com", "Status": "SUSPENDED"},
]


@pytest.fixture
def mock_organizations():
    client = MagicMock()
    client.get_paginator.return_value.paginate.return_value = [
        {"Accounts": ACCOUNTS[:2]},
        {"Accounts": ACCOUNTS[2:]},
    ]
    with patch.object(create_member, "ORGANIZATIONS_CLIENT", client):
        yield client


@pytest.fixture
def mock_macie():
    client = MagicMock()
    client.get_paginator.return_value.paginate.return_value = [
        {"members": [{"accountId": "333333333333", "relationshipStatus": "Enabled"}]},
    ]
    client.describe_organization_configuration.return_value = {"autoEnable": False}
    with patch.object(create_member, "create_macie_client", return_value=client) as factory:
        client.factory = factory
        yield client


class TestCreate:

    def test_creates_missing_members(self, mock_organizations, mock_macie, cfn_event, lambda_context):
        result = create_member.lambda_handler(cfn_event("Create", PROPERTIES), lambda_context)

        assert result == {"PhysicalResourceId": "111111111111_eu-west-1", "Status": "SUCCESS"}
        mock_macie.factory.assert_called_once_with(REGION)
        mock_macie.get_paginator.assert_called_once_with("list_members")
        mock_macie.get_paginator.return_value.paginate.assert_called_once_with(onlyAssociated="false")
        mock_macie.create_member.assert_called_once_with(
            account={"accountId": "222222222222", "email": "workload@example.com"}
        )
        mock_macie.update_organization_configuration.assert_called_once_with(autoEnable=True)
        mock_macie.enable_macie.assert_not_called()

    def test_matching_membership_is_a_no_op(self, mock_organizations, mock_macie, cfn_event, lambda_context):
        mock_macie.get_paginator.return_value.paginate.return_value = [
            {
                "members": [
                    {"accountId": "222222222222", "relationshipStatus": "Paused"},
                    {"accountId": "333333333333", "relationshipStatus": "Enabled"},
                ]
            },
        ]
        mock_macie.describe_organization_configuration.return_value = {"autoEnable": True}

        result = create_member.lambda_handler(
            cfn_event("Update", PROPERTIES, "111111111111_eu-west-1"), lambda_context
        )

        assert result == {"PhysicalResourceId": "111111111111_eu-west-1", "Status": "SUCCESS"}
        mock_macie.create_member.assert_not_called()
        mock_macie.update_organization_configuration.assert_not_called()

    def test_enables_macie_when_disabled(self, mock_organizations, mock_macie, cfn_event, lambda_context):
        mock_macie.get_macie_session.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "Macie is not enabled"}}, "GetMacieSession"
        )

        create_member.lambda_handler(cfn_event("Create", PROPERTIES), lambda_context)

        mock_macie.enable_macie.assert_called_once_with(status="ENABLED")

    def test_reassociates_removed_and_resigned_members(
        self, mock_organizations, mock_macie, cfn_event, lambda_context
    ):
        mock_macie.get_paginator.return_value.paginate.return_value = [
            {
                "members": [
                    {"accountId": "222222222222", "relationshipStatus": "Removed"},
                    {"accountId": "333333333333", "relationshipStatus": "Resigned"},
                ]
            },
        ]
        mock_macie.describe_organization_configuration.return_value = {"autoEnable": True}

        create_member.lambda_handler(cfn_event("Update", PROPERTIES, "111111111111_eu-west-1"), lambda_context)

        assert mock_macie.create_member.call_args_list == [
            call(account={"accountId": "222222222222", "email": "workload@example.com"}),
            call(account={"accountId": "333333333333", "email": "member@example.com"}),
        ]

    def test_get_session_failure_propagates(self, mock_organizations, mock_macie, cfn_event, lambda_context):
        mock_macie.get_macie_session.side_effect = ClientError(
            {"Error": {"Code": "InternalServerException"}}, "GetMacieSession"
        )

        with pytest.raises(ClientError):
            create_member.lambda_handler(cfn_event("Create", PROPERTIES), lambda_context)

        mock_macie.create_member.assert_not_called()


class TestDelete:

    def test_removes_members_and_disables_auto_enable(
        self, mock_organizations, mock_macie, cfn_event, lambda_context
    ):
        mock_macie.describe_organization_configuration.return_value = {"autoEnable": True}

        result = create_member.lambda_handler(
            cfn_event("Delete", PROPERTIES, "111111111111_eu-west-1"), lambda_context
        )

        assert result == {"PhysicalResourceId": "111111111111_eu-west-1", "Status": "SUCCESS"}
        mock_macie.update_organization_configuration.assert_called_once_with(autoEnable=False)
        mock_macie.disassociate_member.assert_called_once_with(id="333333333333")
        mock_macie.delete_member.assert_called_once_with(id="333333333333")
        mock_organizations.get_paginator.assert_not_called()

    def test_member_already_removed_succeeds(self, mock_organizations, mock_macie, cfn_event, lambda_context):
        mock_macie.disassociate_member.side_effect = ClientError(
            {"Error": {"Code": "ResourceNotFoundException"}}, "DisassociateMember"
        )

        result = create_member.lambda_handler(
            cfn_event("Delete", PROPERTIES, "111111111111_eu-west-1"), lambda_context
        )

        assert result["Status"] == "SUCCESS"
        mock_macie.delete_member.assert_not_called()

    def test_macie_not_enabled_succeeds(self, mock_organizations, mock_macie, cfn_event, lambda_context):
        not_enabled = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "Macie is not enabled"}}, "ListMembers"
        )
        mock_macie.describe_organization_configuration.side_effect = not_enabled
        mock_macie.get_paginator.return_value.paginate.side_effect = not_enabled

        result = create_member.lambda_handler(
            cfn_event("Delete", PROPERTIES, "111111111111_eu-west-1"), lambda_context
        )

        assert result == {"PhysicalResourceId": "111111111111_eu-west-1", "Status": "SUCCESS"}
        mock_macie.update_organization_configuration.assert_not_called()
        mock_macie.disassociate_member.assert_not_called()
        mock_macie.delete_member.assert_not_called()

    def test_removed_member_is_deleted_without_disassociation(
        self, mock_organizations, mock_macie, cfn_event, lambda_context
    ):
        mock_macie.get_paginator.return_value.paginate.return_value = [
            {"members": [{"accountId": "222222222222", "relationshipStatus": "Removed"}]},
        ]

        create_member.lambda_handler(cfn_event("Delete", PROPERTIES, "111111111111_eu-west-1"), lambda_context)

        mock_macie.disassociate_member.assert_not_called()
        mock_macie.delete_member.assert_called_once_with(id="222222222222")

    def test_other_errors_propagate(self, mock_organizations, mock_macie, cfn_event, lambda_context):
        mock_macie.describe_organization_configuration.side_effect = ClientError(
            {"Error": {"Code": "InternalServerException"}}, "DescribeOrganizationConfiguration"
        )

        with pytest.raises(ClientError):
            create_member.lambda_handler(cfn_event("Delete", PROPERTIES, "111111111111_eu-west-1"), lambda_context)
