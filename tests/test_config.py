"""Unit tests for landing zone configuration loading."""

import os

import aws_cdk as cdk
import pytest

from landing_zone.config import LandingZoneConfig, PolicyConfig, TesterPipelineConfig
from landing_zone.organizations_policy import PolicyType, Tag


class TestPolicyConfig:

    def test_from_dict(self):
        policy = PolicyConfig.from_dict(
            {
                "name": "deny-leave-organization",
                "path": "policies/deny-leave-organization.json",
                "type": "SERVICE_CONTROL_POLICY",
                "description": "Prevents leaving the organization",
                "tags": {"owner": "platform", "tier": "1"},
                "targets": ["ou-1111", "r-root"],
            },
            base_path="/repo",
        )

        assert policy.name == "deny-leave-organization"
        assert policy.path == os.path.join("/repo", "policies/deny-leave-organization.json")
        assert policy.policy_type == PolicyType.SERVICE_CONTROL_POLICY
        assert policy.tags == [Tag("owner", "platform"), Tag("tier", "1")]
        assert policy.target_ids == ["ou-1111", "r-root"]

    def test_absolute_path_is_kept(self):
        policy = PolicyConfig.from_dict(
            {"name": "tags", "path": "/policies/tags.json", "type": "TAG_POLICY"}, base_path="/repo"
        )

        assert policy.path == "/policies/tags.json"
        assert policy.description == ""
        assert policy.target_ids == []

    def test_unsupported_type(self):
        with pytest.raises(ValueError, match="Unsupported policy type"):
            PolicyConfig.from_dict({"name": "x", "path": "x.json", "type": "RESOURCE_CONTROL"})

    @pytest.mark.parametrize("missing", ["name", "path", "type"])
    def test_required_keys(self, missing):
        data = {"name": "x", "path": "x.json", "type": "TAG_POLICY"}
        del data[missing]

        with pytest.raises(ValueError, match=missing):
            PolicyConfig.from_dict(data)


class TestTesterPipelineConfig:

    def test_defaults(self):
        config = TesterPipelineConfig.from_dict({"source-repository-name": "landing-zone"})

        assert config.source_branch_name == "main"
        assert config.management_cross_account_role_name == "AWSControlTowerExecution"
        assert config.tester_app_directory == "tester"
        assert config.management_account_id is None

    def test_requires_source_repository(self):
        with pytest.raises(ValueError, match="source-repository-name"):
            TesterPipelineConfig.from_dict({"source-branch-name": "main"})


class TestLandingZoneConfig:

    def test_empty_context(self):
        config = LandingZoneConfig.from_context(cdk.App().node)

        assert config.qualifier == "aws-landing-zone"
        assert config.policies == []
        assert config.macie_admin_account_id is None
        assert config.tester_pipeline is None

    def test_from_context(self):
        app = cdk.App(
            context={
                "qualifier": "acme-lz",
                "policies": [{"name": "tags", "path": "tags.json", "type": "TAG_POLICY", "targets": ["r-root"]}],
                "macie-admin-account-id": "111111111111",
                "macie-regions": ["us-east-1", "eu-west-1"],
                "tester-pipeline": {
                    "source-repository-name": "acme-lz",
                    "tester-app-directory": "functional-tests",
                    "management-account-id": "999999999999",
                    "management-account-role-name": "OrganizationAccountAccessRole",
                },
            }
        )

        config = LandingZoneConfig.from_context(app.node, base_path="/repo")

        assert config.qualifier == "acme-lz"
        assert [policy.name for policy in config.policies] == ["tags"]
        assert config.policies[0].path == os.path.join("/repo", "tags.json")
        assert config.macie_admin_account_id == "111111111111"
        assert config.macie_regions == ["us-east-1", "eu-west-1"]
        assert config.tester_pipeline == TesterPipelineConfig(
            source_repository_name="acme-lz",
            tester_app_directory="functional-tests",
            management_account_id="999999999999",
            management_account_role_name="OrganizationAccountAccessRole",
        )
