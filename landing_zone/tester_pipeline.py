# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import os
import re
import tempfile
from typing import Any

import aws_cdk as cdk
import cdk_nag
import yaml
from aws_cdk import aws_codebuild as codebuild
from aws_cdk import aws_codecommit as codecommit
from aws_cdk import aws_codepipeline as codepipeline
from aws_cdk import aws_codepipeline_actions as codepipeline_actions
from aws_cdk import aws_iam as iam
from aws_cdk import aws_kms as kms
from aws_cdk import aws_s3 as s3
from constructs import Construct

import cdk_constants as constants
from landing_zone.naming import to_pascal_case

CONFIG_REPOSITORY_BRANCH_NAME = "main"
CONFIG_FILE_NAME = "config.yaml"
DEFAULT_TEST_CONFIG: dict[str, Any] = {"tests": []}

def generate_qualifier_in_pascal_case(qualifier: str) -> str:
    return re.sub("awslandingzone", "AWSLandingZone", to_pascal_case(qualifier), flags=re.IGNORECASE)


def write_default_test_config() -> str:
    temp_dir_path = tempfile.mkdtemp(prefix="test-config-assets-")
    with open(os.path.join(temp_dir_path, CONFIG_FILE_NAME), "w", encoding="utf-8") as config_file:
        yaml.safe_dump(DEFAULT_TEST_CONFIG, config_file)
    return temp_dir_path


class TesterPipeline(Construct):
    """
    Functional test pipeline: checks out the landing zone source and a test configuration repository,
    then deploys the tester app found in `tester_app_directory` of the source repository with CodeBuild.
    """

    # pylint: disable=too-many-arguments,too-many-instance-attributes
    def __init__(
        self,
        scope: Construct,
        _id: str,
        qualifier: str,
        source_repository_name: str,
        source_branch_name: str,
        management_cross_account_role_name: str,
        management_account_id: str | None = None,
        management_account_role_name: str | None = None,
        tester_app_directory: str = constants.DEFAULT_TESTER_APP_DIRECTORY,
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, _id, **kwargs)

        self.qualifier = qualifier
        self.qualifier_in_pascal_case = generate_qualifier_in_pascal_case(qualifier)

        self.config_repository = self._create_config_repository()
        self.bucket = self._create_artifact_bucket()

        self.pipeline_role = iam.Role(
            self,
            "PipelineRole",
            assumed_by=iam.ServicePrincipal("codepipeline.amazonaws.com"),
        )

        self.pipeline = codepipeline.Pipeline(
            self,
            "Resource",
            pipeline_name=f"{self.qualifier_in_pascal_case}-TesterPipeline",
            artifact_bucket=self.bucket,
            role=self.pipeline_role,
        )

        self.config_repo_artifact = codepipeline.Artifact("Config")
        self.source_repo_artifact = codepipeline.Artifact("Source")
        self.deploy_output = codepipeline.Artifact("DeployOutput")

        self.pipeline.add_stage(
            stage_name="Source",
            actions=[
                codepipeline_actions.CodeCommitSourceAction(
                    action_name="Source",
                    repository=codecommit.Repository.from_repository_name(
                        self, "SourceRepo", source_repository_name
                    ),
                    branch=source_branch_name,
                    output=self.source_repo_artifact,
                    trigger=codepipeline_actions.CodeCommitTrigger.NONE,
                ),
                codepipeline_actions.CodeCommitSourceAction(
                    action_name="Configuration",
                    repository=self.config_repository,
                    branch=CONFIG_REPOSITORY_BRANCH_NAME,
                    output=self.config_repo_artifact,
                    trigger=codepipeline_actions.CodeCommitTrigger.EVENTS,
                ),
            ],
        )

        self.tester_project = self._create_tester_project(
            source_repository_name,
            source_branch_name,
            management_cross_account_role_name,
            management_account_id,
            management_account_role_name,
            tester_app_directory,
        )

        self.pipeline.add_stage(
            stage_name="Deploy",
            actions=[
                codepipeline_actions.CodeBuildAction(
                    action_name="Deploy",
                    project=self.tester_project,
                    input=self.source_repo_artifact,
                    extra_inputs=[self.config_repo_artifact],
                    outputs=[self.deploy_output],
                    role=self.pipeline_role,
                )
            ],
        )

        self._add_cdk_nag_suppressions()

    def _create_config_repository(self) -> codecommit.Repository:
        config_repository = codecommit.Repository(
            self,
            "ConfigRepository",
            repository_name=f"{self.qualifier}-test-config",
            description="Landing zone functional test configuration repository",
            code=codecommit.Code.from_directory(write_default_test_config(), CONFIG_REPOSITORY_BRANCH_NAME),
        )

        # Test configuration outlives the pipeline, on delete and on replacement
        config_repository.apply_removal_policy(cdk.RemovalPolicy.RETAIN)

        return config_repository

    def _create_artifact_bucket(self) -> s3.Bucket:
        stack = cdk.Stack.of(self)

        encryption_key = kms.Key(
            self,
            "BucketKey",
            alias=f"alias/{self.qualifier}/test-pipeline/s3",
            description="Landing zone functional test pipeline bucket CMK",
            enable_key_rotation=True,
            removal_policy=cdk.RemovalPolicy.RETAIN,
        )

        return s3.Bucket(
            self,
            "SecureBucket",
            bucket_name=f"{self.qualifier}-test-pipeline-{stack.account}-{stack.region}",
            encryption=s3.BucketEncryption.KMS,
            encryption_key=encryption_key,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            versioned=True,
            removal_policy=cdk.RemovalPolicy.RETAIN,
        )

    # pylint: disable=too-many-arguments
    def _create_tester_project(
        self,
        source_repository_name: str,
        source_branch_name: str,
        management_cross_account_role_name: str,
        management_account_id: str | None,
        management_account_role_name: str | None,
        tester_app_directory: str,
    ) -> codebuild.PipelineProject:
        deploy_role = iam.Role(
            self,
            "DeployRole",
            assumed_by=iam.ServicePrincipal("codebuild.amazonaws.com"),
            # TODO: scope down to the tester app's CloudFormation and Config permissions
            managed_policies=[iam.ManagedPolicy.from_aws_managed_policy_name("AdministratorAccess")],
        )

        environment_variables = {
            "LANDING_ZONE_REPOSITORY_NAME": codebuild.BuildEnvironmentVariable(
                type=codebuild.BuildEnvironmentVariableType.PLAINTEXT,
                value=source_repository_name,
            ),
            "LANDING_ZONE_REPOSITORY_BRANCH_NAME": codebuild.BuildEnvironmentVariable(
                type=codebuild.BuildEnvironmentVariableType.PLAINTEXT,
                value=source_branch_name,
            ),
        }
        if management_account_id and management_account_role_name:
            environment_variables["MANAGEMENT_ACCOUNT_ID"] = codebuild.BuildEnvironmentVariable(
                type=codebuild.BuildEnvironmentVariableType.PLAINTEXT,
                value=management_account_id,
            )
            environment_variables["MANAGEMENT_ACCOUNT_ROLE_NAME"] = codebuild.BuildEnvironmentVariable(
                type=codebuild.BuildEnvironmentVariableType.PLAINTEXT,
                value=management_account_role_name,
            )

        deploy_command = " ".join(
            [
                "cdk deploy --require-approval never",
                f"--context account={cdk.Aws.ACCOUNT_ID}",
                f"--context region={cdk.Aws.REGION}",
                f"--context management-cross-account-role-name={management_cross_account_role_name}",
                f"--context qualifier={self.qualifier}",
                "--context config-dir=$CODEBUILD_SRC_DIR_Config",
            ]
        )

        return codebuild.PipelineProject(
            self,
            "TesterProject",
            project_name=f"{self.qualifier_in_pascal_case}-TesterProject",
            role=deploy_role,
            encryption_key=self.bucket.encryption_key,
            build_spec=codebuild.BuildSpec.from_object_to_yaml(
                {
                    "version": "0.2",
                    "phases": {
                        "install": {
                            "runtime-versions": {
                                "python": "3.12",
                                "nodejs": "20",
                            },
                            "commands": ["npm install -g aws-cdk"],
                        },
                        "build": {
                            "commands": [
                                "pip install .",
                                f"cd {tester_app_directory}",
                                "env",
                                deploy_command,
                            ],
                        },
                    },
                }
            ),
            environment=codebuild.BuildEnvironment(
                build_image=codebuild.LinuxBuildImage.STANDARD_7_0,
                privileged=True,  # Docker daemon for asset bundling
                compute_type=codebuild.ComputeType.MEDIUM,
                environment_variables=environment_variables,
            ),
            cache=codebuild.Cache.local(codebuild.LocalCacheMode.SOURCE),
        )

    def _add_cdk_nag_suppressions(self) -> None:
        cdk_nag.NagSuppressions.add_resource_suppressions(
            self.bucket,
            suppressions=[
                cdk_nag.NagPackSuppression(
                    id="AwsSolutions-S1",
                    reason="Access logging is not enabled for the functional test pipeline artifacts bucket",
                )
            ],
        )
        cdk_nag.NagSuppressions.add_resource_suppressions(
            self,
            suppressions=[
                cdk_nag.NagPackSuppression(
                    id="AwsSolutions-IAM4",
                    reason="The tester deploys arbitrary test stacks and needs AdministratorAccess",
                ),
                cdk_nag.NagPackSuppression(
                    id="AwsSolutions-CB3",
                    reason="Privileged mode is required to build container assets of the tester app",
                ),
                cdk_nag.NagPackSuppression(
                    id="AwsSolutions-IAM5",
                    reason="Policies generated by CDK for the pipeline roles use wildcards",
                ),
            ],
            apply_to_children=True,
        )
