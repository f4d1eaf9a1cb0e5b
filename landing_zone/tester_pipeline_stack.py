# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from typing import Any

import aws_cdk as cdk
from constructs import Construct

from landing_zone.config import TesterPipelineConfig
from landing_zone.tester_pipeline import TesterPipeline


class TesterPipelineStack(cdk.Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        qualifier: str,
        config: TesterPipelineConfig,
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.tester_pipeline = TesterPipeline(
            self,
            "TesterPipeline",
            qualifier=qualifier,
            source_repository_name=config.source_repository_name,
            source_branch_name=config.source_branch_name,
            tester_app_directory=config.tester_app_directory,
            management_cross_account_role_name=config.management_cross_account_role_name,
            management_account_id=config.management_account_id,
            management_account_role_name=config.management_account_role_name,
        )
