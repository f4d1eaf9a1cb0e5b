#!/usr/bin/env python3

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import os

import aws_cdk as cdk
import cdk_nag

import cdk_constants as constants
from landing_zone.config import LandingZoneConfig
from landing_zone.landing_zone_stack import LandingZoneStack
from landing_zone.tester_pipeline_stack import TesterPipelineStack

app = cdk.App()
cdk.Aspects.of(app).add(cdk_nag.AwsSolutionsChecks())

config = LandingZoneConfig.from_context(app.node, base_path=os.path.dirname(os.path.realpath(__file__)))

LandingZoneStack(
    app,
    constants.LANDING_ZONE_STACK_NAME,
    config=config,
    env=constants.ENVIRONMENT,
)

if config.tester_pipeline:
    TesterPipelineStack(
        app,
        constants.TESTER_PIPELINE_STACK_NAME,
        qualifier=config.qualifier,
        config=config.tester_pipeline,
        env=constants.ENVIRONMENT,
    )

app.synth()
