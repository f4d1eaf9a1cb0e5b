# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import re


def to_pascal_case(value: str) -> str:
    """
    "aws-landing-zone" -> "AwsLandingZone", every non-alphanumeric character is a word boundary.
    """
    words = re.split(r"[^a-zA-Z0-9]+", value)
    return "".join(word[:1].upper() + word[1:].lower() for word in words if word)
