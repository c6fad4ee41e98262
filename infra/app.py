#!/usr/bin/env python3
import os

import aws_cdk as cdk
from cdk_nag import AwsSolutionsChecks

from forwarder_stack import LogForwarderStack

app = cdk.App()
LogForwarderStack(
    app, "AlbLogForwarder",
    log_group_name=app.node.try_get_context("log_group_name") or "ALB-access-log",
    env=cdk.Environment(
        account=os.getenv("CDK_DEFAULT_ACCOUNT"),
        region=os.getenv("CDK_DEFAULT_REGION"),
    ),
)

# Add AWS Solutions checks for best practices
cdk.Aspects.of(app).add(AwsSolutionsChecks())
app.synth()
