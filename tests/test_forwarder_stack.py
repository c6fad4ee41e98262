# tests/test_forwarder_stack.py
import os

import aws_cdk as cdk
import pytest
from aws_cdk.assertions import Match, Template

from infra.forwarder_stack import LAYER_ASSET_DIR, LogForwarderStack


@pytest.fixture(scope="module")
def template() -> Template:
    # skip Docker bundling of the dependency layer while synthesizing
    app = cdk.App(context={"aws:cdk:bundling-stacks": []})
    stack = LogForwarderStack(app, "TestForwarder", log_group_name="ALB-access-log", publish_batch_size=50)
    return Template.from_stack(stack)


def test_log_group_is_created(template: Template):
    template.has_resource_properties("AWS::Logs::LogGroup", {
        "LogGroupName": "ALB-access-log",
    })


def test_function_configuration(template: Template):
    template.has_resource_properties("AWS::Lambda::Function", {
        "Handler": "forward_logs.app.handler",
        "Runtime": "python3.12",
        "Environment": {
            "Variables": {
                "LOG_GROUP_NAME": Match.any_value(),
                "PUBLISH_BATCH_SIZE": "50",
            }
        },
    })


def test_bucket_notifies_on_gzip_objects(template: Template):
    template.has_resource_properties("Custom::S3BucketNotifications", {
        "NotificationConfiguration": {
            "LambdaFunctionConfigurations": [
                Match.object_like({
                    "Events": ["s3:ObjectCreated:*"],
                    "Filter": {"Key": {"FilterRules": [{"Name": "suffix", "Value": ".gz"}]}},
                })
            ]
        }
    })


def test_function_can_write_log_events(template: Template):
    template.has_resource_properties("AWS::IAM::Policy", {
        "PolicyDocument": {
            "Statement": Match.array_with([
                Match.object_like({
                    "Action": Match.array_with(["logs:CreateLogStream", "logs:PutLogEvents"]),
                    "Effect": "Allow",
                })
            ])
        }
    })


def test_dependency_layer_is_attached(template: Template):
    """
    pydantic is not in the Lambda runtime, so the function must carry the layer.
    """
    template.resource_count_is("AWS::Lambda::LayerVersion", 1)
    template.has_resource_properties("AWS::Lambda::LayerVersion", {
        "CompatibleRuntimes": ["python3.12"],
    })
    template.has_resource_properties("AWS::Lambda::Function", {
        "Handler": "forward_logs.app.handler",
        "Layers": [{"Ref": Match.string_like_regexp("ForwarderDependencies")}],
    })


def test_layer_requirements_cover_handler_imports():
    with open(os.path.join(LAYER_ASSET_DIR, "requirements.txt"), "r") as f:
        packages = {line.split(">=")[0].strip() for line in f if line.strip()}
    assert {"pydantic", "pydantic-settings"} <= packages
