import os

from aws_cdk import (
    BundlingOptions,
    Duration,
    RemovalPolicy,
    Stack,
    aws_lambda as _lambda,
    aws_lambda_event_sources as lambda_event_sources,
    aws_logs as logs,
    aws_s3 as s3,
    CfnOutput
)
from constructs import Construct

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Asset root holds the forward_logs package so its relative imports resolve
LAMBDA_ASSET_DIR = os.path.join(ROOT_DIR, "lambdas")
# requirements.txt for the third-party packages the handler imports
LAYER_ASSET_DIR = os.path.join(ROOT_DIR, "lambda_layer")


class LogForwarderStack(Stack):
    '''
    CDK stack for the access-log forwarder.
    New .gz objects in the log bucket trigger a Lambda that copies every line
    into a daily log stream of the destination log group.
    '''

    def __init__(self, scope: Construct, id: str, log_group_name: str = "ALB-access-log",
                 publish_batch_size: int = 1, **kwargs) -> None:
        super().__init__(scope, id, **kwargs)

        # Bucket the load balancer delivers its access logs to
        self.log_bucket = s3.Bucket(self, "AccessLogBucket",
            removal_policy=RemovalPolicy.DESTROY,
            auto_delete_objects=True,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            encryption=s3.BucketEncryption.S3_MANAGED,
            enforce_ssl=True,
            lifecycle_rules=[
                s3.LifecycleRule(
                    id="LogRetention",
                    enabled=True,
                    expiration=Duration.days(30),  # the lines live on in CloudWatch
                )
            ]
        )

        # Destination group; the daily streams are created by the Lambda
        self.log_group = logs.LogGroup(self, "AccessLogGroup",
            log_group_name=log_group_name,
            retention=logs.RetentionDays.THREE_MONTHS,
            removal_policy=RemovalPolicy.DESTROY,
        )

        # === Shared dependency layer (pydantic, pydantic-settings) ===
        self.dependency_layer = _lambda.LayerVersion(self, "ForwarderDependencies",
            code=_lambda.Code.from_asset(LAYER_ASSET_DIR,
                bundling=BundlingOptions(
                    image=_lambda.Runtime.PYTHON_3_12.bundling_image,
                    command=["bash", "-c", "pip install -r requirements.txt -t /asset-output/python"],
                ),
            ),
            compatible_runtimes=[_lambda.Runtime.PYTHON_3_12],
            description="Third-party packages for the log forwarder"
        )

        self.forward_lambda = _lambda.Function(self, "ForwardLogsLambda",
            runtime=_lambda.Runtime.PYTHON_3_12,
            handler="forward_logs.app.handler",
            code=_lambda.Code.from_asset(LAMBDA_ASSET_DIR),
            environment={
                "LOG_GROUP_NAME": self.log_group.log_group_name,
                "PUBLISH_BATCH_SIZE": str(publish_batch_size),
            },
            memory_size=512,
            timeout=Duration.minutes(5),
            layers=[self.dependency_layer],
        )

        # Read the objects, write the streams
        self.log_bucket.grant_read(self.forward_lambda)
        self.log_group.grant_write(self.forward_lambda)

        self.forward_lambda.add_event_source(lambda_event_sources.S3EventSource(
            self.log_bucket,
            events=[s3.EventType.OBJECT_CREATED],
            filters=[s3.NotificationKeyFilter(suffix=".gz")]  # only compressed log files
        ))

        CfnOutput(self, "LogBucketName", value=self.log_bucket.bucket_name)
        CfnOutput(self, "LogGroupName", value=self.log_group.log_group_name)
        CfnOutput(self, "ForwardLambdaArn", value=self.forward_lambda.function_arn)
