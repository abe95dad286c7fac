from aws_cdk import (
    aws_s3 as s3,
    Duration,
    RemovalPolicy,
    Stack,
)
from constructs import Construct


class CiAuditLogging(Construct):

    def __init__(self, scope: Stack) -> None:
        super().__init__(scope, "AuditLogging")

        # Load balancer access logs only support SSE-S3 encryption
        self.bucket = s3.Bucket(
            self,
            "jenkinsAuditBucket",
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            encryption=s3.BucketEncryption.S3_MANAGED,
            enforce_ssl=True,
            removal_policy=RemovalPolicy.RETAIN,
            lifecycle_rules=[
                s3.LifecycleRule(
                    transitions=[
                        s3.Transition(
                            storage_class=s3.StorageClass.INFREQUENT_ACCESS,
                            transition_after=Duration.days(90),
                        )
                    ],
                )
            ],
        )
