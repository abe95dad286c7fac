from aws_cdk import (
    aws_ec2 as ec2,
    aws_logs as logs,
    RemovalPolicy,
    Stack,
)
from constructs import Construct


class Network(Construct):

    def __init__(self, scope: Stack, cidr: str) -> None:
        super().__init__(scope, "Network")

        self.flow_log_group = logs.LogGroup(
            self,
            "VPCFlowLogs",
            log_group_name=f"{scope.stack_name}/vpc/flow-logs",
            retention=logs.RetentionDays.ONE_MONTH,
            removal_policy=RemovalPolicy.DESTROY,
        )

        self.vpc = ec2.Vpc(
            self,
            "Vpc",
            ip_addresses=ec2.IpAddresses.cidr(cidr),
            flow_logs={
                "cloudwatch": ec2.FlowLogOptions(
                    destination=ec2.FlowLogDestination.to_cloud_watch_logs(
                        self.flow_log_group
                    ),
                    traffic_type=ec2.FlowLogTrafficType.ALL,
                )
            },
        )
