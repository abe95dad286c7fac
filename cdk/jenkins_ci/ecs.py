from aws_cdk import (
    aws_autoscaling as autoscaling,
    aws_ec2 as ec2,
    aws_ecs as ecs,
    aws_efs as efs,
    aws_logs as logs,
    RemovalPolicy,
    Stack,
)
from constructs import Construct

from .network import Network
from .security_groups import JenkinsSecurityGroups


class ECSCluster(Construct):

    def __init__(
        self,
        scope: Stack,
        network: Network,
        security_groups: JenkinsSecurityGroups,
        instance_type: str,
        data_retention: bool = False,
    ):
        super().__init__(scope, "ECSCluster")

        self.exec_log_group = logs.LogGroup(
            self,
            "ExecLogGroup",
            retention=logs.RetentionDays.ONE_MONTH,
        )

        self.cluster = ecs.Cluster(
            self,
            "Cluster",
            vpc=network.vpc,
            container_insights=True,
            execute_command_configuration=ecs.ExecuteCommandConfiguration(
                logging=ecs.ExecuteCommandLogging.OVERRIDE,
                log_configuration=ecs.ExecuteCommandLogConfiguration(
                    cloud_watch_log_group=self.exec_log_group
                ),
            ),
        )

        # Jenkins home; keep it across stack deletion when jobs and history must survive
        self.filesystem = efs.FileSystem(
            self,
            "FileSystem",
            vpc=network.vpc,
            security_group=security_groups.efs_sg,
            encrypted=True,
            lifecycle_policy=efs.LifecyclePolicy.AFTER_7_DAYS,
            removal_policy=RemovalPolicy.RETAIN if data_retention else RemovalPolicy.DESTROY,
        )

        # Single EC2 host for the main node
        self.asg = autoscaling.AutoScalingGroup(
            self,
            "MainNodeAsg",
            instance_type=ec2.InstanceType(instance_type),
            machine_image=ecs.EcsOptimizedImage.amazon_linux2023(),
            min_capacity=1,
            max_capacity=1,
            vpc=network.vpc,
            vpc_subnets=ec2.SubnetSelection(
                subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS
            ),
            require_imdsv2=True,
            ssm_session_permissions=True,
        )

        self.capacity_provider = ecs.AsgCapacityProvider(
            self,
            "AsgCapacityProvider",
            auto_scaling_group=self.asg,
            enable_managed_draining=False,
            enable_managed_termination_protection=False,
            instance_warmup_period=60,
        )
        self.cluster.add_asg_capacity_provider(self.capacity_provider)
        self.cluster.add_default_capacity_provider_strategy(
            [
                ecs.CapacityProviderStrategy(
                    capacity_provider=self.capacity_provider.capacity_provider_name
                )
            ]
        )
