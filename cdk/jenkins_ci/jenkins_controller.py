import os

from aws_cdk import (
    aws_ecs as ecs,
    aws_ecr_assets as ecr,
    aws_ec2 as ec2,
    aws_efs,
    aws_iam as iam,
    aws_logs as logs,
    RemovalPolicy,
    Stack,
)
from constructs import Construct

from .agent_nodes import AgentNodes
from .casc import load_env_vars, render_casc
from .deployment_config import AuthType, DeploymentConfig
from .ecs import ECSCluster
from .imported_secrets import ImportedSecrets
from .network import Network
from .security_groups import JenkinsSecurityGroups
from .settings import Settings

DOCKER_DIR = os.path.join(os.path.dirname(__file__), os.pardir, "docker")
CASC_PATH = "/var/jenkins_casc/config-as-code.yaml"
CONTAINER_NAME = "jenkins"
HTTP_PORT = 8080
AGENT_PORT = 50000


class JenkinsController(Construct):

    def __init__(
        self,
        scope: Stack,
        config: DeploymentConfig,
        settings: Settings,
        ecs_cluster: ECSCluster,
        network: Network,
        security_groups: JenkinsSecurityGroups,
        agent_nodes: AgentNodes,
        secrets: ImportedSecrets,
    ) -> None:
        super().__init__(scope, "MainNode")

        # Building a custom image for jenkins controller.
        self.container_image = ecr.DockerImageAsset(
            self, "DockerImage", directory=os.path.join(DOCKER_DIR, "controller")
        )

        self.log_group = logs.LogGroup(
            self,
            "LogGroup",
            retention=logs.RetentionDays.ONE_MONTH,
            removal_policy=RemovalPolicy.DESTROY,
        )

        self.casc_content = render_casc(
            config,
            region=scope.region,
            subnet_id=network.vpc.private_subnets[0].subnet_id,
            agent_security_group_id=security_groups.agent_node_sg.security_group_id,
            instance_profile_arn=agent_nodes.instance_profile.instance_profile_arn,
            env_vars=load_env_vars(config.env_vars_file_path),
        )

        self.task_definition = ecs.Ec2TaskDefinition(
            self,
            "TaskDef",
            family=f"{scope.stack_name}-controller",
            network_mode=ecs.NetworkMode.AWS_VPC,
        )

        self.container = self.task_definition.add_container(
            CONTAINER_NAME,
            image=ecs.ContainerImage.from_docker_image_asset(self.container_image),
            cpu=settings.controller_cpu,
            memory_limit_mib=settings.controller_memory_limit_mib,
            logging=ecs.LogDrivers.aws_logs(
                stream_prefix="controller",
                log_group=self.log_group,
            ),
            environment={
                # https://github.com/jenkinsci/docker/blob/master/README.md#passing-jvm-parameters
                "JAVA_OPTS": " ".join(
                    [
                        "-Djenkins.install.runSetupWizard=false",
                        "-Dhudson.slaves.NodeProvisioner.initialDelay=0",
                        "-Dhudson.slaves.NodeProvisioner.MARGIN=50",
                        "-Dhudson.slaves.NodeProvisioner.MARGIN0=0.85",
                    ]
                ),
                # https://github.com/jenkinsci/configuration-as-code-plugin/blob/master/README.md#getting-started
                "CASC_JENKINS_CONFIG": CASC_PATH,
                "CASC_CONFIG_CONTENT": self.casc_content,
                "TZ": settings.timezone,
            },
            secrets=self._container_secrets(config, secrets, agent_nodes),
            port_mappings=[
                ecs.PortMapping(container_port=HTTP_PORT),
                ecs.PortMapping(container_port=AGENT_PORT),
            ],
        )

        self.service = ecs.Ec2Service(
            self,
            "Service",
            cluster=ecs_cluster.cluster,
            task_definition=self.task_definition,
            desired_count=1,
            min_healthy_percent=0,
            max_healthy_percent=100,
            security_groups=[security_groups.main_node_sg],
            vpc_subnets=ec2.SubnetSelection(
                subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS
            ),
            capacity_provider_strategies=[
                ecs.CapacityProviderStrategy(
                    capacity_provider=ecs_cluster.capacity_provider.capacity_provider_name,
                    weight=1,
                )
            ],
            enable_execute_command=True,
        )

        # Mount EFS volume
        ecs_cluster.filesystem.connections.allow_default_port_from(self.service)
        access_point = ecs_cluster.filesystem.add_access_point(
            "AccessPoint",
            path="/jenkins-home",
            posix_user=aws_efs.PosixUser(gid="1000", uid="1000"),
            create_acl=aws_efs.Acl(
                owner_gid="1000", owner_uid="1000", permissions="750"
            ),
        )
        self.task_definition.add_volume(
            name="jenkins-home",
            efs_volume_configuration=ecs.EfsVolumeConfiguration(
                file_system_id=ecs_cluster.filesystem.file_system_id,
                transit_encryption="ENABLED",
                authorization_config=ecs.AuthorizationConfig(
                    access_point_id=access_point.access_point_id,
                    iam="ENABLED",
                ),
            ),
        )
        ecs_cluster.filesystem.grant_read_write(self.task_definition.task_role)
        self.container.add_mount_points(
            ecs.MountPoint(
                container_path="/var/jenkins_home",
                source_volume="jenkins-home",
                read_only=False,
            )
        )

        self._add_ec2_plugin_permissions(scope, agent_nodes)

    @staticmethod
    def _container_secrets(config, secrets: ImportedSecrets, agent_nodes: AgentNodes):
        container_secrets = {
            "JENKINS_URL": ecs.Secret.from_secrets_manager(secrets.redirect_url),
            "AGENT_SSH_PRIVATE_KEY": ecs.Secret.from_ssm_parameter(
                agent_nodes.key_pair.private_key
            ),
        }
        if config.auth_type is AuthType.DEFAULT:
            container_secrets["ADMIN_PASSWORD"] = ecs.Secret.from_secrets_manager(
                secrets.admin_password
            )
        else:
            container_secrets["AUTH_CLIENT_ID"] = ecs.Secret.from_secrets_manager(
                secrets.auth_configuration, "clientId"
            )
            container_secrets["AUTH_CLIENT_SECRET"] = ecs.Secret.from_secrets_manager(
                secrets.auth_configuration, "clientSecret"
            )
        if config.auth_type is AuthType.OIDC:
            container_secrets["OIDC_WELL_KNOWN_URL"] = ecs.Secret.from_secrets_manager(
                secrets.auth_configuration, "wellKnownOpenIDConfigurationUrl"
            )
        return container_secrets

    def _add_ec2_plugin_permissions(self, scope: Stack, agent_nodes: AgentNodes) -> None:
        # IAM Statements to allow the jenkins ec2 plugin to manage agent instances
        self.task_definition.add_to_task_role_policy(
            iam.PolicyStatement(
                actions=[
                    "ec2:DescribeSpotInstanceRequests",
                    "ec2:CancelSpotInstanceRequests",
                    "ec2:GetConsoleOutput",
                    "ec2:RequestSpotInstances",
                    "ec2:RunInstances",
                    "ec2:StartInstances",
                    "ec2:StopInstances",
                    "ec2:TerminateInstances",
                    "ec2:CreateTags",
                    "ec2:DeleteTags",
                    "ec2:DescribeInstances",
                    "ec2:DescribeInstanceTypes",
                    "ec2:DescribeKeyPairs",
                    "ec2:DescribeRegions",
                    "ec2:DescribeImages",
                    "ec2:DescribeAvailabilityZones",
                    "ec2:DescribeSecurityGroups",
                    "ec2:DescribeSubnets",
                    "ec2:GetPasswordData",
                ],
                resources=["*"],
                conditions={"StringEquals": {"aws:RequestedRegion": scope.region}},
            )
        )

        self.task_definition.add_to_task_role_policy(
            iam.PolicyStatement(
                actions=["ssm:GetParameters"],
                resources=[
                    "arn:aws:ssm:{0}::parameter/aws/service/*".format(scope.region)
                ],
            )
        )

        self.task_definition.add_to_task_role_policy(
            iam.PolicyStatement(
                actions=["iam:ListInstanceProfilesForRole", "iam:PassRole"],
                resources=[agent_nodes.role.role_arn],
            )
        )
