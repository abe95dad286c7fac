import logging
from typing import Optional

from aws_cdk import (
    aws_s3 as s3,
    Annotations,
    CfnOutput,
    CfnParameter,
    Stack,
)
from constructs import Construct

from .additional_commands import RunAdditionalCommands
from .agent_nodes import AgentNodes
from .audit_logging import CiAuditLogging
from .deployment_config import (
    CIStackProps,
    ContextParameters,
    resolve_deployment_config,
)
from .ecs import ECSCluster
from .imported_secrets import ImportedSecrets
from .jenkins_controller import JenkinsController
from .load_balancer import JenkinsExternalLoadBalancer
from .monitoring import JenkinsMonitoring
from .network import Network
from .secret_credentials import AWSSecretsJenkinsCredentials
from .security_groups import JenkinsSecurityGroups
from .settings import Settings
from .waf import JenkinsWAF

logger = logging.getLogger(__name__)

PROD_AGENTS_WARNING = (
    "The production jenkins agents use AMIs that are only publicly available in "
    "us-east-1. To deploy in another region, copy the AMIs to that region and "
    "update the ami ids in agent_catalog.py, otherwise the agents will not spin up."
)


class JenkinsStack(Stack):

    def __init__(
        self,
        scope: Construct,
        id: str,
        props: Optional[CIStackProps] = None,
        settings: Optional[Settings] = None,
        **kwargs,
    ):
        super().__init__(scope, id, **kwargs)

        settings = settings or Settings()
        # Resolve and validate everything before the first resource is declared
        self.config = resolve_deployment_config(props, ContextParameters.from_node(self.node))
        logger.info(
            "Resolved %s: ssl=%s auth=%s deployment=%s agents=%d",
            id,
            self.config.use_ssl,
            self.config.auth_type.value,
            self.config.deployment_type.value,
            len(self.config.agent_nodes),
        )

        audit_logging = CiAuditLogging(self)
        network = Network(self, cidr=settings.cidr)

        # Setting CfnParameters to record the value in cloudFormation
        CfnParameter(
            self,
            "authType",
            description="Auth type for jenkins login",
            default=self.config.auth_type.value,
        )
        CfnParameter(
            self,
            "useSsl",
            description="If the jenkins instance should be access via SSL",
            default="true" if self.config.use_ssl else "false",
        )

        self.security_groups = JenkinsSecurityGroups(
            self,
            network=network,
            use_ssl=self.config.use_ssl,
            server_access=self.config.server_access,
        )
        secrets = ImportedSecrets(self)

        if self.config.use_prod_agents:
            logger.warning(PROD_AGENTS_WARNING)
            Annotations.of(self).add_warning(PROD_AGENTS_WARNING)

        self.agent_nodes = AgentNodes(
            self,
            nodes=self.config.agent_nodes,
            assume_roles=self.config.agent_assume_roles,
        )

        ecs_cluster = ECSCluster(
            self,
            network=network,
            security_groups=self.security_groups,
            instance_type=settings.main_node_instance_type,
            data_retention=self.config.data_retention,
        )
        self.controller = JenkinsController(
            self,
            config=self.config,
            settings=settings,
            ecs_cluster=ecs_cluster,
            network=network,
            security_groups=self.security_groups,
            agent_nodes=self.agent_nodes,
            secrets=secrets,
        )

        self.load_balancer = JenkinsExternalLoadBalancer(
            self,
            network=network,
            security_groups=self.security_groups,
            controller=self.controller,
            secrets=secrets,
            use_ssl=self.config.use_ssl,
            access_log_bucket=audit_logging.bucket,
        )

        JenkinsWAF(self, load_balancer=self.load_balancer.load_balancer)

        artifact_bucket = s3.Bucket(
            self,
            "BuildBucket",
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            encryption=s3.BucketEncryption.S3_MANAGED,
            enforce_ssl=True,
        )
        artifact_bucket.grant_read_write(self.agent_nodes.role)

        AWSSecretsJenkinsCredentials(self, task_role=self.controller.task_definition.task_role)

        self.monitoring = JenkinsMonitoring(
            self,
            load_balancer=self.load_balancer,
            controller=self.controller,
            alarm_email=settings.alarm_email,
        )

        if self.config.additional_commands_path:
            RunAdditionalCommands(
                self,
                file_path=self.config.additional_commands_path,
                target=ecs_cluster.asg,
            )

        CfnOutput(
            self,
            "Artifact Bucket Arn",
            value=artifact_bucket.bucket_arn,
            export_name="buildBucketArn",
        )
        CfnOutput(
            self,
            "LoadBalancerDnsName",
            value=self.load_balancer.load_balancer.load_balancer_dns_name,
        )
