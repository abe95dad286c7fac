from aws_cdk import (
    aws_elasticloadbalancingv2 as elbv2,
    aws_s3 as s3,
    Duration,
    Stack,
)
from constructs import Construct

from .imported_secrets import ImportedSecrets
from .jenkins_controller import CONTAINER_NAME, HTTP_PORT, JenkinsController
from .network import Network
from .security_groups import JenkinsSecurityGroups

ACCESS_LOG_PREFIX = "loadBalancerAccessLogs"


class JenkinsExternalLoadBalancer(Construct):

    def __init__(
        self,
        scope: Stack,
        network: Network,
        security_groups: JenkinsSecurityGroups,
        controller: JenkinsController,
        secrets: ImportedSecrets,
        use_ssl: bool,
        access_log_bucket: s3.IBucket,
    ) -> None:
        super().__init__(scope, "ExternalLoadBalancer")

        self.load_balancer = elbv2.ApplicationLoadBalancer(
            self,
            "JenkinsALB",
            vpc=network.vpc,
            internet_facing=True,
            security_group=security_groups.external_access_sg,
        )
        self.load_balancer.log_access_logs(access_log_bucket, ACCESS_LOG_PREFIX)

        self.target_group = elbv2.ApplicationTargetGroup(
            self,
            "MainJenkinsNodeTarget",
            vpc=network.vpc,
            port=HTTP_PORT,
            protocol=elbv2.ApplicationProtocol.HTTP,
            target_type=elbv2.TargetType.IP,
            targets=[
                controller.service.load_balancer_target(
                    container_name=CONTAINER_NAME, container_port=HTTP_PORT
                )
            ],
            health_check=elbv2.HealthCheck(
                path="/login",
                healthy_http_codes="200",
                interval=Duration.seconds(30),
            ),
            # Reduce time ALB waits when draining tasks; service downtimes will be announced ahead of time
            deregistration_delay=Duration.seconds(0),
        )

        if use_ssl:
            certificate = elbv2.ListenerCertificate.from_arn(
                secrets.certificate_arn.secret_value.unsafe_unwrap()
            )
            self.listener = self.load_balancer.add_listener(
                "JenkinsHttpsListener",
                port=443,
                protocol=elbv2.ApplicationProtocol.HTTPS,
                certificates=[certificate],
                default_target_groups=[self.target_group],
                open=False,
            )
            self.load_balancer.add_listener(
                "JenkinsHttpListener",
                port=80,
                protocol=elbv2.ApplicationProtocol.HTTP,
                default_action=elbv2.ListenerAction.redirect(
                    protocol="HTTPS", port="443", permanent=True
                ),
                open=False,
            )
        else:
            self.listener = self.load_balancer.add_listener(
                "JenkinsHttpListener",
                port=80,
                protocol=elbv2.ApplicationProtocol.HTTP,
                default_target_groups=[self.target_group],
                open=False,
            )
