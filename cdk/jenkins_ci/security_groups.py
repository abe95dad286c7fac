from aws_cdk import (
    aws_ec2 as ec2,
    Stack,
)
from constructs import Construct

from .deployment_config import AccessPolicy, AccessType
from .errors import InvalidAccessType
from .network import Network


def peer_for(policy: AccessPolicy) -> ec2.IPeer:
    if policy.access_type is AccessType.IPV4:
        return ec2.Peer.any_ipv4() if policy.is_unrestricted else ec2.Peer.ipv4(policy.value)
    if policy.access_type is AccessType.IPV6:
        return ec2.Peer.any_ipv6() if policy.is_unrestricted else ec2.Peer.ipv6(policy.value)
    if policy.access_type is AccessType.PREFIX_LIST:
        return ec2.Peer.prefix_list(policy.value)
    if policy.access_type is AccessType.SECURITY_GROUP_ID:
        return ec2.Peer.security_group_id(policy.value)
    raise InvalidAccessType("serverAccessType", policy.access_type)


class JenkinsSecurityGroups(Construct):

    def __init__(
        self,
        scope: Stack,
        network: Network,
        use_ssl: bool,
        server_access: AccessPolicy,
    ) -> None:
        super().__init__(scope, "SecurityGroups")

        access_port = 443 if use_ssl else 80

        # Security group in front of the load balancer
        self.external_access_sg = ec2.SecurityGroup(
            self,
            "ExternalAccessSG",
            vpc=network.vpc,
            description="External access to Jenkins",
        )
        self.external_access_sg.add_ingress_rule(
            peer_for(server_access),
            ec2.Port.tcp(access_port),
            "Restrict jenkins endpoint access to this source",
        )
        if use_ssl:
            # Plain HTTP only redirects to HTTPS
            self.external_access_sg.add_ingress_rule(
                ec2.Peer.any_ipv4(),
                ec2.Port.tcp(80),
                "Allow from anyone on port 80",
            )

        self.main_node_sg = ec2.SecurityGroup(
            self,
            "MainNodeSG",
            vpc=network.vpc,
            description="Main node of Jenkins",
        )

        self.agent_node_sg = ec2.SecurityGroup(
            self,
            "AgentNodeSG",
            vpc=network.vpc,
            description="Agent Node of Jenkins",
        )
        self.agent_node_sg.add_ingress_rule(
            self.main_node_sg,
            ec2.Port.tcp(22),
            "Main node SSH access into agent nodes",
        )
        self.main_node_sg.add_ingress_rule(
            self.agent_node_sg,
            ec2.Port.tcp(50000),
            "Agent node inbound connection to main node",
        )

        self.efs_sg = ec2.SecurityGroup(
            self,
            "EfsSG",
            vpc=network.vpc,
            description="Jenkins home filesystem",
            allow_all_outbound=False,
        )
