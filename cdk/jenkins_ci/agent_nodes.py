from typing import Sequence

from aws_cdk import (
    aws_ec2 as ec2,
    aws_iam as iam,
    Stack,
)
from constructs import Construct

from .agent_catalog import AgentNodeSpec


class AgentNodes(Construct):
    """
    Shared AWS resources for the EC2 build agents Jenkins launches on demand.

    The agents themselves are not CloudFormation resources; the controller
    starts them through the EC2 plugin using the templates in `nodes`.
    """

    def __init__(
        self,
        scope: Stack,
        nodes: Sequence[AgentNodeSpec],
        assume_roles: Sequence[str] = (),
    ) -> None:
        super().__init__(scope, "AgentNodes")

        self.nodes = tuple(nodes)

        # Role for the agent instances; add to this role for any aws resources that builds require
        self.role = iam.Role(
            self,
            "AgentNodeRole",
            assumed_by=iam.ServicePrincipal("ec2.amazonaws.com"),
            description="Jenkins agents Node Role",
        )
        self.role.add_managed_policy(
            iam.ManagedPolicy.from_aws_managed_policy_name(
                "AmazonSSMManagedInstanceCore"
            )
        )

        if assume_roles:
            self.role.add_to_principal_policy(
                iam.PolicyStatement(
                    actions=["sts:AssumeRole"],
                    resources=list(assume_roles),
                )
            )

        self.instance_profile = iam.InstanceProfile(
            self,
            "AgentNodeInstanceProfile",
            role=self.role,
        )

        # Private key lands in SSM parameter /ec2/keypair/<key pair id>
        self.key_pair = ec2.KeyPair(
            self,
            "AgentNodeKeyPair",
            key_pair_name=f"{scope.stack_name}-agent-node-key",
        )
