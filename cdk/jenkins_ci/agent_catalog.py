from dataclasses import dataclass
from enum import Enum
from typing import Dict


class DeploymentType(Enum):
    BTR = "BTR"  # Build Test Release
    GRADLE = "gradle"
    BENCHMARK = "benchmark"
    DEFAULT = "default"


@dataclass(frozen=True)
class AgentNodeSpec:
    """
    A build agent profile rendered into the Jenkins EC2 cloud as one template.
    """

    name: str
    deployment_type: DeploymentType
    label: str
    instance_type: str
    ami_id: str
    remote_user: str = "ec2-user"
    remote_fs: str = "/var/jenkins"
    num_executors: int = 1
    max_total_uses: int = -1
    min_spare_instances: int = 0
    idle_termination_minutes: int = 30
    device_mapping: str = "/dev/xvda=:300:true:gp3::encrypted"
    init_script: str = ""
    platform: str = "linux"
    tenancy: str = "Default"

    @property
    def pool_tags(self) -> Dict[str, str]:
        return {
            "jenkins-agent-pool": self.name,
            "jenkins-deployment-type": self.deployment_type.value,
        }


_LINUX_INIT = "sudo mkdir -p /var/jenkins && sudo chown -R ec2-user:ec2-user /var/jenkins"
_UBUNTU_INIT = "sudo mkdir -p /var/jenkins && sudo chown -R ubuntu:ubuntu /var/jenkins"


def _catalog(*nodes: AgentNodeSpec) -> Dict[str, AgentNodeSpec]:
    return {node.name: node for node in nodes}


# The production AMIs are published in us-east-1 only.
AGENT_NODE_CATALOG: Dict[str, AgentNodeSpec] = _catalog(
    AgentNodeSpec(
        name="AL2_X64_DOCKER_HOST",
        deployment_type=DeploymentType.BTR,
        label="Jenkins-Agent-AL2-X64-C54xlarge-Docker-Host",
        instance_type="c5.4xlarge",
        ami_id="ami-0a4f5ba1b2d3c4e50",
        num_executors=4,
        min_spare_instances=1,
        init_script=_LINUX_INIT,
    ),
    AgentNodeSpec(
        name="AL2_X64_DOCKER_HOST_PERF_TEST",
        deployment_type=DeploymentType.BTR,
        label="Jenkins-Agent-AL2-X64-M52xlarge-Docker-Host-Perf-Test",
        instance_type="m5.2xlarge",
        ami_id="ami-0a4f5ba1b2d3c4e50",
        num_executors=8,
        init_script=_LINUX_INIT,
    ),
    AgentNodeSpec(
        name="AL2_ARM64_DOCKER_HOST",
        deployment_type=DeploymentType.BTR,
        label="Jenkins-Agent-AL2-Arm64-C6g4xlarge-Docker-Host",
        instance_type="c6g.4xlarge",
        ami_id="ami-0c92b6e1d0f3a7b21",
        num_executors=4,
        min_spare_instances=1,
        init_script=_LINUX_INIT,
    ),
    AgentNodeSpec(
        name="AL2_ARM64_DOCKER_HOST_PERF_TEST",
        deployment_type=DeploymentType.BTR,
        label="Jenkins-Agent-AL2-Arm64-M6g2xlarge-Docker-Host-Perf-Test",
        instance_type="m6g.2xlarge",
        ami_id="ami-0c92b6e1d0f3a7b21",
        num_executors=8,
        init_script=_LINUX_INIT,
    ),
    AgentNodeSpec(
        name="AL2023_X64_DOCKER_HOST",
        deployment_type=DeploymentType.BTR,
        label="Jenkins-Agent-AL2023-X64-C54xlarge-Docker-Host",
        instance_type="c5.4xlarge",
        ami_id="ami-07d3c1f2e8a9b6c40",
        num_executors=4,
        init_script=_LINUX_INIT,
    ),
    AgentNodeSpec(
        name="AL2023_ARM64_DOCKER_HOST",
        deployment_type=DeploymentType.BTR,
        label="Jenkins-Agent-AL2023-Arm64-C6g4xlarge-Docker-Host",
        instance_type="c6g.4xlarge",
        ami_id="ami-0e5b7f9a1c3d2e480",
        num_executors=4,
        init_script=_LINUX_INIT,
    ),
    AgentNodeSpec(
        name="AL2_X64_DOCKER_HOST_SINGLE_USE",
        deployment_type=DeploymentType.BTR,
        label="Jenkins-Agent-AL2-X64-C54xlarge-Single-Host",
        instance_type="c5.4xlarge",
        ami_id="ami-0a4f5ba1b2d3c4e50",
        max_total_uses=1,
        init_script=_LINUX_INIT,
    ),
    AgentNodeSpec(
        name="UBUNTU2004_X64_DOCKER_BUILDER",
        deployment_type=DeploymentType.BTR,
        label="Jenkins-Agent-Ubuntu2004-X64-M52xlarge-Docker-Builder",
        instance_type="m5.2xlarge",
        ami_id="ami-04f1e2d3c4b5a6978",
        remote_user="ubuntu",
        num_executors=1,
        init_script=_UBUNTU_INIT,
    ),
    AgentNodeSpec(
        name="UBUNTU2004_X64_GPU",
        deployment_type=DeploymentType.BTR,
        label="Jenkins-Agent-Ubuntu2004-X64-G4dn8xlarge-GPU",
        instance_type="g4dn.8xlarge",
        ami_id="ami-09a8b7c6d5e4f3a21",
        remote_user="ubuntu",
        num_executors=1,
        init_script=_UBUNTU_INIT,
    ),
    AgentNodeSpec(
        name="WINDOWS2019_X64_DOCKER_HOST",
        deployment_type=DeploymentType.BTR,
        label="Jenkins-Agent-Windows2019-X64-C54xlarge-Docker-Host",
        instance_type="c5.4xlarge",
        ami_id="ami-0b1c2d3e4f5a69870",
        remote_user="Administrator",
        remote_fs="C:/Users/Administrator/jenkins",
        num_executors=4,
        device_mapping="/dev/sda1=:600:true:gp3::encrypted",
        platform="windows",
    ),
    AgentNodeSpec(
        name="WINDOWS2019_X64_DOCKER_BUILDER",
        deployment_type=DeploymentType.BTR,
        label="Jenkins-Agent-Windows2019-X64-C54xlarge-Docker-Builder",
        instance_type="c5.4xlarge",
        ami_id="ami-0b1c2d3e4f5a69870",
        remote_user="Administrator",
        remote_fs="C:/Users/Administrator/jenkins",
        num_executors=1,
        device_mapping="/dev/sda1=:600:true:gp3::encrypted",
        platform="windows",
    ),
    AgentNodeSpec(
        name="AL2023_X64_GRADLE_CHECK",
        deployment_type=DeploymentType.GRADLE,
        label="Jenkins-Agent-AL2023-X64-M58xlarge-Single-Host",
        instance_type="m5.8xlarge",
        ami_id="ami-07d3c1f2e8a9b6c40",
        max_total_uses=1,
        min_spare_instances=1,
        init_script=_LINUX_INIT,
    ),
    AgentNodeSpec(
        name="AL2023_ARM64_GRADLE_CHECK",
        deployment_type=DeploymentType.GRADLE,
        label="Jenkins-Agent-AL2023-Arm64-M6g8xlarge-Single-Host",
        instance_type="m6g.8xlarge",
        ami_id="ami-0e5b7f9a1c3d2e480",
        max_total_uses=1,
        init_script=_LINUX_INIT,
    ),
    AgentNodeSpec(
        name="AL2023_X64_BENCHMARK_TEST",
        deployment_type=DeploymentType.BENCHMARK,
        label="Jenkins-Agent-AL2023-X64-M52xlarge-Benchmark-Test",
        instance_type="m5.2xlarge",
        ami_id="ami-07d3c1f2e8a9b6c40",
        num_executors=2,
        init_script=_LINUX_INIT,
    ),
    AgentNodeSpec(
        name="AL2023_ARM64_BENCHMARK_TEST",
        deployment_type=DeploymentType.BENCHMARK,
        label="Jenkins-Agent-AL2023-Arm64-M6g2xlarge-Benchmark-Test",
        instance_type="m6g.2xlarge",
        ami_id="ami-0e5b7f9a1c3d2e480",
        num_executors=2,
        init_script=_LINUX_INIT,
    ),
    AgentNodeSpec(
        name="AL2_X64_DEFAULT_AGENT",
        deployment_type=DeploymentType.DEFAULT,
        label="Jenkins-Default-Agent-X64-C5xlarge-Single-Host",
        instance_type="c5.xlarge",
        ami_id="resolve:ssm:/aws/service/ami-amazon-linux-latest/al2023-ami-kernel-default-x86_64",
        init_script=_LINUX_INIT,
    ),
    AgentNodeSpec(
        name="AL2_ARM64_DEFAULT_AGENT",
        deployment_type=DeploymentType.DEFAULT,
        label="Jenkins-Default-Agent-ARM64-C6gxlarge-Single-Host",
        instance_type="c6g.xlarge",
        ami_id="resolve:ssm:/aws/service/ami-amazon-linux-latest/al2023-ami-kernel-default-arm64",
        init_script=_LINUX_INIT,
    ),
)

# Mac instances only run on dedicated hosts.
MAC_AGENT_NODES: Dict[str, AgentNodeSpec] = _catalog(
    AgentNodeSpec(
        name="MACOS12_X64_MULTI_HOST",
        deployment_type=DeploymentType.BTR,
        label="Jenkins-Agent-MacOS12-X64-Mac1Metal-Multi-Host",
        instance_type="mac1.metal",
        ami_id="ami-0d7e6f5a4b3c2d190",
        remote_fs="/Users/ec2-user/jenkins",
        num_executors=6,
        device_mapping="/dev/sda1=:300:true:gp3::encrypted",
        platform="mac",
        tenancy="Host",
    ),
)
