"""
Resolve raw deployment parameters into a validated DeploymentConfig.

Every parameter can be supplied as a typed stack property (CIStackProps) or as
a CDK context string (ContextParameters). One precedence rule applies to all
of them: the typed property wins, then the context string, then the default.
Validation is fail-fast; no partially resolved configuration is returned.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Sequence, Tuple

from .agent_catalog import (
    AGENT_NODE_CATALOG,
    MAC_AGENT_NODES,
    AgentNodeSpec,
    DeploymentType,
)
from .errors import (
    ConfigurationError,
    InvalidAccessType,
    InvalidAuthType,
    InvalidDeploymentType,
    InvalidFlag,
    InvalidSslFlag,
    MissingAccessValue,
)

logger = logging.getLogger(__name__)


class AuthType(Enum):
    DEFAULT = "default"
    GITHUB = "github"
    OIDC = "oidc"


class AccessType(Enum):
    IPV4 = "ipv4"
    IPV6 = "ipv6"
    PREFIX_LIST = "prefixList"
    SECURITY_GROUP_ID = "securityGroupId"


ANY_IPV4 = "0.0.0.0/0"
ANY_IPV6 = "::/0"


@dataclass(frozen=True)
class AccessPolicy:
    """
    Network ingress restriction for the public Jenkins endpoint.

    `all` with ipv4 or ipv6 is stored as the unrestricted CIDR of that family.
    """

    access_type: AccessType
    value: str

    def __post_init__(self):
        if not self.value:
            raise MissingAccessValue("restrictServerAccessTo", self.value)
        if not isinstance(self.access_type, AccessType):
            raise InvalidAccessType(
                "serverAccessType",
                self.access_type,
                accepted=[t.value for t in AccessType],
            )
        if self.value == "all":
            if self.access_type is AccessType.IPV4:
                object.__setattr__(self, "value", ANY_IPV4)
            elif self.access_type is AccessType.IPV6:
                object.__setattr__(self, "value", ANY_IPV6)

    @property
    def is_unrestricted(self) -> bool:
        return (self.access_type, self.value) in (
            (AccessType.IPV4, ANY_IPV4),
            (AccessType.IPV6, ANY_IPV6),
        )


@dataclass(frozen=True)
class FineGrainedAccessSpec:
    """An item role granting `users` access to the jobs matching `pattern`."""

    users: Tuple[str, ...]
    role: str
    pattern: str
    permissions: Tuple[str, ...] = (
        "Job/Build",
        "Job/Cancel",
        "Job/Read",
        "Job/Workspace",
        "Run/Replay",
    )


@dataclass
class CIStackProps:
    """Typed construction properties. Unset fields fall back to CDK context."""

    use_ssl: Optional[bool] = None
    auth_type: Optional[str] = None
    restrict_server_access_to: Optional[AccessPolicy] = None
    additional_commands: Optional[str] = None
    data_retention: bool = False
    admin_users: Sequence[str] = ()
    agent_assume_role: Sequence[str] = ()
    env_vars_file_path: Optional[str] = None
    mac_agent: Optional[bool] = None
    use_prod_agents: Optional[bool] = None
    jenkins_instance_type: Optional[str] = None
    alternative_node_config: Optional[Sequence[AgentNodeSpec]] = None
    enable_views: bool = False
    fine_grained_access_specs: Sequence[FineGrainedAccessSpec] = ()


@dataclass(frozen=True)
class ContextParameters:
    """The string-valued CDK context parameters, read once at the boundary."""

    use_ssl: Optional[str] = None
    auth_type: Optional[str] = None
    server_access_type: Optional[str] = None
    restrict_server_access_to: Optional[str] = None
    use_prod_agents: Optional[str] = None
    jenkins_instance_type: Optional[str] = None
    additional_commands: Optional[str] = None
    mac_agent: Optional[str] = None

    CONTEXT_KEYS = {
        "use_ssl": "useSsl",
        "auth_type": "authType",
        "server_access_type": "serverAccessType",
        "restrict_server_access_to": "restrictServerAccessTo",
        "use_prod_agents": "useProdAgents",
        "jenkins_instance_type": "jenkinsInstanceType",
        "additional_commands": "additionalCommands",
        "mac_agent": "macAgent",
    }

    @classmethod
    def from_node(cls, node) -> "ContextParameters":
        """Read the context of a construct node (anything with try_get_context)."""
        values = {}
        for field_name, key in cls.CONTEXT_KEYS.items():
            values[field_name] = _as_context_string(node.try_get_context(key))
        return cls(**values)


@dataclass(frozen=True)
class DeploymentConfig:
    use_ssl: bool
    auth_type: AuthType
    server_access: AccessPolicy
    deployment_type: DeploymentType
    agent_nodes: Tuple[AgentNodeSpec, ...]
    use_prod_agents: bool
    additional_commands_path: Optional[str] = None
    mac_agent: bool = False
    data_retention: bool = False
    admin_users: Tuple[str, ...] = ()
    agent_assume_roles: Tuple[str, ...] = ()
    env_vars_file_path: Optional[str] = None
    enable_views: bool = False
    fine_grained_access_specs: Tuple[FineGrainedAccessSpec, ...] = ()


def _as_context_string(value) -> Optional[str]:
    # cdk.json can hold JSON booleans while `-c key=value` always gives strings
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _pick(prop, context_value):
    return context_value if prop is None else _as_context_string(prop)


def resolve_access_policy(access_type: Optional[str], access_value: Optional[str]) -> AccessPolicy:
    if not access_value:
        raise MissingAccessValue("restrictServerAccessTo", access_value)
    try:
        kind = AccessType(access_type)
    except ValueError:
        raise InvalidAccessType(
            "serverAccessType",
            access_type,
            accepted=[t.value for t in AccessType],
        ) from None
    return AccessPolicy(kind, access_value)


def resolve_auth_type(raw: Optional[str]) -> AuthType:
    if raw is None:
        return AuthType.DEFAULT
    try:
        return AuthType(raw)
    except ValueError:
        raise InvalidAuthType(
            "authType", raw, accepted=[t.value for t in AuthType]
        ) from None


def resolve_deployment_type(raw: Optional[str], use_prod_agents: bool) -> DeploymentType:
    if raw is None:
        return DeploymentType.BTR if use_prod_agents else DeploymentType.DEFAULT
    try:
        return DeploymentType(raw)
    except ValueError:
        raise InvalidDeploymentType(
            "jenkinsInstanceType", raw, accepted=[t.value for t in DeploymentType]
        ) from None


def select_agent_nodes(
    deployment_type: DeploymentType, catalog: Mapping[str, AgentNodeSpec]
) -> List[AgentNodeSpec]:
    """
    Pick the catalog entries for a deployment type, keeping catalog order.

    BTR deploys every production profile, i.e. everything not tagged
    `default`. The other types deploy only the entries tagged with them.
    """
    if deployment_type is DeploymentType.BTR:
        return [
            node
            for node in catalog.values()
            if node.deployment_type is not DeploymentType.DEFAULT
        ]
    return [node for node in catalog.values() if node.deployment_type is deployment_type]


def parse_flag(parameter: str, raw: Optional[str], default: Optional[bool] = None) -> bool:
    if raw is None and default is not None:
        return default
    if raw == "true":
        return True
    if raw == "false":
        return False
    raise InvalidFlag(parameter, raw)


def validate_ssl_flag(raw: Optional[str]) -> bool:
    try:
        return parse_flag("useSsl", raw)
    except InvalidFlag:
        raise InvalidSslFlag(raw) from None


def resolve_deployment_config(
    props: Optional[CIStackProps],
    context: Optional[ContextParameters] = None,
    catalog: Mapping[str, AgentNodeSpec] = AGENT_NODE_CATALOG,
) -> DeploymentConfig:
    props = props or CIStackProps()
    context = context or ContextParameters()

    use_ssl = validate_ssl_flag(_pick(props.use_ssl, context.use_ssl))
    auth_type = resolve_auth_type(_pick(props.auth_type, context.auth_type))
    use_prod_agents = parse_flag(
        "useProdAgents", _pick(props.use_prod_agents, context.use_prod_agents), default=False
    )
    mac_agent = parse_flag(
        "macAgent", _pick(props.mac_agent, context.mac_agent), default=False
    )
    deployment_type = resolve_deployment_type(
        _pick(props.jenkins_instance_type, context.jenkins_instance_type),
        use_prod_agents,
    )

    if props.restrict_server_access_to is not None:
        server_access = props.restrict_server_access_to
        if not isinstance(server_access, AccessPolicy):
            raise InvalidAccessType("restrictServerAccessTo", server_access)
    else:
        server_access = resolve_access_policy(
            context.server_access_type, context.restrict_server_access_to
        )

    if props.alternative_node_config is not None:
        agent_nodes = list(props.alternative_node_config)
        logger.info("Using %d alternative agent node configurations", len(agent_nodes))
    else:
        agent_nodes = select_agent_nodes(deployment_type, catalog)
        if mac_agent:
            agent_nodes.extend(MAC_AGENT_NODES.values())
        logger.info(
            "Selected %d agent nodes for deployment type %s",
            len(agent_nodes),
            deployment_type.value,
        )
    if not agent_nodes:
        logger.warning(
            "No agent nodes configured for deployment type %s", deployment_type.value
        )

    names = [node.name for node in agent_nodes]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigurationError(
            "alternativeNodeConfig",
            duplicates,
            message=f"Agent node names must be unique, duplicated: {', '.join(duplicates)}",
        )

    return DeploymentConfig(
        use_ssl=use_ssl,
        auth_type=auth_type,
        server_access=server_access,
        deployment_type=deployment_type,
        agent_nodes=tuple(agent_nodes),
        use_prod_agents=use_prod_agents,
        additional_commands_path=_pick(props.additional_commands, context.additional_commands),
        mac_agent=mac_agent,
        data_retention=props.data_retention,
        admin_users=tuple(props.admin_users),
        agent_assume_roles=tuple(props.agent_assume_role),
        env_vars_file_path=props.env_vars_file_path,
        enable_views=props.enable_views,
        fine_grained_access_specs=tuple(props.fine_grained_access_specs),
    )
