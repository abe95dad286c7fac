import pytest

from jenkins_ci.agent_catalog import (
    AGENT_NODE_CATALOG,
    MAC_AGENT_NODES,
    AgentNodeSpec,
    DeploymentType,
)
from jenkins_ci.deployment_config import (
    AccessPolicy,
    AccessType,
    AuthType,
    CIStackProps,
    ContextParameters,
    FineGrainedAccessSpec,
    parse_flag,
    resolve_access_policy,
    resolve_auth_type,
    resolve_deployment_config,
    resolve_deployment_type,
    select_agent_nodes,
    validate_ssl_flag,
)
from jenkins_ci.errors import (
    ConfigurationError,
    InvalidAccessType,
    InvalidAuthType,
    InvalidDeploymentType,
    InvalidFlag,
    InvalidSslFlag,
    MissingAccessValue,
)

CONTEXT = ContextParameters(
    use_ssl="true",
    server_access_type="ipv4",
    restrict_server_access_to="10.10.10.10/32",
)


class FakeNode:
    def __init__(self, context):
        self.context = context

    def try_get_context(self, key):
        return self.context.get(key)


class TestResolveAccessPolicy:

    @pytest.mark.parametrize(
        "access_type, expected",
        [("ipv4", "0.0.0.0/0"), ("ipv6", "::/0")],
    )
    def test_all_is_unrestricted(self, access_type, expected):
        policy = resolve_access_policy(access_type, "all")
        assert policy == AccessPolicy(AccessType(access_type), expected)
        assert policy.is_unrestricted

    @pytest.mark.parametrize(
        "access_type, value",
        [
            ("ipv4", "10.10.10.10/32"),
            ("ipv6", "2001:db8::/32"),
            ("prefixList", "pl-0123456789abcdef0"),
            ("securityGroupId", "sg-0123456789abcdef0"),
        ],
    )
    def test_literal_values(self, access_type, value):
        policy = resolve_access_policy(access_type, value)
        assert policy.access_type is AccessType(access_type)
        assert policy.value == value
        assert not policy.is_unrestricted

    def test_all_is_literal_for_prefix_lists(self):
        assert resolve_access_policy("prefixList", "all").value == "all"

    @pytest.mark.parametrize("access_type", ["ipv5", "IPV4", "cidr", "", None])
    def test_unknown_type(self, access_type):
        with pytest.raises(InvalidAccessType) as e:
            resolve_access_policy(access_type, "10.0.0.0/8")
        assert e.value.parameter == "serverAccessType"
        assert "securityGroupId" in e.value.accepted

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_value(self, value):
        with pytest.raises(MissingAccessValue):
            resolve_access_policy("ipv4", value)

    def test_missing_value_is_reported_before_type(self):
        with pytest.raises(MissingAccessValue):
            resolve_access_policy("bogus", None)


class TestAccessPolicy:

    def test_all_normalised_on_construction(self):
        assert AccessPolicy(AccessType.IPV4, "all").value == "0.0.0.0/0"
        assert AccessPolicy(AccessType.IPV6, "all").is_unrestricted

    def test_untyped_access_type(self):
        with pytest.raises(InvalidAccessType):
            AccessPolicy("ipv4", "10.0.0.0/8")

    @pytest.mark.parametrize(
        "access_type, value",
        [(AccessType.IPV4, ""), (AccessType.SECURITY_GROUP_ID, None)],
    )
    def test_missing_value(self, access_type, value):
        with pytest.raises(MissingAccessValue):
            AccessPolicy(access_type, value)

    @pytest.mark.parametrize(
        "build_policy, error",
        [
            (lambda: AccessPolicy("ipv4", "10.0.0.0/8"), InvalidAccessType),
            (lambda: AccessPolicy(AccessType.IPV4, ""), MissingAccessValue),
            (lambda: AccessPolicy(AccessType.SECURITY_GROUP_ID, None), MissingAccessValue),
            (lambda: "10.0.0.0/8", InvalidAccessType),
        ],
    )
    def test_typed_property_is_validated(self, build_policy, error):
        with pytest.raises(error):
            resolve_deployment_config(
                CIStackProps(restrict_server_access_to=build_policy()),
                ContextParameters(use_ssl="true"),
            )


class TestResolveAuthType:

    def test_defaults(self):
        assert resolve_auth_type(None) is AuthType.DEFAULT

    @pytest.mark.parametrize("raw", ["default", "github", "oidc"])
    def test_known(self, raw):
        assert resolve_auth_type(raw).value == raw

    def test_unknown(self):
        with pytest.raises(InvalidAuthType) as e:
            resolve_auth_type("bogus")
        assert e.value.value == "bogus"
        assert e.value.accepted == ("default", "github", "oidc")


class TestResolveDeploymentType:

    def test_inferred_from_prod_agents(self):
        assert resolve_deployment_type(None, True) is DeploymentType.BTR
        assert resolve_deployment_type(None, False) is DeploymentType.DEFAULT

    @pytest.mark.parametrize("use_prod_agents", [True, False])
    def test_explicit_wins(self, use_prod_agents):
        assert resolve_deployment_type("gradle", use_prod_agents) is DeploymentType.GRADLE

    @pytest.mark.parametrize("raw", ["btr", "Gradle", "perf"])
    def test_unknown(self, raw):
        with pytest.raises(InvalidDeploymentType):
            resolve_deployment_type(raw, False)


class TestSelectAgentNodes:

    def test_catalog_shape(self):
        assert len(AGENT_NODE_CATALOG) == 17
        assert all(name == node.name for name, node in AGENT_NODE_CATALOG.items())

    def test_btr_excludes_default_nodes(self):
        nodes = select_agent_nodes(DeploymentType.BTR, AGENT_NODE_CATALOG)
        assert len(nodes) == 15
        assert all(node.deployment_type is not DeploymentType.DEFAULT for node in nodes)

    @pytest.mark.parametrize(
        "deployment_type", [DeploymentType.GRADLE, DeploymentType.BENCHMARK, DeploymentType.DEFAULT]
    )
    def test_tagged_types(self, deployment_type):
        nodes = select_agent_nodes(deployment_type, AGENT_NODE_CATALOG)
        assert len(nodes) == 2
        assert {node.deployment_type for node in nodes} == {deployment_type}

    def test_preserves_catalog_order(self):
        nodes = select_agent_nodes(DeploymentType.BTR, AGENT_NODE_CATALOG)
        catalog_order = [name for name in AGENT_NODE_CATALOG if name in {n.name for n in nodes}]
        assert [node.name for node in nodes] == catalog_order

    def test_no_match_is_empty(self):
        catalog = {
            "ONLY_DEFAULT": AgentNodeSpec(
                name="ONLY_DEFAULT",
                deployment_type=DeploymentType.DEFAULT,
                label="only-default",
                instance_type="c5.xlarge",
                ami_id="ami-00000000000000000",
            )
        }
        assert select_agent_nodes(DeploymentType.GRADLE, catalog) == []
        assert select_agent_nodes(DeploymentType.BTR, catalog) == []


class TestFlags:

    def test_ssl_flag(self):
        assert validate_ssl_flag("true") is True
        assert validate_ssl_flag("false") is False

    @pytest.mark.parametrize("raw", ["TRUE", "True", "yes", "1", "", None])
    def test_ssl_flag_rejects(self, raw):
        with pytest.raises(InvalidSslFlag) as e:
            validate_ssl_flag(raw)
        assert e.value.parameter == "useSsl"

    def test_invalid_ssl_flag_is_invalid_flag(self):
        assert issubclass(InvalidSslFlag, InvalidFlag)
        assert issubclass(InvalidFlag, ConfigurationError)

    def test_parse_flag_default(self):
        assert parse_flag("macAgent", None, default=False) is False
        with pytest.raises(InvalidFlag):
            parse_flag("macAgent", "maybe", default=False)


class TestResolveDeploymentConfig:

    def test_minimal_context(self):
        config = resolve_deployment_config(None, CONTEXT)
        assert config.use_ssl is True
        assert config.auth_type is AuthType.DEFAULT
        assert config.server_access == AccessPolicy(AccessType.IPV4, "10.10.10.10/32")
        assert config.deployment_type is DeploymentType.DEFAULT
        assert config.use_prod_agents is False
        assert config.mac_agent is False
        assert config.additional_commands_path is None
        assert [node.name for node in config.agent_nodes] == [
            "AL2_X64_DEFAULT_AGENT",
            "AL2_ARM64_DEFAULT_AGENT",
        ]

    def test_prod_agents_select_btr(self):
        context = ContextParameters(
            use_ssl="false",
            server_access_type="ipv4",
            restrict_server_access_to="all",
            use_prod_agents="true",
        )
        config = resolve_deployment_config(None, context)
        assert config.deployment_type is DeploymentType.BTR
        assert len(config.agent_nodes) == 15

    def test_idempotent(self):
        props = CIStackProps(admin_users=["alice"], agent_assume_role=["arn:aws:iam::1:role/x"])
        assert resolve_deployment_config(props, CONTEXT) == resolve_deployment_config(props, CONTEXT)

    def test_typed_property_wins_over_context(self):
        props = CIStackProps(
            use_ssl=False,
            auth_type="github",
            restrict_server_access_to=AccessPolicy(AccessType.PREFIX_LIST, "pl-1234"),
            jenkins_instance_type="benchmark",
        )
        context = ContextParameters(
            use_ssl="true",
            auth_type="oidc",
            server_access_type="bogus",
            jenkins_instance_type="gradle",
        )
        config = resolve_deployment_config(props, context)
        assert config.use_ssl is False
        assert config.auth_type is AuthType.GITHUB
        assert config.server_access.access_type is AccessType.PREFIX_LIST
        assert config.deployment_type is DeploymentType.BENCHMARK

    def test_alternative_node_config_skips_catalog(self):
        custom = AgentNodeSpec(
            name="CUSTOM",
            deployment_type=DeploymentType.BTR,
            label="custom",
            instance_type="t3.large",
            ami_id="ami-11111111111111111",
        )
        props = CIStackProps(alternative_node_config=[custom], mac_agent=True)
        config = resolve_deployment_config(props, CONTEXT)
        assert config.agent_nodes == (custom,)

    def test_empty_alternative_node_config(self, caplog):
        config = resolve_deployment_config(CIStackProps(alternative_node_config=[]), CONTEXT)
        assert config.agent_nodes == ()
        assert "No agent nodes configured" in caplog.text

    def test_duplicate_node_names(self):
        node = AGENT_NODE_CATALOG["AL2_X64_DEFAULT_AGENT"]
        with pytest.raises(ConfigurationError):
            resolve_deployment_config(
                CIStackProps(alternative_node_config=[node, node]), CONTEXT
            )

    def test_mac_agent_appended(self):
        context = ContextParameters(
            use_ssl="true",
            server_access_type="ipv4",
            restrict_server_access_to="all",
            mac_agent="true",
        )
        config = resolve_deployment_config(None, context)
        assert config.mac_agent is True
        assert config.agent_nodes[-len(MAC_AGENT_NODES):] == tuple(MAC_AGENT_NODES.values())

    def test_views_and_access_specs(self):
        spec = FineGrainedAccessSpec(users=("alice",), role="release-role", pattern="release.*")
        props = CIStackProps(enable_views=True, fine_grained_access_specs=[spec])
        config = resolve_deployment_config(props, CONTEXT)
        assert config.enable_views is True
        assert config.fine_grained_access_specs == (spec,)
        assert resolve_deployment_config(None, CONTEXT).enable_views is False

    def test_missing_ssl_fails_first(self):
        with pytest.raises(InvalidSslFlag):
            resolve_deployment_config(None, ContextParameters(auth_type="bogus"))

    def test_missing_server_access(self):
        with pytest.raises(MissingAccessValue):
            resolve_deployment_config(None, ContextParameters(use_ssl="true"))

    def test_invalid_prod_agents_flag(self):
        context = ContextParameters(
            use_ssl="true",
            server_access_type="ipv4",
            restrict_server_access_to="all",
            use_prod_agents="yes",
        )
        with pytest.raises(InvalidFlag):
            resolve_deployment_config(None, context)


class TestContextParameters:

    def test_from_node(self):
        node = FakeNode(
            {
                "useSsl": True,
                "serverAccessType": "ipv6",
                "restrictServerAccessTo": "all",
                "additionalCommands": "./commands.sh",
            }
        )
        context = ContextParameters.from_node(node)
        assert context.use_ssl == "true"
        assert context.server_access_type == "ipv6"
        assert context.additional_commands == "./commands.sh"
        assert context.auth_type is None
