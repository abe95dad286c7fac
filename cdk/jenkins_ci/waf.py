from aws_cdk import (
    aws_elasticloadbalancingv2 as elbv2,
    aws_wafv2 as wafv2,
    Stack,
)
from constructs import Construct

# https://api.github.com/meta "hooks"
GITHUB_HOOK_IPV4 = [
    "192.30.252.0/22",
    "185.199.108.0/22",
    "140.82.112.0/20",
    "143.55.64.0/20",
]
GITHUB_HOOK_IPV6 = [
    "2a0a:a440::/29",
    "2606:50c0::/32",
]

# (rule name, managed group name, metric name, rule action overrides)
MANAGED_RULE_GROUPS = [
    (
        "AWS-AWSManagedRulesCommonRuleSet",
        "AWSManagedRulesCommonRuleSet",
        "AWS-AWSManagedRulesCommonRuleSet",
        # Build logs and artifacts posted to Jenkins exceed the body size limit
        ["SizeRestrictions_BODY"],
    ),
    (
        "AWS-AWSManagedRulesAmazonIpReputationList",
        "AWSManagedRulesAmazonIpReputationList",
        "AWSManagedRulesAmazonIpReputationList",
        [],
    ),
    (
        "AWS-AWSManagedRulesKnownBadInputsRuleSet",
        "AWSManagedRulesKnownBadInputsRuleSet",
        "AWS-AWSManagedRulesKnownBadInputsRuleSet",
        [],
    ),
    (
        "AWS-AWSManagedRulesSQLiRuleSet",
        "AWSManagedRulesSQLiRuleSet",
        "AWS-AWSManagedRulesSQLiRuleSet",
        [],
    ),
    (
        "AWS-AWSManagedRulesWordPressRuleSet",
        "AWSManagedRulesWordPressRuleSet",
        "AWS-AWSManagedRulesWordPressRuleSet",
        [],
    ),
    (
        "AWS-AWSManagedRulesAnonymousIpList",
        "AWSManagedRulesAnonymousIpList",
        "AWS-AWSManagedRulesAnonymousIpList",
        [],
    ),
]

WEB_ACL_NAME = "jenkins-WAF"


def _visibility(metric_name: str) -> wafv2.CfnWebACL.VisibilityConfigProperty:
    return wafv2.CfnWebACL.VisibilityConfigProperty(
        cloud_watch_metrics_enabled=True,
        metric_name=metric_name,
        sampled_requests_enabled=True,
    )


class JenkinsWAF(Construct):

    def __init__(self, scope: Stack, load_balancer: elbv2.IApplicationLoadBalancer) -> None:
        super().__init__(scope, "WAF")

        ipv4_set = wafv2.CfnIPSet(
            self,
            "GitHubIpv4Set",
            addresses=GITHUB_HOOK_IPV4,
            ip_address_version="IPV4",
            scope="REGIONAL",
            description="GitHub webhook IPv4 ranges",
        )
        ipv6_set = wafv2.CfnIPSet(
            self,
            "GitHubIpv6Set",
            addresses=GITHUB_HOOK_IPV6,
            ip_address_version="IPV6",
            scope="REGIONAL",
            description="GitHub webhook IPv6 ranges",
        )

        rules = []
        for name, ip_set in [("AllowGitHubIPv4", ipv4_set), ("AllowGitHubIPv6", ipv6_set)]:
            rules.append(
                wafv2.CfnWebACL.RuleProperty(
                    name=name,
                    priority=len(rules),
                    action=wafv2.CfnWebACL.RuleActionProperty(allow={}),
                    statement=wafv2.CfnWebACL.StatementProperty(
                        ip_set_reference_statement=wafv2.CfnWebACL.IPSetReferenceStatementProperty(
                            arn=ip_set.attr_arn
                        )
                    ),
                    visibility_config=_visibility(name),
                )
            )

        for rule_name, group_name, metric_name, allowed_rules in MANAGED_RULE_GROUPS:
            rules.append(
                wafv2.CfnWebACL.RuleProperty(
                    name=rule_name,
                    priority=len(rules),
                    override_action=wafv2.CfnWebACL.OverrideActionProperty(none={}),
                    statement=wafv2.CfnWebACL.StatementProperty(
                        managed_rule_group_statement=wafv2.CfnWebACL.ManagedRuleGroupStatementProperty(
                            vendor_name="AWS",
                            name=group_name,
                            rule_action_overrides=[
                                wafv2.CfnWebACL.RuleActionOverrideProperty(
                                    name=allowed,
                                    action_to_use=wafv2.CfnWebACL.RuleActionProperty(
                                        allow={}
                                    ),
                                )
                                for allowed in allowed_rules
                            ]
                            or None,
                        )
                    ),
                    visibility_config=_visibility(metric_name),
                )
            )

        self.web_acl = wafv2.CfnWebACL(
            self,
            "WAFv2",
            name=WEB_ACL_NAME,
            default_action=wafv2.CfnWebACL.DefaultActionProperty(allow={}),
            scope="REGIONAL",
            visibility_config=_visibility(WEB_ACL_NAME),
            rules=rules,
        )

        wafv2.CfnWebACLAssociation(
            self,
            "WebACLAssociation",
            resource_arn=load_balancer.load_balancer_arn,
            web_acl_arn=self.web_acl.attr_arn,
        )
