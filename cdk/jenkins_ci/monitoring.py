from aws_cdk import (
    aws_cloudwatch as cloudwatch,
    aws_cloudwatch_actions as cw_actions,
    aws_elasticloadbalancingv2 as elbv2,
    aws_sns as sns,
    aws_sns_subscriptions as subscriptions,
    Duration,
    Stack,
)
from constructs import Construct

from .jenkins_controller import JenkinsController
from .load_balancer import JenkinsExternalLoadBalancer


class JenkinsMonitoring(Construct):

    def __init__(
        self,
        scope: Stack,
        load_balancer: JenkinsExternalLoadBalancer,
        controller: JenkinsController,
        alarm_email: str = "",
    ) -> None:
        super().__init__(scope, "Monitoring")

        self.alarms = []
        self.topic = sns.Topic(self, "AlarmTopic", display_name="Jenkins alarms")
        if alarm_email:
            self.topic.add_subscription(subscriptions.EmailSubscription(alarm_email))

        period = Duration.minutes(5)

        self._add_alarm(
            "AverageMainNodeCpuUtilization",
            controller.service.metric_cpu_utilization(period=period),
            threshold=75,
            evaluation_periods=5,
            description="Jenkins main node CPU is high",
        )
        self._add_alarm(
            "AverageMainNodeMemoryUtilization",
            controller.service.metric_memory_utilization(period=period),
            threshold=85,
            evaluation_periods=5,
            description="Jenkins main node memory is high",
        )
        self._add_alarm(
            "ExternalLoadBalancerUnhealthyHosts",
            load_balancer.target_group.metrics.unhealthy_host_count(period=period),
            threshold=1,
            evaluation_periods=3,
            description="Jenkins main node is failing load balancer health checks",
        )
        self._add_alarm(
            "ExternalLoadBalancer5xxErrors",
            load_balancer.load_balancer.metrics.http_code_elb(
                elbv2.HttpCodeElb.ELB_5XX_COUNT, period=period
            ),
            threshold=10,
            evaluation_periods=3,
            description="Jenkins load balancer is returning 5xx errors",
        )

        self.dashboard = cloudwatch.Dashboard(
            self,
            "Dashboard",
            dashboard_name=f"{scope.stack_name}-jenkins",
        )
        self.dashboard.add_widgets(
            *[cloudwatch.AlarmWidget(alarm=alarm, title=alarm.node.id) for alarm in self.alarms]
        )

    def _add_alarm(self, id, metric, threshold, evaluation_periods, description):
        alarm = metric.create_alarm(
            self,
            id,
            threshold=threshold,
            evaluation_periods=evaluation_periods,
            comparison_operator=cloudwatch.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
            treat_missing_data=cloudwatch.TreatMissingData.NOT_BREACHING,
            alarm_description=description,
        )
        alarm.add_alarm_action(cw_actions.SnsAction(self.topic))
        self.alarms.append(alarm)
        return alarm
