import os

import pytest
from aws_cdk import App, Environment
from aws_cdk.assertions import Template

from jenkins_ci.jenkins_stack import JenkinsStack

DATA_DIR = os.path.join(os.path.dirname(__file__), "data")

TEST_ENV = Environment(account="123456789012", region="us-east-1")

BASE_CONTEXT = {
    "useSsl": "true",
    "serverAccessType": "ipv4",
    "restrictServerAccessTo": "10.10.10.10/32",
    "useProdAgents": "false",
}


def build_stack(context=None, props=None):
    app = App(context=dict(BASE_CONTEXT, **(context or {})))
    return JenkinsStack(app, "TestStack", props=props, env=TEST_ENV)


@pytest.fixture
def data_dir():
    return DATA_DIR


@pytest.fixture
def synth():
    """Synthesize a JenkinsStack with BASE_CONTEXT overridden by `context`."""

    def _synth(context=None, props=None):
        stack = build_stack(context, props)
        return stack, Template.from_stack(stack)

    return _synth
