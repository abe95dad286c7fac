#!/usr/bin/env python3

import logging
import sys
from os import getenv

from aws_cdk import (
    App,
    Environment,
    Tags,
)

from jenkins_ci.ci_config_stack import CIConfigStack
from jenkins_ci.errors import ConfigurationError
from jenkins_ci.jenkins_stack import JenkinsStack
from jenkins_ci.settings import load_settings

logger = logging.getLogger("jenkins_ci")


def main():
    settings = load_settings("config.ini")
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    env = Environment(
        account=getenv("CDK_DEFAULT_ACCOUNT"),
        region=getenv("CDK_DEFAULT_REGION", settings.region),
    )

    app = App()
    config_stack = CIConfigStack(app, settings.stack_name + "Config", env=env)
    try:
        ci_stack = JenkinsStack(
            app,
            settings.stack_name,
            settings=settings,
            env=env,
        )
    except ConfigurationError as e:
        logger.error("Invalid deployment configuration: %s", e)
        sys.exit(1)
    ci_stack.add_dependency(config_stack)

    Tags.of(app).add(key="Name", value=settings.stack_name)
    Tags.of(app).add(key="ManagedBy", value="CDK")

    app.synth()


if __name__ == "__main__":
    main()
