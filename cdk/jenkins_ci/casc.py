"""
Render the Jenkins configuration-as-code file for the main node.

Values known at synth time (and CDK tokens, which resolve inside the string)
are rendered with jinja2. Secrets are left as `${VAR}` references that the
configuration-as-code plugin interpolates from the container environment.
"""

import os
from configparser import ConfigParser
from typing import Dict, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .deployment_config import DeploymentConfig

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
TEMPLATE_NAME = "config-as-code.yaml.j2"

# List views shown when views are enabled: (name, job name regex)
LIST_VIEWS = (
    ("Build", "(?i).*build.*"),
    ("Test", "(?i).*(test|check).*"),
    ("Release", "(?i).*(release|publish|promote).*"),
)

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=False,
    undefined=StrictUndefined,
)


def load_env_vars(path: Optional[str]) -> Dict[str, str]:
    """
    Read global environment variables for Jenkins from an ini-style file.

    Keys are taken from the [DEFAULT] section with their case preserved.
    """
    if not path:
        return {}
    parser = ConfigParser(interpolation=None)
    parser.optionxform = str
    with open(path) as env_file:
        parser.read_file(env_file)
    return dict(parser["DEFAULT"])


def render_casc(
    config: DeploymentConfig,
    region: str,
    subnet_id: str,
    agent_security_group_id: str,
    instance_profile_arn: str,
    env_vars: Optional[Dict[str, str]] = None,
    system_message: str = "Welcome to Jenkins",
) -> str:
    template = _env.get_template(TEMPLATE_NAME)
    return template.render(
        system_message=system_message,
        auth_type=config.auth_type.value,
        admin_users=config.admin_users,
        access_specs=config.fine_grained_access_specs,
        views=LIST_VIEWS if config.enable_views else (),
        env_vars=env_vars or {},
        agent_nodes=config.agent_nodes,
        region=region,
        subnet_id=subnet_id,
        agent_security_group_id=agent_security_group_id,
        instance_profile_arn=instance_profile_arn,
    )
