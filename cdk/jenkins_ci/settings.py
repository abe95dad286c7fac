from configparser import ConfigParser
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    stack_name: str = "Jenkins"
    region: str = "us-east-1"
    cidr: str = "10.0.0.0/16"
    main_node_instance_type: str = "c5.4xlarge"
    controller_cpu: int = 4096
    controller_memory_limit_mib: int = 15360
    timezone: str = "UTC"
    alarm_email: str = ""
    log_level: str = "INFO"


def load_settings(path="config.ini") -> Settings:
    """Read the [DEFAULT] section of config.ini, keeping defaults for absent keys."""
    config = ConfigParser()
    config.read(path)
    section = config["DEFAULT"]
    defaults = Settings()

    return Settings(
        stack_name=section.get("stack_name", defaults.stack_name),
        region=section.get("region", defaults.region),
        cidr=section.get("cidr", defaults.cidr),
        main_node_instance_type=section.get(
            "main_node_instance_type", defaults.main_node_instance_type
        ),
        controller_cpu=section.getint("controller_cpu", defaults.controller_cpu),
        controller_memory_limit_mib=section.getint(
            "controller_memory_limit_mib", defaults.controller_memory_limit_mib
        ),
        timezone=section.get("timezone", defaults.timezone),
        alarm_email=section.get("alarm_email", defaults.alarm_email),
        log_level=section.get("log_level", defaults.log_level),
    )
