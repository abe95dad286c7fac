from aws_cdk import (
    aws_autoscaling as autoscaling,
    aws_ssm as ssm,
    Stack,
)
from constructs import Construct

SCRIPT_PATH = "/tmp/jenkins-additional-commands"


class RunAdditionalCommands(Construct):
    """
    Run an operator supplied script on the main node host through SSM.

    The script is embedded in a command document and executed by its shebang.
    """

    def __init__(
        self,
        scope: Stack,
        file_path: str,
        target: autoscaling.AutoScalingGroup,
    ) -> None:
        super().__init__(scope, "AdditionalCommands")

        with open(file_path) as script:
            lines = script.read().splitlines()

        self.document = ssm.CfnDocument(
            self,
            "AdditionalCommandsDocument",
            document_type="Command",
            content={
                "schemaVersion": "2.2",
                "description": "Run additional commands on the Jenkins main node",
                "mainSteps": [
                    {
                        "action": "aws:runShellScript",
                        "name": "runAdditionalCommands",
                        "inputs": {
                            "runCommand": [
                                f"cat > {SCRIPT_PATH} <<'JENKINS_ADDITIONAL_COMMANDS'",
                                *lines,
                                "JENKINS_ADDITIONAL_COMMANDS",
                                f"chmod +x {SCRIPT_PATH}",
                                SCRIPT_PATH,
                            ],
                        },
                    }
                ],
            },
        )

        self.association = ssm.CfnAssociation(
            self,
            "AdditionalCommandsAssociation",
            name=self.document.ref,
            targets=[
                ssm.CfnAssociation.TargetProperty(
                    key="tag:aws:autoscaling:groupName",
                    values=[target.auto_scaling_group_name],
                )
            ],
        )
