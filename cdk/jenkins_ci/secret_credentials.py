from aws_cdk import (
    aws_iam as iam,
    aws_secretsmanager as secretsmanager,
    Tags,
    Stack,
)
from constructs import Construct

CREDENTIALS_TYPE_TAG = "jenkins:credentials:type"
CREDENTIALS_USERNAME_TAG = "jenkins:credentials:username"

# (construct id, description, jenkins credential type, username)
JENKINS_CREDENTIALS = [
    ("GitHubBotToken", "GitHub token used by jobs to comment and publish", "string", None),
    ("GitHubBotUser", "GitHub user and token for checkouts", "usernamePassword", "jenkins-bot"),
    ("DockerHubCredentials", "Docker Hub credentials for image publishing", "usernamePassword", "jenkins-bot"),
    ("ArtifactSigningKey", "Passphrase of the artifact signing key", "string", None),
]


class AWSSecretsJenkinsCredentials(Construct):
    """
    Secrets picked up by the AWS Secrets Manager Credentials Provider plugin.

    The plugin lists secrets and exposes every one tagged with
    `jenkins:credentials:type` as a Jenkins credential named after the secret.
    """

    def __init__(self, scope: Stack, task_role: iam.IRole) -> None:
        super().__init__(scope, "SecretCredentials")

        self.secrets = []
        for id, description, credential_type, username in JENKINS_CREDENTIALS:
            secret = secretsmanager.Secret(self, id, description=description)
            Tags.of(secret).add(CREDENTIALS_TYPE_TAG, credential_type)
            if username:
                Tags.of(secret).add(CREDENTIALS_USERNAME_TAG, username)
            secret.grant_read(task_role)
            self.secrets.append(secret)

        task_role.add_to_principal_policy(
            iam.PolicyStatement(
                actions=["secretsmanager:ListSecrets"],
                resources=["*"],
            )
        )
