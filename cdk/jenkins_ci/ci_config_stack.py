from aws_cdk import (
    aws_secretsmanager as secretsmanager,
    CfnOutput,
    Stack,
)
from constructs import Construct


class CIConfigStack(Stack):
    """
    Secrets the CI stack imports. Deploy this stack first, then fill in the
    placeholder values before deploying the CI stack.
    """

    CERTIFICATE_ARN_SECRET_EXPORT_VALUE = "certificateArn"
    REDIRECT_URL_SECRET_EXPORT_VALUE = "redirectUrl"
    AUTH_CONFIGURATION_VALUE_SECRET_EXPORT_VALUE = "authConfigurationValue"
    ADMIN_PASSWORD_SECRET_EXPORT_VALUE = "adminPassword"

    def __init__(self, scope: Construct, id: str, **kwargs):
        super().__init__(scope, id, **kwargs)

        certificate_arn = secretsmanager.Secret(
            self,
            "certificateArn",
            description="Certificate ARN for the Jenkins load balancer listener",
        )
        redirect_url = secretsmanager.Secret(
            self,
            "redirectUrl",
            description="Public URL of Jenkins",
        )
        auth_configuration = secretsmanager.Secret(
            self,
            "authConfigurationValues",
            description="OAuth client configuration: clientId, clientSecret, wellKnownOpenIDConfigurationUrl",
        )
        admin_password = secretsmanager.Secret(
            self,
            "adminPassword",
            description="Password of the local Jenkins admin user",
            generate_secret_string=secretsmanager.SecretStringGenerator(
                exclude_punctuation=True,
                password_length=32,
            ),
        )

        for secret, export_name in [
            (certificate_arn, self.CERTIFICATE_ARN_SECRET_EXPORT_VALUE),
            (redirect_url, self.REDIRECT_URL_SECRET_EXPORT_VALUE),
            (auth_configuration, self.AUTH_CONFIGURATION_VALUE_SECRET_EXPORT_VALUE),
            (admin_password, self.ADMIN_PASSWORD_SECRET_EXPORT_VALUE),
        ]:
            CfnOutput(
                self,
                f"{export_name}Secret",
                value=secret.secret_arn,
                export_name=export_name,
            )
