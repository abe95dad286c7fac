from aws_cdk import (
    aws_secretsmanager as secretsmanager,
    Fn,
    Stack,
)
from constructs import Construct

from .ci_config_stack import CIConfigStack


class ImportedSecrets(Construct):
    """Secrets exported by CIConfigStack, imported by ARN."""

    def __init__(self, scope: Stack) -> None:
        super().__init__(scope, "ImportedSecrets")

        def _import(id: str, export_name: str) -> secretsmanager.ISecret:
            return secretsmanager.Secret.from_secret_complete_arn(
                self, id, Fn.import_value(export_name)
            )

        self.certificate_arn = _import(
            "certificateArn", CIConfigStack.CERTIFICATE_ARN_SECRET_EXPORT_VALUE
        )
        self.redirect_url = _import(
            "redirectUrl", CIConfigStack.REDIRECT_URL_SECRET_EXPORT_VALUE
        )
        self.auth_configuration = _import(
            "authConfigurationValues",
            CIConfigStack.AUTH_CONFIGURATION_VALUE_SECRET_EXPORT_VALUE,
        )
        self.admin_password = _import(
            "adminPassword", CIConfigStack.ADMIN_PASSWORD_SECRET_EXPORT_VALUE
        )
