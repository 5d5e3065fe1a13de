from django.core.management.base import BaseCommand, CommandError

from installer.exceptions import InstallerError
from installer.wizard import Installer


class Command(BaseCommand):
    """
    Run the schema and metadata steps of the install wizard from the shell,
    for deployments where the secrets file is provisioned by other means.
    """
    help = "Create the LTI and app database tables and initialize the app metadata."

    def add_arguments(self, parser):
        parser.add_argument("--app-url", required=True, help="Public https URL of the app root.")
        parser.add_argument("--database", default=None, help="Database alias to provision (default: INSTALLER_DATABASE).")

    def handle(self, *args, **options):
        installer = Installer(using=options["database"])
        if not installer.secrets_file.exists():
            raise CommandError(f"{installer.secrets_file} not found. Run the web installer first.")

        try:
            installer.load_secrets()
            installer.create_lti_tables()
            installer.create_app_tables()
            installer.init_app_metadata(options["app_url"])
        except InstallerError as exc:
            for message in installer.messages:
                self.stdout.write(message)
            raise CommandError(str(exc)) from exc

        for message in installer.messages:
            self.stdout.write(message)
        self.stdout.write(self.style.SUCCESS("Provisioning complete."))
