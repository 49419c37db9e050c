# apps/common/collaborators.py

"""
Resolution of the external collaborators the pipeline talks to.

Each collaborator is configured as a dotted path in settings, e.g.
``LEADMAILER_DNS_RESOLVER = "apps.contacts.resolvers.DnsPythonResolver"``, and
instantiated without arguments.
"""

from django.conf import settings
from django.utils.module_loading import import_string


def load_collaborator(setting_name: str):
    """Instantiate the collaborator class configured under ``setting_name``."""
    path = getattr(settings, setting_name)
    return import_string(path)()


def get_content_fetcher():
    return load_collaborator("LEADMAILER_CONTENT_FETCHER")


def get_dns_resolver():
    return load_collaborator("LEADMAILER_DNS_RESOLVER")


def get_mail_transport():
    return load_collaborator("LEADMAILER_MAIL_TRANSPORT")


def get_template_renderer():
    return load_collaborator("LEADMAILER_TEMPLATE_RENDERER")
