"""Selection of the configured email service provider."""

from curation_desk.clients.mailchimp import MailchimpClient
from curation_desk.core.exceptions import ConfigurationError
from curation_desk.core.interfaces import EspProvider

PROVIDERS = {
    "mailchimp": MailchimpClient,
}


def get_esp_provider(settings) -> EspProvider:
    """Instantiate the provider named by ``settings.esp_provider``."""
    provider = (settings.esp_provider or "mailchimp").strip().lower()
    try:
        factory = PROVIDERS[provider]
    except KeyError:
        raise ConfigurationError(f"Unknown ESP provider: {provider}") from None
    return factory(settings)
