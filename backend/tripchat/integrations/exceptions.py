class IntegrationError(Exception):
    """An integration is misconfigured or unavailable (missing API key, SDK not installed)."""


class UpstreamAPIError(Exception):
    """An upstream provider call failed (quota, 4xx/5xx, empty completion)."""


class ChatBackendError(UpstreamAPIError):
    """The conversational backend could not produce a reply for this turn."""


class GenerationError(UpstreamAPIError):
    """The itinerary generator call itself failed (as opposed to returning bad JSON)."""
