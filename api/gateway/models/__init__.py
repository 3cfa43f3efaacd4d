from gateway.models.media import HOST_TYPE_CODES, HOST_TYPE_NAMES, PROVIDER_KINDS, MediaKind, Provider

__all__ = ["HOST_TYPE_CODES", "HOST_TYPE_NAMES", "PROVIDER_KINDS", "MediaKind", "Provider"]
