from .identity_provider import StaticIdentityProvider, resolve_actor

__all__ = ["StaticIdentityProvider", "resolve_actor"]
