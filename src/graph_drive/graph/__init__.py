"""Microsoft Graph transport, authentication and wire models."""
