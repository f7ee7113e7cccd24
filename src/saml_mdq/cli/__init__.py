"""Command line interface for the SAML MDQ client."""
