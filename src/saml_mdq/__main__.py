"""Entry point for running saml_mdq as a module.

This allows the package to be executed as:
    python -m saml_mdq
"""

from saml_mdq.cli.main import cli

if __name__ == "__main__":
    cli()
