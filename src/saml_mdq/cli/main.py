"""Main CLI entry point for the SAML MDQ client.

This module provides the Click command group for the saml-mdq CLI.
"""

import dataclasses
import json
from pathlib import Path
from typing import Any, Dict, Optional

import click
from pydantic import ValidationError

from saml_mdq import __version__
from saml_mdq.client import MDQClient
from saml_mdq.config import Config, MDQConfig, load_config
from saml_mdq.hashing import encode_entity_id, hash_entity_id
from saml_mdq.logging_audit import configure_logging
from saml_mdq.models.metadata import EntityMetadata
from saml_mdq.utils.exceptions import (
    ConfigurationError,
    EntityNotFoundError,
    MDQError,
    create_error_info,
)

# Exit codes
EXIT_ERROR = 1
EXIT_NOT_FOUND = 2


@click.group()
@click.version_option(version=__version__, prog_name="saml-mdq")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ./config/config.json)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to log file (overrides config file)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
) -> None:
    """SAML MDQ client - look up SAML entity metadata.

    Common usage:

        # Fetch and summarise an entity
        saml-mdq fetch https://login.cmu.edu/idp/shibboleth

        # Verify the response signature
        saml-mdq fetch --signing-cert inc-md-cert-mdq.pem ENTITY_ID

        # Show the {sha1} lookup token
        saml-mdq hash https://login.cmu.edu/idp/shibboleth
    """
    ctx.ensure_object(dict)

    try:
        config_obj = load_config(config)
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(EXIT_ERROR)
    ctx.obj["config"] = config_obj

    log_level = "DEBUG" if verbose else config_obj.logging.level
    configure_logging(level=log_level, log_file=log_file or config_obj.logging.log_file)


@cli.command(name="hash")
@click.argument("entity_id")
def hash_command(entity_id: str) -> None:
    """Print the SHA-1 lookup token of ENTITY_ID."""
    click.echo(hash_entity_id(entity_id))


@cli.command(name="encode")
@click.argument("entity_id")
def encode_command(entity_id: str) -> None:
    """Print the URL-encoded path segment of ENTITY_ID."""
    click.echo(encode_entity_id(entity_id))


@cli.command(name="fetch")
@click.argument("entity_id")
@click.option("--base-url", type=str, default=None, help="MDQ base URL (overrides config)")
@click.option(
    "--signing-cert",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Trusted MDQ signing certificate, PEM or DER (overrides config)",
)
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds")
@click.option("--sha1", "use_sha1", is_flag=True, help="Look up by {sha1} transformed identifier")
@click.option("--json", "as_json", is_flag=True, help="Print the parsed metadata as JSON")
@click.pass_context
def fetch_command(
    ctx: click.Context,
    entity_id: str,
    base_url: Optional[str],
    signing_cert: Optional[Path],
    timeout: Optional[float],
    use_sha1: bool,
    as_json: bool,
) -> None:
    """Fetch metadata for ENTITY_ID from the MDQ responder."""
    config = _apply_fetch_overrides(
        ctx, ctx.obj["config"], base_url, signing_cert, timeout, use_sha1
    )

    try:
        with MDQClient.from_config(config) as client:
            metadata = client.fetch_entity(entity_id)
    except EntityNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_NOT_FOUND)
    except MDQError as e:
        info = create_error_info(e, entity_id=entity_id)
        click.echo(f"Error: {info.message}", err=True)
        click.echo(f"Fix: {info.remediation}", err=True)
        ctx.exit(EXIT_ERROR)

    if as_json:
        click.echo(json.dumps(dataclasses.asdict(metadata), indent=2, default=str))
    else:
        _print_summary(metadata)


def _apply_fetch_overrides(
    ctx: click.Context,
    config: Config,
    base_url: Optional[str],
    signing_cert: Optional[Path],
    timeout: Optional[float],
    use_sha1: bool,
) -> Config:
    """Return config with the fetch command's options layered on top."""
    overrides: Dict[str, Any] = {}
    if base_url is not None:
        overrides["base_url"] = base_url
    if signing_cert is not None:
        overrides["signing_cert_path"] = signing_cert
    if timeout is not None:
        overrides["timeout"] = timeout
    if use_sha1:
        overrides["use_sha1_lookup"] = True
    if not overrides:
        return config

    try:
        mdq = MDQConfig.model_validate({**config.mdq.model_dump(), **overrides})
    except ValidationError as e:
        click.echo(f"Error: invalid fetch option: {e}", err=True)
        ctx.exit(EXIT_ERROR)
    return config.model_copy(update={"mdq": mdq})


def _print_summary(metadata: EntityMetadata) -> None:
    click.echo(f"Entity ID: {metadata.entity_id}")
    if metadata.organization and metadata.organization.display_name:
        click.echo(f"Organization: {metadata.organization.display_name}")
    if metadata.valid_until:
        click.echo(f"Valid until: {metadata.valid_until.isoformat()}")

    for endpoint in metadata.single_sign_on_endpoints():
        click.echo(f"SSO endpoint: {endpoint.location} ({endpoint.binding})")

    for descriptor in metadata.sp_sso_descriptors:
        for acs in descriptor.assertion_consumer_services:
            click.echo(f"ACS endpoint [{acs.index}]: {acs.location} ({acs.binding})")

    for contact in metadata.contact_persons:
        emails = ", ".join(contact.email_addresses)
        click.echo(f"Contact ({contact.contact_type}): {emails}")
