from __future__ import annotations

import logging
from dataclasses import replace

from ..context import Credentials, MountContext
from ..errors import CredentialError, ValidationError
from ..lib.accounts import account_type, derive_target, validate_username
from ..lib.credentials import PasswordSource, load_password

logger = logging.getLogger(__name__)


def _password_source(ctx: MountContext) -> PasswordSource:
    opts = ctx.options
    if opts.password_file:
        return PasswordSource.file(opts.password_file)
    if opts.password:
        return PasswordSource.literal(opts.password)
    if ctx.interactive:
        return PasswordSource.prompt()
    raise CredentialError("Password is required in non-interactive mode. Use -f or --password-file.")


def _prompt_username(ctx: MountContext) -> str:
    while True:
        username = ctx.prompter.ask("Storage Box username (e.g., u123456 or u123456-sub1)")
        if not username:
            logger.warning("Username cannot be empty")
            continue
        if account_type(username) is None:
            logger.warning("Invalid username format. Expected: u123456 or u123456-sub1")
            continue
        return username


class LoadCredentialsStep:
    step_id = "30_credentials"

    def run(self, ctx: MountContext) -> MountContext:
        username = ctx.options.username
        if username:
            logger.info("Using username from command line: %s", username)
            validate_username(username)
        elif ctx.interactive:
            username = _prompt_username(ctx)
        else:
            raise ValidationError("Username is required in non-interactive mode. Use -u or --username.")

        password = load_password(
            _password_source(ctx),
            prompter=ctx.prompter,
            confirm=not ctx.options.skip_confirmation,
        )

        target = derive_target(username, domain_suffix=ctx.config.domain_suffix)
        logger.info(
            "%s account %s: host=%s share=%s",
            "Sub" if target.kind == "sub" else "Main",
            target.username,
            target.host,
            target.share,
        )
        return replace(ctx, credentials=Credentials(username=username, password=password), target=target)
