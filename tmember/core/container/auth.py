"""Authentication container for dependency injection."""

from __future__ import annotations

import typing as t

import pydantic as p
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Dependency, Factory, Provider, Resource, Singleton
from sqlalchemy.orm import Session

from tmember.auth.identity import IdentityService
from tmember.auth.jwt import TokenManager
from tmember.model import DeploymentEnvironment

from ..provider import LoggingProvider, TimestampProvider

# used only when no secret is configured outside production
InsecureDevelopmentSecret = "tmember-insecure-development-secret-do-not-deploy"


def provide_token_manager(
    secret: p.Secret[str] | None,
    algorithm: t.Literal["HS256"],
    token_lifetime_hours: int,
    issuer: str,
    env: DeploymentEnvironment,
    logging: LoggingProvider,
    utcnow: TimestampProvider,
) -> TokenManager:
    logger = logging.get_logger()
    if secret is None or not secret.get_secret_value():
        if env is DeploymentEnvironment.Production:
            raise RuntimeError("auth.jwt secret must be configured in production")
        logger.warning(
            "no token signing secret configured, using an insecure development default",
            extra={"env": env},
        )
        secret = p.Secret(InsecureDevelopmentSecret)

    return TokenManager(
        secret_key=secret,
        algorithm=algorithm,
        token_lifetime_hours=token_lifetime_hours,
        issuer=issuer,
        utcnow=utcnow,
    )


class AuthContainer(DeclarativeContainer):
    """Container for authentication services."""

    config: Configuration = Configuration()
    secrets: Configuration = Configuration()
    env: Provider[DeploymentEnvironment] = Dependency(instance_of=DeploymentEnvironment)
    logging: Provider[LoggingProvider] = Resource()
    utcnow: Provider[TimestampProvider] = Dependency()
    session: Provider[Session] = Dependency(instance_of=Session)

    tokens: Provider[TokenManager] = Singleton(
        provide_token_manager,
        secret=secrets.jwt,
        algorithm=config.jwt_algorithm,
        token_lifetime_hours=config.token_lifetime_hours,
        issuer=config.issuer,
        env=env,
        logging=logging,
        utcnow=utcnow,
    )

    identity: Provider[IdentityService] = Factory(IdentityService, session=session, tokens=tokens)
