from __future__ import annotations

import dataclasses
import os
from collections import abc
from typing import Optional, Union

from prestql import exc


# Environment variables read by ClientOptions.from_env()
ENV_BASE_URL = 'BASE_URL'
ENV_USER_NAME = 'USER_NAME'
ENV_PASSWORD = 'USER_PASSWORD'
ENV_DATABASE = 'DATABASE_NAME'


@dataclasses.dataclass
class ClientOptions:
    """ Connection options for PrestClient

    These four values are everything a client needs to talk to a gateway
    """
    # URL of the gateway, without a trailing slash. Example: "http://localhost:3000"
    base_url: str

    # Credentials for Basic authentication
    user_name: str = ''
    password: str = dataclasses.field(default='', repr=False)

    # The database that all tables belong to
    database: str = ''

    def __post_init__(self):
        if not self.base_url:
            raise exc.InvalidArgumentError('Base URL is required')
        if not self.database:
            raise exc.InvalidArgumentError('Database name is required')

        self.base_url = self.base_url.rstrip('/')

    @classmethod
    def from_env(cls, environ: Optional[abc.Mapping[str, str]] = None) -> ClientOptions:
        """ Load options from environment variables

        Reads: BASE_URL, USER_NAME, USER_PASSWORD, DATABASE_NAME

        Raises:
            exc.InvalidArgumentError: BASE_URL or DATABASE_NAME is not set
        """
        if environ is None:
            environ = os.environ

        return cls(
            base_url=environ.get(ENV_BASE_URL, ''),
            user_name=environ.get(ENV_USER_NAME, ''),
            password=environ.get(ENV_PASSWORD, ''),
            database=environ.get(ENV_DATABASE, ''),
        )

    @classmethod
    def ensure_options(cls, input: Union[ClientOptions, dict]) -> ClientOptions:
        """ Construct options from any valid input: an object, or a dict with the same keys """
        if isinstance(input, ClientOptions):
            return input
        elif isinstance(input, dict):
            try:
                return cls(**input)
            except TypeError as e:
                raise exc.InvalidArgumentError(f'Invalid client options: {e}') from e
        else:
            raise exc.InvalidArgumentError(f'Client options must be an object, "{type(input).__name__}" given')
