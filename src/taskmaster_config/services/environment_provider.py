"""Environment variable configuration source.

Each schema key maps to exactly one environment variable (see
ConfigSchema.env_var_for). Values are coerced to the key's declared type.
A variable that cannot be coerced is reported as a warning and skipped so
that the lower-precedence value stays in effect; reading the environment
never fails.

Typical Usage:
    >>> provider = EnvironmentConfigProvider(DEFAULT_SCHEMA)
    >>> fragment = provider.read()
    >>> for warning in provider.warnings:
    ...     print(warning)
"""

import logging
import os
from collections.abc import Mapping
from typing import Any

from taskmaster_config.config.defaults import DEFAULT_SCHEMA
from taskmaster_config.config.messages import WARNING_MESSAGES
from taskmaster_config.constants import ACTIVE_TAG_ENV_VAR
from taskmaster_config.models.enums import ConfigSource
from taskmaster_config.models.results import SourceWarning
from taskmaster_config.models.schema import ConfigSchema

logger = logging.getLogger(__name__)


class EnvironmentConfigProvider:
    """Extracts a configuration fragment from environment variables."""

    def __init__(
        self,
        schema: ConfigSchema = DEFAULT_SCHEMA,
        environ: Mapping[str, str] | None = None,
    ):
        """Initialize environment provider.

        Args:
            schema: Schema declaring keys and their variables.
            environ: Environment mapping (defaults to os.environ, read at
                call time so later changes are picked up).
        """
        self.schema = schema
        self._environ = environ
        self.warnings: list[SourceWarning] = []

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def read(self) -> dict[str, Any]:
        """Read every mapped variable into a fragment.

        Absent, empty or blank variables are left out of the fragment. Warnings
        from the previous call are discarded.

        Returns:
            Fragment of coerced values keyed by schema key.
        """
        self.warnings = []
        fragment: dict[str, Any] = {}
        env = self.environ

        for descriptor in self.schema:
            env_var = self.schema.env_var_for(descriptor.path)
            raw = env.get(env_var)
            if not raw or not raw.strip():
                continue
            try:
                fragment[descriptor.path] = descriptor.coerce(raw)
            except ValueError as e:
                message = WARNING_MESSAGES["env_invalid"].format(env_var=env_var, error=e)
                logger.warning(message)
                self.warnings.append(
                    SourceWarning(ConfigSource.ENVIRONMENT, message, key=descriptor.path)
                )

        if fragment:
            logger.debug(f"Environment overrides: {', '.join(sorted(fragment))}")
        return fragment

    def read_active_tag(self) -> str | None:
        """Return the active tag forced by TASKMASTER_TAG, if set.

        The tag is runtime state rather than a schema key, so it is read
        separately from the configuration fragment.
        """
        raw = self.environ.get(ACTIVE_TAG_ENV_VAR)
        if not raw or not raw.strip():
            return None
        return raw.strip()

    def env_var_for(self, key: str) -> str:
        """Return the variable name mapped to a key."""
        return self.schema.env_var_for(key)

    def mappings(self) -> dict[str, str]:
        """Return key -> environment variable for every schema key."""
        return {d.path: self.schema.env_var_for(d.path) for d in self.schema}

    def is_set(self, key: str) -> bool:
        """Check whether a key's variable is present and not blank."""
        return bool(self.environ.get(self.env_var_for(key), "").strip())

    def list_prefixed(self) -> dict[str, str]:
        """Return every environment variable carrying the schema prefix.

        Useful for spotting misspelled variables that map to no key.
        """
        prefix = self.schema.env_prefix
        if not prefix:
            return {}
        return {k: v for k, v in self.environ.items() if k.startswith(prefix)}
