"""Configuration merger.

Combines fragments from every source into one effective configuration.
Precedence is fixed by ConfigSource (defaults < persisted < environment <
runtime): for a key present in several fragments the highest-precedence
fragment wins. After all fragments are applied, any schema key still
unset is filled from its declared default, so the result always covers
the whole schema. Keys unknown to the schema never reach the result.

The merger holds no state between calls: the same fragments always
produce the same configuration.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from taskmaster_config.config.defaults import DEFAULT_SCHEMA
from taskmaster_config.models.enums import ConfigSource
from taskmaster_config.models.results import MergeOutcome
from taskmaster_config.models.schema import ConfigSchema


class ConfigMerger:
    """Merges configuration fragments according to source precedence."""

    def __init__(self, schema: ConfigSchema = DEFAULT_SCHEMA):
        self.schema = schema

    def merge(self, fragments: Sequence[Mapping[str, Any]]) -> dict[str, Any]:
        """Merge fragments given from lowest to highest precedence.

        Args:
            fragments: Fragments in ascending precedence order; later
                fragments overwrite earlier ones key by key.

        Returns:
            Effective configuration with a value for every schema key.
        """
        accumulator: dict[str, Any] = {}
        for fragment in fragments:
            for key, value in fragment.items():
                if key in self.schema:
                    accumulator[key] = value
        return self._complete(accumulator)

    def merge_sources(
        self, layers: Sequence[tuple[ConfigSource, Mapping[str, Any]]]
    ) -> MergeOutcome:
        """Merge labelled fragments, tracking where each value came from.

        Layers are ordered by their source's precedence regardless of the
        order they are passed in; layers with the same source keep their
        relative order.

        Args:
            layers: (source, fragment) pairs.

        Returns:
            MergeOutcome with the effective configuration, the winning
            source per key and the unknown keys that were dropped.
        """
        ordered = sorted(layers, key=lambda layer: layer[0].precedence)

        accumulator: dict[str, Any] = {}
        origins: dict[str, ConfigSource] = {}
        unknown: dict[str, ConfigSource] = {}
        for source, fragment in ordered:
            for key, value in fragment.items():
                if key not in self.schema:
                    unknown[key] = source
                    continue
                accumulator[key] = value
                origins[key] = source

        config = self._complete(accumulator)
        for key in config:
            origins.setdefault(key, ConfigSource.DEFAULTS)
        return MergeOutcome(
            config=config,
            origins={key: origins[key] for key in config},
            unknown_keys=unknown,
        )

    def _complete(self, accumulator: Mapping[str, Any]) -> dict[str, Any]:
        """Fill unset keys from schema defaults, emitting keys in schema order."""
        result: dict[str, Any] = {}
        for descriptor in self.schema:
            if descriptor.path in accumulator:
                result[descriptor.path] = accumulator[descriptor.path]
            else:
                result[descriptor.path] = descriptor.default_value()
        return result
