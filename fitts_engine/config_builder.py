# fitts_engine/config_builder.py
"""Build ``SessionConfig`` objects from session files and CLI arguments.

Separates configuration construction from argument parsing.
"""
from __future__ import annotations

import argparse
import json
from dataclasses import fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple, Type, TypeVar, Union

from .config import (
    DetectorConfig,
    HapticConfig,
    MovementConfig,
    SessionConfig,
    TargetTables,
    ValidationMessages,
)
from .domain.targets import (
    Direction,
    DistanceClass,
    GrowthPattern,
    TargetPairSpec,
    WidthClass,
)
from .errors import ConfigurationError

E = TypeVar("E", bound=Enum)

_NESTED = {
    "detector": DetectorConfig,
    "movement": MovementConfig,
    "haptics": HapticConfig,
}


def parse_enum(enum_type: Type[E], value: Union[str, int, E]) -> E:
    """Accept an enum member, its name (any case) or its integer value."""
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        key = value.strip().upper()
        if key in enum_type.__members__:
            return enum_type[key]
    elif isinstance(value, int) and not isinstance(value, bool):
        try:
            return enum_type(value)
        except ValueError:
            pass
    raise ConfigurationError(ValidationMessages.UNKNOWN_ENUM.format(kind=enum_type.__name__, value=value))


def _check_keys(section: str, data: Mapping[str, Any], allowed) -> None:
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise ConfigurationError(f"Unknown {section} setting(s): {', '.join(unknown)}")


class ConfigBuilder:
    """Builds configuration objects from plain mappings and parsed CLI arguments.

    Responsibilities:
        - Map session-file keys and CLI options to the config dataclasses
        - Resolve enum names
        - Reject unknown keys and values
    """

    @staticmethod
    def build_pair(data: Mapping[str, Any]) -> TargetPairSpec:
        """Build one pair from ``{"direction", "width", "distance", "growth_pattern"}``."""
        _check_keys("pair", data, ("direction", "width", "distance", "growth_pattern"))
        try:
            return TargetPairSpec(
                first_direction=parse_enum(Direction, data["direction"]),
                width=parse_enum(WidthClass, data["width"]),
                distance=parse_enum(DistanceClass, data["distance"]),
                growth_pattern=parse_enum(GrowthPattern, data.get("growth_pattern", "LINEAR")),
            )
        except KeyError as e:
            raise ConfigurationError(f"Target pair is missing {e.args[0]!r}") from e

    @staticmethod
    def build_pairs(items) -> Tuple[TargetPairSpec, ...]:
        return tuple(ConfigBuilder.build_pair(item) for item in items)

    @staticmethod
    def build_tables(data: Mapping[str, Any]) -> TargetTables:
        _check_keys("tables", data, ("distances", "widths", "off_axis_scale"))
        defaults = TargetTables()
        distances = dict(defaults.distances)
        for name, value in data.get("distances", {}).items():
            distances[parse_enum(DistanceClass, name)] = float(value)
        widths = dict(defaults.widths)
        for name, value in data.get("widths", {}).items():
            widths[parse_enum(WidthClass, name)] = float(value)
        return TargetTables(
            distances=distances,
            widths=widths,
            off_axis_scale=float(data.get("off_axis_scale", defaults.off_axis_scale)),
        )

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> SessionConfig:
        """Build a ``SessionConfig`` from a session-file mapping.

        Keys mirror the ``SessionConfig`` fields. ``training_pairs`` and
        ``testing_pairs`` are lists of pair mappings; ``tables``,
        ``detector``, ``movement`` and ``haptics`` are nested mappings.
        Missing keys keep their defaults.

        Raises:
            ConfigurationError: on unknown keys or enum names
        """
        allowed = {f.name for f in fields(SessionConfig)}
        _check_keys("session", data, allowed)

        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key in ("training_pairs", "testing_pairs"):
                kwargs[key] = ConfigBuilder.build_pairs(value)
            elif key == "tables":
                kwargs[key] = ConfigBuilder.build_tables(value)
            elif key in _NESTED:
                cls = _NESTED[key]
                _check_keys(key, value, {f.name for f in fields(cls)})
                kwargs[key] = cls(**value)
            else:
                kwargs[key] = value
        return SessionConfig(**kwargs)

    @staticmethod
    def load_json(path: Union[str, Path]) -> SessionConfig:
        """Read a JSON session file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ConfigurationError(f"Session file {path} must contain a JSON object")
        return ConfigBuilder.from_mapping(data)

    @staticmethod
    def from_args(args: argparse.Namespace) -> SessionConfig:
        """Session file (if given) with CLI overrides applied on top."""
        config = ConfigBuilder.load_json(args.config) if getattr(args, "config", None) else SessionConfig()

        overrides: Dict[str, Any] = {}
        for name in ("participant", "block"):
            value = getattr(args, name, None)
            if value is not None:
                overrides[f"{name}_number"] = value
        if getattr(args, "seed", None) is not None:
            overrides["shuffle_seed"] = args.seed
        if getattr(args, "skip_training", False):
            overrides["skip_training"] = True
        if getattr(args, "skip_testing", False):
            overrides["skip_testing"] = True
        if getattr(args, "input_delay", None) is not None:
            overrides["input_delay_s"] = args.input_delay
        return replace(config, **overrides) if overrides else config
