from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from unoengine.engine.ai import DEFAULT_ACTION_WEIGHTS, DEFAULT_AI_SPECS, AISpec
from unoengine.engine.cards import CardKind
from unoengine.engine.match import MatchConfig


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def _load_schema(path: Path) -> object:
    return _load_json(path)


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: e.path)
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _optional_int(obj: Mapping[str, object], key: str, default: int) -> int:
    v = obj.get(key, default)
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContentError(f"Expected int for {key}")
    return v


def _optional_float(obj: Mapping[str, object], key: str, default: float) -> float:
    v = obj.get(key, default)
    if not isinstance(v, (int, float)) or isinstance(v, bool):
        raise ContentError(f"Expected number for {key}")
    return float(v)


def _parse_kinds(raw: object) -> frozenset[CardKind]:
    if not isinstance(raw, list):
        raise ContentError("rejected_starters must be a list")
    try:
        return frozenset(CardKind(item) for item in raw)
    except ValueError as e:
        raise ContentError(f"Unknown card kind in rejected_starters: {e}") from e


def _parse_match(raw: Mapping[str, object]) -> MatchConfig:
    defaults = MatchConfig()
    starters = defaults.rejected_starters
    if "rejected_starters" in raw:
        starters = _parse_kinds(raw["rejected_starters"])
    if starters >= frozenset(CardKind):
        raise ContentError("rejected_starters rejects every card kind")
    cfg = MatchConfig(
        hand_size=_optional_int(raw, "hand_size", defaults.hand_size),
        min_players=_optional_int(raw, "min_players", defaults.min_players),
        max_players=_optional_int(raw, "max_players", defaults.max_players),
        rejected_starters=starters,
    )
    if cfg.min_players > cfg.max_players:
        raise ContentError("min_players must not exceed max_players")
    return cfg


def _parse_ai_spec(difficulty: str, raw: Mapping[str, object]) -> AISpec:
    base = DEFAULT_AI_SPECS[difficulty]
    weights: dict[CardKind, float] = dict(base.action_weights)
    raw_weights = raw.get("action_weights")
    if isinstance(raw_weights, dict):
        weights = {}
        for k, v in raw_weights.items():
            if not isinstance(v, (int, float)):
                raise ContentError(f"Weight for {k} must be a number")
            try:
                weights[CardKind(k)] = float(v)
            except ValueError as e:
                raise ContentError(f"Unknown card kind in action_weights: {k}") from e
    return AISpec(
        difficulty=base.difficulty,
        voluntary_draw=_optional_float(raw, "voluntary_draw", base.voluntary_draw),
        action_weights=weights or dict(DEFAULT_ACTION_WEIGHTS),
        sample_attempts=_optional_int(raw, "sample_attempts", base.sample_attempts),
    )


@dataclass(frozen=True)
class RulesConfig:
    match: MatchConfig = field(default_factory=MatchConfig)
    ai: dict[str, AISpec] = field(default_factory=lambda: dict(DEFAULT_AI_SPECS))

    def ai_spec(self, difficulty: str) -> AISpec:
        spec = self.ai.get(difficulty)
        if spec is None:
            raise ContentError(f"No AI tuning for difficulty {difficulty!r}")
        return spec


def parse_rules(raw: object) -> RulesConfig:
    """Build a RulesConfig from an already schema-validated rules document."""
    if not isinstance(raw, dict):
        raise ContentError("rules.json must be an object")
    raw_match = raw.get("match", {})
    raw_ai = raw.get("ai", {})
    if not isinstance(raw_match, dict) or not isinstance(raw_ai, dict):
        raise ContentError("rules.json match/ai sections must be objects")

    ai = dict(DEFAULT_AI_SPECS)
    for difficulty, spec_raw in raw_ai.items():
        if difficulty not in DEFAULT_AI_SPECS or not isinstance(spec_raw, dict):
            raise ContentError(f"Invalid AI section: {difficulty}")
        ai[difficulty] = _parse_ai_spec(difficulty, spec_raw)
    return RulesConfig(match=_parse_match(raw_match), ai=ai)


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_rules(self, path: Path | None = None) -> RulesConfig:
        rules_path = path or self._data_dir / "rules.json"
        schema = _load_schema(self._schema_dir / "rules.schema.json")
        raw = _load_json(rules_path)
        validate_json(raw, schema, context=str(rules_path))
        return parse_rules(raw)

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_rules()
