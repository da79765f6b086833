# fieldler/fieldler/schemaloader.py
from __future__ import annotations
import logging
from copy import deepcopy
from typing import Any, Dict, Optional
import yaml
from fieldler.generator.data import ACCESS_KINDS, ITEM, ClassData, FieldData

log = logging.getLogger(__name__)

_SUPPORTED_SCHEMA_VERSIONS = {"0.1"}
_FIELD_KEYS = {"access", "kind", "required"}

def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge dicts with 'explicit null clears default' semantics."""
    out = deepcopy(base) if base else {}
    for k, v in (override or {}).items():
        if v is None:
            out[k] = None
        elif isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out

class SchemaLoader:
    """
    Loads a YAML schema declaring, per compared type, the fields to compare:
      schema_version: "0.1"
      defaults: { kind: item | attribute | method, module: "pkg.mod" }
      types:
        <TypeName>:
          module: "pkg.mod"            (optional, used for the canonical name)
          kind: attribute              (optional, overrides defaults.kind)
          fields:
            <field>: {}                (access = field name)
            <field>: "otherName"       (shorthand for {access: otherName})
            <field>: { access?, kind?, required? }

    Notes:
      - kind defaults to 'item' (records loaded from JSON are dicts).
      - required fields must be present in ingested records (see JsonParser).
      - field order is kept; it is the order of the generated enumeration.
    """

    def __init__(self, yaml_path: str, *, strict: bool = True):
        self.yaml_path = yaml_path
        self.strict = strict

    def _warn_or_raise(self, msg: str, *, fatal: bool = False) -> None:
        if fatal or self.strict:
            log.error(msg)
            raise ValueError(msg)
        log.warning(msg)

    def _normalize_kind(self, kind_raw: Any, where: str) -> str:
        kind = str(kind_raw or ITEM).strip().lower()
        if kind not in ACCESS_KINDS:
            self._warn_or_raise(
                f"{where}: unknown kind '{kind}'. Allowed: {sorted(ACCESS_KINDS)}",
                fatal=True,
            )
        return kind

    def _normalize_field(self, fname: Any, fdef: Any, type_kind: str, type_name: str) -> Dict[str, Any]:
        where = f"Type '{type_name}': field '{fname}'"
        if not isinstance(fname, str) or not fname.strip():
            self._warn_or_raise(f"Type '{type_name}': field names must be non-empty strings.", fatal=True)

        if fdef is None:
            fdef = {}
        elif isinstance(fdef, str):
            fdef = {"access": fdef}
        elif not isinstance(fdef, dict):
            self._warn_or_raise(f"{where} must be null, string or map.", fatal=True)

        unknown = set(fdef) - _FIELD_KEYS
        if unknown:
            self._warn_or_raise(f"{where} has unknown keys {sorted(unknown)}.", fatal=False)

        access = fdef.get("access", fname)
        if not isinstance(access, str) or not access.strip():
            self._warn_or_raise(f"{where}: access must be a non-empty string.", fatal=True)

        return {
            "access": access.strip(),
            "kind": self._normalize_kind(fdef.get("kind", type_kind), where),
            "required": bool(fdef.get("required", False)),
        }

    def _normalize_defaults(self, defaults: Any) -> Dict[str, Any]:
        if not isinstance(defaults, dict):
            self._warn_or_raise("defaults must be a mapping.", fatal=True)
        return {
            "kind": self._normalize_kind(defaults.get("kind"), "defaults"),
            "module": defaults.get("module"),
        }

    def load(self) -> Dict[str, Dict[str, Any]]:
        with open(self.yaml_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        if not isinstance(raw, dict):
            self._warn_or_raise("Schema root must be a mapping.", fatal=True)

        version = str(raw.get("schema_version", "")).strip()
        if version not in _SUPPORTED_SCHEMA_VERSIONS:
            self._warn_or_raise(
                f"Unsupported or missing schema_version '{version}'. Supported: {sorted(_SUPPORTED_SCHEMA_VERSIONS)}",
                fatal=True,
            )

        defaults_norm = self._normalize_defaults(raw.get("defaults", {}) or {})
        types_raw = raw.get("types") or {}
        if not isinstance(types_raw, dict) or not types_raw:
            self._warn_or_raise("No types defined.", fatal=True)

        out: Dict[str, Dict[str, Any]] = {}

        for type_name, type_cfg in types_raw.items():
            if not isinstance(type_cfg, dict):
                self._warn_or_raise(f"Type '{type_name}' must be a mapping.", fatal=True)

            merged = _deep_merge(defaults_norm, type_cfg)
            type_kind = self._normalize_kind(merged.get("kind"), f"Type '{type_name}'")

            fields_raw = merged.get("fields")
            if not isinstance(fields_raw, dict) or not fields_raw:
                self._warn_or_raise(f"Type '{type_name}': fields must be a non-empty map.", fatal=True)

            fields = {
                fname: self._normalize_field(fname, fdef, type_kind, type_name)
                for fname, fdef in fields_raw.items()
            }

            module = merged.get("module")
            canonical_name = f"{module}.{type_name}" if module else str(type_name)

            out[str(type_name)] = {
                "canonical_name": canonical_name,
                "kind": type_kind,
                "fields": fields,
            }

        log.debug("Schema %s: %d type(s)", self.yaml_path, len(out))
        return out

    def class_data(self, schema: Optional[Dict[str, Dict[str, Any]]] = None) -> Dict[str, ClassData]:
        """Describe each declared type as ClassData (loads the schema unless given the output of load())."""
        if schema is None:
            schema = self.load()
        out: Dict[str, ClassData] = {}
        for type_name, cfg in schema.items():
            fields_data = [
                FieldData(fname, fdef["access"], fdef["kind"])
                for fname, fdef in cfg["fields"].items()
            ]
            out[type_name] = ClassData(cfg["canonical_name"], fields_data)
        return out
