"""Naming and relationship engine.

The fancifier keeps SQL schemas SQL-ish and the generated model idiomatic::

    CREATE TABLE people (
      person_id  INTEGER PRIMARY KEY,
      first_name TEXT,
      office_id  INTEGER
    );

becomes a ``Person`` entity with properties ``personId``, ``firstName`` and
``officeId``, plus relationships to ``Office`` if such a table exists.

Passes run in a fixed order over a ``DatabaseInfo`` and mutate it in place:

1. property types (type map, column suffix map)
2. primary key autodetection
3. foreign key autodetection
4. database, record, property and reference names
5. relationships, rebuilt from scratch each run

Every pass is idempotent, so running the fancifier again over its own output
with the same options changes nothing. Problems that only cost a
relationship or a nicer name are recorded as diagnostics, never raised.
"""

from __future__ import annotations

import structlog

from schemaforge.config.models import NamingOptions
from schemaforge.naming.casing import (
    lower_first,
    normalize_upper_runs,
    snake_case,
    to_camel_case,
    upper_first,
)
from schemaforge.naming.inflection import SINGULAR_RULES, inflect, pluralize, singularize
from schemaforge.naming.models import (
    DatabaseInfo,
    Diagnostic,
    DiagnosticCode,
    EntityInfo,
    EntityKind,
    Property,
    PropertyType,
    Relationship,
    Severity,
    database_info_from_schema,
)
from schemaforge.schema.models import ForeignKey, Schema

logger = structlog.get_logger()

_DEDUPE_LIMIT = 1000


def dedupe(name: str, taken: set[str]) -> str:
    """Return ``name`` or the first free ``name0``, ``name1``, ... and claim it."""
    if name in taken:
        for i in range(_DEDUPE_LIMIT):
            candidate = f"{name}{i}"
            if candidate not in taken:
                name = candidate
                break
    taken.add(name)
    return name


def make_identifier(name: str) -> str:
    """Drop characters that cannot appear in an identifier.

    ``"A Long-Table"`` -> ``"ALongTable"``, ``""`` -> ``"NoName"``,
    ``"2fa"`` -> ``"_2fa"``.
    """
    valid = "".join(c for c in name if c.isalnum() or c == "_")
    if not valid:
        return "NoName"
    return valid if valid[0].isalpha() or valid[0] == "_" else "_" + valid


def _is_core_data_name(name: str) -> bool:
    return name.startswith("Z") and not name.startswith("Z_") and name.upper() == name


class Fancifier:
    """Applies ``NamingOptions`` to a ``DatabaseInfo``."""

    def __init__(self, options: NamingOptions | None = None) -> None:
        self.options = options or NamingOptions()
        self._type_map = {
            key.lower(): PropertyType.parse(tag) for key, tag in self.options.type_map.items()
        }
        self._suffix_map = {
            suffix: PropertyType.parse(tag)
            for suffix, tag in self.options.column_suffix_map.items()
        }

    def fancify_database_info(self, db: DatabaseInfo) -> DatabaseInfo:
        """Run all passes over ``db`` in place and return it."""
        db.diagnostics = []
        self._assign_property_types(db)
        if self.options.autodetect_primary_keys:
            self._autodetect_primary_keys(db)
        if self.options.autodetect_foreign_keys:
            self._autodetect_foreign_keys(db)
        self._clean_up_names(db)

        for entity in db.entities:
            entity.relationships = []
        if self.options.derive_relationships_from_foreign_keys:
            self._derive_relationships(db)

        logger.debug(
            "fancify_completed",
            database=db.name,
            entities=len(db.entities),
            diagnostics=len(db.diagnostics),
        )
        return db

    # Diagnostics

    def _report(
        self,
        db: DatabaseInfo,
        code: DiagnosticCode,
        message: str,
        *,
        entity: str | None = None,
        column: str | None = None,
        severity: Severity = Severity.WARNING,
    ) -> None:
        db.diagnostics.append(Diagnostic(code, message, severity, entity, column))
        log = logger.info if severity is Severity.INFO else logger.warning
        log(code.value, message=message, entity=entity, column=column)

    # Types

    def _assign_property_types(self, db: DatabaseInfo) -> None:
        for entity in db.entities:
            for prop in entity.properties:
                prop.property_type = self._property_type(prop)

    def _property_type(self, prop: Property) -> PropertyType:
        for suffix, property_type in self._suffix_map.items():
            if prop.raw_column_name.endswith(suffix):
                return property_type
        if prop.column_type is not None:
            mapped = self._type_map.get(prop.column_type.raw.lower())
            if mapped is not None:
                return mapped
        return PropertyType.for_column_type(prop.column_type)

    # Keys

    def _table_name_variants(self, raw_name: str) -> list[str]:
        variants = [raw_name]
        singular = singularize(raw_name)
        if singular != raw_name:
            variants.append(singular)
        return variants

    def _autodetect_primary_keys(self, db: DatabaseInfo) -> None:
        key_names = self.options.primary_key_names
        for entity in db.entities:
            if entity.primary_key_properties:
                continue

            candidates = list(key_names)
            for base in self._table_name_variants(entity.raw_name):
                for key in key_names:
                    candidates += [f"{base}{key}", f"{base}_{key}"]

            match = self._first_property_named(entity, candidates)
            if match is not None:
                match.is_primary_key = True
                match.is_primary_key_synthesized = True
                logger.debug(
                    "primary_key_detected", entity=entity.raw_name, column=match.raw_column_name
                )

    @staticmethod
    def _first_property_named(entity: EntityInfo, candidates: list[str]) -> Property | None:
        # Exact spelling first, then case-insensitive
        by_name = {p.raw_column_name: p for p in entity.properties}
        for candidate in candidates:
            if candidate in by_name:
                return by_name[candidate]
        by_lower: dict[str, Property] = {}
        for p in entity.properties:
            by_lower.setdefault(p.raw_column_name.lower(), p)
        for candidate in candidates:
            if candidate.lower() in by_lower:
                return by_lower[candidate.lower()]
        return None

    def _foreign_key_destinations(self, db: DatabaseInfo) -> dict[str, tuple[EntityInfo, Property]]:
        """Lower-cased column name -> (destination entity, its primary key)."""
        destinations: dict[str, tuple[EntityInfo, Property]] = {}
        for entity in db.entities:
            if entity.kind is EntityKind.VIEW and not self.options.autodetect_foreign_keys_in_views:
                continue
            pkey = entity.primary_key_property
            if pkey is None:
                continue
            for base in self._table_name_variants(entity.raw_name):
                for suffix in self.options.foreign_key_suffixes:
                    destinations.setdefault(f"{base}{suffix}".lower(), (entity, pkey))
                    destinations.setdefault(f"{base}_{suffix}".lower(), (entity, pkey))
            if not self.options.foreign_key_requires_table_name:
                destinations.setdefault(pkey.raw_column_name.lower(), (entity, pkey))
        return destinations

    def _autodetect_foreign_keys(self, db: DatabaseInfo) -> None:
        destinations = self._foreign_key_destinations(db)
        if not destinations:
            return

        for entity in db.entities:
            if entity.kind is EntityKind.VIEW and not self.options.autodetect_foreign_keys_in_views:
                continue
            own_key = entity.primary_key_property
            for prop in entity.properties:
                if prop is own_key:
                    continue
                found = destinations.get(prop.raw_column_name.lower())
                if found is None:
                    continue
                destination, pkey = found
                if destination is entity and pkey is prop:
                    continue

                if prop.foreign_key is not None:
                    # Declared keys are authoritative
                    declared = prop.foreign_key.destination_table
                    if declared.lower() != destination.raw_name.lower():
                        self._report(
                            db,
                            DiagnosticCode.AMBIGUOUS_FOREIGN_KEY,
                            f"Column '{prop.raw_column_name}' of '{entity.raw_name}' references "
                            f"'{declared}' but its name suggests '{destination.raw_name}'; "
                            "keeping the declared key",
                            entity=entity.raw_name,
                            column=prop.raw_column_name,
                        )
                    continue

                if pkey.property_type != prop.property_type:
                    continue

                prop.foreign_key = ForeignKey(
                    id=-1,
                    seq=-1,
                    source_column=prop.raw_column_name,
                    destination_table=destination.raw_name,
                    destination_column=pkey.raw_column_name,
                )
                prop.is_foreign_key_synthesized = True
                logger.debug(
                    "foreign_key_detected",
                    entity=entity.raw_name,
                    column=prop.raw_column_name,
                    destination=destination.raw_name,
                )

    # Names

    def _replace_characters(self, name: str) -> str:
        for old, new in self.options.identifier_replacements.items():
            name = name.replace(old, new)
        return name

    def database_name(self, name: str) -> str:
        options = self.options
        if options.force_database_name:
            return options.force_database_name
        if options.drop_database_file_extension:
            dot = name.find(".")
            if dot > 0:
                name = name[:dot]
        name = self._replace_characters(name)
        if options.capitalize_database_name:
            name = upper_first(name)
        if options.camel_case_database_name:
            name = to_camel_case(name)
        return make_identifier(name)

    def record_name(self, name: str) -> tuple[str, bool]:
        """Derived record name and whether singularization had to guess."""
        options = self.options
        if options.strip_core_data_prefix and _is_core_data_name(name) and len(name) > 1:
            name = upper_first(name[1:].lower())
        name = make_identifier(self._replace_characters(name))
        if options.capitalize_record_names:
            name = upper_first(name)
        if options.camel_case_record_names:
            name = to_camel_case(name)
        guessed = False
        if options.singularize_record_names:
            inflection = inflect(name, SINGULAR_RULES)
            name, guessed = inflection.word, inflection.is_fallback
        return name, guessed

    def property_name(self, name: str) -> str:
        options = self.options
        if options.strip_core_data_prefix and _is_core_data_name(name) and len(name) > 1:
            name = name[1:].lower()
        name = make_identifier(self._replace_characters(name))
        if options.normalize_upper_case_runs:
            name = normalize_upper_runs(name)
        if options.decapitalize_property_names:
            name = lower_first(name)
        if options.camel_case_property_names:
            name = to_camel_case(name)
            # Single-letter tokens join into new runs: pos_x_y -> posXY
            if options.normalize_upper_case_runs:
                name = normalize_upper_runs(name)
        return name

    def _clean_up_names(self, db: DatabaseInfo) -> None:
        db.name = self.database_name(db.name)

        record_names: set[str] = set()
        reference_names: set[str] = set()
        raw_names: set[str] = set()
        for entity in db.entities:
            name, guessed = self.record_name(entity.derived_name)
            if guessed:
                self._report(
                    db,
                    DiagnosticCode.GENERIC_SINGULARIZATION,
                    f"Singular of '{entity.derived_name}' guessed as '{name}'",
                    entity=entity.raw_name,
                    severity=Severity.INFO,
                )
            entity.derived_name = dedupe(name, record_names)
            entity.reference_name = dedupe(
                pluralize(lower_first(entity.derived_name)), reference_names
            )

            snake = snake_case(entity.derived_name)
            singular = singularize(snake) if self.options.singularize_record_names else snake
            entity.singular_raw_name = dedupe(singular, raw_names)
            entity.plural_raw_name = dedupe(pluralize(snake), raw_names)

            self._clean_up_property_names(entity)

    def _clean_up_property_names(self, entity: EntityInfo) -> None:
        forced = self.options.force_primary_key_name
        property_names: set[str] = set()
        for prop in entity.properties:
            if (
                forced
                and prop.is_primary_key
                and not entity.has_compound_primary_key
                and not any(p.derived_name == forced for p in entity.properties if p is not prop)
            ):
                prop.derived_name = forced
                property_names.add(forced)
                continue
            prop.derived_name = dedupe(self.property_name(prop.derived_name), property_names)

    # Relationships

    def _derive_relationships(self, db: DatabaseInfo) -> None:
        for source in db.entities:
            to_many_name = upper_first(pluralize(source.derived_name))
            keyed = [(p, p.foreign_key) for p in source.properties if p.foreign_key is not None]

            per_destination: dict[str, int] = {}
            for _, fkey in keyed:
                table = fkey.destination_table.lower()
                per_destination[table] = per_destination.get(table, 0) + 1

            names: set[str] = set()
            had_primary_to_one: set[str] = set()
            had_primary_to_many: set[str] = set()

            for prop, fkey in keyed:
                destination = db.entity(fkey.destination_table)
                if destination is None:
                    self._report(
                        db,
                        DiagnosticCode.UNRESOLVED_FOREIGN_KEY_TABLE,
                        f"Foreign key '{source.raw_name}.{prop.raw_column_name}' references "
                        f"unknown table '{fkey.destination_table}'; relationship dropped",
                        entity=source.raw_name,
                        column=prop.raw_column_name,
                    )
                    continue

                target = destination.find_property(fkey.target_column)
                if target is None:
                    target = destination.primary_key_property
                if target is None:
                    self._report(
                        db,
                        DiagnosticCode.UNRESOLVED_FOREIGN_KEY_COLUMN,
                        f"Foreign key '{source.raw_name}.{prop.raw_column_name}' references "
                        f"unknown column '{destination.raw_name}.{fkey.target_column}'; "
                        "relationship dropped",
                        entity=source.raw_name,
                        column=prop.raw_column_name,
                    )
                    continue

                name = dedupe(self._relationship_name(prop), names)
                destination_key = destination.raw_name.lower()
                several = per_destination.get(fkey.destination_table.lower(), 0) > 1

                if destination_key in had_primary_to_one:
                    is_primary_to_one = False
                elif not several:
                    is_primary_to_one = True
                else:
                    is_primary_to_one = _is_primary_foreign_key(prop, destination, target)
                if is_primary_to_one:
                    had_primary_to_one.add(destination_key)

                if destination_key in had_primary_to_many:
                    is_primary_to_many = False
                elif len(keyed) == 1:
                    is_primary_to_many = True
                else:
                    is_primary_to_many = _is_primary_foreign_key(prop, destination, target)
                if is_primary_to_many:
                    had_primary_to_many.add(destination_key)

                source.relationships.append(
                    Relationship(
                        name=name,
                        source_property=prop.raw_column_name,
                        destination_entity=destination.raw_name,
                        destination_property=target.raw_column_name,
                        is_to_many=False,
                        is_primary=is_primary_to_one,
                        is_synthesized=prop.is_foreign_key_synthesized,
                    )
                )
                if self.options.generate_reverse_relationships:
                    destination.relationships.append(
                        Relationship(
                            name=to_many_name,
                            source_property=target.raw_column_name,
                            destination_entity=source.raw_name,
                            destination_property=prop.raw_column_name,
                            is_to_many=True,
                            is_primary=is_primary_to_many,
                            qualifier=None if is_primary_to_many else name,
                            is_synthesized=prop.is_foreign_key_synthesized,
                        )
                    )

    def _relationship_name(self, prop: Property) -> str:
        # person_id -> Person, ownerId -> Owner
        name = upper_first(prop.derived_name)
        for suffix in self.options.relationship_strip_suffixes:
            if name.endswith(suffix) and name != suffix:
                return name[: -len(suffix)]
        return name


def _is_primary_foreign_key(prop: Property, destination: EntityInfo, target: Property) -> bool:
    """Whether a foreign key is "the" reference to its destination.

    address.person_id -> person.person_id, address.personId -> person.id and
    address.person_id -> person.id all are; address.owner_id -> person.id is not.
    """
    if target.raw_column_name == prop.raw_column_name:
        return True
    if (destination.derived_name + target.derived_name).lower() == prop.derived_name.lower():
        return True
    return (
        f"{destination.raw_name}_{target.raw_column_name}".lower()
        == prop.raw_column_name.lower()
    )


def fancify(
    schema: Schema, options: NamingOptions | None = None, *, name: str = "Database"
) -> DatabaseInfo:
    """Derive the entity model of ``schema``.

    Args:
        schema: Acquired schema; not modified.
        options: Naming options, defaults if omitted.
        name: Raw database name, usually the first input's file name.

    Returns:
        A new ``DatabaseInfo`` with derived names, relationships and the
        diagnostics of this run.
    """
    return fancify_in_place(database_info_from_schema(schema, name), options)


def fancify_in_place(db: DatabaseInfo, options: NamingOptions | None = None) -> DatabaseInfo:
    """Re-run the naming passes over an existing entity model."""
    return Fancifier(options).fancify_database_info(db)
