import logging

import pytest

from modulekit import (
    DuplicateAdapterError,
    GovernanceError,
    SourceEntry,
    define_capability,
    define_module,
    discover_modules,
    validate_all,
    validate_module,
)
from modulekit.discovery import parse_source_key, to_identifier


def _module(**kwargs):
    return define_module(provides=lambda deps, caps, emit: {}, **kwargs)


IDENTITY = define_capability(lambda raw: raw)


def test_parse_source_key_splits_container_and_item():
    assert parse_source_key("profiles/json_file") == ("profiles", "json_file")
    assert parse_source_key(" settings / mod ") == ("settings", "mod")


@pytest.mark.parametrize("key", ["", "mod", "a/b/c", "/mod", "settings/", None])
def test_parse_source_key_rejects_malformed_keys(key):
    assert parse_source_key(key) is None


def test_to_identifier_converts_delimiters():
    assert to_identifier("json-file") == "json_file"
    assert to_identifier("binary.file") == "binary_file"
    assert to_identifier("logger") == "logger"


def test_discover_pairs_descriptors_with_adapters():
    descriptor = _module(capabilities=["json_file", "logger"])
    sources = [
        SourceEntry("personas/mod", descriptor),
        SourceEntry("personas/json-file", IDENTITY),
        SourceEntry("personas/logger", IDENTITY),
        SourceEntry("settings/mod", _module()),
    ]

    discovered = discover_modules(sources)

    assert [m.name for m in discovered] == ["personas", "settings"]
    personas = discovered[0]
    assert personas.descriptor is descriptor
    assert sorted(personas.adapters) == ["json_file", "logger"]
    assert dict(discovered[1].adapters) == {}


def test_discover_skips_business_and_private_items():
    sources = [
        SourceEntry("threads/mod", _module()),
        SourceEntry("threads/business", object()),
        SourceEntry("threads/_helpers", object()),
    ]

    discovered = discover_modules(sources)

    assert len(discovered) == 1
    assert dict(discovered[0].adapters) == {}


def test_discover_skips_malformed_sources_with_warning(caplog):
    sources = [
        SourceEntry("not-a-key", _module()),
        SourceEntry("ghost/mod", None, origin="pkg.ghost.mod"),
        SourceEntry("wrong/mod", {"not": "a descriptor"}),
        SourceEntry("ok/mod", _module(capabilities=["logger"])),
        SourceEntry("ok/logger", "not an adapter"),
    ]

    with caplog.at_level(logging.WARNING, logger="modulekit.discovery"):
        discovered = discover_modules(sources)

    assert [m.name for m in discovered] == ["ok"]
    assert dict(discovered[0].adapters) == {}
    text = caplog.text
    assert "Could not parse module source key" in text
    assert "pkg.ghost.mod" in text
    assert "not a ModuleDescriptor" in text
    assert "not a CapabilityAdapter" in text


def test_discover_drops_adapters_without_descriptor(caplog):
    with caplog.at_level(logging.WARNING, logger="modulekit.discovery"):
        discovered = discover_modules([SourceEntry("orphaned/json_file", IDENTITY)])

    assert discovered == []
    assert 'Dropping adapters for "orphaned"' in caplog.text


def test_discover_rejects_two_adapters_for_one_capability():
    sources = [
        SourceEntry("profiles/mod", _module(capabilities=["json_file"])),
        SourceEntry("profiles/json_file", IDENTITY, origin="a.json_file"),
        SourceEntry("profiles/json-file", IDENTITY, origin="b.json-file"),
    ]

    with pytest.raises(DuplicateAdapterError, match=r'more than one adapter for capability "json_file"'):
        discover_modules(sources)


def test_discover_keeps_duplicate_module_names_for_registration():
    discovered = discover_modules([SourceEntry("dup/mod", _module()), SourceEntry("dup/mod", _module())])
    assert [m.name for m in discovered] == ["dup", "dup"]


def test_governance_reports_missing_adapter():
    [module] = discover_modules([SourceEntry("notes/mod", _module(capabilities=["json_file"]))])

    violations = validate_module(module)

    assert len(violations) == 1
    assert violations[0].kind == "missing_adapter"
    assert violations[0].capability_name == "json_file"
    assert "Missing adapter: declared 'json_file'" in violations[0].message


def test_governance_reports_orphan_adapter():
    [module] = discover_modules(
        [SourceEntry("notes/mod", _module()), SourceEntry("notes/binary-file", IDENTITY)]
    )

    violations = validate_module(module)

    assert [(v.kind, v.capability_name) for v in violations] == [("orphan_adapter", "binary_file")]
    assert "Orphan adapter: binary_file adapter source exists" in violations[0].message


def test_validate_all_aggregates_violations_across_modules():
    modules = discover_modules(
        [
            SourceEntry("a/mod", _module(capabilities=["glob"])),
            SourceEntry("b/mod", _module()),
            SourceEntry("b/archive", IDENTITY),
            SourceEntry("c/mod", _module(capabilities=["logger"])),
            SourceEntry("c/logger", IDENTITY),
        ]
    )

    with pytest.raises(GovernanceError) as excinfo:
        validate_all(modules)

    assert [(v.module_name, v.kind) for v in excinfo.value.violations] == [
        ("a", "missing_adapter"),
        ("b", "orphan_adapter"),
    ]
    assert str(excinfo.value).startswith("Governance violations:\n")


def test_validate_all_passes_matching_modules():
    modules = discover_modules(
        [SourceEntry("c/mod", _module(capabilities=["logger"])), SourceEntry("c/logger", IDENTITY)]
    )
    validate_all(modules)
