"""Tests for POM parsing, placeholder expansion and parent inheritance."""
from __future__ import annotations

import pytest

from maven.errors import ArtifactResolutionError, MalformedPomError
from maven.models import MavenId, ResolvedFile, VersionlessMavenId
from maven.pom import PomResolver, apply_placeholders, collapse_version_range

from maven_fixtures import dep_xml, pom_xml

ROOT = MavenId("org.example", "app", "1.0")
PARENT = MavenId("org.example", "parent", "7")


def make_resolver(poms):
    fetched = []

    def fetch(maven_id):
        fetched.append(maven_id)
        text = poms.get(maven_id)
        return ResolvedFile(data=text.encode("utf-8")) if text is not None else None

    resolver = PomResolver(fetch)
    resolver.fetched = fetched
    return resolver


class TestApplyPlaceholders:
    """Placeholder expansion."""

    def test_plain_value_untouched(self):
        assert apply_placeholders("1.2.3", ROOT, {}) == "1.2.3"

    def test_project_coordinates(self):
        assert apply_placeholders("${project.version}", ROOT, {}) == "1.0"
        assert apply_placeholders("${pom.groupId}", ROOT, {}) == "org.example"
        assert apply_placeholders("${artifactId}-extra", ROOT, {}) == "app-extra"

    def test_property_lookup_is_repeated(self):
        props = {"${a}": "${b}", "${b}": "4.2"}
        assert apply_placeholders("${a}", ROOT, props) == "4.2"

    def test_multiple_tokens_in_one_string(self):
        props = {"${major}": "3", "${minor}": "1"}
        assert apply_placeholders("${major}.${minor}", ROOT, props) == "3.1"

    def test_undefined_placeholder_names_artifact(self):
        with pytest.raises(MalformedPomError, match="org.example:app:1.0"):
            apply_placeholders("${missing}", ROOT, {})

    def test_cyclic_properties_fail(self):
        with pytest.raises(MalformedPomError):
            apply_placeholders("${a}", ROOT, {"${a}": "${b}", "${b}": "${a}"})


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("[1.0,)", "1.0"),
        ("[1.0, 2.0)", "1.0"),
        ("[1.0,2.0]", "1.0"),
        ("[1.5]", "1.5"),
        ("1.0", "1.0"),
    ],
)
def test_collapse_version_range(raw, expected):
    assert collapse_version_range(raw) == expected


class TestPomResolver:
    """POM model loading."""

    def test_absent_pom_is_none(self):
        assert make_resolver({}).load(ROOT) is None

    def test_property_substitution_end_to_end(self):
        poms = {ROOT: pom_xml(ROOT, (dep_xml("org.foo", "foo", "${foo.version}"),),
                              properties={"foo.version": "1.2.3"})}

        model = make_resolver(poms).load(ROOT)

        assert [(d.group_id, d.artifact_id, d.version) for d in model.dependencies] == [
            ("org.foo", "foo", "1.2.3")
        ]
        assert model.properties["${foo.version}"] == "1.2.3"

    def test_parent_properties_inherited_and_overridden(self):
        poms = {
            PARENT: pom_xml(PARENT, properties={"foo.version": "1.0", "bar.version": "2.0"}),
            ROOT: pom_xml(
                ROOT,
                (dep_xml("org.foo", "foo", "${foo.version}"), dep_xml("org.bar", "bar", "${bar.version}")),
                properties={"foo.version": "1.5"},
                parent=PARENT,
            ),
        }

        model = make_resolver(poms).load(ROOT)

        versions = {d.artifact_id: d.version for d in model.dependencies}
        assert versions == {"foo": "1.5", "bar": "2.0"}
        assert model.parent == PARENT
        assert model.properties["${parent.version}"] == "7"

    def test_grandparent_chain(self):
        grand = MavenId("org.example", "grand", "1")
        poms = {
            grand: pom_xml(grand, properties={"lib.version": "9.9"}),
            PARENT: pom_xml(PARENT, parent=grand),
            ROOT: pom_xml(ROOT, (dep_xml("org.lib", "lib", "${lib.version}"),), parent=PARENT),
        }
        model = make_resolver(poms).load(ROOT)
        assert model.dependencies[0].version == "9.9"

    def test_managed_version_from_parent(self):
        poms = {
            PARENT: pom_xml(PARENT, managed=(dep_xml("org.lib", "lib", "3.3"),)),
            ROOT: pom_xml(ROOT, (dep_xml("org.lib", "lib"), dep_xml("org.other", "other")), parent=PARENT),
        }

        model = make_resolver(poms).load(ROOT)

        versions = {d.artifact_id: d.version for d in model.dependencies}
        assert versions == {"lib": "3.3", "other": None}
        assert model.managed_versions[VersionlessMavenId("org.lib", "lib")] == "3.3"

    def test_dependency_management_is_not_a_dependencies_block(self):
        poms = {ROOT: pom_xml(ROOT, (dep_xml("org.a", "a", "1"),), managed=(dep_xml("org.b", "b", "2"),))}
        model = make_resolver(poms).load(ROOT)
        assert [d.artifact_id for d in model.dependencies] == ["a"]

    def test_scope_and_optional_are_recorded(self):
        poms = {ROOT: pom_xml(ROOT, (dep_xml("org.a", "a", "1", scope="test", optional=True),))}
        dep = make_resolver(poms).load(ROOT).dependencies[0]
        assert dep.scope == "test"
        assert dep.optional is True

    def test_range_collapsed_after_substitution(self):
        poms = {ROOT: pom_xml(ROOT, (dep_xml("org.a", "a", "${r}"),), properties={"r": "[2.0,)"})}
        assert make_resolver(poms).load(ROOT).dependencies[0].version == "2.0"

    def test_pom_without_namespace(self):
        poms = {ROOT: (
            "<project><groupId>org.example</groupId><artifactId>app</artifactId><version>1.0</version>"
            "<dependencies><dependency><groupId>x</groupId><artifactId>y</artifactId>"
            "<version>1</version></dependency></dependencies></project>"
        )}
        assert make_resolver(poms).load(ROOT).dependencies[0].artifact_id == "y"

    def test_multiple_dependencies_blocks_fail(self):
        extra = "<dependencies>" + dep_xml("org.c", "c", "1") + "</dependencies>"
        poms = {ROOT: pom_xml(ROOT, (dep_xml("org.a", "a", "1"),), extra=extra)}
        with pytest.raises(MalformedPomError, match="multiple dependencies blocks"):
            make_resolver(poms).load(ROOT)

    def test_parent_missing_version_fails(self):
        poms = {ROOT: pom_xml(ROOT, extra="<parent><groupId>g</groupId><artifactId>p</artifactId></parent>")}
        with pytest.raises(MalformedPomError, match="version of its parent"):
            make_resolver(poms).load(ROOT)

    def test_missing_parent_pom(self):
        poms = {ROOT: pom_xml(ROOT, parent=PARENT)}
        with pytest.raises(ArtifactResolutionError):
            make_resolver(poms).load(ROOT)

    def test_cyclic_parent_chain_is_bounded(self):
        other = MavenId("org.example", "other", "1")
        poms = {
            ROOT: pom_xml(ROOT, parent=other),
            other: pom_xml(other, parent=ROOT),
        }
        with pytest.raises(MalformedPomError, match="deeper than"):
            make_resolver(poms).load(ROOT)

    def test_invalid_xml(self):
        with pytest.raises(MalformedPomError):
            make_resolver({ROOT: "<project><broken>"}).load(ROOT)

    def test_documents_are_parsed_once(self):
        poms = {PARENT: pom_xml(PARENT), ROOT: pom_xml(ROOT, parent=PARENT)}
        resolver = make_resolver(poms)
        resolver.load(ROOT)
        resolver.load(ROOT)
        assert resolver.fetched == [ROOT, PARENT]
