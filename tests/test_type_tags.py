"""Tests for xsi:type extraction."""

from adapters.xml_reader import parse_attributed_tree
from core.services.type_tags import extract_type_tags

from conftest import PERSON_NS, fysisk_person, juridisk_person, soap_response


def test_no_tags_gives_empty_result():
    assert extract_type_tags(parse_attributed_tree("<a><b>1</b></a>")) == {}


def test_none_tree():
    assert extract_type_tags(None) == {}


def test_distinct_tags_with_namespace():
    root = parse_attributed_tree(soap_response(juridisk_person("1"), juridisk_person("2"), fysisk_person()))

    tags = extract_type_tags(root)

    assert list(tags) == ["JuridiskPerson", "FysiskPerson"]
    assert tags["JuridiskPerson"].namespace == PERSON_NS
    assert tags["FysiskPerson"].type_name == "FysiskPerson"


def test_first_seen_namespace_wins():
    raw = (
        '<r xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" xmlns:a="urn:a" xmlns:b="urn:b">'
        '<x xsi:type="a:Kommune"/>'
        '<y xsi:type="b:Kommune"/>'
        "</r>"
    )

    tags = extract_type_tags(parse_attributed_tree(raw))

    assert len(tags) == 1
    assert tags["Kommune"].namespace == "urn:a"


def test_unprefixed_tag_uses_default_namespace():
    raw = (
        '<r xmlns="urn:default" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">'
        '<x xsi:type="Bygg"/>'
        "</r>"
    )

    tags = extract_type_tags(parse_attributed_tree(raw))

    assert tags["Bygg"].namespace == "urn:default"


def test_unknown_prefix_has_no_namespace():
    raw = '<r xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"><x xsi:type="zz:Bygg"/></r>'

    tags = extract_type_tags(parse_attributed_tree(raw))

    assert tags["Bygg"].namespace is None
