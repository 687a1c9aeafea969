"""Tests for the normalized schema graph."""

import copy

import yaml

from schemagraph_core import RelationKind, SchemaDocument, validate


def _graph(document_dict):
    report = validate(SchemaDocument.from_dict(document_dict))
    assert report.ok
    return report.graph


def test_sorted_entities_puts_targets_first(blog_document_dict):
    """Test FK targets are ordered before the entities referencing them."""
    order = [e.name for e in _graph(blog_document_dict).sorted_entities()]

    assert order.index("User") < order.index("Profile")
    assert order.index("User") < order.index("Post")
    assert order.index("Post") < order.index("Enrollment")
    assert order.index("Tag") < order.index("_PostToTag")
    assert set(order) == {"User", "Profile", "Post", "Tag", "Comment", "Enrollment", "_PostToTag"}


def test_dependencies_come_from_resolved_relationships(blog_document_dict):
    """Test only declared relationships order entities; self links are ignored."""
    data = copy.deepcopy(blog_document_dict)
    data["entities"].append(
        {"name": "Audit", "fields": [{"name": "userId", "type": "number", "references": "User"}]}
    )
    graph = _graph(data)
    deps = graph.dependencies()

    assert deps["Enrollment"] == {"User", "Post"}
    assert deps["_PostToTag"] == {"Post", "Tag"}
    assert deps["Comment"] == set()
    assert deps["Audit"] == set()
    assert deps["User"] == set()


def test_relationship_serialization(blog_document_dict):
    """Test relationships serialize as reloadable declarations."""
    data = _graph(blog_document_dict).to_dict()
    by_kind = {r["kind"]: r for r in data["relationships"]}

    assert by_kind["one_to_one"]["foreign_key"] == "userId"
    assert by_kind["one_to_many"]["many_side"] == "Post"
    assert by_kind["many_to_many"]["junction"] == "_PostToTag"
    assert "join_entity" not in by_kind["many_to_many"]
    assert by_kind["many_to_many_with_attributes"]["join_entity"] == "Enrollment"
    assert by_kind["self"]["foreign_key"] == "parentId"


def test_yaml_export_reloads(blog_document_dict):
    """Test the YAML export is a valid document."""
    graph = _graph(blog_document_dict)
    reloaded = SchemaDocument.from_dict(yaml.safe_load(graph.to_yaml()))
    assert [e.name for e in reloaded.entities] == ["User", "Profile", "Post", "Tag", "Comment", "Enrollment"]
    assert validate(reloaded).graph.count(RelationKind.MANY_TO_MANY) == 1


def test_fingerprint_is_stable_and_sensitive(blog_document_dict):
    """Test fingerprints match for equal graphs and differ after a change."""
    first = _graph(blog_document_dict)
    assert first.fingerprint() == _graph(blog_document_dict).fingerprint()
    assert len(first.fingerprint()) == 16

    changed = copy.deepcopy(blog_document_dict)
    changed["indexes"].pop()
    assert _graph(changed).fingerprint() != first.fingerprint()


def test_diff_reports_changes(blog_document_dict):
    """Test diff lists entity, field, relationship and index changes."""
    before = _graph(blog_document_dict)

    changed = copy.deepcopy(blog_document_dict)
    changed["entities"][1]["fields"][1]["unique"] = False
    changed["entities"][0]["fields"].append({"name": "nickname", "type": "string", "nullable": True})
    changed["entities"].append({"name": "Audit", "fields": [{"name": "id", "type": "number"}]})
    changed["indexes"] = changed["indexes"][:2]
    after = _graph(changed)

    differences = after.diff(before)
    assert "Entity added: Audit" in differences
    assert "Field added: User.nickname" in differences
    assert "Relationship changed: User->Profile[userId] (one_to_one -> one_to_many)" in differences
    assert "Index removed: idx_Post_title_content" in differences
    assert "Index removed: ft_Post_content" in differences
    assert before.diff(before) == []
