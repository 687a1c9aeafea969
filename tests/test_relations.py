"""Unit tests for relationship classification."""

import pytest

from schemagraph_core import (
    AmbiguousRelationshipError,
    EntityRegistry,
    Field,
    FieldType,
    InvalidSelfReferenceError,
    RegistryNotSealedError,
    RelationKind,
    RelationshipResolver,
    UnknownEntityError,
    UnknownFieldError,
)


def test_unique_foreign_key_is_one_to_one(resolver):
    """Test User/Profile with a unique userId classifies as one-to-one."""
    kind = resolver.declare_relationship("User", "Profile", "userId")
    assert kind is RelationKind.ONE_TO_ONE

    rel = resolver.between("User", "Profile")[0]
    assert rel.fk_entity == "Profile"
    assert rel.many_side is None


def test_removing_uniqueness_reclassifies_as_one_to_many(make_registry):
    """Test the same declaration without a unique FK becomes one-to-many."""
    entities = {
        "User": [Field("id", FieldType.NUMBER, unique=True), Field("email", unique=True)],
        "Profile": [Field("id", FieldType.NUMBER, unique=True), Field("userId", FieldType.NUMBER, unique=True, references="User")],
    }
    unique = RelationshipResolver(make_registry(entities))
    assert unique.declare_relationship("User", "Profile", "userId", True) is RelationKind.ONE_TO_ONE

    entities["Profile"][1] = Field("userId", FieldType.NUMBER, references="User")
    plain = RelationshipResolver(make_registry(entities))
    assert plain.declare_relationship("User", "Profile", "userId", False) is RelationKind.ONE_TO_MANY


def test_non_unique_foreign_key_is_one_to_many(resolver):
    """Test Category/Product classifies as one-to-many with Product as the many side."""
    kind = resolver.declare_relationship("Category", "Product", "categoryId")
    assert kind is RelationKind.ONE_TO_MANY

    rel = resolver.between("Category", "Product")[0]
    assert rel.many_side == "Product"
    assert rel.fk_entity == "Product"


def test_foreign_key_found_from_either_direction(resolver):
    """Test the FK side is found regardless of declaration direction."""
    kind = resolver.declare_relationship("Product", "Category", "categoryId")
    assert kind is RelationKind.ONE_TO_MANY
    assert resolver.between("Category", "Product")[0].many_side == "Product"


def test_mutual_collections_are_many_to_many(resolver):
    """Test Student/Course with collections on both sides is many-to-many."""
    kind = resolver.declare_relationship("Student", "Course")
    assert kind is RelationKind.MANY_TO_MANY

    rel = resolver.between("Student", "Course")[0]
    assert rel.join_entity == "_CourseToStudent"

    junction = resolver.junctions["_CourseToStudent"]
    assert junction.generated
    assert [(f.name, f.references) for f in junction.fields] == [("A", "Course"), ("B", "Student")]
    assert "_CourseToStudent" not in resolver.registry


def test_self_reference_with_nullable_foreign_key(resolver):
    """Test a nullable self-FK classifies as self."""
    kind = resolver.declare_relationship("Employee", "Employee", "managerId")
    assert kind is RelationKind.SELF
    rel = resolver.between("Employee", "Employee")[0]
    assert rel.many_side == "Employee"
    assert resolver.registry.get_entity("Employee").relationship_ids == [rel.id]


def test_self_reference_requires_nullable_foreign_key(make_registry):
    """Test a non-nullable self-FK raises InvalidSelfReferenceError."""
    registry = make_registry(
        {"Node": [Field("id", FieldType.NUMBER), Field("parentId", FieldType.NUMBER, references="Node")]}
    )
    resolver = RelationshipResolver(registry)
    with pytest.raises(InvalidSelfReferenceError) as exc_info:
        resolver.declare_relationship("Node", "Node", "parentId")
    assert exc_info.value.context == "parentId"
    assert resolver.relationships == []


def test_self_reference_requires_foreign_key(resolver):
    """Test a self reference without a FK is rejected."""
    with pytest.raises(InvalidSelfReferenceError):
        resolver.declare_relationship("Employee", "Employee")


def test_explicit_join_with_attributes(make_registry):
    """Test a join entity with extra fields is many-to-many with attributes."""
    registry = make_registry(
        {
            "Student": [Field("id", FieldType.NUMBER)],
            "Course": [Field("id", FieldType.NUMBER)],
            "Enrollment": [
                Field("studentId", FieldType.NUMBER, references="Student"),
                Field("courseId", FieldType.NUMBER, references="Course"),
                Field("grade", FieldType.STRING, nullable=True),
            ],
        }
    )
    resolver = RelationshipResolver(registry)
    kind = resolver.declare_relationship("Student", "Course", join_entity="Enrollment")

    assert kind is RelationKind.MANY_TO_MANY_WITH_ATTRIBUTES
    rel = resolver.between("Student", "Course")[0]
    assert rel.foreign_keys == ("studentId", "courseId")
    assert rel.join_entity == "Enrollment"


def test_explicit_join_without_attributes_is_many_to_many(make_registry):
    """Test a bare join entity classifies as plain many-to-many."""
    registry = make_registry(
        {
            "Post": [Field("id", FieldType.NUMBER)],
            "Tag": [Field("id", FieldType.NUMBER)],
            "PostTag": [
                Field("postId", FieldType.NUMBER, references="Post"),
                Field("tagId", FieldType.NUMBER, references="Tag"),
            ],
        }
    )
    resolver = RelationshipResolver(registry)
    assert resolver.declare_relationship("Post", "Tag", join_entity="PostTag") is RelationKind.MANY_TO_MANY
    assert resolver.junctions == {}


def test_join_entity_missing_a_side_is_ambiguous(make_registry):
    """Test a join entity lacking a FK to one side is rejected."""
    registry = make_registry(
        {
            "Post": [Field("id", FieldType.NUMBER)],
            "Tag": [Field("id", FieldType.NUMBER)],
            "PostTag": [Field("postId", FieldType.NUMBER, references="Post"), Field("label")],
        }
    )
    resolver = RelationshipResolver(registry)
    with pytest.raises(AmbiguousRelationshipError):
        resolver.declare_relationship("Post", "Tag", join_entity="PostTag")


def test_relationship_registered_on_both_entities(resolver):
    """Test both participants hold a back-reference to the relationship."""
    resolver.declare_relationship("Category", "Product", "categoryId")
    registry = resolver.registry
    assert registry.get_entity("Category").relationship_ids == [0]
    assert registry.get_entity("Product").relationship_ids == [0]
    assert [r.kind for r in resolver.for_entity("Product")] == [RelationKind.ONE_TO_MANY]


def test_no_pattern_is_ambiguous(resolver):
    """Test entities with no FK and no collections cannot be classified."""
    with pytest.raises(AmbiguousRelationshipError):
        resolver.declare_relationship("User", "Category")
    assert resolver.relationships == []


def test_uniqueness_contradiction_is_ambiguous(resolver):
    """Test a declared uniqueness that contradicts the field is rejected."""
    with pytest.raises(AmbiguousRelationshipError):
        resolver.declare_relationship("Category", "Product", "categoryId", unique_fk=True)


def test_unique_foreign_key_with_collection_back_reference_is_ambiguous(make_registry):
    """Test a unique FK paired with a collection on the other side is rejected."""
    registry = make_registry(
        {
            "User": [Field("id", FieldType.NUMBER), Field("profiles", FieldType.REFERENCE, references="Profile", many=True)],
            "Profile": [Field("userId", FieldType.NUMBER, unique=True, references="User")],
        }
    )
    resolver = RelationshipResolver(registry)
    with pytest.raises(AmbiguousRelationshipError):
        resolver.declare_relationship("User", "Profile", "userId")


def test_unique_and_non_unique_links_for_same_pair_are_ambiguous(make_registry):
    """Test a one-to-one and a one-to-many between the same pair conflict."""
    registry = make_registry(
        {
            "User": [Field("id", FieldType.NUMBER)],
            "Profile": [
                Field("userId", FieldType.NUMBER, unique=True, references="User"),
                Field("ownerId", FieldType.NUMBER, references="User"),
            ],
        }
    )
    resolver = RelationshipResolver(registry)
    resolver.declare_relationship("User", "Profile", "userId")
    with pytest.raises(AmbiguousRelationshipError):
        resolver.declare_relationship("User", "Profile", "ownerId")
    assert len(resolver.relationships) == 1


def test_redeclaring_same_relationship_is_idempotent(resolver):
    """Test an identical declaration does not create a second record."""
    resolver.declare_relationship("Student", "Course")
    assert resolver.declare_relationship("Course", "Student") is RelationKind.MANY_TO_MANY
    assert len(resolver.relationships) == 1
    assert len(resolver.junctions) == 1


def test_foreign_key_and_join_entity_together_are_ambiguous(resolver):
    """Test supplying both a FK and a join entity is rejected."""
    with pytest.raises(AmbiguousRelationshipError):
        resolver.declare_relationship("Category", "Product", "categoryId", join_entity="User")


def test_missing_foreign_key_field(resolver):
    """Test a FK found on neither side raises UnknownFieldError."""
    with pytest.raises(UnknownFieldError):
        resolver.declare_relationship("Category", "Product", "vendorId")


def test_unknown_entity(resolver):
    """Test forward references to missing entities fail."""
    with pytest.raises(UnknownEntityError):
        resolver.declare_relationship("User", "Ghost", "ghostId")


def test_requires_sealed_registry():
    """Test resolution is refused until the registry is sealed."""
    registry = EntityRegistry()
    registry.register_entity("User", [Field("id")])
    with pytest.raises(RegistryNotSealedError):
        RelationshipResolver(registry).declare_relationship("User", "User", "id")


def test_foreign_keys_output(resolver):
    """Test the per-entity FK listing consumed by the index validator."""
    resolver.declare_relationship("Category", "Product", "categoryId")
    resolver.declare_relationship("Student", "Course")
    assert resolver.foreign_keys() == {"Product": ["categoryId"], "_CourseToStudent": ["A", "B"]}
