"""Shared fixtures for schemagraph tests."""

from typing import Dict, List

import pytest

from schemagraph_core import EntityRegistry, Field, FieldType, IndexValidator, RelationshipResolver


@pytest.fixture
def make_registry():
    """Build a sealed registry from a name -> fields mapping."""

    def _make(entities: Dict[str, List[Field]]) -> EntityRegistry:
        registry = EntityRegistry()
        for name, fields in entities.items():
            registry.register_entity(name, fields)
        registry.seal_all()
        return registry

    return _make


@pytest.fixture
def shop_registry(make_registry):
    """User/Profile, Category/Product, Student/Course and a self-referencing Employee."""
    return make_registry(
        {
            "User": [
                Field("id", FieldType.NUMBER, unique=True),
                Field("email", FieldType.STRING, unique=True),
                Field("name", FieldType.STRING, nullable=True),
                Field("bio", FieldType.STRING, nullable=True),
                Field("createdAt", FieldType.DATETIME),
            ],
            "Profile": [
                Field("id", FieldType.NUMBER, unique=True),
                Field("userId", FieldType.NUMBER, unique=True, references="User"),
            ],
            "Category": [
                Field("id", FieldType.NUMBER, unique=True),
                Field("products", FieldType.REFERENCE, references="Product", many=True),
            ],
            "Product": [
                Field("id", FieldType.NUMBER, unique=True),
                Field("categoryId", FieldType.NUMBER, references="Category"),
                Field("title", FieldType.STRING),
                Field("inStock", FieldType.BOOLEAN),
            ],
            "Student": [
                Field("id", FieldType.NUMBER, unique=True),
                Field("courses", FieldType.REFERENCE, references="Course", many=True),
            ],
            "Course": [
                Field("id", FieldType.NUMBER, unique=True),
                Field("students", FieldType.REFERENCE, references="Student", many=True),
            ],
            "Employee": [
                Field("id", FieldType.NUMBER, unique=True),
                Field("managerId", FieldType.NUMBER, nullable=True, references="Employee"),
            ],
        }
    )


@pytest.fixture
def resolver(shop_registry):
    return RelationshipResolver(shop_registry)


@pytest.fixture
def index_validator(shop_registry, resolver):
    return IndexValidator(shop_registry, resolver)


@pytest.fixture
def blog_document_dict():
    """A document covering every relationship kind."""
    return {
        "name": "blog",
        "entities": [
            {
                "name": "User",
                "fields": [
                    {"name": "id", "type": "number", "unique": True},
                    {"name": "email", "type": "string", "unique": True},
                    {"name": "posts", "type": "reference", "references": "Post", "many": True},
                ],
            },
            {
                "name": "Profile",
                "fields": [
                    {"name": "id", "type": "number", "unique": True},
                    {"name": "userId", "type": "number", "unique": True, "references": "User"},
                    {"name": "bio", "type": "string", "nullable": True},
                ],
            },
            {
                "name": "Post",
                "fields": [
                    {"name": "id", "type": "number", "unique": True},
                    {"name": "authorId", "type": "number", "references": "User"},
                    {"name": "title", "type": "string"},
                    {"name": "content", "type": "string"},
                    {"name": "tags", "type": "reference", "references": "Tag", "many": True},
                ],
            },
            {
                "name": "Tag",
                "fields": [
                    {"name": "id", "type": "number", "unique": True},
                    {"name": "posts", "type": "reference", "references": "Post", "many": True},
                ],
            },
            {
                "name": "Comment",
                "fields": [
                    {"name": "id", "type": "number", "unique": True},
                    {"name": "parentId", "type": "number", "nullable": True, "references": "Comment"},
                ],
            },
            {
                "name": "Enrollment",
                "fields": [
                    {"name": "userId", "type": "number", "references": "User"},
                    {"name": "postId", "type": "number", "references": "Post"},
                    {"name": "enrolledAt", "type": "datetime"},
                ],
            },
        ],
        "relationships": [
            {"source": "User", "target": "Profile", "foreign_key": "userId"},
            {"source": "User", "target": "Post", "foreign_key": "authorId"},
            {"source": "Post", "target": "Tag"},
            {"source": "Comment", "target": "Comment", "foreign_key": "parentId"},
            {"source": "User", "target": "Post", "join_entity": "Enrollment"},
        ],
        "indexes": [
            {"entity": "User", "fields": ["email"], "kind": "single"},
            {"entity": "Post", "fields": ["authorId"], "kind": "single"},
            {"entity": "Post", "fields": ["title", "content"], "kind": "compound"},
            {"entity": "Post", "fields": ["content"], "kind": "fulltext"},
        ],
    }
