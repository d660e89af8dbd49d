#
# Viewcast - Blueprint Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import datetime as dt
import json
from enum import Enum

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from viewcast.blueprint import Blueprint, ViewBuilder
from viewcast.config import Configuration
from viewcast.errors import InvalidRootError, InvalidViewError, MetaRequiresRootError, UndefinedViewError
from viewcast.fields import AttributeField
from viewcast.transformers import KeyCaseTransformer, Transformer

from conftest import Author, Post


# Helpers --------------------------------------------------------------------------------------------------------------

class Root(str, Enum):
    POSTS = "posts"


class DropEmpty(Transformer):
    def transform(self, data, obj, local_options):
        for key in [k for k, v in data.items() if v in ("", [], None)]:
            del data[key]


# Tests ----------------------------------------------------------------------------------------------------------------

class TestViews:

    def test_default(self, post_blueprint, post) -> None:
        assert post_blueprint.render_as_hash(post) == {"id": 1, "title": "Hello"}

    def test_identifier(self, post_blueprint, post) -> None:
        assert post_blueprint.render_as_hash(post, view="identifier") == {"id": 1}

    def test_extended(self, post_blueprint, post) -> None:
        result = post_blueprint.render_as_hash(post, view="extended")
        assert result == {"id": 1, "title": "Hello", "body": "first post here", "author": {"id": 7, "name": "Ada"}}
        assert list(result) == ["id", "title", "body", "author"]

    def test_method_field(self, post_blueprint, post) -> None:
        assert post_blueprint.render_as_hash(post, view="summary") == {"id": 1, "title": "Hello", "word_count": 3}

    def test_collection(self, post_blueprint, posts) -> None:
        result = post_blueprint.render_as_hash(posts, view="extended")
        assert [r["id"] for r in result] == [1, 2, 3]
        assert result[1]["author"] is None
        assert result[0]["author"] == {"id": 7, "name": "Ada"}

    def test_empty_collection(self, post_blueprint) -> None:
        assert post_blueprint.render_as_hash([]) == []

    def test_mapping_source(self, post_blueprint) -> None:
        assert post_blueprint.render_as_hash({"id": 5, "title": "Dict"}) == {"id": 5, "title": "Dict"}

    def test_views_listed(self, post_blueprint) -> None:
        assert post_blueprint.views() == ["identifier", "default", "extended", "summary"]

    def test_undefined_view(self, post_blueprint, post) -> None:
        with pytest.raises(UndefinedViewError, match="'missing' is not defined in PostBlueprint"):
            post_blueprint.render(post, view="missing")

    def test_include_view(self, post_blueprint, post) -> None:
        post_blueprint.view("full").include_views("extended", "summary").field("draft")
        assert list(post_blueprint.render_as_hash(post, view="full")) == [
            "id", "title", "body", "author", "word_count", "draft",
        ]

    def test_include_cycle(self, post_blueprint, post) -> None:
        post_blueprint.view("extended").include_view("summary")
        post_blueprint.view("summary").include_view("extended")
        with pytest.raises(InvalidViewError):
            post_blueprint.render_as_hash(post, view="summary")

    def test_exclude(self, post_blueprint, post) -> None:
        with post_blueprint.view("extended") as v:
            v.exclude("title", "author")
        assert post_blueprint.render_as_hash(post, view="extended") == {"id": 1, "body": "first post here"}

    def test_sort_by_name(self, post) -> None:
        bp = Blueprint(config=Configuration(sort_fields_by="name_asc")).identifier("id").fields("title", "body", "draft")
        assert list(bp.render_as_hash(post)) == ["id", "body", "draft", "title"]


class TestFieldDeclarations:

    def test_source_and_fn(self, post) -> None:
        bp = (
            Blueprint()
            .field("headline", source="title")
            .field("tag_count", lambda p, opts: len(p.tags))
        )
        assert bp.render_as_hash(post) == {"headline": "Hello", "tag_count": 2}

    def test_fn_and_source_rejected(self) -> None:
        with pytest.raises(TypeError, match="either fn or source"):
            Blueprint().field("x", lambda o, opts: 1, source="y")

    def test_add_field(self, post) -> None:
        bp = Blueprint().add_field(AttributeField("title"))
        assert bp.render_as_hash(post) == {"title": "Hello"}

    def test_default(self, posts) -> None:
        bp = Blueprint().field("body", default="(empty)").association("author", Blueprint().field("name"), default={})
        assert bp.render_as_hash(posts[1]) == {"body": "two words", "author": {}}

    def test_config_defaults(self, posts) -> None:
        config = Configuration(field_default="n/a", association_default="nobody")
        authors = Blueprint(config=config).field("email")
        bp = Blueprint(config=config).field("email", source="missing_email").association("author", authors)
        payload = {"author": Author(1, "Ann")}
        assert bp.render_as_hash(payload) == {"email": "n/a", "author": {"email": "n/a"}}
        assert bp.render_as_hash({}) == {"email": "n/a", "author": "nobody"}

    def test_datetime_format(self, post) -> None:
        bp = Blueprint().field("created_at", datetime_format="%Y-%m-%d")
        assert bp.render_as_hash(post) == {"created_at": "2024-05-17"}

    def test_config_datetime_format(self, post) -> None:
        bp = Blueprint(config=Configuration(datetime_format=lambda d: d.year)).field("created_at")
        assert bp.render_as_hash(post) == {"created_at": 2024}

    def test_conditions_use_local_options(self, author) -> None:
        bp = (
            Blueprint()
            .field("name")
            .field("email", if_=lambda name, obj, opts: opts.get("admin", False))
        )
        assert bp.render_as_hash(author) == {"name": "Ada"}
        assert bp.render_as_hash(author, admin=True) == {"name": "Ada", "email": "ada@example.com"}

    def test_unless(self, posts) -> None:
        bp = Blueprint().identifier("id").field("title", unless=lambda name, post, opts: post.draft)
        assert bp.render_as_hash(posts) == [{"id": 1, "title": "Hello"}, {"id": 2, "title": "My Day"}, {"id": 3}]

    def test_exclude_if_none(self, posts) -> None:
        bp = Blueprint().identifier("id").association("author", Blueprint().field("name"), exclude_if_none=True)
        result = bp.render_as_hash(posts)
        assert result[1] == {"id": 2}
        assert result[0] == {"id": 1, "author": {"name": "Ada"}}

    def test_association_view(self, post_blueprint, author) -> None:
        bp = Blueprint().association("posts", post_blueprint, view="identifier")
        assert bp.render_as_hash({"posts": [Post(1, "a"), Post(2, "b")]}) == {"posts": [{"id": 1}, {"id": 2}]}

    def test_dynamic_association(self, post_blueprint, author_blueprint, post, author) -> None:
        def pick(value):
            return author_blueprint if isinstance(value, Author) else post_blueprint

        bp = Blueprint().association("subject", pick)
        assert bp.render_as_hash({"subject": author}) == {"subject": {"id": 7, "name": "Ada"}}
        assert bp.render_as_hash({"subject": post}) == {"subject": {"id": 1, "title": "Hello"}}

    def test_association_fn(self, author_blueprint, author) -> None:
        bp = Blueprint().association("owner", author_blueprint, lambda obj, opts: opts["owner"])
        assert bp.render_as_hash({}, owner=author) == {"owner": {"id": 7, "name": "Ada"}}


class TestTransformers:

    def test_transformer_class(self, post) -> None:
        bp = Blueprint().field("word_count").transform(KeyCaseTransformer)
        assert bp.render_as_hash(post) == {"wordCount": 3}

    def test_callable(self, post) -> None:
        bp = Blueprint().field("title").transform(lambda data, obj, opts: data.update(kind=type(obj).__name__))
        assert bp.render_as_hash(post) == {"title": "Hello", "kind": "Post"}

    def test_invalid_class(self) -> None:
        with pytest.raises(TypeError, match="derive from Transformer"):
            Blueprint().transform(dict)

    def test_default_view_transformer_applies_everywhere(self, post_blueprint, post) -> None:
        post_blueprint.transform(KeyCaseTransformer("upper_camel"))
        assert post_blueprint.render_as_hash(post, view="summary") == {"Id": 1, "Title": "Hello", "WordCount": 3}

    def test_view_transformer_order(self, posts) -> None:
        bp = Blueprint().identifier("id").fields("body", "tags").transform(DropEmpty())
        bp.view("camel").field("created_at").transform(KeyCaseTransformer())
        assert bp.render_as_hash(posts[2], view="camel") == {"id": 3, "createdAt": dt.datetime(2024, 5, 17, 9, 30)}

    def test_config_default_transformers(self, post) -> None:
        config = Configuration(default_transformers=[KeyCaseTransformer()])
        bp = Blueprint(config=config).field("word_count")
        assert bp.render_as_hash(post) == {"wordCount": 3}


class TestEnvelope:

    def test_root(self, post_blueprint, post) -> None:
        assert post_blueprint.render_as_hash(post, root="post") == {"post": {"id": 1, "title": "Hello"}}

    def test_root_and_meta(self, post_blueprint, posts) -> None:
        result = post_blueprint.render_as_hash(posts, view="identifier", root="posts", meta={"total": 3})
        assert result == {"posts": [{"id": 1}, {"id": 2}, {"id": 3}], "meta": {"total": 3}}
        assert list(result) == ["posts", "meta"]

    def test_enum_root(self, post_blueprint, post) -> None:
        payload = json.loads(post_blueprint.render([post], view="identifier", root=Root.POSTS))
        assert payload == {"posts": [{"id": 1}]}

    def test_meta_without_root(self, post_blueprint, post) -> None:
        with pytest.raises(MetaRequiresRootError):
            post_blueprint.render(post, meta={"total": 1})

    def test_invalid_root(self, post_blueprint, post) -> None:
        with pytest.raises(InvalidRootError):
            post_blueprint.render_as_hash(post, root=["posts"], meta={"total": 1})

    def test_options_not_mutated(self, post_blueprint, post) -> None:
        options = {"view": "summary", "root": "post"}
        post_blueprint.render_as_hash(post, **options)
        assert options == {"view": "summary", "root": "post"}


class TestRenderFormats:

    def test_render(self, post_blueprint, post) -> None:
        assert post_blueprint.render(post, view="extended") == (
            '{"id": 1, "title": "Hello", "body": "first post here", "author": {"id": 7, "name": "Ada"}}'
        )

    def test_render_normalizes(self) -> None:
        bp = Blueprint().fields("created_at", "tags")
        assert json.loads(bp.render(Post(1, "x", tags=["a"]))) == {"created_at": "2024-05-17T09:30:00", "tags": ["a"]}

    def test_render_as_json(self, post) -> None:
        bp = Blueprint().identifier("id").field("created_at")
        assert bp.render_as_json([post], root="posts") == {"posts": [{"id": 1, "created_at": "2024-05-17T09:30:00"}]}

    def test_render_as_dict_alias(self, post_blueprint, post) -> None:
        assert post_blueprint.render_as_dict(post) == post_blueprint.render_as_hash(post)


class TestBlueprint:

    def test_repr(self, post_blueprint) -> None:
        assert repr(post_blueprint) == "Blueprint(name='PostBlueprint')"

    def test_default_name(self) -> None:
        assert Blueprint().name == "Blueprint"

    def test_config_type_checked(self) -> None:
        with pytest.raises(TypeError, match="Configuration"):
            Blueprint(config={"sort_fields_by": "name_asc"})

    def test_default_config(self) -> None:
        config = Configuration.set_default(Configuration(field_default=0))
        bp = Blueprint().field("missing")
        assert bp.config is config
        assert bp.render_as_hash({}) == {"missing": 0}

    def test_view_builder(self, post_blueprint) -> None:
        builder = post_blueprint.view("extended")
        assert isinstance(builder, ViewBuilder)
        assert builder.name == "extended"
        assert repr(builder) == "ViewBuilder('PostBlueprint', 'extended')"
