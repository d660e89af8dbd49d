#
# Pytest Fixtures
#

# Standard library -----------------------------------------------------------------------------------------------------
import datetime as dt
from dataclasses import dataclass, field

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from viewcast.blueprint import Blueprint
from viewcast.config import Configuration


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass
class Author:
    id: int
    name: str
    email: str | None = None


@dataclass
class Post:
    id: int
    title: str
    body: str = ""
    author: Author | None = None
    created_at: dt.datetime = dt.datetime(2024, 5, 17, 9, 30)
    tags: list[str] = field(default_factory=list)
    draft: bool = False

    def word_count(self) -> int:
        return len(self.body.split())


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def fresh_default_config():
    """Isolate tests from changes to the process default configuration."""
    Configuration.reset_default()
    yield
    Configuration.reset_default()


@pytest.fixture
def author() -> Author:
    return Author(id=7, name="Ada", email="ada@example.com")


@pytest.fixture
def post(author) -> Post:
    return Post(id=1, title="Hello", body="first post here", author=author, tags=["intro", "news"])


@pytest.fixture
def posts(author) -> list[Post]:
    return [
        Post(id=1, title="Hello", body="one", author=author),
        Post(id=2, title="My Day", body="two words", author=None),
        Post(id=3, title="Draft", body="", author=author, draft=True),
    ]


@pytest.fixture
def author_blueprint() -> Blueprint:
    return Blueprint("AuthorBlueprint").identifier("id").field("name")


@pytest.fixture
def post_blueprint(author_blueprint) -> Blueprint:
    """Post blueprint with default, extended and summary views."""
    bp = (
        Blueprint("PostBlueprint")
        .identifier("id")
        .field("title")
    )
    with bp.view("extended") as v:
        v.field("body")
        v.association("author", author_blueprint)
    with bp.view("summary") as v:
        v.field("word_count")
    return bp
