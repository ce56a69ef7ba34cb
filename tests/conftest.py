"""Shared fixtures for gql-pydefs tests."""

import importlib.util
import sys
import uuid
from pathlib import Path

import pytest

SCHEMA_SDL = '''
"""A book in the catalog."""
type Book implements Node {
  id: ID!
  title: String
  tags: [String!]!
  author(format: String = "short"): Author
  status: Status
  published: DateTime
}

type Author implements Node {
  id: ID!
  name: String!
  books(first: Int, after: String): [Book]
}

interface Node {
  id: ID!
}

union SearchResult = Book | Author

enum Status {
  ACTIVE
  INACTIVE
}

scalar DateTime

input BookInput {
  title: String!
  pages: Int = 100
}

type Query {
  book(id: ID!): Book
  search(term: String!): [SearchResult!]!
  books: [Book]
}

type Mutation {
  addBook(input: BookInput!): Book
}
'''

BOOK_SDL = "type Book { id: ID! title: String }"


class RecordingLogger:
    """Logger stand-in that records messages."""

    def __init__(self):
        self.infos: list[str] = []
        self.errors: list[str] = []

    def info(self, message, *args, **kwargs):
        self.infos.append(message % args if args else message)

    def error(self, message, *args, **kwargs):
        self.errors.append(message % args if args else message)


class FakeChangeSource:
    """Change source yielding a fixed list of paths.

    ``before_each`` is called with a path right before it is yielded.
    """

    def __init__(self, paths, before_each=None):
        self.paths = list(paths)
        self.before_each = before_each
        self.roots = None

    async def changes(self, roots):
        self.roots = list(roots)
        for path in self.paths:
            if self.before_each:
                self.before_each(path)
            yield str(path)


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def schema_dir(tmp_path) -> Path:
    """A directory holding the sample schema split over two files."""
    directory = tmp_path / "schema"
    directory.mkdir()
    types_sdl, _, query_sdl = SCHEMA_SDL.partition("type Query {")
    (directory / "a_types.graphql").write_text(types_sdl)
    (directory / "b_query.graphql").write_text("type Query {" + query_sdl)
    return directory


@pytest.fixture
def load_generated(tmp_path, monkeypatch):
    """Return a function that imports generated source as a module."""

    def _load(content: str):
        name = f"generated_{uuid.uuid4().hex}"
        path = tmp_path / f"{name}.py"
        path.write_text(content)
        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        monkeypatch.setitem(sys.modules, name, module)
        spec.loader.exec_module(module)
        return module

    return _load
