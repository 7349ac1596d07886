"""
Example 03: Populate Before Pruning

This example demonstrates loading what a request asks for while the session is open,
so that the following prune keeps it instead of stripping unloaded placeholders.
"""

from entity_pruner import (
    EntityPruner,
    InMemoryAdapter,
    PrunableEntity,
    collection,
    reference,
)
from dataclasses import dataclass
from typing import List, Optional


@dataclass(eq=False)
class Author(PrunableEntity):
    """Author entity"""
    id: Optional[int] = None
    name: Optional[str] = None


@dataclass(eq=False)
class Chapter(PrunableEntity):
    """Chapter entity"""
    id: Optional[int] = None
    title: Optional[str] = None
    book: Optional["Book"] = reference("Book")


@dataclass(eq=False)
class Book(PrunableEntity):
    """Book entity with a lazily loaded chapter list"""
    id: Optional[int] = None
    title: Optional[str] = None
    author: Optional[Author] = reference(Author)
    chapters: Optional[List[Chapter]] = collection(Chapter, mapped_by="book")


def main():
    authors = {1: Author(id=1, name="Ursula")}
    chapters = {}

    def load(target, identifier):
        print(f"  (loading {target.__name__} #{identifier})")
        return authors[identifier]

    def load_children(owner, field_name):
        print(f"  (loading {type(owner).__name__}.{field_name})")
        return chapters[owner.id]

    adapter = InMemoryAdapter(loader=load, collection_loader=load_children)
    pruner = EntityPruner(adapter)

    def fetch_book():
        # What a DAO would hand back: everything lazy
        book = Book(id=5, title="A Wizard of Earthsea")
        book.author = adapter.create_placeholder(Author, 1)
        book.chapters = adapter.create_uninitialized_collection(
            list, owner=book, field_name="chapters"
        )
        chapters[5] = [
            Chapter(id=51, title="Warriors in the Mist", book=book),
            Chapter(id=52, title="The Shadow", book=book),
        ]
        return book

    print("=== Prune without populate ===\n")

    book = fetch_book()
    pruner.prune(book, 2)
    print(f"Author: {book.author}, ids: {book.field_id_map}")
    print(f"Chapters: {book.chapters}\n")

    print("=== Populate, then prune ===\n")

    book = fetch_book()
    options = {"depth": "2"}
    pruner.populate(book, options)
    pruner.prune(book, options)
    print(f"Author: {book.author.name}")
    print(f"Chapters: {[chapter.title for chapter in book.chapters]}\n")

    print("=== Populate a single collection ===\n")

    book = fetch_book()
    options = {"include": "chapters"}
    pruner.populate(book, options)
    pruner.prune(book, options)
    print(f"Author: {book.author.name}")
    print(f"Chapters: {[chapter.title for chapter in book.chapters]}")


if __name__ == "__main__":
    main()
