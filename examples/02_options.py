"""
Example 02: Pruning Options

This example demonstrates depth, include and select, the three options a client can
send to shape the snapshot it gets back.
"""

from entity_pruner import EntityPruner, InMemoryAdapter, PrunableModel, Relationship
from typing import Annotated, List, Optional


class Tag(PrunableModel):
    """Tag entity"""
    id: Optional[int] = None
    label: Optional[str] = None


class Comment(PrunableModel):
    """Comment entity"""
    id: Optional[int] = None
    text: Optional[str] = None
    post: Annotated[Optional["Post"], Relationship.reference()] = None


class Post(PrunableModel):
    """Post entity with comments and tags"""
    id: Optional[int] = None
    version: Optional[int] = 0
    title: Optional[str] = None
    body: Optional[str] = None
    comments: Annotated[
        Optional[List[Comment]], Relationship.collection(mapped_by="post")
    ] = []
    tags: Annotated[Optional[List[Tag]], Relationship.collection()] = []


Comment.model_rebuild()
Post.model_rebuild()


def build_post():
    post = Post(id=1, version=3, title="Pruning graphs", body="A long body...")
    post.comments = [
        Comment(id=10, text="Nice!", post=post),
        Comment(id=11, text="Thanks", post=post),
    ]
    post.tags = [Tag(id=100, label="python")]
    return post


def main():
    pruner = EntityPruner(InMemoryAdapter())

    print("=== depth ===\n")

    # depth=1: the post only, every collection is dropped
    post = build_post()
    pruner.prune(post, {"depth": "1"})
    print(f"depth=1: {post.model_dump_json(exclude={'field_id_map'})}\n")

    # depth=2: one level of collections
    post = build_post()
    pruner.prune(post, 2)
    print(f"depth=2: {post.model_dump_json(exclude={'field_id_map'})}\n")

    print("=== include ===\n")

    # include wins over depth, and drops every collection it does not name
    post = build_post()
    pruner.prune(post, {"depth": "1", "include": "comments"})
    print(f"include=comments: {post.model_dump_json(exclude={'field_id_map'})}\n")

    print("=== select ===\n")

    # select keeps only the named plain attributes; the state becomes partial
    post = build_post()
    pruner.prune(post, {"depth": "1", "select": "id, title"})
    print(f"select=id,title: {post.model_dump_json(exclude={'field_id_map'})}")
    print(f"State: {post.pruning_state.value}\n")

    # Unknown names are ignored
    post = build_post()
    pruner.prune(post, {"include": "comments,attachments", "select": "title,author"})
    print(f"Stale names: {post.model_dump_json(exclude={'field_id_map'})}")


if __name__ == "__main__":
    main()
