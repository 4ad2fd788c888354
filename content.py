# Content store: posts and comments, with authors joined in
from collections import defaultdict

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

import uploads
from errors import NotFoundError, StoreError, ValidationError
from extensions import db
from forms import clean
from guard import ensure_owner
from models import Comment, Post, User


def _commit(action):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreError(f"Failed to {action}") from e


def _post_row(post_id):
    return db.session.query(Post, User.username)\
        .join(User, User.id == Post.author_id)\
        .filter(Post.id == post_id)\
        .first()


def _comment_row(comment_id):
    return db.session.query(Comment, User.username)\
        .join(User, User.id == Comment.author_id)\
        .filter(Comment.id == comment_id)\
        .first()


def create_post(author_id, title, content, category, image=None):
    """Insert a post and return it joined with its author's username."""
    category = clean(category)
    if not category:
        raise ValidationError("Category is required")
    if db.session.get(User, author_id) is None:
        raise NotFoundError("User not found")

    new_post = Post(
        author_id=author_id,
        title=clean(title),
        content=clean(content),
        category=category,
        image=image
    )

    # insert and re-read in the same transaction
    try:
        db.session.add(new_post)
        db.session.flush()
        post, username = _post_row(new_post.id)
        result = post.to_dict(username, comments=[])
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreError("Failed to create post") from e
    _commit("create post")

    current_app.logger.info(f"User {author_id} created post {result['id']}")
    return result


def list_posts():
    """All posts, newest first, each with its comments oldest first.

    Comments for every listed post come from a single query and are
    grouped in memory.
    """
    rows = db.session.query(Post, User.username)\
        .join(User, User.id == Post.author_id)\
        .order_by(Post.created_at.desc(), Post.id.desc())\
        .all()
    if not rows:
        return []

    post_ids = [post.id for post, _ in rows]
    comment_rows = db.session.query(Comment, User.username)\
        .join(User, User.id == Comment.author_id)\
        .filter(Comment.post_id.in_(post_ids))\
        .order_by(Comment.created_at.asc(), Comment.id.asc())\
        .all()

    grouped = defaultdict(list)
    for comment, username in comment_rows:
        grouped[comment.post_id].append(comment.to_dict(username))

    return [post.to_dict(username, comments=grouped[post.id]) for post, username in rows]


def delete_post(post_id, caller_id):
    """Delete a post owned by the caller, along with its comments and image."""
    post = db.session.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    ensure_owner(post.author_id, caller_id)

    image = post.image
    db.session.delete(post)
    _commit("delete post")
    current_app.logger.info(f"User {caller_id} deleted post {post_id}")

    # the row is gone either way; a leftover file is acceptable
    if image:
        uploads.delete_image(image)


def add_comment(post_id, author_id, content):
    """Insert a comment on an existing post and return it with its author's username."""
    content = clean(content)
    if not content:
        raise ValidationError("Comment content is required")
    if db.session.get(Post, post_id) is None:
        raise NotFoundError("Post not found")
    if db.session.get(User, author_id) is None:
        raise NotFoundError("User not found")

    new_comment = Comment(content=content, post_id=post_id, author_id=author_id)

    try:
        db.session.add(new_comment)
        db.session.flush()
        comment, username = _comment_row(new_comment.id)
        result = comment.to_dict(username)
    except IntegrityError as e:
        # post removed between the lookup and the insert
        db.session.rollback()
        raise NotFoundError("Post not found") from e
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreError("Failed to add comment") from e
    _commit("add comment")

    current_app.logger.info(f"User {author_id} commented on post {post_id}")
    return result


def list_comments(post_id):
    rows = db.session.query(Comment, User.username)\
        .join(User, User.id == Comment.author_id)\
        .filter(Comment.post_id == post_id)\
        .order_by(Comment.created_at.asc(), Comment.id.asc())\
        .all()
    return [comment.to_dict(username) for comment, username in rows]
