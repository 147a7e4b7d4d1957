"""
Ownership and role predicates.

Only two roles and one ownership relation exist, so each rule is a plain
field comparison. Note the comment asymmetry: admins may delete any
comment but may only edit their own.
"""
from app.models import ROLE_ADMIN, Comment, Post, User


def is_admin(actor: User) -> bool:
    return actor.role == ROLE_ADMIN


def is_owner(actor: User, resource: Post | Comment) -> bool:
    return actor.id == resource.author_id


def can_edit_post(actor: User, post: Post) -> bool:
    return is_owner(actor, post) or is_admin(actor)


def can_delete_post(actor: User, post: Post) -> bool:
    return is_owner(actor, post) or is_admin(actor)


def can_edit_comment(actor: User, comment: Comment) -> bool:
    return is_owner(actor, comment)


def can_delete_comment(actor: User, comment: Comment) -> bool:
    return is_owner(actor, comment) or is_admin(actor)
