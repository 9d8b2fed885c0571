"""AccountService: the lifecycle of the actors that can sign in."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from pressctl.domain.content import Actor, is_blank
from pressctl.domain.types import ErrorCode, Role
from pressctl.services._helpers import utcnow
from pressctl.services.base import BaseService
from pressctl.services.result import Outcome
from pressctl.services.telemetry import traced


class AccountService(BaseService):
    """Manages the actors that can sign in."""

    @traced
    def register(
        self, name: str, email: str | None = None, role: Role | str = Role.MEMBER
    ) -> Outcome:
        """Create an account. Emails are unique when present."""
        op = "register_user"
        if is_blank(name):
            return Outcome.fail(op, ErrorCode.INVALID, "Name can't be blank")
        try:
            resolved_role = Role(role)
        except ValueError:
            return Outcome.fail(op, ErrorCode.INVALID, f"Unknown role {role!r}")
        email = email.strip() if email and email.strip() else None

        try:
            with self._store.transaction() as txn:
                if email is not None and txn.find_user_by_email(email) is not None:
                    return Outcome.fail(op, ErrorCode.INVALID, "Email has already been taken")
                user_id = txn.insert_user(
                    name=name.strip(), email=email, role=resolved_role, now=utcnow()
                )
                actor = txn.get_user(user_id)
        except IntegrityError:
            return Outcome.fail(op, ErrorCode.INVALID, "Email has already been taken")

        return Outcome.succeed(op, actor)

    @traced
    def update(
        self, actor: Actor, *, name: str | None = None, email: str | None = None
    ) -> Outcome:
        """Edit the acting account's own name and/or email.

        ``None`` leaves a field alone. A blank *email* clears the address,
        which stops mail notifications for this account. Emails stay unique.
        """
        op = "update_user"
        values: dict[str, str | None] = {}
        if name is not None:
            if is_blank(name):
                return Outcome.fail(op, ErrorCode.INVALID, "Name can't be blank")
            values["name"] = name.strip()
        if email is not None:
            values["email"] = email.strip() or None
        if not values:
            return Outcome.fail(op, ErrorCode.INVALID, "Nothing to change")

        new_email = values.get("email")
        try:
            with self._store.transaction() as txn:
                current = txn.get_user(actor.id)
                if current is None:
                    return Outcome.fail(op, ErrorCode.NOT_FOUND, f"No user with id {actor.id}")
                if new_email is not None:
                    holder = txn.find_user_by_email(new_email)
                    if holder is not None and holder.id != current.id:
                        return Outcome.fail(
                            op, ErrorCode.INVALID, "Email has already been taken", payload=current
                        )
                txn.update_user(current.id, **values)
                updated = txn.get_user(current.id)
        except IntegrityError:
            return Outcome.fail(op, ErrorCode.INVALID, "Email has already been taken")

        return Outcome.succeed(op, updated)

    def get_actor(self, user_id: int) -> Actor | None:
        """Resolve an actor by id, or None when no such account exists."""
        with self._store.reader() as txn:
            return txn.get_user(user_id)

    @traced
    def list(self, *, role: Role | None = None) -> Outcome:
        """All accounts, newest first, optionally narrowed to one role."""
        with self._store.reader() as txn:
            found = txn.list_users(role=role)
        return Outcome.succeed("list_users", data={"users": found, "count": len(found)})

    @traced
    def change_role(self, acting_admin: Actor, user_id: int, role: Role | str) -> Outcome:
        """Set another account's role. Admins cannot demote themselves."""
        op = "change_role"
        try:
            resolved_role = Role(role)
        except ValueError:
            return Outcome.fail(op, ErrorCode.INVALID, f"Unknown role {role!r}")
        if acting_admin.id == user_id:
            return Outcome.fail(op, ErrorCode.SELF_MODIFICATION, "You cannot change your own role")

        with self._store.transaction() as txn:
            target = txn.get_user(user_id)
            if target is None:
                return Outcome.fail(op, ErrorCode.NOT_FOUND, f"No user with id {user_id}")
            txn.set_user_role(user_id, resolved_role)
            updated = txn.get_user(user_id)

        return Outcome.succeed(op, updated)

    @traced
    def remove(self, acting_admin: Actor, user_id: int) -> Outcome:
        """Delete an account that owns no posts or comments."""
        op = "remove_user"
        if acting_admin.id == user_id:
            return Outcome.fail(op, ErrorCode.SELF_MODIFICATION, "You cannot remove yourself")

        with self._store.transaction() as txn:
            target = txn.get_user(user_id)
            if target is None:
                return Outcome.fail(op, ErrorCode.NOT_FOUND, f"No user with id {user_id}")
            post_count, comment_count = txn.count_user_content(user_id)
            if post_count or comment_count:
                return Outcome.fail(
                    op,
                    ErrorCode.HAS_CONTENT,
                    f"User has {post_count} post(s) and {comment_count} comment(s)",
                    payload=target,
                )
            txn.delete_user(user_id)

        return Outcome.succeed(op, target)
