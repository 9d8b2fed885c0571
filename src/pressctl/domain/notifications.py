"""Recipient selection for new-comment notifications."""

from __future__ import annotations

from collections.abc import Iterable

from pressctl.domain.content import Actor


def comment_recipients(
    *,
    post_owner: Actor | None,
    commenter_id: int | None,
    prior_commenters: Iterable[Actor],
) -> list[Actor]:
    """Who hears about a new comment.

    - The post owner, if they have an email and did not write the comment.
    - Every distinct prior commenter, except the current commenter and
      the post owner. Whether someone without an email can be reached is
      up to the delivery hook.

    Anonymous commenters never appear (they have no identity). The result
    is de-duplicated by user id and keeps first-seen order.
    """
    recipients: dict[int, Actor] = {}
    owner_id = post_owner.id if post_owner is not None else None

    if post_owner is not None and post_owner.email and post_owner.id != commenter_id:
        recipients[post_owner.id] = post_owner

    for actor in prior_commenters:
        if actor.id in (commenter_id, owner_id):
            continue
        recipients.setdefault(actor.id, actor)

    return list(recipients.values())
