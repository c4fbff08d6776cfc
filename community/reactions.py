"""
Emoji reactions and legacy likes stored as plain lists on posts and comments.

A reaction is ``{"type": ..., "user_id": ..., "user_name": ...}``. Each user
holds at most one reaction per entity; counts are always derived from the
list.
"""

REACTION_TYPES = ('like', 'love', 'laugh', 'wow', 'sad', 'angry')


class InvalidReaction(ValueError):
    pass


def apply_reaction(reactions, user_id, user_name, reaction_type):
    """
    Return a new reaction list where ``user_id`` holds exactly one
    reaction of ``reaction_type``.
    """
    if reaction_type not in REACTION_TYPES:
        raise InvalidReaction('Invalid reaction type')

    updated = [r for r in (reactions or []) if r.get('user_id') != user_id]
    updated.append({'type': reaction_type, 'user_id': user_id, 'user_name': user_name})
    return updated


def reaction_counts(reactions):
    counts = {}
    for reaction in reactions or []:
        counts[reaction['type']] = counts.get(reaction['type'], 0) + 1
    return counts


def user_reaction(reactions, user_id):
    if user_id is None:
        return None
    for reaction in reactions or []:
        if reaction.get('user_id') == user_id:
            return reaction['type']
    return None


def summarize(reactions, user_id=None):
    return {
        'reaction_counts': reaction_counts(reactions),
        'total_reactions': len(reactions or []),
        'user_reaction': user_reaction(reactions, user_id),
    }


def toggle_like(liked_by, user_id):
    """Legacy like toggle. Returns ``(new_liked_by, liked)``."""
    liked_by = list(liked_by or [])
    if user_id in liked_by:
        liked_by.remove(user_id)
        return liked_by, False
    liked_by.append(user_id)
    return liked_by, True
