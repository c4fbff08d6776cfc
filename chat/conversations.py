"""
Two-party conversation keys and thread summaries.

A participant is an ``(id, type)`` pair where type is one of ``user``,
``medical_officer`` or ``admin``. End users are identified by their
Firebase uid, medical officers by their profile id.
"""

USER = 'user'
MEDICAL_OFFICER = 'medical_officer'
ADMIN = 'admin'

PARTICIPANT_TYPES = (
    (USER, 'User'),
    (MEDICAL_OFFICER, 'Medical Officer'),
    (ADMIN, 'Admin'),
)


def derive_conversation_id(first, second):
    """
    Key for the thread between two participants.

    Ids and types are sorted independently, so the result does not depend
    on who starts the conversation.
    """
    ids = sorted([str(first[0]), str(second[0])])
    types = sorted([first[1], second[1]])
    return f"{types[0]}_{ids[0]}_{types[1]}_{ids[1]}"


def involves(message, participant_id, participant_type):
    return (
        (message.sender_id == participant_id and message.sender_type == participant_type) or
        (message.receiver_id == participant_id and message.receiver_type == participant_type)
    )


def counterpart(message, participant_id, participant_type):
    """The other side of ``message`` as seen by the given participant."""
    if message.sender_id == participant_id and message.sender_type == participant_type:
        return message.receiver_id, message.receiver_type
    return message.sender_id, message.sender_type


def summarize_conversations(messages, participant_id, participant_type):
    """
    Group a participant's messages into threads.

    ``messages`` must be ordered newest first. Returns one dict per
    conversation, most recently active first, with the last message, the
    message count and the number of unread messages addressed to the
    participant.
    """
    threads = {}
    for message in messages:
        if not involves(message, participant_id, participant_type):
            continue
        thread = threads.get(message.conversation_id)
        if thread is None:
            other_id, other_type = counterpart(message, participant_id, participant_type)
            thread = threads[message.conversation_id] = {
                'conversation_id': message.conversation_id,
                'last_message': message,
                'message_count': 0,
                'unread_count': 0,
                'counterpart_id': other_id,
                'counterpart_type': other_type,
            }
        thread['message_count'] += 1
        if (message.receiver_id == participant_id and message.receiver_type == participant_type
                and not message.is_read):
            thread['unread_count'] += 1
    # dicts keep insertion order, which is already newest first
    return list(threads.values())
