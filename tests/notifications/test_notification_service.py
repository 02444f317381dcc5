import pytest

from workforce_admin.core.enums import NotificationActionType, NotificationPriority
from workforce_admin.core.exceptions import AuthorizationError, ConflictError, ValidationError


def test_send_bulk_dedupes_recipients(container, world):
    service = container.notification_service
    ids = service.send_bulk(
        recipient_profile_ids=[world.alice_id, world.bob_id, world.alice_id],
        title="Roster published",
        message="Next week's roster is out",
        priority="high",
        sender_profile_id=world.admin_id,
    )
    assert len(ids) == 2
    (note,) = service.list_for_recipient(profile_id=world.bob_id)
    assert note.priority == NotificationPriority.HIGH
    assert note.sender_profile_id == world.admin_id


def test_send_validation(container, world):
    service = container.notification_service
    with pytest.raises(ValidationError):
        service.send_bulk(recipient_profile_ids=[], title="t", message="m")
    with pytest.raises(ValidationError):
        service.send(recipient_profile_id=world.alice_id, title=" ", message="m")
    with pytest.raises(ValidationError):
        service.send(recipient_profile_id=world.alice_id, title="t", message="m", priority="urgent")


def test_read_state(container, world):
    service = container.notification_service
    first = service.send(recipient_profile_id=world.alice_id, title="One", message="m")
    service.send(recipient_profile_id=world.alice_id, title="Two", message="m")
    assert service.unread_count(profile_id=world.alice_id) == 2

    note = service.mark_read(notification_id=first, profile_id=world.alice_id)
    assert note.is_read and note.read_at is not None
    assert service.unread_count(profile_id=world.alice_id) == 1
    assert [n.title for n in service.list_for_recipient(profile_id=world.alice_id, unread_only=True)] == ["Two"]

    assert service.mark_all_read(profile_id=world.alice_id) == 1
    assert service.unread_count(profile_id=world.alice_id) == 0


def test_notifications_are_private(container, world):
    service = container.notification_service
    note_id = service.send(recipient_profile_id=world.alice_id, title="Hi", message="m")
    with pytest.raises(AuthorizationError):
        service.mark_read(notification_id=note_id, profile_id=world.bob_id)
    with pytest.raises(AuthorizationError):
        service.delete(notification_id=note_id, profile_id=world.bob_id)
    service.delete(notification_id=note_id, profile_id=world.alice_id)
    assert service.list_for_recipient(profile_id=world.alice_id) == []


def test_action_can_be_taken_once(container, world):
    service = container.notification_service
    plain = service.send(recipient_profile_id=world.alice_id, title="FYI", message="m")
    with pytest.raises(ValidationError):
        service.record_action(notification_id=plain, profile_id=world.alice_id)

    actionable = service.send(
        recipient_profile_id=world.alice_id,
        title="Confirm shift",
        message="Please confirm",
        action_type=NotificationActionType.CONFIRM,
        action_data={"roster_id": 7},
    )
    note = service.record_action(notification_id=actionable, profile_id=world.alice_id)
    assert note.is_actioned and note.is_read
    assert note.action_data == {"roster_id": 7}
    with pytest.raises(ConflictError):
        service.record_action(notification_id=actionable, profile_id=world.alice_id)
