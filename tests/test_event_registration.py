import threading
from datetime import timedelta

import pytest

from alumni_hub import crud
from alumni_hub.core.utils import utcnow
from alumni_hub.db.models.event import Event
from alumni_hub.schemas.enums import CheckInMethodEnum, EventStatusEnum, RegistrationStatusEnum
from alumni_hub.schemas.outcome import ErrorKind
from alumni_hub.services import aggregate_counter, event_service


def attendee_count(db, event_id):
    return aggregate_counter.current_value(db, Event.attendee_count, event_id)


def test_capacity_of_two(db, make_user, make_event, actor_of):
    event = make_event(max_attendees=2)
    u1, u2, u3 = make_user(), make_user(), make_user()

    assert event_service.register(db, actor_of(u1), event.id).allow
    assert event_service.register(db, actor_of(u2), event.id).allow

    outcome = event_service.register(db, actor_of(u3), event.id)
    assert outcome.error == ErrorKind.FULL
    assert attendee_count(db, event.id) == 2

    assert event_service.unregister(db, actor_of(u1), event.id).allow
    assert attendee_count(db, event.id) == 1
    assert event_service.register(db, actor_of(u3), event.id).allow
    assert attendee_count(db, event.id) == 2


def test_registration_record(db, make_user, make_event, actor_of):
    event = make_event()
    user = make_user()

    outcome = event_service.register(db, actor_of(user), event.id)
    assert outcome.allow
    assert outcome.new_state == "confirmed"
    assert outcome.record.event_id == event.id
    assert outcome.record.user_id == user.id
    assert [r.user_id for r in event_service.get_attendees(db, event.id)] == [user.id]


def test_duplicate_registration(db, make_user, make_event, actor_of):
    event = make_event()
    user = make_user()
    assert event_service.register(db, actor_of(user), event.id).allow

    outcome = event_service.register(db, actor_of(user), event.id)
    assert outcome.error == ErrorKind.ALREADY_REGISTERED
    assert attendee_count(db, event.id) == 1


@pytest.mark.parametrize("status", [EventStatusEnum.DRAFT, EventStatusEnum.CANCELLED])
def test_unpublished_events_are_closed(db, make_user, make_event, actor_of, status):
    event = make_event(status=status)
    assert event_service.register(db, actor_of(make_user()), event.id).error == ErrorKind.NOT_OPEN


def test_registration_deadline(db, make_user, make_event, actor_of):
    event = make_event(registration_deadline=utcnow() - timedelta(minutes=5))
    assert event_service.register(db, actor_of(make_user()), event.id).error == ErrorKind.DEADLINE_PASSED


def test_cancellation_deadline_keeps_registration(db, make_user, make_event, actor_of):
    now = utcnow()
    event = make_event(cancellation_deadline=now + timedelta(days=1))
    user = make_user()
    assert event_service.register(db, actor_of(user), event.id).allow

    outcome = event_service.unregister(db, actor_of(user), event.id, now=now + timedelta(days=2))
    assert outcome.error == ErrorKind.DEADLINE_PASSED
    assert crud.event_registration.get_by_user(db, event_id=event.id, user_id=user.id) is not None
    assert attendee_count(db, event.id) == 1


def test_unregister_without_registration(db, make_user, make_event, actor_of):
    event = make_event()
    outcome = event_service.unregister(db, actor_of(make_user()), event.id)
    assert outcome.error == ErrorKind.NOT_REGISTERED


def test_unknown_event(db, make_user, actor_of):
    assert event_service.register(db, actor_of(make_user()), 404).error == ErrorKind.NOT_FOUND


def test_recount_attendees_repairs_drift(db, make_user, make_event, actor_of):
    event = make_event()
    for _ in range(3):
        event_service.register(db, actor_of(make_user()), event.id)
    aggregate_counter.increment(db, Event.attendee_count, event.id, 5)
    db.commit()
    assert attendee_count(db, event.id) == 8

    assert event_service.reconcile_attendees(db, event.id) == 3
    assert attendee_count(db, event.id) == 3


def test_concurrent_registrations_never_overshoot(session_factory, make_user, make_event, actor_of):
    event = make_event(max_attendees=3)
    users = [make_user() for _ in range(8)]
    results = []
    barrier = threading.Barrier(len(users))

    def register(user):
        session = session_factory()
        try:
            barrier.wait()
            results.append(event_service.register(session, actor_of(user), event.id))
        finally:
            session.close()

    threads = [threading.Thread(target=register, args=(u,)) for u in users]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(1 for r in results if r.allow) == 3
    assert all(r.error == ErrorKind.FULL for r in results if not r.allow)

    session = session_factory()
    try:
        assert attendee_count(session, event.id) == 3
        assert crud.event_registration.count_by_event(session, event_id=event.id) == 3
    finally:
        session.close()



def test_concurrent_duplicate_registrations(session_factory, make_user, make_event, actor_of):
    event = make_event(max_attendees=10)
    user = make_user()
    attempts = 6
    results = []
    barrier = threading.Barrier(attempts)

    def register():
        session = session_factory()
        try:
            barrier.wait()
            results.append(event_service.register(session, actor_of(user), event.id))
        finally:
            session.close()

    threads = [threading.Thread(target=register) for _ in range(attempts)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(1 for r in results if r.allow) == 1
    assert [r.error for r in results if not r.allow] == [ErrorKind.ALREADY_REGISTERED] * (attempts - 1)

    session = session_factory()
    try:
        assert attendee_count(session, event.id) == 1
        assert crud.event_registration.count_by_event(session, event_id=event.id) == 1
    finally:
        session.close()


def test_check_in(db, make_user, make_event, actor_of):
    event = make_event()
    user = make_user()
    assert event_service.check_in(db, actor_of(user), event.id).error == ErrorKind.NOT_REGISTERED

    event_service.register(db, actor_of(user), event.id)
    outcome = event_service.check_in(db, actor_of(user), event.id, method=CheckInMethodEnum.QR_CODE, notes="Front desk")
    assert outcome.allow
    assert outcome.record.status == RegistrationStatusEnum.CHECKED_IN
    assert outcome.record.check_in_method == CheckInMethodEnum.QR_CODE
    assert outcome.record.checked_in_at is not None
    assert attendee_count(db, event.id) == 1

    assert event_service.check_in(db, actor_of(user), event.id).error == ErrorKind.INVALID_STATE


def test_checked_in_attendee_cannot_unregister(db, make_user, make_event, actor_of):
    event = make_event()
    user = make_user()
    event_service.register(db, actor_of(user), event.id)
    event_service.check_in(db, actor_of(user), event.id)

    assert event_service.unregister(db, actor_of(user), event.id).error == ErrorKind.INVALID_STATE
    assert attendee_count(db, event.id) == 1
    assert crud.event_registration.count_by_event(db, event_id=event.id) == 1


def test_check_in_to_cancelled_event(db, make_user, make_event, actor_of):
    event = make_event()
    user = make_user()
    event_service.register(db, actor_of(user), event.id)
    event.status = EventStatusEnum.CANCELLED
    db.commit()

    assert event_service.check_in(db, actor_of(user), event.id).error == ErrorKind.NOT_OPEN


class TestEventRoutes:
    def test_create_and_register(self, client, make_user, auth_headers):
        organizer, alum = make_user(), make_user()
        response = client.post(
            "/api/v1/events/",
            json={"title": "Reunion", "status": "published", "max_attendees": 1},
            headers=auth_headers(organizer),
        )
        assert response.status_code == 201
        event_id = response.json()["id"]
        assert response.json()["attendee_count"] == 0

        response = client.post(f"/api/v1/events/{event_id}/register", headers=auth_headers(alum))
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"

        response = client.post(f"/api/v1/events/{event_id}/register", headers=auth_headers(organizer))
        assert response.status_code == 422
        assert response.json()["detail"] == "This event is full."

        assert client.get(f"/api/v1/events/{event_id}").json()["attendee_count"] == 1

        response = client.delete(f"/api/v1/events/{event_id}/register", headers=auth_headers(alum))
        assert response.status_code == 200
        assert client.get(f"/api/v1/events/{event_id}").json()["attendee_count"] == 0

    def test_unregister_twice_is_422(self, client, make_user, make_event, auth_headers):
        event = make_event()
        user = make_user()
        response = client.delete(f"/api/v1/events/{event.id}/register", headers=auth_headers(user))
        assert response.status_code == 422
        assert response.json()["detail"] == "You are not registered for this event."

    def test_check_in_route(self, client, make_user, make_event, auth_headers):
        event = make_event()
        user = make_user()
        headers = auth_headers(user)

        response = client.post(f"/api/v1/events/{event.id}/check-in", headers=headers)
        assert response.status_code == 422
        assert response.json()["detail"] == "You are not registered for this event."

        client.post(f"/api/v1/events/{event.id}/register", headers=headers)
        response = client.post(f"/api/v1/events/{event.id}/check-in", json={"method": "nfc"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["status"] == "checked_in"
        assert response.json()["check_in_method"] == "nfc"

        assert client.post(f"/api/v1/events/{event.id}/check-in", headers=headers).status_code == 422
        assert client.post("/api/v1/events/12345/check-in", headers=headers).status_code == 404

    def test_missing_event_is_404(self, client, make_user, auth_headers):
        assert client.post("/api/v1/events/12345/register", headers=auth_headers(make_user())).status_code == 404

    def test_requires_authentication(self, client, make_event):
        event = make_event()
        assert client.post(f"/api/v1/events/{event.id}/register").status_code == 401
