import threading

import pytest

from alumni_hub.db.models.achievement import AchievementCelebration
from alumni_hub.schemas.celebration import AchievementCreate, CelebrationCreate
from alumni_hub.schemas.outcome import ErrorKind
from alumni_hub.services import aggregate_counter, celebration_service


@pytest.fixture
def celebration(db, make_user, actor_of):
    admin = make_user("registrar", roles=["admin"])
    achiever = make_user("achiever")
    achievement = celebration_service.create_achievement(
        db, actor_of(admin), AchievementCreate(name="Promoted to CTO", category="career")
    ).record
    awarded = celebration_service.award_achievement(db, actor_of(admin), achievement.id, achiever.id).record
    return celebration_service.create_celebration(
        db, actor_of(achiever), CelebrationCreate(user_achievement_id=awarded.id), achiever.username
    ).record


def test_default_celebration_message(celebration):
    assert celebration.message.startswith("achiever just unlocked the 'Promoted to CTO' achievement!")
    assert celebration.congratulations_count == 0


def test_only_the_achiever_can_celebrate(db, make_user, actor_of, celebration):
    outcome = celebration_service.create_celebration(
        db, actor_of(make_user()), CelebrationCreate(user_achievement_id=celebration.user_achievement_id), "someone"
    )
    assert outcome.error == ErrorKind.FORBIDDEN


def test_award_twice_and_non_admin(db, make_user, actor_of):
    admin, alum = make_user(roles=["admin"]), make_user()
    achievement = celebration_service.create_achievement(db, actor_of(admin), AchievementCreate(name="Mentor")).record

    assert celebration_service.award_achievement(db, actor_of(alum), achievement.id, alum.id).error == ErrorKind.FORBIDDEN
    assert celebration_service.award_achievement(db, actor_of(admin), achievement.id, alum.id).allow
    outcome = celebration_service.award_achievement(db, actor_of(admin), achievement.id, alum.id)
    assert outcome.error == ErrorKind.ALREADY_EXISTS

    duplicate = celebration_service.create_achievement(db, actor_of(admin), AchievementCreate(name="Mentor"))
    assert duplicate.error == ErrorKind.ALREADY_EXISTS


def test_congratulate_and_remove(db, make_user, actor_of, celebration):
    fan = make_user()

    outcome = celebration_service.congratulate(db, actor_of(fan), celebration.id, message="Well deserved!")
    assert outcome.allow
    assert outcome.record.message == "Well deserved!"
    assert celebration_service.get_congratulations_count(db, celebration.id) == 1

    again = celebration_service.congratulate(db, actor_of(fan), celebration.id)
    assert again.error == ErrorKind.ALREADY_EXISTS
    assert celebration_service.get_congratulations_count(db, celebration.id) == 1

    assert celebration_service.remove_congratulation(db, actor_of(fan), celebration.id).allow
    assert celebration_service.get_congratulations_count(db, celebration.id) == 0

    missing = celebration_service.remove_congratulation(db, actor_of(fan), celebration.id)
    assert not missing.allow
    assert missing.error == ErrorKind.NOT_FOUND
    assert celebration_service.get_congratulations_count(db, celebration.id) == 0


def test_recount_matches_rows(db, make_user, actor_of, celebration):
    moderator = make_user(roles=["moderator"])
    for _ in range(3):
        celebration_service.congratulate(db, actor_of(make_user()), celebration.id)
    aggregate_counter.increment(db, AchievementCelebration.congratulations_count, celebration.id, 4)
    db.commit()

    assert celebration_service.reconcile_congratulations(db, actor_of(make_user()), celebration.id).error == ErrorKind.FORBIDDEN
    outcome = celebration_service.reconcile_congratulations(db, actor_of(moderator), celebration.id)
    assert outcome.record == 3
    assert celebration_service.get_congratulations_count(db, celebration.id) == 3


def test_concurrent_congratulations_count_once(session_factory, make_user, actor_of, celebration):
    fan = make_user()
    others = [make_user() for _ in range(3)]
    actors = [actor_of(fan)] * 4 + [actor_of(u) for u in others]
    results = []
    barrier = threading.Barrier(len(actors))

    def congratulate(actor):
        session = session_factory()
        try:
            barrier.wait()
            results.append(celebration_service.congratulate(session, actor, celebration.id))
        finally:
            session.close()

    threads = [threading.Thread(target=congratulate, args=(a,)) for a in actors]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(1 for r in results if r.allow) == 4
    assert sum(1 for r in results if r.error == ErrorKind.ALREADY_EXISTS) == 3

    session = session_factory()
    try:
        assert celebration_service.get_congratulations_count(session, celebration.id) == 4
    finally:
        session.close()


class TestCongratulationRoutes:
    def test_add_and_remove(self, client, make_user, auth_headers, celebration):
        fan = make_user()
        url = f"/api/v1/achievement-celebrations/{celebration.id}/congratulations"

        response = client.post(url, json={"message": "Bravo"}, headers=auth_headers(fan))
        assert response.status_code == 200
        assert response.json()["congratulations_count"] == 1
        assert response.json()["congratulation"]["message"] == "Bravo"

        response = client.post(url, headers=auth_headers(fan))
        assert response.status_code == 422
        assert response.json()["detail"] == "You have already congratulated this achievement."

        assert len(client.get(url).json()) == 1

        response = client.delete(url, headers=auth_headers(fan))
        assert response.status_code == 200
        assert response.json()["congratulations_count"] == 0

        assert client.delete(url, headers=auth_headers(fan)).status_code == 404

    def test_recount_needs_moderator(self, client, make_user, auth_headers, celebration):
        url = f"/api/v1/achievement-celebrations/{celebration.id}/recount"
        assert client.post(url, headers=auth_headers(make_user())).status_code == 403

        response = client.post(url, headers=auth_headers(make_user(roles=["moderator"])))
        assert response.status_code == 200
        assert response.json() == {"count": 0}

    def test_achievement_routes(self, client, make_user, auth_headers):
        admin, alum = make_user(roles=["admin"]), make_user()
        response = client.post("/api/v1/achievements/", json={"name": "First Job"}, headers=auth_headers(alum))
        assert response.status_code == 403

        response = client.post("/api/v1/achievements/", json={"name": "First Job"}, headers=auth_headers(admin))
        assert response.status_code == 201
        achievement_id = response.json()["id"]

        response = client.post(
            f"/api/v1/achievements/{achievement_id}/award", json={"user_id": str(alum.id)}, headers=auth_headers(admin)
        )
        assert response.status_code == 201

        response = client.post(
            "/api/v1/achievement-celebrations/",
            json={"user_achievement_id": response.json()["id"], "message": "I did it"},
            headers=auth_headers(alum),
        )
        assert response.status_code == 201
        assert response.json()["message"] == "I did it"
