import pytest

from alumni_hub import crud
from alumni_hub.core.config import settings
from alumni_hub.schemas.enums import ModeratedItemTypeEnum, ModerationActionEnum, TopicStatusEnum
from alumni_hub.schemas.forum import ForumPostCreate, ForumTopicCreate
from alumni_hub.schemas.outcome import ErrorKind
from alumni_hub.services import moderation_service

TOPIC = ModeratedItemTypeEnum.TOPIC
POST = ModeratedItemTypeEnum.POST


@pytest.fixture
def moderator(make_user):
    return make_user("mod", roles=["moderator"])


@pytest.fixture
def topic(db, make_user, actor_of):
    return moderation_service.create_topic(
        db, actor_of(make_user()), ForumTopicCreate(title="Reunion venue?", content="Ideas welcome")
    )


def test_new_content_waits_for_approval(db, make_user, actor_of, moderator, topic):
    assert topic.is_approved is False
    post = moderation_service.create_post(db, actor_of(make_user()), topic.id, ForumPostCreate(content="The old gym")).record
    assert post.is_approved is False

    outcome, topics, posts = moderation_service.get_pending(db, actor_of(moderator))
    assert outcome.allow
    assert [t.id for t in topics] == [topic.id]
    assert [p.id for p in posts] == [post.id]


def test_moderator_content_is_approved_immediately(db, actor_of, moderator):
    topic = moderation_service.create_topic(db, actor_of(moderator), ForumTopicCreate(title="Rules", content="Be kind"))
    assert topic.is_approved is True


def test_approval_can_be_switched_off(db, make_user, actor_of, monkeypatch):
    monkeypatch.setattr(settings, "FORUM_REQUIRES_APPROVAL", False)
    topic = moderation_service.create_topic(db, actor_of(make_user()), ForumTopicCreate(title="Hi", content="Hello"))
    assert topic.is_approved is True


def test_plain_users_cannot_moderate(db, make_user, actor_of, topic):
    alum = actor_of(make_user())
    outcome, topics, posts = moderation_service.get_pending(db, alum)
    assert outcome.error == ErrorKind.FORBIDDEN
    assert topics == [] and posts == []

    assert moderation_service.moderate(db, alum, TOPIC, topic.id, ModerationActionEnum.APPROVE).error == ErrorKind.FORBIDDEN


def test_approve_removes_from_pending(db, actor_of, moderator, topic):
    outcome = moderation_service.moderate(db, actor_of(moderator), TOPIC, topic.id, ModerationActionEnum.APPROVE)
    assert outcome.allow
    assert outcome.record.is_approved is True

    _, topics, _ = moderation_service.get_pending(db, actor_of(moderator))
    assert topics == []
    again = moderation_service.moderate(db, actor_of(moderator), TOPIC, topic.id, ModerationActionEnum.APPROVE)
    assert again.error == ErrorKind.INVALID_STATE


def test_reject_deletes_topic_and_posts(db, make_user, actor_of, moderator, topic):
    post = moderation_service.create_post(db, actor_of(make_user()), topic.id, ForumPostCreate(content="+1")).record

    outcome = moderation_service.moderate(db, actor_of(moderator), TOPIC, topic.id, ModerationActionEnum.REJECT)
    assert outcome.allow
    assert outcome.record is None
    assert crud.forum_topic.get_for_update(db, topic.id) is None
    assert crud.forum_post.get_for_update(db, post.id) is None


def test_pin_and_lock(db, make_user, actor_of, moderator, topic):
    mod = actor_of(moderator)
    assert moderation_service.moderate(db, mod, TOPIC, topic.id, ModerationActionEnum.PIN).record.is_pinned is True
    assert moderation_service.moderate(db, mod, TOPIC, topic.id, ModerationActionEnum.UNPIN).record.is_pinned is False

    locked = moderation_service.moderate(db, mod, TOPIC, topic.id, ModerationActionEnum.LOCK)
    assert locked.record.status == TopicStatusEnum.LOCKED

    reply = moderation_service.create_post(db, actor_of(make_user()), topic.id, ForumPostCreate(content="late"))
    assert reply.error == ErrorKind.INVALID_STATE

    unlocked = moderation_service.moderate(db, mod, TOPIC, topic.id, ModerationActionEnum.UNLOCK)
    assert unlocked.record.status == TopicStatusEnum.ACTIVE


def test_post_actions(db, make_user, actor_of, moderator, topic):
    mod = actor_of(moderator)
    post = moderation_service.create_post(db, actor_of(make_user()), topic.id, ForumPostCreate(content="hi")).record

    assert moderation_service.moderate(db, mod, POST, post.id, ModerationActionEnum.LOCK).error == ErrorKind.INVALID_STATE
    assert moderation_service.moderate(db, mod, POST, post.id, ModerationActionEnum.APPROVE).record.is_approved is True
    assert moderation_service.moderate(db, mod, POST, 9999, ModerationActionEnum.APPROVE).error == ErrorKind.NOT_FOUND


class TestModerationRoutes:
    def test_pending_and_moderate(self, client, make_user, auth_headers, moderator):
        author = make_user()
        response = client.post(
            "/api/v1/forums/topics", json={"title": "Mentoring", "content": "Who is in?"}, headers=auth_headers(author)
        )
        assert response.status_code == 201
        topic_id = response.json()["id"]

        assert client.get("/api/v1/forums/moderation/pending", headers=auth_headers(author)).status_code == 403
        response = client.get("/api/v1/forums/moderation/pending", headers=auth_headers(moderator))
        assert response.status_code == 200
        assert [t["id"] for t in response.json()["topics"]] == [topic_id]

        url = f"/api/v1/forums/moderate/topic/{topic_id}"
        assert client.post(url, params={"action": "approve"}, headers=auth_headers(author)).status_code == 403
        response = client.post(url, params={"action": "approve"}, headers=auth_headers(moderator))
        assert response.status_code == 200
        assert response.json()["is_approved"] is True

        response = client.get("/api/v1/forums/moderation/pending", headers=auth_headers(moderator))
        assert response.json()["topics"] == []

        response = client.post(url, params={"action": "reject"}, headers=auth_headers(moderator))
        assert response.status_code == 200
        assert response.json() == {"message": "Content rejected."}

    def test_unknown_item_and_bad_action(self, client, auth_headers, moderator):
        headers = auth_headers(moderator)
        assert client.post("/api/v1/forums/moderate/post/31337", params={"action": "approve"}, headers=headers).status_code == 404
        assert client.post("/api/v1/forums/moderate/post/1", params={"action": "explode"}, headers=headers).status_code == 422
        assert client.post("/api/v1/forums/moderate/widget/1", params={"action": "approve"}, headers=headers).status_code == 422
