import threading
from decimal import Decimal

import pytest

from alumni_hub.db.models.fundraising import PeerFundraiser
from alumni_hub.schemas.enums import FundraiserStatusEnum
from alumni_hub.schemas.fundraiser import CampaignCreate, DonationCreate, PeerFundraiserCreate
from alumni_hub.schemas.outcome import ErrorKind
from alumni_hub.services import aggregate_counter, fundraiser_service


@pytest.fixture
def admin(make_user):
    return make_user("treasurer", roles=["admin"])


@pytest.fixture
def campaign(db, admin, actor_of):
    return fundraiser_service.create_campaign(
        db, actor_of(admin), CampaignCreate(title="Scholarship Fund", goal_amount=Decimal("50000"))
    ).record


def start_fundraiser(db, actor, campaign):
    return fundraiser_service.create_fundraiser(
        db, actor, PeerFundraiserCreate(campaign_id=campaign.id, title="Run for scholarships", goal_amount=Decimal("1000"))
    )


def test_campaigns_are_admin_only(db, make_user, actor_of):
    outcome = fundraiser_service.create_campaign(
        db, actor_of(make_user()), CampaignCreate(title="Library", goal_amount=Decimal("10"))
    )
    assert outcome.error == ErrorKind.FORBIDDEN


def test_one_fundraiser_per_campaign(db, make_user, actor_of, campaign):
    alum = make_user()
    first = start_fundraiser(db, actor_of(alum), campaign)
    assert first.allow
    assert first.record.status == FundraiserStatusEnum.ACTIVE
    assert first.record.raised_amount == 0

    assert start_fundraiser(db, actor_of(alum), campaign).error == ErrorKind.ALREADY_EXISTS
    assert start_fundraiser(db, actor_of(make_user()), campaign).allow


def test_pause_resume_complete(db, make_user, actor_of, campaign):
    owner = make_user()
    fundraiser = start_fundraiser(db, actor_of(owner), campaign).record

    assert fundraiser_service.pause_fundraiser(db, actor_of(make_user()), fundraiser.id).error == ErrorKind.FORBIDDEN
    assert fundraiser_service.resume_fundraiser(db, actor_of(owner), fundraiser.id).error == ErrorKind.INVALID_STATE

    paused = fundraiser_service.pause_fundraiser(db, actor_of(owner), fundraiser.id)
    assert paused.record.status == FundraiserStatusEnum.PAUSED
    assert paused.record.updated_at is not None

    resumed = fundraiser_service.resume_fundraiser(db, actor_of(owner), fundraiser.id)
    assert resumed.record.status == FundraiserStatusEnum.ACTIVE

    completed = fundraiser_service.complete_fundraiser(db, actor_of(owner), fundraiser.id)
    assert completed.record.status == FundraiserStatusEnum.COMPLETED
    assert fundraiser_service.resume_fundraiser(db, actor_of(owner), fundraiser.id).error == ErrorKind.INVALID_STATE
    assert fundraiser_service.complete_fundraiser(db, actor_of(owner), fundraiser.id).error == ErrorKind.INVALID_STATE


def test_only_completed_donations_raise_the_total(db, make_user, actor_of, admin, campaign):
    owner, donor = make_user(), make_user()
    fundraiser = start_fundraiser(db, actor_of(owner), campaign).record

    pledged = fundraiser_service.pledge_donation(db, actor_of(donor), fundraiser.id, DonationCreate(amount=Decimal("40.50")))
    assert pledged.allow
    assert pledged.record.donor_id == donor.id
    assert fundraiser_service.get_fundraiser(db, fundraiser.id).raised_amount == 0

    assert fundraiser_service.complete_donation(db, actor_of(donor), pledged.record.id).error == ErrorKind.FORBIDDEN

    completed = fundraiser_service.complete_donation(db, actor_of(admin), pledged.record.id)
    assert completed.allow
    assert completed.record.completed_at is not None
    assert fundraiser_service.get_fundraiser(db, fundraiser.id).raised_amount == Decimal("40.50")

    again = fundraiser_service.complete_donation(db, actor_of(admin), pledged.record.id)
    assert again.error == ErrorKind.INVALID_STATE
    assert fundraiser_service.get_fundraiser(db, fundraiser.id).raised_amount == Decimal("40.50")


def test_anonymous_donation(db, make_user, actor_of, campaign):
    fundraiser = start_fundraiser(db, actor_of(make_user()), campaign).record
    outcome = fundraiser_service.pledge_donation(
        db, actor_of(make_user()), fundraiser.id, DonationCreate(amount=Decimal("5"), anonymous=True)
    )
    assert outcome.record.donor_id is None


def test_completed_fundraiser_takes_no_donations(db, make_user, actor_of, campaign):
    owner = make_user()
    fundraiser = start_fundraiser(db, actor_of(owner), campaign).record
    fundraiser_service.complete_fundraiser(db, actor_of(owner), fundraiser.id)

    outcome = fundraiser_service.pledge_donation(db, actor_of(make_user()), fundraiser.id, DonationCreate(amount=Decimal("1")))
    assert outcome.error == ErrorKind.INVALID_STATE


def test_recount_raised_amount(db, make_user, actor_of, admin, campaign):
    fundraiser = start_fundraiser(db, actor_of(make_user()), campaign).record
    for amount in ("10.00", "15.25"):
        donation = fundraiser_service.pledge_donation(
            db, actor_of(make_user()), fundraiser.id, DonationCreate(amount=Decimal(amount))
        ).record
        fundraiser_service.complete_donation(db, actor_of(admin), donation.id)
    aggregate_counter.increment(db, PeerFundraiser.raised_amount, fundraiser.id, Decimal("100"))
    db.commit()

    outcome = fundraiser_service.reconcile_raised_amount(db, actor_of(admin), fundraiser.id)
    assert outcome.record == Decimal("25.25")
    assert fundraiser_service.get_fundraiser(db, fundraiser.id).raised_amount == Decimal("25.25")



def test_two_admins_completing_one_donation(db, session_factory, make_user, actor_of, admin, campaign):
    second_admin = make_user("bursar", roles=["admin"])
    fundraiser = start_fundraiser(db, actor_of(make_user()), campaign).record
    pledged = fundraiser_service.pledge_donation(
        db, actor_of(make_user()), fundraiser.id, DonationCreate(amount=Decimal("75.00"))
    ).record
    results = []
    barrier = threading.Barrier(2)

    def complete(user):
        session = session_factory()
        try:
            barrier.wait()
            results.append(fundraiser_service.complete_donation(session, actor_of(user), pledged.id))
        finally:
            session.close()

    threads = [threading.Thread(target=complete, args=(u,)) for u in (admin, second_admin)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(r.allow for r in results) == [False, True]
    assert [r.error for r in results if not r.allow] == [ErrorKind.INVALID_STATE]
    assert fundraiser_service.get_fundraiser(db, fundraiser.id).raised_amount == Decimal("75.00")

class TestFundraiserRoutes:
    def test_full_flow(self, client, make_user, auth_headers, admin, campaign):
        owner, donor = make_user(), make_user()

        response = client.post(
            "/api/v1/peer-fundraisers/",
            json={"campaign_id": campaign.id, "title": "Cycling for books", "goal_amount": "500"},
            headers=auth_headers(owner),
        )
        assert response.status_code == 200
        fundraiser_id = response.json()["id"]

        assert client.post(f"/api/v1/peer-fundraisers/{fundraiser_id}/pause", headers=auth_headers(donor)).status_code == 403
        response = client.post(f"/api/v1/peer-fundraisers/{fundraiser_id}/pause", headers=auth_headers(owner))
        assert response.json()["status"] == "paused"
        response = client.post(f"/api/v1/peer-fundraisers/{fundraiser_id}/pause", headers=auth_headers(owner))
        assert response.status_code == 422

        response = client.post(
            f"/api/v1/peer-fundraisers/{fundraiser_id}/donations", json={"amount": "20"}, headers=auth_headers(donor)
        )
        assert response.status_code == 201
        donation_id = response.json()["id"]

        response = client.post(f"/api/v1/donations/{donation_id}/complete", headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert Decimal(client.get(f"/api/v1/peer-fundraisers/{fundraiser_id}").json()["raised_amount"]) == Decimal("20")

        assert client.post(f"/api/v1/donations/{donation_id}/complete", headers=auth_headers(admin)).status_code == 422
        assert client.post("/api/v1/donations/999/complete", headers=auth_headers(admin)).status_code == 404

    def test_unknown_campaign(self, client, make_user, auth_headers):
        response = client.post(
            "/api/v1/peer-fundraisers/",
            json={"campaign_id": 42, "title": "Nothing", "goal_amount": "1"},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 404
