from dlv_api.models.citizen import Citizen
from dlv_api.models.license_application import LicenseApplication
from seed import DEMO_CITIZENS, seed_citizens, seed_sample_applications


def test_seeding_is_idempotent(citizens, db_session):
    again = seed_citizens(db_session)
    db_session.commit()

    assert [citizen.national_id for citizen in again] == citizens
    assert db_session.query(Citizen).count() == len(DEMO_CITIZENS)


def test_sample_application_only_for_second_citizen(citizens, db_session):
    seeded = seed_citizens(db_session)
    seed_sample_applications(db_session, seeded)
    seed_sample_applications(db_session, seeded)
    db_session.commit()

    applications = db_session.query(LicenseApplication).all()
    assert len(applications) == 1
    assert applications[0].citizen_id == seeded[1].id
    assert applications[0].status == "PENDING"
