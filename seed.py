import argparse
from datetime import timedelta

from dlv_api.database import Base, SessionLocal, engine
from dlv_api.models.citizen import Citizen, CitizenStatus
from dlv_api.models.license_application import ApplicationStatus, LicenseApplication
from dlv_api.utils.timeutils import utcnow

DEMO_OTP = "123456"

DEMO_CITIZENS = [
    {
        "national_id": "1234567890123456",
        "full_name": "Jean Baptiste Ndayisenga",
        "date_of_birth": "1990-05-15",
        "address": "Avenue de la Révolution, Bujumbura, Burundi",
        "phone_number": "+257 79 123 456",
        "email": "jean.baptiste@email.bi",
    },
    {
        "national_id": "2345678901234567",
        "full_name": "Marie Claire Uwimana",
        "date_of_birth": "1985-12-03",
        "address": "Quartier Rohero, Bujumbura, Burundi",
        "phone_number": "+257 78 234 567",
        "email": "marie.claire@email.bi",
    },
    {
        "national_id": "3456789012345678",
        "full_name": "Pierre Nkurunziza",
        "date_of_birth": "1988-08-20",
        "address": "Avenue de l'Indépendance, Bujumbura, Burundi",
        "phone_number": "+257 76 345 678",
        "email": "pierre.nkurunziza@email.bi",
    },
]


def seed_citizens(db) -> list[Citizen]:
    seeded = []
    for entry in DEMO_CITIZENS:
        citizen = db.query(Citizen).filter(Citizen.national_id == entry["national_id"]).first()
        if citizen:
            seeded.append(citizen)
            continue
        citizen = Citizen(status=CitizenStatus.ACTIVE.value, **entry)
        db.add(citizen)
        db.flush()
        seeded.append(citizen)
        print(f"✔ Seeded citizen '{citizen.full_name}' ({citizen.national_id})")
    return seeded


def _sample_application(citizen: Citizen, app_id: str, status: str, submitted_days_ago: int, contact: dict) -> LicenseApplication:
    submitted_at = utcnow() - timedelta(days=submitted_days_ago)
    return LicenseApplication(
        id=app_id,
        citizen_id=citizen.id,
        license_type="STANDARD",
        status=status,
        personal_info={
            "fullName": citizen.full_name,
            "dateOfBirth": citizen.date_of_birth,
            "address": citizen.address,
            "phoneNumber": citizen.phone_number,
            "email": citizen.email,
        },
        documents={
            "nationalIdPhoto": f"https://example.com/{app_id.lower()}-id-photo.jpg",
            "medicalCertificate": f"https://example.com/{app_id.lower()}-medical.jpg",
            "applicationPhoto": f"https://example.com/{app_id.lower()}-photo.jpg",
        },
        emergency_contact=contact,
        submitted_at=submitted_at,
        approved_at=utcnow() - timedelta(days=2) if status == ApplicationStatus.APPROVED.value else None,
        created_at=submitted_at,
        updated_at=submitted_at,
    )


def seed_sample_applications(db, citizens: list[Citizen]) -> None:
    # Only the second citizen gets a sample so the primary demo login can still apply
    if len(citizens) < 2:
        return
    citizen = citizens[1]
    if db.query(LicenseApplication).filter(LicenseApplication.citizen_id == citizen.id).count():
        return
    db.add(
        _sample_application(
            citizen,
            "DLVSAMPLE0001",
            ApplicationStatus.PENDING.value,
            submitted_days_ago=3,
            contact={"name": "Pierre Nkurunziza", "phone": "+257 78 987 654", "relationship": "Brother"},
        )
    )
    print(f"✔ Seeded sample application for '{citizen.full_name}'")


def list_national_ids(db) -> None:
    citizens = db.query(Citizen).order_by(Citizen.id).all()
    if not citizens:
        print("No citizens found. Run `python seed.py` first.")
        return
    for index, citizen in enumerate(citizens, start=1):
        print(f"{index}. National ID: {citizen.national_id}")
        print(f"   Name: {citizen.full_name}  Status: {citizen.status}")
        print(f"   Phone: {citizen.phone_number}")
    print(f"\nDemo OTP outside production: {DEMO_OTP}")


def run_seed(with_samples: bool = True):
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        citizens = seed_citizens(db)
        if with_samples:
            seed_sample_applications(db, citizens)
        db.commit()
    except Exception as e:
        db.rollback()
        print("❌ Seeding error:", e)
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo citizens for the DLV portal")
    parser.add_argument("--list", action="store_true", help="print seeded national IDs and exit")
    parser.add_argument("--no-samples", action="store_true", help="skip sample license applications")
    args = parser.parse_args()

    if args.list:
        session = SessionLocal()
        try:
            list_national_ids(session)
        finally:
            session.close()
    else:
        run_seed(with_samples=not args.no_samples)
