# backend/scripts/seed_database.py
import asyncio
import logging
from decimal import Decimal

# Add project root to sys.path to allow importing from teleconsulta
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_dir))

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from teleconsulta.config.constants import Role  # noqa: E402
from teleconsulta.config.settings import settings as app_settings  # noqa: E402
from teleconsulta.core.auth import get_password_hash  # noqa: E402
from teleconsulta.db.crud.plan import exists_by_name, save_plan  # noqa: E402
from teleconsulta.db.crud.user import exists_by_email, save_user  # noqa: E402
from teleconsulta.db.models import PlanModel, UserModel  # noqa: E402

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("seed_database")

# (name, description, price, cap, video, chat, prescription, certificate, features)
PLANS = [
    (
        "Basic", "For occasional consultations", "49.90", 2,
        True, False, True, False,
        ["2 appointments per month", "Video call", "Digital prescription", "Email support"],
    ),
    (
        "Standard", "The most popular plan for regular care", "99.90", 5,
        True, True, True, True,
        ["5 appointments per month", "Video call", "Chat with your doctor",
         "Digital prescription", "Medical certificate", "Priority support"],
    ),
    (
        "Premium", "Unlimited access for complete care", "199.90", None,
        True, True, True, True,
        ["Unlimited appointments", "Video call", "24/7 chat with your doctor",
         "Digital prescription", "Medical certificate", "VIP support",
         "Priority scheduling", "Full medical history"],
    ),
]

# (email, name, password, national_id, phone, role, license_id, specialty)
USERS = [
    ("admin@teleconsulta.com", "Administrator", "admin123", "00000000000",
     "11999999999", Role.ADMIN, None, None),
    ("joao.silva@teleconsulta.com", "Dr. Joao Silva", "doctor123", "11111111111",
     "11988888888", Role.DOCTOR, "CRM/SP 123456", "General Practice"),
    ("maria.santos@teleconsulta.com", "Dr. Maria Santos", "doctor123", "22222222222",
     "11977777777", Role.DOCTOR, "CRM/SP 654321", "Cardiology"),
    ("pedro.oliveira@teleconsulta.com", "Dr. Pedro Oliveira", "doctor123", "33333333333",
     "11966666666", Role.DOCTOR, "CRM/SP 789012", "Dermatology"),
    ("carlos@email.com", "Carlos Patient", "patient123", "44444444444",
     "11955555555", Role.PATIENT, None, None),
]


async def seed_plans(db: AsyncSession) -> None:
    for name, description, price, cap, video, chat, prescription, certificate, features in PLANS:
        if await exists_by_name(db, name):
            logger.info(f"Plan '{name}' already exists. Skipping.")
            continue
        await save_plan(
            db,
            PlanModel(
                name=name,
                description=description,
                price=Decimal(price),
                duration_months=1,
                max_appointments_month=cap,
                has_video_call=video,
                has_chat=chat,
                has_prescription=prescription,
                has_medical_certificate=certificate,
                features=features,
            ),
        )
        logger.info(f"Added plan: {name} ({price}, cap: {cap or 'unlimited'})")


async def seed_users(db: AsyncSession) -> None:
    for email, name, password, national_id, phone, role, license_id, specialty in USERS:
        if await exists_by_email(db, email):
            logger.info(f"User with email {email} already exists. Skipping.")
            continue
        await save_user(
            db,
            UserModel(
                email=email,
                name=name,
                password_hash=get_password_hash(password),
                national_id=national_id,
                phone=phone,
                role=role,
                license_id=license_id,
                specialty=specialty,
            ),
        )
        logger.info(f"Added {role.value.lower()}: {name} ({email})")


async def main() -> None:
    logger.info(f"Connecting to database at: {app_settings.database_url}")
    engine = create_async_engine(str(app_settings.database_url))
    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with async_session() as db:
            await seed_plans(db)
            await seed_users(db)
            await db.commit()
        logger.info("Demo data loaded.")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
