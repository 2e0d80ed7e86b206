# tests/test_auth_users.py
import pytest
from pydantic import ValidationError

from teleconsulta.config.constants import Role
from teleconsulta.core.auth import (
    REFRESH_TOKEN_TYPE,
    create_tokens_for_user,
    decode_access_token,
)
from teleconsulta.core.exceptions import (
    BusinessRuleError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from teleconsulta.routes.auth import services as auth_services
from teleconsulta.routes.users import services as user_services
from teleconsulta.schemas.login_request import LoginRequest
from teleconsulta.schemas.register_request import RegisterRequest
from teleconsulta.schemas.user import UpdateUserRequest

pytestmark = pytest.mark.asyncio


def register_request(**overrides) -> RegisterRequest:
    data = {
        "name": "Ana Souza",
        "email": "ana@example.com",
        "password": "s3cret-pass",
        "national_id": "12345678901",
        "phone": "11912345678",
    }
    data.update(overrides)
    return RegisterRequest(**data)


# ------------------------------------------------------------------------- register
async def test_register_patient_returns_tokens(db):
    tokens = await auth_services.register(db, register_request())

    assert tokens.role == Role.PATIENT
    assert tokens.email == "ana@example.com"
    claims = decode_access_token(tokens.access_token)
    assert claims["sub"] == str(tokens.user_id)
    assert claims["role"] == "PATIENT"
    assert decode_access_token(tokens.refresh_token)["type"] == REFRESH_TOKEN_TYPE


async def test_register_rejects_duplicate_email_and_national_id(db):
    await auth_services.register(db, register_request())

    with pytest.raises(BusinessRuleError):
        await auth_services.register(db, register_request(national_id="99999999999"))
    with pytest.raises(BusinessRuleError):
        await auth_services.register(db, register_request(email="other@example.com"))


async def test_doctor_needs_license_and_specialty(db):
    with pytest.raises(BusinessRuleError):
        await auth_services.create_user(db, register_request(role=Role.DOCTOR, specialty="Cardiology"))
    with pytest.raises(BusinessRuleError):
        await auth_services.create_user(db, register_request(role=Role.DOCTOR, license_id="CRM/SP 1"))

    doctor = await auth_services.create_user(
        db, register_request(role=Role.DOCTOR, license_id="CRM/SP 1", specialty="Cardiology")
    )
    assert doctor.role == Role.DOCTOR
    assert doctor.specialty == "Cardiology"


async def test_patient_doctor_fields_are_dropped(db):
    user = await auth_services.create_user(db, register_request(specialty="Cardiology"))
    assert user.specialty is None
    assert user.license_id is None


async def test_admins_cannot_self_register():
    with pytest.raises(ValidationError):
        register_request(role=Role.ADMIN)


async def test_password_is_bounded_for_bcrypt():
    with pytest.raises(ValidationError):
        register_request(password="short")
    with pytest.raises(ValidationError):
        register_request(password="x" * 73)
    # bcrypt counts bytes, not characters
    with pytest.raises(ValidationError):
        register_request(password="é" * 37)
    assert register_request(password="é" * 36).password == "é" * 36


# ---------------------------------------------------------------------------- login
async def test_login_checks_the_password(db, patient, password):
    user = await auth_services.authenticate_user(db, LoginRequest(email=patient.email, password=password))
    assert user.id == patient.id

    with pytest.raises(auth_services.InvalidCredentialsError):
        await auth_services.authenticate_user(db, LoginRequest(email=patient.email, password="wrong-password"))
    with pytest.raises(auth_services.InvalidCredentialsError):
        await auth_services.authenticate_user(db, LoginRequest(email="nobody@example.com", password=password))


async def test_login_of_deactivated_account_is_a_business_error(db, make_user, password):
    user = await make_user(Role.PATIENT, active=False)
    with pytest.raises(BusinessRuleError):
        await auth_services.authenticate_user(db, LoginRequest(email=user.email, password=password))


async def test_refresh_needs_a_refresh_token(db, patient):
    tokens = create_tokens_for_user(patient)

    pair = await auth_services.refresh_user_token(db, tokens.refresh_token)
    assert pair.user_id == patient.id
    assert pair.role == Role.PATIENT

    with pytest.raises(auth_services.InvalidCredentialsError):
        await auth_services.refresh_user_token(db, tokens.access_token)
    with pytest.raises(auth_services.InvalidCredentialsError):
        await auth_services.refresh_user_token(db, "not-a-jwt")
    with pytest.raises(auth_services.InvalidCredentialsError):
        await auth_services.refresh_user_token(db, None)


# ---------------------------------------------------------------------------- users
async def test_users_see_only_themselves_unless_admin(db, patient, admin, make_user):
    other = await make_user(Role.PATIENT)

    assert (await user_services.get_user_for(db, patient.id, patient)).id == patient.id
    assert (await user_services.get_user_for(db, other.id, admin)).id == other.id
    with pytest.raises(PermissionDeniedError):
        await user_services.get_user_for(db, other.id, patient)
    with pytest.raises(ResourceNotFoundError):
        await user_services.get_user_for(db, 9999, admin)


async def test_update_user_applies_given_fields(db, patient, doctor):
    updated = await user_services.update_user(
        db, patient.id, UpdateUserRequest(phone="11900000000", specialty="Cardiology"), patient
    )
    assert updated.phone == "11900000000"
    assert updated.name == patient.name
    # specialty only sticks for doctors
    assert updated.specialty is None

    doctor_updated = await user_services.update_user(
        db, doctor.id, UpdateUserRequest(specialty="Neurology"), doctor
    )
    assert doctor_updated.specialty == "Neurology"


async def test_update_someone_else_is_denied(db, patient, doctor):
    with pytest.raises(PermissionDeniedError):
        await user_services.update_user(db, doctor.id, UpdateUserRequest(name="Mallory"), patient)


async def test_doctor_directory_hides_inactive_doctors(db, make_user):
    cardio = await make_user(Role.DOCTOR, specialty="Cardiology")
    await make_user(Role.DOCTOR, specialty="Pediatric Cardiology", active=False)
    derm = await make_user(Role.DOCTOR, specialty="Dermatology")
    await make_user(Role.PATIENT)

    doctors = await user_services.list_doctors(db)
    assert {d.id for d in doctors} == {cardio.id, derm.id}

    found = await user_services.list_doctors_by_specialty(db, "cardio")
    assert [d.id for d in found] == [cardio.id]


async def test_deactivate_and_activate(db, patient):
    await user_services.set_user_active(db, patient.id, False)
    assert (await user_services.find_user(db, patient.id)).active is False
    await user_services.set_user_active(db, patient.id, True)
    assert (await user_services.find_user(db, patient.id)).active is True


async def test_specialty_search_treats_wildcards_literally(db, make_user):
    await make_user(Role.DOCTOR, specialty="Cardiology")
    odd = await make_user(Role.DOCTOR, specialty="Sleep_Medicine 100%")

    assert await user_services.list_doctors_by_specialty(db, "%") == [odd]
    assert await user_services.list_doctors_by_specialty(db, "_") == [odd]
    assert await user_services.list_doctors_by_specialty(db, "p_m") == [odd]
    assert await user_services.list_doctors_by_specialty(db, "c%y") == []
