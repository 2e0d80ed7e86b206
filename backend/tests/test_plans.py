# tests/test_plans.py
from decimal import Decimal

import pytest

from teleconsulta.config.constants import Role
from teleconsulta.core.exceptions import BusinessRuleError, ResourceNotFoundError
from teleconsulta.routes.plans import services
from teleconsulta.schemas.plan import CreatePlanRequest

pytestmark = pytest.mark.asyncio


def plan_request(**overrides) -> CreatePlanRequest:
    data = {
        "name": "Family",
        "description": "For the whole household",
        "price": "149.90",
        "duration_months": 1,
        "max_appointments_month": 8,
    }
    data.update(overrides)
    return CreatePlanRequest(**data)


async def test_create_plan_defaults(db):
    plan = await services.create_plan(db, plan_request())

    assert plan.id is not None
    assert plan.price == Decimal("149.90")
    assert plan.active is True
    assert plan.features == []
    assert plan.has_video_call and plan.has_chat
    assert plan.has_prescription and plan.has_medical_certificate


async def test_create_plan_keeps_explicit_flags(db):
    plan = await services.create_plan(
        db, plan_request(has_chat=False, features=["Video call", "Email support"])
    )
    assert plan.has_chat is False
    assert plan.has_video_call is True
    assert plan.features == ["Video call", "Email support"]


async def test_plan_names_are_unique(db):
    await services.create_plan(db, plan_request())
    with pytest.raises(BusinessRuleError):
        await services.create_plan(db, plan_request(price="10.00"))


async def test_update_plan_replaces_core_fields_only(db):
    plan = await services.create_plan(
        db, plan_request(has_chat=False, features=["Video call"])
    )
    updated = await services.update_plan(
        db,
        plan.id,
        plan_request(name="Family Plus", price="179.90", max_appointments_month=None),
    )

    assert updated.name == "Family Plus"
    assert updated.price == Decimal("179.90")
    assert updated.max_appointments_month is None
    # flags and features were not sent
    assert updated.has_chat is False
    assert updated.features == ["Video call"]


async def test_update_plan_rejects_a_taken_name(db):
    await services.create_plan(db, plan_request(name="Basic"))
    plan = await services.create_plan(db, plan_request(name="Premium"))

    with pytest.raises(BusinessRuleError):
        await services.update_plan(db, plan.id, plan_request(name="Basic"))
    # keeping its own name is fine
    await services.update_plan(db, plan.id, plan_request(name="Premium", price="249.90"))


async def test_update_unknown_plan(db):
    with pytest.raises(ResourceNotFoundError):
        await services.update_plan(db, 999, plan_request())


async def test_active_plans_are_listed_cheapest_first(db, make_plan):
    await make_plan(price="199.90", name="Premium")
    await make_plan(price="49.90", name="Basic")
    await make_plan(price="99.90", name="Standard")
    retired = await make_plan(price="9.90", name="Legacy")
    await services.set_plan_active(db, retired.id, False)

    active = await services.list_active_plans(db)
    assert [p.name for p in active] == ["Basic", "Standard", "Premium"]

    everything = await services.list_plans(db)
    assert {p.name for p in everything} == {"Basic", "Standard", "Premium", "Legacy"}


async def test_reactivate_plan(db, make_plan):
    plan = await make_plan(active=False)
    activated = await services.set_plan_active(db, plan.id, True)
    assert activated.active is True


async def test_subscribe_and_cancel(db, patient, make_plan):
    plan = await make_plan(cap=2)

    subscribed = await services.subscribe_to_plan(db, patient.id, plan.id)
    assert subscribed.plan_id == plan.id
    assert subscribed.plan.name == plan.name

    cancelled = await services.cancel_subscription(db, patient.id)
    assert cancelled.plan is None
    # the plan itself is untouched
    assert (await services.find_plan(db, plan.id)).active is True


async def test_subscribe_to_inactive_plan_is_rejected(db, patient, make_plan):
    plan = await make_plan(active=False)
    with pytest.raises(BusinessRuleError):
        await services.subscribe_to_plan(db, patient.id, plan.id)


async def test_subscribe_unknown_user_or_plan(db, patient, make_plan):
    plan = await make_plan()
    with pytest.raises(ResourceNotFoundError):
        await services.subscribe_to_plan(db, 12345, plan.id)
    with pytest.raises(ResourceNotFoundError):
        await services.subscribe_to_plan(db, patient.id, 12345)


async def test_switching_plans_changes_the_cap(db, book, make_user, make_plan, slot):
    patient = await make_user(Role.PATIENT, plan=await make_plan(cap=1))
    doctor = await make_user(Role.DOCTOR)
    await book(patient, doctor, slot(day=3))

    with pytest.raises(BusinessRuleError):
        await book(patient, doctor, slot(day=4))

    await services.subscribe_to_plan(db, patient.id, (await make_plan(cap=5)).id)
    appointment = await book(patient, doctor, slot(day=4))
    assert appointment.scheduled_at.day == 4
