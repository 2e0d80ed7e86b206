from teleconsulta.db.models.plan import PlanModel
from teleconsulta.db.models.user import UserModel
from teleconsulta.db.models.appointment import AppointmentModel

__all__ = ["PlanModel", "UserModel", "AppointmentModel"]
