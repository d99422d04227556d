# Schedules Feature - Service

from typing import Optional, List, Tuple
from beanie import PydanticObjectId
from beanie.operators import In
from bson.errors import InvalidId
from swasthya.features.schedules.models import DoctorSchedule, DoctorLeave
from swasthya.features.schedules.schemas import (
    ReplaceSchedulesRequest,
    ScheduleResponse,
    CreateLeaveRequest,
    LeaveResponse,
    AffectedAppointment,
)
from swasthya.features.appointments.models import Appointment, AppointmentStatus
from swasthya.features.appointments.time_utils import is_slot_during_leave, local_now
from swasthya.features.doctors.service import DoctorService
from swasthya.features.patients.models import Patient
from swasthya.core.logging import logger
from swasthya.shared.exceptions import ForbiddenException, NotFoundException


# A leave is reported against bookings that have not been seen yet
AFFECTED_STATUSES = [AppointmentStatus.SCHEDULED.value, AppointmentStatus.CHECKED_IN.value]


class ScheduleService:
    """Weekly schedules and leaves of clinic doctors."""

    # ============== Schedules ==============

    @staticmethod
    async def list_schedules(clinic_id: str, doctor_id: Optional[str] = None) -> List[DoctorSchedule]:
        if doctor_id:
            await DoctorService.require_affiliation(clinic_id, doctor_id)
            return await DoctorSchedule.find(
                DoctorSchedule.clinic_id == clinic_id,
                DoctorSchedule.doctor_id == doctor_id
            ).sort("day_of_week").to_list()

        return await DoctorSchedule.find(
            DoctorSchedule.clinic_id == clinic_id
        ).sort("doctor_id", "day_of_week").to_list()

    @staticmethod
    async def replace_schedules(clinic_id: str, request: ReplaceSchedulesRequest) -> List[DoctorSchedule]:
        """
        Replace every schedule of a doctor at the clinic with the given set.

        Schedules without ``effective_from`` take effect today.
        """
        await DoctorService.require_affiliation(clinic_id, request.doctor_id)

        await DoctorSchedule.find(
            DoctorSchedule.clinic_id == clinic_id,
            DoctorSchedule.doctor_id == request.doctor_id
        ).delete()

        today = local_now().date().isoformat()
        schedules = [
            DoctorSchedule(
                clinic_id=clinic_id,
                doctor_id=request.doctor_id,
                day_of_week=s.day_of_week,
                start_time=s.start_time,
                end_time=s.end_time,
                slot_duration_minutes=s.slot_duration_minutes,
                max_patients_per_slot=s.max_patients_per_slot,
                is_active=s.is_active,
                effective_from=s.effective_from or today,
                effective_to=s.effective_to,
            )
            for s in request.schedules
        ]
        if schedules:
            await DoctorSchedule.insert_many(schedules)

        logger.info(f"Replaced schedules of doctor {request.doctor_id} at clinic {clinic_id}: {len(schedules)} rules")
        return await DoctorSchedule.find(
            DoctorSchedule.clinic_id == clinic_id,
            DoctorSchedule.doctor_id == request.doctor_id
        ).sort("day_of_week").to_list()

    @staticmethod
    async def delete_schedule(clinic_id: str, schedule_id: str) -> None:
        try:
            schedule = await DoctorSchedule.get(PydanticObjectId(schedule_id))
        except (InvalidId, TypeError):
            schedule = None

        if not schedule:
            raise NotFoundException("Schedule not found")
        if schedule.clinic_id != clinic_id:
            raise ForbiddenException("Unauthorized to delete this schedule")

        await schedule.delete()
        logger.info(f"Deleted schedule {schedule_id} of clinic {clinic_id}")

    # ============== Leaves ==============

    @staticmethod
    async def list_leaves(
        clinic_id: str,
        doctor_id: Optional[str] = None,
        upcoming: bool = False
    ) -> List[DoctorLeave]:
        conditions = [DoctorLeave.clinic_id == clinic_id]
        if doctor_id:
            await DoctorService.require_affiliation(clinic_id, doctor_id)
            conditions.append(DoctorLeave.doctor_id == doctor_id)
        if upcoming:
            conditions.append(DoctorLeave.leave_date >= local_now().date().isoformat())

        return await DoctorLeave.find(*conditions).sort("leave_date").to_list()

    @staticmethod
    async def find_affected_appointments(clinic_id: str, request: CreateLeaveRequest) -> List[AffectedAppointment]:
        """Pending bookings of the doctor that the leave would overlap."""
        appointments = await Appointment.find(
            Appointment.clinic_id == clinic_id,
            Appointment.doctor_id == request.doctor_id,
            Appointment.appointment_date == request.leave_date,
            In(Appointment.status, AFFECTED_STATUSES),
        ).sort("time_slot_start").to_list()

        affected = [
            a for a in appointments
            if is_slot_during_leave(a.time_slot_start, a.time_slot_end, request)
        ]
        if not affected:
            return []

        patient_ids = []
        for a in affected:
            try:
                patient_ids.append(PydanticObjectId(a.patient_id))
            except InvalidId:
                logger.warning(f"Appointment {a.id} has malformed patient id {a.patient_id}")
        patients = await Patient.find(In(Patient.id, patient_ids)).to_list()
        names = {str(p.id): p.full_name for p in patients}

        return [
            AffectedAppointment(
                id=str(a.id),
                time_slot=f"{a.time_slot_start} - {a.time_slot_end}",
                patient_name=names.get(a.patient_id, ""),
            )
            for a in affected
        ]

    @staticmethod
    async def create_leave(
        clinic_id: str,
        request: CreateLeaveRequest
    ) -> Tuple[Optional[DoctorLeave], List[AffectedAppointment]]:
        """
        Record a leave, or only preview its impact when ``check_affected`` is set.

        Existing bookings are left untouched; the clinic decides how to handle them.

        Returns:
            The created leave (None for a preview) and the affected bookings
        """
        await DoctorService.require_affiliation(clinic_id, request.doctor_id)
        affected = await ScheduleService.find_affected_appointments(clinic_id, request)

        if request.check_affected:
            return None, affected

        leave = DoctorLeave(
            clinic_id=clinic_id,
            doctor_id=request.doctor_id,
            leave_date=request.leave_date,
            start_time=request.start_time,
            end_time=request.end_time,
            reason=request.reason,
        )
        await leave.insert()

        logger.info(
            f"Created leave for doctor {request.doctor_id} at clinic {clinic_id} on {request.leave_date} "
            f"({len(affected)} bookings affected)"
        )
        return leave, affected

    @staticmethod
    async def delete_leave(clinic_id: str, leave_id: str) -> None:
        try:
            leave = await DoctorLeave.get(PydanticObjectId(leave_id))
        except (InvalidId, TypeError):
            leave = None

        if not leave:
            raise NotFoundException("Leave not found")
        if leave.clinic_id != clinic_id:
            raise ForbiddenException("Unauthorized to delete this leave")

        await leave.delete()
        logger.info(f"Deleted leave {leave_id} of clinic {clinic_id}")

    # ============== Responses ==============

    @staticmethod
    def schedule_to_response(schedule: DoctorSchedule) -> ScheduleResponse:
        return ScheduleResponse(
            id=str(schedule.id),
            doctor_id=schedule.doctor_id,
            day_of_week=schedule.day_of_week,
            start_time=schedule.start_time,
            end_time=schedule.end_time,
            slot_duration_minutes=schedule.slot_duration_minutes,
            max_patients_per_slot=schedule.max_patients_per_slot,
            is_active=schedule.is_active,
            effective_from=schedule.effective_from,
            effective_to=schedule.effective_to,
        )

    @staticmethod
    def leave_to_response(leave: DoctorLeave) -> LeaveResponse:
        return LeaveResponse(
            id=str(leave.id),
            doctor_id=leave.doctor_id,
            leave_date=leave.leave_date,
            start_time=leave.start_time,
            end_time=leave.end_time,
            reason=leave.reason,
            created_at=leave.created_at,
        )
