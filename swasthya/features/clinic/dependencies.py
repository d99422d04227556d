from fastapi import Depends
from swasthya.features.auth.dependencies import get_current_user
from swasthya.features.auth.models import User
from swasthya.features.clinic.models import Clinic
from swasthya.features.clinic.service import ClinicService
from swasthya.shared.exceptions import NotFoundException


async def get_current_clinic(current_user: User = Depends(get_current_user)) -> Clinic:
    """
    Dependency resolving the verified clinic owned by the current user.

    Clinic dashboard endpoints are unavailable until the clinic is verified.

    Raises:
        NotFoundException: If the user has no verified clinic
    """
    clinic = await ClinicService.get_verified_clinic_for_owner(current_user)
    if not clinic:
        raise NotFoundException("No verified clinic found", code="NO_CLINIC")
    return clinic
