"""Status toggles used by the admin screens."""
from clinic import domain
from clinic.services.repository import Result, doctors, patients


def toggle_doctor_status(doctor_id) -> Result:
    """Available <-> Off-duty.  A busy doctor is made available."""
    current = doctors.get_by_id(doctor_id)
    if not current.success or current.data is None:
        return current
    status = (
        domain.DOCTOR_OFF_DUTY if current.data['status'] == domain.DOCTOR_AVAILABLE
        else domain.DOCTOR_AVAILABLE
    )
    return doctors.update(doctor_id, {'status': status})


def toggle_patient_status(patient_id) -> Result:
    current = patients.get_by_id(patient_id)
    if not current.success or current.data is None:
        return current
    status = (
        domain.PATIENT_INACTIVE if current.data['status'] == domain.PATIENT_ACTIVE
        else domain.PATIENT_ACTIVE
    )
    return patients.update(patient_id, {'status': status})
