from typing import Optional

from clinic.services.repository import KIND_VALIDATION, Result, medicines


def update_stock(medicine_id, quantity: Optional[int] = None, delta: Optional[int] = None) -> Result:
    """Set (``quantity``) or adjust (``delta``) the stock on hand.

    The stock status is recomputed when the row is saved.
    """
    if (quantity is None) == (delta is None):
        return Result.fail('Give either a quantity or an adjustment', KIND_VALIDATION)
    if delta is not None:
        current = medicines.get_by_id(medicine_id)
        if not current.success or current.data is None:
            return current
        quantity = current.data['quantity'] + int(delta)
    if quantity < 0:
        return Result.fail('Quantity cannot be negative', KIND_VALIDATION)
    return medicines.update(medicine_id, {'quantity': quantity})
