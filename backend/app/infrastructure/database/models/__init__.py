from .client_models import ClientContactModel, ClientMemberModel, ClientModel
from .fleet_models import InvoiceModel, TripModel

__all__ = [
    "ClientModel",
    "ClientContactModel",
    "ClientMemberModel",
    "InvoiceModel",
    "TripModel",
]
