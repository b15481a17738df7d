from solar_scheduler.models.contract import Contract
from solar_scheduler.models.customer import Customer
from solar_scheduler.models.equipment import Equipment
from solar_scheduler.models.installation import Installation
from solar_scheduler.models.solar_job import SolarJob
from solar_scheduler.models.vendor import Vendor

__all__ = [
    "Contract",
    "Customer",
    "Equipment",
    "Installation",
    "SolarJob",
    "Vendor",
]
