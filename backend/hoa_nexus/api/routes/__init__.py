# API routes
from hoa_nexus.api.routes import health
from hoa_nexus.api.routes import auth
from hoa_nexus.api.routes import communities
from hoa_nexus.api.routes import properties
from hoa_nexus.api.routes import stakeholders
from hoa_nexus.api.routes import amenities
from hoa_nexus.api.routes import assignments
from hoa_nexus.api.routes import tickets
from hoa_nexus.api.routes import management_team
from hoa_nexus.api.routes import management_fees
from hoa_nexus.api.routes import billing_information
from hoa_nexus.api.routes import board_information
from hoa_nexus.api.routes import fee_master
from hoa_nexus.api.routes import community_fee_variances
from hoa_nexus.api.routes import commitment_fees
from hoa_nexus.api.routes import dynamic_drop_choices

__all__ = [
    "health",
    "auth",
    "communities",
    "properties",
    "stakeholders",
    "amenities",
    "assignments",
    "tickets",
    "management_team",
    "management_fees",
    "billing_information",
    "board_information",
    "fee_master",
    "community_fee_variances",
    "commitment_fees",
    "dynamic_drop_choices",
]
