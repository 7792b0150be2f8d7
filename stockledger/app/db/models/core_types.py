import enum


class Role(str, enum.Enum):
    customer = "customer"
    employee = "employee"
    admin = "admin"


class MovementType(str, enum.Enum):
    inbound = "IN"
    outbound = "OUT"
